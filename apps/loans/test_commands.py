from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from datetime import date, timedelta
from io import StringIO
from unittest.mock import patch

from .amortization import STATUS_PENDING, STATUS_OVERDUE
from .catalog import DEFAULT_PACKAGES
from .models import LoanPackage, RepaymentInstallment
from .test_data_seeder import BaseTestWithSeeder


class SeedLoanPackagesCommandTest(TestCase):

    @override_settings(LOAN_CURRENCY='TZS')
    def test_seed_creates_catalog(self):
        out = StringIO()
        call_command('seed_loan_packages', stdout=out)

        self.assertEqual(LoanPackage.objects.count(), len(DEFAULT_PACKAGES))
        housing = LoanPackage.objects.get(category='housing')
        self.assertEqual(housing.duration_months, 60)
        self.assertEqual(housing.interest_rate, 10)
        self.assertIn('Property valuation', housing.requirements)
        self.assertIn('6 created', out.getvalue())
        self.assertIn('Emergency Relief Loan (from 8885 TZS/month)', out.getvalue())

    def test_seed_is_idempotent(self):
        call_command('seed_loan_packages', stdout=StringIO())
        call_command('seed_loan_packages', stdout=StringIO())

        self.assertEqual(LoanPackage.objects.count(), len(DEFAULT_PACKAGES))

    def test_update_restores_terms(self):
        call_command('seed_loan_packages', stdout=StringIO())
        LoanPackage.objects.filter(category='emergency').update(interest_rate=20)

        call_command('seed_loan_packages', '--update', stdout=StringIO())

        self.assertEqual(LoanPackage.objects.get(category='emergency').interest_rate, 12)

    def test_invalid_catalog_entry_aborts_before_writing(self):
        broken = [dict(entry) for entry in DEFAULT_PACKAGES]
        broken[-1]['min_amount'] = broken[-1]['max_amount'] + 1

        with patch('apps.loans.catalog.DEFAULT_PACKAGES', broken), \
                patch('apps.loans.management.commands.seed_loan_packages.DEFAULT_PACKAGES', broken):
            with self.assertRaises(CommandError):
                call_command('seed_loan_packages', stdout=StringIO())

        self.assertEqual(LoanPackage.objects.count(), 0)


class MarkOverdueInstallmentsCommandTest(BaseTestWithSeeder, TestCase):

    def seed_test_data(self):
        self.application = self.seeder.create_disbursed_application(
            start_date=date.today() - timedelta(days=45), repayment_months=3
        )

    def overdue_count(self):
        return RepaymentInstallment.objects.filter(
            application=self.application, status=STATUS_OVERDUE
        ).count()

    def test_marks_overdue(self):
        out = StringIO()
        call_command('mark_overdue_installments', '--grace-days', '0', stdout=out)

        self.assertEqual(self.overdue_count(), 1)
        self.assertIn('Marked 1 installments as overdue', out.getvalue())

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('mark_overdue_installments', '--dry-run', '--grace-days', '0', stdout=out)

        self.assertEqual(self.overdue_count(), 0)
        self.assertIn('DRY RUN', out.getvalue())
        self.assertIn(f'{self.application.id}-payment-1', out.getvalue())

    def test_report_only(self):
        out = StringIO()
        call_command('mark_overdue_installments', '--report-only', '--grace-days', '0', stdout=out)

        self.assertEqual(self.overdue_count(), 0)
        self.assertIn('Due and still pending: 1', out.getvalue())
        self.assertFalse(
            RepaymentInstallment.objects.exclude(status=STATUS_PENDING).exists()
        )

    def test_grace_days_skip_recent(self):
        call_command('mark_overdue_installments', '--grace-days', '30', stdout=StringIO())
        self.assertEqual(self.overdue_count(), 0)

    def test_negative_grace_days(self):
        with self.assertRaises(CommandError):
            call_command('mark_overdue_installments', grace_days=-1, stdout=StringIO())
