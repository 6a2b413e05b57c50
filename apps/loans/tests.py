from django.core.management import call_command
from django.core.management.base import SystemCheckError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from decimal import Decimal
from io import StringIO
from datetime import date, timedelta

from .amortization import STATUS_PENDING, STATUS_PAID, STATUS_OVERDUE
from .checks import check_currency_precision
from .models import LoanPackage, LoanApplication, RepaymentInstallment, Payment, MONEY_DECIMAL_PLACES
from .services import record_payment
from .signals import mark_all_overdue_installments, get_overdue_installments_report
from .test_data_seeder import BaseTestWithSeeder


class AuthenticatedAPITestCase(BaseTestWithSeeder, APITestCase):

    def authenticate_user(self, user):
        """Authenticate user with JWT token"""
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')


class LoanPackageEndpointTestCase(AuthenticatedAPITestCase):

    def seed_test_data(self):
        self.admin = self.seeder.create_admin()
        self.applicant = self.seeder.create_applicant()
        self.emergency = self.seeder.create_package(name='Quick Cash')
        self.school = self.seeder.create_package(
            name='School Fees', category='education', interest_rate=Decimal('7'),
            duration_months=48, min_amount=Decimal('500000'), max_amount=Decimal('5000000')
        )

    def test_list_is_public(self):
        response = self.client.get(reverse('loanpackage-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_list_filters_by_category(self):
        response = self.client.get(reverse('loanpackage-list'), {'category': 'education'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data['results']], ['School Fees'])

    def test_detail_includes_estimated_payment(self):
        response = self.client.get(reverse('loanpackage-detail', kwargs={'pk': self.emergency.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # 100,000 at 12% over 12 months
        self.assertEqual(response.data['estimated_monthly_payment'], Decimal('8885'))
        self.assertEqual(response.data['currency'], 'TZS')

    def test_admin_can_create_package(self):
        self.authenticate_user(self.admin)
        payload = {
            'name': 'Harvest Boost',
            'description': 'Inputs and equipment',
            'category': 'agriculture',
            'min_amount': '500000',
            'max_amount': '8000000',
            'interest_rate': '8',
            'duration_months': 24,
            'features': ['Crop insurance included'],
        }

        response = self.client.post(reverse('loanpackage-list'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        package = LoanPackage.objects.get(name='Harvest Boost')
        self.seeder.created_packages.append(package)
        self.assertEqual(package.features, ['Crop insurance included'])

    def test_package_bounds_are_validated(self):
        self.authenticate_user(self.admin)
        payload = {
            'name': 'Upside Down',
            'description': 'Invalid bounds',
            'category': 'housing',
            'min_amount': '5000000',
            'max_amount': '1000000',
            'interest_rate': '10',
            'duration_months': 60,
        }

        response = self.client.post(reverse('loanpackage-list'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('max_amount', response.data)

    def test_applicant_cannot_manage_packages(self):
        self.authenticate_user(self.applicant)

        response = self.client.patch(
            reverse('loanpackage-detail', kwargs={'pk': self.emergency.id}),
            {'interest_rate': '1'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_package_with_applications_cannot_be_deleted(self):
        self.seeder.create_application(package=self.emergency)
        self.authenticate_user(self.admin)

        response = self.client.delete(reverse('loanpackage-detail', kwargs={'pk': self.emergency.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'package_in_use')
        self.assertTrue(LoanPackage.objects.filter(id=self.emergency.id).exists())

    def test_quote(self):
        url = reverse('loanpackage-quote', kwargs={'pk': self.emergency.id})

        response = self.client.get(url, {'amount': '1000000', 'months': '12'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['monthly_payment']), Decimal('88849'))
        self.assertEqual(Decimal(response.data['total_interest']), Decimal('66188'))
        self.assertEqual(response.data['package_id'], str(self.emergency.id))

    def test_quote_rejects_amount_outside_package(self):
        url = reverse('loanpackage-quote', kwargs={'pk': self.emergency.id})

        response = self.client.get(url, {'amount': '5000000'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_input')

    def test_quote_unknown_package(self):
        response = self.client.get(reverse('loanpackage-quote', kwargs={'pk': 999999}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CalculatorEndpointTestCase(APITestCase):

    def test_calculator_returns_summary_and_schedule(self):
        payload = {
            'principal': '600000',
            'annual_rate_percent': '6',
            'term_months': 6,
            'start_date': '2024-01-15',
            'loan_id': 'loan-1',
        }

        response = self.client.post(reverse('calculator'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        schedule = response.data['schedule']
        self.assertEqual(len(schedule), 6)
        self.assertEqual(schedule[0]['id'], 'loan-1-payment-1')
        self.assertEqual(schedule[0]['due_date'], '2024-02-15')
        self.assertEqual(schedule[-1]['due_date'], '2024-07-15')
        total = sum(Decimal(entry['amount']) for entry in schedule)
        self.assertEqual(total, Decimal(response.data['result']['total_repayment']))

    def test_calculator_rejects_invalid_term(self):
        payload = {'principal': '100', 'annual_rate_percent': '10', 'term_months': 0}

        response = self.client.post(reverse('calculator'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_input')

    def test_calculator_reports_overflow(self):
        payload = {'principal': '1000000', 'annual_rate_percent': '1200', 'term_months': 100000}

        response = self.client.post(reverse('calculator'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'not_finite')

    def test_calculator_requires_fields(self):
        response = self.client.post(reverse('calculator'), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('principal', response.data)


class LoanApplicationEndpointTestCase(AuthenticatedAPITestCase):

    def seed_test_data(self):
        self.admin = self.seeder.create_admin()
        self.applicant = self.seeder.create_applicant()
        self.other_applicant = self.seeder.create_applicant()
        self.package = self.seeder.create_package()

    def application_payload(self, **kwargs):
        payload = {
            'package': self.package.id,
            'amount': '1000000',
            'purpose': 'Restock the shop',
            'monthly_income': '750000',
            'repayment_months': 12,
        }
        payload.update(kwargs)
        return payload

    def create_via_api(self, **kwargs):
        response = self.client.post(
            reverse('loanapplication-list'), self.application_payload(**kwargs), format='json'
        )
        if response.status_code == status.HTTP_201_CREATED:
            self.seeder.created_applications.append(LoanApplication.objects.get(id=response.data['id']))
        return response

    def test_submit_application_snapshots_terms(self):
        self.authenticate_user(self.applicant)

        response = self.create_via_api()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['applicant'], self.applicant.id)
        self.assertEqual(Decimal(response.data['interest_rate']), Decimal('12'))
        self.assertEqual(Decimal(response.data['monthly_payment']), Decimal('88849'))
        self.assertEqual(Decimal(response.data['total_repayment']), Decimal('1066188'))
        self.assertEqual(Decimal(response.data['total_interest']), Decimal('66188'))
        self.assertIsNone(response.data['next_installment'])

    def test_snapshot_survives_package_changes(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.package.interest_rate = Decimal('30')
        self.package.save()

        application.refresh_from_db()
        self.assertEqual(application.monthly_payment, Decimal('88849'))

    def test_amount_outside_package_bounds(self):
        self.authenticate_user(self.applicant)

        for amount in ('99999', '2000001'):
            with self.subTest(amount=amount):
                response = self.create_via_api(amount=amount)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn('amount', response.data)

    def test_months_outside_package_duration(self):
        self.authenticate_user(self.applicant)

        for months in (0, 13):
            with self.subTest(months=months):
                response = self.create_via_api(repayment_months=months)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_submit_requires_authentication(self):
        response = self.client.post(reverse('loanapplication-list'), self.application_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_applicants_only_see_their_own(self):
        own = self.seeder.create_application(applicant=self.applicant, package=self.package)
        other = self.seeder.create_application(applicant=self.other_applicant, package=self.package)
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('loanapplication-list'))
        self.assertEqual([a['id'] for a in response.data['results']], [own.id])

        response = self.client.get(reverse('loanapplication-detail', kwargs={'pk': other.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_sees_all_and_filters_by_status(self):
        pending = self.seeder.create_application(applicant=self.applicant, package=self.package)
        approved = self.seeder.create_approved_application(applicant=self.other_applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.get(reverse('loanapplication-list'))
        self.assertEqual(response.data['count'], 2)

        response = self.client.get(reverse('loanapplication-list'), {'status': 'approved'})
        self.assertEqual([a['id'] for a in response.data['results']], [approved.id])
        self.assertNotEqual(approved.id, pending.id)

    def test_applications_by_user(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        url = reverse('loanapplication-by-user', kwargs={'user_id': self.applicant.id})

        self.authenticate_user(self.applicant)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['id'] for a in response.data['results']], [application.id])

        self.authenticate_user(self.other_applicant)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate_user(self.admin)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_admin_approves_application(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.patch(
            reverse('loanapplication-update-status', kwargs={'pk': application.id}),
            {'status': 'approved', 'notes': 'Verified income'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertIsNotNone(response.data['approval_date'])
        self.assertEqual(response.data['notes'], 'Verified income')

    def test_invalid_transition_is_rejected(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.patch(
            reverse('loanapplication-update-status', kwargs={'pk': application.id}),
            {'status': 'completed'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_transition')
        application.refresh_from_db()
        self.assertEqual(application.status, 'pending')

    def test_applicant_cannot_change_status(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.applicant)

        response = self.client.patch(
            reverse('loanapplication-update-status', kwargs={'pk': application.id}),
            {'status': 'approved'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_disburse_persists_schedule(self):
        application = self.seeder.create_approved_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.post(reverse('loanapplication-disburse', kwargs={'pk': application.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'disbursed')
        self.assertIsNotNone(response.data['disbursal_date'])
        installments = response.data['installments']
        self.assertEqual(len(installments), 12)
        self.assertEqual(installments[0]['schedule_id'], f'{application.id}-payment-1')
        self.assertTrue(all(Decimal(i['amount']) == Decimal('88849') for i in installments))
        self.assertTrue(all(i['status'] == 'pending' for i in installments))
        self.assertEqual(response.data['next_installment']['schedule_id'], f'{application.id}-payment-1')

    def test_status_endpoint_can_disburse(self):
        application = self.seeder.create_approved_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.patch(
            reverse('loanapplication-update-status', kwargs={'pk': application.id}),
            {'status': 'disbursed'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(RepaymentInstallment.objects.filter(application=application).count(), 12)

    def test_pending_application_cannot_be_disbursed(self):
        application = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.admin)

        response = self.client.post(reverse('loanapplication-disburse', kwargs={'pk': application.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(RepaymentInstallment.objects.filter(application=application).exists())

    def test_schedule_preview_before_disbursement(self):
        application = self.seeder.create_application(
            applicant=self.applicant, package=self.package, repayment_months=6
        )
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('loanapplication-schedule', kwargs={'pk': application.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['preview'])
        self.assertEqual(len(response.data['installments']), 6)
        self.assertEqual(response.data['installments'][0]['id'], f'{application.id}-payment-1')

    def test_schedule_after_disbursement(self):
        application = self.seeder.create_disbursed_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('loanapplication-schedule', kwargs={'pk': application.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['preview'])
        self.assertEqual(len(response.data['installments']), 12)

    def test_schedule_of_other_applicant_is_hidden(self):
        application = self.seeder.create_application(applicant=self.other_applicant, package=self.package)
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('loanapplication-schedule', kwargs={'pk': application.id}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PaymentEndpointTestCase(AuthenticatedAPITestCase):

    def seed_test_data(self):
        self.admin = self.seeder.create_admin()
        self.applicant = self.seeder.create_applicant()
        self.other_applicant = self.seeder.create_applicant()
        self.package = self.seeder.create_package()
        self.application = self.seeder.create_disbursed_application(
            applicant=self.applicant, package=self.package, amount=Decimal('300000'), repayment_months=3
        )

    def pay(self, amount=None, **kwargs):
        payload = {
            'application': self.application.id,
            'amount': str(amount or self.application.monthly_payment),
            'payment_method': 'mobile_money',
            'transaction_id': 'MP-001',
        }
        payload.update(kwargs)
        return self.client.post(reverse('payment-list'), payload, format='json')

    def test_payment_settles_earliest_installment(self):
        self.authenticate_user(self.applicant)

        response = self.pay()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment']['installment_sequence'], 1)
        self.assertEqual(response.data['application_status'], 'disbursed')
        first = self.application.installments.get(sequence_number=1)
        self.assertEqual(first.status, STATUS_PAID)
        self.assertIsNotNone(first.paid_date)
        self.assertEqual(self.application.installments.filter(status=STATUS_PENDING).count(), 2)

        detail = self.client.get(reverse('loanapplication-detail', kwargs={'pk': self.application.id}))
        self.assertEqual(detail.data['next_installment']['sequence_number'], 2)

    def test_paying_every_installment_completes_loan(self):
        self.authenticate_user(self.applicant)

        for _ in range(3):
            response = self.pay()
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.assertEqual(response.data['application_status'], 'completed')
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, LoanApplication.STATUS_COMPLETED)
        self.assertEqual(self.application.remaining_balance, Decimal('0'))

        response = self.pay()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_underpayment_is_rejected(self):
        self.authenticate_user(self.applicant)

        response = self.pay(amount=self.application.monthly_payment - 1)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'insufficient_amount')
        self.assertFalse(Payment.objects.filter(application=self.application).exists())

    def test_failed_payment_leaves_schedule_untouched(self):
        self.authenticate_user(self.applicant)

        response = self.pay(status='failed')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['payment']['installment'])
        self.assertFalse(self.application.installments.filter(status=STATUS_PAID).exists())

    def test_cannot_pay_someone_elses_loan(self):
        self.authenticate_user(self.other_applicant)

        response = self.pay()

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_pay_undisbursed_loan(self):
        pending = self.seeder.create_application(applicant=self.applicant, package=self.package)
        self.authenticate_user(self.applicant)

        response = self.pay(application=pending.id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'not_disbursed')

    def test_overdue_installment_can_be_paid_late(self):
        RepaymentInstallment.objects.filter(
            application=self.application, sequence_number=1
        ).update(status=STATUS_OVERDUE)
        self.authenticate_user(self.applicant)

        response = self.pay()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment']['installment_sequence'], 1)

    def test_payments_by_loan(self):
        self.authenticate_user(self.applicant)
        self.pay()
        self.pay()
        url = reverse('payment-by-loan', kwargs={'application_id': self.application.id})

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        self.authenticate_user(self.other_applicant)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate_user(self.admin)
        response = self.client.get(url)
        self.assertEqual(len(response.data), 2)

    def test_payment_detail_access(self):
        self.authenticate_user(self.applicant)
        payment_id = self.pay().data['payment']['id']
        url = reverse('payment-detail', kwargs={'pk': payment_id})

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

        self.authenticate_user(self.other_applicant)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        self.authenticate_user(self.admin)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)


class ApplicationStatusSignalTest(BaseTestWithSeeder, TestCase):

    def seed_test_data(self):
        self.applicant = self.seeder.create_applicant()
        self.application = self.seeder.create_disbursed_application(
            applicant=self.applicant, amount=Decimal('200000'), repayment_months=2
        )

    def test_completion_and_reactivation(self):
        for _ in range(2):
            record_payment(self.application, self.applicant, self.application.monthly_payment, 'cash')
        self.application.refresh_from_db()
        self.assertEqual(self.application.status, LoanApplication.STATUS_COMPLETED)

        installment = self.application.installments.get(sequence_number=2)
        installment.status = STATUS_PENDING
        installment.paid_date = None
        installment.save()

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, LoanApplication.STATUS_DISBURSED)

    def test_partial_payment_keeps_loan_disbursed(self):
        record_payment(self.application, self.applicant, self.application.monthly_payment, 'card')

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, LoanApplication.STATUS_DISBURSED)
        self.assertEqual(self.application.amount_paid, self.application.monthly_payment)
        self.assertEqual(self.application.next_due_installment.sequence_number, 2)


class OverdueSweepTest(BaseTestWithSeeder, TestCase):

    def seed_test_data(self):
        self.application = self.seeder.create_disbursed_application(
            start_date=date.today() - timedelta(days=75), repayment_months=6
        )

    def test_only_past_due_installments_are_marked(self):
        marked = mark_all_overdue_installments(grace_days=0)

        self.assertEqual(marked, 2)
        statuses = list(self.application.installments.values_list('status', flat=True))
        self.assertEqual(statuses[:2], [STATUS_OVERDUE, STATUS_OVERDUE])
        self.assertTrue(all(s == STATUS_PENDING for s in statuses[2:]))

    def test_sweep_is_idempotent(self):
        mark_all_overdue_installments(grace_days=0)
        self.assertEqual(mark_all_overdue_installments(grace_days=0), 0)

    def test_grace_days_delay_marking(self):
        today = date.today()
        first_due = self.application.installments.get(sequence_number=1).due_date
        grace = (today - first_due).days

        self.assertEqual(mark_all_overdue_installments(grace_days=grace, today=today), 0)
        self.assertEqual(mark_all_overdue_installments(grace_days=grace - 1, today=today), 1)

    def test_paid_installments_are_never_marked(self):
        installment = self.application.installments.get(sequence_number=1)
        installment.status = STATUS_PAID
        installment.save()

        self.assertEqual(mark_all_overdue_installments(grace_days=0), 1)
        installment.refresh_from_db()
        self.assertEqual(installment.status, STATUS_PAID)

    def test_report_groups_by_application(self):
        report = get_overdue_installments_report(grace_days=0)

        self.assertEqual(report['overdue_pending_count'], 2)
        self.assertEqual(report['overdue_count'], 0)
        self.assertEqual(list(report['applications']), [self.application.id])
        self.assertEqual(report['overdue_amount'], self.application.monthly_payment * 2)


class CurrencyPrecisionTest(BaseTestWithSeeder, TestCase):

    def test_stored_schedule_adds_up_at_every_allowed_precision(self):
        for decimal_places in range(MONEY_DECIMAL_PLACES + 1):
            with self.subTest(decimal_places=decimal_places):
                with override_settings(LOAN_CURRENCY_DECIMAL_PLACES=decimal_places):
                    application = self.seeder.create_disbursed_application()

                installments = list(application.installments.all())
                self.assertEqual(len(installments), application.repayment_months)
                self.assertEqual(sum(i.amount for i in installments), application.total_repayment)
                self.assertEqual(
                    application.total_repayment - application.amount,
                    application.total_interest
                )

    def test_precision_within_money_scale_passes_checks(self):
        for decimal_places in range(MONEY_DECIMAL_PLACES + 1):
            with self.subTest(decimal_places=decimal_places):
                with override_settings(LOAN_CURRENCY_DECIMAL_PLACES=decimal_places):
                    self.assertEqual(check_currency_precision(), [])

    def test_precision_beyond_money_scale_fails_checks(self):
        for decimal_places in (3, 6, -1, '2'):
            with self.subTest(decimal_places=decimal_places):
                with override_settings(LOAN_CURRENCY_DECIMAL_PLACES=decimal_places):
                    errors = check_currency_precision()
                self.assertEqual([e.id for e in errors], ['loans.E001'])

    @override_settings(LOAN_CURRENCY_DECIMAL_PLACES=3)
    def test_check_command_reports_precision_error(self):
        with self.assertRaises(SystemCheckError):
            call_command('check', stdout=StringIO(), stderr=StringIO())
