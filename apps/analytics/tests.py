from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from decimal import Decimal
from datetime import date

from apps.loans.amortization import STATUS_OVERDUE
from apps.loans.models import RepaymentInstallment
from apps.loans.services import record_payment
from apps.loans.test_data_seeder import BaseTestWithSeeder
from . import reports


class StatsEndpointTestCase(BaseTestWithSeeder, APITestCase):

    def seed_test_data(self):
        self.admin = self.seeder.create_admin()
        self.applicant = self.seeder.create_applicant()
        self.other_applicant = self.seeder.create_applicant()
        self.package = self.seeder.create_package()

        self.loan = self.seeder.create_disbursed_application(
            applicant=self.applicant, package=self.package,
            amount=Decimal('400000'), repayment_months=4
        )
        self.seeder.create_application(applicant=self.other_applicant, package=self.package)
        record_payment(self.loan, self.applicant, self.loan.monthly_payment, 'mobile_money')

    def authenticate_user(self, user):
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_overview_for_admin(self):
        self.authenticate_user(self.admin)

        response = self.client.get(reverse('stats_overview'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_packages'], 1)
        self.assertEqual(response.data['total_applications'], 2)
        self.assertEqual(response.data['total_disbursed'], 1)
        self.assertEqual(response.data['total_payments'], 1)
        self.assertEqual(response.data['total_loaned'], 400000.0)
        self.assertEqual(response.data['applications_by_status']['pending'], 1)
        self.assertEqual(response.data['installments'], {'pending': 3, 'overdue': 0, 'paid': 1})
        self.assertEqual(response.data['total_collected'], float(self.loan.monthly_payment))

    def test_overview_is_admin_only(self):
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('stats_overview'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_trends_cover_six_months(self):
        self.authenticate_user(self.admin)

        response = self.client.get(reverse('stats_trends'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        trends = response.data['trends']
        self.assertEqual(len(trends), 6)
        self.assertEqual(trends[-1]['month'], date.today().strftime('%Y-%m'))
        self.assertEqual(trends[-1]['payment_count'], 1)
        self.assertEqual(sum(t['payment_count'] for t in trends[:-1]), 0)

    def test_trends_month_range_is_validated(self):
        self.authenticate_user(self.admin)

        response = self.client.get(reverse('stats_trends'), {'months': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get(reverse('stats_trends'), {'months': 3})
        self.assertEqual(len(response.data['trends']), 3)

    def test_dashboard_for_applicant(self):
        RepaymentInstallment.objects.filter(
            application=self.loan, sequence_number=2
        ).update(status=STATUS_OVERDUE)
        self.authenticate_user(self.applicant)

        response = self.client.get(reverse('stats_dashboard'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_applications'], 1)
        self.assertEqual(response.data['active_loans'], 1)
        self.assertEqual(response.data['paid_installments'], 1)
        self.assertEqual(response.data['overdue_installments'], 1)
        self.assertEqual(response.data['pending_installments'], 2)
        self.assertEqual(response.data['outstanding_amount'], float(self.loan.monthly_payment * 3))
        self.assertEqual(
            response.data['next_due_date'],
            self.loan.installments.get(sequence_number=2).due_date
        )

    def test_dashboard_without_loans(self):
        self.authenticate_user(self.other_applicant)

        response = self.client.get(reverse('stats_dashboard'))

        self.assertEqual(response.data['total_applications'], 1)
        self.assertEqual(response.data['outstanding_amount'], 0.0)
        self.assertIsNone(response.data['next_due_date'])


class RepaymentTrendsTest(TestCase):

    def test_months_are_calendar_months(self):
        trends = reports.repayment_trends(months=4, today=date(2024, 3, 31))

        self.assertEqual([t['month'] for t in trends], ['2023-12', '2024-01', '2024-02', '2024-03'])
