from django.test import TestCase, override_settings
from celery import current_app
from unittest.mock import patch
from datetime import date, timedelta
from decimal import Decimal

from .amortization import STATUS_OVERDUE
from .tasks import mark_overdue_installments_task, generate_portfolio_report
from .test_data_seeder import BaseTestWithSeeder


@override_settings(CELERY_TASK_ALWAYS_EAGER=True)
class CeleryTaskTest(BaseTestWithSeeder, TestCase):
    """Test Celery tasks"""

    def setUp(self):
        current_app.conf.task_always_eager = True
        current_app.conf.task_eager_propagates = True
        super().setUp()

    def seed_test_data(self):
        self.applicant = self.seeder.create_applicant()
        self.application = self.seeder.create_disbursed_application(
            applicant=self.applicant,
            amount=Decimal('600000'),
            repayment_months=6,
            start_date=date.today() - timedelta(days=45),
        )

    def test_mark_overdue_installments_task(self):
        result = mark_overdue_installments_task.delay(grace_days=0).get()

        self.assertEqual(result['marked_overdue'], 1)
        first = self.application.installments.get(sequence_number=1)
        self.assertEqual(first.status, STATUS_OVERDUE)

    def test_mark_overdue_uses_grace_setting(self):
        with self.settings(OVERDUE_GRACE_DAYS=60):
            result = mark_overdue_installments_task.delay().get()

        self.assertEqual(result['marked_overdue'], 0)

    def test_mark_overdue_reports_errors(self):
        with patch('apps.loans.tasks.mark_all_overdue_installments', side_effect=RuntimeError('db down')):
            result = mark_overdue_installments_task.delay().get()

        self.assertIn('error', result)
        self.assertIn('db down', result['error'])

    def test_generate_portfolio_report(self):
        result = generate_portfolio_report.delay().get()

        self.assertEqual(result['total_applications'], 1)
        self.assertEqual(result['total_disbursed'], 1)
        self.assertEqual(result['installments']['pending'], 6)
        self.assertEqual(result['total_loaned'], 600000.0)
        self.assertEqual(result['report_date'], str(date.today()))
