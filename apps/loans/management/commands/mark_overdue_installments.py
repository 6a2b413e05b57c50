from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from datetime import date
from apps.loans.signals import (
    overdue_candidates,
    mark_all_overdue_installments,
    get_overdue_installments_report,
)
import logging

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Mark repayment installments past their due date as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be updated without making changes',
        )
        parser.add_argument(
            '--report-only',
            action='store_true',
            help='Print the overdue report without updating any installments',
        )
        parser.add_argument(
            '--grace-days',
            type=int,
            default=None,
            help='Days after the due date before an installment turns overdue '
                 '(default: OVERDUE_GRACE_DAYS setting)',
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='List every affected installment',
        )

    def handle(self, *args, **options):
        grace_days = options['grace_days']
        if grace_days is None:
            grace_days = settings.OVERDUE_GRACE_DAYS
        if grace_days < 0:
            raise CommandError("--grace-days cannot be negative")

        self.stdout.write(f"Checking overdue installments at {timezone.now()} (grace: {grace_days} days)")

        report = get_overdue_installments_report(grace_days=grace_days)
        self.display_report(report, options['verbose'])

        if options['report_only']:
            self.stdout.write(self.style.SUCCESS("Report generated. No updates performed (report-only mode)."))
            return

        candidates = overdue_candidates(grace_days=grace_days)
        if not candidates.exists():
            self.stdout.write(self.style.SUCCESS("No overdue installments found."))
            return

        if options['dry_run']:
            self.stdout.write(self.style.WARNING(
                f"DRY RUN: Would mark {candidates.count()} installments as overdue:"
            ))
            for installment in candidates.order_by('application_id', 'sequence_number'):
                days_late = (date.today() - installment.due_date).days
                self.stdout.write(
                    f"  - Installment {installment.schedule_id} - {days_late} days late"
                )
            return

        try:
            updated_count = mark_all_overdue_installments(grace_days=grace_days)
        except Exception as e:
            logger.error(f"Error in mark_overdue_installments command: {e}")
            raise CommandError(f"Command failed: {e}")

        self.stdout.write(self.style.SUCCESS(f"Marked {updated_count} installments as overdue"))

    def display_report(self, report, verbose=False):
        self.stdout.write("=" * 50)
        self.stdout.write("OVERDUE INSTALLMENTS REPORT")
        self.stdout.write("=" * 50)
        self.stdout.write(f"Report Date: {report['report_date']}")
        self.stdout.write(f"Due and still pending: {report['overdue_pending_count']}")
        self.stdout.write(f"Already overdue: {report['overdue_count']}")
        self.stdout.write(f"Total overdue: {report['total_overdue']}")
        self.stdout.write(f"Overdue amount: {report['overdue_amount']} {settings.LOAN_CURRENCY}")
        self.stdout.write(f"Affected applications: {len(report['applications'])}")

        if verbose:
            for application_id, installments in report['applications'].items():
                numbers = ', '.join(str(i.sequence_number) for i in installments)
                self.stdout.write(f"  Application {application_id}: installments {numbers}")
