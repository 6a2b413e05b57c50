from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone
from datetime import date, timedelta
from decimal import Decimal
import logging

from .amortization import STATUS_PENDING, STATUS_PAID, STATUS_OVERDUE
from .models import LoanApplication, RepaymentInstallment

logger = logging.getLogger(__name__)


@receiver(post_save, sender=RepaymentInstallment)
def update_application_status_on_save(sender, instance, created, **kwargs):
    """
    Keep the application status in step with its installments.

    A disbursed loan whose installments are all paid becomes completed;
    a completed loan with an unpaid installment goes back to disbursed.
    """
    application = instance.application

    if getattr(application, '_updating_status', False):
        return

    application._updating_status = True
    try:
        installments = application.installments.all()
        total_count = installments.count()
        paid_count = installments.filter(status=STATUS_PAID).count()

        new_status = application.status
        if (application.status == LoanApplication.STATUS_DISBURSED and
                total_count > 0 and paid_count == total_count):
            new_status = LoanApplication.STATUS_COMPLETED
        elif application.status == LoanApplication.STATUS_COMPLETED and paid_count < total_count:
            new_status = LoanApplication.STATUS_DISBURSED

        if new_status != application.status:
            old_status = application.status
            application.status = new_status
            application.save(update_fields=['status', 'updated_at'])
            logger.info(f"Loan application {application.id} status updated: {old_status} -> {new_status}")
    finally:
        application._updating_status = False


def _overdue_cutoff(grace_days=None, today=None):
    if grace_days is None:
        grace_days = getattr(settings, 'OVERDUE_GRACE_DAYS', 0)
    today = today or date.today()
    return today - timedelta(days=grace_days)


def overdue_candidates(grace_days=None, today=None):
    """Pending installments whose due date (plus grace) has passed"""
    return RepaymentInstallment.objects.filter(
        status=STATUS_PENDING,
        due_date__lt=_overdue_cutoff(grace_days, today),
        application__status=LoanApplication.STATUS_DISBURSED,
    )


def mark_all_overdue_installments(grace_days=None, today=None):
    """
    Mark every pending installment past its due date as overdue.

    Runs as a single UPDATE and returns the number of rows changed.
    """
    overdue = overdue_candidates(grace_days, today)
    updated_count = overdue.update(status=STATUS_OVERDUE, updated_at=timezone.now())

    if updated_count:
        logger.info(f"Marked {updated_count} installments as overdue")
    else:
        logger.info("No overdue installments found")
    return updated_count


def get_overdue_installments_report(grace_days=None, today=None):
    """
    Summarize installments that are overdue or about to be marked so.

    Returns counts plus the affected installments grouped by application id.
    """
    report_date = today or date.today()
    pending_overdue = list(
        overdue_candidates(grace_days, report_date)
        .select_related('application', 'application__applicant')
        .order_by('application_id', 'sequence_number')
    )
    already_overdue = list(
        RepaymentInstallment.objects.filter(status=STATUS_OVERDUE)
        .select_related('application', 'application__applicant')
        .order_by('application_id', 'sequence_number')
    )

    by_application = {}
    for installment in pending_overdue + already_overdue:
        by_application.setdefault(installment.application_id, []).append(installment)

    return {
        'overdue_pending_count': len(pending_overdue),
        'overdue_count': len(already_overdue),
        'total_overdue': len(pending_overdue) + len(already_overdue),
        'overdue_amount': sum((i.amount for i in pending_overdue + already_overdue), Decimal('0')),
        'applications': by_application,
        'pending_overdue_installments': pending_overdue,
        'overdue_installments': already_overdue,
        'report_date': report_date,
    }
