from celery import shared_task
from datetime import date
import logging

from .signals import mark_all_overdue_installments

logger = logging.getLogger(__name__)


@shared_task
def mark_overdue_installments_task(grace_days=None):
    """
    Periodic sweep turning past-due pending installments into overdue ones
    """
    try:
        marked = mark_all_overdue_installments(grace_days=grace_days)
        logger.info(f"Overdue sweep finished: {marked} installments marked overdue")
        return {'marked_overdue': marked, 'execution_date': str(date.today())}
    except Exception as e:
        error_msg = f"Failed to mark overdue installments: {e}"
        logger.error(error_msg)
        return {'error': error_msg}


@shared_task
def generate_portfolio_report():
    """
    Compute the portfolio statistics snapshot and log it
    """
    from apps.analytics.reports import portfolio_overview

    try:
        report = portfolio_overview()
        report['report_date'] = str(date.today())

        logger.info(
            f"Portfolio report {report['report_date']}: "
            f"{report['total_applications']} applications, "
            f"{report['total_disbursed']} disbursed, "
            f"{report['installments']['overdue']} overdue installments, "
            f"collected {report['total_collected']}"
        )
        return report
    except Exception as e:
        error_msg = f"Failed to generate portfolio report: {e}"
        logger.error(error_msg)
        return {'error': error_msg}
