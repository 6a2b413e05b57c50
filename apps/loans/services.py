"""Loan workflows that touch the database.

Quotes, application intake, lifecycle transitions, disbursement and
payment recording. Calculations are delegated to ``amortization``.
"""
from django.db import transaction
from django.utils import timezone
from datetime import date
from decimal import Decimal
import logging

from .amortization import (
    STATUS_PENDING,
    STATUS_PAID,
    STATUS_OVERDUE,
    amortize,
    generate_payment_schedule,
)
from .exceptions import InvalidInputError
from .models import LoanApplication, RepaymentInstallment, Payment

logger = logging.getLogger(__name__)


def quote_package(repository, package_id, amount=None, months=None):
    """
    Price ``amount`` over ``months`` using the terms of one package.

    ``amount`` defaults to the package minimum and ``months`` to the
    package duration. Returns ``(terms, AmortizationResult)``.

    Raises:
        PackageNotFound: If the repository has no such package
        InvalidInputError: If amount or months fall outside the package limits
    """
    terms = repository.get(package_id)

    amount = terms.min_amount if amount in (None, '') else amount
    months = terms.duration_months if months in (None, '') else months

    try:
        amount = Decimal(str(amount))
    except ArithmeticError:
        raise InvalidInputError("Amount must be a number")
    if not amount.is_finite() or not terms.accepts_amount(amount):
        raise InvalidInputError(
            f"Amount must be between {terms.min_amount} and {terms.max_amount}"
        )

    try:
        months = int(months)
    except (TypeError, ValueError):
        raise InvalidInputError("Months must be a whole number")
    if months < 1 or months > terms.duration_months:
        raise InvalidInputError(
            f"Repayment period must be between 1 and {terms.duration_months} months"
        )

    return terms, amortize(amount, terms.interest_rate, months)


def submit_application(applicant, package, amount, repayment_months, **fields):
    """
    Create a pending application with a snapshot of the package terms.

    The monthly payment, total repayment and total interest are frozen at
    submission so later catalog edits do not change what the applicant saw.
    """
    if not package.to_terms().accepts_amount(amount):
        raise InvalidInputError(
            f"Amount must be between {package.min_amount} and {package.max_amount}"
        )
    if repayment_months < 1 or repayment_months > package.duration_months:
        raise InvalidInputError(
            f"Repayment period must be between 1 and {package.duration_months} months"
        )

    result = amortize(amount, package.interest_rate, repayment_months)

    application = LoanApplication.objects.create(
        applicant=applicant,
        package=package,
        amount=amount,
        repayment_months=repayment_months,
        interest_rate=package.interest_rate,
        monthly_payment=result.monthly_payment,
        total_repayment=result.total_repayment,
        total_interest=result.total_interest,
        **fields
    )
    logger.info(
        f"Loan application {application.id} submitted by user {applicant.id} "
        f"for {amount} over {repayment_months} months"
    )
    return application


def preview_schedule(application, start_date=None):
    """Unsaved schedule for an application using its snapshot terms"""
    return generate_payment_schedule(
        application.id,
        application.amount,
        application.interest_rate,
        application.repayment_months,
        start_date or date.today(),
    )


def transition_application(application, new_status, notes=None):
    """
    Move an application along its lifecycle.

    Disbursement has its own entry point because it also writes the
    schedule; requests to reach ``disbursed`` are routed there.
    """
    if new_status == LoanApplication.STATUS_DISBURSED:
        return disburse_application(application)

    if not application.can_transition_to(new_status):
        raise InvalidInputError(
            f"Cannot change status from {application.status} to {new_status}",
            code='invalid_transition'
        )

    old_status = application.status
    application.status = new_status
    update_fields = ['status', 'updated_at']
    if new_status == LoanApplication.STATUS_APPROVED:
        application.approval_date = timezone.now()
        update_fields.append('approval_date')
    if notes is not None:
        application.notes = notes
        update_fields.append('notes')
    application.save(update_fields=update_fields)

    logger.info(f"Loan application {application.id} status changed: {old_status} -> {new_status}")
    return application


def disburse_application(application, start_date=None):
    """
    Mark an approved application disbursed and persist its schedule.

    The first installment falls one month after ``start_date`` (today by
    default).
    """
    with transaction.atomic():
        application = LoanApplication.objects.select_for_update().get(pk=application.pk)

        if not application.can_transition_to(LoanApplication.STATUS_DISBURSED):
            raise InvalidInputError(
                f"Cannot disburse an application with status {application.status}",
                code='invalid_transition'
            )

        schedule = preview_schedule(application, start_date)

        application.status = LoanApplication.STATUS_DISBURSED
        application.disbursal_date = timezone.now()
        application.save(update_fields=['status', 'disbursal_date', 'updated_at'])

        RepaymentInstallment.objects.bulk_create([
            RepaymentInstallment(
                application=application,
                sequence_number=entry.sequence_number,
                due_date=entry.due_date,
                amount=entry.amount,
                status=entry.status,
            )
            for entry in schedule
        ])

    logger.info(
        f"Loan application {application.id} disbursed with {len(schedule)} installments "
        f"of {schedule[0].amount}"
    )
    return application


def record_payment(application, payer, amount, payment_method,
                   status=Payment.STATUS_COMPLETED, transaction_id=''):
    """
    Record a repayment against a disbursed application.

    A completed payment settles the earliest unpaid installment and must
    cover its full amount. Pending and failed payments are stored without
    touching the schedule.
    """
    amount = Decimal(str(amount))

    with transaction.atomic():
        application = LoanApplication.objects.select_for_update().get(pk=application.pk)

        if application.status != LoanApplication.STATUS_DISBURSED:
            raise InvalidInputError(
                f"Payments can only be made on disbursed loans (status is {application.status})",
                code='not_disbursed'
            )

        installment = None
        if status == Payment.STATUS_COMPLETED:
            installment = (
                RepaymentInstallment.objects.select_for_update()
                .filter(application=application, status__in=[STATUS_PENDING, STATUS_OVERDUE])
                .order_by('sequence_number')
                .first()
            )
            if installment is None:
                raise InvalidInputError("No outstanding installments", code='nothing_due')
            if amount < installment.amount:
                raise InvalidInputError(
                    f"Payment of {amount} is less than the installment amount {installment.amount}",
                    code='insufficient_amount'
                )

        payment = Payment.objects.create(
            application=application,
            payer=payer,
            installment=installment,
            amount=amount,
            payment_date=timezone.now(),
            payment_method=payment_method,
            status=status,
            transaction_id=transaction_id,
        )

        if installment is not None:
            installment.application = application
            installment.status = STATUS_PAID
            installment.paid_date = payment.payment_date
            installment.save()

    logger.info(
        f"Payment {payment.id} of {amount} recorded for application {application.id} "
        f"({status}, installment {installment.sequence_number if installment else '-'})"
    )
    return payment
