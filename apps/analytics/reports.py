from django.db.models import Sum, Count
from dateutil.relativedelta import relativedelta
from datetime import date

from apps.loans.amortization import STATUS_PENDING, STATUS_PAID, STATUS_OVERDUE
from apps.loans.models import LoanPackage, LoanApplication, RepaymentInstallment, Payment


def portfolio_overview():
    """
    Portfolio-wide numbers for the admin dashboard
    """
    applications = LoanApplication.objects.all()
    installments = RepaymentInstallment.objects.all()

    by_status = {
        row['status']: row['count']
        for row in applications.values('status').annotate(count=Count('id'))
    }
    total_loaned = applications.filter(
        status=LoanApplication.STATUS_DISBURSED
    ).aggregate(total=Sum('amount'))['total'] or 0
    total_collected = Payment.objects.filter(
        status=Payment.STATUS_COMPLETED
    ).aggregate(total=Sum('amount'))['total'] or 0
    outstanding = installments.filter(
        status__in=[STATUS_PENDING, STATUS_OVERDUE]
    ).aggregate(total=Sum('amount'))['total'] or 0

    return {
        'total_packages': LoanPackage.objects.count(),
        'total_applications': applications.count(),
        'total_disbursed': by_status.get(LoanApplication.STATUS_DISBURSED, 0),
        'total_payments': Payment.objects.count(),
        'total_loaned': float(total_loaned),
        'applications_by_status': {
            value: by_status.get(value, 0) for value, _ in LoanApplication.STATUS_CHOICES
        },
        'installments': {
            'pending': installments.filter(status=STATUS_PENDING).count(),
            'overdue': installments.filter(status=STATUS_OVERDUE).count(),
            'paid': installments.filter(status=STATUS_PAID).count(),
        },
        'total_collected': float(total_collected),
        'outstanding_amount': float(outstanding),
    }


def repayment_trends(months=6, today=None):
    """
    Completed repayments per calendar month, oldest first
    """
    first_of_month = (today or date.today()).replace(day=1)
    trends = []

    for i in reversed(range(months)):
        start_date = first_of_month - relativedelta(months=i)
        end_date = start_date + relativedelta(months=1)

        month_payments = Payment.objects.filter(
            status=Payment.STATUS_COMPLETED,
            payment_date__date__gte=start_date,
            payment_date__date__lt=end_date,
        ).aggregate(total=Sum('amount'), count=Count('id'))

        trends.append({
            'month': start_date.strftime('%Y-%m'),
            'total_amount': float(month_payments['total'] or 0),
            'payment_count': month_payments['count'] or 0,
        })

    return trends


def applicant_dashboard(user):
    """
    Loan and repayment counts for one applicant
    """
    applications = LoanApplication.objects.filter(applicant=user)
    installments = RepaymentInstallment.objects.filter(application__applicant=user)

    outstanding = installments.filter(
        status__in=[STATUS_PENDING, STATUS_OVERDUE]
    ).aggregate(total=Sum('amount'))['total'] or 0
    paid = installments.filter(status=STATUS_PAID).aggregate(total=Sum('amount'))['total'] or 0
    next_due = installments.filter(
        status__in=[STATUS_PENDING, STATUS_OVERDUE]
    ).order_by('due_date', 'sequence_number').first()

    return {
        'total_applications': applications.count(),
        'active_loans': applications.filter(status=LoanApplication.STATUS_DISBURSED).count(),
        'completed_loans': applications.filter(status=LoanApplication.STATUS_COMPLETED).count(),
        'pending_installments': installments.filter(status=STATUS_PENDING).count(),
        'overdue_installments': installments.filter(status=STATUS_OVERDUE).count(),
        'paid_installments': installments.filter(status=STATUS_PAID).count(),
        'amount_paid': float(paid),
        'outstanding_amount': float(outstanding),
        'next_due_date': next_due.due_date if next_due else None,
        'next_due_amount': float(next_due.amount) if next_due else None,
    }
