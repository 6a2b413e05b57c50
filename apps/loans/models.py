from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
from datetime import date, timedelta

from .amortization import SCHEDULE_STATUS_CHOICES, STATUS_PENDING, STATUS_PAID, STATUS_OVERDUE
from .repositories import PackageTerms

# Scale of every stored money column; LOAN_CURRENCY_DECIMAL_PLACES may not exceed it
MONEY_DECIMAL_PLACES = 2


class LoanPackage(models.Model):
    CATEGORY_CHOICES = [
        ('education', 'Education'),
        ('entrepreneur', 'Entrepreneur'),
        ('agriculture', 'Agriculture'),
        ('healthcare', 'Healthcare'),
        ('housing', 'Housing'),
        ('emergency', 'Emergency'),
    ]

    name = models.CharField(max_length=200, unique=True)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    min_amount = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    max_amount = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Annual nominal rate in percent'
    )
    duration_months = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(360)]
    )
    disbursement_days = models.PositiveIntegerField(default=7)
    features = models.JSONField(default=list, blank=True)
    requirements = models.JSONField(default=list, blank=True)
    documents = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['category', 'name']
        verbose_name = 'Loan Package'
        verbose_name_plural = 'Loan Packages'

    def __str__(self):
        return f"{self.name} ({self.interest_rate}% / {self.duration_months}m)"

    def clean(self):
        if self.min_amount is not None and self.max_amount is not None and self.min_amount > self.max_amount:
            raise ValidationError({'max_amount': 'Maximum amount must not be below the minimum amount'})

    def to_terms(self):
        return PackageTerms(
            id=str(self.pk),
            name=self.name,
            category=self.category,
            min_amount=self.min_amount,
            max_amount=self.max_amount,
            interest_rate=self.interest_rate,
            duration_months=self.duration_months,
        )


class LoanApplication(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_DISBURSED = 'disbursed'
    STATUS_COMPLETED = 'completed'
    STATUS_DEFAULTED = 'defaulted'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_DISBURSED, 'Disbursed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_DEFAULTED, 'Defaulted'),
    ]

    # Allowed lifecycle moves; anything else is rejected
    TRANSITIONS = {
        STATUS_PENDING: {STATUS_APPROVED, STATUS_REJECTED},
        STATUS_APPROVED: {STATUS_DISBURSED},
        STATUS_DISBURSED: {STATUS_COMPLETED, STATUS_DEFAULTED},
        STATUS_REJECTED: set(),
        STATUS_COMPLETED: set(),
        STATUS_DEFAULTED: set(),
    }

    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='loan_applications'
    )
    package = models.ForeignKey(
        LoanPackage,
        on_delete=models.PROTECT,
        related_name='applications'
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    purpose = models.CharField(max_length=500)
    business_info = models.TextField(blank=True)
    monthly_income = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(0)]
    )
    repayment_months = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    documents = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    notes = models.TextField(blank=True)

    # Snapshot of the terms the applicant saw when submitting
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    monthly_payment = models.DecimalField(max_digits=14, decimal_places=MONEY_DECIMAL_PLACES, default=0)
    total_repayment = models.DecimalField(max_digits=16, decimal_places=MONEY_DECIMAL_PLACES, default=0)
    total_interest = models.DecimalField(max_digits=16, decimal_places=MONEY_DECIMAL_PLACES, default=0)

    application_date = models.DateTimeField(auto_now_add=True)
    approval_date = models.DateTimeField(null=True, blank=True)
    disbursal_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Loan Application'
        verbose_name_plural = 'Loan Applications'

    def __str__(self):
        return f"Application {self.id} - {self.applicant} - {self.amount}"

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, set())

    @property
    def amount_paid(self):
        paid = self.installments.filter(status=STATUS_PAID).aggregate(total=models.Sum('amount'))['total']
        return paid or Decimal('0.00')

    @property
    def remaining_balance(self):
        if not self.installments.exists():
            return self.total_repayment
        return max(Decimal('0.00'), self.total_repayment - self.amount_paid)

    @property
    def next_due_installment(self):
        return self.installments.exclude(status=STATUS_PAID).order_by('sequence_number').first()


class RepaymentInstallment(models.Model):
    """Persisted copy of one schedule entry for a disbursed loan"""
    application = models.ForeignKey(
        LoanApplication,
        on_delete=models.CASCADE,
        related_name='installments'
    )
    sequence_number = models.PositiveIntegerField()
    due_date = models.DateField()
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(
        max_length=20,
        choices=SCHEDULE_STATUS_CHOICES,
        default=STATUS_PENDING
    )
    paid_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sequence_number']
        unique_together = ['application', 'sequence_number']
        verbose_name = 'Repayment Installment'
        verbose_name_plural = 'Repayment Installments'

    def __str__(self):
        return f"Installment {self.sequence_number} of application {self.application_id} - {self.amount}"

    @property
    def schedule_id(self):
        return f"{self.application_id}-payment-{self.sequence_number}"

    def is_overdue_on(self, today=None, grace_days=0):
        today = today or date.today()
        return (self.status == STATUS_PENDING and
                self.due_date + timedelta(days=grace_days) < today)

    @property
    def is_overdue(self):
        return self.status == STATUS_OVERDUE or self.is_overdue_on()


class Payment(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
    ]

    METHOD_CHOICES = [
        ('mobile_money', 'Mobile Money'),
        ('bank_transfer', 'Bank Transfer'),
        ('cash', 'Cash'),
        ('card', 'Card'),
    ]

    application = models.ForeignKey(
        LoanApplication,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='loan_payments'
    )
    installment = models.ForeignKey(
        RepaymentInstallment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_date = models.DateTimeField()
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    transaction_id = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-payment_date']
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'

    def __str__(self):
        return f"Payment {self.id} - application {self.application_id} - {self.amount}"
