from rest_framework import serializers
from django.conf import settings
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from .amortization import compute_monthly_payment
from .models import LoanPackage, LoanApplication, RepaymentInstallment, Payment
from .services import submit_application

logger = logging.getLogger(__name__)


class LoanPackageSerializer(serializers.ModelSerializer):
    estimated_monthly_payment = serializers.SerializerMethodField()
    currency = serializers.SerializerMethodField()

    class Meta:
        model = LoanPackage
        fields = [
            'id', 'name', 'description', 'category', 'min_amount', 'max_amount',
            'interest_rate', 'duration_months', 'disbursement_days',
            'features', 'requirements', 'documents',
            'estimated_monthly_payment', 'currency', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_estimated_monthly_payment(self, obj):
        """Monthly payment for the package minimum over the full duration"""
        try:
            return compute_monthly_payment(obj.min_amount, obj.interest_rate, obj.duration_months)
        except ValidationError as e:
            logger.warning(f"Cannot estimate payment for package {obj.id}: {e.message}")
            return None

    def get_currency(self, obj):
        return settings.LOAN_CURRENCY

    def validate(self, attrs):
        min_amount = attrs.get('min_amount', getattr(self.instance, 'min_amount', None))
        max_amount = attrs.get('max_amount', getattr(self.instance, 'max_amount', None))
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise serializers.ValidationError(
                {'max_amount': 'Maximum amount must not be below the minimum amount'}
            )
        return attrs


class RepaymentInstallmentSerializer(serializers.ModelSerializer):
    schedule_id = serializers.ReadOnlyField()
    is_overdue = serializers.ReadOnlyField()

    class Meta:
        model = RepaymentInstallment
        fields = [
            'id', 'schedule_id', 'sequence_number', 'due_date', 'amount',
            'status', 'paid_date', 'is_overdue'
        ]
        read_only_fields = fields


class LoanApplicationCreateSerializer(serializers.ModelSerializer):
    package = serializers.PrimaryKeyRelatedField(queryset=LoanPackage.objects.all())

    class Meta:
        model = LoanApplication
        fields = [
            'package', 'amount', 'purpose', 'business_info',
            'monthly_income', 'repayment_months', 'documents'
        ]

    def validate(self, attrs):
        package = attrs['package']
        amount = attrs['amount']
        months = attrs['repayment_months']

        if amount < package.min_amount or amount > package.max_amount:
            raise serializers.ValidationError({
                'amount': f"Amount must be between {package.min_amount} and {package.max_amount}"
            })
        if months < 1 or months > package.duration_months:
            raise serializers.ValidationError({
                'repayment_months': f"Repayment period must be between 1 and {package.duration_months} months"
            })
        return attrs

    def create(self, validated_data):
        user = self.context['request'].user
        package = validated_data.pop('package')
        amount = validated_data.pop('amount')
        months = validated_data.pop('repayment_months')
        try:
            return submit_application(user, package, amount, months, **validated_data)
        except ValidationError as e:
            raise serializers.ValidationError({'error': e.message, 'code': e.code})


class LoanApplicationSerializer(serializers.ModelSerializer):
    applicant_email = serializers.EmailField(source='applicant.email', read_only=True)
    package_name = serializers.CharField(source='package.name', read_only=True)
    amount_paid = serializers.ReadOnlyField()
    remaining_balance = serializers.ReadOnlyField()
    installments = RepaymentInstallmentSerializer(many=True, read_only=True)
    next_installment = serializers.SerializerMethodField()

    class Meta:
        model = LoanApplication
        fields = [
            'id', 'applicant', 'applicant_email', 'package', 'package_name',
            'amount', 'purpose', 'business_info', 'monthly_income',
            'repayment_months', 'documents', 'status', 'notes',
            'interest_rate', 'monthly_payment', 'total_repayment', 'total_interest',
            'amount_paid', 'remaining_balance', 'next_installment',
            'application_date', 'approval_date', 'disbursal_date',
            'installments', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_next_installment(self, obj):
        installment = obj.next_due_installment
        if installment is None:
            return None
        return RepaymentInstallmentSerializer(installment).data


class LoanApplicationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LoanApplication.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentSerializer(serializers.ModelSerializer):
    installment_sequence = serializers.IntegerField(
        source='installment.sequence_number', read_only=True, default=None
    )

    class Meta:
        model = Payment
        fields = [
            'id', 'application', 'payer', 'installment', 'installment_sequence',
            'amount', 'payment_date', 'payment_method', 'status', 'transaction_id',
            'created_at'
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    application = serializers.PrimaryKeyRelatedField(queryset=LoanApplication.objects.all())
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES)
    status = serializers.ChoiceField(choices=Payment.STATUS_CHOICES, default=Payment.STATUS_COMPLETED)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class CalculatorSerializer(serializers.Serializer):
    """Inputs of the stateless loan calculator"""
    principal = serializers.DecimalField(max_digits=20, decimal_places=2)
    annual_rate_percent = serializers.DecimalField(max_digits=9, decimal_places=4)
    term_months = serializers.IntegerField()
    start_date = serializers.DateField(required=False)
    loan_id = serializers.CharField(required=False, default='preview', max_length=64)


class ScheduleEntrySerializer(serializers.Serializer):
    id = serializers.CharField()
    loan_id = serializers.CharField()
    sequence_number = serializers.IntegerField()
    due_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    status = serializers.CharField()


class AmortizationResultSerializer(serializers.Serializer):
    principal = serializers.DecimalField(max_digits=None, decimal_places=None)
    annual_rate_percent = serializers.DecimalField(max_digits=None, decimal_places=None)
    term_months = serializers.IntegerField()
    monthly_payment = serializers.DecimalField(max_digits=None, decimal_places=None)
    total_repayment = serializers.DecimalField(max_digits=None, decimal_places=None)
    total_interest = serializers.DecimalField(max_digits=None, decimal_places=None)
