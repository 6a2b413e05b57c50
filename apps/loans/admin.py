from django.contrib import admin
from .models import LoanPackage, LoanApplication, RepaymentInstallment, Payment


@admin.register(LoanPackage)
class LoanPackageAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'name', 'category', 'min_amount', 'max_amount',
        'interest_rate', 'duration_months'
    ]
    list_filter = ['category']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']


class RepaymentInstallmentInline(admin.TabularInline):
    model = RepaymentInstallment
    extra = 0
    readonly_fields = ['sequence_number', 'due_date', 'amount', 'created_at', 'updated_at']


@admin.register(LoanApplication)
class LoanApplicationAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'applicant', 'package', 'amount', 'repayment_months',
        'monthly_payment', 'status', 'application_date'
    ]
    list_filter = ['status', 'package__category', 'application_date']
    search_fields = ['applicant__email', 'purpose']
    readonly_fields = [
        'interest_rate', 'monthly_payment', 'total_repayment', 'total_interest',
        'application_date', 'approval_date', 'disbursal_date', 'created_at', 'updated_at'
    ]
    inlines = [RepaymentInstallmentInline]

    fieldsets = (
        ('Application', {
            'fields': ('applicant', 'package', 'amount', 'repayment_months', 'purpose',
                       'business_info', 'monthly_income', 'documents')
        }),
        ('Loan Summary', {
            'fields': ('interest_rate', 'monthly_payment', 'total_repayment', 'total_interest')
        }),
        ('Status', {
            'fields': ('status', 'notes', 'application_date', 'approval_date', 'disbursal_date')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'application', 'payer', 'amount', 'payment_method',
        'status', 'payment_date'
    ]
    list_filter = ['status', 'payment_method', 'payment_date']
    search_fields = ['payer__email', 'transaction_id']
    readonly_fields = ['created_at', 'updated_at']
