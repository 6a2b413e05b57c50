from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth import get_user_model
from django.db.models import Count

User = get_user_model()


@admin.register(User)
class ApplicantAdmin(BaseUserAdmin):
    list_display = ('email', 'name', 'phone_number', 'role', 'application_count', 'is_active', 'created_at')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'name', 'phone_number')
    ordering = ('-created_at',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Applicant', {'fields': ('name', 'phone_number', 'role')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Applicant', {'fields': ('email', 'name', 'phone_number', 'role')}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_application_count=Count('loan_applications'))

    @admin.display(description='Applications', ordering='_application_count')
    def application_count(self, obj):
        return obj._application_count
