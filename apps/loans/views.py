from rest_framework import status, viewsets, mixins, permissions
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from datetime import date
import logging

from apps.authentication.permissions import IsAdmin, IsOwnerOrAdmin
from .amortization import amortize, generate_payment_schedule
from .exceptions import PackageNotFound
from .models import LoanPackage, LoanApplication, Payment
from .repositories import DjangoLoanPackageRepository
from .serializers import (
    LoanPackageSerializer,
    LoanApplicationCreateSerializer,
    LoanApplicationSerializer,
    LoanApplicationStatusSerializer,
    RepaymentInstallmentSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    CalculatorSerializer,
    ScheduleEntrySerializer,
    AmortizationResultSerializer,
)
from .services import (
    quote_package,
    preview_schedule,
    transition_application,
    disburse_application,
    record_payment,
)

User = get_user_model()
logger = logging.getLogger(__name__)


def _error_response(e, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'error': e.message, 'code': e.code}, status=status_code)


class LoanPackageViewSet(viewsets.ModelViewSet):
    serializer_class = LoanPackageSerializer
    queryset = LoanPackage.objects.all()

    def get_queryset(self):
        queryset = LoanPackage.objects.all()
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    def get_permissions(self):
        if self.action in ('list', 'retrieve', 'quote'):
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsAdmin()]

    def perform_create(self, serializer):
        package = serializer.save()
        logger.info(f"Loan package {package.id} ({package.name}) created by {self.request.user.id}")

    def perform_destroy(self, instance):
        if instance.applications.exists():
            raise ValidationError("Cannot delete a package that has applications", code='package_in_use')
        instance.delete()

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except ValidationError as e:
            return _error_response(e)

    @action(detail=True, methods=['get'])
    def quote(self, request, pk=None):
        """Price an amount over a number of months with this package's rate"""
        try:
            terms, result = quote_package(
                DjangoLoanPackageRepository(),
                pk,
                amount=request.query_params.get('amount'),
                months=request.query_params.get('months'),
            )
        except PackageNotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return _error_response(e)

        data = AmortizationResultSerializer(result).data
        data['package_id'] = terms.id
        data['currency'] = settings.LOAN_CURRENCY
        return Response(data)


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def calculator(request):
    """
    Stateless loan calculator: payment summary plus the full schedule
    """
    serializer = CalculatorSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    params = serializer.validated_data
    try:
        result = amortize(params['principal'], params['annual_rate_percent'], params['term_months'])
        schedule = generate_payment_schedule(
            params['loan_id'],
            params['principal'],
            params['annual_rate_percent'],
            params['term_months'],
            params.get('start_date') or date.today(),
        )
    except ValidationError as e:
        logger.info(f"Calculator rejected input: {e.message}")
        return _error_response(e)

    return Response({
        'result': AmortizationResultSerializer(result).data,
        'schedule': ScheduleEntrySerializer(schedule, many=True).data,
        'currency': settings.LOAN_CURRENCY,
    })


class LoanApplicationViewSet(mixins.CreateModelMixin,
                             mixins.RetrieveModelMixin,
                             mixins.ListModelMixin,
                             viewsets.GenericViewSet):
    serializer_class = LoanApplicationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        if self.action == 'create':
            return LoanApplicationCreateSerializer
        return LoanApplicationSerializer

    def get_queryset(self):
        user = self.request.user
        queryset = LoanApplication.objects.select_related('applicant', 'package').prefetch_related('installments')

        if getattr(user, 'role', None) != User.ROLE_ADMIN:
            queryset = queryset.filter(applicant=user)

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset

    def get_permissions(self):
        if self.action in ('update_status', 'disburse'):
            return [permissions.IsAuthenticated(), IsAdmin()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = serializer.save()
        return Response(
            LoanApplicationSerializer(application).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=['get'], url_path=r'user/(?P<user_id>\d+)')
    def by_user(self, request, user_id=None):
        """Applications of one user; users may only list their own"""
        if getattr(request.user, 'role', None) != User.ROLE_ADMIN and str(request.user.id) != str(user_id):
            return Response(
                {'error': 'You do not have permission to view these applications'},
                status=status.HTTP_403_FORBIDDEN
            )
        queryset = self.get_queryset().filter(applicant_id=user_id)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(LoanApplicationSerializer(page, many=True).data)
        return Response(LoanApplicationSerializer(queryset, many=True).data)

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        application = get_object_or_404(LoanApplication, pk=pk)
        serializer = LoanApplicationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            application = transition_application(
                application,
                serializer.validated_data['status'],
                notes=serializer.validated_data.get('notes'),
            )
        except ValidationError as e:
            return _error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error updating application {pk} status: {e}")
            return Response(
                {'error': 'An unexpected error occurred while updating the application'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        application.refresh_from_db()
        return Response(LoanApplicationSerializer(application).data)

    @action(detail=True, methods=['post'])
    def disburse(self, request, pk=None):
        application = get_object_or_404(LoanApplication, pk=pk)
        try:
            application = disburse_application(application)
        except ValidationError as e:
            return _error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error disbursing application {pk}: {e}")
            return Response(
                {'error': 'An unexpected error occurred while disbursing the loan'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        application.refresh_from_db()
        return Response(LoanApplicationSerializer(application).data)

    @action(detail=True, methods=['get'])
    def schedule(self, request, pk=None):
        """Persisted installments once disbursed, otherwise a computed preview"""
        application = self.get_object()

        if application.installments.exists():
            return Response({
                'application_id': application.id,
                'preview': False,
                'installments': RepaymentInstallmentSerializer(application.installments.all(), many=True).data,
                'currency': settings.LOAN_CURRENCY,
            })

        try:
            entries = preview_schedule(application)
        except ValidationError as e:
            return _error_response(e)

        return Response({
            'application_id': application.id,
            'preview': True,
            'installments': ScheduleEntrySerializer(entries, many=True).data,
            'currency': settings.LOAN_CURRENCY,
        })


class PaymentViewSet(mixins.CreateModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.ListModelMixin,
                     viewsets.GenericViewSet):
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]

    def get_queryset(self):
        user = self.request.user
        queryset = Payment.objects.select_related('application', 'installment')
        if getattr(user, 'role', None) != User.ROLE_ADMIN:
            queryset = queryset.filter(application__applicant=user)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        application = data['application']

        if application.applicant_id != request.user.id:
            return Response(
                {'error': 'You can only pay your own loans'},
                status=status.HTTP_403_FORBIDDEN
            )

        try:
            payment = record_payment(
                application,
                request.user,
                data['amount'],
                data['payment_method'],
                status=data['status'],
                transaction_id=data['transaction_id'],
            )
        except ValidationError as e:
            logger.warning(f"Payment rejected for application {application.id}: {e.message}")
            return _error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error recording payment for application {application.id}: {e}")
            return Response(
                {'error': 'An unexpected error occurred while processing payment'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        application.refresh_from_db()
        return Response({
            'message': 'Payment recorded',
            'payment': PaymentSerializer(payment).data,
            'application_status': application.status,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path=r'loan/(?P<application_id>\d+)')
    def by_loan(self, request, application_id=None):
        application = get_object_or_404(LoanApplication, pk=application_id)
        self.check_object_permissions(request, application)
        payments = self.get_queryset().filter(application=application)
        return Response(PaymentSerializer(payments, many=True).data)
