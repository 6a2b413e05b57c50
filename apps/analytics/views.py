from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import permissions, status
from django.conf import settings
import logging

from apps.authentication.permissions import IsAdmin
from . import reports
from .serializers import TrendsQuerySerializer

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated, IsAdmin])
def overview(request):
    """
    Portfolio totals for administrators
    """
    try:
        data = reports.portfolio_overview()
    except Exception as e:
        logger.error(f"Error computing portfolio overview: {e}")
        return Response(
            {'error': 'Failed to compute stats'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    data['currency'] = settings.LOAN_CURRENCY
    return Response(data)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated, IsAdmin])
def repayment_trends(request):
    """
    Collected repayments for the last months (6 by default)
    """
    serializer = TrendsQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    trends = reports.repayment_trends(months=serializer.validated_data['months'])
    return Response({'trends': trends, 'currency': settings.LOAN_CURRENCY})


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def dashboard(request):
    """
    Loan and installment counts for the current user
    """
    try:
        data = reports.applicant_dashboard(request.user)
    except Exception as e:
        logger.error(f"Error calculating dashboard stats for user {request.user.id}: {e}")
        return Response(
            {'error': 'Failed to calculate dashboard statistics'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    data['currency'] = settings.LOAN_CURRENCY
    return Response(data)
