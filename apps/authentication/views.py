from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from django.contrib.auth import get_user_model
import logging

from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    ChangePasswordSerializer
)

User = get_user_model()
logger = logging.getLogger(__name__)


def _session_payload(user, message):
    """
    Serialized user plus a token pair; role and email ride along as claims
    so clients can route admins without another request
    """
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['email'] = user.email

    return {
        'user': UserSerializer(user).data,
        'refresh': str(refresh),
        'access': str(refresh.access_token),
        'message': message,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Create an applicant account and sign it in"""
    serializer = UserRegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    applicant = serializer.save()
    logger.info(f"Registered applicant {applicant.id} ({applicant.email})")
    return Response(
        _session_payload(applicant, 'Account created'),
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = UserLoginSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        logger.warning(f"Failed sign-in for {request.data.get('email', '<missing>')}")
        return Response(serializer.errors, status=status.HTTP_401_UNAUTHORIZED)

    user = serializer.validated_data['user']
    return Response(_session_payload(user, f'Welcome back, {user.name or user.email}'))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Blacklist the refresh token so it cannot mint new access tokens"""
    refresh_token = request.data.get('refresh')
    if not refresh_token:
        return Response({'error': 'Refresh token is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        RefreshToken(refresh_token).blacklist()
    except TokenError as e:
        logger.info(f"Rejected logout token for user {request.user.id}: {e}")
        return Response({'error': 'Invalid token'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Signed out'})


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile(request):
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    # email, username and role stay read-only on the serializer
    serializer = UserSerializer(request.user, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save(update_fields=['password'])
    logger.info(f"Password changed for user {request.user.id}")

    return Response({'message': 'Password updated'})
