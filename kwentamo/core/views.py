import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404

from .authentication import SupabaseJWTAuthentication
from .models import AuditLog
from .pagination import paginate
from .serializers import (
    UserSerializer, UserCreateSerializer, AuditLogSerializer,
    SupabaseCredentialsSerializer, SupabaseRefreshSerializer,
)
from .supabase_service import SupabaseAuthError, get_auth_client
from .utils import create_audit_log, get_date_range, get_impersonator_id

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['email'] = user.email
        token['is_admin'] = user.is_staff or user.is_superuser
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that turns a deleted user into an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def issue_tokens(user, **claims):
    """Access/refresh pair for `user`; extra claims are copied to both tokens"""
    token = CustomTokenObtainPairSerializer.get_token(user)
    for key, value in claims.items():
        token[key] = value
    return {
        'access': str(token.access_token),
        'refresh': str(token),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        create_audit_log(
            request=request, user=user, action='create', model_name='User',
            object_id=user.id, object_name=user.username,
        )
        return Response({
            'user': UserSerializer(user).data,
            **issue_tokens(user),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def build_user_payload(request, user):
    from kwentamo.business.serializers import BusinessSerializer

    user_data = UserSerializer(user).data
    business = getattr(user, 'business', None)
    user_data['business'] = BusinessSerializer(business).data if business else None
    user_data['is_admin'] = user.is_staff or user.is_superuser
    user_data['impersonated_by'] = get_impersonator_id(request)
    return user_data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with business and admin flags"""
    return Response(build_user_payload(request, request.user))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def auth_sync(request):
    """
    Bring the local account in line with the identity provider.

    Supabase users are created on first request; this endpoint lets the client
    push the display name captured at sign-up.
    """
    user = request.user
    name = (request.data.get('name') or '').strip()
    changes = {}
    if name and name != user.name:
        changes['name'] = {'old': user.name, 'new': name}
        user.name = name
        user.save(update_fields=['name', 'updated_at'])

    create_audit_log(
        request=request, action='user_sync', model_name='User',
        object_id=user.id, object_name=user.username, changes=changes,
    )
    return Response(build_user_payload(request, user))


def _supabase_error_response(error):
    logger.warning(f"Supabase auth request failed ({error.status}): {error.message}")
    return Response({'error': error.message}, status=error.status)


def _sync_supabase_user(session):
    """Local user for the Supabase user embedded in a session response"""
    supabase_user = session.get('user') or {}
    if not supabase_user.get('id'):
        return None
    return SupabaseJWTAuthentication().get_or_create_user({
        'sub': supabase_user['id'],
        'email': supabase_user.get('email'),
        'user_metadata': supabase_user.get('user_metadata') or {},
    })


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def supabase_sign_up(request):
    serializer = SupabaseCredentialsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        result = get_auth_client().sign_up(data['email'], data['password'], data.get('name', ''))
    except SupabaseAuthError as e:
        return _supabase_error_response(e)

    # With email confirmation on, Supabase returns the user without a session
    confirmation_required = not result.get('access_token')
    return Response({
        'user': result.get('user') or result,
        'session': None if confirmation_required else result,
        'confirmation_required': confirmation_required,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def supabase_sign_in(request):
    serializer = SupabaseCredentialsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        session = get_auth_client().sign_in_with_password(data['email'], data['password'])
    except SupabaseAuthError as e:
        return _supabase_error_response(e)

    user = _sync_supabase_user(session)
    if user is not None:
        if not user.is_active:
            return Response({'error': 'User account is disabled.'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(
            request=request, user=user, action='login', model_name='User',
            object_id=user.id, object_name=user.username, changes={'provider': 'supabase'},
        )
    return Response({
        'session': session,
        'user': UserSerializer(user).data if user else None,
    })


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def supabase_refresh(request):
    serializer = SupabaseRefreshSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        session, refreshed = get_auth_client().ensure_fresh_session(
            data['refresh_token'], data.get('access_token')
        )
    except SupabaseAuthError as e:
        if e.status in (400, 401, 403):
            return Response({'error': 'Session expired. Please sign in again.'},
                            status=status.HTTP_401_UNAUTHORIZED)
        return _supabase_error_response(e)
    return Response({'session': session, 'refreshed': refreshed})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def supabase_sign_out(request):
    auth = request.META.get('HTTP_AUTHORIZATION', '').split()
    if len(auth) != 2 or auth[0].lower() != 'bearer':
        return Response({'error': 'Access token required'}, status=status.HTTP_401_UNAUTHORIZED)
    try:
        get_auth_client().sign_out(auth[1])
    except SupabaseAuthError as e:
        return _supabase_error_response(e)
    return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs; admins see everyone's, users their own"""
    queryset = AuditLog.objects.select_related('user', 'impersonator')

    if not request.user.is_staff:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    try:
        date_from, date_to = get_date_range(request)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    return paginate(request, queryset.order_by('-created_at'), AuditLogSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_staff and audit_log.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
