"""
Authentication for access tokens issued by Supabase Auth.

Supabase signs its access tokens with the project's JWT secret (HS256). When
the secret is configured tokens are verified locally; otherwise they are
checked against Supabase's user endpoint and the answer is cached until the
token goes stale. Tokens that are not Supabase's are left for the next
authentication class (simplejwt), so first-party and Supabase tokens coexist.
"""
import logging

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from .supabase_service import SupabaseAuthError, get_auth_client

logger = logging.getLogger(__name__)

User = get_user_model()


def _audience():
    return getattr(settings, 'SUPABASE_JWT_AUDIENCE', 'authenticated')


class SupabaseJWTAuthentication(BaseAuthentication):
    keyword = b'bearer'

    def authenticate_header(self, request):
        return 'Bearer realm="api"'

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword or len(auth) != 2:
            return None

        try:
            raw_token = auth[1].decode()
        except UnicodeError:
            return None

        secret = getattr(settings, 'SUPABASE_JWT_SECRET', '')
        if secret:
            payload = self.verify_signature(raw_token, secret)
        else:
            payload = self.verify_with_supabase(raw_token)
        if payload is None:
            return None

        user = self.get_or_create_user(payload)
        if not user.is_active:
            raise exceptions.AuthenticationFailed('User account is disabled.')
        return user, payload

    def verify_signature(self, raw_token, secret):
        try:
            return jwt.decode(raw_token, secret, algorithms=['HS256'], audience=_audience())
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Session expired. Please sign in again.')
        except jwt.InvalidTokenError:
            # Not a Supabase token, let simplejwt try
            return None

    def verify_with_supabase(self, raw_token):
        client = get_auth_client()
        if not client.is_configured:
            return None
        try:
            claims = jwt.decode(raw_token, options={'verify_signature': False})
        except jwt.InvalidTokenError:
            return None
        audience = claims.get('aud')
        if _audience() not in (audience if isinstance(audience, list) else [audience]):
            return None

        try:
            supabase_user = client.get_user(raw_token)
        except SupabaseAuthError as e:
            if e.status in (401, 403):
                raise exceptions.AuthenticationFailed('Session expired. Please sign in again.')
            raise exceptions.AuthenticationFailed('Authentication service unavailable.')

        return {
            **claims,
            'sub': supabase_user.get('id') or claims.get('sub'),
            'email': supabase_user.get('email') or claims.get('email'),
            'user_metadata': supabase_user.get('user_metadata') or claims.get('user_metadata') or {},
        }

    def get_or_create_user(self, payload):
        supabase_id = payload.get('sub')
        if not supabase_id:
            raise exceptions.AuthenticationFailed('Token has no subject.')

        email = (payload.get('email') or '').lower()
        metadata = payload.get('user_metadata') or {}

        user = User.objects.filter(supabase_id=supabase_id).first()
        if user:
            return user

        # Link an existing local account with the same email
        if email:
            user = User.objects.filter(email__iexact=email, supabase_id__isnull=True).first()
            if user:
                user.supabase_id = supabase_id
                user.save(update_fields=['supabase_id', 'updated_at'])
                logger.info(f"Linked Supabase account {supabase_id} to user {user.username}")
                return user

        try:
            with transaction.atomic():
                user = User.objects.create(
                    username=email or supabase_id,
                    email=email,
                    name=metadata.get('name') or metadata.get('full_name') or '',
                    supabase_id=supabase_id,
                    is_active=True,
                )
                user.set_unusable_password()
                user.save(update_fields=['password'])
        except IntegrityError:
            # Concurrent first request for the same account
            user = User.objects.get(supabase_id=supabase_id)
        logger.info(f"Created local user {user.username} for Supabase account {supabase_id}")
        return user
