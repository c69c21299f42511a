"""
Supabase Auth client.

Thin wrapper over the Supabase GoTrue REST API used for email sign-up,
password sign-in, session refresh and sign-out. Sessions it has seen are kept
in the Django cache keyed by access token, and are treated as expired a few
minutes before they really are.
"""
import logging
import os
import time
from typing import Optional, Dict, Any

import jwt
import requests
from django.conf import settings
from django.core.cache import cache

from .cache_utils import make_cache_key

logger = logging.getLogger(__name__)

SUPABASE_URL = getattr(settings, 'SUPABASE_URL', os.getenv('SUPABASE_URL', ''))
SUPABASE_ANON_KEY = getattr(settings, 'SUPABASE_ANON_KEY', os.getenv('SUPABASE_ANON_KEY', ''))
REQUEST_TIMEOUT = getattr(settings, 'SUPABASE_REQUEST_TIMEOUT', 15)
TOKEN_EXPIRY_SKEW = getattr(settings, 'SUPABASE_TOKEN_EXPIRY_SKEW', 5 * 60)


class SupabaseAuthError(Exception):
    """Failure reported by (or while talking to) Supabase Auth"""

    def __init__(self, message, status=500, data=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data


def token_expiry(access_token) -> int:
    """`exp` claim of an access token, read without verifying it"""
    try:
        claims = jwt.decode(access_token, options={'verify_signature': False})
    except jwt.InvalidTokenError:
        return 0
    return int(claims.get('exp') or 0)


class TokenCache:
    """
    Sessions keyed by access token, shared through the Django cache.

    An entry is served until `expires_at - skew`; after that the token counts
    as stale and callers must refresh it. Entries hold the Supabase user and
    refresh token so a fresh token needs no round trip.
    """
    prefix = 'supabase_session'

    def __init__(self, skew_seconds=TOKEN_EXPIRY_SKEW, clock=time.time):
        self.skew_seconds = skew_seconds
        self._clock = clock

    def key(self, access_token):
        return make_cache_key(self.prefix, access_token)

    def expires_at(self, session: Dict[str, Any]) -> float:
        if session.get('expires_at'):
            return float(session['expires_at'])
        if session.get('expires_in'):
            return self._clock() + int(session['expires_in'])
        return token_expiry(session['access_token'])

    def store(self, session: Optional[Dict[str, Any]]) -> float:
        """Cache a session; returns when it goes stale, 0 if it already has"""
        if not session or not session.get('access_token'):
            return 0
        expires_at = self.expires_at(session)
        valid_until = expires_at - self.skew_seconds
        ttl = int(valid_until - self._clock())
        if ttl <= 0:
            return 0
        cache.set(self.key(session['access_token']), {
            'user': session.get('user'),
            'refresh_token': session.get('refresh_token'),
            'expires_at': expires_at,
            'valid_until': valid_until,
        }, ttl)
        return valid_until

    def get(self, access_token) -> Optional[Dict[str, Any]]:
        if not access_token:
            return None
        entry = cache.get(self.key(access_token))
        if entry and self._clock() < entry['valid_until']:
            return entry
        return None

    def discard(self, access_token):
        if access_token:
            cache.delete(self.key(access_token))


class SupabaseAuthClient:
    """Calls the Supabase Auth (GoTrue) endpoints with the project's anon key"""

    def __init__(self, base_url=None, anon_key=None, timeout=None, session=None, token_cache=None):
        self.base_url = (base_url if base_url is not None else SUPABASE_URL).rstrip('/')
        self.anon_key = anon_key if anon_key is not None else SUPABASE_ANON_KEY
        self.timeout = timeout or REQUEST_TIMEOUT
        self.http = session or requests.Session()
        self.token_cache = token_cache or TokenCache()

    @property
    def is_configured(self):
        return bool(self.base_url and self.anon_key)

    def _request(self, method, path, payload=None, access_token=None, params=None):
        if not self.is_configured:
            raise SupabaseAuthError('Supabase is not configured', status=503)

        headers = {
            'apikey': self.anon_key,
            'Content-Type': 'application/json',
        }
        if access_token:
            headers['Authorization'] = f'Bearer {access_token}'

        url = f"{self.base_url}/auth/v1/{path}"
        try:
            response = self.http.request(
                method, url, json=payload, params=params, headers=headers, timeout=self.timeout
            )
        except requests.Timeout:
            raise SupabaseAuthError('Request timed out', status=408)
        except requests.RequestException as e:
            logger.error(f"Supabase request to {path} failed: {str(e)}")
            raise SupabaseAuthError('Authentication service unavailable', status=503)

        if response.status_code == 204 or not response.content:
            data = {}
        else:
            try:
                data = response.json()
            except ValueError:
                data = {'raw': response.text}

        if not response.ok:
            message = (
                data.get('error_description') or data.get('msg') or data.get('message')
                or data.get('error') or 'An error occurred'
            )
            logger.warning(f"Supabase {path} returned {response.status_code}: {message}")
            raise SupabaseAuthError(message, status=response.status_code, data=data)
        return data

    def sign_up(self, email, password, name=''):
        redirect_url = getattr(settings, 'APP_URL', '').rstrip('/')
        payload = {
            'email': email,
            'password': password,
            'data': {'name': name},
        }
        params = {'redirect_to': f"{redirect_url}/login"} if redirect_url else None
        return self._request('POST', 'signup', payload, params=params)

    def sign_in_with_password(self, email, password):
        session = self._request('POST', 'token', {'email': email, 'password': password},
                                params={'grant_type': 'password'})
        self.token_cache.store(session)
        return session

    def refresh_session(self, refresh_token):
        if not refresh_token:
            raise SupabaseAuthError('No refresh token available', status=401)
        session = self._request('POST', 'token', {'refresh_token': refresh_token},
                                params={'grant_type': 'refresh_token'})
        self.token_cache.store(session)
        return session

    def ensure_fresh_session(self, refresh_token, access_token=None):
        """
        Session for `access_token`, refreshed only once it is stale.

        Returns (session, refreshed). A cached token that is still outside the
        expiry skew is handed back without calling Supabase.
        """
        entry = self.token_cache.get(access_token)
        if entry:
            return {
                'access_token': access_token,
                'refresh_token': entry['refresh_token'] or refresh_token,
                'expires_at': int(entry['expires_at']),
                'user': entry['user'],
            }, False
        self.token_cache.discard(access_token)
        return self.refresh_session(refresh_token), True

    def get_user(self, access_token):
        """Supabase user behind an access token; served from cache while fresh"""
        entry = self.token_cache.get(access_token)
        if entry and entry.get('user'):
            return entry['user']
        user = self._request('GET', 'user', access_token=access_token)
        self.token_cache.store({'access_token': access_token, 'user': user})
        return user

    def sign_out(self, access_token):
        try:
            self._request('POST', 'logout', access_token=access_token)
        finally:
            self.token_cache.discard(access_token)


_auth_client = None


def get_auth_client():
    """Process-wide client so the HTTP session is reused across requests"""
    global _auth_client
    if _auth_client is None:
        _auth_client = SupabaseAuthClient()
    return _auth_client
