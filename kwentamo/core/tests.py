"""
Test suite for the core module
Tests: financial formulas, first-party and Supabase authentication, the Supabase
Auth client and token cache, audit log visibility, cache management command
"""
import time
from decimal import Decimal
from io import StringIO
from unittest import mock

import jwt
import requests
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from kwentamo.core import formulas
from kwentamo.core.models import AuditLog, User
from kwentamo.core.supabase_service import SupabaseAuthClient, SupabaseAuthError, TokenCache
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.core.utils import create_audit_log

SUPABASE_SECRET = 'supabase-test-secret-with-enough-length-0123456789'


class MonthlyEquivalentTests(SimpleTestCase):
    """Recurring expenses normalised to a month"""

    def test_frequencies_for_100(self):
        expected = {
            'DAILY': Decimal('3000.00'),
            'WEEKLY': Decimal('400.00'),
            'MONTHLY': Decimal('100.00'),
            'QUARTERLY': Decimal('33.33'),
            'YEARLY': Decimal('8.33'),
        }
        for frequency, amount in expected.items():
            with self.subTest(frequency=frequency):
                self.assertEqual(formulas.monthly_equivalent(100, frequency), amount)

    def test_unknown_or_missing_frequency_is_monthly(self):
        self.assertEqual(formulas.monthly_equivalent(250, 'HOURLY'), Decimal('250.00'))
        self.assertEqual(formulas.monthly_equivalent(250, None), Decimal('250.00'))

    def test_lowercase_frequency(self):
        self.assertEqual(formulas.monthly_equivalent(10, 'weekly'), Decimal('40.00'))

    def test_total_rounds_once(self):
        expenses = [
            {'amount': 100, 'frequency': 'QUARTERLY'},
            {'amount': 100, 'frequency': 'QUARTERLY'},
            {'amount': 100, 'frequency': 'QUARTERLY'},
        ]
        self.assertEqual(formulas.total_monthly_expenses(expenses), Decimal('100.00'))


class ProfitabilityFormulaTests(SimpleTestCase):
    def test_gross_profit_and_margin(self):
        self.assertEqual(formulas.calculate_gross_profit(1000, 600), Decimal('400.00'))
        self.assertEqual(formulas.calculate_gross_profit_margin(1000, 600), Decimal('40.00'))

    def test_margins_are_zero_without_revenue(self):
        self.assertEqual(formulas.calculate_gross_profit_margin(0, 50), Decimal('0'))
        self.assertEqual(formulas.calculate_net_profit_margin(-50, 0), Decimal('0'))
        self.assertEqual(formulas.calculate_operating_margin(10, 0), Decimal('0'))

    def test_cogs(self):
        cogs = formulas.calculate_cogs(
            beginning_raw=500, beginning_packaging=100, raw_purchases=1000,
            packaging_purchases=200, ending_raw=300, ending_packaging=50,
        )
        self.assertEqual(cogs, Decimal('1450.00'))

    def test_income_statement(self):
        statement = formulas.generate_income_statement(
            sales_revenue=10000, cogs=4000, operating_expenses=3000, other_expenses=500
        )
        self.assertEqual(statement['gross_profit'], Decimal('6000.00'))
        self.assertEqual(statement['gross_profit_margin'], Decimal('60.00'))
        self.assertEqual(statement['operating_income'], Decimal('3000.00'))
        self.assertEqual(statement['operating_margin'], Decimal('30.00'))
        self.assertEqual(statement['net_profit'], Decimal('2500.00'))
        self.assertEqual(statement['net_profit_margin'], Decimal('25.00'))

    def test_recipe_costing(self):
        total = formulas.calculate_total_recipe_cost([(Decimal('0.5'), Decimal('80')), (2, '7.50')])
        self.assertEqual(total, Decimal('55.00'))
        self.assertEqual(formulas.calculate_cost_per_serving(total, 4), Decimal('13.75'))
        self.assertEqual(formulas.calculate_cost_per_serving(total, 0), Decimal('0'))
        self.assertEqual(formulas.calculate_labor_cost(30, 60), Decimal('30.00'))
        self.assertEqual(formulas.calculate_overhead(100), Decimal('15.00'))
        self.assertEqual(formulas.calculate_selling_price(40, 50), Decimal('60.00'))

    def test_recipe_profitability(self):
        result = formulas.calculate_recipe_profitability(30, 50)
        self.assertEqual(result['profit_per_unit'], Decimal('20.00'))
        self.assertEqual(result['profit_margin'], Decimal('40.00'))
        self.assertEqual(formulas.calculate_recipe_profitability(30, 0)['profit_margin'], Decimal('0'))

    def test_break_even(self):
        self.assertEqual(formulas.calculate_break_even_units(5000, 60, 35), Decimal('200.00'))
        self.assertEqual(formulas.calculate_break_even_revenue(5000, 60, 35), Decimal('12000.00'))
        self.assertEqual(formulas.calculate_break_even_units(5000, 35, 35), Decimal('0'))
        # Revenue uses the unrounded unit count
        self.assertEqual(formulas.calculate_break_even_units(1000, 30, 7), Decimal('43.48'))
        self.assertEqual(formulas.calculate_break_even_revenue(1000, 30, 7), Decimal('1304.35'))
        self.assertEqual(formulas.calculate_break_even_revenue(5000, 35, 35), Decimal('0'))

    def test_percent_change(self):
        self.assertEqual(formulas.percent_change(150, 100), Decimal('50.00'))
        self.assertEqual(formulas.percent_change(50, 0), Decimal('100'))
        self.assertEqual(formulas.percent_change(0, 0), Decimal('0'))

    def test_formatting(self):
        self.assertEqual(formulas.format_currency(Decimal('1234.5')), '₱1,234.50')
        self.assertEqual(formulas.format_currency(-20), '-₱20.00')
        self.assertEqual(formulas.format_percentage(Decimal('12.345')), '12.35%')
        self.assertEqual(formulas.format_percentage(Decimal('2.5'), decimals=0), '3%')
        self.assertEqual(formulas.format_percentage(-7.125), '-7.13%')


class AuthTests(TestCase):
    """Registration, simplejwt login and the current-user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'aling_nena',
            'email': 'Nena@Example.com',
            'password': 'Kare-kare2024!',
            'password_confirm': 'Kare-kare2024!',
            'name': 'Aling Nena',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'nena@example.com')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='User').exists())

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'email': 'mismatch@example.com',
            'password': 'Kare-kare2024!',
            'password_confirm': 'Different2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_and_me(self):
        user = TestDataFactory.create_user(username='vendor', password='Sinigang2024!')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'vendor', 'password': 'Sinigang2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.authenticate_tokens(response.data['access'])
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], user.id)
        self.assertFalse(response.data['is_admin'])
        self.assertIsNone(response.data['business'])
        self.assertIsNone(response.data['impersonated_by'])

    def test_login_disabled_user(self):
        user = TestDataFactory.create_user(username='disabled', password='Sinigang2024!')
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'disabled', 'password': 'Sinigang2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_sync_updates_name(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/auth/sync/', {'name': 'Mang Tomas'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.name, 'Mang Tomas')
        self.assertTrue(AuditLog.objects.filter(action='user_sync', user=user).exists())


@override_settings(SUPABASE_JWT_SECRET=SUPABASE_SECRET)
class SupabaseJWTAuthenticationTests(TestCase):
    """Supabase-issued access tokens map to local users"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def make_token(self, sub='3f7c1a52-user', email='oauth@example.com', expires_in=3600, **extra):
        payload = {
            'sub': sub,
            'email': email,
            'aud': 'authenticated',
            'exp': int(time.time()) + expires_in,
            'user_metadata': {'full_name': 'Google User'},
        }
        payload.update(extra)
        return jwt.encode(payload, SUPABASE_SECRET, algorithm='HS256')

    def test_first_request_creates_user(self):
        self.client.authenticate_tokens(self.make_token())
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user = User.objects.get(supabase_id='3f7c1a52-user')
        self.assertEqual(user.email, 'oauth@example.com')
        self.assertEqual(user.name, 'Google User')
        self.assertFalse(user.has_usable_password())

    def test_links_existing_account_by_email(self):
        existing = TestDataFactory.create_user(username='local', email='oauth@example.com')
        self.client.authenticate_tokens(self.make_token())
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], existing.id)
        existing.refresh_from_db()
        self.assertEqual(existing.supabase_id, '3f7c1a52-user')

    def test_expired_token_is_rejected(self):
        self.client.authenticate_tokens(self.make_token(expires_in=-60))
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_simplejwt_token_still_accepted(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], user.id)

    def test_disabled_user_is_rejected(self):
        TestDataFactory.create_user(username='gone', email='gone@example.com')
        User.objects.filter(username='gone').update(is_active=False, supabase_id='gone-id')
        self.client.authenticate_tokens(self.make_token(sub='gone-id', email='gone@example.com'))
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class TokenCacheTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.now = 1000.0
        self.tokens = TokenCache(skew_seconds=300, clock=lambda: self.now)

    def test_token_goes_stale_before_expiry(self):
        self.tokens.store({'access_token': 'abc', 'refresh_token': 'r1', 'expires_at': 2000})
        self.now = 1600
        self.assertEqual(self.tokens.get('abc')['refresh_token'], 'r1')
        self.now = 1701
        self.assertIsNone(self.tokens.get('abc'))

    def test_expiry_sources(self):
        self.assertEqual(self.tokens.store({'access_token': 'abc', 'expires_in': 3600}), 1000 + 3600 - 300)
        token = jwt.encode({'sub': 'u1', 'exp': 5000}, SUPABASE_SECRET, algorithm='HS256')
        self.assertEqual(self.tokens.store({'access_token': token}), 5000 - 300)

    def test_session_inside_skew_is_not_kept(self):
        self.assertEqual(self.tokens.store({'access_token': 'abc', 'expires_at': 1200}), 0)
        self.assertIsNone(self.tokens.get('abc'))

    def test_tokens_are_independent(self):
        self.tokens.store({'access_token': 'abc', 'expires_at': 5000})
        self.tokens.store({'access_token': 'xyz', 'expires_at': 5000})
        self.tokens.discard('abc')
        self.assertIsNone(self.tokens.get('abc'))
        self.assertIsNotNone(self.tokens.get('xyz'))


def fake_response(status_code=200, data=None):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b'{}' if data is not None else b''
    response.json.return_value = data
    return response


def supabase_token(sub='sb-remote', expires_in=3600):
    """Access token signed with a secret this service does not know"""
    payload = {'sub': sub, 'aud': 'authenticated', 'exp': int(time.time()) + expires_in}
    return jwt.encode(payload, 'another-projects-secret-with-enough-length-987', algorithm='HS256')


class SupabaseAuthClientTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.http = mock.Mock()
        self.client_ = SupabaseAuthClient(
            base_url='https://project.supabase.co', anon_key='anon', session=self.http
        )

    def test_not_configured(self):
        client = SupabaseAuthClient(base_url='', anon_key='', session=self.http)
        with self.assertRaises(SupabaseAuthError) as ctx:
            client.get_user('token')
        self.assertEqual(ctx.exception.status, 503)

    def test_sign_in_stores_session(self):
        self.http.request.return_value = fake_response(200, {
            'access_token': 'access-1', 'refresh_token': 'refresh-1',
            'expires_at': int(time.time()) + 3600, 'user': {'id': 'u1'},
        })
        session = self.client_.sign_in_with_password('a@b.com', 'secret1')
        self.assertEqual(session['access_token'], 'access-1')
        args, kwargs = self.http.request.call_args
        self.assertEqual(args[1], 'https://project.supabase.co/auth/v1/token')
        self.assertEqual(kwargs['params'], {'grant_type': 'password'})
        self.assertEqual(kwargs['headers']['apikey'], 'anon')

        # The signed-in user is known without another round trip
        self.assertEqual(self.client_.get_user('access-1'), {'id': 'u1'})
        self.assertEqual(self.http.request.call_count, 1)

    def test_error_message_from_response(self):
        self.http.request.return_value = fake_response(400, {'error_description': 'Invalid login credentials'})
        with self.assertRaises(SupabaseAuthError) as ctx:
            self.client_.sign_in_with_password('a@b.com', 'wrong-pass')
        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, 'Invalid login credentials')

    def test_timeout(self):
        self.http.request.side_effect = requests.Timeout()
        with self.assertRaises(SupabaseAuthError) as ctx:
            self.client_.get_user('token')
        self.assertEqual(ctx.exception.status, 408)

    def test_connection_error(self):
        self.http.request.side_effect = requests.ConnectionError('down')
        with self.assertRaises(SupabaseAuthError) as ctx:
            self.client_.get_user('token')
        self.assertEqual(ctx.exception.status, 503)

    def test_get_user_is_cached_until_stale(self):
        self.http.request.return_value = fake_response(200, {'id': 'sb-remote'})
        token = supabase_token()
        self.client_.get_user(token)
        self.client_.get_user(token)
        self.assertEqual(self.http.request.call_count, 1)

        near_expiry = supabase_token(expires_in=120)
        self.client_.get_user(near_expiry)
        self.client_.get_user(near_expiry)
        self.assertEqual(self.http.request.call_count, 3)

    def test_fresh_session_is_not_refreshed(self):
        self.client_.token_cache.store({
            'access_token': 'a1', 'refresh_token': 'r1', 'expires_at': int(time.time()) + 3600,
            'user': {'id': 'u1'},
        })
        session, refreshed = self.client_.ensure_fresh_session('r1', 'a1')
        self.assertFalse(refreshed)
        self.assertEqual(session['access_token'], 'a1')
        self.assertEqual(session['user'], {'id': 'u1'})
        self.http.request.assert_not_called()

    def test_stale_session_is_refreshed(self):
        self.client_.token_cache.store({'access_token': 'a1', 'refresh_token': 'r1',
                                        'expires_at': int(time.time()) + 200})
        self.http.request.return_value = fake_response(200, {
            'access_token': 'a2', 'refresh_token': 'r2', 'expires_at': int(time.time()) + 3600,
        })
        session, refreshed = self.client_.ensure_fresh_session('r1', 'a1')
        self.assertTrue(refreshed)
        self.assertEqual(session['access_token'], 'a2')
        self.assertEqual(self.http.request.call_args[1]['params'], {'grant_type': 'refresh_token'})
        self.assertEqual(self.http.request.call_args[1]['json'], {'refresh_token': 'r1'})
        self.assertIsNotNone(self.client_.token_cache.get('a2'))

    def test_refresh_without_token(self):
        with self.assertRaises(SupabaseAuthError) as ctx:
            self.client_.ensure_fresh_session('', None)
        self.assertEqual(ctx.exception.status, 401)

    def test_sign_out_discards_session(self):
        self.client_.token_cache.store({'access_token': 'a', 'expires_at': int(time.time()) + 3600})
        self.http.request.return_value = fake_response(204)
        self.client_.sign_out('a')
        self.assertIsNone(self.client_.token_cache.get('a'))


@override_settings(SUPABASE_JWT_SECRET='')
class SupabaseRemoteVerificationTests(TestCase):
    """Without the JWT secret, Supabase tokens are checked against Supabase itself"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.http = mock.Mock()
        upstream = SupabaseAuthClient(base_url='https://project.supabase.co', anon_key='anon', session=self.http)
        patcher = mock.patch('kwentamo.core.authentication.get_auth_client', return_value=upstream)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_token_is_checked_once_while_fresh(self):
        self.http.request.return_value = fake_response(200, {
            'id': 'sb-remote', 'email': 'nena@example.com', 'user_metadata': {'name': 'Aling Nena'},
        })
        self.client.authenticate_tokens(supabase_token())
        first = self.client.get('/api/v1/auth/me/')
        second = self.client.get('/api/v1/auth/me/')
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        user = User.objects.get(supabase_id='sb-remote')
        self.assertEqual(second.data['id'], user.id)
        self.assertEqual(user.name, 'Aling Nena')
        self.assertEqual(self.http.request.call_count, 1)
        self.assertEqual(self.http.request.call_args[0][1], 'https://project.supabase.co/auth/v1/user')

    def test_rejected_token(self):
        self.http.request.return_value = fake_response(401, {'msg': 'invalid JWT'})
        self.client.authenticate_tokens(supabase_token())
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_first_party_token_skips_supabase(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.http.request.assert_not_called()


class SupabaseViewTests(TestCase):
    """Sign-up/sign-in proxy endpoints with the upstream client mocked out"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        patcher = mock.patch('kwentamo.core.views.get_auth_client')
        self.get_client = patcher.start()
        self.addCleanup(patcher.stop)
        self.upstream = self.get_client.return_value

    def test_sign_in_syncs_local_user(self):
        self.upstream.sign_in_with_password.return_value = {
            'access_token': 'access', 'refresh_token': 'refresh',
            'user': {'id': 'sb-123', 'email': 'cook@example.com', 'user_metadata': {'name': 'Cook'}},
        }
        response = self.client.post('/api/v1/auth/supabase/sign-in/', {
            'email': 'cook@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['session']['access_token'], 'access')
        user = User.objects.get(supabase_id='sb-123')
        self.assertEqual(response.data['user']['id'], user.id)
        self.assertTrue(AuditLog.objects.filter(action='login', user=user).exists())

    def test_sign_in_error_is_passed_through(self):
        self.upstream.sign_in_with_password.side_effect = SupabaseAuthError('Invalid login credentials', 400)
        response = self.client.post('/api/v1/auth/supabase/sign-in/', {
            'email': 'cook@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid login credentials')

    def test_sign_up_requiring_confirmation(self):
        self.upstream.sign_up.return_value = {'id': 'sb-9', 'email': 'new@example.com'}
        response = self.client.post('/api/v1/auth/supabase/sign-up/', {
            'email': 'new@example.com', 'password': 'secret123', 'name': 'New',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['confirmation_required'])
        self.assertIsNone(response.data['session'])

    def test_sign_up_validation(self):
        response = self.client.post('/api/v1/auth/supabase/sign-up/', {
            'email': 'not-an-email', 'password': '123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)
        self.assertIn('password', response.data)

    def test_expired_refresh_forces_sign_in(self):
        self.upstream.ensure_fresh_session.side_effect = SupabaseAuthError('Invalid Refresh Token', 400)
        response = self.client.post('/api/v1/auth/supabase/refresh/', {'refresh_token': 'r'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Session expired. Please sign in again.')

    def test_upstream_outage_on_refresh(self):
        self.upstream.ensure_fresh_session.side_effect = SupabaseAuthError('Authentication service unavailable', 503)
        response = self.client.post('/api/v1/auth/supabase/refresh/', {'refresh_token': 'r'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_refresh_keeps_fresh_token(self):
        self.upstream.ensure_fresh_session.return_value = ({'access_token': 'a1', 'refresh_token': 'r'}, False)
        response = self.client.post('/api/v1/auth/supabase/refresh/', {
            'refresh_token': 'r', 'access_token': 'a1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['refreshed'])
        self.assertEqual(response.data['session']['access_token'], 'a1')
        self.upstream.ensure_fresh_session.assert_called_once_with('r', 'a1')

    def test_sign_out_requires_token(self):
        response = self.client.post('/api/v1/auth/supabase/sign-out/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_sign_out(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer some-access-token')
        response = self.client.post('/api/v1/auth/supabase/sign-out/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.upstream.sign_out.assert_called_once_with('some-access-token')


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.own_log = create_audit_log(
            user=self.user, action='create', model_name='Ingredient', object_id=1, object_name='Rice'
        )
        self.other_log = create_audit_log(
            user=self.other, action='delete', model_name='Expense', object_id=2, object_name='Rent'
        )
        self.client = AuthenticatedAPIClient()

    def test_user_sees_only_own_logs(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['id'], self.own_log.id)

    def test_staff_sees_all_logs(self):
        admin = TestDataFactory.create_user(is_staff=True)
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['object_name'], 'Rent')

    def test_other_users_log_is_forbidden(self):
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{self.other_log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bad_date_filter(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_fields_skip_logging(self):
        self.assertIsNone(create_audit_log(user=self.user, action='create'))


class CheckCacheCommandTests(TestCase):
    def test_command_reports_ok(self):
        out = StringIO()
        call_command('check_cache', stdout=out)
        self.assertIn('Dashboard cache: ok', out.getvalue())
