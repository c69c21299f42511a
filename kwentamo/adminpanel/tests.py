"""
Test suite for the admin panel
Tests: staff-only access, platform stats, user management, impersonation,
cross-user listings, financial summary, audit log, learned receipt categories
"""
from datetime import date
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.receipts.models import CategoryMemory


class AdminTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user(username='admin', is_staff=True, name='Admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

        self.owner = TestDataFactory.create_user(username='rosa', email='rosa@carinderia.ph', name='Rosa')
        TestDataFactory.create_business(self.owner, business_name="Rosa's Carinderia")
        self.ingredient = TestDataFactory.create_ingredient(self.owner, name='Pork', cost_per_unit='200',
                                                            current_stock='3', reorder_level='5')
        self.recipe = TestDataFactory.create_recipe(self.owner, name='Adobo', selling_price='80',
                                                    servings=4, category='Ulam', lines=[(self.ingredient, '1')])
        TestDataFactory.create_sale(self.owner, self.recipe, quantity=2, sale_date=date(2026, 3, 5))
        TestDataFactory.create_expense(self.owner, amount='3000', category='RENT', expense_date=date(2026, 3, 1))
        TestDataFactory.create_purchase(self.owner, item_name='Soy sauce', quantity='2', unit_cost='45')

        self.other = TestDataFactory.create_user(username='juan', name='Juan')
        TestDataFactory.create_expense(self.other, amount='500', category='UTILITIES', expense_type='VARIABLE',
                                       expense_date=date(2026, 3, 2))


class AdminAccessTests(AdminTestCase):
    ENDPOINTS = [
        '/api/v1/admin/stats/', '/api/v1/admin/activity/', '/api/v1/admin/low-stock/',
        '/api/v1/admin/revenue-chart/', '/api/v1/admin/users/', '/api/v1/admin/inventory/',
        '/api/v1/admin/inventory/stats/', '/api/v1/admin/inventory/transactions/', '/api/v1/admin/recipes/',
        '/api/v1/admin/recipes/stats/', '/api/v1/admin/sales/', '/api/v1/admin/sales/stats/',
        '/api/v1/admin/expenses/', '/api/v1/admin/expenses/stats/', '/api/v1/admin/financial-summary/',
        '/api/v1/admin/audit-log/', '/api/v1/admin/category-memory/',
    ]

    def test_non_staff_is_forbidden(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.owner)
        for url in self.ENDPOINTS:
            with self.subTest(url=url):
                self.assertEqual(client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_unauthorized(self):
        self.client.logout()
        response = self.client.get('/api/v1/admin/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_staff_can_read_everything(self):
        for url in self.ENDPOINTS:
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)


class AdminDashboardTests(AdminTestCase):
    def test_stats(self):
        today = timezone.localdate()
        TestDataFactory.create_sale(self.owner, self.recipe, quantity=1, sale_date=today)
        response = self.client.get('/api/v1/admin/stats/')
        overview = response.data['overview']
        self.assertEqual(overview['total_users'], 3)
        self.assertEqual(overview['total_recipes'], 1)
        self.assertEqual(overview['total_sales'], 2)
        self.assertEqual(overview['total_expenses'], 2)
        self.assertEqual(overview['total_inventory_items'], 2)
        self.assertEqual(overview['low_stock_alerts'], 1)
        self.assertEqual(response.data['financial']['monthly_revenue'], 80.0)

    def test_activity_merges_record_types(self):
        response = self.client.get('/api/v1/admin/activity/?limit=10')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(item['type'] for item in response.data),
                         ['expense', 'expense', 'purchase', 'sale'])
        sale = next(item for item in response.data if item['type'] == 'sale')
        self.assertEqual(sale['description'], 'Sold 2 x Adobo')
        self.assertEqual(sale['user'], 'rosa@carinderia.ph')

    def test_activity_limit(self):
        response = self.client.get('/api/v1/admin/activity/?limit=2')
        self.assertEqual(len(response.data), 2)

    def test_low_stock(self):
        response = self.client.get('/api/v1/admin/low-stock/')
        self.assertEqual(response.data, [{
            'id': self.ingredient.id, 'name': 'Pork', 'quantity': 2.5, 'unit': 'kg', 'reorder_level': 5.0,
            'user_name': 'Rosa', 'user_email': 'rosa@carinderia.ph',
        }])

    def test_revenue_chart(self):
        response = self.client.get('/api/v1/admin/revenue-chart/')
        self.assertEqual(len(response.data), 6)

    @mock.patch('django.utils.timezone.localdate', return_value=date(2026, 5, 20))
    def test_revenue_chart_spans_new_year(self, _localdate):
        response = self.client.get('/api/v1/admin/revenue-chart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['label'] for row in response.data],
                         ['Dec 2025', 'Jan 2026', 'Feb 2026', 'Mar 2026', 'Apr 2026', 'May 2026'])
        self.assertEqual((response.data[0]['start'], response.data[0]['end']), ('2025-12-01', '2025-12-31'))
        march = response.data[3]
        self.assertEqual(march['revenue'], 160.0)
        self.assertEqual(march['expenses'], 3500.0)
        self.assertEqual(response.data[-1]['end'], '2026-05-20')


class AdminUserTests(AdminTestCase):
    def test_list_users_with_counts(self):
        response = self.client.get('/api/v1/admin/users/?search=carinderia')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        row = response.data['results'][0]
        self.assertEqual(row['username'], 'rosa')
        self.assertEqual(row['business_name'], "Rosa's Carinderia")
        self.assertEqual(row['recipes_count'], 1)
        self.assertEqual(row['sales_count'], 1)
        self.assertEqual(row['ingredients_count'], 1)

    def test_user_detail(self):
        response = self.client.get(f'/api/v1/admin/users/{self.owner.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business']['business_name'], "Rosa's Carinderia")
        self.assertEqual(response.data['stats']['revenue'], 160.0)
        self.assertEqual(response.data['stats']['profit'], 60.0)
        self.assertEqual(response.data['stats']['expenses_total'], 3000.0)
        self.assertEqual(response.data['stats']['purchases_total'], 90.0)
        self.assertEqual(response.data['recent_sales'][0]['owner']['username'], 'rosa')
        self.assertEqual(response.data['recent_recipes'][0]['name'], 'Adobo')

    def test_user_detail_without_business(self):
        response = self.client.get(f'/api/v1/admin/users/{self.other.id}/')
        self.assertIsNone(response.data['business'])
        self.assertEqual(response.data['stats']['sales_count'], 0)

    def test_unknown_user(self):
        response = self.client.get('/api/v1/admin/users/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ImpersonationTests(AdminTestCase):
    def test_impersonate(self):
        response = self.client.post(f'/api/v1/admin/users/{self.owner.id}/impersonate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], self.owner.id)
        self.assertEqual(response.data['impersonated_by'], self.admin.id)
        self.assertIn('refresh', response.data)
        self.assertTrue(AuditLog.objects.filter(action='impersonate_start', object_id=self.owner.id).exists())

        client = AuthenticatedAPIClient()
        client.authenticate_tokens(response.data['access'])
        me = client.get('/api/v1/auth/me/')
        self.assertEqual(me.data['id'], self.owner.id)
        self.assertEqual(me.data['impersonated_by'], self.admin.id)

    def test_actions_while_impersonating_record_the_admin(self):
        response = self.client.post(f'/api/v1/admin/users/{self.owner.id}/impersonate/')
        client = AuthenticatedAPIClient()
        client.authenticate_tokens(response.data['access'])
        client.post('/api/v1/expenses/', {'category': 'RENT', 'description': 'Fixed by support', 'amount': '1'},
                    format='json')
        log = AuditLog.objects.get(action='create', model_name='Expense')
        self.assertEqual(log.user_id, self.owner.id)
        self.assertEqual(log.impersonator_id, self.admin.id)

    def test_cannot_impersonate_self(self):
        response = self.client.post(f'/api/v1/admin/users/{self.admin.id}/impersonate/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_impersonate_staff(self):
        colleague = TestDataFactory.create_user(is_staff=True)
        response = self.client.post(f'/api/v1/admin/users/{colleague.id}/impersonate/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_impersonate_disabled_user(self):
        self.other.is_active = False
        self.other.save()
        response = self.client.post(f'/api/v1/admin/users/{self.other.id}/impersonate/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_staff_cannot_impersonate(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.owner)
        response = client.post(f'/api/v1/admin/users/{self.other.id}/impersonate/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminListingTests(AdminTestCase):
    def test_inventory(self):
        response = self.client.get('/api/v1/admin/inventory/?search=soy')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['owner']['username'], 'rosa')

        response = self.client.get('/api/v1/admin/inventory/?type=packaging')
        self.assertEqual(response.data['count'], 0)

    def test_inventory_stats_and_transactions(self):
        response = self.client.get('/api/v1/admin/inventory/stats/')
        self.assertEqual(response.data['total_items'], 1)
        self.assertEqual(response.data['total_spent'], 90.0)
        self.assertEqual(response.data['low_stock_ingredients'], 1)

        response = self.client.get('/api/v1/admin/inventory/transactions/?type=purchase')
        self.assertEqual(response.data['count'], 1)

    def test_recipes(self):
        response = self.client.get('/api/v1/admin/recipes/?category=ulam')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['quantity_sold'], 2)

        response = self.client.get('/api/v1/admin/recipes/stats/')
        self.assertEqual(response.data['top_selling'][0]['name'], 'Adobo')
        self.assertEqual(response.data['categories'], [{'category': 'Ulam', 'count': 1}])

    def test_sales(self):
        response = self.client.get('/api/v1/admin/sales/?date_from=2026-03-01&date_to=2026-03-31')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['summary']['total_revenue'], 160.0)

        response = self.client.get('/api/v1/admin/sales/?date_from=bad')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/admin/sales/stats/')
        self.assertEqual(response.data['all_time'], {'count': 1, 'revenue': 160.0})

    def test_expenses(self):
        response = self.client.get('/api/v1/admin/expenses/?type=variable')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['summary']['total_amount'], 500.0)
        self.assertEqual(response.data['results'][0]['owner']['username'], 'juan')

        response = self.client.get('/api/v1/admin/expenses/stats/')
        self.assertEqual(response.data['all_time'], {'count': 2, 'amount': 3500.0})

    def test_financial_summary(self):
        response = self.client.get('/api/v1/admin/financial-summary/?date_from=2026-03-01&date_to=2026-03-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['revenue'], {'total': 160.0, 'sales_count': 1})
        self.assertEqual(response.data['costs']['cogs'], 100.0)
        self.assertEqual(response.data['costs']['operating_expenses'], 3500.0)
        self.assertEqual(response.data['profit']['gross'], 60.0)
        self.assertEqual(response.data['profit']['net'], -3440.0)

    def test_audit_log(self):
        self.client.post(f'/api/v1/admin/users/{self.owner.id}/impersonate/')
        response = self.client.get('/api/v1/admin/audit-log/?action=impersonate_start')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['user']['username'], 'admin')


class AdminCategoryMemoryTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.meralco = CategoryMemory.objects.create(user=self.owner, item_pattern='meralco', category='EXPENSE',
                                                     sub_category='UTILITIES', use_count=4)
        CategoryMemory.objects.create(user=self.admin, item_pattern='bigas', category='INVENTORY')

    def test_list_across_users(self):
        response = self.client.get('/api/v1/admin/category-memory/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['item_pattern'], 'meralco')
        self.assertEqual(response.data['results'][0]['user_email'], 'rosa@carinderia.ph')

        response = self.client.get(f'/api/v1/admin/category-memory/?user={self.owner.id}&category=expense')
        self.assertEqual(response.data['count'], 1)

    def test_delete_one(self):
        response = self.client.delete(f'/api/v1/admin/category-memory/{self.meralco.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(CategoryMemory.objects.count(), 1)
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='CategoryMemory').exists())

        response = self.client.delete(f'/api/v1/admin/category-memory/{self.meralco.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_clear_all(self):
        response = self.client.delete('/api/v1/admin/category-memory/')
        self.assertEqual(response.data['deleted'], 2)
        self.assertFalse(CategoryMemory.objects.exists())

    def test_owner_cannot_clear(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.owner)
        response = client.delete('/api/v1/admin/category-memory/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(CategoryMemory.objects.count(), 2)
