"""
Test suite for the expenses module
Tests: expense CRUD, choice coercion, filters, bulk import, monthly-equivalent stats
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.expenses.models import Expense


class ExpenseAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_expense(self):
        response = self.client.post('/api/v1/expenses/', {
            'category': 'UTILITIES', 'expense_type': 'VARIABLE', 'description': 'Meralco',
            'amount': '600.00', 'frequency': 'WEEKLY', 'expense_date': '2026-03-02',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['monthly_amount'], Decimal('2400.00'))
        self.assertEqual(response.data['category_display'], 'Utilities')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Expense').exists())

    def test_lowercase_choices_are_accepted(self):
        response = self.client.post('/api/v1/expenses/', {
            'category': 'rent', 'expense_type': 'fixed', 'description': 'Stall rent',
            'amount': '3000', 'frequency': 'monthly',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        expense = Expense.objects.get(user=self.user)
        self.assertEqual((expense.category, expense.expense_type, expense.frequency),
                         ('RENT', 'FIXED', 'MONTHLY'))

    def test_rejects_zero_amount_and_blank_description(self):
        response = self.client.post('/api/v1/expenses/', {
            'category': 'RENT', 'description': '   ', 'amount': '0',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)
        self.assertIn('description', response.data)

    def test_rejects_unknown_category(self):
        response = self.client.post('/api/v1/expenses/', {
            'category': 'LUXURY', 'description': 'Yacht', 'amount': '100',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data)

    def test_filters(self):
        TestDataFactory.create_expense(self.user, category='RENT', expense_date=date(2026, 1, 5),
                                       description='January rent')
        TestDataFactory.create_expense(self.user, category='LABOR', expense_type='VARIABLE',
                                       expense_date=date(2026, 2, 5), description='Helper wage')
        TestDataFactory.create_expense(TestDataFactory.create_user(), category='RENT')

        response = self.client.get('/api/v1/expenses/?category=rent')
        self.assertEqual([row['description'] for row in response.data], ['January rent'])

        response = self.client.get('/api/v1/expenses/?type=variable')
        self.assertEqual([row['description'] for row in response.data], ['Helper wage'])

        response = self.client.get('/api/v1/expenses/?date_from=2026-02-01&date_to=2026-02-28')
        self.assertEqual([row['description'] for row in response.data], ['Helper wage'])

        response = self.client.get('/api/v1/expenses/?search=wage')
        self.assertEqual(len(response.data), 1)

    def test_invalid_date_filter(self):
        response = self.client.get('/api/v1/expenses/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        expense = TestDataFactory.create_expense(self.user, amount='1000')
        response = self.client.patch(f'/api/v1/expenses/{expense.id}/', {'amount': '1200'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], Decimal('1200.00'))
        self.assertIn('amount', AuditLog.objects.get(action='update', model_name='Expense').changes)

        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.filter(pk=expense.pk).exists())

    def test_other_users_expense_is_not_found(self):
        expense = TestDataFactory.create_expense(TestDataFactory.create_user())
        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Expense.objects.filter(pk=expense.pk).exists())


class ExpenseBulkCreateTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_bulk_create(self):
        response = self.client.post('/api/v1/expenses/bulk/', {'expenses': [
            {'category': 'RENT', 'description': 'Rent', 'amount': '5000'},
            {'category': 'utilities', 'expense_type': 'variable', 'description': 'Water', 'amount': '300'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        log = AuditLog.objects.get(action='bulk_create', model_name='Expense')
        self.assertEqual(log.changes['total'], '5300.00')

    def test_bulk_create_reports_row_errors(self):
        response = self.client.post('/api/v1/expenses/bulk/', [
            {'category': 'RENT', 'description': 'Rent', 'amount': '5000'},
            {'category': 'RENT', 'description': 'Broken', 'amount': '-5'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['index'], 1)
        self.assertFalse(Expense.objects.filter(user=self.user).exists())

    def test_bulk_create_requires_rows(self):
        response = self.client.post('/api/v1/expenses/bulk/', {'expenses': 'none'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ExpenseStatsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_expense(self.user, amount='10000', category='RENT')
        TestDataFactory.create_expense(self.user, amount='600', category='UTILITIES',
                                       expense_type='VARIABLE', frequency='WEEKLY')
        TestDataFactory.create_expense(self.user, amount='1200', category='OTHER',
                                       expense_type='OTHER', frequency='YEARLY')

    def test_stats(self):
        response = self.client.get('/api/v1/expenses/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 11800.0)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['monthly_equivalent_total'], 12500.0)
        self.assertEqual(response.data['by_type']['VARIABLE']['monthly_amount'], 2400.0)
        self.assertEqual(response.data['by_type']['OTHER']['monthly_amount'], 100.0)
        self.assertEqual([row['category'] for row in response.data['by_category']],
                         ['RENT', 'UTILITIES', 'OTHER'])

    def test_stats_respect_filters(self):
        response = self.client.get('/api/v1/expenses/stats/?type=FIXED')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['monthly_equivalent_total'], 10000.0)

    def test_stats_with_no_expenses(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/expenses/stats/')
        self.assertEqual(response.data['total'], 0.0)
        self.assertEqual(response.data['by_category'], [])
