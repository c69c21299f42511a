"""
Test suite for the receipts module
Tests: line parsing, categorisation, learned categories, total checks and saving reviewed items
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.expenses.models import Expense
from kwentamo.purchasing.models import Purchase, InventoryTransaction
from kwentamo.receipts.models import CategoryMemory
from kwentamo.receipts.parser import parse_amount, parse_line, normalize_item_name, classify

RECEIPT = """Puregold Cubao
TIN 123-456-789
01/15/2026 10:32
2 kg Pork Liempo 560.00
Itlog 30 x 8.00 240.00
Meralco bill 2,450.75
Mystery Item 50.00
SUBTOTAL 3,300.75
TOTAL 3,300.75
CASH 3,500.00
"""


class ReceiptParserTests(TestCase):
    def test_parse_amount(self):
        self.assertEqual(parse_amount('₱1,234.50'), Decimal('1234.50'))
        self.assertEqual(parse_amount('P560'), Decimal('560'))
        self.assertIsNone(parse_amount('abc'))

    def test_normalize_item_name(self):
        self.assertEqual(normalize_item_name('Coke 1.5L'), 'coke')
        self.assertEqual(normalize_item_name('Mystery Item 1kg'), 'mystery item')

    def test_line_layouts(self):
        item = parse_line('Bigas 25kg @ 52.00')
        self.assertEqual(item['name'], 'Bigas')
        self.assertEqual(item['quantity'], Decimal('25'))
        self.assertEqual(item['unit'], 'kg')
        self.assertEqual(item['total_cost'], Decimal('1300.00'))

        item = parse_line('3 Sardinas 66.00')
        self.assertEqual(item['quantity'], Decimal('3'))
        self.assertEqual(item['unit'], 'pcs')
        self.assertEqual(item['unit_cost'], Decimal('22.0000'))

        item = parse_line('Coke 1.5L 75.00')
        self.assertEqual(item['name'], 'Coke 1.5L')
        self.assertEqual(item['quantity'], Decimal('1'))

        self.assertIsNone(parse_line('Hello world'))

    def test_keyword_classification(self):
        self.assertEqual(classify('Pork Liempo'), ('INVENTORY', 'RAW_MATERIAL', 'keyword'))
        self.assertEqual(classify('Styro boxes'), ('INVENTORY', 'PACKAGING', 'keyword'))
        self.assertEqual(classify('Meralco bill'), ('EXPENSE', 'UTILITIES', 'keyword'))
        self.assertEqual(classify('Mystery Item'), ('UNKNOWN', '', 'none'))


class ReceiptParseAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_parse_receipt(self):
        response = self.client.post('/api/v1/receipts/parse-text/', {'text': RECEIPT}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['vendor'], {'name': 'Puregold Cubao'})
        self.assertEqual([item['name'] for item in response.data['items']],
                         ['Pork Liempo', 'Itlog', 'Meralco bill', 'Mystery Item'])
        self.assertEqual(response.data['inventory_count'], 2)
        self.assertEqual(response.data['expense_count'], 1)
        self.assertEqual(response.data['unknown_count'], 1)

        pork = response.data['items'][0]
        self.assertEqual(pork['quantity'], 2.0)
        self.assertEqual(pork['unit'], 'kg')
        self.assertEqual(pork['unit_cost'], 280.0)
        self.assertEqual(pork['inventory_type'], 'RAW_MATERIAL')
        meralco = response.data['items'][2]
        self.assertEqual(meralco['total_cost'], 2450.75)
        self.assertEqual(meralco['expense_category'], 'UTILITIES')
        self.assertIsNone(meralco['inventory_type'])

        self.assertEqual(response.data['total_validation'], {
            'stated_total': 3300.75, 'computed_total': 3300.75, 'difference': 0.0, 'matches': True,
        })

    def test_total_mismatch_and_given_vendor(self):
        response = self.client.post('/api/v1/receipts/parse-text/', {
            'text': 'Sugar 100.00\nTOTAL 150.00', 'vendor': 'Aling Nena',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['vendor'], {'name': 'Aling Nena'})
        self.assertEqual(response.data['total_validation']['difference'], 50.0)
        self.assertFalse(response.data['total_validation']['matches'])

    def test_without_total_line(self):
        response = self.client.post('/api/v1/receipts/parse-text/', {'text': 'Sugar 100.00'}, format='json')
        self.assertIsNone(response.data['vendor']['name'])
        self.assertIsNone(response.data['total_validation']['stated_total'])
        self.assertIsNone(response.data['total_validation']['matches'])

    def test_learned_category_wins(self):
        memory = CategoryMemory.objects.create(user=self.user, item_pattern='mystery item', category='EXPENSE',
                                               sub_category='EQUIPMENT')
        CategoryMemory.objects.create(user=TestDataFactory.create_user(), item_pattern='meralco bill',
                                      category='INVENTORY')

        response = self.client.post('/api/v1/receipts/parse-text/', {'text': RECEIPT}, format='json')
        mystery = response.data['items'][3]
        self.assertEqual(mystery['category'], 'EXPENSE')
        self.assertEqual(mystery['expense_category'], 'EQUIPMENT')
        self.assertEqual(mystery['source'], 'memory')
        # Another user's memory does not apply
        self.assertEqual(response.data['items'][2]['category'], 'EXPENSE')
        self.assertEqual(response.data['unknown_count'], 0)

        memory.refresh_from_db()
        self.assertEqual(memory.use_count, 1)

    def test_rejects_empty_text(self):
        response = self.client.post('/api/v1/receipts/parse-text/', {'text': '   \n '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('text', response.data)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.post('/api/v1/receipts/parse-text/', {'text': RECEIPT}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ReceiptSaveAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_save_items(self):
        response = self.client.post('/api/v1/receipts/save-items/', {
            'vendor': 'Puregold',
            'date': '2026-01-15',
            'inventory_items': [
                {'name': 'Pork Liempo', 'quantity': '2', 'unit': 'kg', 'total_cost': '560.00'},
                {'name': 'Cups', 'quantity': '100', 'unit_cost': '1.50', 'inventory_type': 'packaging'},
            ],
            'expense_items': [{'name': 'Meralco bill', 'amount': '2450.75', 'category': 'utilities'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['inventory_saved'], 2)
        self.assertEqual(response.data['expenses_saved'], 1)

        pork = Purchase.objects.get(user=self.user, item_name='Pork Liempo')
        self.assertEqual(pork.unit_cost, Decimal('280'))
        self.assertEqual(pork.total_cost, Decimal('560.00'))
        self.assertEqual(pork.remaining_quantity, Decimal('2'))
        self.assertEqual(pork.supplier, 'Puregold')
        self.assertEqual(pork.purchase_date, date(2026, 1, 15))
        self.assertEqual(Purchase.objects.get(item_name='Cups').item_type, 'PACKAGING')
        self.assertEqual(InventoryTransaction.objects.filter(transaction_type='PURCHASE').count(), 2)

        expense = Expense.objects.get(user=self.user)
        self.assertEqual(expense.category, 'UTILITIES')
        self.assertEqual(expense.expense_type, 'VARIABLE')
        self.assertEqual(expense.expense_date, date(2026, 1, 15))
        self.assertEqual(AuditLog.objects.filter(action='bulk_create').count(), 2)

    def test_invalid_item_saves_nothing(self):
        response = self.client.post('/api/v1/receipts/save-items/', {
            'inventory_items': [
                {'name': 'Bigas', 'quantity': '25', 'unit_cost': '52'},
                {'name': 'Broken', 'quantity': '0', 'unit_cost': '1'},
            ],
            'expense_items': [{'name': 'Meralco bill', 'amount': '2450.75'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('inventory_items', response.data)
        self.assertFalse(Purchase.objects.exists())
        self.assertFalse(Expense.objects.exists())

    def test_needs_a_cost(self):
        response = self.client.post('/api/v1/receipts/save-items/', {
            'inventory_items': [{'name': 'Bigas', 'quantity': '25'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_nothing_to_save(self):
        response = self.client.post('/api/v1/receipts/save-items/', {
            'inventory_items': [], 'expense_items': [],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('non_field_errors', response.data)


class CategoryLearningAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_learn_then_parse(self):
        response = self.client.post('/api/v1/receipts/learn/', {'corrections': [
            {'item_name': 'Mystery Item 1kg', 'category': 'expense', 'sub_category': 'equipment'},
            {'item_name': 'Coke 1.5L', 'category': 'INVENTORY', 'sub_category': 'RAW_MATERIAL', 'vendor': 'Sari-sari'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['saved_count'], 2)
        self.assertEqual(CategoryMemory.objects.get(item_pattern='coke').vendor, 'Sari-sari')

        response = self.client.post('/api/v1/receipts/parse-text/', {'text': 'Mystery Item 50.00'}, format='json')
        self.assertEqual(response.data['items'][0]['expense_category'], 'EQUIPMENT')

    def test_relearning_updates_pattern(self):
        for category in ('EXPENSE', 'INVENTORY'):
            self.client.post('/api/v1/receipts/learn/', {'corrections': [
                {'item_name': 'Mystery Item', 'category': category},
            ]}, format='json')
        memory = CategoryMemory.objects.get(user=self.user)
        self.assertEqual(memory.category, 'INVENTORY')

    def test_name_without_letters_is_skipped(self):
        response = self.client.post('/api/v1/receipts/learn/', {'corrections': [
            {'item_name': '12345', 'category': 'EXPENSE'},
        ]}, format='json')
        self.assertEqual(response.data['saved_count'], 0)

    def test_invalid_corrections(self):
        response = self.client.post('/api/v1/receipts/learn/', {'corrections': [
            {'item_name': 'Itlog', 'category': 'INVENTORY'},
            {'item_name': 'Upa', 'category': 'INVENTORY', 'sub_category': 'RENT'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['index'], 1)
        self.assertFalse(CategoryMemory.objects.exists())

        response = self.client.post('/api/v1/receipts/learn/', {'corrections': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_learning_stats(self):
        CategoryMemory.objects.create(user=self.user, item_pattern='meralco', category='EXPENSE', use_count=3)
        CategoryMemory.objects.create(user=self.user, item_pattern='bigas', category='INVENTORY')
        CategoryMemory.objects.create(user=self.user, item_pattern='cups', category='INVENTORY', use_count=1)
        CategoryMemory.objects.create(user=TestDataFactory.create_user(), item_pattern='gas', category='EXPENSE',
                                      use_count=9)

        response = self.client.get('/api/v1/receipts/learning-stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_patterns'], 3)
        self.assertEqual(response.data['total_uses'], 4)
        self.assertEqual(response.data['by_category'], {'INVENTORY': 2, 'EXPENSE': 1, 'UNKNOWN': 0})
        self.assertEqual([row['item_pattern'] for row in response.data['most_used']], ['meralco', 'cups'])
