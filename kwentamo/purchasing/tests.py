"""
Test suite for the purchasing module
Tests: purchase recording, ingredient stock sync, restock costing, deletion, stats and alerts
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.catalog.models import Ingredient
from kwentamo.catalog.stock import adjust_ingredient_stock
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.purchasing.models import Purchase, InventoryTransaction


class PurchaseAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.ingredient = TestDataFactory.create_ingredient(self.user, name='Manok', current_stock='2',
                                                            cost_per_unit='180')

    def test_create_purchase_moves_ingredient_stock(self):
        response = self.client.post('/api/v1/purchases/', {
            'item_name': 'Manok (whole)', 'unit': 'kg', 'quantity': '5', 'unit_cost': '190',
            'supplier': 'Palengke', 'ingredient': self.ingredient.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_cost'], Decimal('950.00'))
        self.assertEqual(response.data['remaining_quantity'], Decimal('5.000'))
        self.assertEqual(response.data['ingredient_name'], 'Manok')

        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('7'))
        self.assertEqual(self.ingredient.cost_per_unit, Decimal('190'))

        txn = InventoryTransaction.objects.get(purchase_id=response.data['id'])
        self.assertEqual(txn.transaction_type, 'PURCHASE')
        self.assertEqual(txn.balance_after, Decimal('5'))
        self.assertTrue(AuditLog.objects.filter(action='stock_purchase', model_name='Ingredient').exists())

    def test_create_ignores_remaining_quantity(self):
        response = self.client.post('/api/v1/purchases/', {
            'item_name': 'Cups', 'item_type': 'PACKAGING', 'quantity': '100', 'unit_cost': '1.5',
            'remaining_quantity': '3',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['remaining_quantity'], Decimal('100.000'))

    def test_rejects_other_users_ingredient(self):
        foreign = TestDataFactory.create_ingredient(TestDataFactory.create_user())
        response = self.client.post('/api/v1/purchases/', {
            'item_name': 'Sneaky', 'quantity': '1', 'unit_cost': '1', 'ingredient': foreign.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ingredient', response.data)

    def test_rejects_zero_quantity(self):
        response = self.client.post('/api/v1/purchases/', {
            'item_name': 'Nothing', 'quantity': '0', 'unit_cost': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_list_is_paginated_and_filtered(self):
        for _ in range(12):
            TestDataFactory.create_purchase(self.user)
        TestDataFactory.create_purchase(self.user, item_name='Styro box', item_type='PACKAGING')

        response = self.client.get('/api/v1/purchases/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 13)
        self.assertEqual(len(response.data['results']), 10)
        self.assertEqual(response.data['next'], 2)

        response = self.client.get('/api/v1/purchases/?item_type=packaging')
        self.assertEqual([row['item_name'] for row in response.data['results']], ['Styro box'])

        response = self.client.get('/api/v1/purchases/?search=styro')
        self.assertEqual(response.data['count'], 1)

    def test_update_quantity_adjusts_stock(self):
        purchase = TestDataFactory.create_purchase(self.user, quantity='10', ingredient=self.ingredient)
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/', {'quantity': '15'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['remaining_quantity'], Decimal('15.000'))
        self.assertEqual(response.data['total_cost'], Decimal('75.00'))

        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('17'))
        adjustment = InventoryTransaction.objects.get(purchase=purchase, transaction_type='ADJUSTMENT')
        self.assertEqual(adjustment.quantity, Decimal('5'))

    def test_stock_count_only_touches_purchase(self):
        purchase = TestDataFactory.create_purchase(self.user, quantity='10', ingredient=self.ingredient)
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/', {'remaining_quantity': '4'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['remaining_quantity'], Decimal('4.000'))
        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('12'))
        adjustment = InventoryTransaction.objects.get(purchase=purchase, transaction_type='ADJUSTMENT')
        self.assertEqual(adjustment.quantity, Decimal('-6'))
        self.assertEqual(adjustment.notes, 'Stock count')

    def test_linked_ingredient_cannot_change(self):
        purchase = TestDataFactory.create_purchase(self.user, quantity='10', ingredient=self.ingredient)
        other = TestDataFactory.create_ingredient(self.user, name='Baboy', current_stock='0')
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/', {'ingredient': other.id},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ingredient', response.data)
        purchase.refresh_from_db()
        self.assertEqual(purchase.ingredient_id, self.ingredient.id)

        # Sending the current link back is accepted
        response = self.client.patch(f'/api/v1/purchases/{purchase.id}/',
                                     {'ingredient': self.ingredient.id, 'supplier': 'Suki'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['supplier'], 'Suki')

    def test_delete_reverses_stock(self):
        purchase = TestDataFactory.create_purchase(self.user, quantity='10', ingredient=self.ingredient)
        response = self.client.delete(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('2'))
        log = AuditLog.objects.get(action='delete', model_name='Purchase')
        self.assertTrue(log.changes['stock_reversed'])

    def test_delete_keeps_stock_when_already_consumed(self):
        purchase = TestDataFactory.create_purchase(self.user, quantity='10', ingredient=self.ingredient)
        adjust_ingredient_stock(self.ingredient.id, Decimal('-6'))
        response = self.client.delete(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('6'))
        self.assertFalse(Purchase.objects.filter(pk=purchase.pk).exists())

    def test_other_users_purchase_is_not_found(self):
        purchase = TestDataFactory.create_purchase(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/purchases/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RestockTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.ingredient = TestDataFactory.create_ingredient(self.user, current_stock='0', cost_per_unit='5')
        self.purchase = TestDataFactory.create_purchase(
            self.user, quantity='10', unit_cost='5.00', ingredient=self.ingredient
        )

    def test_restock_uses_weighted_average_cost(self):
        response = self.client.post(f'/api/v1/purchases/{self.purchase.id}/restock/', {
            'quantity': '10', 'unit_cost': '7', 'notes': 'Second batch',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        purchase = response.data['purchase']
        self.assertEqual(purchase['quantity'], Decimal('20.000'))
        self.assertEqual(purchase['remaining_quantity'], Decimal('20.000'))
        self.assertEqual(purchase['total_cost'], Decimal('120.00'))
        self.assertEqual(purchase['unit_cost'], Decimal('6.0000'))
        self.assertEqual(response.data['transaction']['transaction_type'], 'RESTOCK')

        self.ingredient.refresh_from_db()
        self.assertEqual(self.ingredient.current_stock, Decimal('20'))
        self.assertEqual(self.ingredient.cost_per_unit, Decimal('7'))

    def test_restock_defaults_to_current_unit_cost(self):
        response = self.client.post(f'/api/v1/purchases/{self.purchase.id}/restock/', {'quantity': '5'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['purchase']['total_cost'], Decimal('75.00'))

    def test_restock_requires_positive_quantity(self):
        response = self.client.post(f'/api/v1/purchases/{self.purchase.id}/restock/', {'quantity': '0'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transaction_history(self):
        self.client.post(f'/api/v1/purchases/{self.purchase.id}/restock/', {'quantity': '1'}, format='json')
        response = self.client.get(f'/api/v1/purchases/{self.purchase.id}/transactions/')
        self.assertEqual([row['transaction_type'] for row in response.data], ['RESTOCK', 'PURCHASE'])


class PurchaseStatsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_purchase(self.user, item_name='Flour', quantity='10', unit_cost='40',
                                        supplier='Mill', reorder_level='20')
        TestDataFactory.create_purchase(self.user, item_name='Boxes', item_type='PACKAGING', quantity='50',
                                        unit_cost='2', supplier='Mill')
        TestDataFactory.create_purchase(self.user, item_name='Sugar', quantity='5', unit_cost='60')

    def test_stats(self):
        response = self.client.get('/api/v1/purchases/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_spent'], 800.0)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['low_stock_count'], 1)
        self.assertEqual(response.data['by_type']['PACKAGING'], {'total': 100.0, 'count': 1})
        self.assertEqual(response.data['by_supplier'][0], {'supplier': 'Mill', 'total': 500.0, 'count': 2})
        self.assertEqual(response.data['by_supplier'][1]['supplier'], 'Unspecified')

    def test_low_stock_alerts(self):
        response = self.client.get('/api/v1/purchases/low-stock-alerts/')
        self.assertEqual([row['item_name'] for row in response.data], ['Flour'])
        self.assertTrue(response.data[0]['is_low_stock'])

    def test_inventory_items(self):
        response = self.client.get('/api/v1/purchases/inventory-items/?item_type=packaging')
        self.assertEqual([row['item_name'] for row in response.data], ['Boxes'])

    def test_transaction_list_and_stats(self):
        response = self.client.get('/api/v1/inventory-transactions/?type=purchase')
        self.assertEqual(response.data['count'], 3)

        response = self.client.get('/api/v1/inventory-transactions/stats/')
        self.assertEqual(response.data['total_transactions'], 3)
        self.assertEqual(response.data['quantity_in'], 65.0)
        self.assertEqual(response.data['value_in'], 800.0)
        self.assertEqual(response.data['by_type']['PURCHASE']['count'], 3)


class PurchaseBulkCreateTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_bulk_create(self):
        ingredient = TestDataFactory.create_ingredient(self.user, current_stock='0')
        response = self.client.post('/api/v1/purchases/bulk/', {'purchases': [
            {'item_name': 'Eggs', 'quantity': '30', 'unit_cost': '8', 'ingredient': ingredient.id},
            {'item_name': 'Lids', 'item_type': 'PACKAGING', 'quantity': '100', 'unit_cost': '0.5'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(Ingredient.objects.get(pk=ingredient.pk).current_stock, Decimal('30'))
        self.assertEqual(InventoryTransaction.objects.filter(user=self.user).count(), 2)

    def test_bulk_create_is_all_or_nothing(self):
        response = self.client.post('/api/v1/purchases/bulk/', [
            {'item_name': 'Eggs', 'quantity': '30', 'unit_cost': '8'},
            {'item_name': '', 'quantity': '1', 'unit_cost': '1'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['index'], 1)
        self.assertFalse(Purchase.objects.filter(user=self.user).exists())
