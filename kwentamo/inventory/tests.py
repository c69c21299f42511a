"""
Test suite for the inventory module
Tests: periods and the single active period, snapshots, copy from purchases, period COGS summary
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.inventory.models import InventoryPeriod, InventorySnapshot
from kwentamo.inventory.services import period_summary


class InventoryPeriodTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_period(self):
        response = self.client.post('/api/v1/inventory-periods/', {
            'period_name': 'March 2026', 'start_date': '2026-03-01', 'end_date': '2026-03-31',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_active'])
        self.assertEqual(response.data['beginning_count'], 0)

    def test_end_date_before_start(self):
        response = self.client.post('/api/v1/inventory-periods/', {
            'period_name': 'Backwards', 'start_date': '2026-03-31', 'end_date': '2026-03-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data)

    def test_only_one_active_period(self):
        first = TestDataFactory.create_period(self.user, date(2026, 2, 1), date(2026, 2, 28), is_active=True)
        response = self.client.post('/api/v1/inventory-periods/', {
            'period_name': 'March', 'start_date': '2026-03-01', 'end_date': '2026-03-31', 'is_active': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        first.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertEqual(InventoryPeriod.objects.filter(user=self.user, is_active=True).count(), 1)

    def test_activate(self):
        first = TestDataFactory.create_period(self.user, date(2026, 2, 1), date(2026, 2, 28), is_active=True)
        second = TestDataFactory.create_period(self.user, date(2026, 3, 1), date(2026, 3, 31))
        response = self.client.post(f'/api/v1/inventory-periods/{second.id}/activate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_active'])
        first.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertTrue(AuditLog.objects.filter(action='period_activate').exists())

        response = self.client.get('/api/v1/inventory-periods/active/')
        self.assertEqual(response.data['id'], second.id)

    def test_active_and_latest_when_empty(self):
        self.assertEqual(self.client.get('/api/v1/inventory-periods/active/').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/v1/inventory-periods/latest/').status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_latest(self):
        TestDataFactory.create_period(self.user, date(2026, 1, 1), date(2026, 1, 31), period_name='Jan')
        TestDataFactory.create_period(self.user, date(2026, 2, 1), date(2026, 2, 28), period_name='Feb')
        response = self.client.get('/api/v1/inventory-periods/latest/')
        self.assertEqual(response.data['period_name'], 'Feb')

    def test_delete_period_removes_snapshots(self):
        period = TestDataFactory.create_period(self.user, date(2026, 1, 1), date(2026, 1, 31))
        TestDataFactory.create_snapshot(period)
        response = self.client.delete(f'/api/v1/inventory-periods/{period.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(InventorySnapshot.objects.exists())

    def test_other_users_period_is_not_found(self):
        period = TestDataFactory.create_period(TestDataFactory.create_user(), date(2026, 1, 1), date(2026, 1, 31))
        response = self.client.get(f'/api/v1/inventory-periods/{period.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class InventorySnapshotTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.period = TestDataFactory.create_period(self.user, date(2026, 3, 1), date(2026, 3, 31))

    def test_create_snapshot(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/snapshots/', {
            'snapshot_type': 'BEGINNING', 'item_name': 'Harina', 'quantity': '12.5', 'unit_cost': '40',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_value'], Decimal('500.00'))
        self.assertEqual(response.data['period'], self.period.id)

    def test_rejects_negative_quantity(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/snapshots/', {
            'snapshot_type': 'ENDING', 'item_name': 'Harina', 'quantity': '-1', 'unit_cost': '40',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_list_filters_by_type(self):
        TestDataFactory.create_snapshot(self.period, 'BEGINNING', item_name='Start')
        TestDataFactory.create_snapshot(self.period, 'ENDING', item_name='End')
        response = self.client.get(f'/api/v1/inventory-periods/{self.period.id}/snapshots/?snapshot_type=ending')
        self.assertEqual([row['item_name'] for row in response.data], ['End'])

    def test_bulk_create(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/snapshots/bulk/', {'snapshots': [
            {'snapshot_type': 'ENDING', 'item_name': 'Harina', 'quantity': '2', 'unit_cost': '40'},
            {'snapshot_type': 'ENDING', 'item_name': 'Box', 'item_type': 'PACKAGING', 'quantity': '30',
             'unit_cost': '3'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(self.period.snapshots.count(), 2)

    def test_bulk_create_is_all_or_nothing(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/snapshots/bulk/', [
            {'snapshot_type': 'ENDING', 'item_name': 'Harina', 'quantity': '2', 'unit_cost': '40'},
            {'snapshot_type': 'MIDDLE', 'item_name': 'Box', 'quantity': '1', 'unit_cost': '1'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(self.period.snapshots.exists())

    def test_update_and_delete_snapshot(self):
        snapshot = TestDataFactory.create_snapshot(self.period, quantity='10', unit_cost='5')
        response = self.client.patch(f'/api/v1/inventory-snapshots/{snapshot.id}/', {'quantity': '8'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_value'], Decimal('40.00'))

        response = self.client.delete(f'/api/v1/inventory-snapshots/{snapshot.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_other_users_snapshot_is_not_found(self):
        other_period = TestDataFactory.create_period(TestDataFactory.create_user(), date(2026, 3, 1),
                                                     date(2026, 3, 31))
        snapshot = TestDataFactory.create_snapshot(other_period)
        response = self.client.get(f'/api/v1/inventory-snapshots/{snapshot.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CopyFromPurchasesTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.period = TestDataFactory.create_period(self.user, date(2026, 3, 1), date(2026, 3, 31))
        TestDataFactory.create_purchase(self.user, item_name='Old flour', quantity='10', unit_cost='40',
                                        purchase_date=date(2026, 2, 20))
        TestDataFactory.create_purchase(self.user, item_name='New flour', quantity='5', unit_cost='42',
                                        purchase_date=date(2026, 3, 15))

    def test_copy_beginning_uses_purchases_up_to_start(self):
        TestDataFactory.create_snapshot(self.period, 'BEGINNING', item_name='Stale line')
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/copy-from-purchases/', {
            'snapshot_type': 'BEGINNING',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['replaced'], 1)
        self.assertEqual(
            list(self.period.snapshots.values_list('item_name', flat=True)), ['Old flour']
        )

    def test_copy_ending_includes_purchases_in_period(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/copy-from-purchases/', {
            'snapshot_type': 'ENDING',
        }, format='json')
        self.assertEqual(response.data['created'], 2)
        snapshot = self.period.snapshots.get(item_name='New flour')
        self.assertEqual(snapshot.quantity, Decimal('5'))
        self.assertIsNotNone(snapshot.source_purchase_id)

    def test_copy_requires_valid_type(self):
        response = self.client.post(f'/api/v1/inventory-periods/{self.period.id}/copy-from-purchases/', {
            'snapshot_type': 'SOMETIME',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PeriodSummaryTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.period = TestDataFactory.create_period(self.user, date(2026, 3, 1), date(2026, 3, 31),
                                                    period_name='March')
        TestDataFactory.create_snapshot(self.period, 'BEGINNING', quantity='10', unit_cost='5')
        TestDataFactory.create_snapshot(self.period, 'BEGINNING', quantity='20', unit_cost='1',
                                        item_type='PACKAGING')
        TestDataFactory.create_snapshot(self.period, 'ENDING', quantity='4', unit_cost='5')
        TestDataFactory.create_purchase(self.user, quantity='10', unit_cost='5', purchase_date=date(2026, 3, 10))
        TestDataFactory.create_purchase(self.user, quantity='100', unit_cost='0.5', item_type='PACKAGING',
                                        purchase_date=date(2026, 2, 10), period=self.period)
        # Outside the period and unassigned
        TestDataFactory.create_purchase(self.user, quantity='1', unit_cost='999', purchase_date=date(2026, 4, 2))

    def test_summary(self):
        summary = period_summary(self.period)
        self.assertEqual(summary['beginning_inventory'], {'raw_material': 50.0, 'packaging': 20.0, 'total': 70.0})
        self.assertEqual(summary['purchases'], {'raw_material': 50.0, 'packaging': 50.0, 'total': 100.0})
        self.assertEqual(summary['ending_inventory']['total'], 20.0)
        self.assertEqual(summary['cogs'], 150.0)
        self.assertTrue(summary['has_beginning'])
        self.assertTrue(summary['has_ending'])

    def test_summary_endpoint(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get(f'/api/v1/inventory-periods/{self.period.id}/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period']['period_name'], 'March')
        self.assertEqual(response.data['cogs'], 150.0)
