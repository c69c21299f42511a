"""
Test suite for the business module
Tests: profile read/update, business setup and updates, validation
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.business.models import Business
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProfileTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(name='Aling Rosa')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_profile_without_business(self):
        response = self.client.get('/api/v1/users/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Aling Rosa')
        self.assertIsNone(response.data['business'])

    def test_profile_includes_business(self):
        TestDataFactory.create_business(self.user, business_name="Rosa's Carinderia")
        response = self.client.get('/api/v1/users/profile/')
        self.assertEqual(response.data['business']['business_name'], "Rosa's Carinderia")

    def test_update_name(self):
        response = self.client.patch('/api/v1/users/profile/', {'name': ' Rosa Santos '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Rosa Santos')
        self.assertTrue(AuditLog.objects.filter(action='update', model_name='User').exists())


class BusinessTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_before_setup(self):
        response = self.client.get('/api/v1/users/business/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Business not set up yet')

    def test_create_business(self):
        response = self.client.put('/api/v1/users/business/', {
            'business_name': 'Kusina ni Juan',
            'business_type': 'carinderia',
            'raw_material_source': 'palengke',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        business = Business.objects.get(user=self.user)
        self.assertEqual(business.business_name, 'Kusina ni Juan')
        self.assertEqual(business.overhead_rate, Decimal('0.15'))
        self.assertEqual(business.currency, 'PHP')

    def test_create_requires_name(self):
        response = self.client.put('/api/v1/users/business/', {'business_type': 'bakery'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_name', response.data)

    def test_update_is_partial(self):
        TestDataFactory.create_business(self.user, business_name='Old Name')
        response = self.client.put('/api/v1/users/business/', {'overhead_rate': '0.2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        business = Business.objects.get(user=self.user)
        self.assertEqual(business.business_name, 'Old Name')
        self.assertEqual(business.overhead_rate, Decimal('0.2'))
        log = AuditLog.objects.get(action='update', model_name='Business')
        self.assertIn('overhead_rate', log.changes)

    def test_overhead_rate_bounds(self):
        response = self.client.put('/api/v1/users/business/', {
            'business_name': 'Too Much Overhead', 'overhead_rate': '1.5',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('overhead_rate', response.data)

    def test_invalid_business_type(self):
        response = self.client.put('/api/v1/users/business/', {
            'business_name': 'Mystery', 'business_type': 'spaceship',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_type', response.data)
