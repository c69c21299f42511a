"""
Test suite for the sales module
Tests: sale pricing, ingredient consumption and restoration, filters, stats
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.catalog.models import Ingredient, RecipeIngredient
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from kwentamo.sales.models import Sale
from kwentamo.sales.services import compute_usage


class SaleAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.pork = TestDataFactory.create_ingredient(self.user, name='Pork', cost_per_unit='200',
                                                      current_stock='10')
        self.rice = TestDataFactory.create_ingredient(self.user, name='Rice', cost_per_unit='50',
                                                      current_stock='5')
        self.recipe = TestDataFactory.create_recipe(
            self.user, name='Lechon Kawali', servings=4, selling_price='90.00',
            lines=[(self.pork, '1'), (self.rice, '0.5')],
        )

    def stock(self, ingredient):
        return Ingredient.objects.get(pk=ingredient.pk).current_stock

    def test_record_sale(self):
        response = self.client.post('/api/v1/sales/', {'recipe': self.recipe.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['unit_price'], Decimal('90.00'))
        self.assertEqual(response.data['total_price'], Decimal('180.00'))
        self.assertEqual(response.data['cost_of_goods'], Decimal('112.50'))
        self.assertEqual(response.data['profit'], Decimal('67.50'))
        self.assertEqual(response.data['profit_margin'], 37.5)
        self.assertEqual(response.data['recipe_name'], 'Lechon Kawali')

        self.assertEqual(self.stock(self.pork), Decimal('9.5'))
        self.assertEqual(self.stock(self.rice), Decimal('4.75'))
        self.assertTrue(AuditLog.objects.filter(action='stock_sale').exists())

    def test_explicit_unit_price(self):
        response = self.client.post('/api/v1/sales/', {
            'recipe': self.recipe.id, 'quantity': 1, 'unit_price': '75.00',
        }, format='json')
        self.assertEqual(response.data['total_price'], Decimal('75.00'))
        self.assertEqual(response.data['profit'], Decimal('18.75'))

    def test_stock_may_go_negative(self):
        self.client.post('/api/v1/sales/', {'recipe': self.recipe.id, 'quantity': 48}, format='json')
        self.assertEqual(self.stock(self.pork), Decimal('-2'))

    def test_rejects_other_users_recipe(self):
        foreign = TestDataFactory.create_recipe(TestDataFactory.create_user())
        response = self.client.post('/api/v1/sales/', {'recipe': foreign.id, 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('recipe', response.data)

    def test_rejects_zero_quantity(self):
        response = self.client.post('/api/v1/sales/', {'recipe': self.recipe.id, 'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.stock(self.pork), Decimal('10'))

    def test_revise_quantity_restores_then_consumes(self):
        sale = TestDataFactory.create_sale(self.user, self.recipe, quantity=2)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_price'], Decimal('360.00'))
        self.assertEqual(self.stock(self.pork), Decimal('9'))
        self.assertEqual(self.stock(self.rice), Decimal('4.5'))

    def test_revise_uses_stored_usage_after_recipe_change(self):
        sale = TestDataFactory.create_sale(self.user, self.recipe, quantity=4)
        RecipeIngredient.objects.filter(recipe=self.recipe, ingredient=self.pork).update(quantity=Decimal('2'))
        self.client.delete(f'/api/v1/sales/{sale.id}/')
        # Puts back what was taken (1 kg), not what the edited recipe would use
        self.assertEqual(self.stock(self.pork), Decimal('10'))

    def test_changing_recipe_reprices(self):
        other = TestDataFactory.create_recipe(self.user, name='Sinangag', selling_price='30',
                                              lines=[(self.rice, '1')])
        sale = TestDataFactory.create_sale(self.user, self.recipe, quantity=4)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'recipe': other.id, 'quantity': 1},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unit_price'], Decimal('30.00'))
        self.assertEqual(response.data['cost_of_goods'], Decimal('50.00'))
        self.assertEqual(self.stock(self.pork), Decimal('10'))
        self.assertEqual(self.stock(self.rice), Decimal('4'))

    def test_delete_restores_stock(self):
        sale = TestDataFactory.create_sale(self.user, self.recipe, quantity=2)
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Sale.objects.filter(pk=sale.pk).exists())
        self.assertEqual(self.stock(self.pork), Decimal('10'))
        self.assertEqual(self.stock(self.rice), Decimal('5'))

    def test_other_users_sale_is_not_found(self):
        other_user = TestDataFactory.create_user()
        sale = TestDataFactory.create_sale(other_user, TestDataFactory.create_recipe(other_user))
        response = self.client.get(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_compute_usage_skips_zero_lines(self):
        salt = TestDataFactory.create_ingredient(self.user, name='Salt')
        RecipeIngredient.objects.create(recipe=self.recipe, ingredient=salt, quantity=Decimal('0.001'))
        usage = compute_usage(self.recipe, 1)
        self.assertEqual(usage, {str(self.pork.id): '0.250', str(self.rice.id): '0.125'})


class SaleStatsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        flour = TestDataFactory.create_ingredient(self.user, cost_per_unit='20')
        self.pandesal = TestDataFactory.create_recipe(self.user, selling_price='5', servings=10,
                                                      lines=[(flour, '1')])
        self.ensaymada = TestDataFactory.create_recipe(self.user, selling_price='25', lines=[(flour, '0.5')])
        TestDataFactory.create_sale(self.user, self.pandesal, quantity=20, sale_date=date(2026, 3, 1))
        TestDataFactory.create_sale(self.user, self.ensaymada, quantity=2, sale_date=date(2026, 3, 20))

    def test_stats(self):
        response = self.client.get('/api/v1/sales/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 150.0)
        self.assertEqual(response.data['total_cost'], 60.0)
        self.assertEqual(response.data['total_profit'], 90.0)
        self.assertEqual(response.data['sales_count'], 2)
        self.assertEqual(response.data['units_sold'], 22)

    def test_filters(self):
        response = self.client.get('/api/v1/sales/?date_from=2026-03-10')
        self.assertEqual([row['recipe'] for row in response.data], [self.ensaymada.id])

        response = self.client.get(f'/api/v1/sales/stats/?recipe={self.pandesal.id}')
        self.assertEqual(response.data['total_revenue'], 100.0)

    def test_invalid_filter(self):
        response = self.client.get('/api/v1/sales/?date_to=soon')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
