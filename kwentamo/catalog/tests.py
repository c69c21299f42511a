"""
Test suite for the catalog module
Tests: ingredient CRUD, bulk import, low stock, recipe lines, cost breakdown
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from kwentamo.catalog.costing import ingredient_cost_per_serving, recipe_cost_breakdown
from kwentamo.catalog.models import Ingredient, Recipe
from kwentamo.core.models import AuditLog
from kwentamo.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class IngredientAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_ingredient(self):
        response = self.client.post('/api/v1/ingredients/', {
            'name': 'Bigas', 'category': 'Grains', 'unit': 'kg',
            'cost_per_unit': '52.00', 'current_stock': '25', 'reorder_level': '5',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stock_value'], Decimal('1300.00'))
        self.assertFalse(response.data['is_low_stock'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Ingredient').exists())

    def test_create_rejects_negative_stock_and_blank_name(self):
        response = self.client.post('/api/v1/ingredients/', {
            'name': '  ', 'unit': 'kg', 'current_stock': '-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)
        self.assertIn('current_stock', response.data)

    def test_list_is_scoped_to_user(self):
        TestDataFactory.create_ingredient(self.user, name='Asukal')
        TestDataFactory.create_ingredient(TestDataFactory.create_user(), name='Foreign')
        response = self.client.get('/api/v1/ingredients/')
        self.assertEqual([row['name'] for row in response.data], ['Asukal'])

    def test_other_users_ingredient_is_not_found(self):
        other = TestDataFactory.create_ingredient(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/ingredients/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_ingredient_records_changes(self):
        ingredient = TestDataFactory.create_ingredient(self.user, cost_per_unit='10.00')
        response = self.client.patch(f'/api/v1/ingredients/{ingredient.id}/', {'cost_per_unit': '12.50'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='update', model_name='Ingredient')
        self.assertIn('cost_per_unit', log.changes)

    def test_search_and_low_stock_filters(self):
        TestDataFactory.create_ingredient(self.user, name='Toyo', current_stock='2', reorder_level='5')
        TestDataFactory.create_ingredient(self.user, name='Suka', current_stock='20', reorder_level='5')
        response = self.client.get('/api/v1/ingredients/?low_stock=true')
        self.assertEqual([row['name'] for row in response.data], ['Toyo'])
        response = self.client.get('/api/v1/ingredients/?search=suk')
        self.assertEqual([row['name'] for row in response.data], ['Suka'])

    def test_invalid_filter_params(self):
        response = self.client.get('/api/v1/ingredients/?unit=bushel')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit', response.data)

    def test_low_stock_endpoint(self):
        TestDataFactory.create_ingredient(self.user, name='Bawang', current_stock='10', reorder_level='10')
        TestDataFactory.create_ingredient(self.user, name='Sibuyas', current_stock='11', reorder_level='10')
        response = self.client.get('/api/v1/ingredients/low-stock/')
        self.assertEqual([row['name'] for row in response.data], ['Bawang'])

    def test_categories(self):
        TestDataFactory.create_ingredient(self.user, category='Spices')
        TestDataFactory.create_ingredient(self.user, category='Meat')
        TestDataFactory.create_ingredient(self.user, category='Meat')
        TestDataFactory.create_ingredient(self.user, category='')
        response = self.client.get('/api/v1/ingredients/categories/')
        self.assertEqual(response.data, ['Meat', 'Spices'])

    def test_delete_ingredient_in_use(self):
        ingredient = TestDataFactory.create_ingredient(self.user)
        TestDataFactory.create_recipe(self.user, name='Adobo', lines=[(ingredient, '1')])
        response = self.client.delete(f'/api/v1/ingredients/{ingredient.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Adobo', response.data['error'])
        self.assertTrue(Ingredient.objects.filter(pk=ingredient.pk).exists())

    def test_delete_unused_ingredient(self):
        ingredient = TestDataFactory.create_ingredient(self.user)
        response = self.client.delete(f'/api/v1/ingredients/{ingredient.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Ingredient.objects.filter(pk=ingredient.pk).exists())


class IngredientBulkCreateTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_bulk_create(self):
        response = self.client.post('/api/v1/ingredients/bulk/', {'ingredients': [
            {'name': 'Patis', 'unit': 'bottle', 'cost_per_unit': '35'},
            {'name': 'Paminta', 'unit': 'g', 'cost_per_unit': '0.80'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(Ingredient.objects.filter(user=self.user).count(), 2)
        self.assertTrue(AuditLog.objects.filter(action='bulk_create').exists())

    def test_bulk_create_accepts_bare_list(self):
        response = self.client.post('/api/v1/ingredients/bulk/', [
            {'name': 'Luya', 'unit': 'kg', 'cost_per_unit': '120'},
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_bulk_create_is_all_or_nothing(self):
        response = self.client.post('/api/v1/ingredients/bulk/', {'ingredients': [
            {'name': 'Good', 'unit': 'kg'},
            {'name': 'Bad', 'unit': 'bushel'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['index'], 1)
        self.assertIn('unit', response.data['errors'][0]['errors'])
        self.assertFalse(Ingredient.objects.filter(user=self.user).exists())

    def test_bulk_create_empty(self):
        response = self.client.post('/api/v1/ingredients/bulk/', {'ingredients': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class RecipeAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.rice = TestDataFactory.create_ingredient(self.user, name='Rice', cost_per_unit='50')
        self.egg = TestDataFactory.create_ingredient(self.user, name='Egg', cost_per_unit='8', unit='pcs')

    def test_create_recipe_with_lines(self):
        response = self.client.post('/api/v1/recipes/', {
            'name': 'Silog', 'servings': 10, 'selling_price': '35.00',
            'ingredients': [
                {'ingredient': self.rice.id, 'quantity': '2'},
                {'ingredient': self.egg.id, 'quantity': '10'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['ingredients']), 2)
        self.assertEqual(response.data['ingredient_cost_per_serving'], Decimal('18.00'))

    def test_rejects_other_users_ingredient(self):
        foreign = TestDataFactory.create_ingredient(TestDataFactory.create_user())
        response = self.client.post('/api/v1/recipes/', {
            'name': 'Stolen', 'ingredients': [{'ingredient': foreign.id, 'quantity': '1'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ingredients', response.data)

    def test_rejects_duplicate_lines(self):
        response = self.client.post('/api/v1/recipes/', {
            'name': 'Double Rice', 'ingredients': [
                {'ingredient': self.rice.id, 'quantity': '1'},
                {'ingredient': self.rice.id, 'quantity': '2'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_without_lines_keeps_them(self):
        recipe = TestDataFactory.create_recipe(self.user, lines=[(self.rice, '1')])
        response = self.client.patch(f'/api/v1/recipes/{recipe.id}/', {'selling_price': '60'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(recipe.recipe_ingredients.count(), 1)

    def test_update_replaces_lines(self):
        recipe = TestDataFactory.create_recipe(self.user, lines=[(self.rice, '1')])
        response = self.client.patch(f'/api/v1/recipes/{recipe.id}/', {
            'ingredients': [{'ingredient': self.egg.id, 'quantity': '3'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([line['ingredient'] for line in response.data['ingredients']], [self.egg.id])

    def test_filter_active(self):
        TestDataFactory.create_recipe(self.user, name='Active')
        inactive = TestDataFactory.create_recipe(self.user, name='Retired')
        inactive.is_active = False
        inactive.save()
        response = self.client.get('/api/v1/recipes/?is_active=true')
        self.assertEqual([row['name'] for row in response.data], ['Active'])

    def test_price_filters(self):
        TestDataFactory.create_recipe(self.user, name='Taho', selling_price='20')
        TestDataFactory.create_recipe(self.user, name='Lechon Kawali', selling_price='150')
        response = self.client.get('/api/v1/recipes/?min_price=100')
        names = [row['name'] for row in response.data]
        self.assertIn('Lechon Kawali', names)
        self.assertNotIn('Taho', names)

        response = self.client.get('/api/v1/recipes/?max_price=cheap')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('max_price', response.data)

    def test_delete_recipe_with_sales(self):
        recipe = TestDataFactory.create_recipe(self.user, lines=[(self.rice, '0.1')])
        TestDataFactory.create_sale(self.user, recipe)
        response = self.client.delete(f'/api/v1/recipes/{recipe.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Recipe.objects.filter(pk=recipe.pk).exists())

    def test_delete_recipe(self):
        recipe = TestDataFactory.create_recipe(self.user, lines=[(self.rice, '1')])
        response = self.client.delete(f'/api/v1/recipes/{recipe.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        # Deleting the recipe frees the ingredient
        response = self.client.delete(f'/api/v1/ingredients/{self.rice.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class RecipeCostingTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        rice = TestDataFactory.create_ingredient(self.user, name='Rice', cost_per_unit='50')
        egg = TestDataFactory.create_ingredient(self.user, name='Egg', cost_per_unit='8', unit='pcs')
        self.recipe = TestDataFactory.create_recipe(
            self.user, name='Silog', servings=10, selling_price='35.00',
            preparation_time=60, labor_rate_per_hour='60', lines=[(rice, '2'), (egg, '10')],
        )

    def test_breakdown_with_default_overhead(self):
        breakdown = recipe_cost_breakdown(self.recipe)
        self.assertEqual(breakdown['ingredients_cost'], Decimal('180.00'))
        self.assertEqual(breakdown['labor_cost'], Decimal('60.00'))
        self.assertEqual(breakdown['overhead_cost'], Decimal('27.00'))
        self.assertEqual(breakdown['total_cost'], Decimal('267.00'))
        self.assertEqual(breakdown['cost_per_serving'], Decimal('26.70'))
        self.assertEqual(breakdown['profit_per_serving'], Decimal('8.30'))
        self.assertEqual(breakdown['profit_margin'], Decimal('23.71'))
        self.assertFalse(breakdown['margin_warning'])
        self.assertEqual(breakdown['suggested_prices'], {
            '30%': Decimal('34.71'), '50%': Decimal('40.05'), '100%': Decimal('53.40'),
        })

    def test_business_overhead_rate(self):
        TestDataFactory.create_business(self.user, overhead_rate='0.10')
        recipe = Recipe.objects.get(pk=self.recipe.pk)
        breakdown = recipe_cost_breakdown(recipe)
        self.assertEqual(breakdown['overhead_cost'], Decimal('18.00'))
        self.assertEqual(breakdown['cost_per_serving'], Decimal('25.80'))

    def test_margin_warning(self):
        self.recipe.selling_price = Decimal('28.00')
        self.recipe.save()
        self.assertTrue(recipe_cost_breakdown(self.recipe)['margin_warning'])

    def test_ingredient_cost_per_serving(self):
        self.assertEqual(ingredient_cost_per_serving(self.recipe), Decimal('18.00'))

    def test_cost_endpoint(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get(f'/api/v1/recipes/{self.recipe.id}/cost/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_cost'], Decimal('267.00'))
        self.assertEqual(len(response.data['ingredients']), 2)

    def test_cost_endpoint_other_user(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.get(f'/api/v1/recipes/{self.recipe.id}/cost/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
