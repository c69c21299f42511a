"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from kwentamo.business.models import Business
from kwentamo.catalog.models import Ingredient, Recipe, RecipeIngredient
from kwentamo.expenses.models import Expense
from kwentamo.inventory.models import InventoryPeriod, InventorySnapshot
from kwentamo.purchasing import services as purchasing_services
from kwentamo.sales.models import Sale
from kwentamo.sales import services as sales_services
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False,
                    name=''):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username.lower()}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            name=name,
        )

    @staticmethod
    def create_business(user, business_name=None, overhead_rate=None, **extra):
        if not business_name:
            business_name = f'Carinderia {TestDataFactory.random_string(5)}'
        if overhead_rate is not None:
            extra['overhead_rate'] = Decimal(str(overhead_rate))
        return Business.objects.create(user=user, business_name=business_name, **extra)

    @staticmethod
    def create_ingredient(user, name=None, cost_per_unit='10.00', current_stock='100', reorder_level='10',
                          unit='kg', category='', supplier=''):
        """Create a test ingredient"""
        if not name:
            name = f'Ingredient_{TestDataFactory.random_string(6)}'
        return Ingredient.objects.create(
            user=user,
            name=name,
            unit=unit,
            category=category,
            supplier=supplier,
            cost_per_unit=Decimal(str(cost_per_unit)),
            current_stock=Decimal(str(current_stock)),
            reorder_level=Decimal(str(reorder_level)),
        )

    @staticmethod
    def create_recipe(user, name=None, selling_price='50.00', servings=1, lines=None, category='',
                      preparation_time=0, labor_rate_per_hour='0'):
        """
        Create a test recipe.

        `lines` is a list of (ingredient, quantity) pairs.
        """
        if not name:
            name = f'Recipe_{TestDataFactory.random_string(6)}'
        recipe = Recipe.objects.create(
            user=user,
            name=name,
            category=category,
            servings=servings,
            preparation_time=preparation_time,
            labor_rate_per_hour=Decimal(str(labor_rate_per_hour)),
            selling_price=Decimal(str(selling_price)),
        )
        for ingredient, quantity in lines or []:
            RecipeIngredient.objects.create(recipe=recipe, ingredient=ingredient, quantity=Decimal(str(quantity)))
        return recipe

    @staticmethod
    def create_expense(user, amount='1000.00', category='RENT', expense_type='FIXED', frequency='MONTHLY',
                       expense_date=None, description=None):
        """Create a test expense"""
        return Expense.objects.create(
            user=user,
            amount=Decimal(str(amount)),
            category=category,
            expense_type=expense_type,
            frequency=frequency,
            expense_date=expense_date or timezone.localdate(),
            description=description or f'Expense {TestDataFactory.random_string(5)}',
        )

    @staticmethod
    def create_purchase(user, item_name=None, quantity='10', unit_cost='5.00', item_type='RAW_MATERIAL',
                        ingredient=None, period=None, purchase_date=None, reorder_level='0', supplier=''):
        """Create a test purchase through the purchasing service (logs the transaction)"""
        return purchasing_services.create_purchase(user, {
            'item_name': item_name or f'Item_{TestDataFactory.random_string(6)}',
            'item_type': item_type,
            'unit': 'kg',
            'quantity': Decimal(str(quantity)),
            'unit_cost': Decimal(str(unit_cost)),
            'supplier': supplier,
            'purchase_date': purchase_date or timezone.localdate(),
            'reorder_level': Decimal(str(reorder_level)),
            'ingredient': ingredient,
            'period': period,
        })

    @staticmethod
    def create_period(user, start_date, end_date, period_name=None, is_active=False):
        """Create a test inventory period"""
        return InventoryPeriod.objects.create(
            user=user,
            period_name=period_name or f'Period {TestDataFactory.random_string(4)}',
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )

    @staticmethod
    def create_snapshot(period, snapshot_type='BEGINNING', quantity='10', unit_cost='5.00',
                        item_type='RAW_MATERIAL', item_name=None):
        return InventorySnapshot.objects.create(
            period=period,
            snapshot_type=snapshot_type,
            item_name=item_name or f'Item_{TestDataFactory.random_string(6)}',
            item_type=item_type,
            unit='kg',
            quantity=Decimal(str(quantity)),
            unit_cost=Decimal(str(unit_cost)),
        )

    @staticmethod
    def create_sale(user, recipe, quantity=1, unit_price=None, sale_date=None):
        """Record a test sale through the sales service (consumes stock)"""
        sale = Sale(
            user=user,
            recipe=recipe,
            quantity=quantity,
            unit_price=Decimal(str(unit_price)) if unit_price is not None else None,
            sale_date=sale_date or timezone.localdate(),
        )
        return sales_services.record_sale(sale)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def authenticate_tokens(self, access):
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
