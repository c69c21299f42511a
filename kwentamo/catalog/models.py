from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
from kwentamo.core.models import User


class Ingredient(models.Model):
    """Raw ingredient with its current unit cost and stock on hand"""
    UNIT_CHOICES = [
        ('kg', 'Kilogram'),
        ('g', 'Gram'),
        ('pcs', 'Pieces'),
        ('L', 'Liter'),
        ('mL', 'Milliliter'),
        ('oz', 'Ounce'),
        ('lb', 'Pound'),
        ('pack', 'Pack'),
        ('bottle', 'Bottle'),
        ('can', 'Can'),
        ('bundle', 'Bundle'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='ingredients')
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    unit = models.CharField(max_length=20, choices=UNIT_CHOICES, default='kg')
    cost_per_unit = models.DecimalField(
        max_digits=12, decimal_places=4, default=Decimal('0.0000'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    current_stock = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    reorder_level = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal('10.000'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Stock at or below this level is flagged as low"
    )
    supplier = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.unit})"

    @property
    def is_low_stock(self):
        return self.current_stock <= self.reorder_level

    @property
    def stock_value(self):
        return self.current_stock * self.cost_per_unit

    class Meta:
        db_table = 'ingredients'
        ordering = ['name']
        indexes = [
            models.Index(fields=['user', 'name'], name='idx_ingredient_user_name'),
            models.Index(fields=['user', 'category'], name='idx_ingredient_user_category'),
        ]


class Recipe(models.Model):
    """A menu item and the ingredients that go into one batch of it"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='recipes')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    servings = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    preparation_time = models.PositiveIntegerField(default=0, help_text="Minutes per batch")
    labor_rate_per_hour = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    selling_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    image_url = models.URLField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_overhead_rate(self):
        business = getattr(self.user, 'business', None)
        if business is not None:
            return business.overhead_rate
        return settings.KWENTAMO['DEFAULT_OVERHEAD_RATE']

    class Meta:
        db_table = 'recipes'
        ordering = ['name']
        indexes = [
            models.Index(fields=['user', 'is_active'], name='idx_recipe_user_active'),
        ]


class RecipeIngredient(models.Model):
    """Quantity of one ingredient used by a recipe batch"""
    recipe = models.ForeignKey(Recipe, on_delete=models.CASCADE, related_name='recipe_ingredients')
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name='recipe_lines')
    quantity = models.DecimalField(
        max_digits=12, decimal_places=3, validators=[MinValueValidator(Decimal('0.001'))]
    )

    def get_line_cost(self):
        return self.quantity * self.ingredient.cost_per_unit

    class Meta:
        db_table = 'recipe_ingredients'
        ordering = ['id']
        unique_together = [('recipe', 'ingredient')]
