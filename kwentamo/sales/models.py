from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
from kwentamo.core.models import User
from kwentamo.catalog.models import Recipe


class Sale(models.Model):
    """Units of a recipe sold on a given day"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sales')
    recipe = models.ForeignKey(Recipe, on_delete=models.PROTECT, related_name='sales')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    total_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    cost_of_goods = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    sale_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True)
    stock_usage = models.JSONField(
        default=dict, blank=True,
        help_text="Ingredient quantities consumed by this sale, keyed by ingredient id"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.quantity} x {self.recipe.name} on {self.sale_date}"

    class Meta:
        db_table = 'sales'
        ordering = ['-sale_date', '-created_at']
        indexes = [
            models.Index(fields=['user', '-sale_date'], name='idx_sale_user_date'),
            models.Index(fields=['recipe', '-sale_date'], name='idx_sale_recipe_date'),
        ]
