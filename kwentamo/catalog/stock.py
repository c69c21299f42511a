"""Ingredient stock movements shared by purchases and sales"""
from decimal import Decimal

from .models import Ingredient


def adjust_ingredient_stock(ingredient_id, delta, unit_cost=None):
    """
    Add `delta` (may be negative) to an ingredient's stock, optionally repricing it.

    Must run inside a transaction; the ingredient row is locked until commit.
    """
    ingredient = Ingredient.objects.select_for_update().get(pk=ingredient_id)
    ingredient.current_stock += delta
    update_fields = ['current_stock', 'updated_at']
    if unit_cost is not None:
        ingredient.cost_per_unit = unit_cost
        update_fields.append('cost_per_unit')
    ingredient.save(update_fields=update_fields)
    return ingredient


def apply_usage(usage, direction=-1):
    """
    Apply a {ingredient_id: quantity} usage map to stock.

    direction=-1 consumes, +1 puts the stock back. Ingredients deleted since
    the usage was recorded are skipped.
    """
    existing = set(
        Ingredient.objects.filter(pk__in=[int(pk) for pk in usage]).values_list('pk', flat=True)
    )
    for ingredient_id, quantity in usage.items():
        if int(ingredient_id) in existing:
            adjust_ingredient_stock(int(ingredient_id), Decimal(str(quantity)) * direction)
