"""
Sale pricing and ingredient consumption.

A sale of N units uses each recipe line's quantity x N / servings. The usage is
stored on the sale so edits and deletes put back exactly what was taken, even
if the recipe changed in between. Stock is allowed to go negative.
"""
from decimal import Decimal

from django.db import transaction

from kwentamo.catalog.costing import ingredient_cost_per_serving
from kwentamo.catalog.stock import apply_usage
from kwentamo.core.formulas import money

USAGE_PLACES = Decimal('0.001')


def compute_usage(recipe, quantity):
    servings = Decimal(recipe.servings or 1)
    usage = {}
    for line in recipe.recipe_ingredients.all():
        used = (line.quantity * Decimal(quantity) / servings).quantize(USAGE_PLACES)
        if used:
            usage[str(line.ingredient_id)] = str(used)
    return usage


def price_sale(sale):
    """Fill totals from quantity, unit price and the recipe's ingredient cost"""
    cost_per_serving = ingredient_cost_per_serving(sale.recipe)
    sale.total_price = money(sale.unit_price * sale.quantity)
    sale.cost_of_goods = money(cost_per_serving * sale.quantity)
    sale.profit = money(sale.total_price - sale.cost_of_goods)
    return sale


@transaction.atomic
def record_sale(sale):
    """Save a new sale and consume its ingredients"""
    if sale.unit_price is None:
        sale.unit_price = sale.recipe.selling_price
    price_sale(sale)
    sale.stock_usage = compute_usage(sale.recipe, sale.quantity)
    sale.save()
    apply_usage(sale.stock_usage, direction=-1)
    return sale


@transaction.atomic
def revise_sale(sale, data):
    """Restore the previous usage, apply the edits, then consume again"""
    apply_usage(sale.stock_usage or {}, direction=1)
    recipe_changed = 'recipe' in data and data['recipe'].pk != sale.recipe_id
    for attr, value in data.items():
        setattr(sale, attr, value)
    if recipe_changed and 'unit_price' not in data:
        sale.unit_price = sale.recipe.selling_price
    price_sale(sale)
    sale.stock_usage = compute_usage(sale.recipe, sale.quantity)
    sale.save()
    apply_usage(sale.stock_usage, direction=-1)
    return sale


@transaction.atomic
def remove_sale(sale):
    apply_usage(sale.stock_usage or {}, direction=1)
    sale.delete()
