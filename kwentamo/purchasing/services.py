"""
Stock bookkeeping for purchases.

Every quantity change on a purchase writes an InventoryTransaction; purchases
linked to an ingredient also move that ingredient's stock and unit cost. All
entry points run in one database transaction and lock the ingredient row.
"""
import logging
from decimal import Decimal

from django.db import transaction

from kwentamo.catalog.models import Ingredient
from kwentamo.catalog.stock import adjust_ingredient_stock
from kwentamo.core.formulas import money
from .models import Purchase, InventoryTransaction

logger = logging.getLogger(__name__)

UNIT_COST_PLACES = Decimal('0.0001')


def log_transaction(purchase, transaction_type, quantity, unit_cost, notes=''):
    return InventoryTransaction.objects.create(
        user_id=purchase.user_id,
        purchase=purchase,
        transaction_type=transaction_type,
        quantity=quantity,
        unit_cost=unit_cost,
        total_cost=money(quantity * unit_cost),
        balance_after=purchase.remaining_quantity,
        notes=notes,
    )


@transaction.atomic
def create_purchase(user, data):
    purchase = Purchase(user=user, **data)
    purchase.remaining_quantity = purchase.quantity
    purchase.total_cost = money(purchase.quantity * purchase.unit_cost)
    purchase.save()

    log_transaction(purchase, 'PURCHASE', purchase.quantity, purchase.unit_cost)
    if purchase.ingredient_id:
        adjust_ingredient_stock(purchase.ingredient_id, purchase.quantity, purchase.unit_cost)
    return purchase


@transaction.atomic
def update_purchase(purchase, data):
    """
    Apply edits to a purchase.

    A change of `quantity` moves `remaining_quantity` (and the linked
    ingredient's stock) by the same amount; an explicit `remaining_quantity`
    is a stock count and only touches the purchase.
    """
    purchase = Purchase.objects.select_for_update().get(pk=purchase.pk)
    old_quantity = purchase.quantity
    old_remaining = purchase.remaining_quantity
    old_unit_cost = purchase.unit_cost
    counted_remaining = data.pop('remaining_quantity', None)
    # The linked ingredient is fixed at creation; the serializer rejects changes
    data.pop('ingredient', None)

    for attr, value in data.items():
        setattr(purchase, attr, value)

    quantity_delta = purchase.quantity - old_quantity
    if quantity_delta:
        purchase.remaining_quantity = max(old_remaining + quantity_delta, Decimal('0'))
    if counted_remaining is not None:
        purchase.remaining_quantity = counted_remaining
    purchase.total_cost = money(purchase.quantity * purchase.unit_cost)
    purchase.save()

    remaining_delta = purchase.remaining_quantity - old_remaining
    if remaining_delta:
        note = 'Stock count' if counted_remaining is not None else 'Quantity edited'
        log_transaction(purchase, 'ADJUSTMENT', remaining_delta, purchase.unit_cost, note)

    repriced = purchase.unit_cost != old_unit_cost
    if purchase.ingredient_id and (quantity_delta or repriced):
        adjust_ingredient_stock(
            purchase.ingredient_id, quantity_delta, purchase.unit_cost if repriced else None
        )
    return purchase


@transaction.atomic
def restock_purchase(purchase, quantity, unit_cost=None, notes=''):
    """
    Add stock to an existing purchase.

    The purchase keeps a weighted-average unit cost so that total_cost stays
    equal to what was actually spent.
    """
    purchase = Purchase.objects.select_for_update().get(pk=purchase.pk)
    unit_cost = purchase.unit_cost if unit_cost is None else unit_cost

    purchase.total_cost = money(purchase.total_cost + quantity * unit_cost)
    purchase.quantity += quantity
    purchase.remaining_quantity += quantity
    purchase.unit_cost = (purchase.total_cost / purchase.quantity).quantize(UNIT_COST_PLACES)
    purchase.save()

    txn = log_transaction(purchase, 'RESTOCK', quantity, unit_cost, notes)
    if purchase.ingredient_id:
        adjust_ingredient_stock(purchase.ingredient_id, quantity, unit_cost)
    return purchase, txn


@transaction.atomic
def delete_purchase(purchase):
    """
    Delete a purchase, taking its quantity back out of the linked ingredient.

    Stock is only reversed when the ingredient still holds at least that much;
    returns whether it was.
    """
    reversed_stock = False
    if purchase.ingredient_id:
        ingredient = Ingredient.objects.select_for_update().get(pk=purchase.ingredient_id)
        if ingredient.current_stock >= purchase.quantity:
            ingredient.current_stock -= purchase.quantity
            ingredient.save(update_fields=['current_stock', 'updated_at'])
            reversed_stock = True
        else:
            logger.info(
                f"Purchase {purchase.id} deleted without reversing stock: "
                f"{ingredient.name} has {ingredient.current_stock}, purchase added {purchase.quantity}"
            )
    purchase.delete()
    return reversed_stock
