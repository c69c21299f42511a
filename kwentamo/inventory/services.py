"""Period figures: inventory valuation, purchases and COGS"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum

from kwentamo.core import formulas
from kwentamo.purchasing.models import Purchase
from .models import InventorySnapshot, ITEM_TYPE_CHOICES

logger = logging.getLogger(__name__)

ITEM_TYPES = [value for value, _label in ITEM_TYPE_CHOICES]


def snapshot_values(period, snapshot_type):
    """{item_type: total value} for one side of a period"""
    values = {item_type: Decimal('0') for item_type in ITEM_TYPES}
    for snapshot in period.snapshots.filter(snapshot_type=snapshot_type):
        values[snapshot.item_type] = values.get(snapshot.item_type, Decimal('0')) + snapshot.total_value
    return {item_type: formulas.money(value) for item_type, value in values.items()}


def period_purchases(period):
    """Purchases assigned to the period, plus unassigned ones dated inside it"""
    return Purchase.objects.filter(user_id=period.user_id).filter(
        Q(period=period)
        | Q(period__isnull=True, purchase_date__gte=period.start_date, purchase_date__lte=period.end_date)
    )


def purchase_totals(period):
    totals = {item_type: Decimal('0.00') for item_type in ITEM_TYPES}
    for row in period_purchases(period).values('item_type').annotate(total=Sum('total_cost')):
        totals[row['item_type']] = row['total'] or Decimal('0.00')
    return totals


def period_summary(period):
    beginning = snapshot_values(period, 'BEGINNING')
    ending = snapshot_values(period, 'ENDING')
    purchases = purchase_totals(period)

    cogs = formulas.calculate_cogs(
        beginning_raw=beginning['RAW_MATERIAL'],
        beginning_packaging=beginning['PACKAGING'],
        raw_purchases=purchases['RAW_MATERIAL'],
        packaging_purchases=purchases['PACKAGING'],
        ending_raw=ending['RAW_MATERIAL'],
        ending_packaging=ending['PACKAGING'],
    )

    def as_floats(values):
        return {
            'raw_material': float(values['RAW_MATERIAL']),
            'packaging': float(values['PACKAGING']),
            'total': float(formulas.money(sum(values.values(), Decimal('0')))),
        }

    return {
        'period': {
            'id': period.id,
            'period_name': period.period_name,
            'start_date': period.start_date.isoformat(),
            'end_date': period.end_date.isoformat(),
            'is_active': period.is_active,
        },
        'beginning_inventory': as_floats(beginning),
        'purchases': as_floats(purchases),
        'ending_inventory': as_floats(ending),
        'cogs': float(cogs),
        'has_beginning': period.snapshots.filter(snapshot_type='BEGINNING').exists(),
        'has_ending': period.snapshots.filter(snapshot_type='ENDING').exists(),
    }


@transaction.atomic
def copy_snapshots_from_purchases(period, snapshot_type):
    """
    Rebuild one side of a period's count from purchased stock.

    Existing snapshots of that type are replaced by one line per purchase with
    stock left, bought on or before the boundary date (start date for
    BEGINNING, end date for ENDING).
    """
    boundary = period.start_date if snapshot_type == 'BEGINNING' else period.end_date
    purchases = Purchase.objects.filter(
        user_id=period.user_id, remaining_quantity__gt=0, purchase_date__lte=boundary
    ).order_by('item_type', 'item_name', 'purchase_date')

    deleted, _ = period.snapshots.filter(snapshot_type=snapshot_type).delete()
    snapshots = InventorySnapshot.objects.bulk_create([
        InventorySnapshot(
            period=period,
            snapshot_type=snapshot_type,
            item_name=purchase.item_name,
            item_type=purchase.item_type,
            unit=purchase.unit,
            quantity=purchase.remaining_quantity,
            unit_cost=purchase.unit_cost,
            source_purchase=purchase,
        )
        for purchase in purchases
    ])
    logger.info(
        f"Period {period.id}: replaced {deleted} {snapshot_type} snapshots with {len(snapshots)} from purchases"
    )
    return snapshots, deleted
