import logging

from django.db import transaction
from django.db.models import Count, Sum

from kwentamo.expenses.models import Expense
from kwentamo.purchasing import services as purchasing_services
from .models import CategoryMemory, CATEGORY_CHOICES
from .parser import normalize_item_name

logger = logging.getLogger(__name__)


@transaction.atomic
def save_scanned_items(user, inventory_items, expense_items, vendor='', receipt_date=None):
    """
    Record reviewed receipt lines: stock items become purchases (with their
    inventory transactions), the rest become expenses. All or nothing.
    """
    purchases = []
    for item in inventory_items:
        data = {
            'item_name': item['name'],
            'item_type': item['inventory_type'],
            'unit': item['unit'],
            'quantity': item['quantity'],
            'unit_cost': item['unit_cost'],
            'supplier': vendor or '',
            'notes': 'From receipt',
        }
        if receipt_date:
            data['purchase_date'] = receipt_date
        purchases.append(purchasing_services.create_purchase(user, data))

    expenses = []
    for item in expense_items:
        expense = Expense(
            user=user,
            description=item['name'],
            amount=item['amount'],
            category=item['category'],
            expense_type=item['expense_type'],
            frequency=item['frequency'],
            notes=f"From receipt ({vendor})" if vendor else 'From receipt',
        )
        if receipt_date:
            expense.expense_date = receipt_date
        expense.save()
        expenses.append(expense)

    logger.info(f"Saved receipt for user {user.id}: {len(purchases)} purchases, {len(expenses)} expenses")
    return purchases, expenses


def learn_from_corrections(user, corrections):
    """Remember the category of each corrected item name; returns how many were kept"""
    saved = 0
    for correction in corrections:
        pattern = normalize_item_name(correction['item_name'])
        if not pattern:
            continue
        CategoryMemory.objects.update_or_create(
            user=user,
            item_pattern=pattern,
            defaults={
                'category': correction['category'],
                'sub_category': correction.get('sub_category') or '',
                'vendor': correction.get('vendor') or '',
            },
        )
        saved += 1
    return saved


def learning_stats(user):
    queryset = CategoryMemory.objects.filter(user=user)
    counts = dict(queryset.order_by().values_list('category').annotate(total=Count('id')))
    return {
        'total_patterns': queryset.count(),
        'total_uses': queryset.aggregate(total=Sum('use_count'))['total'] or 0,
        'by_category': {value: counts.get(value, 0) for value, _label in CATEGORY_CHOICES},
        'most_used': queryset.filter(use_count__gt=0).order_by('-use_count', 'item_pattern')[:5],
    }
