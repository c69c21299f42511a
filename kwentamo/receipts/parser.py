"""
Turn pasted receipt text into categorised line items.

Each item is classified as INVENTORY (a purchase with an item type), EXPENSE
(with an expense category) or UNKNOWN. A category the user taught earlier
wins over the keyword tables.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db.models import F

from kwentamo.core.formulas import money
from . import patterns
from .models import CategoryMemory

logger = logging.getLogger(__name__)

UNIT_COST_PLACES = Decimal('0.0001')
TOTAL_TOLERANCE = Decimal('0.01')


def parse_amount(text):
    """'₱1,234.50' / 'P560' -> Decimal; None when it is not a number"""
    cleaned = text.upper().replace('PHP', '').replace('₱', '').replace('P', '').replace(',', '').strip()
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def normalize_item_name(name):
    """Lower-case letters only, without sizes or units: 'Coke 1.5L' -> 'coke'"""
    words = patterns.NON_LETTERS.sub(' ', name.lower()).split()
    return ' '.join(word for word in words if word not in patterns.UNIT_ALIASES)


def _keyword_match(normalized, table):
    words = set(normalized.split())
    for category, keywords in table.items():
        for keyword in keywords:
            if (' ' in keyword and keyword in normalized) or keyword in words:
                return category
    return None


def classify(name, memory=None):
    """
    (category, sub_category, source) for an item name.

    `memory` maps normalised names to CategoryMemory rows for the user.
    """
    normalized = normalize_item_name(name)
    learned = (memory or {}).get(normalized)
    if learned is not None:
        return learned.category, learned.sub_category, 'memory'

    item_type = _keyword_match(normalized, patterns.INVENTORY_KEYWORDS)
    if item_type:
        return 'INVENTORY', item_type, 'keyword'
    expense_category = _keyword_match(normalized, patterns.EXPENSE_KEYWORDS)
    if expense_category:
        return 'EXPENSE', expense_category, 'keyword'
    return 'UNKNOWN', '', 'none'


def parse_line(line):
    """Item fields from one receipt line, or None if it is not an item"""
    match = patterns.QTY_AT_PRICE.match(line)
    if match:
        quantity = Decimal(match.group('qty'))
        unit_cost = parse_amount(match.group('unit_price'))
        total = parse_amount(match.group('total')) if match.group('total') else money(quantity * unit_cost)
    else:
        match = patterns.QTY_FIRST.match(line) or patterns.NAME_PRICE.match(line)
        if not match:
            return None
        quantity = Decimal(match.group('qty')) if 'qty' in match.groupdict() else Decimal('1')
        total = parse_amount(match.group('total'))
        unit_cost = None

    if total is None or quantity <= 0:
        return None
    if unit_cost is None:
        unit_cost = (total / quantity).quantize(UNIT_COST_PLACES)

    unit = match.groupdict().get('unit')
    return {
        'name': patterns.WHITESPACE.sub(' ', match.group('name')).strip(' .:-'),
        'quantity': quantity,
        'unit': patterns.UNIT_ALIASES.get(unit.lower(), 'pcs') if unit else 'pcs',
        'unit_cost': unit_cost,
        'total_cost': money(total),
    }


def _is_skippable(line):
    return bool(
        patterns.SUMMARY_LINE.match(line) or patterns.NOISE_LINE.match(line) or patterns.DATE_LIKE.search(line)
    )


def parse_receipt_text(user, text, vendor=None):
    """
    Read receipt text line by line.

    The first line without an amount is taken as the vendor unless one is
    given. Returns the items with their categories, category counts and a
    check of the item sum against the stated TOTAL line.
    """
    memory = {row.item_pattern: row for row in CategoryMemory.objects.filter(user=user)}
    items = []
    stated_total = None
    detected_vendor = None
    used_patterns = set()

    for raw_line in text.splitlines():
        line = patterns.WHITESPACE.sub(' ', raw_line).strip()
        if not line:
            continue

        total_match = patterns.TOTAL_LINE.match(line)
        if total_match:
            stated_total = parse_amount(total_match.group('amount'))
            continue
        if _is_skippable(line):
            continue

        item = parse_line(line)
        if item is None:
            if detected_vendor is None and not items:
                detected_vendor = line
            continue

        category, sub_category, source = classify(item['name'], memory)
        if source == 'memory':
            used_patterns.add(normalize_item_name(item['name']))
        item.update({
            'line': line,
            'category': category,
            'inventory_type': (sub_category or 'RAW_MATERIAL') if category == 'INVENTORY' else None,
            'expense_category': (sub_category or 'OTHER') if category == 'EXPENSE' else None,
            'source': source,
        })
        items.append(item)

    if used_patterns:
        CategoryMemory.objects.filter(user=user, item_pattern__in=used_patterns).update(
            use_count=F('use_count') + 1
        )

    computed_total = money(sum((item['total_cost'] for item in items), Decimal('0')))
    validation = {
        'stated_total': stated_total,
        'computed_total': computed_total,
        'difference': money(stated_total - computed_total) if stated_total is not None else None,
        'matches': abs(stated_total - computed_total) <= TOTAL_TOLERANCE if stated_total is not None else None,
    }
    logger.info(f"Parsed receipt for user {user.id}: {len(items)} items")

    return {
        'vendor': {'name': vendor or detected_vendor},
        'items': items,
        'inventory_count': sum(1 for item in items if item['category'] == 'INVENTORY'),
        'expense_count': sum(1 for item in items if item['category'] == 'EXPENSE'),
        'unknown_count': sum(1 for item in items if item['category'] == 'UNKNOWN'),
        'total_validation': validation,
    }
