from decimal import Decimal

from rest_framework import serializers

from kwentamo.core.formulas import money
from kwentamo.expenses.models import Expense
from kwentamo.inventory.models import ITEM_TYPE_CHOICES
from .models import CategoryMemory, CATEGORY_CHOICES

UNIT_COST_PLACES = Decimal('0.0001')


class UpperCaseChoicesMixin:
    """Accept lower-case choice values, as the expense endpoints do"""
    upper_case_fields = ()

    def to_internal_value(self, data):
        if hasattr(data, 'copy'):
            data = data.copy()
            for field in self.upper_case_fields:
                value = data.get(field)
                if isinstance(value, str):
                    data[field] = value.strip().upper()
        return super().to_internal_value(data)


class ParseTextSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=20000, trim_whitespace=False)
    vendor = serializers.CharField(required=False, allow_blank=True, max_length=200)

    def validate_text(self, value):
        if not value.strip():
            raise serializers.ValidationError("Receipt text is empty.")
        return value


class ScannedInventoryItemSerializer(UpperCaseChoicesMixin, serializers.Serializer):
    upper_case_fields = ('inventory_type',)

    name = serializers.CharField(max_length=200)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal('0.001'))
    unit = serializers.CharField(max_length=20, required=False, default='pcs')
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal('0'), required=False)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'), required=False)
    inventory_type = serializers.ChoiceField(choices=ITEM_TYPE_CHOICES, required=False, default='RAW_MATERIAL')

    def validate(self, attrs):
        if attrs.get('unit_cost') is None:
            if attrs.get('total_cost') is None:
                raise serializers.ValidationError("Provide unit_cost or total_cost.")
            attrs['unit_cost'] = (attrs['total_cost'] / attrs['quantity']).quantize(UNIT_COST_PLACES)
        return attrs


class ScannedExpenseItemSerializer(UpperCaseChoicesMixin, serializers.Serializer):
    upper_case_fields = ('category', 'expense_type', 'frequency')

    name = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    category = serializers.ChoiceField(choices=Expense.CATEGORY_CHOICES, required=False, default='OTHER')
    expense_type = serializers.ChoiceField(choices=Expense.TYPE_CHOICES, required=False, default='VARIABLE')
    frequency = serializers.ChoiceField(choices=Expense.FREQUENCY_CHOICES, required=False, default='MONTHLY')


class SaveScannedItemsSerializer(serializers.Serializer):
    inventory_items = ScannedInventoryItemSerializer(many=True, required=False)
    expense_items = ScannedExpenseItemSerializer(many=True, required=False)
    vendor = serializers.CharField(required=False, allow_blank=True, max_length=200, default='')
    date = serializers.DateField(required=False)

    def validate(self, attrs):
        attrs.setdefault('inventory_items', [])
        attrs.setdefault('expense_items', [])
        if not attrs['inventory_items'] and not attrs['expense_items']:
            raise serializers.ValidationError("Categorize at least one item before saving.")
        return attrs


class CategoryCorrectionSerializer(UpperCaseChoicesMixin, serializers.Serializer):
    upper_case_fields = ('category', 'sub_category')

    item_name = serializers.CharField(max_length=200)
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES)
    sub_category = serializers.CharField(required=False, allow_blank=True, max_length=30)
    vendor = serializers.CharField(required=False, allow_blank=True, max_length=200)

    def validate(self, attrs):
        sub_category = attrs.get('sub_category')
        if sub_category:
            allowed = {
                'INVENTORY': dict(ITEM_TYPE_CHOICES),
                'EXPENSE': dict(Expense.CATEGORY_CHOICES),
            }.get(attrs['category'], {})
            if sub_category not in allowed:
                raise serializers.ValidationError(
                    {'sub_category': f"'{sub_category}' is not valid for {attrs['category']} items."}
                )
        return attrs


class CategoryMemorySerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = CategoryMemory
        fields = ['id', 'item_pattern', 'category', 'sub_category', 'vendor', 'use_count', 'user', 'user_email',
                  'created_at', 'updated_at']
        read_only_fields = fields


def scanned_item_payload(item):
    """Parsed receipt item with amounts as plain numbers"""
    return {
        **item,
        'quantity': float(item['quantity']),
        'unit_cost': float(item['unit_cost']),
        'total_cost': float(money(item['total_cost'])),
    }
