from rest_framework import serializers
from decimal import Decimal
from .models import Purchase, InventoryTransaction


class PurchaseSerializer(serializers.ModelSerializer):
    item_type_display = serializers.CharField(source='get_item_type_display', read_only=True)
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True, default=None)
    period_name = serializers.CharField(source='period.period_name', read_only=True, default=None)
    remaining_quantity = serializers.DecimalField(max_digits=12, decimal_places=3, required=False)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Purchase
        fields = ['id', 'item_name', 'item_type', 'item_type_display', 'unit', 'quantity', 'remaining_quantity',
                  'unit_cost', 'total_cost', 'supplier', 'purchase_date', 'reorder_level', 'is_low_stock',
                  'ingredient', 'ingredient_name', 'period', 'period_name', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = ['total_cost', 'created_at', 'updated_at']

    def _owned(self, obj, label):
        request = self.context.get('request')
        if obj is not None and request is not None and obj.user_id != request.user.id:
            raise serializers.ValidationError(f"{label} not found.")
        return obj

    def validate_ingredient(self, value):
        if self.instance is not None and value != self.instance.ingredient:
            raise serializers.ValidationError("The linked ingredient cannot be changed after purchase.")
        return self._owned(value, 'Ingredient')

    def validate_period(self, value):
        return self._owned(value, 'Inventory period')

    def validate_item_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Item name is required.")
        return value

    def validate_remaining_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Remaining quantity cannot be negative.")
        return value

    def validate_reorder_level(self, value):
        if value < 0:
            raise serializers.ValidationError("Reorder level cannot be negative.")
        return value


class RestockSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal('0.001'))
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal('0'), required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class InventoryItemSerializer(serializers.ModelSerializer):
    """Purchase with stock left, offered as a selectable inventory item"""
    class Meta:
        model = Purchase
        fields = ['id', 'item_name', 'item_type', 'unit', 'remaining_quantity', 'unit_cost',
                  'supplier', 'purchase_date', 'ingredient']


class InventoryTransactionSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='purchase.item_name', read_only=True)
    item_type = serializers.CharField(source='purchase.item_type', read_only=True)
    unit = serializers.CharField(source='purchase.unit', read_only=True)

    class Meta:
        model = InventoryTransaction
        fields = ['id', 'purchase', 'item_name', 'item_type', 'unit', 'transaction_type', 'quantity',
                  'unit_cost', 'total_cost', 'balance_after', 'notes', 'created_at']
