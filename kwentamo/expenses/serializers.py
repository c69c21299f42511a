from rest_framework import serializers
from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    monthly_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    expense_type_display = serializers.CharField(source='get_expense_type_display', read_only=True)

    class Meta:
        model = Expense
        fields = ['id', 'category', 'category_display', 'expense_type', 'expense_type_display',
                  'description', 'amount', 'frequency', 'monthly_amount', 'expense_date', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def to_internal_value(self, data):
        # Accept lower-case choice values from spreadsheets and older clients
        if hasattr(data, 'copy'):
            data = data.copy()
            for field in ('category', 'expense_type', 'frequency'):
                value = data.get(field)
                if isinstance(value, str):
                    data[field] = value.strip().upper()
        return super().to_internal_value(data)

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Description is required.")
        return value
