from rest_framework import serializers
from kwentamo.catalog.models import Recipe
from .models import Sale


class SaleSerializer(serializers.ModelSerializer):
    recipe = serializers.PrimaryKeyRelatedField(queryset=Recipe.objects.all())
    recipe_name = serializers.CharField(source='recipe.name', read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=0)
    profit_margin = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = ['id', 'recipe', 'recipe_name', 'quantity', 'unit_price', 'total_price', 'cost_of_goods',
                  'profit', 'profit_margin', 'sale_date', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['total_price', 'cost_of_goods', 'profit', 'created_at', 'updated_at']

    def get_profit_margin(self, obj):
        if not obj.total_price:
            return 0.0
        return round(float(obj.profit / obj.total_price * 100), 2)

    def validate_recipe(self, value):
        request = self.context.get('request')
        if request is not None and value.user_id != request.user.id:
            raise serializers.ValidationError("Recipe not found.")
        return value

    def validate_quantity(self, value):
        if value < 1:
            raise serializers.ValidationError("Quantity must be at least 1.")
        return value
