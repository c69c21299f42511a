from django.conf import settings
from rest_framework import serializers
from kwentamo.core import formulas
from .models import Ingredient, Recipe, RecipeIngredient
from .costing import ingredient_cost_per_serving


class IngredientSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_value = serializers.SerializerMethodField()
    unit_display = serializers.CharField(source='get_unit_display', read_only=True)

    class Meta:
        model = Ingredient
        fields = ['id', 'name', 'category', 'unit', 'unit_display', 'cost_per_unit', 'current_stock',
                  'reorder_level', 'supplier', 'notes', 'is_low_stock', 'stock_value',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_stock_value(self, obj):
        return formulas.money(obj.stock_value)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_current_stock(self, value):
        if value < 0:
            raise serializers.ValidationError("Stock cannot be negative.")
        return value

    def create(self, validated_data):
        validated_data.setdefault('reorder_level', settings.KWENTAMO['LOW_STOCK_THRESHOLD'])
        return super().create(validated_data)


class RecipeIngredientSerializer(serializers.ModelSerializer):
    ingredient = serializers.PrimaryKeyRelatedField(queryset=Ingredient.objects.all())
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True)
    unit = serializers.CharField(source='ingredient.unit', read_only=True)
    cost_per_unit = serializers.DecimalField(
        source='ingredient.cost_per_unit', max_digits=12, decimal_places=4, read_only=True
    )
    line_cost = serializers.SerializerMethodField()

    class Meta:
        model = RecipeIngredient
        fields = ['id', 'ingredient', 'ingredient_name', 'unit', 'cost_per_unit', 'quantity', 'line_cost']

    def get_line_cost(self, obj):
        return formulas.money(obj.get_line_cost())


class RecipeSerializer(serializers.ModelSerializer):
    ingredients = RecipeIngredientSerializer(source='recipe_ingredients', many=True, required=False)
    ingredient_cost_per_serving = serializers.SerializerMethodField()

    class Meta:
        model = Recipe
        fields = ['id', 'name', 'description', 'category', 'servings', 'preparation_time',
                  'labor_rate_per_hour', 'selling_price', 'image_url', 'is_active',
                  'ingredients', 'ingredient_cost_per_serving', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_ingredient_cost_per_serving(self, obj):
        return ingredient_cost_per_serving(obj)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_selling_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Selling price cannot be negative.")
        return value

    def validate_ingredients(self, value):
        request = self.context.get('request')
        seen = set()
        for line in value:
            ingredient = line['ingredient']
            if request is not None and ingredient.user_id != request.user.id:
                raise serializers.ValidationError(f"Ingredient {ingredient.id} not found.")
            if ingredient.id in seen:
                raise serializers.ValidationError(f"Ingredient '{ingredient.name}' is listed more than once.")
            seen.add(ingredient.id)
        return value

    def _save_lines(self, recipe, lines):
        RecipeIngredient.objects.bulk_create([
            RecipeIngredient(recipe=recipe, ingredient=line['ingredient'], quantity=line['quantity'])
            for line in lines
        ])

    def create(self, validated_data):
        lines = validated_data.pop('recipe_ingredients', [])
        recipe = Recipe.objects.create(**validated_data)
        self._save_lines(recipe, lines)
        return recipe

    def update(self, instance, validated_data):
        lines = validated_data.pop('recipe_ingredients', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        # Lines are replaced only when the payload carries them
        if lines is not None:
            instance.recipe_ingredients.all().delete()
            self._save_lines(instance, lines)
        return instance
