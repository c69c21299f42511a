from django.contrib import admin
from .models import Ingredient, Recipe, RecipeIngredient


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'category', 'unit', 'cost_per_unit', 'current_stock', 'reorder_level', 'is_low_stock']
    list_filter = ['unit', 'category']
    search_fields = ['name', 'category', 'supplier', 'user__email']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']

    def is_low_stock(self, obj):
        return obj.is_low_stock
    is_low_stock.boolean = True
    is_low_stock.short_description = 'Low Stock'


class RecipeIngredientInline(admin.TabularInline):
    model = RecipeIngredient
    extra = 1
    fields = ['ingredient', 'quantity']


@admin.register(Recipe)
class RecipeAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'category', 'servings', 'selling_price', 'is_active', 'created_at']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'description', 'user__email']
    ordering = ['name']
    inlines = [RecipeIngredientInline]
    readonly_fields = ['created_at', 'updated_at']
