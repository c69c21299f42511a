from django.urls import path
from .views import (
    ingredient_list_create, ingredient_bulk_create, ingredient_detail,
    ingredient_low_stock, ingredient_categories,
    recipe_list_create, recipe_detail, recipe_cost,
)

urlpatterns = [
    # Ingredient endpoints
    path('ingredients/', ingredient_list_create, name='ingredient-list-create'),
    path('ingredients/bulk/', ingredient_bulk_create, name='ingredient-bulk-create'),
    path('ingredients/low-stock/', ingredient_low_stock, name='ingredient-low-stock'),
    path('ingredients/categories/', ingredient_categories, name='ingredient-categories'),
    path('ingredients/<int:pk>/', ingredient_detail, name='ingredient-detail'),

    # Recipe endpoints
    path('recipes/', recipe_list_create, name='recipe-list-create'),
    path('recipes/<int:pk>/', recipe_detail, name='recipe-detail'),
    path('recipes/<int:pk>/cost/', recipe_cost, name='recipe-cost'),
]
