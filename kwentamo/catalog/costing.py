"""
Recipe costing.

Ingredient cost comes from the recipe lines at the ingredients' current unit
cost. Labor is prep minutes at the recipe's hourly rate; overhead is a share of
ingredient cost (business overhead rate, 15% by default).
"""
from django.conf import settings

from kwentamo.core import formulas

SUGGESTED_MARKUPS = (30, 50, 100)


def recipe_lines(recipe):
    return [(line.quantity, line.ingredient.cost_per_unit) for line in recipe.recipe_ingredients.all()]


def ingredient_cost_per_serving(recipe):
    """Ingredient-only cost of one serving, used as the COGS of a sale"""
    total = formulas.calculate_total_recipe_cost(recipe_lines(recipe))
    return formulas.calculate_cost_per_serving(total, recipe.servings)


def recipe_cost_breakdown(recipe):
    lines = list(recipe.recipe_ingredients.select_related('ingredient'))
    ingredients = []
    for line in lines:
        ingredients.append({
            'ingredient_id': line.ingredient_id,
            'name': line.ingredient.name,
            'unit': line.ingredient.unit,
            'quantity': line.quantity,
            'cost_per_unit': line.ingredient.cost_per_unit,
            'line_cost': formulas.money(line.get_line_cost()),
        })

    ingredients_cost = formulas.calculate_total_recipe_cost(
        (line.quantity, line.ingredient.cost_per_unit) for line in lines
    )
    labor_cost = formulas.calculate_labor_cost(recipe.preparation_time, recipe.labor_rate_per_hour)
    overhead_cost = formulas.calculate_overhead(ingredients_cost, recipe.get_overhead_rate())
    total_cost = formulas.money(ingredients_cost + labor_cost + overhead_cost)
    cost_per_serving = formulas.calculate_cost_per_serving(total_cost, recipe.servings)

    profitability = formulas.calculate_recipe_profitability(cost_per_serving, recipe.selling_price)
    warning_threshold = settings.KWENTAMO['PROFIT_MARGIN_WARNING']

    return {
        'recipe_id': recipe.id,
        'recipe_name': recipe.name,
        'servings': recipe.servings,
        'selling_price': recipe.selling_price,
        'ingredients': ingredients,
        'ingredients_cost': ingredients_cost,
        'labor_cost': labor_cost,
        'overhead_cost': overhead_cost,
        'total_cost': total_cost,
        'cost_per_serving': cost_per_serving,
        'profit_per_serving': profitability['profit_per_unit'],
        'profit_margin': profitability['profit_margin'],
        'margin_warning': profitability['profit_margin'] < warning_threshold,
        'suggested_prices': {
            f'{markup}%': formulas.calculate_selling_price(cost_per_serving, markup)
            for markup in SUGGESTED_MARKUPS
        },
    }
