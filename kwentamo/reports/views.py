import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone

from kwentamo.catalog.costing import ingredient_cost_per_serving
from kwentamo.catalog.models import Recipe
from kwentamo.core import formulas
from kwentamo.core.cache_utils import get_cached_dashboard, cache_dashboard
from kwentamo.core.utils import date_range_or_error, period_payload
from kwentamo.expenses.views import expense_summary
from kwentamo.sales.views import sales_totals
from . import calculations, exports

logger = logging.getLogger('kwentamo.reports')

CHART_PERIODS = ('daily', 'weekly', 'monthly')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cogs_report(request):
    """Revenue against cost of goods sold, overall and per recipe"""
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error

    sales = calculations.sales_in_range(request.user, date_from, date_to)
    figures = calculations.sales_figures(sales)
    gross_profit = formulas.calculate_gross_profit(figures['revenue'], figures['cogs'])

    return Response({
        'period': period_payload(date_from, date_to),
        'summary': {
            'total_revenue': float(figures['revenue']),
            'total_cogs': float(figures['cogs']),
            'gross_profit': float(gross_profit),
            'gross_profit_margin': float(
                formulas.calculate_gross_profit_margin(figures['revenue'], figures['cogs'])
            ),
            'sales_count': figures['count'],
        },
        'by_recipe': calculations.recipe_profit_rows(sales),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def income_statement(request):
    """
    Income statement for a date range.

    Operating expenses are FIXED and VARIABLE expenses recorded in the range;
    OTHER expenses are reported below operating income.
    """
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error

    statement, breakdown = calculations.income_statement(request.user, date_from, date_to)
    logger.debug(f"Income statement for user {request.user.id}: net_profit={statement['net_profit']}")

    return Response({
        'period': period_payload(date_from, date_to),
        'revenue': float(statement['sales_revenue']),
        'cost_of_goods_sold': float(statement['cogs']),
        'gross_profit': float(statement['gross_profit']),
        'gross_profit_margin': float(statement['gross_profit_margin']),
        'operating_expenses': {
            'total': float(statement['operating_expenses']),
            'breakdown': breakdown,
        },
        'operating_income': float(statement['operating_income']),
        'operating_margin': float(statement['operating_margin']),
        'other_expenses': float(statement['other_expenses']),
        'net_profit': float(statement['net_profit']),
        'net_profit_margin': float(statement['net_profit_margin']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profit_summary(request):
    """Profit per recipe sold in the range, with totals"""
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error

    sales = calculations.sales_in_range(request.user, date_from, date_to)
    totals = sales_totals(sales)

    return Response({
        'period': period_payload(date_from, date_to),
        'recipes': calculations.recipe_profit_rows(sales),
        'totals': {
            'revenue': float(totals['total_revenue']),
            'cogs': float(totals['total_cost']),
            'profit': float(totals['total_profit']),
            'profit_margin': float(
                formulas.calculate_net_profit_margin(totals['total_profit'], totals['total_revenue'])
            ),
            'quantity': totals['units_sold'],
            'sales_count': totals['sales_count'],
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_breakdown(request):
    """Monthly-equivalent recurring costs by type and by category"""
    recurring = calculations.recurring_costs(request.user)
    summary = expense_summary(request.user.expenses.all())

    return Response({
        'fixed_costs': float(recurring['FIXED']),
        'variable_costs': float(recurring['VARIABLE']),
        'other_costs': float(recurring['OTHER']),
        'total_monthly': float(recurring['TOTAL']),
        'by_category': [
            {'category': row['category'], 'label': row['label'], 'count': row['count'],
             'monthly_amount': row['monthly_amount']}
            for row in summary['by_category']
        ],
        'count': summary['count'],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def break_even(request):
    """
    Break-even point of one recipe.

    Fixed costs are the monthly equivalent of FIXED expenses; the variable cost
    per unit is the recipe's ingredient cost per serving.
    """
    recipe_id = request.query_params.get('recipe')
    if not recipe_id:
        return Response({'error': 'recipe parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        recipe_id = int(recipe_id)
    except (TypeError, ValueError):
        return Response({'error': 'recipe must be an integer id'}, status=status.HTTP_400_BAD_REQUEST)

    recipe = get_object_or_404(
        Recipe.objects.prefetch_related('recipe_ingredients__ingredient'), pk=recipe_id, user=request.user
    )
    fixed_costs = calculations.recurring_costs(request.user)['FIXED']
    selling_price = recipe.selling_price
    variable_cost = ingredient_cost_per_serving(recipe)
    contribution_margin = formulas.money(selling_price - variable_cost)

    return Response({
        'recipe_id': recipe.id,
        'recipe_name': recipe.name,
        'fixed_costs': float(fixed_costs),
        'selling_price': float(selling_price),
        'variable_cost_per_unit': float(variable_cost),
        'contribution_margin': float(contribution_margin),
        'break_even_units': float(
            formulas.calculate_break_even_units(fixed_costs, selling_price, variable_cost)
        ),
        'break_even_revenue': float(
            formulas.calculate_break_even_revenue(fixed_costs, selling_price, variable_cost)
        ),
        'achievable': contribution_margin > 0,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Current-month figures against last month; cached per user"""
    cached, cache_key = get_cached_dashboard(request.user.id)
    if cached is not None:
        return Response(cached)

    try:
        data = calculations.dashboard_summary(request.user, timezone.localdate())
    except Exception as e:
        logger.error(f"Error in dashboard: {str(e)}", exc_info=True)
        return Response(
            {'error': 'An error occurred while generating the dashboard'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    cache_dashboard(cache_key, data)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def chart_data(request):
    """Revenue vs expenses: 7 days, 4 weeks or 6 months"""
    period = request.query_params.get('period', 'monthly').lower()
    if period not in CHART_PERIODS:
        return Response(
            {'error': f"period must be one of: {', '.join(CHART_PERIODS)}"},
            status=status.HTTP_400_BAD_REQUEST
        )
    return Response({
        'period': period,
        'data': calculations.chart_series(request.user, period, timezone.localdate()),
    })


def _export(request, registry, renderer):
    export_type = (request.query_params.get('type') or '').lower()
    if export_type not in registry:
        return Response(
            {'error': f"type must be one of: {', '.join(registry)}"},
            status=status.HTTP_400_BAD_REQUEST
        )
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error
    logger.info(f"User {request.user.id} exported {export_type}")
    return renderer(export_type, request.user, date_from, date_to)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_csv(request):
    return _export(request, exports.CSV_EXPORTS, exports.render_csv)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_excel(request):
    return _export(request, exports.EXCEL_EXPORTS, exports.render_excel)
