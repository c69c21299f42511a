"""
Staff-only views across every user's data.

All endpoints require an authenticated staff user (IsAdminUser); other callers
get 403.
"""
import logging
from datetime import timedelta

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.db.models import Sum, Count, F, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from kwentamo.business.serializers import BusinessSerializer
from kwentamo.catalog.models import Ingredient, Recipe
from kwentamo.core.models import AuditLog, User
from kwentamo.core.pagination import paginate
from kwentamo.core.serializers import AuditLogSerializer
from kwentamo.core.utils import create_audit_log, date_range_or_error, period_payload
from kwentamo.core.views import issue_tokens
from kwentamo.expenses.models import Expense
from kwentamo.expenses.views import expense_summary
from kwentamo.purchasing.models import Purchase, InventoryTransaction
from kwentamo.receipts.models import CategoryMemory
from kwentamo.receipts.serializers import CategoryMemorySerializer
from kwentamo.reports import calculations
from kwentamo.sales.models import Sale
from kwentamo.sales.views import sales_totals
from .serializers import (
    AdminUserSerializer, AdminRecipeSerializer, AdminSaleSerializer, AdminExpenseSerializer,
    AdminPurchaseSerializer, AdminInventoryTransactionSerializer,
)

logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = [IsAuthenticated, IsAdminUser]


def _limit_param(request, default, maximum=100):
    try:
        limit = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, maximum))


def _count_and_sum(queryset, field):
    totals = queryset.aggregate(count=Count('id'), total=Sum(field))
    return {'count': totals['count'], 'amount': float(totals['total'] or 0)}


# Dashboard
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_stats(request):
    """Platform-wide counts and this month's figures"""
    month = calculations.dashboard_summary(None, timezone.localdate())
    return Response({
        'overview': {
            'total_users': User.objects.count(),
            'active_users': User.objects.filter(is_active=True).count(),
            'total_recipes': Recipe.objects.count(),
            'total_sales': Sale.objects.count(),
            'total_expenses': Expense.objects.count(),
            'total_inventory_items': Ingredient.objects.count() + Purchase.objects.count(),
            'low_stock_alerts': month['low_stock_count'],
        },
        'financial': {
            'monthly_revenue': month['revenue'],
            'monthly_expenses': month['expenses'],
            'monthly_cogs': month['cogs'],
            'net_profit': month['net_profit'],
            'revenue_change': month['revenue_change'],
        },
    })


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_activity(request):
    """Most recent sales, expenses and purchases across all users, newest first"""
    limit = _limit_param(request, 20)
    activity = []
    for sale in Sale.objects.select_related('user', 'recipe').order_by('-created_at')[:limit]:
        activity.append({
            'type': 'sale', 'id': sale.id, 'amount': float(sale.total_price),
            'description': f"Sold {sale.quantity} x {sale.recipe.name}",
            'user': sale.user.email or sale.user.username, 'created_at': sale.created_at,
        })
    for expense in Expense.objects.select_related('user').order_by('-created_at')[:limit]:
        activity.append({
            'type': 'expense', 'id': expense.id, 'amount': float(expense.amount),
            'description': expense.description,
            'user': expense.user.email or expense.user.username, 'created_at': expense.created_at,
        })
    for purchase in Purchase.objects.select_related('user').order_by('-created_at')[:limit]:
        activity.append({
            'type': 'purchase', 'id': purchase.id, 'amount': float(purchase.total_cost),
            'description': f"Bought {purchase.quantity} {purchase.unit} {purchase.item_name}",
            'user': purchase.user.email or purchase.user.username, 'created_at': purchase.created_at,
        })
    activity.sort(key=lambda item: item['created_at'], reverse=True)
    return Response(activity[:limit])


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_low_stock(request):
    limit = _limit_param(request, 10)
    queryset = Ingredient.objects.select_related('user').filter(
        current_stock__lte=F('reorder_level')
    ).order_by('current_stock', 'name')[:limit]
    return Response([
        {
            'id': ingredient.id,
            'name': ingredient.name,
            'quantity': float(ingredient.current_stock),
            'unit': ingredient.unit,
            'reorder_level': float(ingredient.reorder_level),
            'user_name': ingredient.user.name,
            'user_email': ingredient.user.email,
        }
        for ingredient in queryset
    ])


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_revenue_chart(request):
    """Platform revenue vs expenses for the last 6 months"""
    return Response(calculations.chart_series(None, 'monthly', timezone.localdate()))


# Users
def _annotated_users():
    return User.objects.select_related('business').annotate(
        recipes_count=Count('recipes', distinct=True),
        sales_count=Count('sales', distinct=True),
        expenses_count=Count('expenses', distinct=True),
        ingredients_count=Count('ingredients', distinct=True),
    )


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_users(request):
    queryset = _annotated_users()
    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(
            Q(username__icontains=search) | Q(email__icontains=search) | Q(name__icontains=search)
            | Q(business__business_name__icontains=search)
        )
    return paginate(request, queryset.order_by('-date_joined'), AdminUserSerializer)


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_user_detail(request, pk):
    """One user's profile, business, totals and latest records"""
    user = get_object_or_404(_annotated_users(), pk=pk)
    totals = sales_totals(user.sales.all())
    expenses = _count_and_sum(user.expenses.all(), 'amount')
    purchases = _count_and_sum(user.purchases.all(), 'total_cost')
    business = getattr(user, 'business', None)

    return Response({
        'user': AdminUserSerializer(user).data,
        'business': BusinessSerializer(business).data if business else None,
        'stats': {
            'revenue': float(totals['total_revenue']),
            'profit': float(totals['total_profit']),
            'sales_count': totals['sales_count'],
            'expenses_total': expenses['amount'],
            'expenses_count': expenses['count'],
            'purchases_total': purchases['amount'],
            'purchases_count': purchases['count'],
        },
        'recent_sales': AdminSaleSerializer(
            user.sales.select_related('recipe', 'user').order_by('-sale_date', '-created_at')[:5], many=True
        ).data,
        'recent_expenses': AdminExpenseSerializer(
            user.expenses.select_related('user').order_by('-expense_date', '-created_at')[:5], many=True
        ).data,
        'recent_recipes': AdminRecipeSerializer(
            user.recipes.select_related('user').prefetch_related('recipe_ingredients__ingredient')
            .order_by('-created_at')[:5], many=True
        ).data,
    })


@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_user_impersonate(request, pk):
    """
    Issue a token pair that acts as another user.

    The tokens carry `impersonated_by` with the admin's id; audit entries made
    with them record the admin as impersonator. Staff accounts and the caller
    cannot be impersonated.
    """
    target = get_object_or_404(User, pk=pk)
    if target.pk == request.user.pk:
        return Response({'error': 'You cannot impersonate yourself'}, status=status.HTTP_400_BAD_REQUEST)
    if target.is_staff or target.is_superuser:
        return Response({'error': 'Admin accounts cannot be impersonated'}, status=status.HTTP_403_FORBIDDEN)
    if not target.is_active:
        return Response({'error': 'User account is disabled.'}, status=status.HTTP_400_BAD_REQUEST)

    tokens = issue_tokens(target, impersonated_by=request.user.id)
    create_audit_log(
        request=request, action='impersonate_start', model_name='User',
        object_id=target.id, object_name=target.username,
        changes={'admin_id': request.user.id},
    )
    logger.info(f"Admin {request.user.id} started impersonating user {target.id}")
    return Response({
        'user': AdminUserSerializer(_annotated_users().get(pk=target.pk)).data,
        'impersonated_by': request.user.id,
        **tokens,
    })


# Inventory
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_inventory(request):
    """Purchased inventory items of all users (paginated)"""
    queryset = Purchase.objects.select_related('user', 'ingredient', 'period')
    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(Q(item_name__icontains=search) | Q(supplier__icontains=search))
    item_type = request.query_params.get('type') or request.query_params.get('item_type')
    if item_type:
        queryset = queryset.filter(item_type=item_type.upper())
    return paginate(request, queryset.order_by('-purchase_date', '-id'), AdminPurchaseSerializer)


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_inventory_stats(request):
    by_type = [
        {
            'item_type': row['item_type'],
            'count': row['count'],
            'quantity': float(row['quantity'] or 0),
            'value': float(row['value'] or 0),
        }
        for row in Purchase.objects.values('item_type').annotate(
            count=Count('id'),
            quantity=Sum('remaining_quantity'),
            value=Sum(F('remaining_quantity') * F('unit_cost')),
        ).order_by('item_type')
    ]
    purchases = _count_and_sum(Purchase.objects.all(), 'total_cost')
    return Response({
        'total_items': purchases['count'],
        'total_spent': purchases['amount'],
        'low_stock_items': Purchase.objects.filter(remaining_quantity__lte=F('reorder_level')).count(),
        'ingredients': Ingredient.objects.count(),
        'low_stock_ingredients': calculations.low_stock_count(),
        'by_type': by_type,
    })


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_inventory_transactions(request):
    queryset = InventoryTransaction.objects.select_related('user', 'purchase')
    transaction_type = request.query_params.get('type')
    if transaction_type:
        queryset = queryset.filter(transaction_type=transaction_type.upper())
    return paginate(request, queryset.order_by('-created_at', '-id'), AdminInventoryTransactionSerializer)


# Recipes
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_recipes(request):
    queryset = Recipe.objects.select_related('user').prefetch_related(
        'recipe_ingredients__ingredient'
    ).annotate(quantity_sold=Sum('sales__quantity'))
    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category__iexact=category)
    return paginate(request, queryset.order_by('name', 'id'), AdminRecipeSerializer)


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_recipe_stats(request):
    top_selling = [
        {
            'recipe_id': row['recipe_id'],
            'name': row['recipe__name'],
            'quantity_sold': row['quantity'],
            'revenue': float(row['revenue'] or 0),
        }
        for row in Sale.objects.values('recipe_id', 'recipe__name').annotate(
            quantity=Sum('quantity'), revenue=Sum('total_price')
        ).order_by('-quantity')[:10]
    ]
    categories = [
        {'category': row['category'] or 'Uncategorized', 'count': row['count']}
        for row in Recipe.objects.values('category').annotate(count=Count('id')).order_by('-count')
    ]
    return Response({
        'total_recipes': Recipe.objects.count(),
        'active_recipes': Recipe.objects.filter(is_active=True).count(),
        'categories': categories,
        'top_selling': top_selling,
    })


# Sales
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_sales(request):
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error
    queryset = calculations.sales_in_range(None, date_from, date_to).select_related('user', 'recipe')
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(recipe__category__iexact=category)

    response = paginate(request, queryset.order_by('-sale_date', '-created_at'), AdminSaleSerializer)
    response.data['summary'] = {
        'total_revenue': float(sales_totals(queryset)['total_revenue']),
    }
    return response


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_sales_stats(request):
    today = timezone.localdate()
    week_start = today - timedelta(days=today.weekday())

    def block(queryset):
        totals = sales_totals(queryset)
        return {'count': totals['sales_count'], 'revenue': float(totals['total_revenue'])}

    by_category = [
        {
            'category': row['recipe__category'] or 'Uncategorized',
            'count': row['count'],
            'revenue': float(row['revenue'] or 0),
        }
        for row in Sale.objects.values('recipe__category').annotate(
            count=Count('id'), revenue=Sum('total_price')
        ).order_by('-revenue')
    ]
    return Response({
        'this_week': block(calculations.sales_in_range(None, week_start, today)),
        'this_month': block(calculations.sales_in_range(None, calculations.month_start(today), today)),
        'all_time': block(Sale.objects.all()),
        'by_category': by_category,
    })


# Expenses
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_expenses(request):
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error
    queryset = calculations.expenses_in_range(None, date_from, date_to).select_related('user')
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category=category.upper())
    expense_type = request.query_params.get('type')
    if expense_type:
        queryset = queryset.filter(expense_type=expense_type.upper())

    response = paginate(request, queryset.order_by('-expense_date', '-created_at'), AdminExpenseSerializer)
    response.data['summary'] = {
        'total_amount': float(calculations.expense_total(queryset)),
    }
    return response


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_expense_stats(request):
    today = timezone.localdate()
    summary = expense_summary(Expense.objects.all())
    return Response({
        'this_month': _count_and_sum(
            calculations.expenses_in_range(None, calculations.month_start(today), today), 'amount'
        ),
        'all_time': {'count': summary['count'], 'amount': summary['total']},
        'by_category': summary['by_category'],
        'by_type': [
            {'expense_type': expense_type, **values} for expense_type, values in summary['by_type'].items()
        ],
    })


# Reports
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_financial_summary(request):
    """Platform-wide income statement for a date range"""
    (date_from, date_to), error = date_range_or_error(request)
    if error:
        return error

    statement, _breakdown = calculations.income_statement(None, date_from, date_to)
    sales_count = calculations.sales_in_range(None, date_from, date_to).count()
    return Response({
        'period': period_payload(date_from, date_to),
        'revenue': {
            'total': float(statement['sales_revenue']),
            'sales_count': sales_count,
        },
        'costs': {
            'cogs': float(statement['cogs']),
            'operating_expenses': float(statement['operating_expenses']),
            'other_expenses': float(statement['other_expenses']),
        },
        'profit': {
            'gross': float(statement['gross_profit']),
            'gross_margin': float(statement['gross_profit_margin']),
            'operating': float(statement['operating_income']),
            'net': float(statement['net_profit']),
            'net_margin': float(statement['net_profit_margin']),
        },
    })


@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_audit_log(request):
    queryset = AuditLog.objects.select_related('user', 'impersonator')
    action = request.query_params.get('action') or request.query_params.get('type')
    if action:
        queryset = queryset.filter(action=action)
    user_id = request.query_params.get('user')
    if user_id:
        queryset = queryset.filter(user_id=user_id)
    return paginate(request, queryset.order_by('-created_at'), AuditLogSerializer)


@api_view(['GET', 'DELETE'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_category_memory(request):
    """Learned receipt categories of every user; DELETE forgets them all"""
    if request.method == 'DELETE':
        deleted, _ = CategoryMemory.objects.all().delete()
        create_audit_log(
            request=request, action='delete', model_name='CategoryMemory',
            object_name='All learned categories', changes={'deleted': deleted},
        )
        logger.info(f"Admin {request.user.id} cleared {deleted} learned categories")
        return Response({'deleted': deleted})

    queryset = CategoryMemory.objects.select_related('user')
    user_id = request.query_params.get('user')
    if user_id:
        queryset = queryset.filter(user_id=user_id)
    category = request.query_params.get('category')
    if category:
        queryset = queryset.filter(category=category.upper())
    return paginate(request, queryset.order_by('-use_count', 'item_pattern'), CategoryMemorySerializer)


@api_view(['DELETE'])
@permission_classes(ADMIN_PERMISSIONS)
def admin_category_memory_detail(request, pk):
    memory = get_object_or_404(CategoryMemory, pk=pk)
    create_audit_log(
        request=request, action='delete', model_name='CategoryMemory',
        object_id=memory.id, object_name=memory.item_pattern,
        changes={'category': memory.category, 'owner': memory.user_id},
    )
    memory.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
