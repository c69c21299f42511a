import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Sum, Count
from django.shortcuts import get_object_or_404
from .models import Expense
from .serializers import ExpenseSerializer
from .filters import ExpenseFilter
from kwentamo.core.formulas import money, total_monthly_expenses
from kwentamo.core.utils import create_audit_log, diff_fields

logger = logging.getLogger(__name__)

EXPENSE_AUDIT_FIELDS = ['category', 'expense_type', 'description', 'amount', 'frequency', 'expense_date']


def _filtered_expenses(request):
    """User's expenses narrowed by query params; returns (queryset, errors)"""
    filterset = ExpenseFilter(request.query_params, queryset=Expense.objects.filter(user=request.user))
    if not filterset.is_valid():
        return None, filterset.errors
    return filterset.qs, None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    """List the user's expenses or record a new one"""
    if request.method == 'GET':
        queryset, errors = _filtered_expenses(request)
        if errors:
            return Response(errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ExpenseSerializer(queryset.order_by('-expense_date', '-created_at'), many=True)
        return Response(serializer.data)

    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        expense = serializer.save(user=request.user)
        create_audit_log(
            request=request, action='create', model_name='Expense',
            object_id=expense.id, object_name=expense.description,
            changes={'amount': str(expense.amount), 'category': expense.category},
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def expense_bulk_create(request):
    """Create many expenses at once; nothing is saved if any row is invalid"""
    rows = request.data.get('expenses') if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'Provide a non-empty list of expenses'}, status=status.HTTP_400_BAD_REQUEST)

    serializers_ = [ExpenseSerializer(data=row) for row in rows]
    errors = [
        {'index': index, 'errors': serializer.errors}
        for index, serializer in enumerate(serializers_)
        if not serializer.is_valid()
    ]
    if errors:
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        created = [serializer.save(user=request.user) for serializer in serializers_]

    create_audit_log(
        request=request, action='bulk_create', model_name='Expense',
        object_id=created[0].id, object_name=f"{len(created)} expenses",
        changes={'count': len(created), 'total': str(sum((e.amount for e in created), Decimal('0.00')))},
    )
    logger.info(f"User {request.user.id} imported {len(created)} expenses")
    return Response({
        'created': len(created),
        'results': ExpenseSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    """Retrieve, update or delete an expense"""
    expense = get_object_or_404(Expense, pk=pk, user=request.user)

    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(expense, request.data, EXPENSE_AUDIT_FIELDS)
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Expense',
                object_id=expense.id, object_name=expense.description, changes=changes,
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        expense_id, description = expense.id, expense.description
        expense.delete()
        create_audit_log(
            request=request, action='delete', model_name='Expense',
            object_id=expense_id, object_name=description,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


def expense_summary(queryset):
    """Totals of recorded amounts and their monthly equivalents, by category and type"""
    expenses = list(queryset.only('amount', 'frequency', 'category', 'expense_type'))
    totals = queryset.aggregate(total=Sum('amount'), count=Count('id'))

    by_category = []
    labels = dict(Expense.CATEGORY_CHOICES)
    for category in sorted({e.category for e in expenses}):
        items = [e for e in expenses if e.category == category]
        by_category.append({
            'category': category,
            'label': labels.get(category, category),
            'count': len(items),
            'amount': float(money(sum((e.amount for e in items), Decimal('0')))),
            'monthly_amount': float(total_monthly_expenses(items)),
        })
    by_category.sort(key=lambda row: row['monthly_amount'], reverse=True)

    by_type = {}
    for expense_type, _label in Expense.TYPE_CHOICES:
        items = [e for e in expenses if e.expense_type == expense_type]
        by_type[expense_type] = {
            'count': len(items),
            'amount': float(money(sum((e.amount for e in items), Decimal('0')))),
            'monthly_amount': float(total_monthly_expenses(items)),
        }

    return {
        'total': float(totals['total'] or Decimal('0.00')),
        'count': totals['count'],
        'monthly_equivalent_total': float(total_monthly_expenses(expenses)),
        'by_category': by_category,
        'by_type': by_type,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_stats(request):
    queryset, errors = _filtered_expenses(request)
    if errors:
        return Response(errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(expense_summary(queryset))
