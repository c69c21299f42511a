import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Sum, Count, F, Q
from django.shortcuts import get_object_or_404
from .models import Purchase, InventoryTransaction
from .serializers import (
    PurchaseSerializer, RestockSerializer, InventoryItemSerializer, InventoryTransactionSerializer,
)
from .filters import PurchaseFilter, InventoryTransactionFilter
from . import services
from kwentamo.core.pagination import paginate
from kwentamo.core.utils import create_audit_log, diff_fields

logger = logging.getLogger(__name__)

PURCHASE_AUDIT_FIELDS = ['item_name', 'item_type', 'unit', 'quantity', 'remaining_quantity', 'unit_cost',
                         'supplier', 'purchase_date', 'reorder_level', 'period']


def _purchase_queryset(user):
    return Purchase.objects.filter(user=user).select_related('ingredient', 'period')


def _audit_purchase_created(request, purchase):
    create_audit_log(
        request=request, action='create', model_name='Purchase',
        object_id=purchase.id, object_name=purchase.item_name,
        changes={'quantity': str(purchase.quantity), 'total_cost': str(purchase.total_cost)},
    )
    if purchase.ingredient_id:
        create_audit_log(
            request=request, action='stock_purchase', model_name='Ingredient',
            object_id=purchase.ingredient_id, object_name=purchase.ingredient.name,
            changes={'added': str(purchase.quantity), 'purchase_id': purchase.id},
        )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_list_create(request):
    """List purchases (paginated) or record a new purchase"""
    if request.method == 'GET':
        filterset = PurchaseFilter(request.query_params, queryset=_purchase_queryset(request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('-purchase_date', '-id')
        return paginate(request, queryset, PurchaseSerializer)

    serializer = PurchaseSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        data = dict(serializer.validated_data)
        data.pop('remaining_quantity', None)
        purchase = services.create_purchase(request.user, data)
        _audit_purchase_created(request, purchase)
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_bulk_create(request):
    """Record many purchases at once; nothing is saved if any row is invalid"""
    rows = request.data.get('purchases') if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'Provide a non-empty list of purchases'}, status=status.HTTP_400_BAD_REQUEST)

    serializers_ = [PurchaseSerializer(data=row, context={'request': request}) for row in rows]
    errors = [
        {'index': index, 'errors': serializer.errors}
        for index, serializer in enumerate(serializers_)
        if not serializer.is_valid()
    ]
    if errors:
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    created = []
    with transaction.atomic():
        for serializer in serializers_:
            data = dict(serializer.validated_data)
            data.pop('remaining_quantity', None)
            created.append(services.create_purchase(request.user, data))

    for purchase in created:
        _audit_purchase_created(request, purchase)
    return Response({
        'created': len(created),
        'results': PurchaseSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_detail(request, pk):
    """Retrieve, update or delete a purchase"""
    purchase = get_object_or_404(_purchase_queryset(request.user), pk=pk)

    if request.method == 'GET':
        return Response(PurchaseSerializer(purchase).data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(purchase, request.data, PURCHASE_AUDIT_FIELDS)
        serializer = PurchaseSerializer(
            purchase, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            purchase = services.update_purchase(purchase, dict(serializer.validated_data))
            create_audit_log(
                request=request, action='update', model_name='Purchase',
                object_id=purchase.id, object_name=purchase.item_name, changes=changes,
            )
            return Response(PurchaseSerializer(_purchase_queryset(request.user).get(pk=purchase.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        purchase_id, item_name = purchase.id, purchase.item_name
        reversed_stock = services.delete_purchase(purchase)
        create_audit_log(
            request=request, action='delete', model_name='Purchase',
            object_id=purchase_id, object_name=item_name,
            changes={'stock_reversed': reversed_stock},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_restock(request, pk):
    """Add quantity to an existing purchase, optionally at a new unit cost"""
    purchase = get_object_or_404(Purchase, pk=pk, user=request.user)
    serializer = RestockSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    purchase, txn = services.restock_purchase(
        purchase, data['quantity'], data.get('unit_cost'), data.get('notes', '')
    )
    create_audit_log(
        request=request, action='restock', model_name='Purchase',
        object_id=purchase.id, object_name=purchase.item_name,
        changes={'quantity': str(txn.quantity), 'unit_cost': str(txn.unit_cost),
                 'remaining_quantity': str(purchase.remaining_quantity)},
    )
    return Response({
        'purchase': PurchaseSerializer(_purchase_queryset(request.user).get(pk=purchase.pk)).data,
        'transaction': InventoryTransactionSerializer(txn).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_transactions(request, pk):
    """Stock movements of one purchase, newest first"""
    purchase = get_object_or_404(Purchase, pk=pk, user=request.user)
    queryset = purchase.transactions.select_related('purchase').order_by('-created_at', '-id')
    return Response(InventoryTransactionSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_stats(request):
    filterset = PurchaseFilter(request.query_params, queryset=Purchase.objects.filter(user=request.user))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    queryset = filterset.qs

    totals = queryset.aggregate(total=Sum('total_cost'), count=Count('id'))
    by_type = {}
    for row in queryset.values('item_type').annotate(total=Sum('total_cost'), count=Count('id')):
        by_type[row['item_type']] = {'total': float(row['total'] or 0), 'count': row['count']}
    for item_type in ('RAW_MATERIAL', 'PACKAGING'):
        by_type.setdefault(item_type, {'total': 0.0, 'count': 0})

    by_supplier = [
        {
            'supplier': row['supplier'] or 'Unspecified',
            'total': float(row['total'] or 0),
            'count': row['count'],
        }
        for row in queryset.values('supplier').annotate(total=Sum('total_cost'), count=Count('id')).order_by('-total')
    ]

    return Response({
        'total_spent': float(totals['total'] or Decimal('0.00')),
        'count': totals['count'],
        'low_stock_count': queryset.filter(remaining_quantity__lte=F('reorder_level')).count(),
        'by_type': by_type,
        'by_supplier': by_supplier,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock_alerts(request):
    """Purchased items whose remaining quantity is at or below their reorder level"""
    queryset = _purchase_queryset(request.user).filter(
        remaining_quantity__lte=F('reorder_level')
    ).order_by('remaining_quantity', 'item_name')
    return Response(PurchaseSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_items(request):
    """Purchases with stock left, for pickers (recipes, snapshots)"""
    queryset = Purchase.objects.filter(user=request.user, remaining_quantity__gt=0)
    item_type = request.query_params.get('item_type')
    if item_type:
        queryset = queryset.filter(item_type=item_type.upper())
    queryset = queryset.order_by('item_name', '-purchase_date')
    return Response(InventoryItemSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_transaction_list(request):
    queryset = InventoryTransaction.objects.filter(user=request.user).select_related('purchase')
    filterset = InventoryTransactionFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    return paginate(request, filterset.qs.order_by('-created_at', '-id'), InventoryTransactionSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_transaction_stats(request):
    queryset = InventoryTransaction.objects.filter(user=request.user)
    totals = queryset.aggregate(
        count=Count('id'),
        quantity_in=Sum('quantity', filter=Q(quantity__gt=0)),
        quantity_out=Sum('quantity', filter=Q(quantity__lt=0)),
        value_in=Sum('total_cost', filter=Q(quantity__gt=0)),
    )
    by_type = {
        row['transaction_type']: {'count': row['count'], 'total_cost': float(row['total'] or 0)}
        for row in queryset.values('transaction_type').annotate(count=Count('id'), total=Sum('total_cost'))
    }
    return Response({
        'total_transactions': totals['count'],
        'quantity_in': float(totals['quantity_in'] or 0),
        'quantity_out': float(abs(totals['quantity_out'] or 0)),
        'value_in': float(totals['value_in'] or 0),
        'by_type': by_type,
    })
