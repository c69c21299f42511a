from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count
from django.shortcuts import get_object_or_404
from .models import Sale
from .serializers import SaleSerializer
from .filters import SaleFilter
from . import services
from kwentamo.core.utils import create_audit_log, diff_fields


def _sale_queryset(user):
    return Sale.objects.filter(user=user).select_related('recipe')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List sales or record a new one (consumes ingredient stock)"""
    if request.method == 'GET':
        filterset = SaleFilter(request.query_params, queryset=_sale_queryset(request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = SaleSerializer(filterset.qs.order_by('-sale_date', '-created_at'), many=True)
        return Response(serializer.data)

    serializer = SaleSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        sale = services.record_sale(Sale(user=request.user, **serializer.validated_data))
        create_audit_log(
            request=request, action='create', model_name='Sale',
            object_id=sale.id, object_name=sale.recipe.name,
            changes={'quantity': sale.quantity, 'total_price': str(sale.total_price)},
        )
        if sale.stock_usage:
            create_audit_log(
                request=request, action='stock_sale', model_name='Sale',
                object_id=sale.id, object_name=sale.recipe.name,
                changes={'ingredients_used': sale.stock_usage},
            )
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve, update or delete a sale"""
    sale = get_object_or_404(_sale_queryset(request.user), pk=pk)

    if request.method == 'GET':
        return Response(SaleSerializer(sale).data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(sale, request.data, ['recipe', 'quantity', 'unit_price', 'sale_date'])
        serializer = SaleSerializer(
            sale, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            sale = services.revise_sale(sale, dict(serializer.validated_data))
            create_audit_log(
                request=request, action='update', model_name='Sale',
                object_id=sale.id, object_name=sale.recipe.name, changes=changes,
            )
            return Response(SaleSerializer(sale).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        sale_id, recipe_name = sale.id, sale.recipe.name
        services.remove_sale(sale)
        create_audit_log(
            request=request, action='delete', model_name='Sale',
            object_id=sale_id, object_name=recipe_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


def sales_totals(queryset):
    totals = queryset.aggregate(
        revenue=Sum('total_price'),
        cost=Sum('cost_of_goods'),
        profit=Sum('profit'),
        count=Count('id'),
        units=Sum('quantity'),
    )
    return {
        'total_revenue': totals['revenue'] or Decimal('0.00'),
        'total_cost': totals['cost'] or Decimal('0.00'),
        'total_profit': totals['profit'] or Decimal('0.00'),
        'sales_count': totals['count'],
        'units_sold': totals['units'] or 0,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_stats(request):
    filterset = SaleFilter(request.query_params, queryset=Sale.objects.filter(user=request.user))
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    totals = sales_totals(filterset.qs)
    return Response({
        'total_revenue': float(totals['total_revenue']),
        'total_cost': float(totals['total_cost']),
        'total_profit': float(totals['total_profit']),
        'sales_count': totals['sales_count'],
        'units_sold': totals['units_sold'],
    })
