import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from kwentamo.core.utils import create_audit_log
from kwentamo.expenses.serializers import ExpenseSerializer
from kwentamo.purchasing.serializers import PurchaseSerializer
from .parser import parse_receipt_text
from .serializers import (
    ParseTextSerializer, SaveScannedItemsSerializer, CategoryCorrectionSerializer, CategoryMemorySerializer,
    scanned_item_payload,
)
from . import services

logger = logging.getLogger(__name__)


def _float_or_none(value):
    return float(value) if value is not None else None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def receipt_parse_text(request):
    """Split pasted receipt text into categorised items for review"""
    serializer = ParseTextSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = parse_receipt_text(
        request.user, serializer.validated_data['text'], serializer.validated_data.get('vendor') or None
    )
    validation = result['total_validation']
    return Response({
        **result,
        'items': [scanned_item_payload(item) for item in result['items']],
        'total_validation': {
            'stated_total': _float_or_none(validation['stated_total']),
            'computed_total': float(validation['computed_total']),
            'difference': _float_or_none(validation['difference']),
            'matches': validation['matches'],
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def receipt_save_items(request):
    """Save reviewed receipt items as purchases and expenses; nothing is saved if any item is invalid"""
    serializer = SaveScannedItemsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    purchases, expenses = services.save_scanned_items(
        request.user, data['inventory_items'], data['expense_items'],
        vendor=data['vendor'], receipt_date=data.get('date'),
    )
    if purchases:
        create_audit_log(
            request=request, action='bulk_create', model_name='Purchase',
            object_name=f"Receipt: {len(purchases)} purchases",
            changes={'ids': [purchase.id for purchase in purchases], 'vendor': data['vendor']},
        )
    if expenses:
        create_audit_log(
            request=request, action='bulk_create', model_name='Expense',
            object_name=f"Receipt: {len(expenses)} expenses",
            changes={'ids': [expense.id for expense in expenses], 'vendor': data['vendor']},
        )

    return Response({
        'inventory_saved': len(purchases),
        'expenses_saved': len(expenses),
        'purchases': PurchaseSerializer(purchases, many=True).data,
        'expenses': ExpenseSerializer(expenses, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def receipt_learn(request):
    """Remember user corrections so the same items are categorised the same way next time"""
    rows = request.data.get('corrections') if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'Provide a non-empty list of corrections'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = CategoryCorrectionSerializer(data=rows, many=True)
    if not serializer.is_valid():
        errors = [
            {'index': index, 'errors': row_errors}
            for index, row_errors in enumerate(serializer.errors)
            if row_errors
        ]
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    saved_count = services.learn_from_corrections(request.user, serializer.validated_data)
    create_audit_log(
        request=request, action='update', model_name='CategoryMemory',
        object_name='Receipt corrections', changes={'saved': saved_count},
    )
    return Response({'saved_count': saved_count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def receipt_learning_stats(request):
    stats = services.learning_stats(request.user)
    stats['most_used'] = CategoryMemorySerializer(stats['most_used'], many=True).data
    return Response(stats)
