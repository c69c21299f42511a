import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from .models import InventoryPeriod, InventorySnapshot
from .serializers import (
    InventoryPeriodSerializer, InventoryPeriodDetailSerializer, InventorySnapshotSerializer,
    CopyFromPurchasesSerializer,
)
from .services import period_summary, copy_snapshots_from_purchases
from kwentamo.core.utils import create_audit_log, diff_fields

logger = logging.getLogger(__name__)


def _period_queryset(user):
    return InventoryPeriod.objects.filter(user=user).prefetch_related('snapshots')


def _deactivate_other_periods(user, keep_id=None):
    queryset = InventoryPeriod.objects.filter(user=user, is_active=True)
    if keep_id is not None:
        queryset = queryset.exclude(pk=keep_id)
    queryset.update(is_active=False)


# Period views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def period_list_create(request):
    """List inventory periods or open a new one"""
    if request.method == 'GET':
        serializer = InventoryPeriodSerializer(_period_queryset(request.user), many=True)
        return Response(serializer.data)

    serializer = InventoryPeriodSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            # Only one active period per user
            if serializer.validated_data.get('is_active'):
                _deactivate_other_periods(request.user)
            period = serializer.save(user=request.user)
        create_audit_log(
            request=request, action='create', model_name='InventoryPeriod',
            object_id=period.id, object_name=period.period_name,
        )
        return Response(InventoryPeriodSerializer(period).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def period_detail(request, pk):
    """Retrieve (with snapshots), update or delete a period"""
    period = get_object_or_404(_period_queryset(request.user), pk=pk)

    if request.method == 'GET':
        return Response(InventoryPeriodDetailSerializer(period).data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(period, request.data, ['period_name', 'start_date', 'end_date', 'is_active'])
        serializer = InventoryPeriodSerializer(period, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                if serializer.validated_data.get('is_active'):
                    _deactivate_other_periods(request.user, keep_id=period.id)
                serializer.save()
            create_audit_log(
                request=request, action='update', model_name='InventoryPeriod',
                object_id=period.id, object_name=period.period_name, changes=changes,
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        period_id, period_name = period.id, period.period_name
        period.delete()
        create_audit_log(
            request=request, action='delete', model_name='InventoryPeriod',
            object_id=period_id, object_name=period_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def period_active(request):
    period = _period_queryset(request.user).filter(is_active=True).first()
    if not period:
        return Response({'error': 'No active inventory period'}, status=status.HTTP_404_NOT_FOUND)
    return Response(InventoryPeriodDetailSerializer(period).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def period_latest(request):
    period = _period_queryset(request.user).order_by('-start_date', '-created_at').first()
    if not period:
        return Response({'error': 'No inventory periods yet'}, status=status.HTTP_404_NOT_FOUND)
    return Response(InventoryPeriodDetailSerializer(period).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def period_activate(request, pk):
    """Make this the user's active period, deactivating any other"""
    period = get_object_or_404(InventoryPeriod, pk=pk, user=request.user)
    with transaction.atomic():
        _deactivate_other_periods(request.user, keep_id=period.id)
        period.is_active = True
        period.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(
        request=request, action='period_activate', model_name='InventoryPeriod',
        object_id=period.id, object_name=period.period_name,
    )
    return Response(InventoryPeriodSerializer(_period_queryset(request.user).get(pk=period.pk)).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def period_summary_view(request, pk):
    """Beginning and ending inventory, purchases and COGS for a period"""
    period = get_object_or_404(InventoryPeriod, pk=pk, user=request.user)
    return Response(period_summary(period))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def period_copy_from_purchases(request, pk):
    period = get_object_or_404(InventoryPeriod, pk=pk, user=request.user)
    serializer = CopyFromPurchasesSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    snapshot_type = serializer.validated_data['snapshot_type']
    snapshots, replaced = copy_snapshots_from_purchases(period, snapshot_type)
    create_audit_log(
        request=request, action='snapshot_copy', model_name='InventoryPeriod',
        object_id=period.id, object_name=period.period_name,
        changes={'snapshot_type': snapshot_type, 'created': len(snapshots), 'replaced': replaced},
    )
    return Response({
        'snapshot_type': snapshot_type,
        'created': len(snapshots),
        'replaced': replaced,
        'snapshots': InventorySnapshotSerializer(snapshots, many=True).data,
    }, status=status.HTTP_201_CREATED)


# Snapshot views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def snapshot_list_create(request, period_pk):
    period = get_object_or_404(InventoryPeriod, pk=period_pk, user=request.user)

    if request.method == 'GET':
        queryset = period.snapshots.all()
        snapshot_type = request.query_params.get('snapshot_type')
        if snapshot_type:
            queryset = queryset.filter(snapshot_type=snapshot_type.upper())
        return Response(InventorySnapshotSerializer(queryset, many=True).data)

    serializer = InventorySnapshotSerializer(data=request.data)
    if serializer.is_valid():
        snapshot = serializer.save(period=period)
        create_audit_log(
            request=request, action='create', model_name='InventorySnapshot',
            object_id=snapshot.id, object_name=snapshot.item_name,
            changes={'period_id': period.id, 'snapshot_type': snapshot.snapshot_type},
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def snapshot_bulk_create(request, period_pk):
    """Add many snapshot lines to a period; nothing is saved if any row is invalid"""
    period = get_object_or_404(InventoryPeriod, pk=period_pk, user=request.user)
    rows = request.data.get('snapshots') if isinstance(request.data, dict) else request.data
    if not isinstance(rows, list) or not rows:
        return Response({'error': 'Provide a non-empty list of snapshots'}, status=status.HTTP_400_BAD_REQUEST)

    serializers_ = [InventorySnapshotSerializer(data=row) for row in rows]
    errors = [
        {'index': index, 'errors': serializer.errors}
        for index, serializer in enumerate(serializers_)
        if not serializer.is_valid()
    ]
    if errors:
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        created = [serializer.save(period=period) for serializer in serializers_]
    create_audit_log(
        request=request, action='bulk_create', model_name='InventorySnapshot',
        object_id=period.id, object_name=period.period_name, changes={'count': len(created)},
    )
    return Response({
        'created': len(created),
        'results': InventorySnapshotSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def snapshot_detail(request, pk):
    snapshot = get_object_or_404(InventorySnapshot, pk=pk, period__user=request.user)

    if request.method == 'GET':
        return Response(InventorySnapshotSerializer(snapshot).data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(snapshot, request.data, ['item_name', 'quantity', 'unit_cost', 'snapshot_type'])
        serializer = InventorySnapshotSerializer(snapshot, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='InventorySnapshot',
                object_id=snapshot.id, object_name=snapshot.item_name, changes=changes,
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        snapshot_id, item_name = snapshot.id, snapshot.item_name
        snapshot.delete()
        create_audit_log(
            request=request, action='delete', model_name='InventorySnapshot',
            object_id=snapshot_id, object_name=item_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
