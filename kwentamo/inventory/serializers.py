from rest_framework import serializers
from kwentamo.core.formulas import money
from .models import InventoryPeriod, InventorySnapshot


class InventorySnapshotSerializer(serializers.ModelSerializer):
    total_value = serializers.SerializerMethodField()

    class Meta:
        model = InventorySnapshot
        fields = ['id', 'period', 'snapshot_type', 'item_name', 'item_type', 'unit', 'quantity', 'unit_cost',
                  'total_value', 'source_purchase', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['period', 'source_purchase', 'created_at', 'updated_at']

    def get_total_value(self, obj):
        return money(obj.total_value)

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Quantity cannot be negative.")
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit cost cannot be negative.")
        return value


class InventoryPeriodSerializer(serializers.ModelSerializer):
    beginning_count = serializers.SerializerMethodField()
    ending_count = serializers.SerializerMethodField()

    class Meta:
        model = InventoryPeriod
        fields = ['id', 'period_name', 'start_date', 'end_date', 'is_active', 'notes',
                  'beginning_count', 'ending_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_beginning_count(self, obj):
        return sum(1 for s in obj.snapshots.all() if s.snapshot_type == 'BEGINNING')

    def get_ending_count(self, obj):
        return sum(1 for s in obj.snapshots.all() if s.snapshot_type == 'ENDING')

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({'end_date': "End date must be on or after start date."})
        return attrs


class InventoryPeriodDetailSerializer(InventoryPeriodSerializer):
    snapshots = InventorySnapshotSerializer(many=True, read_only=True)

    class Meta(InventoryPeriodSerializer.Meta):
        fields = InventoryPeriodSerializer.Meta.fields + ['snapshots']


class CopyFromPurchasesSerializer(serializers.Serializer):
    snapshot_type = serializers.ChoiceField(choices=InventorySnapshot.SNAPSHOT_TYPE_CHOICES)
