from django.conf import settings
from rest_framework import serializers
from .models import Business


class BusinessSerializer(serializers.ModelSerializer):
    business_type_display = serializers.CharField(source='get_business_type_display', read_only=True)

    class Meta:
        model = Business
        fields = ['id', 'business_name', 'business_type', 'business_type_display', 'address', 'phone',
                  'tax_id', 'currency', 'employee_count', 'avg_monthly_sales', 'raw_material_source',
                  'overhead_rate', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_business_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Business name is required.")
        return value

    def validate_overhead_rate(self, value):
        if value < 0 or value > 1:
            raise serializers.ValidationError("Overhead rate must be between 0 and 1.")
        return value

    def validate_avg_monthly_sales(self, value):
        if value < 0:
            raise serializers.ValidationError("Average monthly sales cannot be negative.")
        return value

    def create(self, validated_data):
        options = settings.KWENTAMO
        validated_data.setdefault('currency', options['DEFAULT_CURRENCY'])
        validated_data.setdefault('overhead_rate', options['DEFAULT_OVERHEAD_RATE'])
        return super().create(validated_data)


class ProfileSerializer(serializers.Serializer):
    """Profile view of a user: identity plus their business"""
    id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(read_only=True)
    name = serializers.SerializerMethodField()
    business = serializers.SerializerMethodField()

    def get_name(self, obj):
        return obj.get_display_name()

    def get_business(self, obj):
        business = getattr(obj, 'business', None)
        return BusinessSerializer(business).data if business else None
