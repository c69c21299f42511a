from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name', 'phone', 'is_active', 'is_staff',
                  'is_superuser', 'date_joined', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['is_staff', 'is_superuser', 'date_joined', 'last_login', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'name', 'phone']
        extra_kwargs = {'email': {'required': True}}

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class AuditLogUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name']


class AuditLogSerializer(serializers.ModelSerializer):
    user = AuditLogUserSerializer(read_only=True)
    impersonator = AuditLogUserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'impersonator', 'action', 'model_name', 'object_id',
                  'object_name', 'changes', 'ip_address', 'created_at']


class SupabaseCredentialsSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    name = serializers.CharField(required=False, allow_blank=True, max_length=200)


class SupabaseRefreshSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()
    # Current access token; returned as is while it is not yet stale
    access_token = serializers.CharField(required=False)
