from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'name', 'is_active', 'is_staff', 'supabase_id', 'date_joined']
    list_filter = ['is_active', 'is_staff', 'is_superuser', 'date_joined']
    search_fields = ['username', 'email', 'name', 'supabase_id']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Account', {'fields': ('name', 'phone', 'supabase_id')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Account', {'fields': ('name', 'email')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'impersonator', 'action', 'model_name', 'object_name', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'user__email', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'impersonator', 'action', 'model_name', 'object_id', 'object_name',
                       'changes', 'ip_address', 'created_at']
