from django.contrib import admin
from .models import Business


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'business_type', 'user', 'currency', 'employee_count', 'created_at']
    list_filter = ['business_type', 'currency']
    search_fields = ['business_name', 'user__email', 'user__username']
    readonly_fields = ['created_at', 'updated_at']
