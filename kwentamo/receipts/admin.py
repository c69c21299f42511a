from django.contrib import admin
from .models import CategoryMemory


@admin.register(CategoryMemory)
class CategoryMemoryAdmin(admin.ModelAdmin):
    list_display = ['item_pattern', 'user', 'category', 'sub_category', 'vendor', 'use_count', 'updated_at']
    list_filter = ['category', 'sub_category']
    search_fields = ['item_pattern', 'vendor', 'user__email']
    readonly_fields = ['created_at', 'updated_at']
