from django.contrib import admin
from .models import InventoryPeriod, InventorySnapshot


class InventorySnapshotInline(admin.TabularInline):
    model = InventorySnapshot
    extra = 0
    fields = ['snapshot_type', 'item_name', 'item_type', 'unit', 'quantity', 'unit_cost']


@admin.register(InventoryPeriod)
class InventoryPeriodAdmin(admin.ModelAdmin):
    list_display = ['period_name', 'user', 'start_date', 'end_date', 'is_active']
    list_filter = ['is_active']
    search_fields = ['period_name', 'user__email']
    ordering = ['-start_date']
    inlines = [InventorySnapshotInline]
    readonly_fields = ['created_at', 'updated_at']
