from django.contrib import admin
from .models import Purchase, InventoryTransaction


class InventoryTransactionInline(admin.TabularInline):
    model = InventoryTransaction
    extra = 0
    fields = ['transaction_type', 'quantity', 'unit_cost', 'total_cost', 'balance_after', 'notes', 'created_at']
    readonly_fields = fields
    can_delete = False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['item_name', 'user', 'item_type', 'quantity', 'remaining_quantity', 'get_total', 'supplier', 'purchase_date']
    list_filter = ['item_type', 'purchase_date']
    search_fields = ['item_name', 'supplier', 'notes', 'user__email']
    ordering = ['-purchase_date', '-created_at']
    inlines = [InventoryTransactionInline]
    readonly_fields = ['total_cost', 'created_at', 'updated_at']

    def get_total(self, obj):
        return f"₱{obj.total_cost:,.2f}"
    get_total.short_description = 'Total'


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ['purchase', 'user', 'transaction_type', 'quantity', 'total_cost', 'balance_after', 'created_at']
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['purchase__item_name', 'notes', 'user__email']
    ordering = ['-created_at']
    readonly_fields = ['user', 'purchase', 'transaction_type', 'quantity', 'unit_cost', 'total_cost',
                       'balance_after', 'notes', 'created_at']
