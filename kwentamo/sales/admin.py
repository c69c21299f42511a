from django.contrib import admin
from .models import Sale


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['recipe', 'user', 'quantity', 'unit_price', 'total_price', 'cost_of_goods', 'profit', 'sale_date']
    list_filter = ['sale_date']
    search_fields = ['recipe__name', 'notes', 'user__email']
    ordering = ['-sale_date', '-created_at']
    readonly_fields = ['total_price', 'cost_of_goods', 'profit', 'stock_usage', 'created_at', 'updated_at']
