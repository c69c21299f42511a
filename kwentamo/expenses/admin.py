from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'user', 'category', 'expense_type', 'amount', 'frequency', 'get_monthly', 'expense_date']
    list_filter = ['category', 'expense_type', 'frequency', 'expense_date']
    search_fields = ['description', 'notes', 'user__email']
    ordering = ['-expense_date', '-created_at']
    readonly_fields = ['created_at', 'updated_at']

    def get_monthly(self, obj):
        return f"₱{obj.monthly_amount:,.2f}"
    get_monthly.short_description = 'Monthly'
