from django.urls import path
from . import views

urlpatterns = [
    path('admin/stats/', views.admin_stats, name='admin-stats'),
    path('admin/activity/', views.admin_activity, name='admin-activity'),
    path('admin/low-stock/', views.admin_low_stock, name='admin-low-stock'),
    path('admin/revenue-chart/', views.admin_revenue_chart, name='admin-revenue-chart'),
    path('admin/users/', views.admin_users, name='admin-users'),
    path('admin/users/<int:pk>/', views.admin_user_detail, name='admin-user-detail'),
    path('admin/users/<int:pk>/impersonate/', views.admin_user_impersonate, name='admin-user-impersonate'),
    path('admin/inventory/', views.admin_inventory, name='admin-inventory'),
    path('admin/inventory/stats/', views.admin_inventory_stats, name='admin-inventory-stats'),
    path('admin/inventory/transactions/', views.admin_inventory_transactions, name='admin-inventory-transactions'),
    path('admin/recipes/', views.admin_recipes, name='admin-recipes'),
    path('admin/recipes/stats/', views.admin_recipe_stats, name='admin-recipe-stats'),
    path('admin/sales/', views.admin_sales, name='admin-sales'),
    path('admin/sales/stats/', views.admin_sales_stats, name='admin-sales-stats'),
    path('admin/expenses/', views.admin_expenses, name='admin-expenses'),
    path('admin/expenses/stats/', views.admin_expense_stats, name='admin-expense-stats'),
    path('admin/financial-summary/', views.admin_financial_summary, name='admin-financial-summary'),
    path('admin/audit-log/', views.admin_audit_log, name='admin-audit-log'),
    path('admin/category-memory/', views.admin_category_memory, name='admin-category-memory'),
    path('admin/category-memory/<int:pk>/', views.admin_category_memory_detail,
         name='admin-category-memory-detail'),
]
