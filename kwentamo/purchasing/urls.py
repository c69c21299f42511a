from django.urls import path
from .views import (
    purchase_list_create, purchase_bulk_create, purchase_detail, purchase_restock, purchase_transactions,
    purchase_stats, low_stock_alerts, inventory_items,
    inventory_transaction_list, inventory_transaction_stats,
)

urlpatterns = [
    # Purchase endpoints
    path('purchases/', purchase_list_create, name='purchase-list-create'),
    path('purchases/bulk/', purchase_bulk_create, name='purchase-bulk-create'),
    path('purchases/stats/', purchase_stats, name='purchase-stats'),
    path('purchases/low-stock-alerts/', low_stock_alerts, name='purchase-low-stock-alerts'),
    path('purchases/inventory-items/', inventory_items, name='purchase-inventory-items'),
    path('purchases/<int:pk>/', purchase_detail, name='purchase-detail'),
    path('purchases/<int:pk>/restock/', purchase_restock, name='purchase-restock'),
    path('purchases/<int:pk>/transactions/', purchase_transactions, name='purchase-transactions'),

    # Inventory transaction endpoints
    path('inventory-transactions/', inventory_transaction_list, name='inventory-transaction-list'),
    path('inventory-transactions/stats/', inventory_transaction_stats, name='inventory-transaction-stats'),
]
