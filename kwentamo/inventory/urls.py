from django.urls import path
from .views import (
    period_list_create, period_detail, period_active, period_latest, period_activate,
    period_summary_view, period_copy_from_purchases,
    snapshot_list_create, snapshot_bulk_create, snapshot_detail,
)

urlpatterns = [
    # Inventory period endpoints
    path('inventory-periods/', period_list_create, name='inventory-period-list-create'),
    path('inventory-periods/active/', period_active, name='inventory-period-active'),
    path('inventory-periods/latest/', period_latest, name='inventory-period-latest'),
    path('inventory-periods/<int:pk>/', period_detail, name='inventory-period-detail'),
    path('inventory-periods/<int:pk>/activate/', period_activate, name='inventory-period-activate'),
    path('inventory-periods/<int:pk>/summary/', period_summary_view, name='inventory-period-summary'),
    path('inventory-periods/<int:pk>/copy-from-purchases/', period_copy_from_purchases,
         name='inventory-period-copy-from-purchases'),

    # Snapshot endpoints
    path('inventory-periods/<int:period_pk>/snapshots/', snapshot_list_create, name='inventory-snapshot-list-create'),
    path('inventory-periods/<int:period_pk>/snapshots/bulk/', snapshot_bulk_create, name='inventory-snapshot-bulk-create'),
    path('inventory-snapshots/<int:pk>/', snapshot_detail, name='inventory-snapshot-detail'),
]
