from django.urls import path
from .views import sale_list_create, sale_detail, sale_stats

urlpatterns = [
    path('sales/', sale_list_create, name='sale-list-create'),
    path('sales/stats/', sale_stats, name='sale-stats'),
    path('sales/<int:pk>/', sale_detail, name='sale-detail'),
]
