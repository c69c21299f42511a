from django.urls import path
from .views import expense_list_create, expense_bulk_create, expense_detail, expense_stats

urlpatterns = [
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/bulk/', expense_bulk_create, name='expense-bulk-create'),
    path('expenses/stats/', expense_stats, name='expense-stats'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),
]
