from django.urls import path
from .views import receipt_parse_text, receipt_save_items, receipt_learn, receipt_learning_stats

urlpatterns = [
    path('receipts/parse-text/', receipt_parse_text, name='receipt-parse-text'),
    path('receipts/save-items/', receipt_save_items, name='receipt-save-items'),
    path('receipts/learn/', receipt_learn, name='receipt-learn'),
    path('receipts/learning-stats/', receipt_learning_stats, name='receipt-learning-stats'),
]
