from django.urls import path
from . import views

urlpatterns = [
    path('reports/cogs/', views.cogs_report, name='cogs-report'),
    path('reports/income-statement/', views.income_statement, name='income-statement'),
    path('reports/profit-summary/', views.profit_summary, name='profit-summary'),
    path('reports/expense-breakdown/', views.expense_breakdown, name='expense-breakdown'),
    path('reports/break-even/', views.break_even, name='break-even'),
    path('reports/dashboard/', views.dashboard, name='dashboard'),
    path('reports/chart-data/', views.chart_data, name='chart-data'),
    path('reports/export/csv/', views.export_csv, name='export-csv'),
    path('reports/export/excel/', views.export_excel, name='export-excel'),
]
