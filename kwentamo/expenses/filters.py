import django_filters
from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    expense_type = django_filters.CharFilter(field_name='expense_type', lookup_expr='iexact')
    type = django_filters.CharFilter(field_name='expense_type', lookup_expr='iexact')
    frequency = django_filters.CharFilter(field_name='frequency', lookup_expr='iexact')
    date_from = django_filters.DateFilter(field_name='expense_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='expense_date', lookup_expr='lte')
    search = django_filters.CharFilter(field_name='description', lookup_expr='icontains')

    class Meta:
        model = Expense
        fields = ['category', 'expense_type', 'frequency', 'date_from', 'date_to', 'search']
