import django_filters
from django.db.models import Q
from .models import Purchase, InventoryTransaction


class PurchaseFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    item_type = django_filters.CharFilter(field_name='item_type', lookup_expr='iexact')
    period = django_filters.NumberFilter(field_name='period_id')
    ingredient = django_filters.NumberFilter(field_name='ingredient_id')
    supplier = django_filters.CharFilter(field_name='supplier', lookup_expr='icontains')
    date_from = django_filters.DateFilter(field_name='purchase_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='purchase_date', lookup_expr='lte')

    class Meta:
        model = Purchase
        fields = ['search', 'item_type', 'period', 'ingredient', 'supplier', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(item_name__icontains=value) | Q(supplier__icontains=value))


class InventoryTransactionFilter(django_filters.FilterSet):
    transaction_type = django_filters.CharFilter(field_name='transaction_type', lookup_expr='iexact')
    type = django_filters.CharFilter(field_name='transaction_type', lookup_expr='iexact')
    purchase = django_filters.NumberFilter(field_name='purchase_id')
    item_type = django_filters.CharFilter(field_name='purchase__item_type', lookup_expr='iexact')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = InventoryTransaction
        fields = ['transaction_type', 'purchase', 'item_type', 'date_from', 'date_to']
