import django_filters
from .models import Sale


class SaleFilter(django_filters.FilterSet):
    recipe = django_filters.NumberFilter(field_name='recipe_id')
    date_from = django_filters.DateFilter(field_name='sale_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='sale_date', lookup_expr='lte')

    class Meta:
        model = Sale
        fields = ['recipe', 'date_from', 'date_to']
