import django_filters
from django.db.models import F, Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product listing using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'low_stock', 'out_of_stock']

    @staticmethod
    def _is_true(value):
        if isinstance(value, str):
            return value.lower() == 'true'
        return bool(value)

    def filter_search(self, queryset, name, value):
        """Match products whose name contains every word of the search string"""
        if not value:
            return queryset
        query = Q()
        for word in value.split():
            query &= Q(name__icontains=word)
        return queryset.filter(query)

    def filter_low_stock(self, queryset, name, value):
        """Products at or below their minimum quantity"""
        if value is None or value == '':
            return queryset
        if self._is_true(value):
            return queryset.filter(quantity__lte=F('minimum_quantity'))
        return queryset.filter(quantity__gt=F('minimum_quantity'))

    def filter_out_of_stock(self, queryset, name, value):
        """Products with nothing (or less than nothing) on hand"""
        if value is None or value == '':
            return queryset
        if self._is_true(value):
            return queryset.filter(quantity__lte=0)
        return queryset.filter(quantity__gt=0)
