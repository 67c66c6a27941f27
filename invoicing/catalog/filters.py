import django_filters
from django.db.models import F, Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Query-string filters for the product list"""
    search = django_filters.CharFilter(method='filter_search')
    category = django_filters.NumberFilter(field_name='category_id')
    status = django_filters.ChoiceFilter(choices=Product.STATUS_CHOICES)
    is_active = django_filters.BooleanFilter()
    taxable = django_filters.BooleanFilter()
    low_stock = django_filters.BooleanFilter(method='filter_low_stock')
    min_price = django_filters.NumberFilter(field_name='selling_price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='selling_price', lookup_expr='lte')

    class Meta:
        model = Product
        fields = ['search', 'category', 'status', 'is_active', 'taxable', 'low_stock', 'min_price', 'max_price']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(sku__icontains=value) |
            Q(description__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        low = Q(track_inventory=True) & Q(current_stock__lte=F('min_stock'))
        return queryset.filter(low) if value else queryset.exclude(low)
