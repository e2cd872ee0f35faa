import django_filters

from modules.products.models import Product, ProductCategory


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.ChoiceFilter(choices=ProductCategory.choices)
    available = django_filters.BooleanFilter(field_name="is_available")
    featured = django_filters.BooleanFilter(field_name="is_featured")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["name", "category", "available", "featured", "min_price", "max_price"]
