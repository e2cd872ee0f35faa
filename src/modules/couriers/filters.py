import django_filters

from modules.couriers.models import Courier, VehicleType


class CourierFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(method="filter_name")
    vehicle_type = django_filters.ChoiceFilter(choices=VehicleType.choices)
    available = django_filters.BooleanFilter(field_name="is_available")
    active = django_filters.BooleanFilter(field_name="is_active")
    min_rating = django_filters.NumberFilter(field_name="rating", lookup_expr="gte")

    class Meta:
        model = Courier
        fields = ["name", "vehicle_type", "available", "active", "min_rating"]

    def filter_name(self, queryset, name, value):
        return queryset.filter(first_name__icontains=value) | queryset.filter(
            last_name__icontains=value
        )
