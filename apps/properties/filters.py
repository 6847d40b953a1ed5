"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """Filters used by the public property listing."""

    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    region = django_filters.CharFilter(field_name="region", lookup_expr="iexact")
    bedrooms_min = django_filters.NumberFilter(field_name="bedrooms", lookup_expr="gte")
    price_min = django_filters.NumberFilter(field_name="midweek_rate", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="midweek_rate", lookup_expr="lte")
    guests = django_filters.NumberFilter(method="filter_guests")

    class Meta:
        model = Property
        fields = ["location", "region", "featured"]

    def filter_guests(self, queryset, name, value):  # type: ignore
        # A group fits when its size lies inside the occupancy bounds
        guests = int(value)
        return queryset.filter(sleeps_min__lte=guests, sleeps_max__gte=guests)
