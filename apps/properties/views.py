"""Property API views."""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from shared.domain.roles import principal_for_user

from .filters import PropertyFilterSet
from .models import Property, PropertySeasonalRate
from .serializers import PropertySeasonalRateSerializer, PropertySerializer

logger = logging.getLogger(__name__)


class IsPropertyOwnerOrAdmin(permissions.BasePermission):
    """Lets the owner of a property and admins manage it."""

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        principal = principal_for_user(request.user)
        return principal.is_admin or principal.owns(obj.owner_id)


class PropertyViewSet(viewsets.ReadOnlyModelViewSet):
    """Published houses, open to everyone."""

    queryset = Property.objects.select_related("owner").all()
    serializer_class = PropertySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["midweek_rate", "weekend_rate", "sleeps_max", "created_at"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        principal = principal_for_user(self.request.user)
        if principal.is_admin:
            return qs
        if principal.user_id is not None:
            return qs.filter(Q(is_published=True) | Q(owner_id=principal.user_id))
        return qs.filter(is_published=True)


class PropertySeasonalRateViewSet(viewsets.ModelViewSet):
    """Seasonal price overrides of one property, managed by its owner."""

    serializer_class = PropertySeasonalRateSerializer
    queryset = PropertySeasonalRate.objects.select_related("property", "created_by").all()
    permission_classes = [permissions.IsAuthenticated, IsPropertyOwnerOrAdmin]
    property_lookup_url_kwarg = "property_id"

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        property_id = kwargs.get(self.property_lookup_url_kwarg)
        self.property_object = get_object_or_404(Property, pk=property_id)
        self.check_object_permissions(request, self.property_object)

    def get_property(self) -> Property:
        return self.property_object

    def check_object_permissions(self, request, obj):  # type: ignore
        # Rates are authorised through the property they belong to
        if isinstance(obj, PropertySeasonalRate):
            obj = obj.property
        super().check_object_permissions(request, obj)

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset().filter(property=self.get_property())
        start = self.request.query_params.get("start")
        end = self.request.query_params.get("end")
        if start:
            qs = qs.filter(end_date__gte=start)
        if end:
            qs = qs.filter(start_date__lte=end)
        return qs.order_by("start_date", "-priority")

    def perform_create(self, serializer):  # type: ignore
        rate = serializer.save(property=self.get_property(), created_by=self.request.user)
        logger.info(
            f"Seasonal rate {rate.pk} for property {rate.property_id}: "
            f"{rate.start_date} - {rate.end_date} at {rate.price_per_night}"
        )

    def perform_destroy(self, instance):  # type: ignore
        logger.info(f"Seasonal rate {instance.pk} removed from property {instance.property_id}")
        instance.delete()
