"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertySeasonalRateViewSet, PropertyViewSet

router = DefaultRouter()
router.register(r"", PropertyViewSet, basename="property")

seasonal_list = PropertySeasonalRateViewSet.as_view({"get": "list", "post": "create"})
seasonal_detail = PropertySeasonalRateViewSet.as_view(
    {"patch": "partial_update", "put": "update", "delete": "destroy", "get": "retrieve"}
)

urlpatterns = [
    path(
        "<int:property_id>/seasonal-rates/",
        seasonal_list,
        name="property-seasonal-rate-list",
    ),
    path(
        "<int:property_id>/seasonal-rates/<int:pk>/",
        seasonal_detail,
        name="property-seasonal-rate-detail",
    ),
    path("", include(router.urls)),
]
