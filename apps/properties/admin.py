"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, PropertySeasonalRate


class PropertySeasonalRateInline(admin.TabularInline):
    model = PropertySeasonalRate
    extra = 0
    fields = ("start_date", "end_date", "price_per_night", "priority", "description")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "location",
        "region",
        "sleeps_min",
        "sleeps_max",
        "midweek_rate",
        "weekend_rate",
        "is_published",
        "owner",
    )
    list_filter = ("is_published", "featured", "region")
    search_fields = ("title", "location", "owner__email")
    prepopulated_fields = {"slug": ("title",)}
    inlines = (PropertySeasonalRateInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(PropertySeasonalRate)
class PropertySeasonalRateAdmin(admin.ModelAdmin):
    list_display = ("property", "start_date", "end_date", "price_per_night", "priority")
    list_filter = ("priority",)
    search_fields = ("property__title", "description")
