"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import format_price

from .models import Property, PropertySeasonalRate

MAX_SEASONAL_RATE_DAYS = 366


class PropertySeasonalRateSerializer(serializers.ModelSerializer):
    created_by = serializers.ReadOnlyField(source="created_by_id")

    class Meta:
        model = PropertySeasonalRate
        fields = [
            "id",
            "start_date",
            "end_date",
            "price_per_night",
            "description",
            "priority",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_by", "created_at", "updated_at"]

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError("End date cannot be before the start date.")
        if start and end and (end - start).days + 1 > MAX_SEASONAL_RATE_DAYS:
            raise serializers.ValidationError(
                f"A seasonal rate can cover at most {MAX_SEASONAL_RATE_DAYS} nights."
            )
        return attrs

    def validate_price_per_night(self, value):  # type: ignore
        if value <= 0:
            raise serializers.ValidationError("Nightly price must be greater than zero.")
        return value


class PropertySerializer(serializers.ModelSerializer):
    owner = serializers.ReadOnlyField(source="owner_id")
    midweek_rate_formatted = serializers.SerializerMethodField()
    weekend_rate_formatted = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "owner",
            "title",
            "slug",
            "location",
            "region",
            "description",
            "house_rules",
            "bedrooms",
            "bathrooms",
            "sleeps_min",
            "sleeps_max",
            "midweek_rate",
            "midweek_rate_formatted",
            "weekend_rate",
            "weekend_rate_formatted",
            "cleaning_fee",
            "security_deposit",
            "service_fee_percent",
            "tax_rate_percent",
            "currency",
            "weekend_nights",
            "is_published",
            "featured",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_midweek_rate_formatted(self, obj: Property) -> str:
        return format_price(obj.midweek_rate, obj.currency)

    def get_weekend_rate_formatted(self, obj: Property) -> str:
        return format_price(obj.weekend_rate, obj.currency)
