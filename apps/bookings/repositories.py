"""ORM-backed stores consumed by the availability checker and pricing engine."""

from __future__ import annotations

from typing import Sequence

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.bookings.domain.ports import BookingRecord, PropertyData, SeasonalRate, SeasonalRateTable
from apps.bookings.models import Booking
from apps.properties.models import Property, PropertySeasonalRate
from shared.domain.value_objects import CalendarDate, DateRange


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_property(property_id: int) -> Property | None:
    """Lock the property row so concurrent bookings for it are serialised."""

    return _lock_queryset_if_possible(Property.objects.filter(pk=property_id)).first()


def seasonal_rates_for_stay(prop: Property, stay: DateRange | None) -> SeasonalRateTable:
    """Seasonal rate periods touching at least one night of the stay.

    Without a stay no rates are read.
    """

    if stay is None:
        return SeasonalRateTable()
    rates = PropertySeasonalRate.objects.filter(
        property=prop,
        start_date__lt=stay.end.as_date(),
        end_date__gte=stay.start.as_date(),
    )
    return SeasonalRateTable(
        SeasonalRate(
            start=CalendarDate(rate.start_date),
            end=CalendarDate(rate.end_date),
            price_per_night=rate.price_per_night,
            priority=rate.priority,
            id=rate.pk,
        )
        for rate in rates
    )


def property_to_data(prop: Property, stay: DateRange | None = None) -> PropertyData:
    return PropertyData(
        id=prop.pk,
        title=prop.title,
        location=prop.location,
        owner_id=prop.owner_id,
        midweek_rate=prop.midweek_rate,
        weekend_rate=prop.weekend_rate,
        sleeps_min=prop.sleeps_min,
        sleeps_max=prop.sleeps_max,
        cleaning_fee=prop.cleaning_fee,
        security_deposit=prop.security_deposit,
        service_fee_percent=prop.service_fee_percent,
        tax_rate_percent=prop.tax_rate_percent,
        currency=prop.currency,
        rate_overrides=seasonal_rates_for_stay(prop, stay),
        weekend_nights=frozenset(prop.weekend_nights) if prop.weekend_nights else None,
        is_published=prop.is_published,
    )


def booking_to_record(booking: Booking) -> BookingRecord:
    return BookingRecord(
        id=booking.pk,
        property_id=booking.property_id,
        check_in=CalendarDate(booking.check_in_date),
        check_out=CalendarDate(booking.check_out_date),
        status=booking.status,
        number_of_guests=booking.number_of_guests,
    )


class DjangoPropertyStore:
    """Reads properties and their seasonal rates fresh on every call."""

    def get_property(self, property_id: int, stay: DateRange | None = None) -> PropertyData | None:
        prop = Property.objects.filter(pk=property_id).first()
        if prop is None:
            return None
        return property_to_data(prop, stay)


class DjangoBookingStore:
    """Reads a property's bookings fresh on every call."""

    def list_bookings_for_property(self, property_id: int) -> Sequence[BookingRecord]:
        bookings = Booking.objects.filter(property_id=property_id).order_by("check_in_date", "id")
        return [booking_to_record(booking) for booking in bookings]
