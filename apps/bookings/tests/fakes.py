"""In-memory stores for exercising the booking domain without a database."""

from __future__ import annotations

from decimal import Decimal

from apps.bookings.domain.ports import BookingRecord, PropertyData
from shared.domain.value_objects import CalendarDate


def make_property(**overrides) -> PropertyData:
    values = {
        "id": 1,
        "title": "Manor House",
        "midweek_rate": Decimal("100.00"),
        "weekend_rate": Decimal("150.00"),
        "sleeps_min": 1,
        "sleeps_max": 10,
        "cleaning_fee": Decimal("50.00"),
    }
    values.update(overrides)
    return PropertyData(**values)


def make_booking(booking_id: int, check_in: str, check_out: str, status: str = "confirmed", property_id: int = 1):
    return BookingRecord(
        id=booking_id,
        property_id=property_id,
        check_in=CalendarDate.parse(check_in),
        check_out=CalendarDate.parse(check_out),
        status=status,
    )


class FakePropertyStore:
    def __init__(self, *properties: PropertyData):
        self.properties = {prop.id: prop for prop in properties}

    def get_property(self, property_id: int, stay=None):
        return self.properties.get(property_id)


class FakeBookingStore:
    def __init__(self, *bookings: BookingRecord):
        self.bookings = list(bookings)
        self.calls = 0

    def list_bookings_for_property(self, property_id: int):
        self.calls += 1
        return [booking for booking in self.bookings if booking.property_id == property_id]
