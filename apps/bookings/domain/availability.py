"""
Availability Checker

Decides whether a [check_in, check_out) interval is free for a property.

Rules:
- Two stays [a1, a2) and [b1, b2) conflict iff a1 < b2 and b1 < a2
- Same-day changeovers (one stay ends the day the next begins) are allowed
- PENDING and CONFIRMED bookings block dates, COMPLETED ones until check-out

Every call reads the booking store afresh. Results are never cached:
a stale answer here is a double booking.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Sequence
import logging

from shared.domain.value_objects import CalendarDate, DateRange
from apps.bookings.domain.errors import ErrorCode
from apps.bookings.domain.ports import BookingRecord, BookingStore, PropertyStore
from apps.bookings.domain.status import blocks_dates

logger = logging.getLogger(__name__)

PROPERTY_NOT_FOUND_REASON = 'property not found'


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: str | None = None
    conflicting_bookings: tuple = field(default_factory=tuple)
    code: ErrorCode | None = None

    def to_dict(self) -> dict:
        data = {
            'available': self.available,
            'conflictingBookings': list(self.conflicting_bookings),
        }
        if self.reason is not None:
            data['reason'] = self.reason
        if self.code is not None:
            data['code'] = self.code.value
        return data


@dataclass(frozen=True)
class BlockedRange:
    """A blocking booking's interval, as rendered on the calendar"""
    booking_id: int
    dates: DateRange
    status: str

    def to_dict(self) -> dict:
        return {
            'bookingId': self.booking_id,
            'checkInDate': self.dates.start.isoformat(),
            'checkOutDate': self.dates.end.isoformat(),
            'status': self.status,
        }


class BlockedDates:
    """
    Lazy, restartable sequence of blocked ranges

    Nothing is read until iteration starts, and each new iteration reads
    the store again, ordered by check-in date then booking id.
    """

    def __init__(
        self,
        load: Callable[[], Sequence[BookingRecord]],
        clock: Callable[[], CalendarDate] = CalendarDate.today,
    ):
        self._load = load
        self._clock = clock

    def __iter__(self) -> Iterator[BlockedRange]:
        today = self._clock()
        blocking = sorted(
            (b for b in self._load() if blocks_dates(b.status, b.check_out, today)),
            key=lambda b: (b.check_in, b.id),
        )
        for booking in blocking:
            yield BlockedRange(
                booking_id=booking.id,
                dates=booking.dates,
                status=str(getattr(booking.status, 'value', booking.status)),
            )

    def to_list(self) -> List[BlockedRange]:
        return list(self)


class AvailabilityChecker:
    """
    Availability queries for a property

    Usage:
        checker = AvailabilityChecker(property_store, booking_store)
        result = checker.check_availability(42, '2025-06-05', '2025-06-08')
        if not result.available:
            ...
    """

    def __init__(
        self,
        property_store: PropertyStore,
        booking_store: BookingStore,
        clock: Callable[[], CalendarDate] = CalendarDate.today,
    ):
        self.property_store = property_store
        self.booking_store = booking_store
        self.clock = clock

    def check_availability(self, property_id: int, check_in, check_out) -> AvailabilityResult:
        """
        Check a candidate stay against existing bookings

        Never raises for bad input: malformed or reversed dates and unknown
        properties come back as unavailable results carrying a code.
        """
        try:
            requested = DateRange.from_dates(check_in, check_out)
        except (TypeError, ValueError) as exc:
            return AvailabilityResult(
                available=False,
                reason=f"Invalid date range: {exc}",
                code=ErrorCode.INVALID_DATE_RANGE,
            )

        if self.property_store.get_property(property_id) is None:
            return AvailabilityResult(
                available=False,
                reason=PROPERTY_NOT_FOUND_REASON,
                code=ErrorCode.PROPERTY_NOT_FOUND,
            )

        conflicts = [
            booking.id
            for booking in self._blocking_bookings(property_id)
            if booking.dates.overlaps_with(requested)
        ]

        if conflicts:
            logger.info(
                f"Property {property_id} unavailable for {requested}: "
                f"conflicts with bookings {conflicts}"
            )
            return AvailabilityResult(
                available=False,
                reason='Property is not available for the selected dates',
                conflicting_bookings=tuple(sorted(conflicts)),
            )

        return AvailabilityResult(available=True)

    def get_blocked_dates(self, property_id: int) -> BlockedDates:
        return BlockedDates(lambda: self.booking_store.list_bookings_for_property(property_id), self.clock)

    def get_next_available_date(self, property_id: int, from_date=None, *, today=None) -> CalendarDate:
        """
        First day on or after from_date (default: today) not inside a stay

        Walks blocking intervals in check-in order and jumps the cursor to
        the end of each one covering it, so the cost depends on the number
        of bookings, never on how far ahead they are.
        """
        if from_date is None:
            cursor = CalendarDate.coerce(today) if today is not None else self.clock()
        else:
            cursor = CalendarDate.coerce(from_date)

        for blocked in self.get_blocked_dates(property_id):
            if blocked.dates.start > cursor:
                break
            if blocked.dates.end > cursor:
                cursor = blocked.dates.end
        return cursor

    def _blocking_bookings(self, property_id: int) -> List[BookingRecord]:
        today = self.clock()
        return [
            booking
            for booking in self.booking_store.list_bookings_for_property(property_id)
            if blocks_dates(booking.status, booking.check_out, today)
        ]
