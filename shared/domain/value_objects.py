"""
Common Value Objects

Value objects used across multiple domains:
- CalendarDate: A calendar day without time of day (parse/format/arithmetic)
- DateRange: A half-open range of dates (check-in to check-out)
- round_money / format_price: Monetary rounding and display helpers
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Union
import re

from shared.domain.base import ValueObject

_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

MINOR_UNIT = Decimal('0.01')

CURRENCY_SYMBOLS = {
    'GBP': '£',
    'EUR': '€',
    'USD': '$',
}


@dataclass(frozen=True, order=True)
class CalendarDate(ValueObject):
    """
    Calendar date value object

    Wraps a ``datetime.date`` so every piece of date handling (parsing,
    formatting, arithmetic) goes through one type instead of string math.
    Ordering and equality follow the wrapped date.
    """
    value: date

    def __post_init__(self):
        # datetime is a subclass of date; a time of day is never allowed here
        if isinstance(self.value, datetime) or not isinstance(self.value, date):
            raise TypeError("CalendarDate wraps a plain date")

    @classmethod
    def parse(cls, text: str) -> 'CalendarDate':
        """
        Parse a strict ISO ``YYYY-MM-DD`` string

        Raises:
            ValueError: If the text is not a valid calendar date
        """
        if not isinstance(text, str) or not _ISO_DATE.match(text.strip()):
            raise ValueError(f"Invalid date {text!r}, expected YYYY-MM-DD")
        return cls(date.fromisoformat(text.strip()))

    @classmethod
    def coerce(cls, value: Union['CalendarDate', date, str]) -> 'CalendarDate':
        """Build a CalendarDate from a CalendarDate, a date or an ISO string"""
        if isinstance(value, CalendarDate):
            return value
        if isinstance(value, date) and not isinstance(value, datetime):
            return cls(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise ValueError(f"Cannot interpret {value!r} as a calendar date")

    @classmethod
    def today(cls) -> 'CalendarDate':
        return cls(date.today())

    def plus_days(self, days: int) -> 'CalendarDate':
        return CalendarDate(self.value + timedelta(days=days))

    def minus_days(self, days: int) -> 'CalendarDate':
        return CalendarDate(self.value - timedelta(days=days))

    def days_until(self, other: 'CalendarDate') -> int:
        """Number of days from this date to ``other`` (negative if earlier)"""
        return (other.value - self.value).days

    @property
    def weekday(self) -> int:
        """Day of week, Monday=0 ... Sunday=6"""
        return self.value.weekday()

    def as_date(self) -> date:
        return self.value

    def isoformat(self) -> str:
        return self.value.isoformat()

    def __str__(self):
        return self.isoformat()

    def __repr__(self):
        return f"CalendarDate({self.isoformat()})"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start (inclusive) to end (exclusive).
    Used for stays, blocked periods and availability checks.
    """
    start: CalendarDate
    end: CalendarDate

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start date ({self.start}) must be before end date ({self.end})")

    @classmethod
    def from_dates(cls, start, end) -> 'DateRange':
        return cls(CalendarDate.coerce(start), CalendarDate.coerce(end))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        end is exclusive, so a range ending on the day another starts
        does not overlap it (same-day changeover).

        Examples:
            - [01, 05) overlaps with [03, 10) -> True
            - [01, 05) overlaps with [05, 08) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # start1 < end2 AND start2 < end1
        return self.start < other.end and other.start < self.end

    def contains(self, day: CalendarDate) -> bool:
        """start is inclusive, end is exclusive"""
        return self.start <= day < self.end

    def nights(self) -> Iterator[CalendarDate]:
        """Yield the date each night of the range begins on, in order"""
        for offset in range(len(self)):
            yield self.start.plus_days(offset)

    def __len__(self) -> int:
        """Number of nights"""
        return self.start.days_until(self.end)

    def __str__(self):
        return f"{self.start} - {self.end}"

    def __repr__(self):
        return f"DateRange({self.start}, {self.end})"


def round_money(amount) -> Decimal:
    """Round to the currency minor unit (2 decimals) using round-half-up"""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def format_price(amount, currency: str = 'GBP') -> str:
    """
    Format an amount for display

    Examples:
        format_price(Decimal('1234.5'), 'GBP') -> '£1,234.50'
        format_price(Decimal('10'), 'CHF') -> '10.00 CHF'
    """
    value = round_money(amount if amount is not None else 0)
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{value:,.2f} {currency}"
    if value < 0:
        return f"-{symbol}{-value:,.2f}"
    return f"{symbol}{value:,.2f}"
