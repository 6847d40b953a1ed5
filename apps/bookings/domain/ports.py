"""
Collaborator Interfaces

The availability checker and pricing engine only ever see these read
models. Concrete stores (ORM-backed, or in-memory fakes in tests) are
constructed by the caller and passed in.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Protocol, Sequence

from shared.domain.value_objects import CalendarDate, DateRange

FRIDAY = 4
SATURDAY = 5
DEFAULT_WEEKEND_NIGHTS = frozenset({FRIDAY, SATURDAY})


@dataclass(frozen=True)
class SeasonalRate:
    """A seasonal nightly price over start..end, both nights included"""
    start: CalendarDate
    end: CalendarDate
    price_per_night: Decimal
    priority: int = 0
    id: int = 0

    def covers(self, night: CalendarDate) -> bool:
        return self.start <= night <= self.end


class SeasonalRateTable:
    """
    Seasonal prices looked up night by night

    Where periods overlap, the higher priority wins and equal priorities go
    to the later start date. Lookups cost one pass over the periods held,
    never one entry per covered day.
    """

    def __init__(self, rates: Iterable[SeasonalRate] = ()):
        self.rates = tuple(sorted(rates, key=lambda r: (r.priority, r.start, r.id), reverse=True))

    def get(self, night: CalendarDate, default=None):
        for rate in self.rates:
            if rate.covers(night):
                return rate.price_per_night
        return default

    def __contains__(self, night) -> bool:
        return self.get(night) is not None

    def __len__(self) -> int:
        return len(self.rates)


@dataclass(frozen=True)
class PropertyData:
    """Rates, fees and occupancy bounds of a property at quote time"""
    id: int
    title: str
    midweek_rate: Decimal
    weekend_rate: Decimal
    sleeps_min: int
    sleeps_max: int
    cleaning_fee: Decimal = Decimal('0.00')
    security_deposit: Decimal = Decimal('0.00')
    service_fee_percent: Decimal = Decimal('0')
    tax_rate_percent: Decimal = Decimal('0')
    currency: str = 'GBP'
    rate_overrides: Mapping[CalendarDate, Decimal] | SeasonalRateTable = field(default_factory=SeasonalRateTable)
    weekend_nights: frozenset | None = None
    is_published: bool = True
    location: str = ''
    owner_id: int | None = None


@dataclass(frozen=True)
class BookingRecord:
    """The parts of a booking availability checks need"""
    id: int
    property_id: int
    check_in: CalendarDate
    check_out: CalendarDate
    status: str
    number_of_guests: int = 1

    @property
    def dates(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)


class PropertyStore(Protocol):
    def get_property(self, property_id: int, stay: DateRange | None = None) -> PropertyData | None:
        """Seasonal rates are only guaranteed for the nights of stay"""
        ...


class BookingStore(Protocol):
    def list_bookings_for_property(self, property_id: int) -> Sequence[BookingRecord]:
        ...
