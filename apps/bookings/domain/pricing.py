"""
Pricing Engine

Computes a reproducible price quote for a stay:

1. Validate guest count against the property's occupancy bounds
2. Validate the date range (at least one night)
3. Price every night: a seasonal override for that date wins, otherwise
   the weekend rate for weekend nights and the midweek rate for the rest
4. Add fees: cleaning, service (% of subtotal), taxes (% of subtotal plus
   service fee). The security deposit is refundable and held separately,
   so it is reported but never part of the total
5. Split the total into a deposit (25%) and a balance

Money is rounded half-up to the minor unit only when a line total is
produced, and the balance is derived by subtraction so that
deposit + balance == total holds exactly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple
import logging

from shared.domain.value_objects import CalendarDate, DateRange, format_price, round_money
from apps.bookings.domain.errors import BookingError, ErrorCode
from apps.bookings.domain.ports import DEFAULT_WEEKEND_NIGHTS, PropertyData, PropertyStore

logger = logging.getLogger(__name__)

RATE_MIDWEEK = 'midweek'
RATE_WEEKEND = 'weekend'
RATE_SEASONAL = 'seasonal'

HUNDRED = Decimal('100')


@dataclass(frozen=True)
class PricingPolicy:
    """Business policy knobs, loaded from settings.BOOKING_POLICY"""
    currency: str = 'GBP'
    deposit_fraction: Decimal = Decimal('0.25')
    balance_due_days_before_check_in: int = 42
    weekend_nights: frozenset = DEFAULT_WEEKEND_NIGHTS
    max_advance_days: int = 730

    @classmethod
    def from_settings(cls) -> 'PricingPolicy':
        from django.conf import settings

        policy = getattr(settings, 'BOOKING_POLICY', {})
        defaults = cls()
        return cls(
            currency=policy.get('CURRENCY', defaults.currency),
            deposit_fraction=Decimal(str(policy.get('DEPOSIT_FRACTION', defaults.deposit_fraction))),
            balance_due_days_before_check_in=int(
                policy.get('BALANCE_DUE_DAYS_BEFORE_CHECK_IN', defaults.balance_due_days_before_check_in)
            ),
            weekend_nights=frozenset(policy.get('WEEKEND_NIGHTS', defaults.weekend_nights)),
            max_advance_days=int(policy.get('MAX_ADVANCE_DAYS', defaults.max_advance_days)),
        )


@dataclass(frozen=True)
class NightlyRate:
    date: CalendarDate
    price: Decimal
    rate_type: str

    def to_dict(self, currency: str) -> dict:
        return {
            'date': self.date.isoformat(),
            'price': self.price,
            'priceFormatted': format_price(self.price, currency),
            'rateType': self.rate_type,
        }


@dataclass(frozen=True)
class Quote:
    """
    Price quote for a stay (value object, never persisted)

    Invariants:
    - subtotal + cleaning_fee + service_fee + taxes == total_price
    - deposit_amount + balance_amount == total_price
    """
    nights: int
    price_per_night: Decimal
    nightly_breakdown: Tuple[NightlyRate, ...]
    subtotal: Decimal
    cleaning_fee: Decimal
    security_deposit: Decimal
    service_fee: Decimal
    taxes: Decimal
    total_price: Decimal
    deposit_amount: Decimal
    balance_amount: Decimal
    currency: str

    def to_dict(self) -> dict:
        fmt = lambda amount: format_price(amount, self.currency)  # noqa: E731
        return {
            'nights': self.nights,
            'pricePerNight': self.price_per_night,
            'pricePerNightFormatted': fmt(self.price_per_night),
            'nightlyBreakdown': [night.to_dict(self.currency) for night in self.nightly_breakdown],
            'subtotal': self.subtotal,
            'subtotalFormatted': fmt(self.subtotal),
            'cleaningFee': self.cleaning_fee,
            'cleaningFeeFormatted': fmt(self.cleaning_fee),
            'securityDeposit': self.security_deposit,
            'securityDepositFormatted': fmt(self.security_deposit),
            'serviceFee': self.service_fee,
            'serviceFeeFormatted': fmt(self.service_fee),
            'taxes': self.taxes,
            'taxesFormatted': fmt(self.taxes),
            'totalPrice': self.total_price,
            'totalPriceFormatted': fmt(self.total_price),
            'depositAmount': self.deposit_amount,
            'depositAmountFormatted': fmt(self.deposit_amount),
            'balanceAmount': self.balance_amount,
            'balanceAmountFormatted': fmt(self.balance_amount),
            'currency': self.currency,
        }


@dataclass(frozen=True)
class PaymentSchedule:
    deposit_due_date: CalendarDate
    balance_due_date: CalendarDate

    def to_dict(self) -> dict:
        return {
            'depositDueDate': self.deposit_due_date.isoformat(),
            'balanceDueDate': self.balance_due_date.isoformat(),
        }


@dataclass(frozen=True)
class BookingWindowCheck:
    valid: bool
    reason: str | None = None


def calculate_payment_due_dates(check_in, *, today=None, policy: PricingPolicy | None = None) -> PaymentSchedule:
    """
    Deposit is due today; the balance is due six weeks before check-in

    A balance date that has already passed (near-term bookings) is clamped
    to today, so the whole balance is owed immediately.
    """
    policy = policy or PricingPolicy()
    today = CalendarDate.coerce(today) if today is not None else CalendarDate.today()
    balance_due = CalendarDate.coerce(check_in).minus_days(policy.balance_due_days_before_check_in)
    if balance_due < today:
        balance_due = today
    return PaymentSchedule(deposit_due_date=today, balance_due_date=balance_due)


def validate_booking_window(check_in, *, today=None, policy: PricingPolicy | None = None) -> BookingWindowCheck:
    """Check-in may not be in the past nor further ahead than the booking window"""
    policy = policy or PricingPolicy()
    today = CalendarDate.coerce(today) if today is not None else CalendarDate.today()
    try:
        arrival = CalendarDate.coerce(check_in)
    except ValueError as exc:
        return BookingWindowCheck(valid=False, reason=str(exc))

    if arrival < today:
        return BookingWindowCheck(valid=False, reason='Check-in date cannot be in the past')
    if today.days_until(arrival) > policy.max_advance_days:
        return BookingWindowCheck(
            valid=False,
            reason=f"Bookings can only be made up to {policy.max_advance_days} days in advance",
        )
    return BookingWindowCheck(valid=True)


class PricingEngine:
    """
    Quote calculation for a property stay

    Usage:
        engine = PricingEngine(property_store, PricingPolicy.from_settings())
        result = engine.calculate_booking_price(42, '2025-06-06', '2025-06-08', 8)
        if isinstance(result, BookingError):
            return Response(result.to_dict(), status=result.http_status)
    """

    def __init__(self, property_store: PropertyStore, policy: PricingPolicy | None = None):
        self.property_store = property_store
        self.policy = policy or PricingPolicy()

    def calculate_booking_price(self, property_id: int, check_in, check_out, number_of_guests: int):
        """
        Returns:
            Quote on success, BookingError for validation/not-found failures.
            Store failures propagate to the caller.
        """
        try:
            stay = DateRange.from_dates(check_in, check_out)
            date_error = None
        except (TypeError, ValueError) as exc:
            stay, date_error = None, exc

        prop = self.property_store.get_property(property_id, stay)
        if prop is None:
            return BookingError('Property not found', ErrorCode.PROPERTY_NOT_FOUND)

        if not prop.sleeps_min <= number_of_guests <= prop.sleeps_max:
            return BookingError(
                f"Number of guests must be between {prop.sleeps_min} and {prop.sleeps_max}",
                ErrorCode.GUEST_COUNT_OUT_OF_RANGE,
            )

        if date_error is not None:
            return BookingError(f"Invalid date range: {date_error}", ErrorCode.INVALID_DATE_RANGE)

        return self._quote(prop, stay)

    def payment_schedule(self, check_in, *, today=None) -> PaymentSchedule:
        return calculate_payment_due_dates(check_in, today=today, policy=self.policy)

    def nightly_rate(self, prop: PropertyData, night: CalendarDate) -> NightlyRate:
        override = prop.rate_overrides.get(night)
        if override is not None:
            return NightlyRate(night, round_money(override), RATE_SEASONAL)

        weekend_nights = prop.weekend_nights if prop.weekend_nights is not None else self.policy.weekend_nights
        if night.weekday in weekend_nights:
            return NightlyRate(night, round_money(prop.weekend_rate), RATE_WEEKEND)
        return NightlyRate(night, round_money(prop.midweek_rate), RATE_MIDWEEK)

    def _quote(self, prop: PropertyData, stay: DateRange) -> Quote:
        breakdown = tuple(self.nightly_rate(prop, night) for night in stay.nights())
        nights = len(breakdown)

        subtotal = sum((night.price for night in breakdown), Decimal('0.00'))
        cleaning_fee = round_money(prop.cleaning_fee or 0)
        security_deposit = round_money(prop.security_deposit or 0)
        service_fee = round_money(subtotal * (prop.service_fee_percent or 0) / HUNDRED)
        taxes = round_money((subtotal + service_fee) * (prop.tax_rate_percent or 0) / HUNDRED)

        total_price = subtotal + cleaning_fee + service_fee + taxes
        deposit_amount = round_money(total_price * self.policy.deposit_fraction)
        balance_amount = total_price - deposit_amount

        quote = Quote(
            nights=nights,
            price_per_night=round_money(subtotal / nights),
            nightly_breakdown=breakdown,
            subtotal=subtotal,
            cleaning_fee=cleaning_fee,
            security_deposit=security_deposit,
            service_fee=service_fee,
            taxes=taxes,
            total_price=total_price,
            deposit_amount=deposit_amount,
            balance_amount=balance_amount,
            currency=prop.currency or self.policy.currency,
        )
        logger.debug(
            f"Quoted property {prop.id} for {stay}: {nights} nights, total {quote.total_price}"
        )
        return quote
