"""Application services for booking workflows.

Wires the availability checker and pricing engine to their stores and
runs the write paths (creation, status changes, payment flags) inside
database transactions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain.availability import AvailabilityChecker
from apps.bookings.domain.errors import BookingError, BookingStateError, ErrorCode
from apps.bookings.domain.pricing import (
    PaymentSchedule,
    PricingEngine,
    PricingPolicy,
    Quote,
    validate_booking_window,
)
from apps.bookings.domain.status import BookingAction, BookingStatus, next_status
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingStore, DjangoPropertyStore, lock_property
from shared.domain.roles import Principal
from shared.domain.value_objects import CalendarDate

logger = logging.getLogger(__name__)


def local_today() -> CalendarDate:
    return CalendarDate(timezone.localdate())


def enqueue_after_commit(task, *args) -> None:
    """
    Queue a Celery task once the current transaction commits.

    The booking is already stored by then, so a broker failure is logged
    and never reaches the caller.
    """

    def enqueue():
        try:
            task.delay(*args)
        except Exception as e:
            logger.error(f"Error queueing {task.name} for {args}: {e}", exc_info=True)

    transaction.on_commit(enqueue)


class BookingServices:
    """Explicitly constructed collaborators for one unit of work.

    Usage:
        with BookingServices() as services:
            result = services.checker.check_availability(...)

    Tests pass in-memory stores instead of the ORM-backed defaults.
    """

    def __init__(self, property_store=None, booking_store=None, policy: PricingPolicy | None = None):
        self.property_store = property_store
        self.booking_store = booking_store
        self.policy = policy
        self.checker: AvailabilityChecker | None = None
        self.engine: PricingEngine | None = None

    def init(self) -> "BookingServices":
        if self.property_store is None:
            self.property_store = DjangoPropertyStore()
        if self.booking_store is None:
            self.booking_store = DjangoBookingStore()
        if self.policy is None:
            self.policy = PricingPolicy.from_settings()
        self.checker = AvailabilityChecker(self.property_store, self.booking_store, clock=local_today)
        self.engine = PricingEngine(self.property_store, self.policy)
        return self

    def close(self) -> None:
        self.checker = None
        self.engine = None

    def __enter__(self) -> "BookingServices":
        return self.init()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@dataclass(frozen=True)
class CreatedBooking:
    booking: Booking
    quote: Quote
    schedule: PaymentSchedule


def create_booking(services: BookingServices, data: dict, *, guest_user=None, today: CalendarDate | None = None):
    """Create a pending booking after re-validating availability.

    The property row is locked for the duration of the transaction, so two
    concurrent requests for the same house are serialised and the second
    one sees the first one's booking when it re-checks availability.

    Returns:
        CreatedBooking on success, BookingError otherwise.
    """

    today = today or local_today()
    property_id = data["property_id"]
    try:
        check_in = CalendarDate.coerce(data["check_in_date"])
        check_out = CalendarDate.coerce(data["check_out_date"])
    except ValueError as exc:
        return BookingError(f"Invalid date range: {exc}", ErrorCode.INVALID_DATE_RANGE)

    window = validate_booking_window(check_in, today=today, policy=services.policy)
    if not window.valid:
        return BookingError(window.reason, ErrorCode.INVALID_BOOKING_WINDOW)

    with transaction.atomic():
        prop = lock_property(property_id)
        if prop is None:
            return BookingError("Property not found", ErrorCode.PROPERTY_NOT_FOUND)
        if not prop.is_published:
            return BookingError("Property is not available for booking", ErrorCode.PROPERTY_NOT_PUBLISHED)

        availability = services.checker.check_availability(property_id, check_in, check_out)
        if availability.code is not None:
            return BookingError(availability.reason, availability.code)
        if not availability.available:
            return BookingError(
                availability.reason,
                ErrorCode.NOT_AVAILABLE,
                extra={"conflictingBookings": list(availability.conflicting_bookings)},
            )

        quote = services.engine.calculate_booking_price(
            property_id, check_in, check_out, data["number_of_guests"]
        )
        if isinstance(quote, BookingError):
            return quote

        schedule = services.engine.payment_schedule(check_in, today=today)

        booking = Booking.objects.create(
            property=prop,
            guest_user=guest_user,
            property_name=prop.title,
            property_location=prop.location,
            guest_name=data["guest_name"].strip(),
            guest_email=data["guest_email"].strip().lower(),
            guest_phone=data["guest_phone"].strip(),
            check_in_date=check_in.as_date(),
            check_out_date=check_out.as_date(),
            number_of_guests=data["number_of_guests"],
            occasion=(data.get("occasion") or "").strip(),
            special_requests=(data.get("special_requests") or "").strip(),
            status=Booking.Status.PENDING,
            total_price=quote.total_price,
            deposit_amount=quote.deposit_amount,
            balance_amount=quote.balance_amount,
            balance_due_date=schedule.balance_due_date.as_date(),
            currency=quote.currency,
        )

        from .tasks import notify_new_booking  # Local import to prevent circular dependency

        enqueue_after_commit(notify_new_booking, booking.pk)

    logger.info(
        f"Booking {booking.pk} created for property {property_id} "
        f"({check_in} - {check_out}), total {quote.total_price} {quote.currency}"
    )
    return CreatedBooking(booking=booking, quote=quote, schedule=schedule)


def can_manage_booking(principal: Principal, booking: Booking) -> bool:
    """Admins manage every booking, owners the bookings of their houses."""

    return principal.is_admin or principal.owns(booking.property.owner_id)


@transaction.atomic
def change_booking_status(booking: Booking, action: str, *, admin_notes: str = "", cancel_reason: str = "") -> Booking:
    """Apply a lifecycle action (confirm, complete, cancel).

    Raises:
        BookingStateError: If the action is not allowed from the current status
    """

    target = next_status(booking.status, action)
    update_fields = ["status", "updated_at"]
    booking.status = target.value

    if admin_notes:
        booking.admin_notes = admin_notes
        update_fields.append("admin_notes")

    if target is BookingStatus.CANCELLED:
        booking.cancellation_reason = cancel_reason or admin_notes
        booking.cancelled_at = timezone.now()
        update_fields += ["cancellation_reason", "cancelled_at"]

    booking.save(update_fields=update_fields)
    logger.info(f"Booking {booking.pk} moved to {target.value} via {action}")

    if target is BookingStatus.CANCELLED:
        from .tasks import notify_booking_cancelled

        enqueue_after_commit(notify_booking_cancelled, booking.pk)

    return booking


@transaction.atomic
def record_payment(booking: Booking, payment_type: str) -> Booking:
    """Mark the deposit or the balance of a booking as paid.

    Receiving the deposit confirms a pending booking.

    Raises:
        BookingStateError: If the payment cannot be recorded
    """

    if booking.status == Booking.Status.CANCELLED:
        raise BookingStateError("Cannot record a payment for a cancelled booking")

    if payment_type == "deposit":
        if booking.deposit_paid:
            raise BookingStateError("Deposit is already paid", ErrorCode.ALREADY_PAID)
        booking.deposit_paid = True
        update_fields = ["deposit_paid", "updated_at"]
        if booking.status == Booking.Status.PENDING:
            booking.status = next_status(booking.status, BookingAction.CONFIRM).value
            update_fields.append("status")
    elif payment_type == "balance":
        if not booking.deposit_paid:
            raise BookingStateError("Deposit must be paid before the balance", ErrorCode.DEPOSIT_NOT_PAID)
        if booking.balance_paid:
            raise BookingStateError("Balance is already paid", ErrorCode.ALREADY_PAID)
        booking.balance_paid = True
        update_fields = ["balance_paid", "updated_at"]
    else:
        raise BookingStateError(f"Unknown payment type {payment_type!r}", ErrorCode.INVALID_FIELD)

    booking.save(update_fields=update_fields)
    logger.info(f"Booking {booking.pk}: {payment_type} recorded as paid")
    return booking
