"""
Booking Lifecycle

State transitions:
- PENDING -> CONFIRMED (owner/admin confirms, or deposit received)
- PENDING -> CANCELLED
- CONFIRMED -> COMPLETED (stay finished)
- CONFIRMED -> CANCELLED

PENDING and CONFIRMED bookings block property dates. A COMPLETED booking
keeps blocking until its check-out date has passed.
"""

from enum import Enum

from apps.bookings.domain.errors import BookingStateError, ErrorCode


class BookingStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class BookingAction(str, Enum):
    CONFIRM = 'confirm'
    COMPLETE = 'complete'
    CANCEL = 'cancel'


BLOCKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingAction.CONFIRM: BookingStatus.CONFIRMED,
        BookingAction.CANCEL: BookingStatus.CANCELLED,
    },
    BookingStatus.CONFIRMED: {
        BookingAction.COMPLETE: BookingStatus.COMPLETED,
        BookingAction.CANCEL: BookingStatus.CANCELLED,
    },
    BookingStatus.CANCELLED: {},
    BookingStatus.COMPLETED: {},
}

STATUS_INFO = {
    BookingStatus.PENDING: {
        'label': 'Pending',
        'description': 'Awaiting deposit payment or owner confirmation',
    },
    BookingStatus.CONFIRMED: {
        'label': 'Confirmed',
        'description': 'Booking is confirmed and the dates are secured',
    },
    BookingStatus.CANCELLED: {
        'label': 'Cancelled',
        'description': 'Booking was cancelled and the dates released',
    },
    BookingStatus.COMPLETED: {
        'label': 'Completed',
        'description': 'The stay has finished',
    },
}


def blocks_dates(status, check_out=None, today=None) -> bool:
    """
    Whether a booking in this status holds its dates

    A completed booking whose check-out is still ahead of today blocks;
    without a check-out date to compare, completed bookings are released.
    """
    current = BookingStatus(status)
    if current in BLOCKING_STATUSES:
        return True
    if current is BookingStatus.COMPLETED and check_out is not None and today is not None:
        return check_out > today
    return False


def available_actions(status) -> list[str]:
    """Actions allowed from the given status, in a stable order"""
    allowed = TRANSITIONS[BookingStatus(status)]
    return [action.value for action in BookingAction if action in allowed]


def next_status(status, action) -> BookingStatus:
    """
    Resolve the status an action leads to

    Raises:
        BookingStateError: If the action is unknown or not allowed from status
    """
    current = BookingStatus(status)
    try:
        requested = BookingAction(action)
    except ValueError:
        raise BookingStateError(f"Unknown booking action {action!r}") from None

    target = TRANSITIONS[current].get(requested)
    if target is None:
        raise BookingStateError(
            f"Cannot {requested.value} a booking with status {current.value}",
            ErrorCode.INVALID_STATUS_TRANSITION,
        )
    return target
