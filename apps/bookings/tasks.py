"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

@shared_task(name="bookings.notify_new_booking")
def notify_new_booking(booking_id: int) -> bool:
    """Booking received email to the guest, new booking email to the owner."""
    try:
        booking = Booking.objects.select_related("property", "property__owner").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for new booking notification")
        return False

    from apps.notifications.services import (
        send_booking_confirmation_email,
        send_new_booking_to_owner_email,
    )

    guest_sent = send_booking_confirmation_email(booking)
    send_new_booking_to_owner_email(booking)

    logger.info(f"[NOTIFICATION] New booking notifications sent for booking {booking.pk}")
    return guest_sent


@shared_task(name="bookings.notify_booking_cancelled")
def notify_booking_cancelled(booking_id: int) -> bool:
    try:
        booking = Booking.objects.select_related("property").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for cancellation notification")
        return False

    from apps.notifications.services import send_booking_cancellation_email

    return send_booking_cancellation_email(booking)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="bookings.send_balance_due_reminders")
def send_balance_due_reminders() -> dict[str, int]:
    """
    Remind guests whose balance is due.

    Confirmed bookings with the deposit paid, the balance outstanding and a
    due date on or before today are reminded once, including those whose
    deposit arrived after the due date. Runs daily.

    Returns:
        dict: {"sent": number of reminders sent}
    """
    from apps.notifications.services import send_balance_reminder_email

    today = timezone.localdate()
    sent_count = 0

    due_bookings = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        deposit_paid=True,
        balance_paid=False,
        balance_due_date__lte=today,
        balance_reminder_sent_at__isnull=True,
    ).select_related("property")

    for booking in due_bookings:
        if send_balance_reminder_email(booking):
            booking.balance_reminder_sent_at = timezone.now()
            booking.save(update_fields=["balance_reminder_sent_at", "updated_at"])
            sent_count += 1

    if sent_count > 0:
        logger.info(f"Sent {sent_count} balance reminders")

    return {"sent": sent_count}


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Mark confirmed bookings whose check-out date has passed as completed.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    today = timezone.localdate()
    completed_count = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        check_out_date__lte=today,
    ).update(status=Booking.Status.COMPLETED, updated_at=timezone.now())

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}
