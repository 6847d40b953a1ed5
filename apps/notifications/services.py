"""Email notifications for the booking lifecycle."""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

from shared.domain.value_objects import format_price

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

UK_DATE_FORMAT = "%d/%m/%Y"


def send_email_notification(
    recipient_email: str,
    subject: str,
    *,
    html_message: str | None = None,
    message: str = "",
) -> bool:
    """
    Send a single email.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        html_message: HTML body; the plain text part is derived from it
        message: Plain text body when no HTML is given

    Returns:
        bool: True if the email was handed to the mail backend
    """
    try:
        text_message = html.unescape(strip_tags(html_message)) if html_message else message

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _stay_summary(booking: "Booking") -> str:
    return f"""
        <ul>
            <li><strong>Booking reference:</strong> #{booking.pk}</li>
            <li><strong>Property:</strong> {escape(booking.property_name)}</li>
            <li><strong>Check-in:</strong> {booking.check_in_date.strftime(UK_DATE_FORMAT)}</li>
            <li><strong>Check-out:</strong> {booking.check_out_date.strftime(UK_DATE_FORMAT)}</li>
            <li><strong>Guests:</strong> {booking.number_of_guests}</li>
            <li><strong>Total:</strong> {format_price(booking.total_price, booking.currency)}</li>
        </ul>
    """


def send_booking_confirmation_email(booking: "Booking") -> bool:
    """Booking received email to the guest with the payment schedule."""
    subject = f"Booking #{booking.pk} received - {booking.property_name}"
    balance_due = booking.balance_due_date.strftime(UK_DATE_FORMAT) if booking.balance_due_date else "on arrival"

    html_message = f"""
    <html>
    <body>
        <h2>Hello {escape(booking.guest_name)},</h2>
        <p>Thank you for your booking request.</p>

        <h3>Your stay:</h3>
        {_stay_summary(booking)}

        <h3>Payment schedule:</h3>
        <ul>
            <li><strong>Deposit (due now):</strong> {format_price(booking.deposit_amount, booking.currency)}</li>
            <li><strong>Balance (due {balance_due}):</strong> {format_price(booking.balance_amount, booking.currency)}</li>
        </ul>

        <p>Your dates are held once the deposit has been received.</p>
    </body>
    </html>
    """

    return send_email_notification(booking.guest_email, subject, html_message=html_message)


def send_new_booking_to_owner_email(booking: "Booking") -> bool:
    """New booking email to the property owner, if the property has one."""
    owner = booking.property.owner
    if owner is None or not owner.email:
        logger.warning(f"Property {booking.property_id} has no owner email, skipping owner notification")
        return False

    subject = f"New booking #{booking.pk} for {booking.property_name}"
    html_message = f"""
    <html>
    <body>
        <h2>Hello {escape(owner.get_full_name() or owner.get_username())},</h2>
        <p>You have a new booking request.</p>
        {_stay_summary(booking)}
        <p><strong>Guest:</strong> {escape(booking.guest_name)} ({escape(booking.guest_email)}, {escape(booking.guest_phone)})</p>
        <p><strong>Occasion:</strong> {escape(booking.occasion or "-")}</p>
        <p><strong>Special requests:</strong> {escape(booking.special_requests or "-")}</p>
    </body>
    </html>
    """

    return send_email_notification(owner.email, subject, html_message=html_message)


def send_booking_cancellation_email(booking: "Booking") -> bool:
    subject = f"Booking #{booking.pk} cancelled"
    html_message = f"""
    <html>
    <body>
        <h2>Hello {escape(booking.guest_name)},</h2>
        <p>Your booking for <strong>{escape(booking.property_name)}</strong> has been cancelled.</p>
        {_stay_summary(booking)}
        <p><strong>Reason:</strong> {escape(booking.cancellation_reason or "Not specified")}</p>
    </body>
    </html>
    """

    return send_email_notification(booking.guest_email, subject, html_message=html_message)


def send_balance_reminder_email(booking: "Booking") -> bool:
    """Balance due reminder to the guest."""
    subject = f"Balance due for booking #{booking.pk}"
    html_message = f"""
    <html>
    <body>
        <h2>Hello {escape(booking.guest_name)},</h2>
        <p>The remaining balance of
        <strong>{format_price(booking.balance_amount, booking.currency)}</strong>
        for your stay at <strong>{escape(booking.property_name)}</strong> is now due.</p>
        {_stay_summary(booking)}
    </body>
    </html>
    """

    return send_email_notification(booking.guest_email, subject, html_message=html_message)
