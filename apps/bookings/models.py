"""Booking domain models."""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.status import BookingStatus, available_actions, blocks_dates


class Booking(models.Model):
    """A guest's stay at a property over [check_in_date, check_out_date)."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    guest_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
        help_text=_("Set when the guest was signed in while booking."),
    )
    property_name = models.CharField(max_length=255)
    property_location = models.CharField(max_length=255, blank=True)
    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=40)
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    number_of_guests = models.PositiveSmallIntegerField()
    occasion = models.CharField(max_length=255, blank=True)
    special_requests = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    deposit_paid = models.BooleanField(default=False)
    balance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    balance_paid = models.BooleanField(default=False)
    balance_due_date = models.DateField(null=True, blank=True)
    balance_reminder_sent_at = models.DateTimeField(null=True, blank=True)
    currency = models.CharField(max_length=3, default="GBP")
    admin_notes = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in_date", "check_out_date"], name="booking_property_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["balance_due_date"], name="booking_balance_due_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for {self.property_id}"

    @builtins.property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days

    def blocks_dates(self) -> bool:
        return blocks_dates(self.status, self.check_out_date, timezone.localdate())

    def available_actions(self) -> list[str]:
        return available_actions(self.status)
