"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "guest_name",
        "status",
        "check_in_date",
        "check_out_date",
        "number_of_guests",
        "total_price",
        "deposit_paid",
        "balance_paid",
        "created_at",
    )
    list_filter = ("status", "deposit_paid", "balance_paid", "check_in_date")
    search_fields = ("id", "property__title", "guest_name", "guest_email")
    readonly_fields = (
        "created_at",
        "updated_at",
        "total_price",
        "deposit_amount",
        "balance_amount",
        "balance_due_date",
        "cancelled_at",
    )
