"""Tests for the booking lifecycle table."""

from __future__ import annotations

from django.test import SimpleTestCase

from apps.bookings.domain.errors import BookingStateError, ErrorCode
from apps.bookings.domain.status import (
    BookingStatus,
    available_actions,
    blocks_dates,
    next_status,
)
from shared.domain.value_objects import CalendarDate


class BookingStatusTests(SimpleTestCase):
    def test_only_pending_and_confirmed_block_dates(self) -> None:
        self.assertTrue(blocks_dates("pending"))
        self.assertTrue(blocks_dates(BookingStatus.CONFIRMED))
        self.assertFalse(blocks_dates("cancelled"))
        self.assertFalse(blocks_dates("completed"))

    def test_completed_booking_blocks_until_check_out_passes(self) -> None:
        today = CalendarDate.parse("2025-06-07")
        self.assertTrue(blocks_dates("completed", CalendarDate.parse("2025-06-08"), today))
        self.assertFalse(blocks_dates("completed", today, today))
        self.assertFalse(blocks_dates("completed", CalendarDate.parse("2025-06-01"), today))
        self.assertFalse(blocks_dates("cancelled", CalendarDate.parse("2025-06-08"), today))

    def test_available_actions(self) -> None:
        self.assertEqual(available_actions("pending"), ["confirm", "cancel"])
        self.assertEqual(available_actions("confirmed"), ["complete", "cancel"])
        self.assertEqual(available_actions("cancelled"), [])
        self.assertEqual(available_actions("completed"), [])

    def test_allowed_transitions(self) -> None:
        self.assertIs(next_status("pending", "confirm"), BookingStatus.CONFIRMED)
        self.assertIs(next_status("pending", "cancel"), BookingStatus.CANCELLED)
        self.assertIs(next_status("confirmed", "complete"), BookingStatus.COMPLETED)
        self.assertIs(next_status("confirmed", "cancel"), BookingStatus.CANCELLED)

    def test_forbidden_transitions(self) -> None:
        for status, action in (
            ("pending", "complete"),
            ("confirmed", "confirm"),
            ("cancelled", "confirm"),
            ("completed", "cancel"),
        ):
            with self.subTest(status=status, action=action):
                with self.assertRaises(BookingStateError) as ctx:
                    next_status(status, action)
                self.assertEqual(ctx.exception.error_code, ErrorCode.INVALID_STATUS_TRANSITION)
                self.assertEqual(ctx.exception.http_status, 400)

    def test_unknown_action(self) -> None:
        with self.assertRaises(BookingStateError):
            next_status("pending", "archive")
