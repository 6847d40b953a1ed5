"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from kombu.exceptions import OperationalError
from rest_framework import status
from rest_framework.test import APITestCase, APITransactionTestCase

from apps.bookings.models import Booking
from apps.bookings.tasks import notify_booking_cancelled, notify_new_booking
from apps.properties.models import Property, PropertySeasonalRate

User = get_user_model()


def upcoming_friday(min_days_ahead: int = 60) -> date:
    start = timezone.localdate() + timedelta(days=min_days_ahead)
    return start + timedelta(days=(4 - start.weekday()) % 7)


class BookingFixturesMixin:
    """Shared fixtures: one published house with Friday/Saturday pricing."""

    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            username="owner",
            email="owner@example.com",
            password="OwnerPass123",
        )
        self.guest = User.objects.create_user(
            username="guest",
            email="guest@example.com",
            password="GuestPass123",
        )
        self.admin = User.objects.create_user(
            username="admin",
            email="admin@example.com",
            password="AdminPass123",
            is_staff=True,
        )
        self.property = Property.objects.create(
            owner=self.owner,
            title="Manor House",
            location="Cotswolds",
            sleeps_min=1,
            sleeps_max=10,
            midweek_rate=Decimal("100.00"),
            weekend_rate=Decimal("150.00"),
            cleaning_fee=Decimal("50.00"),
            security_deposit=Decimal("250.00"),
        )
        self.friday = upcoming_friday()
        self.sunday = self.friday + timedelta(days=2)

    def make_booking(self, check_in: date, check_out: date, **overrides) -> Booking:
        values = {
            "property": self.property,
            "property_name": self.property.title,
            "guest_name": "Alex Guest",
            "guest_email": "alex@example.com",
            "guest_phone": "07700900000",
            "check_in_date": check_in,
            "check_out_date": check_out,
            "number_of_guests": 6,
            "status": Booking.Status.PENDING,
            "total_price": Decimal("350.00"),
            "deposit_amount": Decimal("87.50"),
            "balance_amount": Decimal("262.50"),
        }
        values.update(overrides)
        return Booking.objects.create(**values)


class BookingAPITestCase(BookingFixturesMixin, APITestCase):
    pass


class QuoteAPITests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.url = reverse("booking-quote")

    def _params(self, **overrides) -> dict:
        params = {
            "propertyId": self.property.id,
            "checkInDate": self.friday.isoformat(),
            "checkOutDate": self.sunday.isoformat(),
            "numberOfGuests": 8,
        }
        params.update(overrides)
        return params

    def test_weekend_quote(self) -> None:
        response = self.client.get(self.url, self._params())

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        pricing = response.data["pricing"]
        self.assertEqual(pricing["nights"], 2)
        self.assertEqual([night["price"] for night in pricing["nightlyBreakdown"]], [Decimal("150.00")] * 2)
        self.assertEqual(pricing["subtotal"], Decimal("300.00"))
        self.assertEqual(pricing["totalPrice"], Decimal("350.00"))
        self.assertEqual(pricing["depositAmount"], Decimal("87.50"))
        self.assertEqual(pricing["balanceAmount"], Decimal("262.50"))
        self.assertEqual(pricing["securityDeposit"], Decimal("250.00"))
        self.assertEqual(pricing["totalPriceFormatted"], "£350.00")

        schedule = response.data["paymentSchedule"]
        self.assertEqual(schedule["depositDueDate"], timezone.localdate().isoformat())
        self.assertEqual(schedule["balanceDueDate"], (self.friday - timedelta(days=42)).isoformat())
        self.assertEqual(schedule["depositDescription"], "Due immediately to secure booking")
        self.assertEqual(response.data["summary"]["total"], "£350.00")
        self.assertEqual(response.data["summary"]["refundableDeposit"], "£250.00")

    def test_quote_is_public(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.get(self.url, self._params())
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_seasonal_rate_applies(self) -> None:
        PropertySeasonalRate.objects.create(
            property=self.property,
            start_date=self.friday,
            end_date=self.friday,
            price_per_night=Decimal("200.00"),
        )
        response = self.client.get(self.url, self._params())

        breakdown = response.data["pricing"]["nightlyBreakdown"]
        self.assertEqual(breakdown[0]["price"], Decimal("200.00"))
        self.assertEqual(breakdown[0]["rateType"], "seasonal")
        self.assertEqual(breakdown[1]["rateType"], "weekend")

    def test_higher_priority_seasonal_rate_wins(self) -> None:
        PropertySeasonalRate.objects.create(
            property=self.property,
            start_date=self.friday - timedelta(days=7),
            end_date=self.sunday,
            price_per_night=Decimal("120.00"),
            priority=1,
        )
        PropertySeasonalRate.objects.create(
            property=self.property,
            start_date=self.friday,
            end_date=self.friday,
            price_per_night=Decimal("90.00"),
            priority=0,
        )
        response = self.client.get(self.url, self._params())
        self.assertEqual(response.data["pricing"]["subtotal"], Decimal("240.00"))

    def test_guest_count_out_of_range(self) -> None:
        response = self.client.get(self.url, self._params(numberOfGuests=12))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "GUEST_COUNT_OUT_OF_RANGE")
        self.assertEqual(response.data["error"], "Number of guests must be between 1 and 10")

    def test_missing_dates(self) -> None:
        params = self._params()
        del params["checkOutDate"]
        response = self.client.get(self.url, params)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "MISSING_DATES")

    def test_invalid_property_id(self) -> None:
        response = self.client.get(self.url, self._params(propertyId="abc"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_PROPERTY_ID")

    def test_invalid_guest_count(self) -> None:
        response = self.client.get(self.url, self._params(numberOfGuests="many"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_GUEST_COUNT")

    def test_reversed_dates(self) -> None:
        response = self.client.get(
            self.url,
            self._params(checkInDate=self.sunday.isoformat(), checkOutDate=self.friday.isoformat()),
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_DATE_RANGE")

    def test_unknown_property(self) -> None:
        response = self.client.get(self.url, self._params(propertyId=self.property.id + 100))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "PROPERTY_NOT_FOUND")


class AvailabilityAPITests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.url = reverse("booking-availability")
        self.existing = self.make_booking(self.friday, self.sunday, status=Booking.Status.CONFIRMED)

    def test_overlapping_dates_are_unavailable(self) -> None:
        response = self.client.get(
            self.url,
            {
                "propertyId": self.property.id,
                "checkInDate": (self.friday + timedelta(days=1)).isoformat(),
                "checkOutDate": (self.sunday + timedelta(days=2)).isoformat(),
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["conflictingBookings"], [self.existing.id])

    def test_changeover_day_is_available(self) -> None:
        response = self.client.get(
            self.url,
            {
                "propertyId": self.property.id,
                "checkInDate": self.sunday.isoformat(),
                "checkOutDate": (self.sunday + timedelta(days=3)).isoformat(),
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["available"])
        self.assertEqual(response.data["conflictingBookings"], [])

    def test_missing_dates(self) -> None:
        response = self.client.get(self.url, {"propertyId": self.property.id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "MISSING_DATES")

    def test_unknown_property(self) -> None:
        response = self.client.get(
            self.url,
            {
                "propertyId": self.property.id + 100,
                "checkInDate": self.friday.isoformat(),
                "checkOutDate": self.sunday.isoformat(),
            },
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["reason"], "property not found")

    def test_blocked_dates(self) -> None:
        self.make_booking(
            self.friday + timedelta(days=7),
            self.sunday + timedelta(days=7),
            status=Booking.Status.CANCELLED,
        )
        response = self.client.get(self.url, {"propertyId": self.property.id, "action": "blocked-dates"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(
            response.data["blockedDates"][0],
            {
                "bookingId": self.existing.id,
                "checkInDate": self.friday.isoformat(),
                "checkOutDate": self.sunday.isoformat(),
                "status": "confirmed",
            },
        )

    def test_next_available(self) -> None:
        response = self.client.get(
            self.url,
            {
                "propertyId": self.property.id,
                "action": "next-available",
                "fromDate": self.friday.isoformat(),
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["nextAvailableDate"], self.sunday.isoformat())
        self.assertEqual(response.data["fromDate"], self.friday.isoformat())

    def test_next_available_rejects_malformed_date(self) -> None:
        response = self.client.get(
            self.url,
            {"propertyId": self.property.id, "action": "next-available", "fromDate": "soon"},
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_DATE_RANGE")


class BookingCreateAPITests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.url = reverse("booking-list")

    def _payload(self, check_in: date, check_out: date, **overrides) -> dict:
        payload = {
            "property_id": self.property.id,
            "check_in_date": check_in.isoformat(),
            "check_out_date": check_out.isoformat(),
            "number_of_guests": 8,
            "guest_name": "  Sam Taylor ",
            "guest_email": "Sam.Taylor@Example.com",
            "guest_phone": " 07700900123 ",
            "occasion": "Birthday",
        }
        payload.update(overrides)
        return payload

    def test_anonymous_guest_can_book(self) -> None:
        response = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.total_price, Decimal("350.00"))
        self.assertEqual(booking.deposit_amount, Decimal("87.50"))
        self.assertEqual(booking.balance_amount, Decimal("262.50"))
        self.assertEqual(booking.balance_due_date, self.friday - timedelta(days=42))
        self.assertEqual(booking.guest_name, "Sam Taylor")
        self.assertEqual(booking.guest_email, "sam.taylor@example.com")
        self.assertEqual(booking.guest_phone, "07700900123")
        self.assertIsNone(booking.guest_user)

        self.assertEqual(response.data["booking"]["id"], booking.id)
        self.assertEqual(response.data["pricing"]["totalPrice"], Decimal("350.00"))
        self.assertEqual(response.data["property"]["title"], "Manor House")
        self.assertEqual(response.data["nextSteps"]["action"], "PAYMENT_REQUIRED")

    def test_signed_in_guest_is_linked(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Booking.objects.get().guest_user, self.guest)

    def test_overlapping_booking_is_rejected(self) -> None:
        existing = self.make_booking(self.friday, self.sunday)

        response = self.client.post(
            self.url,
            self._payload(self.friday + timedelta(days=1), self.sunday + timedelta(days=1)),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "NOT_AVAILABLE")
        self.assertEqual(response.data["conflictingBookings"], [existing.id])
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        first = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")
        second = self.client.post(
            self.url,
            self._payload(self.sunday, self.sunday + timedelta(days=3)),
            format="json",
        )

        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)
        self.assertEqual(second.status_code, status.HTTP_201_CREATED, second.data)
        self.assertEqual(Booking.objects.count(), 2)

    def test_second_identical_request_is_rejected(self) -> None:
        first = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")
        second = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data["conflictingBookings"], [first.data["booking"]["id"]])

    def test_cancelled_booking_frees_the_dates(self) -> None:
        self.make_booking(self.friday, self.sunday, status=Booking.Status.CANCELLED)
        response = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_past_check_in_is_rejected(self) -> None:
        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.client.post(
            self.url,
            self._payload(yesterday, yesterday + timedelta(days=2)),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_BOOKING_WINDOW")

    def test_unpublished_property_is_rejected(self) -> None:
        self.property.is_published = False
        self.property.save(update_fields=["is_published"])

        response = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "PROPERTY_NOT_PUBLISHED")

    def test_unknown_property(self) -> None:
        response = self.client.post(
            self.url,
            self._payload(self.friday, self.sunday, property_id=self.property.id + 100),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "PROPERTY_NOT_FOUND")

    def test_too_many_guests(self) -> None:
        response = self.client.post(
            self.url,
            self._payload(self.friday, self.sunday, number_of_guests=12),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "GUEST_COUNT_OUT_OF_RANGE")
        self.assertFalse(Booking.objects.exists())

    def test_missing_field(self) -> None:
        payload = self._payload(self.friday, self.sunday)
        del payload["guest_phone"]
        response = self.client.post(self.url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "MISSING_REQUIRED_FIELD")
        self.assertEqual(response.data["field"], "guest_phone")

    def test_invalid_email(self) -> None:
        response = self.client.post(
            self.url,
            self._payload(self.friday, self.sunday, guest_email="not-an-email"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_EMAIL")

    def test_malformed_dates(self) -> None:
        response = self.client.post(
            self.url,
            self._payload(self.friday, self.sunday, check_in_date="20/06/2030"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_DATE_RANGE")

    def test_notifications_are_sent_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, self._payload(self.friday, self.sunday), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["owner@example.com", "sam.taylor@example.com"])


class BookingLifecycleAPITests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = self.make_booking(self.friday, self.sunday, guest_user=self.guest)
        self.status_url = reverse("booking-booking-status", args=[self.booking.id])
        self.payment_url = reverse("booking-payment", args=[self.booking.id])

    def test_status_requires_authentication(self) -> None:
        response = self.client.get(self.status_url)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_guest_can_read_status(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.get(self.status_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["availableActions"], ["confirm", "cancel"])
        self.assertFalse(response.data["depositPaid"])

    def test_guest_cannot_change_status(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.put(self.status_url, {"action": "confirm"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_unrelated_user_cannot_see_booking(self) -> None:
        stranger = User.objects.create_user(username="stranger", password="StrangerPass123")
        self.client.force_authenticate(stranger)
        response = self.client.get(self.status_url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_confirms_then_completes(self) -> None:
        self.client.force_authenticate(self.owner)

        confirmed = self.client.put(self.status_url, {"action": "confirm"}, format="json")
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK, confirmed.data)
        self.assertEqual(confirmed.data["previousStatus"], "pending")
        self.assertEqual(confirmed.data["status"], "confirmed")

        completed = self.client.put(self.status_url, {"action": "complete"}, format="json")
        self.assertEqual(completed.status_code, status.HTTP_200_OK, completed.data)
        self.assertEqual(completed.data["availableActions"], [])

    def test_completing_an_upcoming_stay_keeps_its_dates_blocked(self) -> None:
        self.client.force_authenticate(self.owner)
        self.client.put(self.status_url, {"action": "confirm"}, format="json")
        completed = self.client.put(self.status_url, {"action": "complete"}, format="json")
        self.assertEqual(completed.data["status"], "completed")

        response = self.client.get(
            reverse("booking-availability"),
            {
                "propertyId": self.property.id,
                "checkInDate": self.friday.isoformat(),
                "checkOutDate": self.sunday.isoformat(),
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["conflictingBookings"], [self.booking.id])

    def test_invalid_transition(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.put(self.status_url, {"action": "complete"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_STATUS_TRANSITION")

    def test_admin_cancels_and_guest_is_emailed(self) -> None:
        self.client.force_authenticate(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.put(
                self.status_url,
                {"action": "cancel", "cancel_reason": "Guest request"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CANCELLED)
        self.assertEqual(self.booking.cancellation_reason, "Guest request")
        self.assertIsNotNone(self.booking.cancelled_at)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["alex@example.com"])

    def test_deposit_payment_confirms_booking(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.post(self.payment_url, {"payment_type": "deposit"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertTrue(self.booking.deposit_paid)
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)

    def test_balance_before_deposit(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.post(self.payment_url, {"payment_type": "balance"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "DEPOSIT_NOT_PAID")

    def test_deposit_cannot_be_paid_twice(self) -> None:
        self.client.force_authenticate(self.owner)
        self.client.post(self.payment_url, {"payment_type": "deposit"}, format="json")
        response = self.client.post(self.payment_url, {"payment_type": "deposit"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "ALREADY_PAID")

    def test_full_payment(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(self.payment_url, {"payment_type": "deposit"}, format="json")
        response = self.client.post(self.payment_url, {"payment_type": "balance"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["balancePaid"])


class BookingListAPITests(BookingAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.url = reverse("booking-list")
        other_owner = User.objects.create_user(username="other-owner", password="OtherPass123")
        self.other_property = Property.objects.create(
            owner=other_owner,
            title="Lake Lodge",
            location="Lake District",
            sleeps_max=12,
            midweek_rate=Decimal("200.00"),
            weekend_rate=Decimal("260.00"),
        )
        self.own = self.make_booking(self.friday, self.sunday, guest_user=self.guest)
        self.other = self.make_booking(
            self.friday,
            self.sunday,
            property=self.other_property,
            property_name=self.other_property.title,
            status=Booking.Status.CONFIRMED,
        )

    def _ids(self, response) -> set[int]:
        return {item["id"] for item in response.data["results"]}

    def test_admin_sees_all(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._ids(response), {self.own.id, self.other.id})

    def test_owner_sees_bookings_of_own_houses(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.get(self.url)
        self.assertEqual(self._ids(response), {self.own.id})

    def test_guest_sees_own_bookings(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.get(self.url)
        self.assertEqual(self._ids(response), {self.own.id})
        self.assertEqual(response.data["results"][0]["available_actions"], ["confirm", "cancel"])

    def test_filter_by_status(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.get(self.url, {"status": "confirmed"})
        self.assertEqual(self._ids(response), {self.other.id})

    def test_anonymous_cannot_list(self) -> None:
        response = self.client.get(self.url)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class BrokerOutageTests(BookingFixturesMixin, APITransactionTestCase):
    """Commits happen for real here, so after-commit hooks run as in production."""

    def _payload(self) -> dict:
        return {
            "property_id": self.property.id,
            "check_in_date": self.friday.isoformat(),
            "check_out_date": self.sunday.isoformat(),
            "number_of_guests": 4,
            "guest_name": "Sam Taylor",
            "guest_email": "sam@example.com",
            "guest_phone": "07700900123",
        }

    def test_booking_succeeds_when_notification_cannot_be_queued(self) -> None:
        outage = OperationalError("broker unreachable")
        with mock.patch.object(notify_new_booking, "delay", side_effect=outage) as delay:
            response = self.client.post(reverse("booking-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        delay.assert_called_once_with(response.data["booking"]["id"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_cancellation_succeeds_when_notification_cannot_be_queued(self) -> None:
        booking = self.make_booking(self.friday, self.sunday)
        self.client.force_authenticate(self.owner)

        outage = OperationalError("broker unreachable")
        with mock.patch.object(notify_booking_cancelled, "delay", side_effect=outage):
            response = self.client.put(
                reverse("booking-booking-status", args=[booking.id]),
                {"action": "cancel"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
