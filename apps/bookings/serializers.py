"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.errors import BookingError, ErrorCode
from .domain.status import BookingAction
from .models import Booking

MISSING_VALUE_CODES = frozenset({"required", "blank", "null"})


class CodedSerializerMixin:
    """Turns the first validation error into a ``{error, code, field}`` value.

    ``missing_code`` is used for absent fields, ``field_error_codes`` for
    present but invalid ones.
    """

    missing_code = ErrorCode.MISSING_REQUIRED_FIELD
    field_error_codes: dict[str, ErrorCode] = {}

    def first_error(self) -> BookingError:
        field_name, details = next(iter(self.errors.items()))  # type: ignore[attr-defined]
        detail = details[0] if isinstance(details, list) else details
        if getattr(detail, "code", None) in MISSING_VALUE_CODES:
            code = self.missing_code
            message = f"{field_name} is required"
        else:
            code = self.field_error_codes.get(field_name, ErrorCode.INVALID_FIELD)
            message = f"{field_name}: {detail}"
        return BookingError(message, code, extra={"field": field_name})


class QuoteRequestSerializer(CodedSerializerMixin, serializers.Serializer):
    """Query parameters of the quote endpoint.

    Dates stay strings here; parsing and ordering are checked by the
    pricing engine so malformed dates come back as INVALID_DATE_RANGE.
    """

    missing_code = ErrorCode.INVALID_FIELD
    field_error_codes = {
        "propertyId": ErrorCode.INVALID_PROPERTY_ID,
        "numberOfGuests": ErrorCode.INVALID_GUEST_COUNT,
    }

    propertyId = serializers.IntegerField(min_value=1)
    checkInDate = serializers.CharField()
    checkOutDate = serializers.CharField()
    numberOfGuests = serializers.IntegerField(min_value=1)

    def first_error(self) -> BookingError:
        error = super().first_error()
        field_name = error.extra.get("field")
        if field_name in ("checkInDate", "checkOutDate"):
            return BookingError("checkInDate and checkOutDate are required", ErrorCode.MISSING_DATES)
        if error.code is ErrorCode.INVALID_FIELD:
            code = self.field_error_codes.get(field_name, ErrorCode.INVALID_FIELD)
            return BookingError(error.error, code, extra=error.extra)
        return error


class AvailabilityRequestSerializer(CodedSerializerMixin, serializers.Serializer):
    ACTION_CHECK = "check"
    ACTION_BLOCKED_DATES = "blocked-dates"
    ACTION_NEXT_AVAILABLE = "next-available"

    field_error_codes = {"propertyId": ErrorCode.INVALID_PROPERTY_ID}
    missing_code = ErrorCode.INVALID_PROPERTY_ID

    propertyId = serializers.IntegerField(min_value=1)
    action = serializers.ChoiceField(
        choices=[ACTION_CHECK, ACTION_BLOCKED_DATES, ACTION_NEXT_AVAILABLE],
        default=ACTION_CHECK,
    )
    checkInDate = serializers.CharField(required=False)
    checkOutDate = serializers.CharField(required=False)
    fromDate = serializers.CharField(required=False)


class BookingCreateSerializer(CodedSerializerMixin, serializers.Serializer):
    """Booking request from the checkout form."""

    field_error_codes = {
        "property_id": ErrorCode.INVALID_PROPERTY_ID,
        "number_of_guests": ErrorCode.INVALID_GUEST_COUNT,
        "guest_email": ErrorCode.INVALID_EMAIL,
    }

    property_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.CharField()
    check_out_date = serializers.CharField()
    number_of_guests = serializers.IntegerField(min_value=1)
    guest_name = serializers.CharField(max_length=255)
    guest_email = serializers.EmailField()
    guest_phone = serializers.CharField(max_length=40)
    occasion = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusUpdateSerializer(CodedSerializerMixin, serializers.Serializer):
    field_error_codes = {"action": ErrorCode.INVALID_STATUS_TRANSITION}

    action = serializers.ChoiceField(choices=[action.value for action in BookingAction])
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")
    cancel_reason = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=255,
    )


class BookingPaymentSerializer(CodedSerializerMixin, serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=["deposit", "balance"])


class BookingSerializer(serializers.ModelSerializer):
    """Booking resource representation."""

    property_id = serializers.ReadOnlyField(source="property.id")
    nights = serializers.ReadOnlyField()
    available_actions = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "property_id",
            "property_name",
            "property_location",
            "guest_name",
            "guest_email",
            "guest_phone",
            "check_in_date",
            "check_out_date",
            "nights",
            "number_of_guests",
            "occasion",
            "special_requests",
            "status",
            "available_actions",
            "total_price",
            "deposit_amount",
            "deposit_paid",
            "balance_amount",
            "balance_paid",
            "balance_due_date",
            "currency",
            "admin_notes",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_available_actions(self, obj: Booking) -> list[str]:
        return obj.available_actions()
