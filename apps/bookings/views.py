"""API views for the booking domain."""

from __future__ import annotations

import functools
import logging

from django.db.models import Q  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.roles import principal_for_user
from shared.domain.value_objects import CalendarDate, format_price

from .domain.errors import BookingError, BookingStateError, ErrorCode
from .domain.status import STATUS_INFO, BookingStatus
from .models import Booking
from .serializers import (
    AvailabilityRequestSerializer,
    BookingCreateSerializer,
    BookingPaymentSerializer,
    BookingSerializer,
    BookingStatusUpdateSerializer,
    QuoteRequestSerializer,
)
from .services import (
    BookingServices,
    CreatedBooking,
    can_manage_booking,
    change_booking_status,
    create_booking,
    local_today,
    record_payment,
)

logger = logging.getLogger(__name__)

DEPOSIT_DESCRIPTION = "Due immediately to secure booking"
BALANCE_DESCRIPTION = "Due 6 weeks before check-in"


def error_response(error: BookingError) -> Response:
    return Response(error.to_dict(), status=error.http_status)


def internal_error_boundary(message: str):
    """Turn unexpected exceptions into a logged INTERNAL_ERROR response."""

    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(*args, **kwargs):
            try:
                return handler(*args, **kwargs)
            except Exception as exc:
                logger.exception(message)
                return Response(
                    {"error": message, "details": str(exc), "code": ErrorCode.INTERNAL_ERROR.value},
                    status=status.HTTP_500_INTERNAL_SERVER_ERROR,
                )

        return wrapper

    return decorator


def payment_schedule_payload(quote, schedule) -> dict:
    return {
        **schedule.to_dict(),
        "depositAmount": quote.deposit_amount,
        "depositAmountFormatted": format_price(quote.deposit_amount, quote.currency),
        "depositDescription": DEPOSIT_DESCRIPTION,
        "balanceAmount": quote.balance_amount,
        "balanceAmountFormatted": format_price(quote.balance_amount, quote.currency),
        "balanceDescription": BALANCE_DESCRIPTION,
    }


class QuoteView(APIView):
    """GET /api/v1/bookings/quote/?propertyId=&checkInDate=&checkOutDate=&numberOfGuests="""

    permission_classes = [permissions.AllowAny]

    @internal_error_boundary("Failed to calculate price")
    def get(self, request):  # type: ignore
        params = QuoteRequestSerializer(data=request.query_params)
        if not params.is_valid():
            return error_response(params.first_error())
        data = params.validated_data

        with BookingServices() as services:
            quote = services.engine.calculate_booking_price(
                data["propertyId"],
                data["checkInDate"],
                data["checkOutDate"],
                data["numberOfGuests"],
            )
            if isinstance(quote, BookingError):
                return error_response(quote)
            schedule = services.engine.payment_schedule(data["checkInDate"], today=local_today())

        return Response(
            {
                "propertyId": data["propertyId"],
                "checkInDate": data["checkInDate"],
                "checkOutDate": data["checkOutDate"],
                "numberOfGuests": data["numberOfGuests"],
                "pricing": quote.to_dict(),
                "paymentSchedule": payment_schedule_payload(quote, schedule),
                "summary": {
                    "nights": quote.nights,
                    "averagePerNight": format_price(quote.price_per_night, quote.currency),
                    "total": format_price(quote.total_price, quote.currency),
                    "depositRequired": format_price(quote.deposit_amount, quote.currency),
                    "refundableDeposit": format_price(quote.security_deposit, quote.currency),
                },
            }
        )


class AvailabilityView(APIView):
    """GET /api/v1/bookings/availability/?propertyId=&action=check|blocked-dates|next-available"""

    permission_classes = [permissions.AllowAny]

    @internal_error_boundary("Failed to check availability")
    def get(self, request):  # type: ignore
        params = AvailabilityRequestSerializer(data=request.query_params)
        if not params.is_valid():
            return error_response(params.first_error())
        data = params.validated_data
        property_id = data["propertyId"]

        with BookingServices() as services:
            if data["action"] == AvailabilityRequestSerializer.ACTION_BLOCKED_DATES:
                return self._blocked_dates(services, property_id)
            if data["action"] == AvailabilityRequestSerializer.ACTION_NEXT_AVAILABLE:
                return self._next_available(services, property_id, data.get("fromDate"))
            return self._check(services, property_id, data.get("checkInDate"), data.get("checkOutDate"))

    def _check(self, services: BookingServices, property_id: int, check_in, check_out) -> Response:
        if not check_in or not check_out:
            return error_response(
                BookingError("checkInDate and checkOutDate are required", ErrorCode.MISSING_DATES)
            )

        result = services.checker.check_availability(property_id, check_in, check_out)
        payload = {
            "propertyId": property_id,
            "checkInDate": check_in,
            "checkOutDate": check_out,
            **result.to_dict(),
        }
        if result.code is not None:
            return Response(payload, status=BookingError(result.reason, result.code).http_status)
        return Response(payload)

    def _blocked_dates(self, services: BookingServices, property_id: int) -> Response:
        if services.property_store.get_property(property_id) is None:
            return error_response(BookingError("Property not found", ErrorCode.PROPERTY_NOT_FOUND))

        blocked = [blocked.to_dict() for blocked in services.checker.get_blocked_dates(property_id)]
        return Response({"propertyId": property_id, "blockedDates": blocked, "count": len(blocked)})

    def _next_available(self, services: BookingServices, property_id: int, from_date) -> Response:
        if services.property_store.get_property(property_id) is None:
            return error_response(BookingError("Property not found", ErrorCode.PROPERTY_NOT_FOUND))

        try:
            start = CalendarDate.parse(from_date) if from_date else local_today()
        except ValueError as exc:
            return error_response(BookingError(str(exc), ErrorCode.INVALID_DATE_RANGE))

        next_available = services.checker.get_next_available_date(property_id, start)
        return Response(
            {
                "propertyId": property_id,
                "nextAvailableDate": next_available.isoformat(),
                "fromDate": start.isoformat(),
            }
        )


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Booking creation, listing and lifecycle management."""

    queryset = Booking.objects.select_related("property", "property__owner", "guest_user").all()
    serializer_class = BookingSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "property"]

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        principal = principal_for_user(self.request.user)
        if principal.is_admin:
            return qs
        if principal.user_id is None:
            return qs.none()
        return qs.filter(Q(property__owner_id=principal.user_id) | Q(guest_user_id=principal.user_id))

    @internal_error_boundary("Failed to create booking")
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.first_error())

        guest_user = request.user if request.user.is_authenticated else None
        with BookingServices() as services:
            result = create_booking(services, serializer.validated_data, guest_user=guest_user)

        if isinstance(result, BookingError):
            logger.info(f"Booking rejected: {result.code.value} ({result.error})")
            return error_response(result)

        return Response(self._created_payload(result), status=status.HTTP_201_CREATED)

    def _created_payload(self, created: CreatedBooking) -> dict:
        booking = created.booking
        quote = created.quote
        return {
            "booking": BookingSerializer(booking, context=self.get_serializer_context()).data,
            "pricing": quote.to_dict(),
            "paymentSchedule": payment_schedule_payload(quote, created.schedule),
            "property": {
                "id": booking.property_id,
                "title": booking.property_name,
                "location": booking.property_location,
            },
            "nextSteps": {
                "action": "PAYMENT_REQUIRED",
                "message": (
                    f"Pay the deposit of {format_price(quote.deposit_amount, quote.currency)} "
                    "to secure your booking"
                ),
                "depositAmount": quote.deposit_amount,
            },
        }

    @action(detail=True, methods=["get", "put"], url_path="status")
    def booking_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if request.method == "GET":
            return Response(self._status_payload(booking))

        if not can_manage_booking(principal_for_user(request.user), booking):
            return Response(
                {"error": "Only the property owner or an admin can change a booking", "code": "FORBIDDEN"},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = BookingStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.first_error())
        data = serializer.validated_data

        previous = booking.status
        try:
            booking = change_booking_status(
                booking,
                data["action"],
                admin_notes=data["admin_notes"],
                cancel_reason=data["cancel_reason"],
            )
        except BookingStateError as exc:
            return Response(exc.to_dict(), status=exc.http_status)

        return Response({"previousStatus": previous, **self._status_payload(booking)})

    @action(detail=True, methods=["post"])
    def payment(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if not can_manage_booking(principal_for_user(request.user), booking):
            return Response(
                {"error": "Only the property owner or an admin can record payments", "code": "FORBIDDEN"},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = BookingPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(serializer.first_error())

        try:
            booking = record_payment(booking, serializer.validated_data["payment_type"])
        except BookingStateError as exc:
            return Response(exc.to_dict(), status=exc.http_status)

        return Response(self._status_payload(booking))

    @staticmethod
    def _status_payload(booking: Booking) -> dict:
        info = STATUS_INFO[BookingStatus(booking.status)]
        return {
            "bookingId": booking.pk,
            "status": booking.status,
            "statusLabel": info["label"],
            "statusDescription": info["description"],
            "availableActions": booking.available_actions(),
            "depositPaid": booking.deposit_paid,
            "balancePaid": booking.balance_paid,
            "balanceDueDate": booking.balance_due_date.isoformat() if booking.balance_due_date else None,
        }
