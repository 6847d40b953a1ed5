"""
Booking Error Taxonomy

Validation and not-found outcomes are returned as BookingError values
rather than raised, so route handlers can map them straight to a
response. Conflicts are reported through ``available: false`` and
anything unexpected propagates as an ordinary exception (HTTP 500).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from shared.domain.base import DomainError, ValueObject


class ErrorCategory(Enum):
    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    INTERNAL = 'internal'


class ErrorCode(str, Enum):
    """Machine readable error codes returned to API clients"""
    INVALID_DATE_RANGE = 'INVALID_DATE_RANGE'
    GUEST_COUNT_OUT_OF_RANGE = 'GUEST_COUNT_OUT_OF_RANGE'
    INVALID_BOOKING_WINDOW = 'INVALID_BOOKING_WINDOW'
    INVALID_PROPERTY_ID = 'INVALID_PROPERTY_ID'
    INVALID_GUEST_COUNT = 'INVALID_GUEST_COUNT'
    MISSING_DATES = 'MISSING_DATES'
    MISSING_REQUIRED_FIELD = 'MISSING_REQUIRED_FIELD'
    INVALID_EMAIL = 'INVALID_EMAIL'
    INVALID_FIELD = 'INVALID_FIELD'
    PROPERTY_NOT_PUBLISHED = 'PROPERTY_NOT_PUBLISHED'
    INVALID_STATUS_TRANSITION = 'INVALID_STATUS_TRANSITION'
    DEPOSIT_NOT_PAID = 'DEPOSIT_NOT_PAID'
    ALREADY_PAID = 'ALREADY_PAID'
    PROPERTY_NOT_FOUND = 'PROPERTY_NOT_FOUND'
    BOOKING_NOT_FOUND = 'BOOKING_NOT_FOUND'
    NOT_AVAILABLE = 'NOT_AVAILABLE'
    INTERNAL_ERROR = 'INTERNAL_ERROR'


_NOT_FOUND_CODES = frozenset({
    ErrorCode.PROPERTY_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND,
})

HTTP_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.INTERNAL: 500,
}


def category_for(code: ErrorCode) -> ErrorCategory:
    if code in _NOT_FOUND_CODES:
        return ErrorCategory.NOT_FOUND
    if code is ErrorCode.NOT_AVAILABLE:
        return ErrorCategory.CONFLICT
    if code is ErrorCode.INTERNAL_ERROR:
        return ErrorCategory.INTERNAL
    return ErrorCategory.VALIDATION


@dataclass(frozen=True)
class BookingError(ValueObject):
    """Typed ``{error, code}`` result returned instead of a quote or booking"""
    error: str
    code: ErrorCode
    extra: Mapping = field(default_factory=dict)

    @property
    def category(self) -> ErrorCategory:
        return category_for(self.code)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CATEGORY[self.category]

    def to_dict(self) -> dict:
        return {'error': self.error, 'code': self.code.value, **self.extra}


class BookingStateError(DomainError):
    """Raised when a lifecycle or payment change is not allowed"""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_STATUS_TRANSITION):
        super().__init__(message, code.value)
        self.error_code = code

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CATEGORY[category_for(self.error_code)]
