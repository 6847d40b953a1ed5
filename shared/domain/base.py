"""
Base Domain Classes

Foundational building blocks shared by the booking and property domains:
- ValueObject: Immutable objects compared by value
- DomainError: Base exception for rule violations raised by domain code
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


class DomainError(Exception):
    """
    Base class for domain rule violations

    Carries a machine readable code next to the human message so the
    HTTP layer can pass both through unchanged.
    """

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> dict:
        return {'error': self.message, 'code': self.code}
