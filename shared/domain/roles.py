"""
Roles

Who is acting on a request, carried explicitly through service and
permission signatures instead of being read off the request user ad hoc.
"""

from dataclasses import dataclass
from enum import Enum

from shared.domain.base import ValueObject


class Role(Enum):
    GUEST = 'guest'
    OWNER = 'owner'
    ADMIN = 'admin'


@dataclass(frozen=True)
class Principal(ValueObject):
    """
    The acting party of a request

    user_id is None for anonymous guests (bookings may be made without
    an account).
    """
    role: Role
    user_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns(self, owner_id: int | None) -> bool:
        """True if this principal is the owner identified by owner_id"""
        return (
            self.role is Role.OWNER
            and self.user_id is not None
            and self.user_id == owner_id
        )


ANONYMOUS = Principal(role=Role.GUEST)


def principal_for_user(user) -> Principal:
    """
    Resolve the principal for a Django user

    Staff and superusers are admins, users owning at least one property
    are owners, everyone else (including anonymous users) is a guest.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return ANONYMOUS
    if user.is_staff or user.is_superuser:
        return Principal(role=Role.ADMIN, user_id=user.pk)

    from apps.properties.models import Property  # Local import keeps shared/ framework-light

    if Property.objects.filter(owner_id=user.pk).exists():
        return Principal(role=Role.OWNER, user_id=user.pk)
    return Principal(role=Role.GUEST, user_id=user.pk)
