"""
Domain: Users and roles.

Authentication lives outside this system; the core only receives an Actor
describing who performs a mutation and checks role gates. User records are
kept for the user management screens; credentials are not stored here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import PermissionDenied


class UserRole(str, Enum):
    SUPER_ADMIN = "Super Admin"
    EXECUTIVE = "Executive"
    USER = "User"


@dataclass(frozen=True, slots=True)
class User:
    user_id: str
    username: str
    role: UserRole

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("user_id is required")
        if not self.username.strip():
            raise ValueError("username is required")


@dataclass(frozen=True, slots=True)
class Actor:
    user_id: str
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN


def require_admin(actor: Actor, action: str) -> None:
    """Raise PermissionDenied unless the actor is a super admin."""

    if not actor.is_admin:
        raise PermissionDenied(action)
