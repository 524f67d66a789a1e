"""
User management.

Every mutation is restricted to super admins, and an admin cannot delete the
account it is signed in with.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import uuid4

from domain.errors import CannotDeleteSelf, EntityNotFound
from domain.user import Actor, User, UserRole, require_admin
from repositories.protocols import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def _require_user(self, user_id: str) -> User:
        user = self._users.get_user(user_id)
        if user is None:
            raise EntityNotFound("User", user_id)
        return user

    def _require_unique_username(self, username: str, user_id: Optional[str] = None) -> None:
        for existing in self._users.list_users():
            if existing.username == username and existing.user_id != user_id:
                raise ValueError(f"Username already taken: {username}")

    def list_users(self) -> List[User]:
        return sorted(self._users.list_users(), key=lambda u: u.username)

    def add_user(self, actor: Actor, username: str, role: UserRole) -> User:
        require_admin(actor, "add user")
        user = User(user_id=f"user-{uuid4()}", username=username.strip(), role=role)
        self._require_unique_username(user.username)
        self._users.add_user(user)
        logger.info("Added user=%s (%s, %s) by %s", user.user_id, user.username, role.value, actor.username)
        return user

    def update_user(
        self,
        actor: Actor,
        user_id: str,
        username: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        """Change a user's name and/or role; omitted fields keep their value."""
        require_admin(actor, "update user")
        existing = self._require_user(user_id)
        updated = User(
            user_id=user_id,
            username=existing.username if username is None else username.strip(),
            role=existing.role if role is None else role,
        )
        self._require_unique_username(updated.username, user_id)
        self._users.update_user(updated)
        logger.info("Updated user=%s by %s", user_id, actor.username)
        return updated

    def delete_user(self, actor: Actor, user_id: str) -> None:
        require_admin(actor, "delete user")
        if user_id == actor.user_id:
            raise CannotDeleteSelf(user_id)
        self._require_user(user_id)
        self._users.delete_user(user_id)
        logger.info("Deleted user=%s by %s", user_id, actor.username)


__all__ = ["UserService"]
