"""
Notification sink.

Fire-and-forget: a failure to store a notification is logged and never undoes
or blocks the operation that produced it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from domain.notification import Notification, NotificationType
from domain.time import utc_now
from repositories.protocols import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        repository: NotificationRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._clock = clock

    def notify(
        self,
        notification_type: NotificationType,
        message: str,
        distributor_id: Optional[str] = None,
    ) -> Optional[Notification]:
        notification = Notification(
            notification_id=f"notif-{uuid4()}",
            notification_type=notification_type,
            message=message,
            date=self._clock(),
            distributor_id=distributor_id,
        )
        try:
            return self._repository.add_notification(notification)
        except RuntimeError:
            logger.exception("Dropped %s notification: %s", notification_type.value, message)
            return None

    def list_notifications(self) -> List[Notification]:
        """All notifications, newest first."""
        return sorted(self._repository.list_notifications(), key=lambda n: n.date, reverse=True)

    def unread_count(self) -> int:
        return sum(1 for n in self._repository.list_notifications() if not n.is_read)

    def mark_read(self, notification_id: str) -> None:
        self._repository.mark_read(notification_id)

    def mark_all_read(self) -> None:
        self._repository.mark_all_read()


__all__ = ["NotificationService"]
