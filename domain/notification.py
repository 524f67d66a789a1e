"""
Domain: Notifications.

Human-readable event messages appended on order placement, failures,
onboarding, new global schemes and low wallet balances.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class NotificationType(str, Enum):
    WALLET_LOW = "WALLET_LOW"
    ORDER_PLACED = "ORDER_PLACED"
    ORDER_FAILED = "ORDER_FAILED"
    NEW_SCHEME = "NEW_SCHEME"
    DISTRIBUTOR_ADDED = "DISTRIBUTOR_ADDED"


@dataclass(frozen=True, slots=True)
class Notification:
    notification_id: str
    notification_type: NotificationType
    message: str
    date: datetime
    distributor_id: Optional[str] = None
    is_read: bool = False

    def __post_init__(self) -> None:
        require_utc_timestamp("date", self.date)

    def mark_read(self) -> "Notification":
        return replace(self, is_read=True)
