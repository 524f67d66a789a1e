"""
Distributor onboarding and lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import uuid4

from domain.distributor import Distributor
from domain.errors import DistributorNotFound
from domain.notification import NotificationType
from domain.time import utc_now
from domain.user import Actor
from repositories.protocols import DistributorRepository
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OnboardingRequest:
    name: str
    phone: str
    state: str
    area: str
    has_special_pricing: bool = False
    has_special_schemes: bool = False
    agreement_url: Optional[str] = None


class DistributorService:
    def __init__(
        self,
        distributors: DistributorRepository,
        notifications: NotificationService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._distributors = distributors
        self._notifications = notifications
        self._clock = clock

    def onboard_distributor(self, request: OnboardingRequest, actor: Actor) -> Distributor:
        """
        Create a distributor with an empty wallet.

        Any signed-in user may onboard; the new distributor records who added it.
        """
        if not request.name.strip():
            raise ValueError("Distributor name is required")

        distributor = Distributor(
            distributor_id=f"dist-{uuid4()}",
            name=request.name.strip(),
            phone=request.phone,
            state=request.state,
            area=request.area,
            date_added=self._clock(),
            added_by=actor.username,
            wallet_balance=Decimal("0"),
            has_special_pricing=request.has_special_pricing,
            has_special_schemes=request.has_special_schemes,
            agreement_url=request.agreement_url,
        )
        self._distributors.add_distributor(distributor)

        logger.info("Onboarded distributor=%s (%s) by %s", distributor.distributor_id, distributor.name, actor.username)
        self._notifications.notify(
            NotificationType.DISTRIBUTOR_ADDED,
            f"New distributor added: {distributor.name}",
            distributor.distributor_id,
        )
        return distributor

    def get_distributor(self, distributor_id: str) -> Distributor:
        distributor = self._distributors.get_distributor(distributor_id)
        if distributor is None:
            raise DistributorNotFound(distributor_id)
        return distributor

    def list_distributors(self) -> List[Distributor]:
        return sorted(self._distributors.list_distributors(), key=lambda d: d.name)


__all__ = ["OnboardingRequest", "DistributorService"]
