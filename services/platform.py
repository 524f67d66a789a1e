"""
Service wiring.

Builds every service over one set of repositories and one shared lock
registry, so the ledger and the order service serialize on the same
per-distributor locks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from domain.time import utc_now
from repositories.protocols import Repositories
from services.admin_service import CatalogService, PromotionService
from services.distributor_service import DistributorService
from services.locks import KeyedLocks
from services.notification_service import NotificationService
from services.order_service import OrderService
from services.pricing_service import PricingEngine
from services.user_service import UserService
from services.wallet_service import WalletLedger
from settings import Settings


@dataclass(frozen=True, slots=True)
class Platform:
    repositories: Repositories
    pricing: PricingEngine
    ledger: WalletLedger
    orders: OrderService
    distributors: DistributorService
    catalog: CatalogService
    promotions: PromotionService
    notifications: NotificationService
    users: UserService


def build_platform(
    repositories: Repositories,
    settings: Optional[Settings] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Platform:
    settings = settings or Settings()
    locks = KeyedLocks()

    notifications = NotificationService(repositories.notifications, clock=clock)
    pricing = PricingEngine(repositories.catalog, repositories.special_prices, repositories.schemes)
    ledger = WalletLedger(repositories.distributors, repositories.wallet, locks=locks, clock=clock)
    orders = OrderService(
        pricing=pricing,
        ledger=ledger,
        orders=repositories.orders,
        distributors=repositories.distributors,
        catalog=repositories.catalog,
        notifications=notifications,
        wallet_low_threshold=settings.wallet_low_threshold,
        clock=clock,
    )

    return Platform(
        repositories=repositories,
        pricing=pricing,
        ledger=ledger,
        orders=orders,
        distributors=DistributorService(repositories.distributors, notifications, clock=clock),
        catalog=CatalogService(repositories.catalog),
        promotions=PromotionService(
            repositories.schemes,
            repositories.special_prices,
            repositories.catalog,
            repositories.distributors,
            notifications,
        ),
        notifications=notifications,
        users=UserService(repositories.users),
    )


def build_repositories(settings: Settings) -> Repositories:
    """Pick the persistence backend named by settings.data_backend."""

    if settings.data_backend == "supabase":
        from repositories.client import create_supabase_client
        from repositories.supabase_repositories import build_supabase_repositories

        return build_supabase_repositories(create_supabase_client(settings))

    from repositories.memory import build_memory_repositories

    return build_memory_repositories()


__all__ = ["Platform", "build_platform", "build_repositories"]
