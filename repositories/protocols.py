"""
Repository interfaces.

Services receive these as explicit collaborators instead of reaching for
module-level tables, so tests can run against fixture data. Two
implementations exist: `repositories.memory` and `repositories.supabase_repositories`.

Methods that touch more than one row (order + items, ledger + balance,
delivery) are atomic in every implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from domain.catalog import Product
from domain.distributor import Distributor
from domain.notification import Notification
from domain.order import Order, OrderLineItem
from domain.promotions import Scheme, SpecialPrice
from domain.user import User
from domain.wallet import WalletTransaction


class CatalogRepository(Protocol):
    def list_products(self) -> List[Product]: ...

    def get_product(self, product_id: str) -> Optional[Product]: ...

    def add_product(self, product: Product) -> Product: ...

    def update_product(self, product: Product) -> Product: ...


class SpecialPriceRepository(Protocol):
    def list_special_prices(self) -> List[SpecialPrice]: ...

    def list_for_distributor(self, distributor_id: str) -> List[SpecialPrice]: ...

    def get_special_price(self, special_price_id: str) -> Optional[SpecialPrice]: ...

    def add_special_price(self, special_price: SpecialPrice) -> SpecialPrice: ...

    def update_special_price(self, special_price: SpecialPrice) -> SpecialPrice: ...

    def delete_special_price(self, special_price_id: str) -> None: ...


class SchemeRepository(Protocol):
    def list_schemes(self) -> List[Scheme]: ...

    def get_scheme(self, scheme_id: str) -> Optional[Scheme]: ...

    def add_scheme(self, scheme: Scheme) -> Scheme: ...

    def update_scheme(self, scheme: Scheme) -> Scheme: ...

    def delete_scheme(self, scheme_id: str) -> None: ...


class DistributorRepository(Protocol):
    def list_distributors(self) -> List[Distributor]: ...

    def get_distributor(self, distributor_id: str) -> Optional[Distributor]: ...

    def add_distributor(self, distributor: Distributor) -> Distributor: ...


class OrderRepository(Protocol):
    def list_orders(self) -> List[Order]: ...

    def list_orders_by_distributor(self, distributor_id: str) -> List[Order]: ...

    def get_order(self, order_id: str) -> Optional[Order]: ...

    def get_order_items(self, order_id: str) -> List[OrderLineItem]: ...

    def create_order(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        """Insert the order and all of its line items, or nothing."""
        ...

    def replace_order_items(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        """Swap a pending order's items wholesale and store its new total, or nothing."""
        ...


class WalletRepository(Protocol):
    def list_transactions(self, distributor_id: str) -> List[WalletTransaction]:
        """Oldest first, insertion order within one timestamp."""
        ...

    def list_transactions_for_order(self, order_id: str) -> List[WalletTransaction]: ...

    def append_transaction(self, transaction: WalletTransaction) -> Distributor:
        """Insert the transaction and apply its amount to the balance; returns the updated distributor."""
        ...

    def deliver_order(self, order: Order, debit: WalletTransaction) -> Order:
        """Mark the order DELIVERED, insert the debit and apply it to the balance, or nothing."""
        ...


class NotificationRepository(Protocol):
    def list_notifications(self) -> List[Notification]: ...

    def add_notification(self, notification: Notification) -> Notification: ...

    def mark_read(self, notification_id: str) -> None: ...

    def mark_all_read(self) -> None: ...


class UserRepository(Protocol):
    def list_users(self) -> List[User]: ...

    def get_user(self, user_id: str) -> Optional[User]: ...

    def add_user(self, user: User) -> User: ...

    def update_user(self, user: User) -> User: ...

    def delete_user(self, user_id: str) -> None: ...


@dataclass(frozen=True, slots=True)
class Repositories:
    """Bundle of every repository a running application needs."""

    catalog: CatalogRepository
    special_prices: SpecialPriceRepository
    schemes: SchemeRepository
    distributors: DistributorRepository
    orders: OrderRepository
    wallet: WalletRepository
    notifications: NotificationRepository
    users: UserRepository


__all__ = [
    "CatalogRepository",
    "SpecialPriceRepository",
    "SchemeRepository",
    "DistributorRepository",
    "OrderRepository",
    "WalletRepository",
    "NotificationRepository",
    "UserRepository",
    "Repositories",
]
