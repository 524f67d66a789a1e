"""
In-memory repositories.

A thread-safe, process-local data store used by tests, the demo seed script
and the `memory` backend. All repositories created from one InMemoryDatabase
share its tables and its lock, so multi-row writes are atomic with respect to
each other.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from domain.catalog import Product
from domain.distributor import Distributor
from domain.notification import Notification
from domain.order import Order, OrderLineItem, OrderStatus
from domain.promotions import Scheme, SpecialPrice
from domain.user import User
from domain.wallet import WalletTransaction
from repositories.protocols import Repositories


@dataclass
class InMemoryDatabase:
    products: Dict[str, Product] = field(default_factory=dict)
    special_prices: Dict[str, SpecialPrice] = field(default_factory=dict)
    schemes: Dict[str, Scheme] = field(default_factory=dict)
    distributors: Dict[str, Distributor] = field(default_factory=dict)
    orders: Dict[str, Order] = field(default_factory=dict)
    order_items: Dict[str, List[OrderLineItem]] = field(default_factory=dict)
    wallet_transactions: List[WalletTransaction] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    users: Dict[str, User] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class InMemoryCatalogRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_products(self) -> List[Product]:
        with self._db.lock:
            return list(self._db.products.values())

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._db.lock:
            return self._db.products.get(product_id)

    def add_product(self, product: Product) -> Product:
        with self._db.lock:
            if product.product_id in self._db.products:
                raise RuntimeError(f"Failed to add product: {product.product_id} already exists")
            self._db.products[product.product_id] = product
            return product

    def update_product(self, product: Product) -> Product:
        with self._db.lock:
            if product.product_id not in self._db.products:
                raise RuntimeError(f"Failed to update product: {product.product_id} does not exist")
            self._db.products[product.product_id] = product
            return product


class InMemorySpecialPriceRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_special_prices(self) -> List[SpecialPrice]:
        with self._db.lock:
            return list(self._db.special_prices.values())

    def list_for_distributor(self, distributor_id: str) -> List[SpecialPrice]:
        with self._db.lock:
            return [p for p in self._db.special_prices.values() if p.distributor_id == distributor_id]

    def get_special_price(self, special_price_id: str) -> Optional[SpecialPrice]:
        with self._db.lock:
            return self._db.special_prices.get(special_price_id)

    def add_special_price(self, special_price: SpecialPrice) -> SpecialPrice:
        with self._db.lock:
            self._db.special_prices[special_price.special_price_id] = special_price
            return special_price

    def update_special_price(self, special_price: SpecialPrice) -> SpecialPrice:
        with self._db.lock:
            if special_price.special_price_id not in self._db.special_prices:
                raise RuntimeError(
                    f"Failed to update special price: {special_price.special_price_id} does not exist"
                )
            self._db.special_prices[special_price.special_price_id] = special_price
            return special_price

    def delete_special_price(self, special_price_id: str) -> None:
        with self._db.lock:
            self._db.special_prices.pop(special_price_id, None)


class InMemorySchemeRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_schemes(self) -> List[Scheme]:
        with self._db.lock:
            return list(self._db.schemes.values())

    def get_scheme(self, scheme_id: str) -> Optional[Scheme]:
        with self._db.lock:
            return self._db.schemes.get(scheme_id)

    def add_scheme(self, scheme: Scheme) -> Scheme:
        with self._db.lock:
            self._db.schemes[scheme.scheme_id] = scheme
            return scheme

    def update_scheme(self, scheme: Scheme) -> Scheme:
        with self._db.lock:
            if scheme.scheme_id not in self._db.schemes:
                raise RuntimeError(f"Failed to update scheme: {scheme.scheme_id} does not exist")
            self._db.schemes[scheme.scheme_id] = scheme
            return scheme

    def delete_scheme(self, scheme_id: str) -> None:
        with self._db.lock:
            self._db.schemes.pop(scheme_id, None)


class InMemoryDistributorRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_distributors(self) -> List[Distributor]:
        with self._db.lock:
            return list(self._db.distributors.values())

    def get_distributor(self, distributor_id: str) -> Optional[Distributor]:
        with self._db.lock:
            return self._db.distributors.get(distributor_id)

    def add_distributor(self, distributor: Distributor) -> Distributor:
        with self._db.lock:
            if distributor.distributor_id in self._db.distributors:
                raise RuntimeError(
                    f"Failed to add distributor: {distributor.distributor_id} already exists"
                )
            if distributor.wallet_balance != 0:
                raise RuntimeError("Failed to add distributor: wallet balance must start at 0")
            self._db.distributors[distributor.distributor_id] = distributor
            return distributor


class InMemoryOrderRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_orders(self) -> List[Order]:
        with self._db.lock:
            return list(self._db.orders.values())

    def list_orders_by_distributor(self, distributor_id: str) -> List[Order]:
        with self._db.lock:
            return [o for o in self._db.orders.values() if o.distributor_id == distributor_id]

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._db.lock:
            return self._db.orders.get(order_id)

    def get_order_items(self, order_id: str) -> List[OrderLineItem]:
        with self._db.lock:
            return list(self._db.order_items.get(order_id, []))

    def create_order(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        stamped = [item.for_order(order.order_id) for item in items]
        with self._db.lock:
            if order.order_id in self._db.orders:
                raise RuntimeError(f"Failed to create order: {order.order_id} already exists")
            self._db.orders[order.order_id] = order
            self._db.order_items[order.order_id] = stamped
            return order

    def replace_order_items(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        stamped = [item.for_order(order.order_id) for item in items]
        with self._db.lock:
            current = self._db.orders.get(order.order_id)
            if current is None or current.status != OrderStatus.PENDING:
                raise RuntimeError(f"Failed to replace items: order {order.order_id} is not pending")
            self._db.orders[order.order_id] = order
            self._db.order_items[order.order_id] = stamped
            return order


class InMemoryWalletRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_transactions(self, distributor_id: str) -> List[WalletTransaction]:
        with self._db.lock:
            return sorted(
                (t for t in self._db.wallet_transactions if t.distributor_id == distributor_id),
                key=lambda t: t.date,
            )

    def list_transactions_for_order(self, order_id: str) -> List[WalletTransaction]:
        with self._db.lock:
            return [t for t in self._db.wallet_transactions if t.order_id == order_id]

    def _apply(self, transaction: WalletTransaction) -> Distributor:
        distributor = self._db.distributors.get(transaction.distributor_id)
        if distributor is None:
            raise RuntimeError(
                f"Failed to record transaction: distributor {transaction.distributor_id} does not exist"
            )
        updated = distributor.with_balance(distributor.wallet_balance + transaction.amount)
        if updated.wallet_balance < Decimal("0"):
            raise RuntimeError("Failed to record transaction: balance would become negative")
        self._db.wallet_transactions.append(transaction)
        self._db.distributors[updated.distributor_id] = updated
        return updated

    def append_transaction(self, transaction: WalletTransaction) -> Distributor:
        with self._db.lock:
            return self._apply(transaction)

    def deliver_order(self, order: Order, debit: WalletTransaction) -> Order:
        with self._db.lock:
            current = self._db.orders.get(order.order_id)
            if current is None or current.status != OrderStatus.PENDING:
                raise RuntimeError(f"Failed to deliver order: {order.order_id} is not pending")
            delivered = current.delivered()
            self._apply(debit)
            self._db.orders[order.order_id] = delivered
            return delivered


class InMemoryNotificationRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_notifications(self) -> List[Notification]:
        with self._db.lock:
            return list(self._db.notifications)

    def add_notification(self, notification: Notification) -> Notification:
        with self._db.lock:
            self._db.notifications.append(notification)
            return notification

    def mark_read(self, notification_id: str) -> None:
        with self._db.lock:
            self._db.notifications = [
                n.mark_read() if n.notification_id == notification_id else n
                for n in self._db.notifications
            ]

    def mark_all_read(self) -> None:
        with self._db.lock:
            self._db.notifications = [n.mark_read() for n in self._db.notifications]


class InMemoryUserRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def list_users(self) -> List[User]:
        with self._db.lock:
            return list(self._db.users.values())

    def get_user(self, user_id: str) -> Optional[User]:
        with self._db.lock:
            return self._db.users.get(user_id)

    def add_user(self, user: User) -> User:
        with self._db.lock:
            if user.user_id in self._db.users:
                raise RuntimeError(f"Failed to add user: {user.user_id} already exists")
            self._db.users[user.user_id] = user
            return user

    def update_user(self, user: User) -> User:
        with self._db.lock:
            if user.user_id not in self._db.users:
                raise RuntimeError(f"Failed to update user: {user.user_id} does not exist")
            self._db.users[user.user_id] = user
            return user

    def delete_user(self, user_id: str) -> None:
        with self._db.lock:
            self._db.users.pop(user_id, None)


def build_memory_repositories(db: Optional[InMemoryDatabase] = None) -> Repositories:
    """Create every repository over one shared InMemoryDatabase."""

    db = db or InMemoryDatabase()
    return Repositories(
        catalog=InMemoryCatalogRepository(db),
        special_prices=InMemorySpecialPriceRepository(db),
        schemes=InMemorySchemeRepository(db),
        distributors=InMemoryDistributorRepository(db),
        orders=InMemoryOrderRepository(db),
        wallet=InMemoryWalletRepository(db),
        notifications=InMemoryNotificationRepository(db),
        users=InMemoryUserRepository(db),
    )


__all__ = [
    "InMemoryDatabase",
    "InMemoryCatalogRepository",
    "InMemorySpecialPriceRepository",
    "InMemorySchemeRepository",
    "InMemoryDistributorRepository",
    "InMemoryOrderRepository",
    "InMemoryWalletRepository",
    "InMemoryNotificationRepository",
    "InMemoryUserRepository",
    "build_memory_repositories",
]
