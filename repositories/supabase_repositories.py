"""
Supabase repositories (persistence).

These classes provide *only* persistence operations for the domain entities.
Business rules (affordability, editability, scheme selection) live in the
services; the Postgres functions behind the `rpc` calls only guarantee that
multi-row writes commit together (see sql/wallet_functions.sql).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from postgrest.exceptions import APIError

from domain.catalog import Product
from domain.distributor import Distributor
from domain.notification import Notification, NotificationType
from domain.order import Order, OrderLineItem, OrderStatus
from domain.promotions import DistributorScheme, GlobalScheme, Scheme, SpecialPrice
from domain.time import require_utc_timestamp
from domain.user import User, UserRole
from domain.wallet import TransactionType, WalletTransaction
from repositories.client import get_supabase
from repositories.protocols import Repositories

# Supabase table names.
# Keep these aligned with your database schema.
_PRODUCTS_TABLE: str = "products"
_SPECIAL_PRICES_TABLE: str = "special_prices"
_SCHEMES_TABLE: str = "schemes"
_DISTRIBUTORS_TABLE: str = "distributors"
_ORDERS_TABLE: str = "orders"
_ORDER_ITEMS_TABLE: str = "order_items"
_WALLET_TABLE: str = "wallet_transactions"
_NOTIFICATIONS_TABLE: str = "notifications"
_USERS_TABLE: str = "users"


def _to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _execute(query: Any, action: str) -> List[Mapping[str, Any]]:
    """Run a query builder and return its rows, raising RuntimeError on failure."""

    try:
        response = query.execute()
    except APIError as e:
        raise RuntimeError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")

    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


# ============================================================================
# Row conversion
# ============================================================================

def _row_to_product(row: Mapping[str, Any]) -> Product:
    return Product(
        product_id=str(row["product_id"]),
        name=str(row["name"]),
        default_unit_price=Decimal(str(row["default_unit_price"])),
        hsn_code=row.get("hsn_code"),
    )


def _product_to_row(product: Product) -> Dict[str, Any]:
    return {
        "product_id": product.product_id,
        "name": product.name,
        "default_unit_price": str(product.default_unit_price),
        "hsn_code": product.hsn_code,
    }


def _row_to_special_price(row: Mapping[str, Any]) -> SpecialPrice:
    return SpecialPrice(
        special_price_id=str(row["special_price_id"]),
        distributor_id=str(row["distributor_id"]),
        product_id=str(row["product_id"]),
        price=Decimal(str(row["price"])),
        start_date=_parse_date(row["start_date"]),
        end_date=_parse_date(row["end_date"]),
    )


def _special_price_to_row(price: SpecialPrice) -> Dict[str, Any]:
    return {
        "special_price_id": price.special_price_id,
        "distributor_id": price.distributor_id,
        "product_id": price.product_id,
        "price": str(price.price),
        "start_date": price.start_date.isoformat(),
        "end_date": price.end_date.isoformat(),
    }


def _row_to_scheme(row: Mapping[str, Any]) -> Scheme:
    """
    Convert a scheme row into its tagged variant.

    The table stores `is_global` plus a nullable `distributor_id`; a row that
    sets both (or neither) is rejected rather than guessed at.
    """

    common = dict(
        scheme_id=str(row["scheme_id"]),
        description=str(row.get("description") or ""),
        buy_product_id=str(row["buy_product_id"]),
        buy_quantity=int(row["buy_quantity"]),
        get_product_id=str(row["get_product_id"]),
        get_quantity=int(row["get_quantity"]),
        start_date=_parse_date(row["start_date"]),
        end_date=_parse_date(row["end_date"]),
    )
    distributor_id = row.get("distributor_id")
    is_global = bool(row.get("is_global"))

    if is_global and distributor_id is None:
        return GlobalScheme(**common)
    if not is_global and distributor_id is not None:
        return DistributorScheme(distributor_id=str(distributor_id), **common)
    raise ValueError(
        f"Scheme {common['scheme_id']} is inconsistent: is_global={is_global}, "
        f"distributor_id={distributor_id!r}"
    )


def _scheme_to_row(scheme: Scheme) -> Dict[str, Any]:
    return {
        "scheme_id": scheme.scheme_id,
        "description": scheme.description,
        "buy_product_id": scheme.buy_product_id,
        "buy_quantity": scheme.buy_quantity,
        "get_product_id": scheme.get_product_id,
        "get_quantity": scheme.get_quantity,
        "is_global": scheme.is_global,
        "distributor_id": scheme.distributor_id if isinstance(scheme, DistributorScheme) else None,
        "start_date": scheme.start_date.isoformat(),
        "end_date": scheme.end_date.isoformat(),
    }


def _row_to_distributor(row: Mapping[str, Any]) -> Distributor:
    return Distributor(
        distributor_id=str(row["distributor_id"]),
        name=str(row["name"]),
        phone=str(row.get("phone") or ""),
        state=str(row.get("state") or ""),
        area=str(row.get("area") or ""),
        date_added=_parse_utc_datetime(row["date_added_utc"]),
        added_by=str(row.get("added_by") or ""),
        wallet_balance=Decimal(str(row.get("wallet_balance", "0"))),
        has_special_pricing=bool(row.get("has_special_pricing", False)),
        has_special_schemes=bool(row.get("has_special_schemes", False)),
        agreement_url=row.get("agreement_url"),
    )


def _distributor_to_row(distributor: Distributor) -> Dict[str, Any]:
    return {
        "distributor_id": distributor.distributor_id,
        "name": distributor.name,
        "phone": distributor.phone,
        "state": distributor.state,
        "area": distributor.area,
        "date_added_utc": _to_iso_utc(distributor.date_added, name="date_added"),
        "added_by": distributor.added_by,
        "wallet_balance": str(distributor.wallet_balance),
        "has_special_pricing": distributor.has_special_pricing,
        "has_special_schemes": distributor.has_special_schemes,
        "agreement_url": distributor.agreement_url,
    }


def _row_to_order(row: Mapping[str, Any]) -> Order:
    return Order(
        order_id=str(row["order_id"]),
        distributor_id=str(row["distributor_id"]),
        total_amount=Decimal(str(row["total_amount"])),
        date=_parse_utc_datetime(row["date_utc"]),
        placed_by=str(row.get("placed_by") or ""),
        status=OrderStatus(str(row["status"])),
    )


def _order_to_row(order: Order) -> Dict[str, Any]:
    return {
        "order_id": order.order_id,
        "distributor_id": order.distributor_id,
        "total_amount": str(order.total_amount),
        "date_utc": _to_iso_utc(order.date, name="date"),
        "placed_by": order.placed_by,
        "status": order.status.value,
    }


def _row_to_line_item(row: Mapping[str, Any]) -> OrderLineItem:
    return OrderLineItem(
        order_id=str(row["order_id"]),
        product_id=str(row["product_id"]),
        quantity=int(row["quantity"]),
        unit_price=Decimal(str(row["unit_price"])),
        is_freebie=bool(row.get("is_freebie", False)),
    )


def _line_item_to_row(item: OrderLineItem) -> Dict[str, Any]:
    return {
        "order_id": item.order_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "unit_price": str(item.unit_price),
        "is_freebie": item.is_freebie,
    }


def _row_to_transaction(row: Mapping[str, Any]) -> WalletTransaction:
    return WalletTransaction(
        transaction_id=str(row["transaction_id"]),
        distributor_id=str(row["distributor_id"]),
        amount=Decimal(str(row["amount"])),
        transaction_type=TransactionType(str(row["transaction_type"])),
        date=_parse_utc_datetime(row["date_utc"]),
        actor=str(row.get("actor") or ""),
        order_id=row.get("order_id"),
    )


def _transaction_to_row(tx: WalletTransaction) -> Dict[str, Any]:
    return {
        "transaction_id": tx.transaction_id,
        "distributor_id": tx.distributor_id,
        "amount": str(tx.amount),
        "transaction_type": tx.transaction_type.value,
        "date_utc": _to_iso_utc(tx.date, name="date"),
        "actor": tx.actor,
        "order_id": tx.order_id,
    }


def _row_to_notification(row: Mapping[str, Any]) -> Notification:
    return Notification(
        notification_id=str(row["notification_id"]),
        notification_type=NotificationType(str(row["notification_type"])),
        message=str(row["message"]),
        date=_parse_utc_datetime(row["date_utc"]),
        distributor_id=row.get("distributor_id"),
        is_read=bool(row.get("is_read", False)),
    )


def _notification_to_row(notification: Notification) -> Dict[str, Any]:
    return {
        "notification_id": notification.notification_id,
        "notification_type": notification.notification_type.value,
        "message": notification.message,
        "date_utc": _to_iso_utc(notification.date, name="date"),
        "distributor_id": notification.distributor_id,
        "is_read": notification.is_read,
    }


def _row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        user_id=str(row["user_id"]),
        username=str(row["username"]),
        role=UserRole(str(row["role"])),
    )


def _user_to_row(user: User) -> Dict[str, Any]:
    return {
        "user_id": user.user_id,
        "username": user.username,
        "role": user.role.value,
    }


# ============================================================================
# Repositories
# ============================================================================

class _SupabaseRepository:
    def __init__(self, client: Any = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_supabase()
        return self._client


class SupabaseCatalogRepository(_SupabaseRepository):
    def list_products(self) -> List[Product]:
        rows = _execute(self.client.table(_PRODUCTS_TABLE).select("*"), "list products")
        return [_row_to_product(row) for row in rows]

    def get_product(self, product_id: str) -> Optional[Product]:
        rows = _execute(
            self.client.table(_PRODUCTS_TABLE).select("*").eq("product_id", product_id).limit(1),
            "fetch product",
        )
        return _row_to_product(rows[0]) if rows else None

    def add_product(self, product: Product) -> Product:
        _execute(self.client.table(_PRODUCTS_TABLE).insert(_product_to_row(product)), "add product")
        return product

    def update_product(self, product: Product) -> Product:
        _execute(
            self.client.table(_PRODUCTS_TABLE)
            .update(_product_to_row(product))
            .eq("product_id", product.product_id),
            "update product",
        )
        return product


class SupabaseSpecialPriceRepository(_SupabaseRepository):
    def list_special_prices(self) -> List[SpecialPrice]:
        rows = _execute(self.client.table(_SPECIAL_PRICES_TABLE).select("*"), "list special prices")
        return [_row_to_special_price(row) for row in rows]

    def list_for_distributor(self, distributor_id: str) -> List[SpecialPrice]:
        rows = _execute(
            self.client.table(_SPECIAL_PRICES_TABLE).select("*").eq("distributor_id", distributor_id),
            "list special prices",
        )
        return [_row_to_special_price(row) for row in rows]

    def get_special_price(self, special_price_id: str) -> Optional[SpecialPrice]:
        rows = _execute(
            self.client.table(_SPECIAL_PRICES_TABLE)
            .select("*")
            .eq("special_price_id", special_price_id)
            .limit(1),
            "fetch special price",
        )
        return _row_to_special_price(rows[0]) if rows else None

    def add_special_price(self, special_price: SpecialPrice) -> SpecialPrice:
        _execute(
            self.client.table(_SPECIAL_PRICES_TABLE).insert(_special_price_to_row(special_price)),
            "add special price",
        )
        return special_price

    def update_special_price(self, special_price: SpecialPrice) -> SpecialPrice:
        _execute(
            self.client.table(_SPECIAL_PRICES_TABLE)
            .update(_special_price_to_row(special_price))
            .eq("special_price_id", special_price.special_price_id),
            "update special price",
        )
        return special_price

    def delete_special_price(self, special_price_id: str) -> None:
        _execute(
            self.client.table(_SPECIAL_PRICES_TABLE).delete().eq("special_price_id", special_price_id),
            "delete special price",
        )


class SupabaseSchemeRepository(_SupabaseRepository):
    def list_schemes(self) -> List[Scheme]:
        rows = _execute(self.client.table(_SCHEMES_TABLE).select("*"), "list schemes")
        return [_row_to_scheme(row) for row in rows]

    def get_scheme(self, scheme_id: str) -> Optional[Scheme]:
        rows = _execute(
            self.client.table(_SCHEMES_TABLE).select("*").eq("scheme_id", scheme_id).limit(1),
            "fetch scheme",
        )
        return _row_to_scheme(rows[0]) if rows else None

    def add_scheme(self, scheme: Scheme) -> Scheme:
        _execute(self.client.table(_SCHEMES_TABLE).insert(_scheme_to_row(scheme)), "add scheme")
        return scheme

    def update_scheme(self, scheme: Scheme) -> Scheme:
        _execute(
            self.client.table(_SCHEMES_TABLE).update(_scheme_to_row(scheme)).eq("scheme_id", scheme.scheme_id),
            "update scheme",
        )
        return scheme

    def delete_scheme(self, scheme_id: str) -> None:
        _execute(self.client.table(_SCHEMES_TABLE).delete().eq("scheme_id", scheme_id), "delete scheme")


class SupabaseDistributorRepository(_SupabaseRepository):
    def list_distributors(self) -> List[Distributor]:
        rows = _execute(self.client.table(_DISTRIBUTORS_TABLE).select("*"), "list distributors")
        return [_row_to_distributor(row) for row in rows]

    def get_distributor(self, distributor_id: str) -> Optional[Distributor]:
        rows = _execute(
            self.client.table(_DISTRIBUTORS_TABLE).select("*").eq("distributor_id", distributor_id).limit(1),
            "fetch distributor",
        )
        return _row_to_distributor(rows[0]) if rows else None

    def add_distributor(self, distributor: Distributor) -> Distributor:
        _execute(
            self.client.table(_DISTRIBUTORS_TABLE).insert(_distributor_to_row(distributor)),
            "add distributor",
        )
        return distributor


class SupabaseOrderRepository(_SupabaseRepository):
    def list_orders(self) -> List[Order]:
        rows = _execute(self.client.table(_ORDERS_TABLE).select("*"), "list orders")
        return [_row_to_order(row) for row in rows]

    def list_orders_by_distributor(self, distributor_id: str) -> List[Order]:
        rows = _execute(
            self.client.table(_ORDERS_TABLE).select("*").eq("distributor_id", distributor_id),
            "list orders",
        )
        return [_row_to_order(row) for row in rows]

    def get_order(self, order_id: str) -> Optional[Order]:
        rows = _execute(
            self.client.table(_ORDERS_TABLE).select("*").eq("order_id", order_id).limit(1),
            "fetch order",
        )
        return _row_to_order(rows[0]) if rows else None

    def get_order_items(self, order_id: str) -> List[OrderLineItem]:
        rows = _execute(
            self.client.table(_ORDER_ITEMS_TABLE).select("*").eq("order_id", order_id),
            "fetch order items",
        )
        return [_row_to_line_item(row) for row in rows]

    def create_order(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        payload = {
            "p_order": _order_to_row(order),
            "p_items": [_line_item_to_row(item.for_order(order.order_id)) for item in items],
        }
        _execute(self.client.rpc("create_order_with_items", payload), "create order")
        return order

    def replace_order_items(self, order: Order, items: Sequence[OrderLineItem]) -> Order:
        payload = {
            "p_order_id": order.order_id,
            "p_total_amount": str(order.total_amount),
            "p_items": [_line_item_to_row(item.for_order(order.order_id)) for item in items],
        }
        _execute(self.client.rpc("replace_order_items", payload), "replace order items")
        return order


class SupabaseWalletRepository(_SupabaseRepository):
    def list_transactions(self, distributor_id: str) -> List[WalletTransaction]:
        rows = _execute(
            self.client.table(_WALLET_TABLE)
            .select("*")
            .eq("distributor_id", distributor_id)
            .order("date_utc")
            .order("seq"),
            "list wallet transactions",
        )
        return [_row_to_transaction(row) for row in rows]

    def list_transactions_for_order(self, order_id: str) -> List[WalletTransaction]:
        rows = _execute(
            self.client.table(_WALLET_TABLE)
            .select("*")
            .eq("order_id", order_id)
            .order("date_utc")
            .order("seq"),
            "list wallet transactions",
        )
        return [_row_to_transaction(row) for row in rows]

    def append_transaction(self, transaction: WalletTransaction) -> Distributor:
        rows = _execute(
            self.client.rpc("append_wallet_transaction", {"p_transaction": _transaction_to_row(transaction)}),
            "record wallet transaction",
        )
        if not rows:
            raise RuntimeError("Failed to record wallet transaction: no distributor row returned")
        return _row_to_distributor(rows[0])

    def deliver_order(self, order: Order, debit: WalletTransaction) -> Order:
        rows = _execute(
            self.client.rpc(
                "deliver_order_atomic",
                {"p_order_id": order.order_id, "p_transaction": _transaction_to_row(debit)},
            ),
            "deliver order",
        )
        if not rows:
            raise RuntimeError("Failed to deliver order: no order row returned")
        return _row_to_order(rows[0])


class SupabaseNotificationRepository(_SupabaseRepository):
    def list_notifications(self) -> List[Notification]:
        rows = _execute(self.client.table(_NOTIFICATIONS_TABLE).select("*"), "list notifications")
        return [_row_to_notification(row) for row in rows]

    def add_notification(self, notification: Notification) -> Notification:
        _execute(
            self.client.table(_NOTIFICATIONS_TABLE).insert(_notification_to_row(notification)),
            "add notification",
        )
        return notification

    def mark_read(self, notification_id: str) -> None:
        _execute(
            self.client.table(_NOTIFICATIONS_TABLE)
            .update({"is_read": True})
            .eq("notification_id", notification_id),
            "mark notification read",
        )

    def mark_all_read(self) -> None:
        _execute(
            self.client.table(_NOTIFICATIONS_TABLE).update({"is_read": True}).eq("is_read", False),
            "mark notifications read",
        )


class SupabaseUserRepository(_SupabaseRepository):
    def list_users(self) -> List[User]:
        rows = _execute(self.client.table(_USERS_TABLE).select("*"), "list users")
        return [_row_to_user(row) for row in rows]

    def get_user(self, user_id: str) -> Optional[User]:
        rows = _execute(
            self.client.table(_USERS_TABLE).select("*").eq("user_id", user_id).limit(1),
            "fetch user",
        )
        return _row_to_user(rows[0]) if rows else None

    def add_user(self, user: User) -> User:
        _execute(self.client.table(_USERS_TABLE).insert(_user_to_row(user)), "add user")
        return user

    def update_user(self, user: User) -> User:
        _execute(
            self.client.table(_USERS_TABLE).update(_user_to_row(user)).eq("user_id", user.user_id),
            "update user",
        )
        return user

    def delete_user(self, user_id: str) -> None:
        _execute(self.client.table(_USERS_TABLE).delete().eq("user_id", user_id), "delete user")


def build_supabase_repositories(client: Any = None) -> Repositories:
    """Create every repository over one Supabase client (the shared one by default)."""

    return Repositories(
        catalog=SupabaseCatalogRepository(client),
        special_prices=SupabaseSpecialPriceRepository(client),
        schemes=SupabaseSchemeRepository(client),
        distributors=SupabaseDistributorRepository(client),
        orders=SupabaseOrderRepository(client),
        wallet=SupabaseWalletRepository(client),
        notifications=SupabaseNotificationRepository(client),
        users=SupabaseUserRepository(client),
    )


__all__ = [
    "SupabaseCatalogRepository",
    "SupabaseSpecialPriceRepository",
    "SupabaseSchemeRepository",
    "SupabaseDistributorRepository",
    "SupabaseOrderRepository",
    "SupabaseWalletRepository",
    "SupabaseNotificationRepository",
    "SupabaseUserRepository",
    "build_supabase_repositories",
]
