"""
Domain: Orders and order line items.

Contract excerpts implemented here:
- An Order is created PENDING and becomes DELIVERED exactly once; DELIVERED is terminal.
- total_amount is the sum of quantity * unit_price over non-freebie line items.
- Freebie line items always carry unit_price = 0 and never count toward scheme triggers.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from .time import require_utc_timestamp


class OrderStatus(str, Enum):
    PENDING = "Pending"
    DELIVERED = "Delivered"


@dataclass(frozen=True, slots=True)
class RequestedItem:
    """A (product, quantity) pair as submitted by the caller, before pricing."""

    product_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class OrderLineItem:
    product_id: str
    quantity: int
    unit_price: Decimal
    is_freebie: bool = False
    order_id: Optional[str] = None  # None while the lines are only a preview

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError("quantity must be > 0")
        if self.is_freebie and self.unit_price != 0:
            raise ValueError("freebie line items must have unit_price = 0")

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price

    def for_order(self, order_id: str) -> "OrderLineItem":
        return replace(self, order_id=order_id)


def paid_total(items: Iterable[OrderLineItem]) -> Decimal:
    """Sum of quantity * unit_price over non-freebie lines."""

    return sum((item.line_total for item in items if not item.is_freebie), Decimal("0"))


@dataclass(frozen=True, slots=True)
class Order:
    order_id: str
    distributor_id: str
    total_amount: Decimal
    date: datetime
    placed_by: str
    status: OrderStatus = OrderStatus.PENDING

    def __post_init__(self) -> None:
        require_utc_timestamp("date", self.date)
        if self.total_amount < 0:
            raise ValueError("total_amount must be >= 0")

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def with_total(self, total_amount: Decimal) -> "Order":
        if not self.is_pending:
            raise ValueError("Delivered orders are immutable")
        return replace(self, total_amount=total_amount)

    def delivered(self) -> "Order":
        """Return a new Order in the terminal DELIVERED state."""

        if not self.is_pending:
            raise ValueError("Order is already delivered")
        return replace(self, status=OrderStatus.DELIVERED)


@dataclass(frozen=True, slots=True)
class EnrichedOrderItem:
    """Line item joined with catalog data for display and invoices."""

    item: OrderLineItem
    product_name: str
    hsn_code: str


__all__ = [
    "OrderStatus",
    "RequestedItem",
    "OrderLineItem",
    "Order",
    "EnrichedOrderItem",
    "paid_total",
]
