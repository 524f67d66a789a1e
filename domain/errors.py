"""
Domain errors.

Every failure of a core operation surfaces as one of these types. Callers
display `message` to the user; nothing is retried automatically.
"""

from __future__ import annotations

from decimal import Decimal


class PlatformError(Exception):
    """Base class for all typed failures raised by the core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InsufficientBalance(PlatformError):
    """Raised at placement time when the order total exceeds the wallet balance."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__("Insufficient wallet balance.")
        self.required = required
        self.available = available


class InsufficientFunds(PlatformError):
    """Raised when a debit or an order-increase edit is not covered by the balance."""

    def __init__(self, required: Decimal, available: Decimal, message: str | None = None) -> None:
        super().__init__(message or "Distributor has insufficient funds to cover the order increase.")
        self.required = required
        self.available = available


class DeliveryInsufficientFunds(PlatformError):
    """Raised at delivery time when the balance no longer covers the order total."""

    def __init__(self, order_id: str, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Cannot deliver order {order_id}: wallet balance {available} does not cover {required}."
        )
        self.order_id = order_id
        self.required = required
        self.available = available


class OrderNotEditable(PlatformError):
    def __init__(self, order_id: str) -> None:
        super().__init__("Only pending orders can be edited.")
        self.order_id = order_id


class DistributorNotFound(PlatformError):
    def __init__(self, distributor_id: str) -> None:
        super().__init__(f"Distributor not found: {distributor_id}")
        self.distributor_id = distributor_id


class OrderNotFound(PlatformError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class EntityNotFound(PlatformError):
    """Raised by admin updates/deletes that reference a missing product, scheme or price."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class PermissionDenied(PlatformError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Permission denied: {action}")
        self.action = action


class CannotDeleteSelf(PlatformError):
    def __init__(self, user_id: str) -> None:
        super().__init__("Cannot delete self.")
        self.user_id = user_id


__all__ = [
    "PlatformError",
    "InsufficientBalance",
    "InsufficientFunds",
    "DeliveryInsufficientFunds",
    "OrderNotEditable",
    "DistributorNotFound",
    "OrderNotFound",
    "EntityNotFound",
    "PermissionDenied",
    "CannotDeleteSelf",
]
