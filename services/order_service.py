"""
Order lifecycle service.

Handles:
- Placement: price, check affordability, persist a PENDING order (no money moves)
- Editing a PENDING order: re-price at the edit date, check the increase only
- Delivery: PENDING -> DELIVERED together with the single ORDER_DEBIT

Every operation is all-or-nothing and runs while holding the distributor's
lock, from the balance/status read through the write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, List, Optional
from uuid import uuid4

from domain.distributor import Distributor
from domain.errors import (
    DeliveryInsufficientFunds,
    DistributorNotFound,
    InsufficientBalance,
    InsufficientFunds,
    OrderNotEditable,
    OrderNotFound,
)
from domain.notification import NotificationType
from domain.order import EnrichedOrderItem, Order, OrderStatus, RequestedItem
from domain.time import utc_now
from repositories.protocols import CatalogRepository, DistributorRepository, OrderRepository
from services.notification_service import NotificationService
from services.pricing_service import OrderQuote, PricingEngine
from services.wallet_service import WalletLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InvoiceData:
    """Everything an external renderer needs to print an invoice."""
    order: Order
    distributor: Distributor
    items: List[EnrichedOrderItem]


def _format_amount(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"


class OrderService:
    def __init__(
        self,
        pricing: PricingEngine,
        ledger: WalletLedger,
        orders: OrderRepository,
        distributors: DistributorRepository,
        catalog: CatalogRepository,
        notifications: NotificationService,
        wallet_low_threshold: Decimal = Decimal("10000"),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._pricing = pricing
        self._ledger = ledger
        self._orders = orders
        self._distributors = distributors
        self._catalog = catalog
        self._notifications = notifications
        self._wallet_low_threshold = wallet_low_threshold
        self._clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require_distributor(self, distributor_id: str) -> Distributor:
        distributor = self._distributors.get_distributor(distributor_id)
        if distributor is None:
            raise DistributorNotFound(distributor_id)
        return distributor

    def get_order(self, order_id: str) -> Order:
        order = self._orders.get_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def list_orders(self, distributor_id: Optional[str] = None) -> List[Order]:
        """Orders newest first, optionally for one distributor."""
        if distributor_id is None:
            orders = self._orders.list_orders()
        else:
            self._require_distributor(distributor_id)
            orders = self._orders.list_orders_by_distributor(distributor_id)
        return sorted(orders, key=lambda o: o.date, reverse=True)

    def get_order_items(self, order_id: str) -> List[EnrichedOrderItem]:
        """Line items joined with product name and HSN code."""
        self.get_order(order_id)
        products = {p.product_id: p for p in self._catalog.list_products()}
        enriched: List[EnrichedOrderItem] = []
        for item in self._orders.get_order_items(order_id):
            product = products.get(item.product_id)
            enriched.append(
                EnrichedOrderItem(
                    item=item,
                    product_name=product.name if product else "Unknown product",
                    hsn_code=(product.hsn_code if product and product.hsn_code else "N/A"),
                )
            )
        return enriched

    def get_invoice_data(self, order_id: str) -> InvoiceData:
        order = self.get_order(order_id)
        distributor = self._require_distributor(order.distributor_id)
        return InvoiceData(order=order, distributor=distributor, items=self.get_order_items(order_id))

    # ------------------------------------------------------------------
    # Pricing preview
    # ------------------------------------------------------------------

    def preview(self, distributor_id: str, items: Iterable[RequestedItem]) -> OrderQuote:
        """Price items as of today without persisting anything."""
        self._require_distributor(distributor_id)
        return self._pricing.resolve_order(items, distributor_id, self._clock().date())

    @staticmethod
    def _require_payable(quote: OrderQuote) -> None:
        """
        Reject orders whose every item was skipped during pricing.

        The legacy dashboard stored such orders with a zero total. Here an
        empty order is a ValueError before any balance check; placement and
        edits otherwise fail only on funds.
        """
        if not quote.paid_items:
            raise ValueError("Order must contain at least one item with a positive quantity")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def place_order(self, distributor_id: str, items: Iterable[RequestedItem], actor: str) -> Order:
        """
        Place a PENDING order.

        The wallet is only checked, never debited; money moves at delivery.

        Raises:
            DistributorNotFound: unknown distributor
            ValueError: nothing payable remains after pricing
            InsufficientBalance: order total exceeds the wallet balance
        """
        items = list(items)
        with self._ledger.locks.hold(distributor_id):
            distributor = self._require_distributor(distributor_id)
            now = self._clock()
            quote = self._pricing.resolve_order(items, distributor_id, now.date())
            self._require_payable(quote)

            if quote.subtotal > distributor.wallet_balance:
                logger.warning(
                    "Order rejected for distributor=%s: total %s exceeds balance %s",
                    distributor_id,
                    quote.subtotal,
                    distributor.wallet_balance,
                )
                self._notifications.notify(
                    NotificationType.ORDER_FAILED,
                    f"Order failed for {distributor.name} due to insufficient funds.",
                    distributor_id,
                )
                raise InsufficientBalance(required=quote.subtotal, available=distributor.wallet_balance)

            order = Order(
                order_id=f"ord-{uuid4()}",
                distributor_id=distributor_id,
                total_amount=quote.subtotal,
                date=now,
                placed_by=actor,
                status=OrderStatus.PENDING,
            )
            self._orders.create_order(order, quote.line_items)

        logger.info(
            "Placed order=%s for distributor=%s total=%s (%d line(s), %d freebie line(s))",
            order.order_id,
            distributor_id,
            order.total_amount,
            len(quote.paid_items),
            len(quote.freebies),
        )
        self._notifications.notify(
            NotificationType.ORDER_PLACED,
            f"Order #{order.order_id} for {_format_amount(order.total_amount)} placed for {distributor.name}.",
            distributor_id,
        )
        return order

    def update_order_items(self, order_id: str, items: Iterable[RequestedItem], actor: str) -> Order:
        """
        Replace a PENDING order's items, re-pricing as of today.

        Only an increase in total is checked against the wallet. No ledger
        transaction is written.

        Raises:
            OrderNotFound: unknown order
            OrderNotEditable: the order is not PENDING
            ValueError: nothing payable remains after pricing
            InsufficientFunds: the increase exceeds the wallet balance
        """
        items = list(items)
        distributor_id = self.get_order(order_id).distributor_id

        with self._ledger.locks.hold(distributor_id):
            order = self.get_order(order_id)
            if not order.is_pending:
                raise OrderNotEditable(order_id)
            distributor = self._require_distributor(distributor_id)

            quote = self._pricing.resolve_order(items, distributor_id, self._clock().date())
            self._require_payable(quote)

            delta = quote.subtotal - order.total_amount
            if delta > 0 and delta > distributor.wallet_balance:
                logger.warning(
                    "Edit rejected for order=%s: increase %s exceeds balance %s",
                    order_id,
                    delta,
                    distributor.wallet_balance,
                )
                raise InsufficientFunds(required=delta, available=distributor.wallet_balance)

            updated = self._orders.replace_order_items(order.with_total(quote.subtotal), quote.line_items)

        logger.info(
            "Updated order=%s by %s: total %s -> %s",
            order_id,
            actor,
            order.total_amount,
            updated.total_amount,
        )
        return updated

    def update_order_status(self, order_id: str, status: OrderStatus, actor: str) -> Order:
        """
        Move an order to DELIVERED and debit its total.

        Delivering an already-delivered order is a no-op that returns it unchanged.

        Raises:
            ValueError: target status is not DELIVERED
            OrderNotFound: unknown order
            DeliveryInsufficientFunds: the balance no longer covers the total
        """
        if status != OrderStatus.DELIVERED:
            raise ValueError(f"Unsupported status transition to {status.value}")

        distributor_id = self.get_order(order_id).distributor_id

        with self._ledger.locks.hold(distributor_id):
            order = self.get_order(order_id)
            if not order.is_pending:
                logger.debug("Order=%s already delivered; nothing to do", order_id)
                return order

            distributor = self._require_distributor(distributor_id)
            if order.total_amount > distributor.wallet_balance:
                logger.warning(
                    "Delivery rejected for order=%s: total %s exceeds balance %s",
                    order_id,
                    order.total_amount,
                    distributor.wallet_balance,
                )
                raise DeliveryInsufficientFunds(
                    order_id=order_id,
                    required=order.total_amount,
                    available=distributor.wallet_balance,
                )

            delivered, _ = self._ledger.debit_for_delivery(order, actor)
            balance_after = self._ledger.get_balance(distributor_id)

        logger.info(
            "Delivered order=%s (actor=%s); debited %s, balance now %s",
            order_id,
            actor,
            delivered.total_amount,
            balance_after,
        )
        if balance_after < self._wallet_low_threshold:
            self._notifications.notify(
                NotificationType.WALLET_LOW,
                f"{distributor.name}'s wallet is low: {_format_amount(balance_after)}",
                distributor_id,
            )
        return delivered


__all__ = ["InvoiceData", "OrderService"]
