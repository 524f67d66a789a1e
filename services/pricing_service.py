"""
Pricing and promotion engine.

Given requested items, a distributor and a date, resolves:
- the unit price of each requested product (special price if active, else default)
- the free items awarded by buy-N-get-M schemes
- the order subtotal (freebies never contribute)

`price_items` is a pure function over loaded rows. `PricingEngine` fetches those
rows from the repositories and calls it; both the order preview and the order
lifecycle go through `PricingEngine.resolve_order`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping

from domain.catalog import Product
from domain.order import OrderLineItem, RequestedItem
from domain.promotions import Scheme, SpecialPrice
from repositories.protocols import CatalogRepository, SchemeRepository, SpecialPriceRepository
from services.promotion_lookup import active_special_prices, applicable_schemes, group_by_trigger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OrderQuote:
    """
    Result of pricing a set of requested items.

    Includes:
    - Paid line items (one per product, sorted by product id)
    - Freebie line items (one per free product, sorted by product id)
    - Subtotal over paid lines only
    """
    line_items: List[OrderLineItem]
    subtotal: Decimal
    distributor_id: str
    as_of: date
    currency: str = "INR"

    @property
    def paid_items(self) -> List[OrderLineItem]:
        return [item for item in self.line_items if not item.is_freebie]

    @property
    def freebies(self) -> List[OrderLineItem]:
        return [item for item in self.line_items if item.is_freebie]

    @property
    def total_items(self) -> int:
        """Total number of line items in this quote, freebies included."""
        return len(self.line_items)


def _purchased_quantities(
    items: Iterable[RequestedItem],
    products: Mapping[str, Product],
) -> Dict[str, int]:
    """Sum requested quantity per known product, dropping non-positive quantities."""

    quantities: Dict[str, int] = {}
    for item in items:
        if item.quantity <= 0:
            continue
        if item.product_id not in products:
            logger.debug("Skipping unknown product %s", item.product_id)
            continue
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def award_freebies(purchased: Mapping[str, int], schemes: Iterable[Scheme]) -> Dict[str, int]:
    """
    Greedy largest-bundle-first reduction, once per purchased product.

    For each product, schemes triggered by it are tried from the largest
    buy_quantity down. A scheme fires floor(remaining / buy_quantity) times and
    the remainder moves on to the next smaller scheme. Free quantities are
    summed per get_product_id. Freebies are never fed back in as purchases.
    """

    groups = group_by_trigger(schemes)
    free: Dict[str, int] = {}

    for product_id in sorted(purchased):
        group = groups.get(product_id)
        if not group:
            continue
        remaining = purchased[product_id]
        for scheme in group:
            if scheme.buy_quantity > remaining:
                continue
            times_applied = remaining // scheme.buy_quantity
            free[scheme.get_product_id] = (
                free.get(scheme.get_product_id, 0) + times_applied * scheme.get_quantity
            )
            remaining %= scheme.buy_quantity
            if remaining == 0:
                break

    return free


def price_items(
    items: Iterable[RequestedItem],
    distributor_id: str,
    as_of: date,
    products: Mapping[str, Product],
    special_prices: Iterable[SpecialPrice],
    schemes: Iterable[Scheme],
) -> OrderQuote:
    """
    Price requested items for one distributor on one date.

    Items with quantity <= 0 and items naming an unknown product are skipped
    rather than failing the whole resolution. Repeated entries for the same
    product are merged into one line. The result does not depend on the order
    of `items`.
    """

    purchased = _purchased_quantities(items, products)
    prices = active_special_prices(special_prices, distributor_id, as_of)

    line_items: List[OrderLineItem] = []
    subtotal = Decimal("0")

    for product_id in sorted(purchased):
        quantity = purchased[product_id]
        special = prices.get(product_id)
        unit_price = special.price if special is not None else products[product_id].default_unit_price
        subtotal += quantity * unit_price
        line_items.append(OrderLineItem(product_id=product_id, quantity=quantity, unit_price=unit_price))

    free = award_freebies(purchased, applicable_schemes(schemes, distributor_id, as_of))
    for product_id in sorted(free):
        line_items.append(
            OrderLineItem(
                product_id=product_id,
                quantity=free[product_id],
                unit_price=Decimal("0"),
                is_freebie=True,
            )
        )

    return OrderQuote(
        line_items=line_items,
        subtotal=subtotal,
        distributor_id=distributor_id,
        as_of=as_of,
    )


class PricingEngine:
    """Loads catalog, special prices and schemes, then prices with `price_items`."""

    def __init__(
        self,
        catalog: CatalogRepository,
        special_prices: SpecialPriceRepository,
        schemes: SchemeRepository,
    ) -> None:
        self._catalog = catalog
        self._special_prices = special_prices
        self._schemes = schemes

    def resolve_order(
        self,
        items: Iterable[RequestedItem],
        distributor_id: str,
        as_of: date,
    ) -> OrderQuote:
        """
        Calculate priced line items, freebies and subtotal.

        Example:
            quote = engine.resolve_order([RequestedItem("SKU001", 18)], "dist-1", date(2025, 6, 1))
            # With a global "buy 10 SKU001 get 1 SKU001" scheme active and default price 100:
            # quote.subtotal == Decimal("1800"), one freebie line of 1 x SKU001
        """
        products = {p.product_id: p for p in self._catalog.list_products()}
        quote = price_items(
            list(items),
            distributor_id,
            as_of,
            products,
            self._special_prices.list_for_distributor(distributor_id),
            self._schemes.list_schemes(),
        )
        logger.debug(
            "Priced %d line(s) for distributor=%s on %s: subtotal=%s",
            quote.total_items,
            distributor_id,
            as_of.isoformat(),
            quote.subtotal,
        )
        return quote


__all__ = [
    "OrderQuote",
    "award_freebies",
    "price_items",
    "PricingEngine",
]
