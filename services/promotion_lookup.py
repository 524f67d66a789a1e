"""
Special price and scheme lookups for a distributor at a date.

Pure functions over already-loaded rows; the pricing engine calls them after
fetching from the repositories.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List

from domain.promotions import DistributorScheme, GlobalScheme, Scheme, SpecialPrice

logger = logging.getLogger(__name__)


def active_special_prices(
    special_prices: Iterable[SpecialPrice],
    distributor_id: str,
    as_of: date,
) -> Dict[str, SpecialPrice]:
    """
    Map product_id -> the single special price that applies on `as_of`.

    Storage does not enforce one active price per (distributor, product). When
    several are active, the one with the latest start_date wins, ties broken by
    the smallest special_price_id, and a warning is logged.
    """

    candidates: Dict[str, List[SpecialPrice]] = {}
    for price in special_prices:
        if price.distributor_id == distributor_id and price.is_active_on(as_of):
            candidates.setdefault(price.product_id, []).append(price)

    chosen: Dict[str, SpecialPrice] = {}
    for product_id, prices in candidates.items():
        prices.sort(key=lambda p: p.special_price_id)
        prices.sort(key=lambda p: p.start_date, reverse=True)
        if len(prices) > 1:
            logger.warning(
                "Multiple active special prices for distributor=%s product=%s on %s: %s; using %s",
                distributor_id,
                product_id,
                as_of.isoformat(),
                [p.special_price_id for p in prices],
                prices[0].special_price_id,
            )
        chosen[product_id] = prices[0]
    return chosen


def applicable_schemes(schemes: Iterable[Scheme], distributor_id: str, as_of: date) -> List[Scheme]:
    """
    Resolve the scheme set for a distributor on `as_of`.

    All-or-nothing override: if the distributor has at least one active scheme
    of its own, only those apply. Otherwise every active global scheme applies.
    """

    own: List[Scheme] = []
    global_schemes: List[Scheme] = []
    for scheme in schemes:
        if not scheme.is_active_on(as_of):
            continue
        if isinstance(scheme, DistributorScheme):
            if scheme.distributor_id == distributor_id:
                own.append(scheme)
        elif isinstance(scheme, GlobalScheme):
            global_schemes.append(scheme)

    return own if own else global_schemes


def group_by_trigger(schemes: Iterable[Scheme]) -> Dict[str, List[Scheme]]:
    """
    Group schemes by buy_product_id, each group sorted largest bundle first.

    Ties on buy_quantity are ordered by scheme_id so the result never depends
    on storage order.
    """

    groups: Dict[str, List[Scheme]] = {}
    for scheme in schemes:
        groups.setdefault(scheme.buy_product_id, []).append(scheme)
    for group in groups.values():
        group.sort(key=lambda s: (-s.buy_quantity, s.scheme_id))
    return groups


__all__ = [
    "active_special_prices",
    "applicable_schemes",
    "group_by_trigger",
]
