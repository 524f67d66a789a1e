"""
Domain: Special prices and promotional schemes.

Contract excerpts implemented here:
- A SpecialPrice overrides a product's default price for one distributor while
  start_date <= as_of <= end_date (inclusive calendar dates).
- A Scheme is a buy-N-get-M rule. It is either global or bound to exactly one
  distributor; the two shapes are separate types so a scheme can never be both.
- Scheme applicability is all-or-nothing: if a distributor has at least one
  active distributor-specific scheme, global schemes are suppressed entirely.

Pure domain entities: no I/O, all dates passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union

from .time import in_window, require_date_window


@dataclass(frozen=True, slots=True)
class SpecialPrice:
    special_price_id: str
    distributor_id: str
    product_id: str
    price: Decimal
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        require_date_window(self.start_date, self.end_date)
        if self.price < 0:
            raise ValueError("price must be >= 0")

    def is_active_on(self, as_of: date) -> bool:
        return in_window(self.start_date, self.end_date, as_of)


@dataclass(frozen=True, slots=True)
class SchemeRule:
    """
    Fields shared by every scheme shape.

    Buying `buy_quantity` units of `buy_product_id` awards `get_quantity`
    free units of `get_product_id`.
    """

    scheme_id: str
    description: str
    buy_product_id: str
    buy_quantity: int
    get_product_id: str
    get_quantity: int
    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        require_date_window(self.start_date, self.end_date)
        if self.buy_quantity < 1:
            raise ValueError("buy_quantity must be >= 1")
        if self.get_quantity < 1:
            raise ValueError("get_quantity must be >= 1")

    def is_active_on(self, as_of: date) -> bool:
        return in_window(self.start_date, self.end_date, as_of)

    @property
    def is_global(self) -> bool:
        return isinstance(self, GlobalScheme)


@dataclass(frozen=True, slots=True)
class GlobalScheme(SchemeRule):
    """Scheme offered to every distributor without schemes of their own."""


@dataclass(frozen=True, slots=True)
class DistributorScheme(SchemeRule):
    """Scheme offered to a single distributor."""

    distributor_id: str

    def __post_init__(self) -> None:
        SchemeRule.__post_init__(self)
        if not self.distributor_id:
            raise ValueError("distributor_id is required for a distributor scheme")


Scheme = Union[GlobalScheme, DistributorScheme]


__all__ = [
    "SpecialPrice",
    "SchemeRule",
    "GlobalScheme",
    "DistributorScheme",
    "Scheme",
]
