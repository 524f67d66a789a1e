"""
Domain: Catalog products.

A Product is leaf data referenced by special prices, schemes and order lines.
Changing a product's default price only affects future pricing resolutions;
line items already written keep the unit price they were resolved with.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class Product:
    product_id: str
    name: str
    default_unit_price: Decimal
    hsn_code: Optional[str] = None  # tax classification code printed on invoices

    def __post_init__(self) -> None:
        if not self.product_id:
            raise ValueError("product_id must be non-empty")
        if self.default_unit_price < 0:
            raise ValueError("default_unit_price must be >= 0")
