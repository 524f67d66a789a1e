"""
Catalog, scheme and special price administration.

Product and scheme mutations are restricted to super admins. Special prices
are assigned by any signed-in user, as in the distributor screens. Validity
windows are checked (start_date <= end_date) before anything is stored.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from domain.catalog import Product
from domain.errors import DistributorNotFound, EntityNotFound
from domain.notification import NotificationType
from domain.promotions import DistributorScheme, GlobalScheme, Scheme, SpecialPrice
from domain.time import require_date_window
from domain.user import Actor, require_admin
from repositories.protocols import (
    CatalogRepository,
    DistributorRepository,
    SchemeRepository,
    SpecialPriceRepository,
)
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def list_products(self) -> List[Product]:
        return sorted(self._catalog.list_products(), key=lambda p: p.product_id)

    def add_product(
        self,
        actor: Actor,
        name: str,
        default_unit_price: Decimal,
        hsn_code: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> Product:
        require_admin(actor, "add product")
        product = Product(
            product_id=product_id or f"sku-{uuid4()}",
            name=name,
            default_unit_price=default_unit_price,
            hsn_code=hsn_code,
        )
        self._catalog.add_product(product)
        logger.info("Added product=%s (%s) at %s", product.product_id, product.name, product.default_unit_price)
        return product

    def update_product(self, actor: Actor, product: Product) -> Product:
        """Existing order lines keep their resolved prices; only future pricing changes."""
        require_admin(actor, "update product")
        if self._catalog.get_product(product.product_id) is None:
            raise EntityNotFound("Product", product.product_id)
        self._catalog.update_product(product)
        logger.info("Updated product=%s", product.product_id)
        return product


class PromotionService:
    def __init__(
        self,
        schemes: SchemeRepository,
        special_prices: SpecialPriceRepository,
        catalog: CatalogRepository,
        distributors: DistributorRepository,
        notifications: NotificationService,
    ) -> None:
        self._schemes = schemes
        self._special_prices = special_prices
        self._catalog = catalog
        self._distributors = distributors
        self._notifications = notifications

    def _require_product(self, product_id: str) -> None:
        if self._catalog.get_product(product_id) is None:
            raise EntityNotFound("Product", product_id)

    def _require_distributor(self, distributor_id: str) -> None:
        if self._distributors.get_distributor(distributor_id) is None:
            raise DistributorNotFound(distributor_id)

    # ------------------------------------------------------------------
    # Schemes
    # ------------------------------------------------------------------

    def list_schemes(self) -> List[Scheme]:
        return sorted(self._schemes.list_schemes(), key=lambda s: s.scheme_id)

    def list_global_schemes(self) -> List[Scheme]:
        return [s for s in self.list_schemes() if isinstance(s, GlobalScheme)]

    def list_distributor_schemes(self, distributor_id: str) -> List[Scheme]:
        return [
            s for s in self.list_schemes()
            if isinstance(s, DistributorScheme) and s.distributor_id == distributor_id
        ]

    def add_scheme(
        self,
        actor: Actor,
        description: str,
        buy_product_id: str,
        buy_quantity: int,
        get_product_id: str,
        get_quantity: int,
        start_date: date,
        end_date: date,
        distributor_id: Optional[str] = None,
    ) -> Scheme:
        """
        Create a scheme. Without a distributor_id the scheme is global.

        A new global scheme is announced with a NEW_SCHEME notification.
        """
        require_admin(actor, "add scheme")
        require_date_window(start_date, end_date)
        self._require_product(buy_product_id)
        self._require_product(get_product_id)

        common = dict(
            scheme_id=f"scheme-{uuid4()}",
            description=description,
            buy_product_id=buy_product_id,
            buy_quantity=buy_quantity,
            get_product_id=get_product_id,
            get_quantity=get_quantity,
            start_date=start_date,
            end_date=end_date,
        )
        scheme: Scheme
        if distributor_id is None:
            scheme = GlobalScheme(**common)
        else:
            self._require_distributor(distributor_id)
            scheme = DistributorScheme(distributor_id=distributor_id, **common)

        self._schemes.add_scheme(scheme)
        logger.info("Added %s scheme=%s: %s", "global" if scheme.is_global else "distributor", scheme.scheme_id, description)

        if scheme.is_global:
            self._notifications.notify(
                NotificationType.NEW_SCHEME,
                f"New global scheme added: {description}",
            )
        return scheme

    def update_scheme(self, actor: Actor, scheme: Scheme) -> Scheme:
        require_admin(actor, "update scheme")
        if self._schemes.get_scheme(scheme.scheme_id) is None:
            raise EntityNotFound("Scheme", scheme.scheme_id)
        self._require_product(scheme.buy_product_id)
        self._require_product(scheme.get_product_id)
        self._schemes.update_scheme(scheme)
        logger.info("Updated scheme=%s", scheme.scheme_id)
        return scheme

    def delete_scheme(self, actor: Actor, scheme_id: str) -> None:
        require_admin(actor, "delete scheme")
        self._schemes.delete_scheme(scheme_id)
        logger.info("Deleted scheme=%s", scheme_id)

    # ------------------------------------------------------------------
    # Special prices
    # ------------------------------------------------------------------

    def list_special_prices(self, distributor_id: Optional[str] = None) -> List[SpecialPrice]:
        if distributor_id is None:
            prices = self._special_prices.list_special_prices()
        else:
            prices = self._special_prices.list_for_distributor(distributor_id)
        return sorted(prices, key=lambda p: (p.distributor_id, p.product_id, p.start_date))

    def add_special_price(
        self,
        actor: Actor,
        distributor_id: str,
        product_id: str,
        price: Decimal,
        start_date: date,
        end_date: date,
    ) -> SpecialPrice:
        require_date_window(start_date, end_date)
        self._require_distributor(distributor_id)
        self._require_product(product_id)
        special_price = SpecialPrice(
            special_price_id=f"sp-{uuid4()}",
            distributor_id=distributor_id,
            product_id=product_id,
            price=price,
            start_date=start_date,
            end_date=end_date,
        )
        self._special_prices.add_special_price(special_price)
        logger.info(
            "Added special price=%s for distributor=%s product=%s at %s (by %s)",
            special_price.special_price_id,
            distributor_id,
            product_id,
            price,
            actor.username,
        )
        return special_price

    def update_special_price(
        self,
        actor: Actor,
        special_price_id: str,
        price: Optional[Decimal] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> SpecialPrice:
        existing = self._special_prices.get_special_price(special_price_id)
        if existing is None:
            raise EntityNotFound("Special price", special_price_id)
        updated = replace(
            existing,
            price=existing.price if price is None else price,
            start_date=existing.start_date if start_date is None else start_date,
            end_date=existing.end_date if end_date is None else end_date,
        )
        self._special_prices.update_special_price(updated)
        logger.info("Updated special price=%s (by %s)", special_price_id, actor.username)
        return updated

    def delete_special_price(self, actor: Actor, special_price_id: str) -> None:
        self._special_prices.delete_special_price(special_price_id)
        logger.info("Deleted special price=%s (by %s)", special_price_id, actor.username)


__all__ = ["CatalogService", "PromotionService"]
