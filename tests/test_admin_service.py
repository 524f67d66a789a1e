"""
Tests for catalog, promotion, onboarding and notification services.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from domain.catalog import Product
from domain.errors import DistributorNotFound, EntityNotFound, PermissionDenied
from domain.notification import NotificationType
from domain.order import RequestedItem
from domain.promotions import DistributorScheme, GlobalScheme
from services.distributor_service import OnboardingRequest


JUNE = (date(2025, 6, 1), date(2025, 6, 30))


def test_only_super_admin_manages_products(platform, admin, executive) -> None:
    with pytest.raises(PermissionDenied):
        platform.catalog.add_product(executive, "Normal 500ml", Decimal("10"))

    product = platform.catalog.add_product(admin, "Normal 500ml", Decimal("10"), hsn_code="2201", product_id="SKU010")

    assert platform.catalog.list_products() == [product]
    with pytest.raises(PermissionDenied):
        platform.catalog.update_product(executive, replace(product, default_unit_price=Decimal("12")))


def test_product_price_change_does_not_touch_existing_orders(platform, admin, products, distributor) -> None:
    platform.ledger.recharge(distributor.distributor_id, Decimal("1000"), "admin")
    order = platform.orders.place_order(distributor.distributor_id, [RequestedItem("SKU002", 4)], "exec")

    platform.catalog.update_product(admin, replace(products[1], default_unit_price=Decimal("75")))

    assert platform.orders.get_order(order.order_id).total_amount == Decimal("200")
    assert platform.orders.get_order_items(order.order_id)[0].item.unit_price == Decimal("50")


def test_update_unknown_product(platform, admin) -> None:
    with pytest.raises(EntityNotFound):
        platform.catalog.update_product(admin, Product("SKU404", "Ghost", Decimal("1")))


def test_global_scheme_announces_itself(platform, admin, products) -> None:
    scheme = platform.promotions.add_scheme(admin, "Buy 10 get 1", "SKU001", 10, "SKU001", 1, *JUNE)

    assert isinstance(scheme, GlobalScheme)
    assert platform.promotions.list_global_schemes() == [scheme]
    notifications = platform.notifications.list_notifications()
    assert [(n.notification_type, n.message) for n in notifications] == [
        (NotificationType.NEW_SCHEME, "New global scheme added: Buy 10 get 1"),
    ]


def test_distributor_scheme_is_silent(platform, admin, products, distributor) -> None:
    scheme = platform.promotions.add_scheme(
        admin, "Buy 5 get 1", "SKU002", 5, "SKU003", 1, *JUNE, distributor_id=distributor.distributor_id
    )

    assert isinstance(scheme, DistributorScheme)
    assert platform.promotions.list_distributor_schemes(distributor.distributor_id) == [scheme]
    assert platform.promotions.list_global_schemes() == []
    assert platform.notifications.list_notifications() == []


def test_scheme_validation(platform, admin, executive, products) -> None:
    with pytest.raises(PermissionDenied):
        platform.promotions.add_scheme(executive, "x", "SKU001", 10, "SKU001", 1, *JUNE)
    with pytest.raises(ValueError):
        platform.promotions.add_scheme(admin, "x", "SKU001", 10, "SKU001", 1, date(2025, 7, 1), date(2025, 6, 1))
    with pytest.raises(ValueError):
        platform.promotions.add_scheme(admin, "x", "SKU001", 0, "SKU001", 1, *JUNE)
    with pytest.raises(EntityNotFound):
        platform.promotions.add_scheme(admin, "x", "SKU404", 10, "SKU001", 1, *JUNE)
    with pytest.raises(DistributorNotFound):
        platform.promotions.add_scheme(admin, "x", "SKU001", 10, "SKU001", 1, *JUNE, distributor_id="missing")

    assert platform.promotions.list_schemes() == []


def test_update_and_delete_scheme(platform, admin, executive, products) -> None:
    scheme = platform.promotions.add_scheme(admin, "Buy 10 get 1", "SKU001", 10, "SKU001", 1, *JUNE)
    bigger = replace(scheme, get_quantity=2)

    with pytest.raises(PermissionDenied):
        platform.promotions.update_scheme(executive, bigger)
    platform.promotions.update_scheme(admin, bigger)
    assert platform.promotions.list_schemes()[0].get_quantity == 2

    with pytest.raises(PermissionDenied):
        platform.promotions.delete_scheme(executive, scheme.scheme_id)
    platform.promotions.delete_scheme(admin, scheme.scheme_id)
    assert platform.promotions.list_schemes() == []


def test_special_price_lifecycle(platform, executive, products, distributor, other_distributor) -> None:
    special = platform.promotions.add_special_price(
        executive, distributor.distributor_id, "SKU001", Decimal("90"), *JUNE
    )
    platform.promotions.add_special_price(
        executive, other_distributor.distributor_id, "SKU001", Decimal("70"), *JUNE
    )

    assert platform.promotions.list_special_prices(distributor.distributor_id) == [special]
    assert len(platform.promotions.list_special_prices()) == 2

    quote = platform.orders.preview(distributor.distributor_id, [RequestedItem("SKU001", 2)])
    assert quote.subtotal == Decimal("180")

    updated = platform.promotions.update_special_price(executive, special.special_price_id, price=Decimal("85"))
    assert updated.price == Decimal("85")
    assert updated.start_date == special.start_date

    platform.promotions.delete_special_price(executive, special.special_price_id)
    quote = platform.orders.preview(distributor.distributor_id, [RequestedItem("SKU001", 2)])
    assert quote.subtotal == Decimal("200")


def test_special_price_validation(platform, executive, products, distributor) -> None:
    with pytest.raises(ValueError):
        platform.promotions.add_special_price(
            executive, distributor.distributor_id, "SKU001", Decimal("90"), date(2025, 6, 2), date(2025, 6, 1)
        )
    with pytest.raises(EntityNotFound):
        platform.promotions.add_special_price(executive, distributor.distributor_id, "SKU404", Decimal("90"), *JUNE)
    with pytest.raises(EntityNotFound):
        platform.promotions.update_special_price(executive, "sp-missing", price=Decimal("1"))


def test_onboarding_creates_empty_wallet_and_notifies(platform, executive) -> None:
    request = OnboardingRequest(name="  Metro Distributors  ", phone="900", state="Karnataka", area="Bengaluru")

    created = platform.distributors.onboard_distributor(request, executive)

    assert created.name == "Metro Distributors"
    assert created.wallet_balance == Decimal("0")
    assert created.added_by == "exec"
    assert platform.distributors.get_distributor(created.distributor_id) == created
    notifications = platform.notifications.list_notifications()
    assert notifications[0].notification_type == NotificationType.DISTRIBUTOR_ADDED
    assert notifications[0].message == "New distributor added: Metro Distributors"


def test_onboarding_requires_a_name(platform, executive) -> None:
    with pytest.raises(ValueError):
        platform.distributors.onboard_distributor(OnboardingRequest("   ", "900", "KA", "BLR"), executive)


def test_distributors_listed_by_name(platform, distributor, other_distributor) -> None:
    names = [d.name for d in platform.distributors.list_distributors()]

    assert names == ["Reliable Traders, Pune", "Sunrise Supplies, Surat"]


def test_notifications_newest_first_and_read_state(platform, clock) -> None:
    first = platform.notifications.notify(NotificationType.NEW_SCHEME, "first")
    clock.advance(minutes=1)
    second = platform.notifications.notify(NotificationType.NEW_SCHEME, "second")

    assert [n.message for n in platform.notifications.list_notifications()] == ["second", "first"]
    assert platform.notifications.unread_count() == 2

    platform.notifications.mark_read(first.notification_id)
    assert platform.notifications.unread_count() == 1

    platform.notifications.mark_all_read()
    assert platform.notifications.unread_count() == 0
    assert second.is_read is False
