"""
Tests for `services/pricing_service.py` and `services/promotion_lookup.py`.

Covers:
- Subtotal additivity and zero-priced freebies.
- Special price resolution within the validity window, default price outside it.
- All-or-nothing scheme override (distributor schemes suppress global ones).
- Greedy largest-bundle-first allocation with no re-check of the same rule.
- No chaining: freebies never trigger further schemes.
- Freebies from different schemes aggregate by product.
- Skipped items (non-positive quantity, unknown product) and input-order independence.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from domain.catalog import Product
from domain.order import RequestedItem
from domain.promotions import DistributorScheme, GlobalScheme, SpecialPrice
from services.pricing_service import PricingEngine, award_freebies, price_items
from services.promotion_lookup import active_special_prices, applicable_schemes, group_by_trigger

AS_OF = date(2025, 6, 1)

PRODUCTS = {
    "SKU001": Product(product_id="SKU001", name="Normal 2L", default_unit_price=Decimal("100")),
    "SKU002": Product(product_id="SKU002", name="Normal 1L", default_unit_price=Decimal("50")),
    "SKU003": Product(product_id="SKU003", name="Premium 1L", default_unit_price=Decimal("25")),
}


def global_scheme(scheme_id: str, buy: str, buy_qty: int, get: str, get_qty: int, **window) -> GlobalScheme:
    return GlobalScheme(
        scheme_id=scheme_id,
        description=f"Buy {buy_qty} {buy} get {get_qty} {get}",
        buy_product_id=buy,
        buy_quantity=buy_qty,
        get_product_id=get,
        get_quantity=get_qty,
        start_date=window.get("start_date", date(2025, 1, 1)),
        end_date=window.get("end_date", date(2025, 12, 31)),
    )


def own_scheme(scheme_id: str, distributor_id: str, buy: str, buy_qty: int, get: str, get_qty: int, **window) -> DistributorScheme:
    return DistributorScheme(
        scheme_id=scheme_id,
        distributor_id=distributor_id,
        description=f"Buy {buy_qty} {buy} get {get_qty} {get}",
        buy_product_id=buy,
        buy_quantity=buy_qty,
        get_product_id=get,
        get_quantity=get_qty,
        start_date=window.get("start_date", date(2025, 1, 1)),
        end_date=window.get("end_date", date(2025, 12, 31)),
    )


def special_price(sp_id: str, product_id: str, price: str, start: date, end: date, distributor_id: str = "dist-1") -> SpecialPrice:
    return SpecialPrice(
        special_price_id=sp_id,
        distributor_id=distributor_id,
        product_id=product_id,
        price=Decimal(price),
        start_date=start,
        end_date=end,
    )


def freebies_of(quote) -> dict:
    return {item.product_id: item.quantity for item in quote.freebies}


def test_global_scheme_scenario_eighteen_units() -> None:
    """D orders 18 x SKU001 at 100 with a global buy-10-get-1: 1800 plus one free unit."""

    quote = price_items(
        [RequestedItem("SKU001", 18)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        special_prices=[],
        schemes=[global_scheme("g1", "SKU001", 10, "SKU001", 1)],
    )

    assert quote.subtotal == Decimal("1800")
    assert len(quote.paid_items) == 1
    paid = quote.paid_items[0]
    assert (paid.product_id, paid.quantity, paid.unit_price) == ("SKU001", 18, Decimal("100"))
    assert len(quote.freebies) == 1
    free = quote.freebies[0]
    assert (free.product_id, free.quantity, free.unit_price, free.is_freebie) == ("SKU001", 1, Decimal("0"), True)


def test_subtotal_is_sum_of_paid_lines_and_freebies_are_zero_priced() -> None:
    quote = price_items(
        [RequestedItem("SKU001", 12), RequestedItem("SKU002", 7), RequestedItem("SKU003", 3)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        special_prices=[special_price("sp-1", "SKU002", "45", date(2025, 5, 1), date(2025, 6, 30))],
        schemes=[global_scheme("g1", "SKU001", 5, "SKU003", 2)],
    )

    assert quote.subtotal == sum(item.quantity * item.unit_price for item in quote.paid_items)
    assert quote.subtotal == Decimal("12") * 100 + Decimal("7") * 45 + Decimal("3") * 25
    assert all(item.unit_price == 0 for item in quote.freebies)
    assert freebies_of(quote) == {"SKU003": 4}


def test_special_price_applies_only_inside_its_window() -> None:
    prices = [special_price("sp-1", "SKU001", "80", date(2025, 5, 1), date(2025, 5, 31))]
    items = [RequestedItem("SKU001", 2)]

    inside = price_items(items, "dist-1", date(2025, 5, 31), PRODUCTS, prices, [])
    outside = price_items(items, "dist-1", date(2025, 6, 1), PRODUCTS, prices, [])

    assert inside.paid_items[0].unit_price == Decimal("80")
    assert outside.paid_items[0].unit_price == Decimal("100")


def test_special_price_of_another_distributor_is_ignored() -> None:
    prices = [special_price("sp-1", "SKU001", "80", date(2025, 1, 1), date(2025, 12, 31), distributor_id="dist-2")]

    quote = price_items([RequestedItem("SKU001", 1)], "dist-1", AS_OF, PRODUCTS, prices, [])

    assert quote.subtotal == Decimal("100")


def test_overlapping_special_prices_pick_latest_start_deterministically() -> None:
    """Several active prices for one product: latest start_date wins, ties by id."""

    older = special_price("sp-b", "SKU001", "90", date(2025, 1, 1), date(2025, 12, 31))
    newer = special_price("sp-c", "SKU001", "85", date(2025, 5, 1), date(2025, 12, 31))
    tie = special_price("sp-a", "SKU001", "70", date(2025, 5, 1), date(2025, 12, 31))

    for ordering in ([older, newer, tie], [tie, older, newer], [newer, tie, older]):
        chosen = active_special_prices(ordering, "dist-1", AS_OF)
        assert chosen["SKU001"].special_price_id == "sp-a"


def test_distributor_schemes_suppress_global_schemes_entirely() -> None:
    """One own scheme on SKU002 means the global SKU001 scheme yields nothing."""

    schemes = [
        global_scheme("g1", "SKU001", 10, "SKU001", 1),
        own_scheme("d1", "dist-1", "SKU002", 5, "SKU003", 1),
    ]

    quote = price_items(
        [RequestedItem("SKU001", 30), RequestedItem("SKU002", 5)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        [],
        schemes,
    )

    assert freebies_of(quote) == {"SKU003": 1}


def test_global_schemes_apply_when_own_schemes_are_inactive() -> None:
    schemes = [
        global_scheme("g1", "SKU001", 10, "SKU001", 1),
        own_scheme("d1", "dist-1", "SKU002", 5, "SKU003", 1, start_date=date(2025, 1, 1), end_date=date(2025, 3, 31)),
    ]

    assert applicable_schemes(schemes, "dist-1", AS_OF) == [schemes[0]]


def test_other_distributors_schemes_do_not_suppress_globals() -> None:
    schemes = [
        global_scheme("g1", "SKU001", 10, "SKU001", 1),
        own_scheme("d2", "dist-2", "SKU002", 5, "SKU003", 1),
    ]

    assert applicable_schemes(schemes, "dist-1", AS_OF) == [schemes[0]]
    assert applicable_schemes(schemes, "dist-2", AS_OF) == [schemes[1]]


def test_greedy_tries_largest_bundle_first() -> None:
    """Buy 10 get 3 and buy 5 get 1, quantity 12: the 10-rule fires once, remainder 2 fires nothing."""

    schemes = [
        global_scheme("small", "SKU001", 5, "SKU002", 1),
        global_scheme("large", "SKU001", 10, "SKU002", 3),
    ]

    assert award_freebies({"SKU001": 12}, schemes) == {"SKU002": 3}


@pytest.mark.parametrize(
    "quantity, expected_free",
    [
        (4, {}),
        (5, {"SKU002": 1}),
        (10, {"SKU002": 3}),
        (15, {"SKU002": 4}),
        (24, {"SKU002": 6}),
        (25, {"SKU002": 7}),
    ],
)
def test_greedy_remainder_falls_through_to_smaller_bundles(quantity: int, expected_free: dict) -> None:
    schemes = [
        global_scheme("small", "SKU001", 5, "SKU002", 1),
        global_scheme("large", "SKU001", 10, "SKU002", 3),
    ]

    assert award_freebies({"SKU001": quantity}, schemes) == expected_free


def test_group_by_trigger_orders_ties_by_scheme_id() -> None:
    schemes = [
        global_scheme("b", "SKU001", 5, "SKU002", 1),
        global_scheme("a", "SKU001", 5, "SKU003", 1),
        global_scheme("c", "SKU001", 10, "SKU002", 3),
    ]

    assert [s.scheme_id for s in group_by_trigger(schemes)["SKU001"]] == ["c", "a", "b"]


def test_freebies_never_chain_into_other_schemes() -> None:
    """SKU001 awards SKU002; the awarded SKU002 never counts toward the SKU002 scheme."""

    schemes = [
        global_scheme("g1", "SKU001", 1, "SKU002", 5),
        global_scheme("g2", "SKU002", 5, "SKU003", 1),
    ]

    quote = price_items([RequestedItem("SKU001", 1)], "dist-1", AS_OF, PRODUCTS, [], schemes)

    assert freebies_of(quote) == {"SKU002": 5}


def test_self_rewarding_scheme_does_not_recount_its_freebies() -> None:
    quote = price_items(
        [RequestedItem("SKU001", 9)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        [],
        [global_scheme("g1", "SKU001", 10, "SKU001", 1)],
    )

    assert quote.freebies == []


def test_freebies_from_different_schemes_aggregate_by_product() -> None:
    schemes = [
        global_scheme("g1", "SKU001", 10, "SKU003", 1),
        global_scheme("g2", "SKU002", 4, "SKU003", 2),
    ]

    quote = price_items(
        [RequestedItem("SKU001", 20), RequestedItem("SKU002", 8)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        [],
        schemes,
    )

    assert len(quote.freebies) == 1
    assert freebies_of(quote) == {"SKU003": 6}


def test_non_positive_quantities_and_unknown_products_are_skipped() -> None:
    quote = price_items(
        [
            RequestedItem("SKU001", 0),
            RequestedItem("SKU002", -3),
            RequestedItem("NOPE", 10),
            RequestedItem("SKU003", 2),
        ],
        "dist-1",
        AS_OF,
        PRODUCTS,
        [],
        [global_scheme("g1", "NOPE", 1, "SKU001", 1)],
    )

    assert [(i.product_id, i.quantity) for i in quote.paid_items] == [("SKU003", 2)]
    assert quote.subtotal == Decimal("50")
    assert quote.freebies == []


def test_repeated_product_entries_are_merged_before_scheme_matching() -> None:
    quote = price_items(
        [RequestedItem("SKU001", 6), RequestedItem("SKU001", 4)],
        "dist-1",
        AS_OF,
        PRODUCTS,
        [],
        [global_scheme("g1", "SKU001", 10, "SKU001", 1)],
    )

    assert [(i.product_id, i.quantity) for i in quote.paid_items] == [("SKU001", 10)]
    assert freebies_of(quote) == {"SKU001": 1}


def test_result_does_not_depend_on_input_order() -> None:
    schemes = [global_scheme("g1", "SKU001", 10, "SKU003", 1), global_scheme("g2", "SKU002", 3, "SKU003", 1)]
    items = [RequestedItem("SKU001", 11), RequestedItem("SKU002", 3), RequestedItem("SKU003", 1)]

    forward = price_items(items, "dist-1", AS_OF, PRODUCTS, [], schemes)
    backward = price_items(list(reversed(items)), "dist-1", AS_OF, PRODUCTS, [], list(reversed(schemes)))

    assert forward.line_items == backward.line_items
    assert forward.subtotal == backward.subtotal


def test_empty_request_prices_to_zero() -> None:
    quote = price_items([], "dist-1", AS_OF, PRODUCTS, [], [])

    assert quote.line_items == []
    assert quote.subtotal == Decimal("0")


def test_pricing_engine_reads_from_repositories(repositories, products) -> None:
    """The engine uses the catalog, the distributor's special prices and all schemes."""

    repositories.special_prices.add_special_price(
        special_price("sp-1", "SKU002", "40", date(2025, 5, 1), date(2025, 6, 30))
    )
    repositories.schemes.add_scheme(global_scheme("g1", "SKU001", 10, "SKU001", 1))
    engine = PricingEngine(repositories.catalog, repositories.special_prices, repositories.schemes)

    quote = engine.resolve_order(
        [RequestedItem("SKU001", 18), RequestedItem("SKU002", 2)],
        "dist-1",
        AS_OF,
    )

    assert quote.subtotal == Decimal("1880")
    assert freebies_of(quote) == {"SKU001": 1}
    assert quote.as_of == AS_OF
