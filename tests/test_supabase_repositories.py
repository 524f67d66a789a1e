"""
Supabase repository tests against a stubbed client.

These exercise row conversion and the rpc payloads without a database; the
query builder is replaced by a stub that records the calls made on it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, List
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from domain.order import Order, OrderLineItem, OrderStatus
from domain.promotions import DistributorScheme, GlobalScheme
from domain.user import User, UserRole
from domain.wallet import TransactionType, WalletTransaction
from repositories.supabase_repositories import (
    SupabaseOrderRepository,
    SupabaseSchemeRepository,
    SupabaseUserRepository,
    SupabaseWalletRepository,
    build_supabase_repositories,
)


NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


class StubQuery:
    """Chainable stand-in for a postgrest request builder."""

    def __init__(self, data: Any = None, error: Any = None) -> None:
        self.calls: List[tuple] = []
        self._response = SimpleNamespace(data=data, error=error)

    def __getattr__(self, name: str):
        def method(*args, **kwargs):
            self.calls.append((name, args))
            return self

        return method

    def execute(self):
        return self._response


def client_returning(query: StubQuery) -> MagicMock:
    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client


def scheme_row(**overrides) -> dict:
    row = {
        "scheme_id": "s1",
        "description": "Buy 10 get 1",
        "buy_product_id": "SKU001",
        "buy_quantity": 10,
        "get_product_id": "SKU001",
        "get_quantity": 1,
        "is_global": True,
        "distributor_id": None,
        "start_date": "2025-01-01",
        "end_date": "2025-12-31",
    }
    row.update(overrides)
    return row


def test_scheme_rows_become_tagged_variants() -> None:
    query = StubQuery(data=[scheme_row(), scheme_row(scheme_id="s2", is_global=False, distributor_id="dist-1")])
    repo = SupabaseSchemeRepository(client_returning(query))

    global_scheme, own_scheme = repo.list_schemes()

    assert isinstance(global_scheme, GlobalScheme)
    assert global_scheme.start_date == date(2025, 1, 1)
    assert isinstance(own_scheme, DistributorScheme)
    assert own_scheme.distributor_id == "dist-1"


@pytest.mark.parametrize(
    "overrides",
    [
        {"is_global": True, "distributor_id": "dist-1"},
        {"is_global": False, "distributor_id": None},
    ],
)
def test_inconsistent_scheme_rows_are_rejected(overrides) -> None:
    repo = SupabaseSchemeRepository(client_returning(StubQuery(data=[scheme_row(**overrides)])))

    with pytest.raises(ValueError):
        repo.list_schemes()


def test_scheme_insert_row_shape() -> None:
    query = StubQuery(data=[])
    client = client_returning(query)
    scheme = DistributorScheme(
        scheme_id="s3",
        description="Buy 5 get 1",
        buy_product_id="SKU002",
        buy_quantity=5,
        get_product_id="SKU003",
        get_quantity=1,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 30),
        distributor_id="dist-1",
    )

    SupabaseSchemeRepository(client).add_scheme(scheme)

    client.table.assert_called_with("schemes")
    name, args = query.calls[0]
    assert name == "insert"
    assert args[0]["is_global"] is False
    assert args[0]["distributor_id"] == "dist-1"
    assert args[0]["end_date"] == "2025-06-30"


def test_create_order_sends_items_in_one_rpc() -> None:
    query = StubQuery(data=[])
    client = client_returning(query)
    order = Order(
        order_id="ord-1",
        distributor_id="dist-1",
        total_amount=Decimal("1800"),
        date=NOW,
        placed_by="exec",
    )
    items = [
        OrderLineItem(product_id="SKU001", quantity=18, unit_price=Decimal("100")),
        OrderLineItem(product_id="SKU001", quantity=1, unit_price=Decimal("0"), is_freebie=True),
    ]

    SupabaseOrderRepository(client).create_order(order, items)

    function, payload = client.rpc.call_args.args
    assert function == "create_order_with_items"
    assert payload["p_order"]["status"] == "Pending"
    assert payload["p_order"]["date_utc"] == "2025-06-01T09:00:00+00:00"
    assert [i["order_id"] for i in payload["p_items"]] == ["ord-1", "ord-1"]
    assert payload["p_items"][1] == {
        "order_id": "ord-1",
        "product_id": "SKU001",
        "quantity": 1,
        "unit_price": "0",
        "is_freebie": True,
    }


def test_deliver_order_returns_delivered_row() -> None:
    row = {
        "order_id": "ord-1",
        "distributor_id": "dist-1",
        "total_amount": "1800.00",
        "date_utc": "2025-06-01T09:00:00Z",
        "placed_by": "exec",
        "status": "Delivered",
    }
    query = StubQuery(data=[row])
    client = client_returning(query)
    order = Order("ord-1", "dist-1", Decimal("1800"), NOW, "exec")
    debit = WalletTransaction(
        transaction_id="txn-1",
        distributor_id="dist-1",
        amount=Decimal("-1800"),
        transaction_type=TransactionType.ORDER_DEBIT,
        date=NOW,
        actor="exec",
        order_id="ord-1",
    )

    delivered = SupabaseWalletRepository(client).deliver_order(order, debit)

    function, payload = client.rpc.call_args.args
    assert function == "deliver_order_atomic"
    assert payload["p_order_id"] == "ord-1"
    assert payload["p_transaction"]["amount"] == "-1800"
    assert payload["p_transaction"]["transaction_type"] == "ORDER_DEBIT"
    assert delivered.status == OrderStatus.DELIVERED
    assert delivered.date == NOW


def test_transaction_rows_parse_naive_timestamps_as_utc() -> None:
    row = {
        "transaction_id": "txn-1",
        "distributor_id": "dist-1",
        "amount": "500.00",
        "transaction_type": "RECHARGE",
        "date_utc": "2025-06-01T09:00:00",
        "actor": "admin",
        "order_id": None,
    }
    repo = SupabaseWalletRepository(client_returning(StubQuery(data=[row])))

    (tx,) = repo.list_transactions("dist-1")

    assert tx.amount == Decimal("500.00")
    assert tx.date == NOW


def test_response_errors_become_runtime_errors() -> None:
    repo = SupabaseOrderRepository(client_returning(StubQuery(error="permission denied")))

    with pytest.raises(RuntimeError, match="Failed to fetch order"):
        repo.get_order("ord-1")


def test_api_errors_become_runtime_errors() -> None:
    query = StubQuery()
    query.execute = MagicMock(side_effect=APIError({"message": "order ord-1 is not pending"}))
    repo = SupabaseOrderRepository(client_returning(query))

    with pytest.raises(RuntimeError, match="Failed to replace order items"):
        repo.replace_order_items(Order("ord-1", "dist-1", Decimal("1"), NOW, "exec"), [])


def test_repositories_share_one_client() -> None:
    client = MagicMock()

    repositories = build_supabase_repositories(client)

    assert repositories.orders.client is client
    assert repositories.wallet.client is client


def test_wallet_reads_are_ordered_by_time_then_insertion() -> None:
    query = StubQuery(data=[])
    repo = SupabaseWalletRepository(client_returning(query))

    repo.list_transactions("dist-1")

    orders = [args for name, args in query.calls if name == "order"]
    assert orders == [("date_utc",), ("seq",)]


def test_user_rows_round_through_the_users_table() -> None:
    query = StubQuery(data=[{"user_id": "user-1", "username": "admin", "role": "Super Admin"}])
    client = client_returning(query)
    repo = SupabaseUserRepository(client)

    (user,) = repo.list_users()
    repo.delete_user("user-2")

    assert user == User("user-1", "admin", UserRole.SUPER_ADMIN)
    client.table.assert_called_with("users")
    assert ("delete", ()) in query.calls
    assert ("eq", ("user_id", "user-2")) in query.calls
