"""
Domain: Wallet transactions and balance replay.

Contract excerpts implemented here:
- The ledger is append-only.
- RECHARGE amounts are positive; ORDER_DEBIT amounts are negative (zero for a
  zero-total order) and exist only for delivered orders.
- A distributor's wallet balance equals the sum of its transaction amounts.
- balance_after for a historical transaction is derived by replaying that
  distributor's transactions in chronological order. It is never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from .time import require_utc_timestamp


class TransactionType(str, Enum):
    RECHARGE = "RECHARGE"
    ORDER_DEBIT = "ORDER_DEBIT"


@dataclass(frozen=True, slots=True)
class WalletTransaction:
    transaction_id: str
    distributor_id: str
    amount: Decimal
    transaction_type: TransactionType
    date: datetime
    actor: str
    order_id: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("date", self.date)
        if self.transaction_type == TransactionType.RECHARGE and self.amount <= 0:
            raise ValueError("RECHARGE transactions must have a positive amount")
        if self.transaction_type == TransactionType.ORDER_DEBIT:
            if self.amount > 0:
                raise ValueError("ORDER_DEBIT transactions must not have a positive amount")
            if self.order_id is None:
                raise ValueError("ORDER_DEBIT transactions must reference an order")


@dataclass(frozen=True, slots=True)
class EnrichedWalletTransaction:
    transaction: WalletTransaction
    balance_after: Decimal


def replay_balances(transactions: Iterable[WalletTransaction]) -> List[EnrichedWalletTransaction]:
    """
    Replay transactions oldest-first and attach the running balance.

    The input may be in any order; the result is chronological. Transactions
    sharing a timestamp keep their input order (sorted() is stable), so callers
    pass them in insertion order as the wallet repositories return them.
    """

    running = Decimal("0")
    enriched: List[EnrichedWalletTransaction] = []
    for tx in sorted(transactions, key=lambda t: t.date):
        running += tx.amount
        enriched.append(EnrichedWalletTransaction(transaction=tx, balance_after=running))
    return enriched


def ledger_balance(transactions: Iterable[WalletTransaction]) -> Decimal:
    return sum((tx.amount for tx in transactions), Decimal("0"))


__all__ = [
    "TransactionType",
    "WalletTransaction",
    "EnrichedWalletTransaction",
    "replay_balances",
    "ledger_balance",
]
