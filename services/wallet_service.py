"""
Wallet ledger.

Handles:
- Recharges (positive RECHARGE transactions)
- Order debits (negative ORDER_DEBIT transactions, delivery time only)
- Affordability checks
- Transaction history with balance_after replayed on every read

The repository applies a transaction and its balance change together, so the
stored wallet_balance always equals the sum of the distributor's ledger.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import uuid4

from domain.distributor import Distributor
from domain.errors import DistributorNotFound, InsufficientFunds
from domain.order import Order
from domain.wallet import (
    EnrichedWalletTransaction,
    TransactionType,
    WalletTransaction,
    replay_balances,
)
from domain.time import utc_now
from repositories.protocols import DistributorRepository, WalletRepository
from services.locks import KeyedLocks

logger = logging.getLogger(__name__)


class WalletLedger:
    def __init__(
        self,
        distributors: DistributorRepository,
        wallet: WalletRepository,
        locks: Optional[KeyedLocks] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._distributors = distributors
        self._wallet = wallet
        self._locks = locks or KeyedLocks()
        self._clock = clock

    @property
    def locks(self) -> KeyedLocks:
        return self._locks

    def _require_distributor(self, distributor_id: str) -> Distributor:
        distributor = self._distributors.get_distributor(distributor_id)
        if distributor is None:
            raise DistributorNotFound(distributor_id)
        return distributor

    def get_balance(self, distributor_id: str) -> Decimal:
        return self._require_distributor(distributor_id).wallet_balance

    def can_afford(self, distributor_id: str, amount: Decimal) -> bool:
        """True iff amount <= the distributor's current wallet balance."""
        return self._require_distributor(distributor_id).can_afford(amount)

    def recharge(self, distributor_id: str, amount: Decimal, actor: str) -> WalletTransaction:
        """
        Add funds to a distributor's wallet.

        Raises:
            ValueError: amount is not positive
            DistributorNotFound: unknown distributor
        """
        if amount <= 0:
            raise ValueError("Recharge amount must be greater than zero")

        with self._locks.hold(distributor_id):
            self._require_distributor(distributor_id)
            transaction = WalletTransaction(
                transaction_id=f"txn-{uuid4()}",
                distributor_id=distributor_id,
                amount=amount,
                transaction_type=TransactionType.RECHARGE,
                date=self._clock(),
                actor=actor,
            )
            updated = self._wallet.append_transaction(transaction)

        logger.info(
            "Recharged distributor=%s by %s (actor=%s); balance now %s",
            distributor_id,
            amount,
            actor,
            updated.wallet_balance,
        )
        return transaction

    def _debit_transaction(self, distributor: Distributor, amount: Decimal, order_id: str, actor: str) -> WalletTransaction:
        if amount < 0:
            raise ValueError("Debit amount must not be negative")
        if amount > distributor.wallet_balance:
            raise InsufficientFunds(
                required=amount,
                available=distributor.wallet_balance,
                message=f"Insufficient funds: {amount} requested, {distributor.wallet_balance} available.",
            )
        return WalletTransaction(
            transaction_id=f"txn-{uuid4()}",
            distributor_id=distributor.distributor_id,
            amount=-amount,
            transaction_type=TransactionType.ORDER_DEBIT,
            date=self._clock(),
            actor=actor,
            order_id=order_id,
        )

    def debit(self, distributor_id: str, amount: Decimal, order_id: str, actor: str) -> WalletTransaction:
        """
        Record an ORDER_DEBIT of `amount` against the wallet.

        Raises:
            InsufficientFunds: amount exceeds the current balance
        """
        with self._locks.hold(distributor_id):
            distributor = self._require_distributor(distributor_id)
            transaction = self._debit_transaction(distributor, amount, order_id, actor)
            self._wallet.append_transaction(transaction)
        return transaction

    def debit_for_delivery(self, order: Order, actor: str) -> tuple[Order, WalletTransaction]:
        """
        Mark `order` DELIVERED and debit its total in one atomic write.

        Callers hold the distributor lock and have already checked affordability;
        the check here guards the ledger invariant regardless.
        """
        with self._locks.hold(order.distributor_id):
            distributor = self._require_distributor(order.distributor_id)
            transaction = self._debit_transaction(distributor, order.total_amount, order.order_id, actor)
            delivered = self._wallet.deliver_order(order, transaction)
        return delivered, transaction

    def transaction_history(self, distributor_id: str) -> List[EnrichedWalletTransaction]:
        """
        Return the distributor's transactions newest-first with balance_after.

        balance_after is recomputed by chronological replay on every call.
        """
        self._require_distributor(distributor_id)
        replayed = replay_balances(self._wallet.list_transactions(distributor_id))
        return list(reversed(replayed))


__all__ = ["WalletLedger"]
