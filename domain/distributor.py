"""
Domain: Distributor accounts.

A distributor holds a prepaid wallet. wallet_balance is a materialized running
total that must always equal the sum of the distributor's wallet transactions;
it only changes together with a ledger insert.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Distributor:
    """
    Distributor account with onboarding details and wallet balance.

    Supports:
    - Location (state / area) used for reporting
    - Flags marking distributors that carry special prices or schemes
    - Optional signed agreement document URL
    """

    distributor_id: str
    name: str
    phone: str
    state: str
    area: str
    date_added: datetime
    added_by: str
    wallet_balance: Decimal = Decimal("0")

    has_special_pricing: bool = False
    has_special_schemes: bool = False
    agreement_url: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate timestamps are UTC-aware."""
        require_utc_timestamp("date_added", self.date_added)

    def can_afford(self, amount: Decimal) -> bool:
        return amount <= self.wallet_balance

    def with_balance(self, wallet_balance: Decimal) -> "Distributor":
        return replace(self, wallet_balance=wallet_balance)
