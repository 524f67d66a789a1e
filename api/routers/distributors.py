"""
Distributors & Wallet API Endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import get_actor, get_platform
from api.models import (
    DistributorResponse,
    OnboardDistributorRequest,
    RechargeRequest,
    WalletBalanceResponse,
    WalletTransactionResponse,
)
from domain.user import Actor
from services.distributor_service import OnboardingRequest
from services.platform import Platform

router = APIRouter()


@router.post("/distributors", response_model=DistributorResponse, status_code=201, summary="Onboard Distributor")
def onboard_distributor(
    request: OnboardDistributorRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    distributor = platform.distributors.onboard_distributor(
        OnboardingRequest(**request.model_dump()),
        actor,
    )
    return DistributorResponse.from_domain(distributor)


@router.get("/distributors", response_model=List[DistributorResponse], summary="List Distributors")
def list_distributors(platform: Platform = Depends(get_platform)):
    return [DistributorResponse.from_domain(d) for d in platform.distributors.list_distributors()]


@router.get("/distributors/{distributor_id}", response_model=DistributorResponse, summary="Distributor Detail")
def get_distributor(distributor_id: str, platform: Platform = Depends(get_platform)):
    return DistributorResponse.from_domain(platform.distributors.get_distributor(distributor_id))


@router.get(
    "/distributors/{distributor_id}/wallet",
    response_model=WalletBalanceResponse,
    summary="Wallet Balance",
)
def get_wallet_balance(distributor_id: str, platform: Platform = Depends(get_platform)):
    return WalletBalanceResponse(
        distributor_id=distributor_id,
        wallet_balance=platform.ledger.get_balance(distributor_id),
    )


@router.post(
    "/distributors/{distributor_id}/wallet/recharge",
    response_model=WalletTransactionResponse,
    status_code=201,
    summary="Recharge Wallet",
)
def recharge_wallet(
    distributor_id: str,
    request: RechargeRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    transaction = platform.ledger.recharge(distributor_id, request.amount, actor.username)
    history = platform.ledger.transaction_history(distributor_id)
    enriched = next(e for e in history if e.transaction.transaction_id == transaction.transaction_id)
    return WalletTransactionResponse.from_domain(enriched)


@router.get(
    "/distributors/{distributor_id}/wallet/transactions",
    response_model=List[WalletTransactionResponse],
    summary="Wallet History",
)
def list_wallet_transactions(distributor_id: str, platform: Platform = Depends(get_platform)):
    """Transactions newest first, each with the balance after it was applied."""
    return [
        WalletTransactionResponse.from_domain(e)
        for e in platform.ledger.transaction_history(distributor_id)
    ]
