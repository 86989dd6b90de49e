"""
Balance API Endpoints.

Deposits into payer balances, capped by the deposit policy.
"""

from fastapi import APIRouter, Depends, Path

from ledger_backend.app.core.dependencies import get_deposit_policy
from ledger_backend.app.domain.ledger.deposit_policy import DepositPolicy
from ledger_backend.app.schemas.payment import DepositLimit, DepositRequest, DepositResult

router = APIRouter(prefix="/balances", tags=["Balances"])


@router.get("/{payer_id}/max-deposit", response_model=DepositLimit)
async def get_max_deposit(
    payer_id: int = Path(..., description="Payer profile ID"),
    policy: DepositPolicy = Depends(get_deposit_policy)
):
    """Current deposit cap of a payer."""
    return await policy.deposit_limit(payer_id)


@router.post("/deposit/{payer_id}", response_model=DepositResult)
async def deposit(
    request: DepositRequest,
    payer_id: int = Path(..., description="Payer profile ID"),
    policy: DepositPolicy = Depends(get_deposit_policy)
):
    """
    Deposit money into a payer balance.

    A payer cannot deposit more than 25% of the total price of their
    unpaid jobs on in-progress contracts.
    """
    return await policy.deposit(payer_id, request.amount)
