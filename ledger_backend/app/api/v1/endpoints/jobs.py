"""
Job API Endpoints.

Unpaid job listing and job settlement.
"""

from fastapi import APIRouter, Depends, Path
from typing import List

from ledger_backend.app.core.dependencies import (
    get_contract_service, get_current_profile, get_payment_engine
)
from ledger_backend.app.domain.ledger.payment_engine import PaymentEngine
from ledger_backend.app.schemas.contract import JobResponse
from ledger_backend.app.schemas.payment import SettlementResult
from ledger_backend.app.schemas.profile import ProfileResponse
from ledger_backend.app.services.contracts import ContractService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("/unpaid", response_model=List[JobResponse])
async def list_unpaid_jobs(
    profile: ProfileResponse = Depends(get_current_profile),
    service: ContractService = Depends(get_contract_service)
):
    """List unpaid jobs under the caller's in-progress contracts."""
    return await service.list_unpaid_jobs(profile.id)


@router.post("/{job_id}/pay", response_model=SettlementResult)
async def pay_job(
    job_id: int = Path(..., description="Job ID"),
    profile: ProfileResponse = Depends(get_current_profile),
    engine: PaymentEngine = Depends(get_payment_engine)
):
    """
    Pay for a job from the caller's balance.

    The caller must be a payer with a balance covering the job price.
    """
    return await engine.settle_job(job_id, profile.id)
