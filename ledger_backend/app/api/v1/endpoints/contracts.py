"""
Contract API Endpoints.

Contracts visible to the calling profile.
"""

from fastapi import APIRouter, Depends, Path
from typing import List

from ledger_backend.app.core.dependencies import get_contract_service, get_current_profile
from ledger_backend.app.schemas.contract import ContractResponse
from ledger_backend.app.schemas.profile import ProfileResponse
from ledger_backend.app.services.contracts import ContractService

router = APIRouter(prefix="/contracts", tags=["Contracts"])


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int = Path(..., description="Contract ID"),
    profile: ProfileResponse = Depends(get_current_profile),
    service: ContractService = Depends(get_contract_service)
):
    """
    Get a contract by id.

    Only the contract's payer can see it; anyone else gets 404.
    """
    return await service.get_contract(contract_id, profile.id)


@router.get("", response_model=List[ContractResponse])
async def list_active_contracts(
    profile: ProfileResponse = Depends(get_current_profile),
    service: ContractService = Depends(get_contract_service)
):
    """List in-progress contracts where the caller is payer or performer."""
    return await service.list_active_contracts(profile.id)
