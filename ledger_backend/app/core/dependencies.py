"""
Dependencies for FastAPI.

Wires the ledger store into the engines and resolves the calling profile.
"""

from typing import Optional
from fastapi import Depends, Header
from ledger_backend.app.core.config import settings
from ledger_backend.app.core.exceptions import AuthenticationError
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.db.session import AsyncSessionLocal
from ledger_backend.app.domain.ledger.deposit_policy import DepositPolicy
from ledger_backend.app.domain.ledger.payment_engine import PaymentEngine
from ledger_backend.app.domain.ledger.reporting_engine import ReportingEngine
from ledger_backend.app.schemas.profile import ProfileResponse
from ledger_backend.app.services.contracts import ContractService

_store = LedgerStore(AsyncSessionLocal)


def get_ledger_store() -> LedgerStore:
    """Shared store handle; overridden in tests."""
    return _store


def get_payment_engine(store: LedgerStore = Depends(get_ledger_store)) -> PaymentEngine:
    return PaymentEngine(store, enforce_contract_payer=settings.ledger.enforce_contract_payer)


def get_deposit_policy(store: LedgerStore = Depends(get_ledger_store)) -> DepositPolicy:
    return DepositPolicy(store, cap_ratio=settings.ledger.deposit_cap_ratio)


def get_reporting_engine(store: LedgerStore = Depends(get_ledger_store)) -> ReportingEngine:
    return ReportingEngine(
        store,
        default_limit=settings.ledger.best_payers_default_limit,
        max_limit=settings.ledger.best_payers_max_limit,
    )


def get_contract_service(store: LedgerStore = Depends(get_ledger_store)) -> ContractService:
    return ContractService(store)


async def get_current_profile(
    profile_id: Optional[int] = Header(default=None, description="ID of the calling profile"),
    service: ContractService = Depends(get_contract_service)
) -> ProfileResponse:
    """
    Resolve the caller from the ``profile-id`` header.

    Raises:
        AuthenticationError: header missing or no such profile
    """
    if profile_id is None:
        raise AuthenticationError("Missing profile-id header")

    profile = await service.get_profile(profile_id)
    if profile is None:
        raise AuthenticationError("Unknown profile")

    return profile
