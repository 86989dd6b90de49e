"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ledger_backend.app.api.v1.endpoints import contracts, jobs, balances, admin_reports

router = APIRouter()

router.include_router(contracts.router)
router.include_router(jobs.router)
router.include_router(balances.router)
router.include_router(admin_reports.router)
