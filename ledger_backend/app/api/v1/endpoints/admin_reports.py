"""
Admin Reporting API Endpoints.

Read-only aggregations over paid jobs.
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ledger_backend.app.core.dependencies import get_reporting_engine
from ledger_backend.app.domain.ledger.reporting_engine import ReportingEngine
from ledger_backend.app.schemas.reports import ProfessionEarnings, PayerTotal

router = APIRouter(prefix="/admin", tags=["Admin - Reports"])


@router.get("/best-profession", response_model=ProfessionEarnings)
async def best_profession(
    start: Optional[str] = Query(default=None, description="Window start (YYYY-MM-DD or ISO datetime)"),
    end: Optional[str] = Query(default=None, description="Window end, inclusive"),
    engine: ReportingEngine = Depends(get_reporting_engine)
):
    """Profession that earned the most from jobs paid within the window."""
    return await engine.best_profession(start, end)


@router.get("/best-payers", response_model=List[PayerTotal])
async def best_payers(
    start: Optional[str] = Query(default=None, description="Window start (YYYY-MM-DD or ISO datetime)"),
    end: Optional[str] = Query(default=None, description="Window end, inclusive"),
    limit: Optional[str] = Query(default=None, description="Number of payers to return (default 2)"),
    engine: ReportingEngine = Depends(get_reporting_engine)
):
    """Payers who paid the most for jobs within the window."""
    return await engine.best_payers(start, end, limit)
