"""
Contract and Job Schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional
from ledger_backend.app.models.enums import ContractStatus


class ContractResponse(BaseModel):
    """Schema for displaying a contract."""
    id: int
    terms: Optional[str]
    status: ContractStatus
    payer_id: int
    performer_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JobResponse(BaseModel):
    """Schema for displaying a job."""
    id: int
    description: str
    price: Decimal
    paid: bool
    payment_date: Optional[datetime]
    contract_id: int

    class Config:
        from_attributes = True
