"""
Payment and Deposit Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal


class SettlementResult(BaseModel):
    """Confirmation of a settled job."""
    job_id: int
    payer_id: int
    performer_id: int
    amount: Decimal
    payer_balance: Decimal
    performer_balance: Decimal
    payment_date: datetime
    message: str = "Payment successful"


class DepositRequest(BaseModel):
    """Schema for a balance deposit."""
    amount: Decimal = Field(..., description="Amount to add to the payer balance")


class DepositResult(BaseModel):
    """Outcome of a deposit."""
    payer_id: int
    amount: Decimal
    new_balance: Decimal
    message: str = "Deposit successful"


class DepositLimit(BaseModel):
    """Current deposit cap of a payer."""
    payer_id: int
    outstanding: Decimal
    max_deposit: Decimal
