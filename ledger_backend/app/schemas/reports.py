"""
Reporting Schemas.

Typed results of the ledger aggregations.
"""

from pydantic import BaseModel
from decimal import Decimal


class ProfessionEarnings(BaseModel):
    """Total earned by one profession within a window."""
    profession: str
    total_earnings: Decimal


class PayerTotal(BaseModel):
    """Total paid by one payer within a window."""
    payer_id: int
    payer_name: str
    total_paid: Decimal
