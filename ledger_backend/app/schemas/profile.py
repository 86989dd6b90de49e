"""
Profile Schemas.
"""

from pydantic import BaseModel
from decimal import Decimal
from typing import Optional
from ledger_backend.app.models.enums import ProfileRole


class ProfileResponse(BaseModel):
    """Schema for displaying a profile."""
    id: int
    first_name: str
    last_name: str
    profession: Optional[str]
    balance: Decimal
    role: ProfileRole

    class Config:
        from_attributes = True
