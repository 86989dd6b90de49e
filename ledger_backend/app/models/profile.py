"""
Profile database model.

A party in the ledger, either a payer or a performer, holding a balance.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime, Enum
from sqlalchemy.sql import func
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.enums import ProfileRole


class Profile(Base):
    """
    Profile model.

    The balance is only ever moved by the payment engine (debit/credit)
    and the deposit policy (credit). It can never go negative.
    """
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_profiles_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    # Only meaningful for performers
    profession = Column(String(100), nullable=True, index=True)

    balance = Column(Numeric(12, 2), default=0, nullable=False)
    role = Column(Enum(ProfileRole), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, role='{self.role.value}', balance={self.balance})>"
