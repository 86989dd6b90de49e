"""
Contract database model.

An agreement between exactly one payer and one performer.
"""

from sqlalchemy import CheckConstraint, Column, Integer, Text, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.enums import ContractStatus


class Contract(Base):
    """
    Contract model.

    Created and terminated outside the ledger; the ledger only reads its
    status and the two parties.
    """
    __tablename__ = "contracts"
    __table_args__ = (
        CheckConstraint("payer_id <> performer_id", name="ck_contracts_distinct_parties"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    terms = Column(Text, nullable=True)
    status = Column(Enum(ContractStatus), default=ContractStatus.NEW, nullable=False, index=True)

    # Parties
    payer_id = Column(Integer, ForeignKey('profiles.id'), nullable=False, index=True)
    performer_id = Column(Integer, ForeignKey('profiles.id'), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Contract(id={self.id}, status='{self.status.value}', payer={self.payer_id}, performer={self.performer_id})>"
