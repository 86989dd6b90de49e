"""
Job database model.

A billable unit of work under one contract.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, Boolean, ForeignKey, DateTime
from sqlalchemy.sql import func
from ledger_backend.app.db.session import Base


class Job(Base):
    """
    Job model.

    Created unpaid. Transitions to paid exactly once, through a settlement,
    which also stamps payment_date. Never un-paid.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_jobs_price_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    description = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    paid = Column(Boolean, default=False, nullable=False, index=True)
    payment_date = Column(DateTime(timezone=True), nullable=True, index=True)

    contract_id = Column(Integer, ForeignKey('contracts.id'), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Job(id={self.id}, contract_id={self.contract_id}, price={self.price}, paid={self.paid})>"
