"""
Ledger Store.

Typed handle over the relational store holding profiles, contracts and jobs.
Engines receive a LedgerStore at construction and run every operation inside
``store.transaction()``: one session, one transaction, committed when the
block exits cleanly and rolled back on any exception.

Locking contract:
- ``get_job(lock=True)`` and ``lock_profiles`` issue SELECT ... FOR UPDATE. Profiles are
  always locked in ascending id order so two settlements touching the same
  pair of profiles cannot deadlock.
- ``debit``, ``credit`` and ``mark_job_paid`` are guarded single-statement
  updates; they report whether the guarded row was actually changed.
- SQLite ignores FOR UPDATE; there every write transaction begins IMMEDIATE
  (see ``db.session.configure_sqlite``), which serializes writers.
  ``transaction(read_only=True)`` begins deferred, so queries do not queue
  behind writers.

Any SQLAlchemyError raised inside a transaction is re-raised as
StoreFailureError after the rollback.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import AsyncIterator, Dict, Iterable, List, Optional

from sqlalchemy import select, update, func, or_, false, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger_backend.app.core.exceptions import StoreFailureError
from ledger_backend.app.db.session import READ_ONLY
from ledger_backend.app.models.contract import Contract
from ledger_backend.app.models.enums import ContractStatus, ProfileRole
from ledger_backend.app.models.job import Job
from ledger_backend.app.models.profile import Profile

logger = logging.getLogger("ledger.store")

ZERO = Decimal("0")


class LedgerTransaction:
    """Queries and guarded mutations bound to one open transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Profiles ---

    async def get_profile(
        self,
        profile_id: int,
        role: Optional[ProfileRole] = None,
        lock: bool = False
    ) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.id == profile_id)
        if role is not None:
            stmt = stmt.where(Profile.role == role)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_profiles(self, profile_ids: Iterable[int]) -> Dict[int, Profile]:
        """Lock several profile rows, lowest id first."""
        stmt = (
            select(Profile)
            .where(Profile.id.in_(sorted(set(profile_ids))))
            .order_by(Profile.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return {profile.id: profile for profile in result.scalars().all()}

    async def get_balance(self, profile_id: int) -> Decimal:
        result = await self.session.execute(
            select(Profile.balance).where(Profile.id == profile_id)
        )
        return Decimal(str(result.scalar_one()))

    async def debit(self, profile_id: int, amount: Decimal) -> bool:
        """Subtract amount unless that would drive the balance negative."""
        result = await self.session.execute(
            update(Profile)
            .where(Profile.id == profile_id, Profile.balance >= amount)
            .values(balance=Profile.balance - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def credit(self, profile_id: int, amount: Decimal) -> bool:
        result = await self.session.execute(
            update(Profile)
            .where(Profile.id == profile_id)
            .values(balance=Profile.balance + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # --- Contracts ---

    async def get_contract(self, contract_id: int) -> Optional[Contract]:
        result = await self.session.execute(
            select(Contract).where(Contract.id == contract_id)
        )
        return result.scalar_one_or_none()

    async def get_contract_for_payer(self, contract_id: int, payer_id: int) -> Optional[Contract]:
        result = await self.session.execute(
            select(Contract).where(
                Contract.id == contract_id,
                Contract.payer_id == payer_id
            )
        )
        return result.scalar_one_or_none()

    async def list_active_contracts(self, profile_id: int) -> List[Contract]:
        """In-progress contracts where the profile is either party."""
        result = await self.session.execute(
            select(Contract)
            .where(
                or_(Contract.payer_id == profile_id, Contract.performer_id == profile_id),
                Contract.status == ContractStatus.IN_PROGRESS
            )
            .order_by(Contract.id)
        )
        return list(result.scalars().all())

    # --- Jobs ---

    async def get_job(self, job_id: int, lock: bool = False) -> Optional[Job]:
        stmt = select(Job).where(Job.id == job_id)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_job_paid(self, job_id: int, paid_at: datetime) -> bool:
        """Flip paid false -> true. Returns False if the job was already paid."""
        result = await self.session.execute(
            update(Job)
            .where(Job.id == job_id, Job.paid == false())
            .values(paid=True, payment_date=paid_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_unpaid_jobs(self, profile_id: int) -> List[Job]:
        """Unpaid jobs under the profile's in-progress contracts."""
        result = await self.session.execute(
            select(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .where(
                or_(Contract.payer_id == profile_id, Contract.performer_id == profile_id),
                Contract.status == ContractStatus.IN_PROGRESS,
                Job.paid == false()
            )
            .order_by(Job.id)
        )
        return list(result.scalars().all())

    async def outstanding_for_payer(self, payer_id: int) -> Decimal:
        """Sum of unpaid job prices on the payer's in-progress contracts."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Job.price), 0))
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .where(
                Contract.payer_id == payer_id,
                Contract.status == ContractStatus.IN_PROGRESS,
                Job.paid == false()
            )
        )
        total = result.scalar()
        return Decimal(str(total)) if total is not None else ZERO

    # --- Aggregations ---

    async def profession_earnings(self, start: datetime, end: datetime, limit: Optional[int] = None):
        """
        Paid job totals per performer profession within [start, end].

        Rows are (profession, total_earnings), highest total first, ties
        broken by profession ascending.
        """
        total = func.sum(Job.price).label("total_earnings")
        stmt = (
            select(Profile.profession, total)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.performer_id == Profile.id)
            .where(
                Profile.role == ProfileRole.PERFORMER,
                Profile.profession.isnot(None),
                Job.paid == true(),
                Job.payment_date.between(start, end)
            )
            .group_by(Profile.profession)
            .order_by(total.desc(), Profile.profession.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.all()

    async def payer_totals(self, start: datetime, end: datetime, limit: int):
        """
        Paid job totals per payer within [start, end].

        Rows are (payer_id, first_name, last_name, total_paid), highest
        total first, ties broken by payer id ascending.
        """
        total = func.sum(Job.price).label("total_paid")
        stmt = (
            select(Profile.id, Profile.first_name, Profile.last_name, total)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.payer_id == Profile.id)
            .where(
                Profile.role == ProfileRole.PAYER,
                Job.paid == true(),
                Job.payment_date.between(start, end)
            )
            .group_by(Profile.id, Profile.first_name, Profile.last_name)
            .order_by(total.desc(), Profile.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.all()


class LedgerStore:
    """Entry point to the ledger's persisted state."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(self, read_only: bool = False) -> AsyncIterator[LedgerTransaction]:
        """
        Open one unit of work.

        Pass read_only=True for queries that never write; on SQLite they
        begin deferred instead of taking the write lock.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    if read_only:
                        await session.connection(execution_options={READ_ONLY: True})
                    yield LedgerTransaction(session)
        except SQLAlchemyError as exc:
            logger.exception("Ledger store failure, transaction rolled back")
            raise StoreFailureError() from exc
