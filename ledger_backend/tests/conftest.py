"""
Centralized Test Configuration.
"""

import pytest
from decimal import Decimal
from datetime import datetime
from typing import Optional
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine

from ledger_backend.app.main import app
from ledger_backend.app.core.dependencies import get_ledger_store
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.db.session import build_session_factory, configure_sqlite, create_tables
from ledger_backend.app.models.contract import Contract
from ledger_backend.app.models.enums import ContractStatus, ProfileRole
from ledger_backend.app.models.job import Job
from ledger_backend.app.models.profile import Profile


# File database per test: concurrent sessions need their own connections
@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"timeout": 30},
    )
    configure_sqlite(engine)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return LedgerStore(session_factory)


@pytest.fixture
async def client(store):
    """Async client for testing."""
    app.dependency_overrides[get_ledger_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


class LedgerFactory:
    """Creates committed rows; every call uses and closes its own session."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def _save(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def payer(self, balance="0", first_name="Pat", last_name="Payer") -> Profile:
        return await self._save(Profile(
            first_name=first_name,
            last_name=last_name,
            profession="Client",
            balance=Decimal(balance),
            role=ProfileRole.PAYER,
        ))

    async def performer(self, balance="0", profession="Programmer", first_name="Perry", last_name="Performer") -> Profile:
        return await self._save(Profile(
            first_name=first_name,
            last_name=last_name,
            profession=profession,
            balance=Decimal(balance),
            role=ProfileRole.PERFORMER,
        ))

    async def contract(self, payer: Profile, performer: Profile, status=ContractStatus.IN_PROGRESS) -> Contract:
        return await self._save(Contract(
            terms="terms",
            status=status,
            payer_id=payer.id,
            performer_id=performer.id,
        ))

    async def job(self, contract: Contract, price="100", paid_on: Optional[datetime] = None) -> Job:
        return await self._save(Job(
            description="work",
            price=Decimal(price),
            paid=paid_on is not None,
            payment_date=paid_on,
            contract_id=contract.id,
        ))

    async def balance(self, profile: Profile) -> Decimal:
        async with self.session_factory() as session:
            refreshed = await session.get(Profile, profile.id)
            return Decimal(refreshed.balance)

    async def reload_job(self, job: Job) -> Job:
        async with self.session_factory() as session:
            return await session.get(Job, job.id)


@pytest.fixture
def factory(session_factory):
    return LedgerFactory(session_factory)
