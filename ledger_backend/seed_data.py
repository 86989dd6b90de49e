"""
Database seeding script for sample ledger data.

Creates payers, performers, contracts and jobs for local development.
Run this script after the database is configured.
"""

import asyncio
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ledger_backend.app.db.session import AsyncSessionLocal, create_tables
from ledger_backend.app.models.contract import Contract
from ledger_backend.app.models.enums import ContractStatus, ProfileRole
from ledger_backend.app.models.job import Job
from ledger_backend.app.models.profile import Profile
from sqlalchemy import select, func


PAYERS = [
    ("Harry", "Potter", "Wizard", "1150"),
    ("Mr", "Robot", "Hacker", "231.11"),
    ("John", "Snow", "Knows nothing", "451.30"),
    ("Ash", "Kethcum", "Pokemon master", "1.30"),
]

PERFORMERS = [
    ("John", "Lenon", "Musician", "64"),
    ("Linus", "Torvalds", "Programmer", "1214"),
    ("Alan", "Turing", "Programmer", "22"),
    ("Aragorn", "II Elessar Telcontarvalds", "Fighter", "314"),
]

# (payer index, performer index, status, terms)
CONTRACTS = [
    (0, 0, ContractStatus.TERMINATED, "bla bla bla"),
    (0, 1, ContractStatus.IN_PROGRESS, "bla bla bla"),
    (1, 2, ContractStatus.IN_PROGRESS, "bla bla bla"),
    (1, 3, ContractStatus.IN_PROGRESS, "bla bla bla"),
    (2, 1, ContractStatus.NEW, "bla bla bla"),
    (2, 3, ContractStatus.IN_PROGRESS, "bla bla bla"),
    (3, 2, ContractStatus.IN_PROGRESS, "bla bla bla"),
]

# (contract index, description, price, paid on)
JOBS = [
    (0, "work", "200", None),
    (1, "work", "201", None),
    (2, "work", "202", None),
    (3, "work", "200", None),
    (6, "work", "200", None),
    (6, "work", "2020", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    (1, "work", "200", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    (2, "work", "200", datetime(2020, 8, 16, 19, 11, 26, tzinfo=timezone.utc)),
    (0, "work", "200", datetime(2020, 8, 17, 19, 11, 26, tzinfo=timezone.utc)),
    (4, "work", "200", datetime(2020, 8, 17, 19, 11, 26, tzinfo=timezone.utc)),
    (2, "work", "21", datetime(2020, 8, 10, 19, 11, 26, tzinfo=timezone.utc)),
    (3, "work", "21", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    (6, "work", "121", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    (6, "work", "121", datetime(2020, 8, 14, 23, 11, 26, tzinfo=timezone.utc)),
]


def _profile(row, role: ProfileRole) -> Profile:
    first_name, last_name, profession, balance = row
    return Profile(
        first_name=first_name,
        last_name=last_name,
        profession=profession,
        balance=Decimal(balance),
        role=role,
    )


async def seed_data():
    """
    Seed sample ledger data.

    Creates:
    - 4 payers, 4 performers
    - 7 contracts across all statuses
    - 14 jobs, some already paid in August 2020
    """
    await create_tables()

    async with AsyncSessionLocal() as db:
        print("🌱 Starting ledger seeding...")

        existing = (await db.execute(select(func.count(Profile.id)))).scalar() or 0
        if existing:
            print("ℹ️  Profiles already exist, skipping seeding")
            return

        payers = [_profile(row, ProfileRole.PAYER) for row in PAYERS]
        performers = [_profile(row, ProfileRole.PERFORMER) for row in PERFORMERS]
        db.add_all(payers + performers)
        await db.flush()
        print(f"✅ Created {len(payers)} payers and {len(performers)} performers")

        contracts = [
            Contract(
                terms=terms,
                status=status,
                payer_id=payers[payer].id,
                performer_id=performers[performer].id,
            )
            for payer, performer, status, terms in CONTRACTS
        ]
        db.add_all(contracts)
        await db.flush()
        print(f"✅ Created {len(contracts)} contracts")

        db.add_all([
            Job(
                contract_id=contracts[contract].id,
                description=description,
                price=Decimal(price),
                paid=paid_on is not None,
                payment_date=paid_on,
            )
            for contract, description, price, paid_on in JOBS
        ])
        print(f"✅ Created {len(JOBS)} jobs")

        await db.commit()

        print("\n🎉 Ledger seeding completed successfully!")
        print("\nCall the API with a 'profile-id' header, e.g. profile-id: 1 (Harry Potter, payer)")


if __name__ == "__main__":
    asyncio.run(seed_data())
