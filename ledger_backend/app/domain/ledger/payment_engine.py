"""
Payment Engine (Domain Logic).

Settles one job: moves its price from the payer's balance to the performer's
balance and marks the job paid, as a single transaction.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from ledger_backend.app.core.exceptions import (
    LedgerError,
    ResourceNotFoundError,
    JobAlreadyPaidError,
    InsufficientFundsError,
)
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.models.enums import ProfileRole
from ledger_backend.app.schemas.payment import SettlementResult

logger = logging.getLogger("ledger.payments")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentEngine:

    def __init__(self, store: LedgerStore, enforce_contract_payer: bool = False):
        self.store = store
        self.enforce_contract_payer = enforce_contract_payer

    async def settle_job(self, job_id: int, payer_id: int) -> SettlementResult:
        """
        Settle a job on behalf of a payer.

        Flow (inside one transaction):
        1. Lock the job row; it must exist and be unpaid
        2. Load the contract
        3. Lock payer and performer rows (ascending id) and check their roles
        4. Check funds
        5. Guarded debit, credit, paid-transition

        The guarded updates re-check the preconditions at write time, so a
        concurrent settlement of the same job, or a concurrent drain of the
        payer balance, surfaces as a failure and rolls everything back.

        Args:
            job_id: Job to settle
            payer_id: Profile paying for the job

        Returns:
            SettlementResult with both post-settlement balances

        Raises:
            ResourceNotFoundError: job, contract, payer or performer missing
            JobAlreadyPaidError: job already settled
            InsufficientFundsError: payer balance below the job price
            StoreFailureError: the store could not complete the transaction
        """
        try:
            async with self.store.transaction() as tx:
                job = await tx.get_job(job_id, lock=True)
                if job is None:
                    raise ResourceNotFoundError("Job", job_id)
                if job.paid:
                    raise JobAlreadyPaidError(job_id)

                contract = await tx.get_contract(job.contract_id)
                if contract is None:
                    raise ResourceNotFoundError("Contract", job.contract_id)
                if self.enforce_contract_payer and contract.payer_id != payer_id:
                    # Same answer GetContract gives to a non-party
                    raise ResourceNotFoundError("Contract", contract.id)

                profiles = await tx.lock_profiles([payer_id, contract.performer_id])

                payer = profiles.get(payer_id)
                if payer is None or payer.role != ProfileRole.PAYER:
                    raise ResourceNotFoundError("Payer", payer_id)

                performer = profiles.get(contract.performer_id)
                if performer is None or performer.role != ProfileRole.PERFORMER:
                    raise ResourceNotFoundError("Performer", contract.performer_id)

                price = Decimal(job.price)
                if Decimal(payer.balance) < price:
                    raise InsufficientFundsError(payer.balance, price)

                if not await tx.debit(payer.id, price):
                    raise InsufficientFundsError(await tx.get_balance(payer.id), price)
                await tx.credit(performer.id, price)

                paid_at = utcnow()
                if not await tx.mark_job_paid(job.id, paid_at):
                    raise JobAlreadyPaidError(job_id)

                result = SettlementResult(
                    job_id=job.id,
                    payer_id=payer.id,
                    performer_id=performer.id,
                    amount=price,
                    payer_balance=await tx.get_balance(payer.id),
                    performer_balance=await tx.get_balance(performer.id),
                    payment_date=paid_at,
                )
        except LedgerError as exc:
            logger.info("Settlement of job %s by payer %s rejected: %s", job_id, payer_id, exc.message)
            raise

        logger.info(
            "Job %s settled: %s moved from payer %s to performer %s",
            result.job_id, result.amount, result.payer_id, result.performer_id
        )
        return result
