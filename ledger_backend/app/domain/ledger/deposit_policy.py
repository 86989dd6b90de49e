"""
Deposit Policy.

A payer may top up their balance by at most a fixed share (25% by default)
of what they still owe on in-progress contracts.
"""

import logging
from decimal import Decimal, ROUND_DOWN
from typing import Any

from ledger_backend.app.core.exceptions import (
    LedgerError,
    ResourceNotFoundError,
    InvalidAmountError,
    DepositLimitExceededError,
)
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.models.enums import ProfileRole
from ledger_backend.app.schemas.payment import DepositLimit, DepositResult

logger = logging.getLogger("ledger.deposits")

CENT = Decimal("0.01")


class DepositPolicy:

    def __init__(self, store: LedgerStore, cap_ratio: Decimal = Decimal("0.25")):
        self.store = store
        self.cap_ratio = Decimal(cap_ratio)

    def cap_for(self, outstanding: Decimal) -> Decimal:
        """Deposit cap for an outstanding liability, rounded down to cents."""
        return (Decimal(outstanding) * self.cap_ratio).quantize(CENT, rounding=ROUND_DOWN)

    async def max_deposit(self, payer_id: int) -> Decimal:
        """Current cap; zero when the payer owes nothing on active contracts."""
        async with self.store.transaction(read_only=True) as tx:
            outstanding = await tx.outstanding_for_payer(payer_id)
        return self.cap_for(outstanding)

    async def deposit_limit(self, payer_id: int) -> DepositLimit:
        async with self.store.transaction(read_only=True) as tx:
            payer = await tx.get_profile(payer_id, role=ProfileRole.PAYER)
            if payer is None:
                raise ResourceNotFoundError("Payer", payer_id)
            outstanding = await tx.outstanding_for_payer(payer_id)

        return DepositLimit(
            payer_id=payer_id,
            outstanding=outstanding,
            max_deposit=self.cap_for(outstanding),
        )

    async def deposit(self, payer_id: int, amount: Any) -> DepositResult:
        """
        Add funds to a payer balance.

        Checks, in order: positive amount, payer exists, amount within cap.
        The cap is computed inside the same transaction that locks the payer
        row, so it reflects the liability at the moment of the credit.

        Raises:
            InvalidAmountError: amount not a positive number of cents
            ResourceNotFoundError: no payer profile with that id
            DepositLimitExceededError: amount above the cap
        """
        amount = self._validate_amount(amount)

        try:
            async with self.store.transaction() as tx:
                payer = await tx.get_profile(payer_id, role=ProfileRole.PAYER, lock=True)
                if payer is None:
                    raise ResourceNotFoundError("Payer", payer_id)

                limit = self.cap_for(await tx.outstanding_for_payer(payer_id))
                if amount > limit:
                    raise DepositLimitExceededError(limit)

                await tx.credit(payer_id, amount)
                new_balance = await tx.get_balance(payer_id)
        except LedgerError as exc:
            logger.info("Deposit of %s for payer %s rejected: %s", amount, payer_id, exc.message)
            raise

        logger.info("Deposited %s for payer %s, balance now %s", amount, payer_id, new_balance)
        return DepositResult(payer_id=payer_id, amount=amount, new_balance=new_balance)

    @staticmethod
    def _validate_amount(amount: Any) -> Decimal:
        try:
            value = Decimal(str(amount))
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidAmountError(amount, "Amount must be a number")
        if not value.is_finite() or value <= 0:
            raise InvalidAmountError(amount)
        if value != value.quantize(CENT):
            raise InvalidAmountError(amount, "Amount cannot have fractions of a cent")
        return value
