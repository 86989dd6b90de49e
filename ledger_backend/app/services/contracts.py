"""
Contract Service.

Read operations the request layer offers a calling profile: its contracts,
its unpaid jobs, and caller resolution.
"""

from typing import List, Optional

from ledger_backend.app.core.exceptions import ResourceNotFoundError
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.schemas.contract import ContractResponse, JobResponse
from ledger_backend.app.schemas.profile import ProfileResponse


class ContractService:

    def __init__(self, store: LedgerStore):
        self.store = store

    async def get_profile(self, profile_id: int) -> Optional[ProfileResponse]:
        async with self.store.transaction(read_only=True) as tx:
            profile = await tx.get_profile(profile_id)
            return ProfileResponse.model_validate(profile) if profile else None

    async def get_contract(self, contract_id: int, caller_id: int) -> ContractResponse:
        """Contract by id, visible only to its payer."""
        async with self.store.transaction(read_only=True) as tx:
            contract = await tx.get_contract_for_payer(contract_id, caller_id)
            if contract is None:
                raise ResourceNotFoundError("Contract", contract_id)
            return ContractResponse.model_validate(contract)

    async def list_active_contracts(self, caller_id: int) -> List[ContractResponse]:
        """In-progress contracts where the caller is payer or performer."""
        async with self.store.transaction(read_only=True) as tx:
            contracts = await tx.list_active_contracts(caller_id)
            return [ContractResponse.model_validate(c) for c in contracts]

    async def list_unpaid_jobs(self, caller_id: int) -> List[JobResponse]:
        """Unpaid jobs under the caller's in-progress contracts."""
        async with self.store.transaction(read_only=True) as tx:
            jobs = await tx.list_unpaid_jobs(caller_id)
            return [JobResponse.model_validate(j) for j in jobs]
