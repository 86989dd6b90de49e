"""
Ledger enumerations.

Defines profile roles and contract lifecycle states.
"""

import enum


class ProfileRole(str, enum.Enum):
    """
    Profile role enumeration.

    Roles:
        PAYER: Owes money for jobs completed under their contracts
        PERFORMER: Earns money for jobs they complete
    """
    PAYER = "payer"
    PERFORMER = "performer"


class ContractStatus(str, enum.Enum):
    """Contract status enumeration."""
    NEW = "new"
    IN_PROGRESS = "in_progress"  # Active: jobs may be billed and settled
    TERMINATED = "terminated"
