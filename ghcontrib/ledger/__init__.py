"""Contribution ledger: verified (repository, username) facts and history.

The ledger is append-mostly: entries are created on first verification,
overwritten on later ones, and never deleted.
"""

from .ledger import ContributionLedger
from .models import ContributionRecord, ContributionVerified, LedgerEntry

__all__ = [
    "ContributionLedger",
    "ContributionRecord",
    "ContributionVerified",
    "LedgerEntry",
]
