"""LedgerStore protocol - pluggable persistence for the contribution ledger.

Implementations: MemoryStore, FilesystemStore, SqlStore.

``commit`` is the only mutator and must be all-or-nothing: either the entry
is upserted, the history record appended and the counter bumped, or the
store is left exactly as it was.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ghcontrib.ledger.models import ContributionRecord, LedgerEntry


@runtime_checkable
class LedgerStore(Protocol):
    """Abstract interface for reading/writing ledger state."""

    def commit(self, record: ContributionRecord) -> LedgerEntry:
        """Atomically apply one verified record. Returns the updated entry."""
        ...

    def get_entry(self, repository: str, username: str) -> LedgerEntry | None:
        """Fetch the entry for a key, with its history."""
        ...

    def history(self, username: str) -> list[ContributionRecord]:
        """All records for a username across repositories, in commit order."""
        ...

    def total_verified(self) -> int:
        """Number of committed records."""
        ...

    def last_block_height(self) -> int:
        """Height of the last committed record (0 when empty)."""
        ...


__all__ = ["LedgerStore"]
