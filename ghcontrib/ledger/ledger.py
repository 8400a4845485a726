"""ContributionLedger - the single writer of verified contribution facts.

Only the verified submission path calls :meth:`ContributionLedger.record`.
Overwrite semantics: the most recently proven count wins, even when it is
smaller than an earlier one. History is append-only and never reordered.
"""

from __future__ import annotations

from typing import Callable

import bittensor as bt

from .models import ContributionRecord, ContributionVerified, LedgerEntry
from .store.interface import LedgerStore
from .store.memory import MemoryStore

EventListener = Callable[[ContributionVerified], None]


class ContributionLedger:
    """Records verified contributions and serves read accessors."""

    def __init__(self, store: LedgerStore | None = None):
        self.store = store if store is not None else MemoryStore()
        self._listeners: list[EventListener] = []

    # -- Events --

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for ContributionVerified events."""
        self._listeners.append(listener)

    def _emit(self, event: ContributionVerified) -> None:
        # Runs after commit; a failing listener cannot undo the record.
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                bt.logging.warning({"ledger_listener_error": {
                    "listener": getattr(listener, "__name__", repr(listener)),
                    "error": str(e),
                }})

    # -- Writer --

    def next_block_height(self) -> int:
        return self.store.last_block_height() + 1

    def record(
        self,
        repository: str,
        username: str,
        contributions: int,
        timestamp: int,
        url: str,
        block_height: int | None = None,
    ) -> LedgerEntry:
        """Store a verified contribution and emit ContributionVerified.

        Args:
            block_height: Height to record at. Defaults to the next height;
                must not be lower than the last recorded one.
        """
        last = self.store.last_block_height()
        if block_height is None:
            block_height = last + 1
        elif block_height < last:
            raise ValueError(f"block_height {block_height} < last recorded height {last}")

        record = ContributionRecord(
            repository=repository,
            username=username,
            contributions=contributions,
            timestamp=timestamp,
            block_height=block_height,
            url=url,
        )
        entry = self.store.commit(record)

        event = ContributionVerified.from_record(record)
        bt.logging.info({"contribution_verified": event.model_dump(mode="json")})
        self._emit(event)
        return entry

    # -- Read accessors --

    def latest(self, repository: str, username: str) -> int | None:
        """Most recently proven count for a key, or None if never recorded."""
        entry = self.store.get_entry(repository, username)
        return entry.latest_contributions if entry is not None else None

    def entry(self, repository: str, username: str) -> LedgerEntry | None:
        return self.store.get_entry(repository, username)

    def history(self, username: str) -> list[ContributionRecord]:
        return self.store.history(username)

    def count(self, username: str) -> int:
        return len(self.store.history(username))

    def latest_record(self, username: str) -> ContributionRecord | None:
        """Last record for a username across all repositories."""
        records = self.store.history(username)
        return records[-1] if records else None

    def total_verified_contributions(self) -> int:
        return self.store.total_verified()


__all__ = ["ContributionLedger", "EventListener"]
