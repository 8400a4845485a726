"""In-memory LedgerStore. State is lost with the process."""

from __future__ import annotations

import threading

from ghcontrib.errors import LedgerStoreError
from ghcontrib.ledger.models import ContributionRecord, LedgerEntry


class LedgerState:
    """Plain ledger state shared by the memory and filesystem stores.

    Records live in one append-only list; entries and the per-username index
    hold positions into it. Writes and reads hold ``_lock``, so a reader on
    another thread never sees a record that is only partly indexed.
    """

    def __init__(self) -> None:
        self.records: list[ContributionRecord] = []
        self.latest: dict[tuple[str, str], int] = {}
        self.by_key: dict[tuple[str, str], list[int]] = {}
        self.by_username: dict[str, list[int]] = {}
        self._lock = threading.Lock()

    def apply(self, record: ContributionRecord) -> LedgerEntry:
        """Index one record and return the updated entry."""
        key = (record.repository, record.username)
        with self._lock:
            position = len(self.records)
            self.records.append(record)
            self.latest[key] = record.contributions
            self.by_key.setdefault(key, []).append(position)
            self.by_username.setdefault(record.username, []).append(position)
            entry = self._entry(key)

        if entry is None:
            raise LedgerStoreError(f"entry {key} missing after apply")
        return entry

    def _entry(self, key: tuple[str, str]) -> LedgerEntry | None:
        if key not in self.latest:
            return None
        return LedgerEntry(
            repository=key[0],
            username=key[1],
            latest_contributions=self.latest[key],
            history=[self.records[i] for i in self.by_key[key]],
        )

    def entry(self, repository: str, username: str) -> LedgerEntry | None:
        with self._lock:
            return self._entry((repository, username))

    def history(self, username: str) -> list[ContributionRecord]:
        with self._lock:
            return [self.records[i] for i in self.by_username.get(username, [])]

    def snapshot(self) -> list[ContributionRecord]:
        with self._lock:
            return list(self.records)

    def total(self) -> int:
        with self._lock:
            return len(self.records)

    def last_block_height(self) -> int:
        with self._lock:
            return self.records[-1].block_height if self.records else 0


class MemoryStore:
    """Process-local LedgerStore implementation."""

    def __init__(self) -> None:
        self._state = LedgerState()

    def commit(self, record: ContributionRecord) -> LedgerEntry:
        return self._state.apply(record)

    def get_entry(self, repository: str, username: str) -> LedgerEntry | None:
        return self._state.entry(repository, username)

    def history(self, username: str) -> list[ContributionRecord]:
        return self._state.history(username)

    def total_verified(self) -> int:
        return self._state.total()

    def last_block_height(self) -> int:
        return self._state.last_block_height()


__all__ = ["LedgerState", "MemoryStore"]
