"""Filesystem-based LedgerStore implementation.

Keeps the full record log as one JSON snapshot:
  {data_dir}/ledger/ledger.json

Every commit rewrites the snapshot atomically (tmp file + rename). The
in-memory state only changes after the new snapshot is on disk, so a failed
write leaves both the file and the process state untouched.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import bittensor as bt
from pydantic import ValidationError

from ghcontrib.errors import LedgerStoreError
from ghcontrib.ledger.models import ContributionRecord, LedgerEntry

from .memory import LedgerState

SNAPSHOT_VERSION = 1


class FilesystemStore:
    """Local filesystem LedgerStore implementation."""

    def __init__(self, data_dir: str):
        self.base = Path(data_dir) / "ledger"
        self.path = self.base / "ledger.json"
        self.base.mkdir(parents=True, exist_ok=True)
        self._state = self._load()

    # -- Persistence --

    def _load(self) -> LedgerState:
        """Rebuild state from the snapshot. A corrupt snapshot is fatal."""
        state = LedgerState()
        if not self.path.exists():
            bt.logging.info({"ledger_store": {"event": "no_snapshot", "path": str(self.path)}})
            return state

        try:
            with open(self.path) as f:
                data = json.load(f)
            version = data.get("version")
            if version != SNAPSHOT_VERSION:
                raise LedgerStoreError(f"unsupported snapshot version: {version}")
            for raw in data["records"]:
                state.apply(ContributionRecord(**raw))
        except (OSError, ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
            raise LedgerStoreError(f"corrupt ledger snapshot {self.path}: {e}") from e

        bt.logging.info({"ledger_store": {"event": "snapshot_loaded", "records": state.total()}})
        return state

    def _write_snapshot(self, records: list[ContributionRecord]) -> None:
        """Atomically write the snapshot to disk (tmp + rename)."""
        data = {
            "version": SNAPSHOT_VERSION,
            "records": [r.model_dump(mode="json") for r in records],
        }
        tmp_fd, tmp_path = tempfile.mkstemp(dir=str(self.base), suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "w") as f:
                json.dump(data, f, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, str(self.path))
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise LedgerStoreError(f"failed to write ledger snapshot: {e}") from e

    # -- LedgerStore interface --

    def commit(self, record: ContributionRecord) -> LedgerEntry:
        self._write_snapshot(self._state.snapshot() + [record])
        return self._state.apply(record)

    def get_entry(self, repository: str, username: str) -> LedgerEntry | None:
        return self._state.entry(repository, username)

    def history(self, username: str) -> list[ContributionRecord]:
        return self._state.history(username)

    def total_verified(self) -> int:
        return self._state.total()

    def last_block_height(self) -> int:
        return self._state.last_block_height()


__all__ = ["FilesystemStore"]
