"""HTTP client for the ledger service.

Error responses are turned back into the matching LedgerError subclass, so
callers handle remote rejections exactly like local ones.
"""

from __future__ import annotations

import asyncio
from typing import Any

import bittensor as bt
import httpx

from ghcontrib.errors import LedgerError, error_from_code
from ghcontrib.journal.models import to_hex
from ghcontrib.ledger.models import ContributionRecord, LedgerEntry


class LedgerClient:
    """Async client for submitting journals and reading the ledger."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout)
        self._max_retries = max_retries

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _raise_for_error(resp: httpx.Response) -> None:
        if resp.status_code == 200:
            return
        try:
            body = resp.json()
        except ValueError:
            body = {}
        code = body.get("error", "") if isinstance(body, dict) else ""
        if not code:
            raise LedgerError(f"HTTP {resp.status_code}: {resp.text[:200]}")
        raise error_from_code(code, body.get("detail", ""))

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET with retry on transport errors."""
        for attempt in range(self._max_retries):
            try:
                return await self._client.get(f"{self.base_url}{path}", params=params)
            except httpx.TransportError as e:
                if attempt == self._max_retries - 1:
                    raise
                wait = 2 ** attempt
                bt.logging.warning({"ledger_client": {"retry": attempt, "wait": wait, "error": str(e)}})
                await asyncio.sleep(wait)
        raise ConnectionError("Max retries exceeded")

    # -- Submission (never retried) --

    async def submit(self, journal: bytes, seal: bytes) -> LedgerEntry:
        resp = await self._client.post(
            f"{self.base_url}/contributions",
            json={"journal": to_hex(journal), "seal": to_hex(seal)},
        )
        self._raise_for_error(resp)
        return LedgerEntry(**resp.json()["entry"])

    # -- Reads --

    async def entry(self, repository: str, username: str) -> LedgerEntry | None:
        resp = await self._get(
            "/contributions/latest",
            params={"repository": repository, "username": username},
        )
        if resp.status_code == 404:
            return None
        self._raise_for_error(resp)
        return LedgerEntry(**resp.json())

    async def latest(self, repository: str, username: str) -> int | None:
        entry = await self.entry(repository, username)
        return entry.latest_contributions if entry is not None else None

    async def history(self, username: str) -> list[ContributionRecord]:
        resp = await self._get("/contributions/history", params={"username": username})
        self._raise_for_error(resp)
        return [ContributionRecord(**r) for r in resp.json().get("records", [])]

    async def count(self, username: str) -> int:
        resp = await self._get("/contributions/count", params={"username": username})
        self._raise_for_error(resp)
        return int(resp.json()["count"])

    async def total_verified_contributions(self) -> int:
        resp = await self._get("/stats")
        self._raise_for_error(resp)
        return int(resp.json()["total_verified_contributions"])


__all__ = ["LedgerClient"]
