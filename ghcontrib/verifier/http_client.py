"""Remote proof verification over HTTP.

POSTs the journal, its digest, the program id and the seal (all 0x hex) to
``{base_url}/verify`` and expects ``{"valid": true}`` back.
"""

from __future__ import annotations

import time

import bittensor as bt
import httpx

from ghcontrib.journal.codec import journal_digest
from ghcontrib.journal.models import to_hex


class HTTPVerifierAdapter:
    """Synchronous client for a remote verification service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff

    def close(self) -> None:
        self._client.close()

    def _post(self, payload: dict[str, str]) -> httpx.Response:
        """POST with retry on transport errors."""
        for attempt in range(self._max_retries):
            try:
                return self._client.post(f"{self.base_url}/verify", json=payload)
            except httpx.TransportError as e:
                if attempt == self._max_retries - 1:
                    raise
                wait = self._retry_backoff * 2 ** attempt
                bt.logging.warning({"http_verifier": {"retry": attempt, "wait": wait, "error": str(e)}})
                time.sleep(wait)
        raise ConnectionError("Max retries exceeded")

    def verify(self, journal: bytes, program_id: bytes, seal: bytes) -> bool:
        payload = {
            "journal": to_hex(journal),
            "journal_digest": to_hex(journal_digest(journal)),
            "program_id": to_hex(program_id),
            "seal": to_hex(seal),
        }
        resp = self._post(payload)
        if resp.status_code != 200:
            bt.logging.warning({"http_verifier": {"status": resp.status_code, "body": resp.text[:200]}})
            return False

        try:
            data = resp.json()
        except ValueError:
            bt.logging.warning({"http_verifier": {"status": 200, "error": "invalid_json"}})
            return False
        return isinstance(data, dict) and data.get("valid") is True


__all__ = ["HTTPVerifierAdapter"]
