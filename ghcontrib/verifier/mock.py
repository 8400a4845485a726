"""Mock verifier for local development and tests.

Seals are ``selector || sha256(program_id || sha256(journal))``. Anyone can
forge one, so this must never back a production ledger.
"""

from __future__ import annotations

import hashlib
import hmac

from ghcontrib.journal.codec import journal_digest

DEFAULT_SELECTOR = b"\xff\xff\xff\xff"


class MockVerifier:
    """Accepts seals produced by :meth:`seal_for` with the same selector."""

    def __init__(self, selector: bytes = DEFAULT_SELECTOR):
        if len(selector) != 4:
            raise ValueError(f"selector must be 4 bytes, got {len(selector)}")
        self.selector = selector

    def seal_for(self, journal: bytes, program_id: bytes) -> bytes:
        claim = hashlib.sha256(program_id + journal_digest(journal)).digest()
        return self.selector + claim

    def verify(self, journal: bytes, program_id: bytes, seal: bytes) -> bool:
        return hmac.compare_digest(bytes(seal), self.seal_for(journal, program_id))


__all__ = ["DEFAULT_SELECTOR", "MockVerifier"]
