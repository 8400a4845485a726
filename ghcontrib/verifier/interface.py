"""VerifierAdapter protocol - the external proof verifier as a capability.

The proving system's verification algorithm is not implemented here.
Implementations: MockVerifier (local/dev), KeypairSealVerifier (signed
seals), HTTPVerifierAdapter (remote verification service).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class VerifierAdapter(Protocol):
    """Checks a seal against the journal bytes and a program id."""

    def verify(self, journal: bytes, program_id: bytes, seal: bytes) -> bool:
        """Return True only if the seal proves ``journal`` under ``program_id``.

        ``journal`` must be the exact bytes the proof was bound to. The
        adapter derives the digest itself.
        """
        ...


__all__ = ["VerifierAdapter"]
