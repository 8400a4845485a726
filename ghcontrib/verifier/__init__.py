"""Proof verifier adapters.

The proving system itself is external; the ledger only needs a yes/no on
(journal bytes, program id, seal).
"""

from .interface import VerifierAdapter
from .mock import MockVerifier

__all__ = ["MockVerifier", "VerifierAdapter"]
