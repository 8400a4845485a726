"""Seal signing and verification using bittensor keypairs.

A trusted prover signs the (program id, journal digest) claim with its
hotkey; the ledger accepts the signature as the seal.
"""

from __future__ import annotations

import hashlib
from typing import Any

import bittensor as bt

from ghcontrib.journal.codec import journal_digest


def _seal_payload(journal: bytes, program_id: bytes) -> bytes:
    """Canonical bytes to sign: hex sha256 over program id + journal digest."""
    return hashlib.sha256(program_id + journal_digest(journal)).hexdigest().encode()


def sign_seal(journal: bytes, program_id: bytes, wallet: Any) -> bytes:
    """Sign a journal claim with the wallet's hotkey.

    Args:
        journal: Canonical journal bytes.
        program_id: 32-byte program id the claim is made under.
        wallet: Bittensor wallet with hotkey access.

    Returns:
        Raw signature bytes, usable directly as the seal.
    """
    signature = wallet.hotkey.sign(_seal_payload(journal, program_id))
    if isinstance(signature, bytes):
        return signature
    text = str(signature)
    return bytes.fromhex(text[2:] if text.startswith("0x") else text)


class KeypairSealVerifier:
    """Accepts seals signed by one known prover hotkey."""

    def __init__(self, prover_hotkey: str):
        self.prover_hotkey = prover_hotkey

    def verify(self, journal: bytes, program_id: bytes, seal: bytes) -> bool:
        if not seal:
            return False

        try:
            keypair = bt.Keypair(ss58_address=self.prover_hotkey)
            return bool(keypair.verify(_seal_payload(journal, program_id), bytes(seal)))
        except Exception as e:
            bt.logging.debug({"keypair_verifier": {"error": str(e)}})
            return False


__all__ = ["KeypairSealVerifier", "sign_seal"]
