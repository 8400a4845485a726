"""Proof journal: record model, schemas and the canonical byte codec."""

from .codec import decode, encode, journal_digest
from .models import DEFAULT_SCHEMA, JournalRecord, JournalSchema
from .public_outputs import (
    normalize_proof_payload,
    normalize_seal,
    parse_owner_repo,
    record_from_public_outputs,
)

__all__ = [
    "DEFAULT_SCHEMA",
    "JournalRecord",
    "JournalSchema",
    "decode",
    "encode",
    "journal_digest",
    "normalize_proof_payload",
    "normalize_seal",
    "parse_owner_repo",
    "record_from_public_outputs",
]
