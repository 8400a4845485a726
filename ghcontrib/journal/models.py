"""Pydantic models for the proof journal (the proof's public outputs).

The journal layout is fixed per schema; producer and consumer must agree on
which one is in use. Schemas are explicit rather than sniffed from the bytes.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

UINT256_MAX = 2**256 - 1


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


def _to_bytes32(value: Any) -> bytes:
    """Accept 32 raw bytes or a hex string (with or without 0x prefix)."""
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        try:
            value = bytes.fromhex(text)
        except ValueError:
            raise ValueError("bytes32 must be a hex string") from None
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValueError(f"bytes32 must be exactly 32 bytes, got {len(value)}")
        return bytes(value)
    raise ValueError(f"cannot interpret {type(value).__name__} as bytes32")


def to_hex(value: bytes) -> str:
    return "0x" + value.hex()


Bytes32 = Annotated[
    bytes,
    BeforeValidator(_to_bytes32),
    PlainSerializer(to_hex, return_type=str, when_used="json"),
]
Uint256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]


# ---------------------------------------------------------------------------
# Schema versions
# ---------------------------------------------------------------------------


class JournalSchema(str, Enum):
    """Supported journal layouts, newest first."""

    FULL = "full"
    REPOSITORY = "repository"
    USERNAME = "username"

    @property
    def layout(self) -> tuple[tuple[str, str], ...]:
        """(field name, ABI type) pairs in declaration order."""
        return _LAYOUTS[self]

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(name for name, _ in _LAYOUTS[self])


_LAYOUTS: dict[JournalSchema, tuple[tuple[str, str], ...]] = {
    JournalSchema.FULL: (
        ("notary_fingerprint", "bytes32"),
        ("method", "string"),
        ("url", "string"),
        ("timestamp", "uint256"),
        ("queries_hash", "bytes32"),
        ("repository", "string"),
        ("username", "string"),
        ("contributions", "uint256"),
    ),
    # Layout without the HTTP method, as built by the web client.
    JournalSchema.REPOSITORY: (
        ("notary_fingerprint", "bytes32"),
        ("url", "string"),
        ("timestamp", "uint256"),
        ("queries_hash", "bytes32"),
        ("repository", "string"),
        ("username", "string"),
        ("contributions", "uint256"),
    ),
    # Oldest named-field layout: no method, no repository.
    JournalSchema.USERNAME: (
        ("notary_fingerprint", "bytes32"),
        ("url", "string"),
        ("timestamp", "uint256"),
        ("queries_hash", "bytes32"),
        ("username", "string"),
        ("contributions", "uint256"),
    ),
}

DEFAULT_SCHEMA = JournalSchema.FULL


# ---------------------------------------------------------------------------
# Journal record
# ---------------------------------------------------------------------------


class JournalRecord(BaseModel):
    """Decoded proof public outputs. Immutable value type."""

    model_config = ConfigDict(frozen=True)

    notary_fingerprint: Bytes32 = Field(
        description="Identity of the TLS-notarizing key that attested the exchange"
    )
    method: str = ""
    url: str
    timestamp: Uint256 = Field(description="Attested exchange time, seconds since epoch")
    queries_hash: Bytes32 = Field(
        description="Commitment to the extraction queries that produced repository/username/contributions"
    )
    repository: str = Field(default="", description="owner/name")
    username: str
    contributions: Uint256


__all__ = [
    "DEFAULT_SCHEMA",
    "UINT256_MAX",
    "Bytes32",
    "JournalRecord",
    "JournalSchema",
    "Uint256",
    "to_hex",
]
