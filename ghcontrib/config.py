"""Ledger configuration.

Validation parameters are fixed at ledger initialization and never change
afterwards. They come from the same environment variables the contract
deployment tooling uses (NOTARY_KEY_FINGERPRINT, QUERIES_HASH, EXPECTED_URL,
ZK_PROVER_GUEST_ID). Process settings (server, store, verifier) follow the
usual rule: environment variables override CLI flags.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from ghcontrib.journal.models import Bytes32, JournalSchema, Uint256

ZERO_BYTES32 = b"\x00" * 32
DEFAULT_EXPECTED_URL = "https://api.github.com/graphql"
DEFAULT_MIN_CONTRIBUTIONS = 1
DEFAULT_MAX_CONTRIBUTIONS = 1_000_000


class UrlMatchMode(str, Enum):
    """How JournalRecord.url is compared against the expected URL."""

    EXACT = "exact"
    CONTAINS = "contains"


class ValidationConfig(BaseModel):
    """Immutable invariants a journal must satisfy before it is trusted."""

    model_config = ConfigDict(frozen=True)

    expected_notary_fingerprint: Bytes32
    expected_queries_hash: Bytes32
    expected_url: str = Field(min_length=1)
    url_match: UrlMatchMode = UrlMatchMode.EXACT
    min_contributions: Uint256 = DEFAULT_MIN_CONTRIBUTIONS
    max_contributions: Uint256 = DEFAULT_MAX_CONTRIBUTIONS
    program_id: Bytes32 = Field(description="Expected proving program (image) id, checked by the verifier")

    @field_validator("expected_notary_fingerprint", "expected_queries_hash", "program_id")
    @classmethod
    def _not_zero(cls, value: bytes, info: ValidationInfo) -> bytes:
        if value == ZERO_BYTES32:
            raise ValueError(f"{info.field_name} must not be zero")
        return value

    @model_validator(mode="after")
    def _bounds_ordered(self) -> ValidationConfig:
        if self.min_contributions > self.max_contributions:
            raise ValueError(
                f"min_contributions ({self.min_contributions}) > "
                f"max_contributions ({self.max_contributions})"
            )
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ValidationConfig:
        """Build from deployment environment variables.

        Raises:
            ValueError: a required variable is missing.
            pydantic.ValidationError: a value is malformed.
        """
        env = os.environ if environ is None else environ

        required = {
            "expected_notary_fingerprint": "NOTARY_KEY_FINGERPRINT",
            "expected_queries_hash": "QUERIES_HASH",
            "program_id": "ZK_PROVER_GUEST_ID",
        }
        values: dict[str, Any] = {}
        for field_name, env_name in required.items():
            raw = env.get(env_name, "")
            if not raw:
                raise ValueError(f"{env_name} not set")
            values[field_name] = raw

        values["expected_url"] = env.get("EXPECTED_URL") or DEFAULT_EXPECTED_URL
        values["url_match"] = env.get("GHCONTRIB_URL_MATCH") or UrlMatchMode.EXACT
        values["min_contributions"] = env.get("GHCONTRIB_MIN_CONTRIBUTIONS") or DEFAULT_MIN_CONTRIBUTIONS
        values["max_contributions"] = env.get("GHCONTRIB_MAX_CONTRIBUTIONS") or DEFAULT_MAX_CONTRIBUTIONS
        return cls(**values)


class LedgerSettings(BaseModel):
    """Process-level settings for the ledger service."""

    host: str = "0.0.0.0"
    port: int = 8300
    store_kind: Literal["memory", "filesystem", "sql"] = "filesystem"
    data_dir: str = "ghcontrib/data/ledger"
    database_url: str = ""
    verifier_kind: Literal["mock", "keypair", "http"] = "mock"
    verifier_url: str = ""
    prover_hotkey: str = ""
    journal_schema: JournalSchema = JournalSchema.FULL

    @model_validator(mode="after")
    def _verifier_complete(self) -> LedgerSettings:
        if self.verifier_kind == "http" and not self.verifier_url:
            raise ValueError("GHCONTRIB_VERIFIER__URL is required for the http verifier")
        if self.verifier_kind == "keypair" and not self.prover_hotkey:
            raise ValueError("GHCONTRIB_VERIFIER__PROVER_HOTKEY is required for the keypair verifier")
        if self.store_kind == "sql" and not self.database_url:
            raise ValueError("GHCONTRIB_STORE__DATABASE_URL is required for the sql store")
        return self


def add_args(parser) -> None:
    """Add ledger service arguments to an argparse parser."""
    parser.add_argument("--server.host", type=str, default="0.0.0.0", help="HTTP bind host.")
    parser.add_argument("--server.port", type=int, default=8300, help="HTTP bind port.")
    parser.add_argument(
        "--store.kind",
        type=str,
        choices=["memory", "filesystem", "sql"],
        default="filesystem",
        help="Ledger storage backend.",
    )
    parser.add_argument(
        "--store.data_dir",
        type=str,
        default="ghcontrib/data/ledger",
        help="Directory for the filesystem store.",
    )
    parser.add_argument(
        "--store.database_url",
        type=str,
        default="",
        help="SQLAlchemy URL for the sql store, e.g. sqlite:///ledger.db",
    )
    parser.add_argument(
        "--verifier.kind",
        type=str,
        choices=["mock", "keypair", "http"],
        default="mock",
        help="Proof verifier adapter.",
    )
    parser.add_argument("--verifier.url", type=str, default="", help="Remote verifier base URL.")
    parser.add_argument(
        "--verifier.prover_hotkey",
        type=str,
        default="",
        help="SS58 address whose signatures are accepted as seals (keypair verifier).",
    )
    parser.add_argument(
        "--journal.schema",
        type=str,
        choices=[s.value for s in JournalSchema],
        default=JournalSchema.FULL.value,
        help="Journal layout agreed with the proof producer.",
    )


_SETTINGS_SOURCES = {
    "host": ("GHCONTRIB_SERVER__HOST", "server.host"),
    "port": ("GHCONTRIB_SERVER__PORT", "server.port"),
    "store_kind": ("GHCONTRIB_STORE__KIND", "store.kind"),
    "data_dir": ("GHCONTRIB_STORE__DATA_DIR", "store.data_dir"),
    "database_url": ("GHCONTRIB_STORE__DATABASE_URL", "store.database_url"),
    "verifier_kind": ("GHCONTRIB_VERIFIER__KIND", "verifier.kind"),
    "verifier_url": ("GHCONTRIB_VERIFIER__URL", "verifier.url"),
    "prover_hotkey": ("GHCONTRIB_VERIFIER__PROVER_HOTKEY", "verifier.prover_hotkey"),
    "journal_schema": ("GHCONTRIB_JOURNAL__SCHEMA", "journal.schema"),
}


def load_settings(args: Any = None, environ: Mapping[str, str] | None = None) -> LedgerSettings:
    """Resolve settings: env var, then CLI arg, then model default."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for field_name, (env_name, arg_name) in _SETTINGS_SOURCES.items():
        if env.get(env_name):
            values[field_name] = env[env_name]
            continue
        arg_value = getattr(args, arg_name, None) if args is not None else None
        if arg_value not in (None, ""):
            values[field_name] = arg_value
    return LedgerSettings(**values)


__all__ = [
    "DEFAULT_EXPECTED_URL",
    "LedgerSettings",
    "UrlMatchMode",
    "ValidationConfig",
    "add_args",
    "load_settings",
]
