"""Field-level validation of a decoded journal against the ledger config.

Checks run in a fixed order and stop at the first failure:
notary fingerprint, queries hash, URL, contribution bounds. The checks are
pure; nothing here touches the ledger. Submissions run this before the
external proof verifier, so a journal with a bad field never costs a
verifier call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ghcontrib.config import UrlMatchMode, ValidationConfig
from ghcontrib.errors import (
    InvalidContributions,
    InvalidNotaryKeyFingerprint,
    InvalidQueriesHash,
    InvalidUrl,
    RejectedJournal,
)
from ghcontrib.journal.models import JournalRecord


class RejectionReason(str, Enum):
    INVALID_NOTARY_KEY_FINGERPRINT = "InvalidNotaryKeyFingerprint"
    INVALID_QUERIES_HASH = "InvalidQueriesHash"
    INVALID_URL = "InvalidUrl"
    INVALID_CONTRIBUTIONS = "InvalidContributions"


_EXCEPTIONS: dict[RejectionReason, type[RejectedJournal]] = {
    RejectionReason.INVALID_NOTARY_KEY_FINGERPRINT: InvalidNotaryKeyFingerprint,
    RejectionReason.INVALID_QUERIES_HASH: InvalidQueriesHash,
    RejectionReason.INVALID_URL: InvalidUrl,
    RejectionReason.INVALID_CONTRIBUTIONS: InvalidContributions,
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of journal validation."""

    valid: bool
    reason: RejectionReason | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.valid

    def to_exception(self) -> RejectedJournal:
        if self.reason is None:
            raise ValueError("valid result has no exception")
        return _EXCEPTIONS[self.reason](self.detail)


_OK = ValidationResult(valid=True)


def _reject(reason: RejectionReason, detail: str) -> ValidationResult:
    return ValidationResult(valid=False, reason=reason, detail=detail)


def url_matches(url: str, expected: str, mode: UrlMatchMode) -> bool:
    if mode is UrlMatchMode.CONTAINS:
        return expected in url
    return url == expected


def validate(record: JournalRecord, config: ValidationConfig) -> ValidationResult:
    """Check a record against the config; first failed check wins."""
    if record.notary_fingerprint != config.expected_notary_fingerprint:
        return _reject(
            RejectionReason.INVALID_NOTARY_KEY_FINGERPRINT,
            f"notary fingerprint 0x{record.notary_fingerprint.hex()[:16]}... "
            f"!= expected 0x{config.expected_notary_fingerprint.hex()[:16]}...",
        )

    if record.queries_hash != config.expected_queries_hash:
        return _reject(
            RejectionReason.INVALID_QUERIES_HASH,
            f"queries hash 0x{record.queries_hash.hex()[:16]}... "
            f"!= expected 0x{config.expected_queries_hash.hex()[:16]}...",
        )

    if not url_matches(record.url, config.expected_url, config.url_match):
        return _reject(
            RejectionReason.INVALID_URL,
            f"url {record.url!r} does not {config.url_match.value}-match {config.expected_url!r}",
        )

    if not config.min_contributions <= record.contributions <= config.max_contributions:
        return _reject(
            RejectionReason.INVALID_CONTRIBUTIONS,
            f"contributions {record.contributions} outside "
            f"[{config.min_contributions}, {config.max_contributions}]",
        )

    return _OK


def ensure_valid(record: JournalRecord, config: ValidationConfig) -> None:
    """Like validate(), but raise the specific RejectedJournal subclass."""
    result = validate(record, config)
    if not result:
        raise result.to_exception()


__all__ = [
    "RejectionReason",
    "ValidationResult",
    "ensure_valid",
    "url_matches",
    "validate",
]
