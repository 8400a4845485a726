"""Error taxonomy for journal submissions.

Every class carries a stable ``code`` so callers (and the HTTP surface) can
tell "wrong queries" from "wrong notary" from "proof invalid" without
parsing messages.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for terminal, non-retryable submission failures."""

    code = "LedgerError"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.code}: {detail}" if detail else self.code)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


class CodecError(LedgerError):
    """Journal bytes do not match the agreed schema."""

    code = "CodecError"


class MalformedJournal(CodecError):
    """Head/tail layout is inconsistent or non-canonical."""

    code = "Malformed"


class TruncatedJournal(CodecError):
    """Fewer bytes present than the layout demands."""

    code = "Truncated"


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


class RejectedJournal(LedgerError):
    """A decoded journal failed a configured field check."""

    code = "RejectedJournal"


class InvalidNotaryKeyFingerprint(RejectedJournal):
    code = "InvalidNotaryKeyFingerprint"


class InvalidQueriesHash(RejectedJournal):
    code = "InvalidQueriesHash"


class InvalidUrl(RejectedJournal):
    code = "InvalidUrl"


class InvalidContributions(RejectedJournal):
    code = "InvalidContributions"


# ---------------------------------------------------------------------------
# External verification
# ---------------------------------------------------------------------------


class ZKProofVerificationFailed(LedgerError):
    """The external verifier rejected the seal/digest pair."""

    code = "ZKProofVerificationFailed"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class LedgerStoreError(LedgerError):
    """Persisted ledger state could not be read or written."""

    code = "LedgerStoreError"


ERRORS_BY_CODE: dict[str, type[LedgerError]] = {
    cls.code: cls
    for cls in (
        LedgerError,
        CodecError,
        MalformedJournal,
        TruncatedJournal,
        RejectedJournal,
        InvalidNotaryKeyFingerprint,
        InvalidQueriesHash,
        InvalidUrl,
        InvalidContributions,
        ZKProofVerificationFailed,
        LedgerStoreError,
    )
}


def error_from_code(code: str, detail: str = "") -> LedgerError:
    """Rebuild the exception for a wire error code (unknown codes -> LedgerError)."""
    cls = ERRORS_BY_CODE.get(code, LedgerError)
    return cls(detail)


__all__ = [
    "ERRORS_BY_CODE",
    "CodecError",
    "InvalidContributions",
    "InvalidNotaryKeyFingerprint",
    "InvalidQueriesHash",
    "InvalidUrl",
    "LedgerError",
    "LedgerStoreError",
    "MalformedJournal",
    "RejectedJournal",
    "TruncatedJournal",
    "ZKProofVerificationFailed",
    "error_from_code",
]
