"""Submission pipeline: journal bytes + seal in, ledger entry out.

decode -> validate fields -> external proof verification -> record.

Field validation runs before the verifier call: it is cheap and tells the
caller exactly which configured invariant failed. Any failure raises before
the ledger is touched, so a rejected submission leaves no trace.
"""

from __future__ import annotations

import bittensor as bt

from ghcontrib.config import ValidationConfig
from ghcontrib.errors import LedgerError, ZKProofVerificationFailed
from ghcontrib.journal.codec import decode, journal_digest
from ghcontrib.journal.models import DEFAULT_SCHEMA, JournalSchema
from ghcontrib.ledger.ledger import ContributionLedger
from ghcontrib.ledger.models import LedgerEntry
from ghcontrib.validation.pipeline import validate
from ghcontrib.verifier.interface import VerifierAdapter


class ContributionVerifier:
    """Gatekeeper in front of the ledger for proven contribution counts."""

    def __init__(
        self,
        config: ValidationConfig,
        verifier: VerifierAdapter,
        ledger: ContributionLedger | None = None,
        schema: JournalSchema = DEFAULT_SCHEMA,
    ):
        self.config = config
        self.verifier = verifier
        self.ledger = ledger if ledger is not None else ContributionLedger()
        self.schema = schema

    def _verify_proof(self, journal: bytes, seal: bytes) -> None:
        try:
            accepted = self.verifier.verify(journal, self.config.program_id, seal)
        except Exception as e:
            raise ZKProofVerificationFailed(f"verifier error: {e}") from e
        if not accepted:
            raise ZKProofVerificationFailed("seal rejected for journal digest and program id")

    def submit_contribution(
        self,
        journal: bytes,
        seal: bytes,
        block_height: int | None = None,
    ) -> LedgerEntry:
        """Verify a journal/seal pair and record it.

        Raises:
            CodecError: journal bytes do not match the schema.
            RejectedJournal: a field check failed (the subclass names which).
            ZKProofVerificationFailed: the verifier rejected or errored.
        """
        journal = bytes(journal)
        seal = bytes(seal)
        digest = journal_digest(journal).hex()[:16]

        try:
            record = decode(journal, self.schema)

            result = validate(record, self.config)
            if not result:
                raise result.to_exception()

            self._verify_proof(journal, seal)
        except LedgerError as e:
            bt.logging.warning({"submission_rejected": {
                "error": e.code,
                "detail": e.detail,
                "journal_digest": digest,
            }})
            raise

        entry = self.ledger.record(
            repository=record.repository,
            username=record.username,
            contributions=record.contributions,
            timestamp=record.timestamp,
            url=record.url,
            block_height=block_height,
        )
        bt.logging.info({"submission_accepted": {
            "repository": record.repository,
            "username": record.username,
            "contributions": record.contributions,
            "journal_digest": digest,
        }})
        return entry


__all__ = ["ContributionVerifier"]
