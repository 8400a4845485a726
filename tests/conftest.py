"""Shared fixtures: the local-test notary/queries/program ids and a record factory."""

import pytest

from ghcontrib.config import ValidationConfig
from ghcontrib.journal.models import JournalRecord

NOTARY_FP = b"\x11" * 32
QUERIES_HASH = b"\x22" * 32
PROGRAM_ID = b"\x33" * 32
GRAPHQL_URL = "https://api.github.com/graphql"


@pytest.fixture
def make_record():
    def _make(**overrides) -> JournalRecord:
        defaults = dict(
            notary_fingerprint=NOTARY_FP,
            method="POST",
            url=GRAPHQL_URL,
            timestamp=1_730_000_000,
            queries_hash=QUERIES_HASH,
            repository="vlayer-xyz/vlayer",
            username="testuser",
            contributions=100,
        )
        defaults.update(overrides)
        return JournalRecord(**defaults)
    return _make


@pytest.fixture
def validation_config() -> ValidationConfig:
    return ValidationConfig(
        expected_notary_fingerprint=NOTARY_FP,
        expected_queries_hash=QUERIES_HASH,
        expected_url=GRAPHQL_URL,
        min_contributions=1,
        max_contributions=1_000_000,
        program_id=PROGRAM_ID,
    )
