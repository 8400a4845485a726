"""Tests for the mock proof verifier."""

import pytest

from ghcontrib.journal.codec import encode
from ghcontrib.verifier import MockVerifier, VerifierAdapter
from ghcontrib.verifier.mock import DEFAULT_SELECTOR

PROGRAM_ID = b"\x33" * 32


@pytest.fixture
def journal(make_record):
    return encode(make_record())


class TestMockVerifier:

    def test_satisfies_adapter_protocol(self):
        assert isinstance(MockVerifier(), VerifierAdapter)

    def test_accepts_own_seal(self, journal):
        verifier = MockVerifier()
        seal = verifier.seal_for(journal, PROGRAM_ID)
        assert seal[:4] == DEFAULT_SELECTOR
        assert len(seal) == 36
        assert verifier.verify(journal, PROGRAM_ID, seal)

    def test_rejects_other_journal(self, journal, make_record):
        verifier = MockVerifier()
        seal = verifier.seal_for(journal, PROGRAM_ID)
        other = encode(make_record(contributions=101))
        assert not verifier.verify(other, PROGRAM_ID, seal)

    def test_rejects_other_program_id(self, journal):
        verifier = MockVerifier()
        seal = verifier.seal_for(journal, PROGRAM_ID)
        assert not verifier.verify(journal, b"\x44" * 32, seal)

    def test_rejects_other_selector(self, journal):
        seal = MockVerifier(selector=b"\x01\x02\x03\x04").seal_for(journal, PROGRAM_ID)
        assert not MockVerifier().verify(journal, PROGRAM_ID, seal)

    @pytest.mark.parametrize("seal", [b"", b"\xff\xff\xff\xff", b"\x00" * 36])
    def test_rejects_garbage_seals(self, journal, seal):
        assert not MockVerifier().verify(journal, PROGRAM_ID, seal)

    def test_selector_length_checked(self):
        with pytest.raises(ValueError, match="4 bytes"):
            MockVerifier(selector=b"\xff")
