"""Tests for the canonical journal codec."""

import hashlib

import pytest

from ghcontrib.errors import MalformedJournal, TruncatedJournal
from ghcontrib.journal.codec import WORD, decode, encode, journal_digest
from ghcontrib.journal.models import UINT256_MAX, JournalSchema


def _word(n: int) -> bytes:
    return n.to_bytes(32, "big")


class TestRoundTrip:

    def test_full_schema_roundtrip(self, make_record):
        record = make_record()
        assert decode(encode(record)) == record

    def test_repository_schema_roundtrip(self, make_record):
        record = make_record(method="")
        data = encode(record, JournalSchema.REPOSITORY)
        assert decode(data, JournalSchema.REPOSITORY) == record

    def test_username_schema_roundtrip(self, make_record):
        record = make_record(method="", repository="")
        data = encode(record, JournalSchema.USERNAME)
        assert decode(data, JournalSchema.USERNAME) == record

    def test_empty_and_unicode_strings(self, make_record):
        record = make_record(method="", repository="zażółć/gęślą", username="jaźń" * 20)
        assert decode(encode(record)) == record

    def test_uint256_extremes(self, make_record):
        record = make_record(timestamp=UINT256_MAX, contributions=0)
        assert decode(encode(record)) == record

    def test_encode_is_deterministic(self, make_record):
        assert encode(make_record()) == encode(make_record())

    def test_decoded_record_is_immutable(self, make_record):
        record = decode(encode(make_record()))
        with pytest.raises(Exception):
            record.contributions = 5


class TestLayout:

    def test_head_and_tail_layout(self, make_record):
        data = encode(make_record())
        head = 8 * WORD

        assert data[0:32] == b"\x11" * 32
        assert data[32:64] == _word(head)  # method is the first tail block
        assert data[96:128] == _word(1_730_000_000)
        assert data[128:160] == b"\x22" * 32
        assert data[224:256] == _word(100)

        assert data[head:head + 32] == _word(4)
        assert data[head + 32:head + 36] == b"POST"
        assert data[head + 36:head + 64] == b"\x00" * 28

        # url follows method's single padded word
        assert data[64:96] == _word(head + 64)
        assert len(data) % WORD == 0

    def test_total_length(self, make_record):
        # 8 head words + 4 strings of one length word and one data word each
        assert len(encode(make_record())) == 8 * 32 + 4 * 64

    def test_schema_cannot_carry_method(self, make_record):
        with pytest.raises(ValueError, match="method"):
            encode(make_record(), JournalSchema.REPOSITORY)

    def test_schema_cannot_carry_repository(self, make_record):
        with pytest.raises(ValueError, match="repository"):
            encode(make_record(method=""), JournalSchema.USERNAME)

    def test_digest_is_sha256_of_bytes(self, make_record):
        data = encode(make_record())
        assert journal_digest(data) == hashlib.sha256(data).digest()


class TestDecodeErrors:

    def test_short_head_is_truncated(self, make_record):
        data = encode(make_record())
        with pytest.raises(TruncatedJournal):
            decode(data[:200])

    def test_empty_input_is_truncated(self):
        with pytest.raises(TruncatedJournal):
            decode(b"")

    def test_cut_tail_is_truncated(self, make_record):
        data = encode(make_record())
        with pytest.raises(TruncatedJournal):
            decode(data[:-32])

    def test_missing_length_word_is_truncated(self, make_record):
        data = encode(make_record())
        # username block starts at 8*32 + 3*64 = 448; drop it entirely
        with pytest.raises(TruncatedJournal):
            decode(data[:448])

    def test_offset_into_head_is_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        data[32:64] = _word(0)
        with pytest.raises(MalformedJournal):
            decode(bytes(data))

    def test_misaligned_offset_is_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        data[32:64] = _word(8 * 32 + 1)
        with pytest.raises(MalformedJournal):
            decode(bytes(data))

    def test_huge_offset_is_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        data[32:64] = b"\xff" * 32
        with pytest.raises(MalformedJournal):
            decode(bytes(data))

    def test_trailing_bytes_are_malformed(self, make_record):
        data = encode(make_record()) + b"\x00" * 32
        with pytest.raises(MalformedJournal):
            decode(data)

    def test_nonzero_padding_is_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        data[8 * 32 + 36] = 1
        with pytest.raises(MalformedJournal):
            decode(bytes(data))

    def test_invalid_utf8_is_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        data[8 * 32 + 32:8 * 32 + 36] = b"\xff\xfe\xfd\xfc"
        with pytest.raises(MalformedJournal, match="UTF-8"):
            decode(bytes(data))

    def test_swapped_offsets_are_malformed(self, make_record):
        data = bytearray(encode(make_record()))
        method_offset, url_offset = bytes(data[32:64]), bytes(data[64:96])
        data[32:64], data[64:96] = url_offset, method_offset
        with pytest.raises(MalformedJournal):
            decode(bytes(data))

    def test_wrong_schema_is_rejected(self, make_record):
        data = encode(make_record())
        with pytest.raises(MalformedJournal):
            decode(data, JournalSchema.USERNAME)

    def test_aligned_offset_past_end_is_truncated(self, make_record):
        data = bytearray(encode(make_record()))
        data[32:64] = _word(len(data) + WORD)
        with pytest.raises(TruncatedJournal):
            decode(bytes(data))
