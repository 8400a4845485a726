"""Tests for building journal records from compression-service output."""

import pytest

from ghcontrib.journal.public_outputs import (
    normalize_proof_payload,
    normalize_seal,
    parse_owner_repo,
    record_from_public_outputs,
)


def _public_outputs(**overrides) -> dict:
    defaults = {
        "notaryKeyFingerprint": "11" * 32,
        "method": "POST",
        "url": "https://api.github.com/graphql",
        "tlsTimestamp": 1_730_000_000,
        "extractionHash": "0x" + "22" * 32,
        "extractedValues": ["vlayer-xyz/vlayer", "testuser", 100],
    }
    defaults.update(overrides)
    return defaults


class TestParseOwnerRepo:

    @pytest.mark.parametrize("value", [
        "https://api.github.com/repos/vlayer-xyz/vlayer/pulls",
        "https://github.com/vlayer-xyz/vlayer",
        "github.com/vlayer-xyz/vlayer.git",
        "vlayer-xyz/vlayer",
        "  vlayer-xyz/vlayer  ",
    ])
    def test_known_shapes(self, value):
        owner, name = parse_owner_repo(value)
        assert owner == "vlayer-xyz"
        assert name.startswith("vlayer")

    def test_no_match(self):
        assert parse_owner_repo("not a repo") == ("", "")
        assert parse_owner_repo("") == ("", "")


class TestNormalizePayload:

    def test_flat_shape(self):
        payload = normalize_proof_payload({"zkProof": "0x1234", "publicOutputs": {"a": 1}})
        assert payload.zk_proof == "0x1234"
        assert payload.public_outputs == {"a": 1}

    def test_wrapped_shape(self):
        payload = normalize_proof_payload({
            "success": True,
            "data": {"zkProof": {"seal": "ab"}, "publicOutputs": {"a": 1}},
        })
        assert payload.zk_proof == {"seal": "ab"}

    @pytest.mark.parametrize("data", [None, [], {}, {"zkProof": "0x12"}, {"success": False, "data": {}}])
    def test_rejects_other_shapes(self, data):
        with pytest.raises(ValueError):
            normalize_proof_payload(data)


class TestNormalizeSeal:

    def test_hex_string(self):
        assert normalize_seal("0x1234") == b"\x12\x34"
        assert normalize_seal("abcd") == b"\xab\xcd"

    def test_seal_object(self):
        assert normalize_seal({"seal": "0xff00"}) == b"\xff\x00"

    def test_arbitrary_json(self):
        assert normalize_seal({"proof": [1, 2]}) == b'{"proof":[1,2]}'


class TestRecordFromPublicOutputs:

    def test_three_values(self):
        record = record_from_public_outputs(_public_outputs())
        assert record.notary_fingerprint == b"\x11" * 32
        assert record.queries_hash == b"\x22" * 32
        assert record.method == "POST"
        assert record.timestamp == 1_730_000_000
        assert record.repository == "vlayer-xyz/vlayer"
        assert record.username == "testuser"
        assert record.contributions == 100

    def test_alternate_key_names(self):
        po = _public_outputs()
        po["timestamp"] = po.pop("tlsTimestamp")
        po["queriesHash"] = po.pop("extractionHash")
        po["values"] = po.pop("extractedValues")
        record = record_from_public_outputs(po)
        assert record.timestamp == 1_730_000_000
        assert record.queries_hash == b"\x22" * 32

    def test_two_values(self):
        record = record_from_public_outputs(_public_outputs(extractedValues=["alice", "42"]))
        assert record.repository == ""
        assert record.username == "alice"
        assert record.contributions == 42

    def test_fallback_username(self):
        record = record_from_public_outputs(
            _public_outputs(extractedValues=["vlayer-xyz/vlayer", "", 7]),
            fallback_username="bob",
        )
        assert record.username == "bob"

    def test_url_falls_back_to_repository(self):
        record = record_from_public_outputs(_public_outputs(url=""))
        assert record.url == "vlayer-xyz/vlayer"

    @pytest.mark.parametrize("overrides, message", [
        ({"notaryKeyFingerprint": ""}, "notary"),
        ({"extractionHash": None}, "queries hash"),
        ({"tlsTimestamp": None}, "timestamp"),
        ({"extractedValues": ["", "testuser", 1]}, "repository"),
        ({"extractedValues": ["vlayer-xyz/vlayer", "", 1]}, "username"),
        ({"extractedValues": ["vlayer-xyz/vlayer", "testuser", 0]}, "contribution"),
        ({"extractedValues": ["only-one"]}, "extracted values"),
    ])
    def test_missing_or_invalid(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            record_from_public_outputs(_public_outputs(**overrides))

    def test_empty_outputs(self):
        with pytest.raises(ValueError):
            record_from_public_outputs({})
