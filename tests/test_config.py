"""Tests for ledger configuration loading."""

import argparse

import pytest

from ghcontrib.config import (
    DEFAULT_EXPECTED_URL,
    UrlMatchMode,
    ValidationConfig,
    add_args,
    load_settings,
)
from ghcontrib.journal.models import JournalSchema


def _env(**overrides) -> dict:
    env = {
        "NOTARY_KEY_FINGERPRINT": "0x" + "11" * 32,
        "QUERIES_HASH": "0x" + "22" * 32,
        "ZK_PROVER_GUEST_ID": "0x" + "33" * 32,
    }
    env.update(overrides)
    return env


class TestValidationConfig:

    def test_from_env_defaults(self):
        config = ValidationConfig.from_env(_env())
        assert config.expected_notary_fingerprint == b"\x11" * 32
        assert config.expected_queries_hash == b"\x22" * 32
        assert config.program_id == b"\x33" * 32
        assert config.expected_url == DEFAULT_EXPECTED_URL
        assert config.url_match == UrlMatchMode.EXACT
        assert (config.min_contributions, config.max_contributions) == (1, 1_000_000)

    def test_from_env_overrides(self):
        config = ValidationConfig.from_env(_env(
            EXPECTED_URL="https://api.github.com",
            GHCONTRIB_URL_MATCH="contains",
            GHCONTRIB_MIN_CONTRIBUTIONS="5",
            GHCONTRIB_MAX_CONTRIBUTIONS="10",
        ))
        assert config.url_match == UrlMatchMode.CONTAINS
        assert config.min_contributions == 5
        assert config.max_contributions == 10

    @pytest.mark.parametrize("missing", ["NOTARY_KEY_FINGERPRINT", "QUERIES_HASH", "ZK_PROVER_GUEST_ID"])
    def test_missing_required_variable(self, missing):
        env = _env()
        del env[missing]
        with pytest.raises(ValueError, match=missing):
            ValidationConfig.from_env(env)

    def test_zero_fingerprint_rejected(self):
        with pytest.raises(ValueError, match="must not be zero"):
            ValidationConfig.from_env(_env(NOTARY_KEY_FINGERPRINT="0x" + "00" * 32))

    def test_short_hash_rejected(self):
        with pytest.raises(ValueError):
            ValidationConfig.from_env(_env(QUERIES_HASH="0x1234"))

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError, match="min_contributions"):
            ValidationConfig.from_env(_env(
                GHCONTRIB_MIN_CONTRIBUTIONS="10",
                GHCONTRIB_MAX_CONTRIBUTIONS="5",
            ))

    def test_config_is_immutable(self, validation_config):
        with pytest.raises(Exception):
            validation_config.expected_url = "https://example.com"


class TestLedgerSettings:

    def _args(self, *argv):
        parser = argparse.ArgumentParser()
        add_args(parser)
        return parser.parse_args(list(argv))

    def test_cli_defaults(self):
        settings = load_settings(self._args(), environ={})
        assert settings.port == 8300
        assert settings.store_kind == "filesystem"
        assert settings.verifier_kind == "mock"
        assert settings.journal_schema == JournalSchema.FULL

    def test_cli_values(self):
        args = self._args("--server.port", "9000", "--store.kind", "memory", "--journal.schema", "repository")
        settings = load_settings(args, environ={})
        assert settings.port == 9000
        assert settings.store_kind == "memory"
        assert settings.journal_schema == JournalSchema.REPOSITORY

    def test_env_overrides_cli(self):
        args = self._args("--server.port", "9000")
        settings = load_settings(args, environ={"GHCONTRIB_SERVER__PORT": "9100"})
        assert settings.port == 9100

    def test_http_verifier_requires_url(self):
        with pytest.raises(ValueError, match="VERIFIER__URL"):
            load_settings(self._args("--verifier.kind", "http"), environ={})

    def test_sql_store_requires_url(self):
        with pytest.raises(ValueError, match="DATABASE_URL"):
            load_settings(self._args("--store.kind", "sql"), environ={})

    def test_parser_accepts_bittensor_logging_flags(self):
        import bittensor as bt

        parser = argparse.ArgumentParser()
        bt.logging.add_args(parser)
        add_args(parser)
        args = parser.parse_args(["--logging.debug", "--server.port", "9001"])
        assert load_settings(args, environ={}).port == 9001
