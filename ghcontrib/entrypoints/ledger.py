"""Ledger service entrypoint.

Builds the store, the verifier adapter and the submission pipeline from
environment/CLI settings, then serves the HTTP surface until signalled.
"""

import argparse
import asyncio
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv

from ghcontrib.config import LedgerSettings, ValidationConfig, add_args, load_settings


def build_store(settings: LedgerSettings):
    if settings.store_kind == "memory":
        from ghcontrib.ledger.store.memory import MemoryStore
        return MemoryStore()
    if settings.store_kind == "sql":
        from ghcontrib.ledger.store.sql import SqlStore
        return SqlStore(settings.database_url)
    from ghcontrib.ledger.store.filesystem import FilesystemStore
    return FilesystemStore(data_dir=settings.data_dir)


def build_verifier(settings: LedgerSettings):
    if settings.verifier_kind == "http":
        from ghcontrib.verifier.http_client import HTTPVerifierAdapter
        return HTTPVerifierAdapter(base_url=settings.verifier_url)
    if settings.verifier_kind == "keypair":
        from ghcontrib.verifier.keypair import KeypairSealVerifier
        return KeypairSealVerifier(prover_hotkey=settings.prover_hotkey)
    from ghcontrib.verifier.mock import MockVerifier
    bt.logging.warning({"ledger": "using mock verifier, seals are forgeable"})
    return MockVerifier()


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("GHCONTRIB_TEST_MODE") != "true":
        load_dotenv()

    parser = argparse.ArgumentParser(description="GitHub contribution ledger")
    bt.logging.add_args(parser)
    add_args(parser)
    args = parser.parse_args()

    try:
        validation = ValidationConfig.from_env()
        settings = load_settings(args)
    except ValueError as e:
        bt.logging.error(f"invalid configuration: {e}")
        sys.exit(1)

    bt.logging.info({
        "ledger_config": {
            "expected_url": validation.expected_url,
            "url_match": validation.url_match.value,
            "bounds": [validation.min_contributions, validation.max_contributions],
            "program_id": "0x" + validation.program_id.hex(),
            "store": settings.store_kind,
            "verifier": settings.verifier_kind,
            "schema": settings.journal_schema.value,
        }
    })

    from ghcontrib.ledger.ledger import ContributionLedger
    from ghcontrib.server.http_server import LedgerHTTPServer
    from ghcontrib.submission import ContributionVerifier

    ledger = ContributionLedger(store=build_store(settings))
    service = ContributionVerifier(
        config=validation,
        verifier=build_verifier(settings),
        ledger=ledger,
        schema=settings.journal_schema,
    )
    server = LedgerHTTPServer(service=service, host=settings.host, port=settings.port)

    loop = asyncio.new_event_loop()
    stopped = asyncio.Event()

    def _signal_handler(sig, frame):
        bt.logging.info({"ledger": "shutdown_signal_received"})
        loop.call_soon_threadsafe(stopped.set)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    async def _serve() -> None:
        await server.start()
        await stopped.wait()

    try:
        loop.run_until_complete(_serve())
    except KeyboardInterrupt:
        bt.logging.info({"ledger": "keyboard_interrupt"})
    finally:
        loop.run_until_complete(server.stop())
        loop.close()
        bt.logging.info({"ledger": "stopped"})


if __name__ == "__main__":
    main()
