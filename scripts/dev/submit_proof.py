"""Submit a compressed web proof to a running ledger service.

Reads the compression service's JSON response ({zkProof, publicOutputs} or
{success, data: {...}}), encodes the journal and posts it with the seal.

Usage:
    GHCONTRIB_LEDGER_URL="http://127.0.0.1:8300" \
      uv run python scripts/dev/submit_proof.py ./proof.json [--mock-seal] [--schema full]

--mock-seal replaces the proof's seal with one the mock verifier accepts
(needs ZK_PROVER_GUEST_ID), for local runs against --verifier.kind mock.
"""

import argparse
import asyncio
import json
import os
import sys

# Ensure project root on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))


async def main() -> None:
    import bittensor as bt
    from pydantic import TypeAdapter

    from ghcontrib.errors import LedgerError
    from ghcontrib.journal import (
        JournalSchema,
        encode,
        normalize_proof_payload,
        normalize_seal,
        record_from_public_outputs,
    )
    from ghcontrib.journal.models import Bytes32
    from ghcontrib.server.http_client import LedgerClient
    from ghcontrib.verifier.mock import MockVerifier

    parser = argparse.ArgumentParser(description="Submit a proof to the ledger")
    parser.add_argument("proof_file")
    parser.add_argument("--username", default="", help="Fallback username if the proof lacks one")
    parser.add_argument("--schema", default=JournalSchema.FULL.value, choices=[s.value for s in JournalSchema])
    parser.add_argument("--mock-seal", action="store_true")
    args = parser.parse_args()

    ledger_url = os.environ.get("GHCONTRIB_LEDGER_URL", "http://127.0.0.1:8300")

    with open(args.proof_file) as f:
        payload = normalize_proof_payload(json.load(f))

    record = record_from_public_outputs(payload.public_outputs, fallback_username=args.username)
    journal = encode(record, JournalSchema(args.schema))

    if args.mock_seal:
        guest_id = os.environ.get("ZK_PROVER_GUEST_ID")
        if not guest_id:
            print("ERROR: ZK_PROVER_GUEST_ID not set")
            sys.exit(1)
        program_id = TypeAdapter(Bytes32).validate_python(guest_id)
        seal = MockVerifier().seal_for(journal, program_id)
    else:
        seal = normalize_seal(payload.zk_proof)

    bt.logging.info({
        "submit_proof": {
            "repository": record.repository,
            "username": record.username,
            "contributions": record.contributions,
            "url": record.url,
            "journal_bytes": len(journal),
            "seal_bytes": len(seal),
        }
    })

    client = LedgerClient(base_url=ledger_url)
    try:
        entry = await client.submit(journal, seal)
    except LedgerError as e:
        bt.logging.error({"submit_proof": {"rejected": e.code, "detail": e.detail}})
        sys.exit(1)
    finally:
        await client.close()

    bt.logging.info({
        "submit_proof": {
            "status": "recorded",
            "latest_contributions": entry.latest_contributions,
            "history": len(entry.history),
        }
    })


if __name__ == "__main__":
    asyncio.run(main())
