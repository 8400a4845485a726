"""Build journal records from the proof-compression service's output.

The compression service answers with ``{zkProof, publicOutputs}`` (sometimes
wrapped as ``{success, data: {...}}``). Key names drifted between service
versions, so both spellings are accepted here.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel

from .models import JournalRecord

_REPO_FROM_API = re.compile(r"/repos/([^/]+)/([^/]+)\b", re.IGNORECASE)
_REPO_FROM_GIT = re.compile(r"github\.com/([^/]+)/([^/]+)\b", re.IGNORECASE)
_REPO_PLAIN = re.compile(r"^([^/]+)/([^/]+)$")


class ProofPayload(BaseModel):
    """Normalized compression-service response."""

    zk_proof: Any
    public_outputs: dict[str, Any]


def parse_owner_repo(value: str) -> tuple[str, str]:
    """Extract (owner, name) from an API URL, a github.com URL or "owner/name".

    Returns ("", "") when nothing matches.
    """
    text = (value or "").strip()
    for pattern in (_REPO_FROM_API, _REPO_FROM_GIT, _REPO_PLAIN):
        match = pattern.search(text)
        if match:
            return match.group(1).strip(), match.group(2).strip()
    return "", ""


def normalize_proof_payload(data: Any) -> ProofPayload:
    """Accept the flat or the wrapped response shape."""
    if isinstance(data, dict):
        inner = data.get("data")
        if data.get("success") and isinstance(inner, dict):
            data = inner
        if data.get("zkProof") and data.get("publicOutputs"):
            return ProofPayload(
                zk_proof=data["zkProof"],
                public_outputs=data["publicOutputs"],
            )
    raise ValueError(
        "expected {zkProof, publicOutputs} or {success, data: {zkProof, publicOutputs}}"
    )


def _hex_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value[:2].lower() == "0x" else value)


def normalize_seal(zk_proof: Any) -> bytes:
    """Seal bytes from a hex string, a ``{seal: hex}`` object, or raw JSON."""
    if isinstance(zk_proof, str):
        return _hex_bytes(zk_proof)
    if isinstance(zk_proof, dict) and zk_proof.get("seal"):
        return _hex_bytes(str(zk_proof["seal"]))
    return json.dumps(zk_proof, separators=(",", ":")).encode()


def _first(outputs: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if outputs.get(key) is not None:
            return outputs[key]
    return None


def record_from_public_outputs(
    public_outputs: dict[str, Any],
    fallback_username: str = "",
) -> JournalRecord:
    """Build a JournalRecord from ``publicOutputs``.

    Extracted values come either as ``[repository, username, contributions]``
    or, from older extraction configs, as ``[username, contributions]``.
    """
    if not public_outputs:
        raise ValueError("missing public outputs")

    notary = public_outputs.get("notaryKeyFingerprint")
    if not notary:
        raise ValueError("missing notary key fingerprint")

    queries_hash = _first(public_outputs, "extractionHash", "queriesHash")
    if not queries_hash:
        raise ValueError("missing queries hash")

    timestamp = _first(public_outputs, "tlsTimestamp", "timestamp")
    if timestamp is None:
        raise ValueError("missing timestamp")

    values = _first(public_outputs, "extractedValues", "values") or []
    if len(values) >= 3:
        repository = str(values[0] or "")
        if not repository:
            raise ValueError("missing repository name in extracted values")
        username = str(values[1] or fallback_username)
        raw_count = values[2]
    elif len(values) == 2:
        repository = ""
        username = str(values[0] or fallback_username)
        raw_count = values[1]
    else:
        raise ValueError(f"expected 2 or 3 extracted values, got {len(values)}")

    if not username:
        raise ValueError("missing username in extracted values")

    contributions = int(raw_count)
    if contributions <= 0:
        raise ValueError(f"invalid contribution count extracted from proof: {raw_count!r}")

    url = public_outputs.get("url")
    if not isinstance(url, str) or not url:
        url = repository

    return JournalRecord(
        notary_fingerprint=notary,
        method=str(public_outputs.get("method") or ""),
        url=url,
        timestamp=int(timestamp),
        queries_hash=queries_hash,
        repository=repository,
        username=username,
        contributions=contributions,
    )


__all__ = [
    "ProofPayload",
    "normalize_proof_payload",
    "normalize_seal",
    "parse_owner_repo",
    "record_from_public_outputs",
]
