"""Canonical head/tail encoding of the proof journal.

Fixed-width fields (bytes32, uint256) sit inline in the head, one 32-byte
word each. Every string is a head word holding the byte offset of its tail
block; a tail block is a 32-byte big-endian length followed by the UTF-8
bytes, zero-padded to a word boundary. Tail blocks follow the head in
declaration order.

The proof is bound to these exact bytes, so decode only accepts input that
re-encodes byte-for-byte to itself.

Error classes: an offset that cannot be an offset at all (2**64 or more,
misaligned, or inside the head) is Malformed. An aligned tail offset, or a
string length, that reaches past the end of the input is Truncated, since a
journal cut short looks exactly like that.
"""

from __future__ import annotations

import hashlib

from ghcontrib.errors import MalformedJournal, TruncatedJournal

from .models import DEFAULT_SCHEMA, JournalRecord, JournalSchema

WORD = 32
_MAX_OFFSET = 2**64


def _word(value: int) -> bytes:
    return value.to_bytes(WORD, "big")


def _pad(length: int) -> int:
    return -length % WORD


def _check_representable(record: JournalRecord, schema: JournalSchema) -> None:
    """Refuse to silently drop fields the layout cannot carry."""
    carried = set(schema.fields)
    for name in ("method", "repository"):
        if name not in carried and getattr(record, name):
            raise ValueError(
                f"schema {schema.value!r} has no {name!r} field; "
                f"cannot encode {name}={getattr(record, name)!r}"
            )


def encode(record: JournalRecord, schema: JournalSchema = DEFAULT_SCHEMA) -> bytes:
    """Encode a record to canonical journal bytes. Deterministic."""
    _check_representable(record, schema)
    layout = schema.layout

    head: list[bytes] = []
    tail: list[bytes] = []
    tail_offset = WORD * len(layout)

    for name, abi_type in layout:
        value = getattr(record, name)
        if abi_type == "bytes32":
            head.append(value)
        elif abi_type == "uint256":
            head.append(_word(value))
        else:
            raw = value.encode("utf-8")
            block = _word(len(raw)) + raw + b"\x00" * _pad(len(raw))
            head.append(_word(tail_offset))
            tail.append(block)
            tail_offset += len(block)

    return b"".join(head) + b"".join(tail)


def _read_string(data: bytes, offset: int, head_size: int, name: str) -> str:
    if offset >= _MAX_OFFSET:
        raise MalformedJournal(f"{name}: offset {offset} out of range")
    if offset % WORD or offset < head_size:
        raise MalformedJournal(f"{name}: offset {offset} does not point into the tail")
    if offset + WORD > len(data):
        raise TruncatedJournal(
            f"{name}: length word at {offset} past end of {len(data)} bytes"
        )

    length = int.from_bytes(data[offset:offset + WORD], "big")
    start = offset + WORD
    if start + length > len(data):
        raise TruncatedJournal(
            f"{name}: {length} bytes at {start} past end of {len(data)} bytes"
        )

    try:
        return data[start:start + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedJournal(f"{name}: not valid UTF-8 ({e.reason})") from None


def decode(data: bytes, schema: JournalSchema = DEFAULT_SCHEMA) -> JournalRecord:
    """Decode canonical journal bytes.

    Raises:
        TruncatedJournal: the head, an aligned tail offset, or a string body
            runs past the input.
        MalformedJournal: bad offsets, bad UTF-8, trailing bytes, non-zero
            padding, or any other deviation from the canonical layout.
    """
    data = bytes(data)
    layout = schema.layout
    head_size = WORD * len(layout)
    if len(data) < head_size:
        raise TruncatedJournal(
            f"schema {schema.value!r} needs a {head_size}-byte head, got {len(data)} bytes"
        )

    values: dict[str, object] = {}
    for i, (name, abi_type) in enumerate(layout):
        word = data[i * WORD:(i + 1) * WORD]
        if abi_type == "bytes32":
            values[name] = word
        elif abi_type == "uint256":
            values[name] = int.from_bytes(word, "big")
        else:
            values[name] = _read_string(data, int.from_bytes(word, "big"), head_size, name)

    record = JournalRecord(**values)

    if encode(record, schema) != data:
        raise MalformedJournal(
            f"non-canonical encoding for schema {schema.value!r} "
            f"(offsets out of order, non-zero padding or trailing bytes)"
        )
    return record


def journal_digest(data: bytes) -> bytes:
    """SHA-256 of the journal bytes, as handed to the external verifier."""
    return hashlib.sha256(data).digest()


__all__ = ["WORD", "decode", "encode", "journal_digest"]
