"""Proof journal verification and GitHub contribution ledger.

A submission carries the canonical journal bytes of a zero-knowledge proof
over an attested GitHub GraphQL exchange, plus the opaque proof seal. The
journal is decoded, its fields checked against the configured notary,
queries hash, URL and bounds, the seal is checked by an external verifier,
and only then is the contribution count recorded in the ledger.
"""

__version__ = "0.3.0"
