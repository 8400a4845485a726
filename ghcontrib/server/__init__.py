"""HTTP server and client for the ledger service."""
