"""HTTP surface for contribution submissions and ledger reads.

Runs as an async task in the ledger process. Routes:
  POST /contributions                               - submit {journal, seal} (0x hex)
  GET  /contributions/latest?repository=R&username=U - entry for one key (R may be empty)
  GET  /contributions/history?username=U             - records across repositories
  GET  /contributions/count?username=U               - number of records
  GET  /stats                                        - global counters

Submissions are applied one at a time, in arrival order at the lock. Reads run
in worker threads without that lock; each store answers them from a state
that contains either all or none of a commit.
"""

from __future__ import annotations

import asyncio
import json

import bittensor as bt
from aiohttp import web

from ghcontrib.errors import CodecError, LedgerError, LedgerStoreError
from ghcontrib.submission import ContributionVerifier


def _parse_hex(value: object, field: str) -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a hex string")
    text = value[2:] if value[:2].lower() == "0x" else value
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ValueError(f"{field} is not valid hex") from None


def _error(code: str, status: int, detail: str = "") -> web.Response:
    return web.json_response({"error": code, "detail": detail}, status=status)


class LedgerHTTPServer:
    """Lightweight async HTTP server in front of a ContributionVerifier."""

    def __init__(
        self,
        service: ContributionVerifier,
        host: str = "0.0.0.0",
        port: int = 8300,
    ):
        self.service = service
        self.ledger = service.ledger
        self.host = host
        self.port = port
        self._submit_lock = asyncio.Lock()
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/contributions", self._handle_submit)
        app.router.add_get("/contributions/latest", self._handle_latest)
        app.router.add_get("/contributions/history", self._handle_history)
        app.router.add_get("/contributions/count", self._handle_count)
        app.router.add_get("/stats", self._handle_stats)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self._build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"ledger_http": {"status": "started", "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            bt.logging.info({"ledger_http": "stopped"})

    # -- Submission --

    async def _handle_submit(self, request: web.Request) -> web.Response:
        try:
            body = await request.json()
            journal = _parse_hex(body.get("journal"), "journal")
            seal = _parse_hex(body.get("seal", ""), "seal")
        except (ValueError, AttributeError) as e:
            bt.logging.warning({"ledger_request": {"endpoint": "contributions", "status": 400, "error": "invalid_body"}})
            return _error("invalid_body", 400, str(e))

        try:
            async with self._submit_lock:
                entry = await asyncio.to_thread(self.service.submit_contribution, journal, seal)
        except CodecError as e:
            return _error(e.code, 400, e.detail)
        except LedgerStoreError as e:
            bt.logging.error({"ledger_request": {"endpoint": "contributions", "status": 500, "error": e.detail}})
            return _error(e.code, 500, e.detail)
        except LedgerError as e:
            return _error(e.code, 422, e.detail)

        bt.logging.info({"ledger_request": {"endpoint": "contributions", "status": 200, "username": entry.username}})
        return web.json_response({"status": "ok", "entry": entry.model_dump(mode="json")})

    # -- Reads --

    async def _read(self, endpoint: str, fn, *args):
        """Run a ledger read off the event loop. Stores guard their own state."""
        try:
            return await asyncio.to_thread(fn, *args)
        except LedgerStoreError as e:
            bt.logging.error({"ledger_request": {"endpoint": endpoint, "status": 500, "error": e.detail}})
            raise web.HTTPInternalServerError(
                text=json.dumps({"error": e.code, "detail": e.detail}),
                content_type="application/json",
            ) from e

    async def _handle_latest(self, request: web.Request) -> web.Response:
        # An empty repository is a real key (username-only journals).
        if "repository" not in request.query or not request.query.get("username"):
            return _error("invalid_query", 400, "repository and username are required")

        entry = await self._read("latest", self.ledger.entry, request.query["repository"], request.query["username"])
        if entry is None:
            return _error("not_found", 404)
        return web.json_response(entry.model_dump(mode="json"))

    async def _handle_history(self, request: web.Request) -> web.Response:
        username = request.query.get("username", "")
        if not username:
            return _error("invalid_query", 400, "username is required")

        records = await self._read("history", self.ledger.history, username)
        return web.json_response({
            "username": username,
            "records": [r.model_dump(mode="json") for r in records],
        })

    async def _handle_count(self, request: web.Request) -> web.Response:
        username = request.query.get("username", "")
        if not username:
            return _error("invalid_query", 400, "username is required")
        count = await self._read("count", self.ledger.count, username)
        return web.json_response({"username": username, "count": count})

    async def _handle_stats(self, request: web.Request) -> web.Response:
        total = await self._read("stats", self.ledger.total_verified_contributions)
        return web.json_response({"total_verified_contributions": total})


__all__ = ["LedgerHTTPServer"]
