"""SQLAlchemy-backed LedgerStore.

Tables:
  ledger_entry         one row per (repository, username), latest count
  contribution_record  append-only history, ordered by id
  ledger_state         singleton row (id=1) with the global counters

uint256 values are stored as decimal text so no backend truncates them.
Each commit runs in a single transaction, and an entry is read with a single
statement. Database failures surface as LedgerStoreError.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import bittensor as bt
from sqlalchemy import BigInteger, Integer, String, and_, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from ghcontrib.errors import LedgerStoreError
from ghcontrib.ledger.models import ContributionRecord, LedgerEntry

_UINT256_TEXT = 78  # len(str(2**256 - 1))


class Base(DeclarativeBase):
    pass


class LedgerEntryRow(Base):
    """Latest verified count per (repository, username)."""

    __tablename__ = "ledger_entry"

    repository: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, primary_key=True)
    latest_contributions: Mapped[str] = mapped_column(
        String(_UINT256_TEXT),
        nullable=False,
        comment="Most recently proven count (uint256 as decimal text)",
    )
    updated_height: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block height of the last overwrite",
    )


class ContributionRecordRow(Base):
    """Append-only history of verified contributions."""

    __tablename__ = "contribution_record"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    repository: Mapped[str] = mapped_column(String, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String, nullable=False, index=True)
    contributions: Mapped[str] = mapped_column(String(_UINT256_TEXT), nullable=False)
    timestamp: Mapped[str] = mapped_column(
        String(_UINT256_TEXT),
        nullable=False,
        comment="Attested exchange time (uint256 as decimal text)",
    )
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)


class LedgerStateRow(Base):
    """Singleton table with global ledger counters.

    Always contains exactly one row (id=1).
    """

    __tablename__ = "ledger_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    total_verified: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        comment="Number of committed records",
    )
    last_block_height: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


def _to_model(row: ContributionRecordRow) -> ContributionRecord:
    return ContributionRecord(
        repository=row.repository,
        username=row.username,
        contributions=int(row.contributions),
        timestamp=int(row.timestamp),
        block_height=row.block_height,
        url=row.url,
    )


class SqlStore:
    """Relational LedgerStore implementation."""

    def __init__(self, database_url: str, **engine_kwargs: Any):
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, or every session sees an empty database.
            engine_kwargs.setdefault("poolclass", StaticPool)
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        self.engine = create_engine(database_url, **engine_kwargs)

        with self._session("init", write=True) as session:
            Base.metadata.create_all(session.connection())
            if session.get(LedgerStateRow, 1) is None:
                session.add(LedgerStateRow(id=1, total_verified=0, last_block_height=0))

        bt.logging.info({"ledger_store": {"event": "sql_ready", "url": self.engine.url.render_as_string(hide_password=True)}})

    def close(self) -> None:
        self.engine.dispose()

    # -- Helpers --

    @contextmanager
    def _session(self, action: str, write: bool = False) -> Iterator[Session]:
        """Open a session (in a transaction if ``write``), mapping DB errors."""
        try:
            with Session(self.engine) as session:
                if write:
                    with session.begin():
                        yield session
                else:
                    yield session
        except SQLAlchemyError as e:
            bt.logging.error({"ledger_store": {"event": "sql_error", "action": action, "error": str(e)}})
            raise LedgerStoreError(f"{action} failed: {e}") from e

    def _state(self, session: Session) -> LedgerStateRow:
        state = session.get(LedgerStateRow, 1)
        if state is None:
            raise LedgerStoreError("ledger_state singleton missing")
        return state

    def _entry(self, session: Session, repository: str, username: str) -> LedgerEntry | None:
        rows = session.execute(
            select(ContributionRecordRow, LedgerEntryRow.latest_contributions)
            .join(
                LedgerEntryRow,
                and_(
                    LedgerEntryRow.repository == ContributionRecordRow.repository,
                    LedgerEntryRow.username == ContributionRecordRow.username,
                ),
            )
            .where(
                ContributionRecordRow.repository == repository,
                ContributionRecordRow.username == username,
            )
            .order_by(ContributionRecordRow.id)
        ).all()
        if not rows:
            return None
        return LedgerEntry(
            repository=repository,
            username=username,
            latest_contributions=int(rows[-1][1]),
            history=[_to_model(record) for record, _ in rows],
        )

    # -- LedgerStore interface --

    def commit(self, record: ContributionRecord) -> LedgerEntry:
        with self._session("commit", write=True) as session:
            state = session.get(LedgerStateRow, 1, with_for_update=True)
            if state is None:
                raise LedgerStoreError("ledger_state singleton missing")

            row = session.get(LedgerEntryRow, (record.repository, record.username))
            if row is None:
                row = LedgerEntryRow(repository=record.repository, username=record.username)
                session.add(row)
            row.latest_contributions = str(record.contributions)
            row.updated_height = record.block_height

            session.add(ContributionRecordRow(
                repository=record.repository,
                username=record.username,
                contributions=str(record.contributions),
                timestamp=str(record.timestamp),
                block_height=record.block_height,
                url=record.url,
            ))
            state.total_verified += 1
            state.last_block_height = record.block_height

            session.flush()
            entry = self._entry(session, record.repository, record.username)

        if entry is None:
            raise LedgerStoreError(f"entry {(record.repository, record.username)} missing after commit")
        return entry

    def get_entry(self, repository: str, username: str) -> LedgerEntry | None:
        with self._session("get_entry") as session:
            return self._entry(session, repository, username)

    def history(self, username: str) -> list[ContributionRecord]:
        with self._session("history") as session:
            rows = session.scalars(
                select(ContributionRecordRow)
                .where(ContributionRecordRow.username == username)
                .order_by(ContributionRecordRow.id)
            ).all()
            return [_to_model(r) for r in rows]

    def total_verified(self) -> int:
        with self._session("total_verified") as session:
            return self._state(session).total_verified

    def last_block_height(self) -> int:
        with self._session("last_block_height") as session:
            return self._state(session).last_block_height


__all__ = ["Base", "SqlStore"]
