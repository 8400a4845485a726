"""Pydantic models for the contribution ledger."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ghcontrib.journal.models import Uint256


class ContributionRecord(BaseModel):
    """One verified contribution fact, as appended to history."""

    model_config = ConfigDict(frozen=True)

    repository: str
    username: str
    contributions: Uint256
    timestamp: Uint256 = Field(description="Attested exchange time from the journal")
    block_height: int = Field(ge=0, description="Ledger height the record was committed at")
    url: str


class LedgerEntry(BaseModel):
    """Per (repository, username) state: latest proven count plus history."""

    repository: str
    username: str
    latest_contributions: Uint256
    history: list[ContributionRecord] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.repository, self.username)


class ContributionVerified(BaseModel):
    """Event emitted exactly once per successful record."""

    model_config = ConfigDict(frozen=True)

    username: str
    contributions: Uint256
    repository: str
    url: str
    timestamp: Uint256
    block_height: int

    @classmethod
    def from_record(cls, record: ContributionRecord) -> ContributionVerified:
        return cls(
            username=record.username,
            contributions=record.contributions,
            repository=record.repository,
            url=record.url,
            timestamp=record.timestamp,
            block_height=record.block_height,
        )


__all__ = ["ContributionRecord", "ContributionVerified", "LedgerEntry"]
