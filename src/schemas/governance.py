"""
$SWAP governance models: distribution pools and proposals.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.schemas.trading import new_id, utcnow


class ProposalStatus(str, Enum):
    ACTIVE = "active"
    PASSED = "passed"
    REJECTED = "rejected"
    EXPIRED = "expired"


class DistributionPool(BaseModel):
    """Slice of the fixed $SWAP supply and how much of it has been minted."""

    key: str
    label: str
    share: float
    cap: int
    minted: int = 0

    @property
    def remaining(self) -> int:
        return self.cap - self.minted

    def stats(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "percentage": self.share * 100,
            "cap": self.cap,
            "minted": self.minted,
            "remaining": self.remaining,
        }


class ProposalOption(BaseModel):
    label: str
    votes: int = 0
    voters: list[str] = Field(default_factory=list)


class Proposal(BaseModel):
    id: str = Field(default_factory=new_id)
    proposer: str
    title: str
    description: str
    options: list[ProposalOption]
    created_at: datetime = Field(default_factory=utcnow)
    voting_ends_at: datetime
    status: ProposalStatus = ProposalStatus.ACTIVE
    total_votes: int = 0
    winner: str | None = None

    def has_voted(self, agent_name: str) -> bool:
        return any(agent_name in option.voters for option in self.options)

    def summary(self) -> dict[str, Any]:
        """Public view; voter lists collapse to counts."""
        return {
            "id": self.id,
            "proposer": self.proposer,
            "title": self.title,
            "description": self.description,
            "options": [
                {"label": o.label, "votes": o.votes, "voter_count": len(o.voters)}
                for o in self.options
            ],
            "total_votes": self.total_votes,
            "status": self.status.value,
            "winner": self.winner,
            "created_at": self.created_at,
            "voting_ends_at": self.voting_ends_at,
        }
