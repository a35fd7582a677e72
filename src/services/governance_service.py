"""
$SWAP governance service.

Fair-launch token with a fixed supply split into four pools. Trading mints
rewards from the usage pool in proportion to USD volume; holders create
proposals and vote with their balance as weight. Everything is in memory and
guarded by one lock, since settlement calls ``reward_swap`` from request
threads while proposal routes run on others.
"""

import logging
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from src.core.constants import SWAP_TOKEN_ADDRESS, SWAP_TOTAL_SUPPLY
from src.core.errors import GovernanceError, NotFoundError, TradingFloorError, failure
from src.schemas.governance import DistributionPool, Proposal, ProposalOption, ProposalStatus
from src.schemas.trading import utcnow

logger = logging.getLogger(__name__)

DISTRIBUTION = (
    ("usage", "Usage Rewards", 0.5),
    ("liquidity", "Liquidity", 0.2),
    ("governance", "Governance", 0.2),
    ("ecosystem", "Ecosystem", 0.1),
)

TOP_HOLDERS = 10


class GovernanceService:

    def __init__(
        self,
        reward_per_usd: int = 100,
        voting_period_seconds: int = 24 * 60 * 60,
        total_supply: int = SWAP_TOTAL_SUPPLY,
    ):
        self.reward_per_usd = reward_per_usd
        self.voting_period = timedelta(seconds=voting_period_seconds)
        self.total_supply = total_supply
        self.pools: dict[str, DistributionPool] = {
            key: DistributionPool(key=key, label=label, share=share, cap=int(total_supply * share))
            for key, label, share in DISTRIBUTION
        }
        self.balances: dict[str, int] = {}
        self.proposals: list[Proposal] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Token
    # ------------------------------------------------------------------

    def get_token_balance(self, agent_name: str) -> int:
        """$SWAP balance; unknown agents hold 0."""
        with self._lock:
            return self.balances.get(agent_name, 0)

    def reward_swap(self, agent_name: str, volume_usd: Decimal | float) -> dict[str, Any]:
        """
        Mint usage rewards for one side of a swap.

        Mints ``floor(volume_usd * reward_per_usd)``, capped at what is left
        in the usage pool. An exhausted pool mints nothing.
        """
        with self._lock:
            pool = self.pools["usage"]
            amount = int(Decimal(str(volume_usd)) * self.reward_per_usd)
            mintable = min(amount, pool.remaining)
            if mintable <= 0:
                return {"minted": 0, "balance": self.balances.get(agent_name, 0), "pool": pool.stats()}

            pool.minted += mintable
            self.balances[agent_name] = self.balances.get(agent_name, 0) + mintable
            logger.debug(f"Minted {mintable} $SWAP to {agent_name}")
            return {"minted": mintable, "balance": self.balances[agent_name], "pool": pool.stats()}

    def pool_stats(self, key: str) -> dict[str, Any]:
        with self._lock:
            pool = self.pools.get(key)
            if pool is None:
                raise NotFoundError(f"Pool {key} not found")
            return pool.stats()

    def get_tokenomics(self) -> dict[str, Any]:
        with self._lock:
            total_minted = sum(pool.minted for pool in self.pools.values())
            top = sorted(self.balances.items(), key=lambda item: item[1], reverse=True)[:TOP_HOLDERS]
            return {
                "token": "$SWAP",
                "version": 2,
                "fair_launch": True,
                "total_supply": self.total_supply,
                "total_minted": total_minted,
                "circulating_pct": f"{total_minted / self.total_supply * 100:.4f}",
                "reward_rate": f"{self.reward_per_usd} $SWAP per $1 USD volume",
                "halving_period": "180 days",
                "on_chain_token": SWAP_TOKEN_ADDRESS,
                "pools": {key: pool.stats() for key, pool in self.pools.items()},
                "holders": len(self.balances),
                "top_holders": [{"name": name, "balance": balance} for name, balance in top],
            }

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def create_proposal(
        self,
        agent_name: str,
        title: str,
        description: str,
        options: list[str],
    ) -> dict[str, Any]:
        """Open a proposal for voting. The proposer must hold $SWAP."""
        with self._lock:
            try:
                if self.balances.get(agent_name, 0) <= 0:
                    raise GovernanceError("Must hold $SWAP to create proposals")
                if not title or not description:
                    raise GovernanceError("title and description are required")
                if not options or len(options) < 2:
                    raise GovernanceError("At least 2 options required")
            except TradingFloorError as e:
                return failure(e)

            now = utcnow()
            proposal = Proposal(
                proposer=agent_name,
                title=title,
                description=description,
                options=[ProposalOption(label=label) for label in options],
                created_at=now,
                voting_ends_at=now + self.voting_period,
            )
            self.proposals.append(proposal)
            logger.info(f"Proposal {proposal.id} opened by {agent_name}: {title}")
            return {"success": True, "proposal": proposal.summary()}

    def vote(self, agent_name: str, proposal_id: str, option_index: int) -> dict[str, Any]:
        """Cast a balance-weighted vote; one vote per agent per proposal."""
        with self._lock:
            try:
                proposal = self._find(proposal_id)
                if utcnow() > proposal.voting_ends_at:
                    self.finalize(proposal)
                    raise GovernanceError("Voting period has ended")
                if proposal.status != ProposalStatus.ACTIVE:
                    raise GovernanceError(f"Proposal is {proposal.status.value}")
                if option_index < 0 or option_index >= len(proposal.options):
                    raise GovernanceError(
                        f"Invalid option index. Must be 0-{len(proposal.options) - 1}"
                    )
                if proposal.has_voted(agent_name):
                    raise GovernanceError("Agent has already voted on this proposal")
                weight = self.balances.get(agent_name, 0)
                if weight <= 0:
                    raise GovernanceError("Must hold $SWAP to vote")
            except TradingFloorError as e:
                return failure(e)

            option = proposal.options[option_index]
            option.votes += weight
            option.voters.append(agent_name)
            proposal.total_votes += weight
            return {"success": True, "proposal": proposal.summary()}

    def finalize(self, proposal: Proposal) -> None:
        """Close an active proposal: expired without votes, passed on a strict majority."""
        if proposal.status != ProposalStatus.ACTIVE:
            return
        if proposal.total_votes == 0:
            proposal.status = ProposalStatus.EXPIRED
            return

        winner = max(proposal.options, key=lambda option: option.votes)
        if winner.votes * 2 > proposal.total_votes:
            proposal.status = ProposalStatus.PASSED
            proposal.winner = winner.label
        else:
            proposal.status = ProposalStatus.REJECTED
        logger.info(f"Proposal {proposal.id} finalized as {proposal.status.value}")

    def get_proposals(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """All proposals, finalizing any whose voting period has passed."""
        now = now or utcnow()
        with self._lock:
            for proposal in self.proposals:
                if proposal.status == ProposalStatus.ACTIVE and now > proposal.voting_ends_at:
                    self.finalize(proposal)
            return [proposal.summary() for proposal in self.proposals]

    def _find(self, proposal_id: str) -> Proposal:
        for proposal in self.proposals:
            if proposal.id == proposal_id:
                return proposal
        raise NotFoundError("Proposal not found")
