"""
Agent registry.

Registers agents on the trading floor, opens their ledger accounts and takes
deposits, the only way funds enter the floor.
"""

import logging
from decimal import Decimal
from typing import Any

from src.core.errors import AlreadyRegisteredError, NotFoundError
from src.schemas.trading import Agent, AgentSnapshot, Asset, EventType
from src.services.ledger import require_positive
from src.services.world_state import WorldState

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Agent records for one world."""

    def __init__(self, world: WorldState, initial_reputation: int = 100):
        self.world = world
        self.initial_reputation = initial_reputation

    def register(
        self,
        name: str,
        wallet_address: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Agent:
        """
        Create an agent with zero balances across every supported asset.

        Names are case-sensitive; a taken name fails without touching the
        existing record.

        Raises:
            AlreadyRegisteredError: name already present
        """
        if name in self.world.agents:
            raise AlreadyRegisteredError(f"Agent {name} already registered")

        agent = Agent(
            name=name,
            wallet_address=wallet_address,
            metadata=dict(metadata or {}),
            reputation=self.initial_reputation,
        )
        self.world.ledger.open_account(name)
        self.world.agents[name] = agent
        self.world.events.append(
            EventType.AGENT_ENTERED,
            {"agent": name, "message": f"{name} entered the trading floor"},
            epoch=self.world.epoch,
        )
        return agent

    def get(self, name: str) -> Agent:
        agent = self.world.agents.get(name)
        if agent is None:
            raise NotFoundError(f"Agent {name} not found")
        return agent

    def snapshot(self, name: str) -> AgentSnapshot:
        """Agent record with free and escrowed balances merged in."""
        agent = self.get(name)
        return AgentSnapshot(
            **agent.model_dump(),
            balance=self.world.ledger.balances(name),
            escrowed=self.world.escrowed(name),
        )

    def deposit(self, name: str, symbol: str, amount: Decimal | float | str) -> dict[Asset, Decimal]:
        """
        Credit external funds to an agent's free balance.

        Validation order: agent, asset, amount. Nothing changes on failure.

        Returns:
            The agent's free balances after the deposit
        """
        agent = self.get(name)
        asset = self.world.ledger.parse_asset(symbol)
        value = require_positive(amount)

        self.world.ledger.deposit(name, asset, value)
        agent.touch()
        self.world.events.append(
            EventType.DEPOSIT,
            {
                "agent": name,
                "token": asset.value,
                "amount": str(value),
                "message": f"{name} deposited {value} {asset.value}",
            },
            epoch=self.world.epoch,
        )
        return self.world.ledger.balances(name)
