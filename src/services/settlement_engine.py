"""
Settlement engine.

Executes a matched pair of intents as one unit: cross-credits the escrowed
legs net of fees, updates agent and world counters, marks both intents
filled, appends the swap record and emits the swap event. Governance rewards
and outbound notifications run afterwards and can never undo a settlement.
"""

import logging
from decimal import Decimal
from typing import Any, Protocol

from src.core.errors import AgentMissingError
from src.schemas.trading import (
    EventType,
    Intent,
    IntentStatus,
    LeaderboardEntry,
    SwapRecord,
    TokenAmount,
    utcnow,
)
from src.services.alerting_service import AlertType, send_error_alert
from src.services.metrics_service import metrics_collector
from src.services.notification_service import SwapNotification
from src.services.world_state import WorldState

logger = logging.getLogger(__name__)


class SwapRewarder(Protocol):
    def reward_swap(self, agent_name: str, volume_usd: Decimal) -> dict[str, Any]: ...


class SwapOutbox(Protocol):
    def publish(self, notification: SwapNotification) -> None: ...


class SettlementEngine:

    def __init__(
        self,
        world: WorldState,
        governance: SwapRewarder | None = None,
        outbox: SwapOutbox | None = None,
        reputation_reward: int = 5,
        leaderboard_size: int = 20,
    ):
        self.world = world
        self.governance = governance
        self.outbox = outbox
        self.reputation_reward = reputation_reward
        self.leaderboard_size = leaderboard_size

    def execute_swap(self, intent_a: Intent, intent_b: Intent) -> dict[str, Any]:
        """
        Settle two reciprocal intents.

        ``intent_a`` is the incoming intent and ``intent_b`` the resting one.
        Both must be active and reciprocal; the caller established that.

        Raises:
            AgentMissingError: either agent record is gone; nothing was mutated
        """
        world = self.world
        economy = world.economy
        agent_a = world.agents.get(intent_a.agent)
        agent_b = world.agents.get(intent_b.agent)
        if agent_a is None or agent_b is None:
            raise AgentMissingError("Agent not found during swap")

        give_a = intent_a.give
        give_b = intent_b.give
        fee_a = give_a.amount * economy.fee_rate
        fee_b = give_b.amount * economy.fee_rate

        # Escrowed legs change hands net of fees
        world.ledger.credit(agent_a.name, give_b.token, give_b.amount - fee_b)
        world.ledger.credit(agent_b.name, give_a.token, give_a.amount - fee_a)
        economy.treasury[give_a.token] = economy.treasury.get(give_a.token, Decimal("0")) + fee_a
        economy.treasury[give_b.token] = economy.treasury.get(give_b.token, Decimal("0")) + fee_b

        volume_a = give_a.amount * economy.price(give_a.token)
        volume_b = give_b.amount * economy.price(give_b.token)
        volume_usd = volume_a + volume_b

        now = utcnow()
        for agent, volume in ((agent_a, volume_a), (agent_b, volume_b)):
            agent.swaps_completed += 1
            agent.total_volume += volume
            agent.reputation += self.reputation_reward
            agent.touch(now)

        economy.total_volume += volume_usd
        economy.total_swaps += 1
        economy.total_fees += fee_a * economy.price(give_a.token) + fee_b * economy.price(give_b.token)

        swap = SwapRecord(
            intent_a=intent_a.id,
            intent_b=intent_b.id,
            agent_a=agent_a.name,
            agent_b=agent_b.name,
            give_a=TokenAmount(token=give_a.token, amount=give_a.amount),
            give_b=TokenAmount(token=give_b.token, amount=give_b.amount),
            fee_a=fee_a,
            fee_b=fee_b,
            volume_usd=volume_usd,
            executed_at=now,
        )
        for intent in (intent_a, intent_b):
            intent.status = IntentStatus.FILLED
            intent.filled_by_swap = swap.id

        world.swaps.append(swap)
        world.epoch += 1

        world.events.append(
            EventType.SWAP_EXECUTED,
            {
                "swap": swap.id,
                "agent_a": agent_a.name,
                "agent_b": agent_b.name,
                "volume_usd": str(volume_usd),
                "message": (
                    f"SWAP: {agent_a.name} gave {give_a.amount} {give_a.token.value} <-> "
                    f"{agent_b.name} gave {give_b.amount} {give_b.token.value}"
                ),
            },
            epoch=world.epoch,
        )
        self.update_leaderboard()
        metrics_collector.record_swap(float(volume_usd))

        self._reward_governance(agent_a.name, volume_a)
        self._reward_governance(agent_b.name, volume_b)

        self._notify(
            SwapNotification(
                swap=swap,
                wallet_a=agent_a.wallet_address,
                wallet_b=agent_b.wallet_address,
            )
        )

        return {
            "success": True,
            "matched": True,
            "swap": swap,
            "balance_a": world.ledger.balances(agent_a.name),
            "balance_b": world.ledger.balances(agent_b.name),
        }

    def update_leaderboard(self) -> list[LeaderboardEntry]:
        ranked = sorted(self.world.agents.values(), key=lambda a: a.total_volume, reverse=True)
        self.world.leaderboard = [
            LeaderboardEntry(
                name=agent.name,
                volume=agent.total_volume,
                swaps=agent.swaps_completed,
                reputation=agent.reputation,
            )
            for agent in ranked[: self.leaderboard_size]
        ]
        return self.world.leaderboard

    def _notify(self, notification: SwapNotification) -> None:
        if self.outbox is None:
            return
        try:
            self.outbox.publish(notification)
        except Exception as e:
            logger.error(f"Failed to enqueue notifications for swap {notification.swap.id}: {e}")

    def _reward_governance(self, agent_name: str, volume_usd: Decimal) -> None:
        """Inline $SWAP reward; failures are logged and never abort settlement."""
        if self.governance is None:
            return
        try:
            self.governance.reward_swap(agent_name, volume_usd)
        except Exception as e:
            logger.error(f"Governance reward failed for {agent_name}: {e}")
            send_error_alert(
                alert_type=AlertType.GOVERNANCE_FAILURE,
                message="Governance reward failed",
                details={"agent": agent_name, "error": str(e)},
            )
