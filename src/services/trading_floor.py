"""
Trading floor coordinator.

``TradingFloor`` owns one ``WorldState`` and the lock that guards it. Every
public operation takes the lock for its whole duration, so escrow, matching
and settlement of one post are never interleaved with another request.
Domain errors are converted here into ``{"success": False, ...}`` results;
nothing below this layer returns error dicts.

Outbound work (on-chain rewards, proof recording) only leaves through the
notification dispatcher, which never blocks the lock holder.
"""

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.core.config import Settings, settings as default_settings
from src.core.constants import (
    EVENTS_PAGE_LIMIT,
    LEADERBOARD_IN_WORLD_STATE,
    RECENT_EVENTS_IN_WORLD_STATE,
    SWAP_HISTORY_DEFAULT_LIMIT,
)
from src.core.errors import NotFoundError, TradingFloorError, failure
from src.schemas.trading import (
    Asset,
    EventType,
    Intent,
    LeaderboardEntry,
    SwapRecord,
    WorldEvent,
)
from src.services.agent_registry import AgentRegistry
from src.services.intent_book import IntentBook
from src.services.ledger import ZERO, to_decimal
from src.services.matching_engine import MatchingEngine
from src.services.notification_service import NotificationDispatcher
from src.services.settlement_engine import SettlementEngine, SwapRewarder
from src.services.world_state import WorldState

logger = logging.getLogger(__name__)


class TradingFloor:
    """Single shared world: registry, intent book, matcher and settlement."""

    def __init__(
        self,
        settings: Settings | None = None,
        governance: SwapRewarder | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.settings = settings or default_settings
        self.world = WorldState.from_settings(self.settings)
        self.governance = governance
        self.dispatcher = dispatcher
        self._lock = threading.RLock()

        cfg = self.settings
        self.registry = AgentRegistry(self.world, initial_reputation=cfg.reputation_initial)
        self.matcher = MatchingEngine(
            self.world,
            allow_fallback=cfg.allow_fallback_match,
            enforce_expiry=cfg.enforce_intent_expiry,
        )
        self.settlement = SettlementEngine(
            self.world,
            governance=governance,
            outbox=dispatcher,
            reputation_reward=cfg.reputation_reward,
            leaderboard_size=cfg.leaderboard_size,
        )
        self.book = IntentBook(
            self.world,
            self.matcher,
            self.settlement,
            ttl_seconds=cfg.intent_ttl_seconds,
            default_max_slippage=cfg.default_max_slippage,
            enforce_expiry=cfg.enforce_intent_expiry,
        )
        if dispatcher is not None:
            dispatcher.attach(self)

        logger.info(
            f"{self.world.name} v{self.world.version} open: "
            f"{', '.join(a.value for a in self.world.economy.supported_tokens)} "
            f"at {self.world.economy.fee_rate * 100}% fee"
        )

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def register_agent(
        self,
        name: str,
        wallet_address: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        with self._lock:
            try:
                self.registry.register(name, wallet_address, metadata)
                return {"success": True, "agent": self.registry.snapshot(name)}
            except TradingFloorError as e:
                return failure(e)

    def get_agent(self, name: str) -> dict[str, Any]:
        with self._lock:
            try:
                return {"success": True, "agent": self.registry.snapshot(name)}
            except TradingFloorError as e:
                return failure(e)

    def deposit(self, name: str, token: str, amount: Decimal | float | str) -> dict[str, Any]:
        with self._lock:
            try:
                return {"success": True, "balance": self.registry.deposit(name, token, amount)}
            except TradingFloorError as e:
                return failure(e)

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def post_intent(
        self,
        agent_name: str,
        give: dict[str, Any],
        want: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Escrow, store and try to match an intent in one critical section.

        Returns:
            ``{"success", "intent", "matched": False}`` or the settlement
            result ``{"success", "matched": True, "swap", "balance_a",
            "balance_b"}``
        """
        with self._lock:
            try:
                self.book.expire()
                return self.book.post(agent_name, give, want, options)
            except TradingFloorError as e:
                return failure(e)

    def cancel_intent(self, agent_name: str, intent_id: str) -> dict[str, Any]:
        with self._lock:
            try:
                intent = self.book.cancel(agent_name, intent_id)
                return {
                    "success": True,
                    "intent": intent,
                    "balance": self.world.ledger.balances(agent_name),
                }
            except TradingFloorError as e:
                return failure(e)

    def expire_intents(self, now: datetime | None = None) -> dict[str, Any]:
        with self._lock:
            expired = self.book.expire(now)
            return {"success": True, "expired": expired}

    def get_intent(self, intent_id: str) -> dict[str, Any]:
        with self._lock:
            try:
                return {"success": True, "intent": self.book.get(intent_id)}
            except TradingFloorError as e:
                return failure(e)

    def get_active_intents(self, token: str | None = None) -> dict[str, Any]:
        with self._lock:
            try:
                self.book.expire()
                return {"success": True, "intents": self.book.active(token)}
            except TradingFloorError as e:
                return failure(e)

    # ------------------------------------------------------------------
    # Swaps and world views
    # ------------------------------------------------------------------

    def get_swap_history(self, limit: int = SWAP_HISTORY_DEFAULT_LIMIT) -> list[SwapRecord]:
        """Most recent swaps first."""
        with self._lock:
            if limit <= 0:
                return []
            return list(reversed(self.world.swaps[-limit:]))

    def get_swap(self, swap_id: str) -> dict[str, Any]:
        with self._lock:
            swap = self.world.find_swap(swap_id)
            if swap is None:
                return failure(NotFoundError(f"Swap {swap_id} not found"))
            return {"success": True, "swap": swap}

    def get_leaderboard(self) -> list[LeaderboardEntry]:
        with self._lock:
            return list(self.world.leaderboard)

    def get_events(self, since: datetime | None = None, limit: int = EVENTS_PAGE_LIMIT) -> list[WorldEvent]:
        with self._lock:
            return self.world.events.since(since, limit)

    def get_world_state(self) -> dict[str, Any]:
        with self._lock:
            world = self.world
            economy = world.economy
            return {
                "name": world.name,
                "version": world.version,
                "created": world.created,
                "epoch": world.epoch,
                "agents": len(world.agents),
                "active_intents": sum(1 for i in world.intents.values() if i.is_active),
                "total_swaps": economy.total_swaps,
                "total_volume": economy.total_volume,
                "total_fees": economy.total_fees,
                "token_prices": dict(economy.token_prices),
                "supported_tokens": list(economy.supported_tokens),
                "fee_rate": economy.fee_rate,
                "entry_fee": economy.entry_fee,
                "treasury": dict(economy.treasury),
                "recent_events": world.events.recent(RECENT_EVENTS_IN_WORLD_STATE),
                "leaderboard": world.leaderboard[:LEADERBOARD_IN_WORLD_STATE],
            }

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def supported_symbols(self) -> list[str]:
        return [asset.value for asset in self.world.economy.supported_tokens]

    def get_prices(self) -> dict[Asset, Decimal]:
        with self._lock:
            return dict(self.world.economy.token_prices)

    def update_prices(self, prices: dict[str, Decimal | float | str]) -> dict[str, Any]:
        """Merge oracle prices; unknown symbols and non-positive values are ignored."""
        with self._lock:
            economy = self.world.economy
            updated: dict[Asset, Decimal] = {}
            for symbol, raw in prices.items():
                try:
                    asset = self.world.ledger.parse_asset(symbol)
                    price = to_decimal(raw)
                except TradingFloorError:
                    continue
                if not price.is_finite() or price <= ZERO:
                    continue
                economy.token_prices[asset] = price
                updated[asset] = price

            if updated:
                self.world.events.append(
                    EventType.PRICES_UPDATED,
                    {
                        "prices": {asset.value: str(price) for asset, price in updated.items()},
                        "message": "Prices updated: " + ", ".join(
                            f"{asset.value}=${price}" for asset, price in updated.items()
                        ),
                    },
                    epoch=self.world.epoch,
                )
            return {"success": True, "updated": updated, "prices": dict(economy.token_prices)}

    # ------------------------------------------------------------------
    # Notification sink
    # ------------------------------------------------------------------

    def annotate_swap(self, swap_id: str, key: str, value: Any) -> None:
        with self._lock:
            swap = self.world.find_swap(swap_id)
            if swap is None:
                logger.warning(f"Cannot annotate unknown swap {swap_id}")
                return
            swap.annotations[key] = value

    def record_reward(self, swap_id: str, agent_name: str, reward: dict[str, Any]) -> None:
        with self._lock:
            self.world.events.append(
                EventType.REWARD_DISTRIBUTED,
                {
                    "swap": swap_id,
                    "agent": agent_name,
                    "reward": reward.get("reward"),
                    "tx_hash": reward.get("tx_hash"),
                    "message": f"{agent_name} earned {reward.get('reward')} $SWAP on-chain",
                },
                epoch=self.world.epoch,
            )

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def audit(self) -> dict[str, dict[str, Any]]:
        """
        Per-asset conservation check.

        Everything deposited is somewhere: a free balance, an active intent's
        escrow or the fee treasury.
        """
        with self._lock:
            world = self.world
            escrowed = world.escrowed()
            report = {}
            for asset in world.economy.supported_tokens:
                deposited = world.ledger.total_deposited(asset)
                held = (
                    world.ledger.total_free(asset)
                    + escrowed.get(asset, ZERO)
                    + world.economy.treasury.get(asset, ZERO)
                )
                report[asset.value] = {
                    "deposited": deposited,
                    "held": held,
                    "balanced": deposited == held,
                }
            return report
