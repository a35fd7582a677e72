"""
World state container.

One ``WorldState`` holds everything the trading floor mutates: the ledger,
agents, intents, swap history, economy counters and the event log. It is
owned by ``TradingFloor`` and passed explicitly to the registry, intent book,
matcher and settlement engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.core.config import Settings
from src.schemas.trading import Agent, Asset, Intent, LeaderboardEntry, SwapRecord, utcnow
from src.services.event_log import EventLog
from src.services.ledger import ZERO, TokenLedger, to_decimal


@dataclass
class Economy:
    """Fee parameters, reference prices and monotonic world counters."""

    fee_rate: Decimal
    entry_fee: Decimal
    supported_tokens: list[Asset]
    token_prices: dict[Asset, Decimal]
    total_volume: Decimal = ZERO
    total_swaps: int = 0
    total_fees: Decimal = ZERO
    treasury: dict[Asset, Decimal] = field(default_factory=dict)

    def price(self, asset: Asset) -> Decimal:
        """USD reference price; unknown or zero prices count as 1."""
        price = self.token_prices.get(asset)
        return price if price else Decimal("1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Economy":
        supported = []
        for symbol in settings.supported_tokens:
            asset = Asset(symbol.strip().upper())
            if asset not in supported:
                supported.append(asset)
        prices = {
            Asset(symbol.upper()): to_decimal(price)
            for symbol, price in settings.initial_token_prices.items()
            if symbol.upper() in Asset.__members__ and Asset(symbol.upper()) in supported
        }
        return cls(
            fee_rate=to_decimal(settings.fee_rate),
            entry_fee=to_decimal(settings.entry_fee),
            supported_tokens=supported,
            token_prices=prices,
            treasury={asset: ZERO for asset in supported},
        )


@dataclass
class WorldState:
    name: str
    version: str
    economy: Economy
    ledger: TokenLedger
    events: EventLog
    created: datetime = field(default_factory=utcnow)
    epoch: int = 0
    agents: dict[str, Agent] = field(default_factory=dict)
    intents: dict[str, Intent] = field(default_factory=dict)
    swaps: list[SwapRecord] = field(default_factory=list)
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorldState":
        economy = Economy.from_settings(settings)
        return cls(
            name=settings.app_name,
            version=settings.app_version,
            economy=economy,
            ledger=TokenLedger(economy.supported_tokens),
            events=EventLog(limit=settings.event_log_limit),
        )

    def escrowed(self, agent_name: str | None = None) -> dict[Asset, Decimal]:
        """Funds held by active intents, for one agent or the whole floor."""
        totals = {asset: ZERO for asset in self.economy.supported_tokens}
        for intent in self.intents.values():
            if not intent.is_active:
                continue
            if agent_name is not None and intent.agent != agent_name:
                continue
            totals[intent.give.token] = totals.get(intent.give.token, ZERO) + intent.give.amount
        return totals

    def find_swap(self, swap_id: str) -> SwapRecord | None:
        for swap in reversed(self.swaps):
            if swap.id == swap_id:
                return swap
        return None
