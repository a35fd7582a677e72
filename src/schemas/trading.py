"""
Trading floor domain models.

Agents, intents, swap records and world events as pydantic models. Amounts
and prices are Decimals; JSON output renders them as decimal strings.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current time used for every timestamp on the floor."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class Asset(str, Enum):
    """Closed set of tradable symbols."""

    USDC = "USDC"
    ETH = "ETH"
    SOL = "SOL"
    MON = "MON"
    BTC = "BTC"


class AgentStatus(str, Enum):
    ACTIVE = "active"


class IntentStatus(str, Enum):
    ACTIVE = "active"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class EventType(str, Enum):
    AGENT_ENTERED = "agent_entered"
    DEPOSIT = "deposit"
    INTENT_POSTED = "intent_posted"
    INTENT_CANCELLED = "intent_cancelled"
    INTENT_EXPIRED = "intent_expired"
    SWAP_EXECUTED = "swap_executed"
    REWARD_DISTRIBUTED = "reward_distributed"
    PRICES_UPDATED = "prices_updated"


class Agent(BaseModel):
    """Registered agent identity and lifecycle counters.

    Balances live in the token ledger; see ``AgentSnapshot`` for the merged
    view handed to callers.
    """

    id: str = Field(default_factory=new_id)
    name: str
    wallet_address: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    reputation: int = 100
    swaps_completed: int = 0
    swaps_failed: int = 0
    total_volume: Decimal = Decimal("0")
    entered_at: datetime = Field(default_factory=utcnow)
    last_active: datetime = Field(default_factory=utcnow)
    status: AgentStatus = AgentStatus.ACTIVE

    def touch(self, now: datetime | None = None) -> None:
        self.last_active = now or utcnow()


class AgentSnapshot(Agent):
    """Agent record merged with its free and escrowed balances."""

    balance: dict[Asset, Decimal]
    escrowed: dict[Asset, Decimal]


class TokenAmount(BaseModel):
    """One leg of an intent or swap."""

    model_config = ConfigDict(frozen=True)

    token: Asset
    amount: Decimal


class WantSpec(BaseModel):
    """What an intent asks for in return."""

    model_config = ConfigDict(frozen=True)

    token: Asset
    min_amount: Decimal = Decimal("0")
    max_slippage: Decimal = Decimal("0.01")


class Intent(BaseModel):
    """Escrow-backed trade declaration owned by the intent book."""

    id: str = Field(default_factory=new_id)
    agent: str
    give: TokenAmount
    want: WantSpec
    status: IntentStatus = IntentStatus.ACTIVE
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    filled_by_swap: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == IntentStatus.ACTIVE

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SwapRecord(BaseModel):
    """Immutable settlement record.

    Only ``annotations`` changes after creation, written by the outbound
    worker with reward and proof references.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    intent_a: str
    intent_b: str
    agent_a: str
    agent_b: str
    give_a: TokenAmount
    give_b: TokenAmount
    fee_a: Decimal
    fee_b: Decimal
    volume_usd: Decimal
    executed_at: datetime = Field(default_factory=utcnow)
    annotations: dict[str, Any] = Field(default_factory=dict)


class WorldEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    type: EventType
    data: dict[str, Any]
    timestamp: datetime = Field(default_factory=utcnow)
    epoch: int


class LeaderboardEntry(BaseModel):
    name: str
    volume: Decimal
    swaps: int
    reputation: int
