"""
Intent book.

Stores trade intents. Posting an intent moves the give amount out of the
agent's free balance into escrow, then immediately runs the matcher and, on a
match, settles before returning. Cancelled and expired intents hand their
escrow back to the owner. Intents are never removed from the book.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from src.core.errors import (
    IntentNotActiveError,
    InvalidAmountError,
    InvalidIntentError,
    NotFoundError,
    NotIntentOwnerError,
    UnsupportedAssetError,
)
from src.schemas.trading import (
    Asset,
    EventType,
    Intent,
    IntentStatus,
    TokenAmount,
    WantSpec,
    utcnow,
)
from src.services.ledger import ZERO, require_positive, to_decimal
from src.services.matching_engine import MatchingEngine
from src.services.metrics_service import metrics_collector
from src.services.settlement_engine import SettlementEngine
from src.services.world_state import WorldState

logger = logging.getLogger(__name__)


class IntentBook:

    def __init__(
        self,
        world: WorldState,
        matcher: MatchingEngine,
        settlement: SettlementEngine,
        ttl_seconds: int = 3600,
        default_max_slippage: float = 0.01,
        enforce_expiry: bool = True,
    ):
        self.world = world
        self.matcher = matcher
        self.settlement = settlement
        self.ttl = timedelta(seconds=ttl_seconds)
        self.default_max_slippage = to_decimal(default_max_slippage)
        self.enforce_expiry = enforce_expiry

    def post(
        self,
        agent_name: str,
        give: Mapping[str, Any],
        want: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Escrow ``give`` and try to match it right away.

        Args:
            agent_name: Posting agent
            give: ``{"token", "amount"}``
            want: ``{"token", "min_amount"?, "max_slippage"?}``
            options: ``{"expires_at"?, "metadata"?}``

        Returns:
            ``{"success", "intent", "matched": False}`` when the intent rests
            in the book, otherwise the settlement result.
        """
        options = options or {}
        world = self.world
        now = utcnow()

        agent = world.agents.get(agent_name)
        if agent is None:
            raise NotFoundError(f"Agent {agent_name} not registered")

        intent = self._build_intent(agent_name, give, want, options, now)
        # Escrow: fails with InsufficientBalanceError before anything is stored
        world.ledger.debit(agent_name, intent.give.token, intent.give.amount)

        world.intents[intent.id] = intent
        agent.touch(now)
        metrics_collector.record_intent()
        world.events.append(
            EventType.INTENT_POSTED,
            {
                "agent": agent_name,
                "intent": intent.id,
                "give": f"{intent.give.amount} {intent.give.token.value}",
                "want": intent.want.token.value,
                "message": (
                    f"{agent_name} wants to swap {intent.give.amount} "
                    f"{intent.give.token.value} for {intent.want.token.value}"
                ),
            },
            epoch=world.epoch,
        )

        match = self.matcher.find_match(intent, now)
        if match is not None:
            return self.settlement.execute_swap(intent, match)

        return {"success": True, "intent": intent, "matched": False}

    def cancel(self, agent_name: str, intent_id: str) -> Intent:
        """Withdraw an active intent and release its escrow to the owner."""
        intent = self.get(intent_id)
        if intent.agent != agent_name:
            raise NotIntentOwnerError(f"Intent {intent_id} belongs to another agent")
        if not intent.is_active:
            raise IntentNotActiveError(f"Intent {intent_id} is {intent.status.value}")

        self._release(intent, IntentStatus.CANCELLED)
        self.world.events.append(
            EventType.INTENT_CANCELLED,
            {
                "agent": agent_name,
                "intent": intent.id,
                "message": f"{agent_name} cancelled intent {intent.id}",
            },
            epoch=self.world.epoch,
        )
        return intent

    def expire(self, now: datetime | None = None) -> list[Intent]:
        """Release escrow for every active intent whose expiry has passed."""
        if not self.enforce_expiry:
            return []
        now = now or utcnow()
        expired = [i for i in self.world.intents.values() if i.is_active and i.is_expired(now)]
        for intent in expired:
            self._release(intent, IntentStatus.EXPIRED)
            self.world.events.append(
                EventType.INTENT_EXPIRED,
                {
                    "agent": intent.agent,
                    "intent": intent.id,
                    "message": f"Intent {intent.id} from {intent.agent} expired",
                },
                epoch=self.world.epoch,
            )
        return expired

    def get(self, intent_id: str) -> Intent:
        intent = self.world.intents.get(intent_id)
        if intent is None:
            raise NotFoundError(f"Intent {intent_id} not found")
        return intent

    def active(self, token: str | None = None) -> list[Intent]:
        intents = [i for i in self.world.intents.values() if i.is_active]
        if token:
            asset = self.world.ledger.parse_asset(token)
            intents = [i for i in intents if i.give.token == asset or i.want.token == asset]
        return intents

    def _release(self, intent: Intent, status: IntentStatus) -> None:
        self.world.ledger.credit(intent.agent, intent.give.token, intent.give.amount)
        intent.status = status
        owner = self.world.agents.get(intent.agent)
        if owner is not None:
            owner.touch()

    def _parse_expiry(self, value: Any, now: datetime) -> datetime:
        if not value:
            return now + self.ttl
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as e:
                raise InvalidIntentError(f"Invalid expires_at: {value}") from e
        if not isinstance(value, datetime):
            raise InvalidIntentError(f"Invalid expires_at: {value!r}")
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        # Rejected before escrow so it can never reach the matcher.
        if self.enforce_expiry and value <= now:
            raise InvalidIntentError("expires_at must be in the future")
        return value

    def _build_intent(
        self,
        agent_name: str,
        give: Mapping[str, Any],
        want: Mapping[str, Any],
        options: Mapping[str, Any],
        now: datetime,
    ) -> Intent:
        """Validate the request and build an unsaved intent."""
        ledger = self.world.ledger
        give_token = ledger.parse_asset(give.get("token", ""))
        give_amount = require_positive(give.get("amount", 0))
        want_token: Asset = ledger.parse_asset(want.get("token", ""))
        if want_token == give_token:
            raise UnsupportedAssetError(f"Cannot swap {give_token.value} for itself")

        min_amount = to_decimal(want.get("min_amount") or 0)
        if not min_amount.is_finite() or min_amount < ZERO:
            raise InvalidAmountError("min_amount must be a finite, non-negative number")
        max_slippage = want.get("max_slippage")
        max_slippage = self.default_max_slippage if max_slippage is None else to_decimal(max_slippage)
        if not max_slippage.is_finite() or max_slippage < ZERO:
            raise InvalidAmountError("max_slippage must be a finite, non-negative number")

        expires_at = self._parse_expiry(options.get("expires_at"), now)

        return Intent(
            agent=agent_name,
            give=TokenAmount(token=give_token, amount=give_amount),
            want=WantSpec(token=want_token, min_amount=min_amount, max_slippage=max_slippage),
            created_at=now,
            expires_at=expires_at,
            metadata=dict(options.get("metadata") or {}),
        )
