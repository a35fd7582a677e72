"""
Matching engine.

Greedy single-pass matcher over the intent book. A candidate must be a
reciprocal intent from another agent; among candidates, the first whose
implied rate is within slippage tolerance of the reference market rate wins.
When none is, the first candidate is returned anyway unless the fallback is
disabled.
"""

import logging
from datetime import datetime
from decimal import Decimal

from src.schemas.trading import Intent, utcnow
from src.services.world_state import WorldState

logger = logging.getLogger(__name__)


class MatchingEngine:

    def __init__(
        self,
        world: WorldState,
        allow_fallback: bool = True,
        enforce_expiry: bool = True,
    ):
        self.world = world
        self.allow_fallback = allow_fallback
        self.enforce_expiry = enforce_expiry

    def candidates(self, new_intent: Intent, now: datetime | None = None) -> list[Intent]:
        """Reciprocal active intents from other agents, in posting order."""
        now = now or utcnow()
        if self.enforce_expiry and new_intent.is_expired(now):
            return []
        return [
            intent
            for intent in self.world.intents.values()
            if intent.is_active
            and intent.id != new_intent.id
            and intent.agent != new_intent.agent
            and intent.give.token == new_intent.want.token
            and intent.want.token == new_intent.give.token
            and not (self.enforce_expiry and intent.is_expired(now))
        ]

    def slippage(self, new_intent: Intent, candidate: Intent) -> Decimal:
        """Relative deviation of the offer rate from the reference market rate."""
        economy = self.world.economy
        market_rate = economy.price(new_intent.give.token) / economy.price(new_intent.want.token)
        offer_rate = new_intent.give.amount / candidate.give.amount
        return abs(offer_rate - market_rate) / market_rate

    def find_match(self, new_intent: Intent, now: datetime | None = None) -> Intent | None:
        candidates = self.candidates(new_intent, now)
        if not candidates:
            return None

        for candidate in candidates:
            tolerance = max(new_intent.want.max_slippage, candidate.want.max_slippage)
            if self.slippage(new_intent, candidate) <= tolerance:
                return candidate

        if not self.allow_fallback:
            return None

        fallback = candidates[0]
        logger.info(
            f"No candidate within tolerance for intent {new_intent.id}; "
            f"falling back to first reciprocal intent {fallback.id}"
        )
        return fallback
