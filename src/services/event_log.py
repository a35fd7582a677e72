"""
Append-only, bounded world event stream.

Events describe registry, deposit, intent and swap activity and are read by
the world-state view, the events endpoint and dashboards.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Any

from src.schemas.trading import EventType, WorldEvent

logger = logging.getLogger(__name__)


class EventLog:
    """Keeps the most recent ``limit`` events; older ones fall off the front."""

    def __init__(self, limit: int = 1000):
        self._events: deque[WorldEvent] = deque(maxlen=limit)
        self.limit = limit

    def append(self, event_type: EventType, data: dict[str, Any], epoch: int) -> WorldEvent:
        event = WorldEvent(type=event_type, data=data, epoch=epoch)
        self._events.append(event)
        logger.info(f"[{event.type.value}] {data.get('message') or data}")
        return event

    def recent(self, limit: int) -> list[WorldEvent]:
        if limit <= 0:
            return []
        return list(self._events)[-limit:]

    def since(self, since: datetime | None, limit: int) -> list[WorldEvent]:
        events = list(self._events)
        if since is not None:
            events = [e for e in events if e.timestamp > since]
        return events[-limit:] if limit > 0 else []

    def __len__(self) -> int:
        return len(self._events)
