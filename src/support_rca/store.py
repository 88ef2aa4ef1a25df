"""Bounded in-memory log of failure events."""

import threading
from collections import deque
from datetime import datetime
from typing import Any, Deque, List, Mapping, Optional, Union

from pydantic import ValidationError

from .errors import InvalidFailureEventError
from .logging import build_logger
from .models import FailureEvent, FailureEventInput, StoreStats
from .models.failure import as_utc, new_event_id

DEFAULT_CAPACITY = 10_000


class FailureEventStore:
    """Append-only ring buffer of failure events.

    Once full, every new event evicts the single oldest one. Mutations hold
    the lock for the whole evict-then-append step; readers copy the buffer
    under the lock and filter the copy.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._events: Deque[FailureEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._logger = build_logger("FailureEventStore", capacity=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def __len__(self) -> int:
        return len(self._events)

    def record(self, event: Union[FailureEventInput, Mapping[str, Any]]) -> FailureEvent:
        """Store a failure and return it with its assigned id."""

        if not isinstance(event, FailureEventInput):
            try:
                event = FailureEventInput.model_validate(dict(event))
            except ValidationError as exc:
                raise InvalidFailureEventError(
                    f"Invalid failure event: {exc.error_count()} field error(s)",
                    errors=exc.errors(include_url=False),
                ) from exc

        stored = FailureEvent.from_input(event, new_event_id())
        with self._lock:
            # deque(maxlen) drops the leftmost entry on append when full.
            self._events.append(stored)
        self._logger.debug(
            "failure_recorded",
            event_id=stored.id,
            failure_type=stored.failure_type,
            agent=stored.agent_name,
        )
        return stored

    def query(
        self,
        *,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        failure_type: Optional[str] = None,
        agent_name: Optional[str] = None,
        gateway: Optional[str] = None,
    ) -> List[FailureEvent]:
        """Return matching events in insertion order; bounds are inclusive."""

        events = self._snapshot()
        if since is not None:
            since = as_utc(since)
            events = [e for e in events if e.timestamp >= since]
        if until is not None:
            until = as_utc(until)
            events = [e for e in events if e.timestamp <= until]
        if failure_type is not None:
            tag = getattr(failure_type, "value", failure_type)
            events = [e for e in events if e.failure_type == tag]
        if agent_name is not None:
            events = [e for e in events if e.agent_name == agent_name]
        if gateway is not None:
            events = [e for e in events if e.gateway == gateway]
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
        self._logger.info("store_cleared")

    def stats(self) -> StoreStats:
        events = self._snapshot()
        if not events:
            return StoreStats()
        timestamps = [e.timestamp for e in events]
        return StoreStats(
            total_events=len(events),
            oldest_event=min(timestamps),
            newest_event=max(timestamps),
        )

    def _snapshot(self) -> List[FailureEvent]:
        with self._lock:
            return list(self._events)
