"""Shared fixtures for the RCA engine tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import pytest

from support_rca.models import FailureEvent, FailureEventInput
from support_rca.store import FailureEventStore

NOW = datetime(2026, 10, 17, 20, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture()
def store() -> FailureEventStore:
    return FailureEventStore()


EventFactory = Callable[..., FailureEvent]


@pytest.fixture()
def record(store: FailureEventStore) -> EventFactory:
    """Record a failure with sensible defaults; ``at`` overrides the timestamp."""

    counter = {"n": 0}

    def _record(at: Optional[datetime] = None, **fields: Any) -> FailureEvent:
        counter["n"] += 1
        values = {
            "failure_type": "payment",
            "agent_name": "hulk",
            "request_id": f"req-{counter['n']}",
            "timestamp": at or NOW - timedelta(minutes=30),
        }
        values.update(fields)
        return store.record(FailureEventInput(**values))

    return _record
