"""Statistics over a set of failure events.

Every function here is pure: it takes the events to analyse and returns new
values, without touching the store. Percentages are whole numbers relative to
the events passed in, rounded half up.
"""

from datetime import timezone, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from .models import AggregatedGroup, FailureEvent, HourBucket, RepeatedPattern

DIMENSIONS = ("failure_type", "agent_name", "gateway")
UNKNOWN_KEY = "unknown"
NO_GATEWAY = "none"


def percentage(count: int, total: int) -> int:
    """``round(count / total * 100)`` with halves rounded up, in exact integer math."""

    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def _value_or(value: Optional[str], default: str) -> str:
    return value if value else default


def _groups_from(buckets: Dict[str, List[FailureEvent]], total: int) -> List[AggregatedGroup]:
    groups = [
        AggregatedGroup(
            key=key,
            count=len(members),
            percentage=percentage(len(members), total),
            first_occurrence=min(e.timestamp for e in members),
            last_occurrence=max(e.timestamp for e in members),
        )
        for key, members in buckets.items()
    ]
    # sorted() is stable, so equal counts keep first-seen order
    return sorted(groups, key=lambda group: group.count, reverse=True)


def aggregate_by(dimension: str, events: Sequence[FailureEvent]) -> List[AggregatedGroup]:
    """Count events per value of ``dimension``; missing values count as ``"unknown"``."""

    if dimension not in DIMENSIONS:
        raise ValueError(f"Unsupported aggregation dimension {dimension!r}; expected one of {DIMENSIONS}")
    if not events:
        return []
    buckets: Dict[str, List[FailureEvent]] = {}
    for event in events:
        key = _value_or(event.dimension(dimension), UNKNOWN_KEY)
        buckets.setdefault(key, []).append(event)
    return _groups_from(buckets, len(events))


def gateway_failure_ranking(events: Sequence[FailureEvent]) -> List[AggregatedGroup]:
    """Rank gateways, ignoring events that did not involve one."""

    with_gateway = [event for event in events if event.gateway]
    if not with_gateway:
        return []
    buckets: Dict[str, List[FailureEvent]] = {}
    for event in with_gateway:
        buckets.setdefault(event.gateway, []).append(event)
    return _groups_from(buckets, len(with_gateway))


def failures_by_hour(events: Sequence[FailureEvent], tz: tzinfo = timezone.utc) -> List[HourBucket]:
    """Hour-of-day distribution in ``tz``; hours without failures are left out."""

    total = len(events)
    counts: Dict[int, int] = {}
    for event in events:
        hour = event.timestamp.astimezone(tz).hour
        counts[hour] = counts.get(hour, 0) + 1
    buckets = [
        HourBucket(hour=hour, count=count, percentage=percentage(count, total))
        for hour, count in sorted(counts.items())
    ]
    return sorted(buckets, key=lambda bucket: bucket.count, reverse=True)


def peak_failure_hours(
    top_n: int, events: Sequence[FailureEvent], tz: tzinfo = timezone.utc
) -> List[HourBucket]:
    if top_n < 0:
        raise ValueError("top_n must not be negative")
    return failures_by_hour(events, tz)[:top_n]


def repeated_patterns(events: Sequence[FailureEvent], min_occurrences: int = 2) -> List[RepeatedPattern]:
    """Agent + gateway + error message combinations seen at least ``min_occurrences`` times."""

    if min_occurrences < 1:
        raise ValueError("min_occurrences must be at least 1")
    tally: Dict[Tuple[str, str, str], List[FailureEvent]] = {}
    for event in events:
        key = (
            event.agent_name,
            _value_or(event.gateway, NO_GATEWAY),
            _value_or(event.error_message, UNKNOWN_KEY),
        )
        tally.setdefault(key, []).append(event)

    patterns = [
        RepeatedPattern(
            pattern=":".join(key),
            count=len(members),
            agent=key[0],
            gateway=members[0].gateway or None,
        )
        for key, members in tally.items()
        if len(members) >= min_occurrences
    ]
    return sorted(patterns, key=lambda pattern: pattern.count, reverse=True)
