"""Data models shared across the RCA engine."""

from .failure import (
    KNOWN_FAILURE_TYPES,
    AggregatedGroup,
    FailureEvent,
    FailureEventInput,
    FailureType,
    HourBucket,
    RepeatedPattern,
    StoreStats,
)
from .outcome import Outcome, OutcomeError
from .report import (
    FailurePatterns,
    FailureSummary,
    Insights,
    PatternHighlight,
    PeakWindow,
    QuickStats,
    RankedEntry,
    RCAReport,
    TimeAnalysis,
    TimeWindow,
    TopFailureType,
)

__all__ = [
    "KNOWN_FAILURE_TYPES",
    "AggregatedGroup",
    "FailureEvent",
    "FailureEventInput",
    "FailurePatterns",
    "FailureSummary",
    "FailureType",
    "HourBucket",
    "Insights",
    "Outcome",
    "OutcomeError",
    "PatternHighlight",
    "PeakWindow",
    "QuickStats",
    "RankedEntry",
    "RCAReport",
    "RepeatedPattern",
    "StoreStats",
    "TimeAnalysis",
    "TimeWindow",
    "TopFailureType",
]
