"""Root cause analysis report generation.

Reports are rule-based: every number and insight is computed from the store.
The summarizer only restates those numbers in prose, and when it is unavailable
a templated sentence built from the insights takes its place.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional

from .aggregation import (
    aggregate_by,
    failures_by_hour,
    gateway_failure_ranking,
    peak_failure_hours,
    repeated_patterns,
)
from .logging import build_logger
from .models import (
    AggregatedGroup,
    FailurePatterns,
    FailureSummary,
    HourBucket,
    Insights,
    PatternHighlight,
    PeakWindow,
    QuickStats,
    RankedEntry,
    RCAReport,
    RepeatedPattern,
    TimeAnalysis,
    TimeWindow,
    TopFailureType,
)
from .store import FailureEventStore
from .summarizer import Summarizer

DEFAULT_HOURS_BACK = 24
PEAK_HOURS = 3
MIN_PATTERN_OCCURRENCES = 2
NO_FAILURES_SUMMARY = "No failures recorded in the specified time window."

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_hour(hour: int) -> str:
    """Render an hour of day on a 12-hour clock, e.g. ``18`` -> ``"6 PM"``."""

    h = hour % 24
    if h == 0:
        return "12 AM"
    if h == 12:
        return "12 PM"
    if h < 12:
        return f"{h} AM"
    return f"{h - 12} PM"


def _ranked(group: Optional[AggregatedGroup]) -> Optional[RankedEntry]:
    if group is None:
        return None
    return RankedEntry(name=group.key, percentage=group.percentage, count=group.count)


def _first(items: List) -> Optional[object]:
    return items[0] if items else None


def headline_stats(
    total_failures: int,
    by_type: List[AggregatedGroup],
    by_gateway: List[AggregatedGroup],
    by_agent: List[AggregatedGroup],
) -> QuickStats:
    top_type = _first(by_type)
    return QuickStats(
        total_failures=total_failures,
        top_failure_type=(
            TopFailureType(type=top_type.key, count=top_type.count, percentage=top_type.percentage)
            if top_type
            else None
        ),
        top_gateway=_ranked(_first(by_gateway)),
        top_agent=_ranked(_first(by_agent)),
    )


def report_headline(report: RCAReport) -> QuickStats:
    """Headline numbers of an existing report, from the same window."""

    summary = report.summary
    return headline_stats(summary.total_failures, summary.by_type, summary.by_gateway, summary.by_agent)


def derive_insights(
    by_agent: List[AggregatedGroup],
    by_gateway: List[AggregatedGroup],
    peak_hours: List[HourBucket],
    patterns: List[RepeatedPattern],
) -> Insights:
    insights = Insights(
        most_failing_gateway=_ranked(_first(by_gateway)),
        most_failing_agent=_ranked(_first(by_agent)),
    )
    if peak_hours:
        hours = [bucket.hour for bucket in peak_hours]
        low, high = min(hours), max(hours)
        label = format_hour(low) if len(hours) == 1 else f"{format_hour(low)}-{format_hour(high + 1)}"
        insights.peak_failure_window = PeakWindow(
            hours=label,
            percentage=sum(bucket.percentage for bucket in peak_hours),
        )
    if patterns:
        top = patterns[0]
        insights.top_pattern = PatternHighlight(
            description=f"{top.agent} agent with {top.gateway or 'unknown'} gateway",
            count=top.count,
        )
    return insights


def build_stats_text(report: RCAReport) -> str:
    """Plain-text statistics block handed to the summarizer."""

    lines = [
        f"Time window: Last {report.time_window.hours} hours",
        f"Total failures: {report.summary.total_failures}",
    ]
    sections = (
        ("Failures by type:", report.summary.by_type),
        ("Failures by agent:", report.summary.by_agent),
        ("Failures by gateway/carrier:", report.summary.by_gateway),
    )
    for title, groups in sections:
        if groups:
            lines.append(f"\n{title}")
            lines.extend(f"  - {g.key}: {g.count} ({g.percentage}%)" for g in groups)
    if report.time_analysis.peak_hours:
        lines.append("\nPeak failure hours:")
        lines.extend(
            f"  - {format_hour(b.hour)}: {b.count} failures ({b.percentage}%)"
            for b in report.time_analysis.peak_hours
        )
    if report.patterns.repeated_failures:
        lines.append("\nRepeated failure patterns:")
        lines.extend(
            f"  - {p.agent} + {p.gateway or 'unknown'}: {p.count} times"
            for p in report.patterns.repeated_failures[:3]
        )
    return "\n".join(lines)


def fallback_summary(report: RCAReport) -> str:
    """Templated summary used whenever the summarizer produces nothing."""

    parts = [f"{report.summary.total_failures} failures recorded in the last {report.time_window.hours} hours."]
    gateway = report.insights.most_failing_gateway
    if gateway:
        parts.append(f"{gateway.percentage}% of failures occurred with {gateway.name}.")
    window = report.insights.peak_failure_window
    if window:
        parts.append(f"Peak failures occurred between {window.hours}.")
    return " ".join(parts)


RULE = "=" * 59


def render_report_text(report: RCAReport) -> str:
    """Console/log rendering of a report; uses nothing but the report itself."""

    window = report.time_window
    lines = [
        RULE,
        "RCA ANALYSIS REPORT".center(len(RULE)).rstrip(),
        RULE,
        "",
        f"Generated: {report.generated_at.isoformat()}",
        f"Window: {window.hours} hours ({window.from_.isoformat()} -> {window.to.isoformat()})",
        "",
        "SUMMARY",
        f"   Total Failures: {report.summary.total_failures}",
        "",
    ]
    for title, groups in (
        ("By Type:", report.summary.by_type),
        ("By Agent:", report.summary.by_agent),
        ("By Gateway:", report.summary.by_gateway),
    ):
        if groups:
            lines.append(f"   {title}")
            lines.extend(f"     * {g.key}: {g.count} ({g.percentage}%)" for g in groups)
            lines.append("")

    if report.time_analysis.peak_hours:
        lines.append("PEAK FAILURE HOURS")
        lines.extend(
            f"     * {format_hour(b.hour)}: {b.count} failures ({b.percentage}%)"
            for b in report.time_analysis.peak_hours
        )
        lines.append("")

    if report.patterns.repeated_failures:
        lines.append("REPEATED PATTERNS")
        lines.extend(
            f"     * {p.agent} + {p.gateway or 'none'}: {p.count}x"
            for p in report.patterns.repeated_failures[:5]
        )
        lines.append("")

    if report.ai_summary:
        lines.append("SUMMARY TEXT")
        lines.append(f'   "{report.ai_summary}"')
        lines.append("")

    lines.append(RULE)
    return "\n".join(lines)


class RCAReportBuilder:
    """Runs analysis passes over a failure store."""

    def __init__(
        self,
        store: FailureEventStore,
        summarizer: Optional[Summarizer] = None,
        *,
        tz: tzinfo = timezone.utc,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._summarizer = summarizer
        self._tz = tz
        self._clock = clock
        self._logger = build_logger("RCAReportBuilder")

    @staticmethod
    def _window_start(now: datetime, hours_back: int) -> datetime:
        if isinstance(hours_back, bool) or not isinstance(hours_back, int) or hours_back <= 0:
            raise ValueError(f"hours_back must be a positive integer, got {hours_back!r}")
        return now - timedelta(hours=hours_back)

    def analyze(self, hours_back: int = DEFAULT_HOURS_BACK, include_summary: bool = True) -> RCAReport:
        now = self._clock()
        since = self._window_start(now, hours_back)
        events = self._store.query(since=since)

        by_type = aggregate_by("failure_type", events)
        by_agent = aggregate_by("agent_name", events)
        by_gateway = gateway_failure_ranking(events)
        peak_hours = peak_failure_hours(PEAK_HOURS, events, self._tz)
        patterns = repeated_patterns(events, min_occurrences=MIN_PATTERN_OCCURRENCES)

        report = RCAReport(
            generated_at=now,
            time_window=TimeWindow(from_=since, to=now, hours=hours_back),
            summary=FailureSummary(
                total_failures=len(events),
                by_type=by_type,
                by_agent=by_agent,
                by_gateway=by_gateway,
            ),
            time_analysis=TimeAnalysis(
                peak_hours=peak_hours,
                hourly_distribution=failures_by_hour(events, self._tz),
            ),
            patterns=FailurePatterns(repeated_failures=patterns),
            insights=derive_insights(by_agent, by_gateway, peak_hours, patterns),
        )

        if not events:
            report.ai_summary = NO_FAILURES_SUMMARY
        elif include_summary:
            report.ai_summary = self._summarize(report)

        self._logger.info(
            "rca_analysis_complete",
            hours_back=hours_back,
            total_failures=len(events),
            patterns=len(patterns),
            has_summary=report.ai_summary is not None,
        )
        return report

    def _summarize(self, report: RCAReport) -> str:
        if self._summarizer is None:
            return fallback_summary(report)
        try:
            outcome = self._summarizer.summarize(build_stats_text(report))
        except Exception as exc:  # noqa: BLE001 - summarizer is best-effort
            self._logger.warning("summarizer_unavailable", reason="exception", error=str(exc))
            return fallback_summary(report)
        text = outcome.unwrap_or("")
        if not isinstance(text, str) or not text.strip():
            reason = outcome.error.code if outcome.error else "empty_response"
            self._logger.warning("summarizer_unavailable", reason=reason)
            return fallback_summary(report)
        return text.strip()

    def quick_stats(self, hours_back: int = DEFAULT_HOURS_BACK) -> QuickStats:
        """Headline numbers only; never calls the summarizer."""

        since = self._window_start(self._clock(), hours_back)
        events = self._store.query(since=since)
        return headline_stats(
            len(events),
            aggregate_by("failure_type", events),
            gateway_failure_ranking(events),
            aggregate_by("agent_name", events),
        )
