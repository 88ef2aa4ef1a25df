"""Periodic RCA pass driven by a cron expression."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, List, Optional

from croniter import croniter
from pydantic import BaseModel

from .logging import build_logger
from .models import RankedEntry, TopFailureType
from .report import DEFAULT_HOURS_BACK, RCAReportBuilder, render_report_text, report_headline
from .repository import InMemoryReportRepository

SUMMARY_PREVIEW_CHARS = 500


class ReportGeneratedEvent(BaseModel):
    """Headline of a stored report, handed to listeners after each pass."""

    report_id: str
    generated_at: datetime
    total_failures: int
    top_failure_type: Optional[TopFailureType] = None
    top_gateway: Optional[RankedEntry] = None
    top_agent: Optional[RankedEntry] = None
    ai_summary: Optional[str] = None


ReportListener = Callable[[ReportGeneratedEvent], None]


def log_report_generated(event: ReportGeneratedEvent) -> None:
    """Default listener: log the headline numbers of a new report."""

    summary = event.ai_summary
    if summary and len(summary) > SUMMARY_PREVIEW_CHARS:
        summary = summary[:SUMMARY_PREVIEW_CHARS] + "..."
    build_logger("RCAReportListener").info(
        "rca_report_generated",
        report_id=event.report_id,
        total_failures=event.total_failures,
        top_failure_type=event.top_failure_type.type if event.top_failure_type else None,
        top_gateway=event.top_gateway.name if event.top_gateway else None,
        top_agent=event.top_agent.name if event.top_agent else None,
        summary=summary,
    )


class RCAScheduler:
    """Runs the report builder on a cron schedule and stores each report."""

    def __init__(
        self,
        builder: RCAReportBuilder,
        repository: InMemoryReportRepository,
        *,
        cron: str = "0 * * * *",
        hours_back: int = DEFAULT_HOURS_BACK,
        listeners: Optional[List[ReportListener]] = None,
    ) -> None:
        if not croniter.is_valid(cron):
            raise ValueError(f"Invalid cron expression {cron!r}")
        self._builder = builder
        self._repository = repository
        self.cron = cron
        self.hours_back = hours_back
        self._listeners: List[ReportListener] = list(listeners or [])
        self._shutdown_event = asyncio.Event()
        self._logger = build_logger("RCAScheduler", cron=cron)

    def add_listener(self, listener: ReportListener) -> None:
        self._listeners.append(listener)

    def next_run_after(self, moment: datetime) -> datetime:
        return croniter(self.cron, moment).get_next(datetime)

    def run_once(self) -> Optional[ReportGeneratedEvent]:
        """One full pass. Errors are logged, never raised."""

        self._logger.info("rca_pass_started", hours_back=self.hours_back)
        try:
            report = self._builder.analyze(hours_back=self.hours_back, include_summary=True)
            self._logger.info("rca_report_text", text=render_report_text(report))
            report_id = self._repository.save(report)
            stats = report_headline(report)
        except Exception as exc:  # noqa: BLE001 - keep the schedule alive
            self._logger.error("rca_pass_failed", error=str(exc), exc_info=True)
            return None

        event = ReportGeneratedEvent(
            report_id=report_id,
            generated_at=report.generated_at,
            total_failures=report.summary.total_failures,
            top_failure_type=stats.top_failure_type,
            top_gateway=stats.top_gateway,
            top_agent=stats.top_agent,
            ai_summary=report.ai_summary,
        )
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as exc:  # noqa: BLE001 - one listener must not starve the others
                self._logger.error("rca_listener_failed", listener=repr(listener), error=str(exc))
        self._logger.info(
            "rca_pass_complete",
            report_id=report_id,
            total_failures=event.total_failures,
            has_summary=event.ai_summary is not None,
        )
        return event

    async def run(self) -> None:
        """Sleep until each cron fire time and run a pass, until :meth:`shutdown`."""

        self._logger.info("scheduler_started", next_run=self.next_run_after(datetime.now(timezone.utc)).isoformat())
        try:
            while not self._shutdown_event.is_set():
                now = datetime.now(timezone.utc)
                sleep_seconds = max(0.0, (self.next_run_after(now) - now).total_seconds())
                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=sleep_seconds)
                    break
                except asyncio.TimeoutError:
                    pass
                await asyncio.to_thread(self.run_once)
        except asyncio.CancelledError:
            pass
        self._logger.info("scheduler_stopped")

    def shutdown(self) -> None:
        self._shutdown_event.set()
