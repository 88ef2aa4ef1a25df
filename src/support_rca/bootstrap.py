"""Factory for assembling the RCA engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import Settings, load_settings
from .failure_logger import FailureLogger
from .logging import configure_logging
from .report import Clock, RCAReportBuilder, utcnow
from .repository import InMemoryReportRepository
from .scheduler import RCAScheduler, log_report_generated
from .store import FailureEventStore
from .summarizer import Summarizer, build_summarizer


@dataclass(frozen=True)
class RCAService:
    """Container bundling the store, the report builder and its triggers."""

    settings: Settings
    store: FailureEventStore
    failures: FailureLogger
    builder: RCAReportBuilder
    repository: InMemoryReportRepository
    scheduler: RCAScheduler


def build_rca_service(
    settings: Optional[Settings] = None,
    *,
    store: Optional[FailureEventStore] = None,
    summarizer: Optional[Summarizer] = None,
    clock: Optional[Clock] = None,
    configure_logs: bool = False,
) -> RCAService:
    """Wire one process-wide store to the builder, repository and scheduler."""

    resolved_settings = settings if settings is not None else load_settings()
    if configure_logs:
        configure_logging(resolved_settings.log_level)
    resolved_clock = clock if clock is not None else utcnow

    resolved_store = store if store is not None else FailureEventStore(capacity=resolved_settings.store.capacity)
    resolved_summarizer = summarizer if summarizer is not None else build_summarizer(resolved_settings.summarizer)
    builder = RCAReportBuilder(
        resolved_store,
        resolved_summarizer,
        tz=resolved_settings.store.tzinfo(),
        clock=resolved_clock,
    )
    repository = InMemoryReportRepository(max_reports=resolved_settings.reports.max_reports)
    scheduler = RCAScheduler(
        builder,
        repository,
        cron=resolved_settings.scheduler.cron,
        hours_back=resolved_settings.scheduler.hours_back,
        listeners=[log_report_generated],
    )

    return RCAService(
        settings=resolved_settings,
        store=resolved_store,
        failures=FailureLogger(resolved_store, clock=resolved_clock),
        builder=builder,
        repository=repository,
        scheduler=scheduler,
    )
