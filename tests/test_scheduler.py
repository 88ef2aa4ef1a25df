"""Tests for the periodic RCA pass."""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest
from structlog.testing import capture_logs

from support_rca.models import Outcome
from support_rca.report import RCAReportBuilder
from support_rca.repository import InMemoryReportRepository
from support_rca.scheduler import RCAScheduler, ReportGeneratedEvent, log_report_generated
from support_rca.store import FailureEventStore
from support_rca.summarizer import Summarizer


class CannedSummarizer(Summarizer):
    def summarize(self, stats_text: str) -> Outcome:
        return Outcome.ok("Stripe dominates payment failures.")


@pytest.fixture()
def repository() -> InMemoryReportRepository:
    return InMemoryReportRepository()


@pytest.fixture()
def scheduler(store: FailureEventStore, clock, repository: InMemoryReportRepository) -> RCAScheduler:
    builder = RCAReportBuilder(store, CannedSummarizer(), clock=clock)
    return RCAScheduler(builder, repository, cron="0 * * * *", hours_back=24)


def test_run_once_stores_report_and_notifies(scheduler: RCAScheduler, repository, record) -> None:
    for i in range(4):
        record(gateway="stripe", error_message="Card declined")
    record(failure_type="shipping", agent_name="havoc", gateway="fedex")
    received: List[ReportGeneratedEvent] = []
    scheduler.add_listener(received.append)

    event = scheduler.run_once()

    assert event is not None
    assert received == [event]
    assert event.total_failures == 5
    assert event.top_failure_type.type == "payment"
    assert event.top_gateway.name == "stripe"
    assert event.top_agent.name == "hulk"
    assert event.ai_summary == "Stripe dominates payment failures."
    assert repository.latest().report_id == event.report_id
    assert repository.get(event.report_id)["summary"]["total_failures"] == 5


def test_failing_listener_does_not_stop_others(scheduler: RCAScheduler) -> None:
    received: List[ReportGeneratedEvent] = []

    def broken(event: ReportGeneratedEvent) -> None:
        raise RuntimeError("webhook down")

    scheduler.add_listener(broken)
    scheduler.add_listener(received.append)

    assert scheduler.run_once() is not None
    assert len(received) == 1


def test_run_once_swallows_builder_errors(scheduler: RCAScheduler, repository, monkeypatch) -> None:
    def explode(**kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(scheduler._builder, "analyze", explode)

    assert scheduler.run_once() is None
    assert repository.latest() is None


def test_next_run_is_top_of_next_hour(scheduler: RCAScheduler) -> None:
    moment = datetime(2026, 10, 17, 18, 25, tzinfo=timezone.utc)
    assert scheduler.next_run_after(moment) == datetime(2026, 10, 17, 19, 0, tzinfo=timezone.utc)


def test_invalid_cron_is_rejected(store: FailureEventStore, repository) -> None:
    with pytest.raises(ValueError):
        RCAScheduler(RCAReportBuilder(store), repository, cron="every hour")


def test_default_listener_truncates_long_summaries() -> None:
    event = ReportGeneratedEvent(
        report_id="rca_1",
        generated_at=datetime(2026, 10, 17, tzinfo=timezone.utc),
        total_failures=3,
        ai_summary="x" * 800,
    )
    with capture_logs() as logs:
        log_report_generated(event)

    assert logs[0]["event"] == "rca_report_generated"
    assert logs[0]["summary"] == "x" * 500 + "..."
    assert logs[0]["total_failures"] == 3


def test_event_headline_comes_from_the_stored_report(store: FailureEventStore, repository, now, record) -> None:
    for i in range(3):
        record(gateway="stripe", error_message="Card declined")
    ticks = iter([now])
    # a second clock read would land two days later, outside the window
    builder = RCAReportBuilder(store, CannedSummarizer(), clock=lambda: next(ticks, now + timedelta(days=2)))
    scheduler = RCAScheduler(builder, repository, hours_back=24)

    event = scheduler.run_once()

    assert event.total_failures == 3
    assert event.top_failure_type.count == 3
    assert event.top_gateway.name == "stripe"
    assert event.top_agent.count == 3
