"""Tests for generated-report retention."""

from datetime import datetime, timedelta, timezone

import pytest

from support_rca.report import RCAReportBuilder
from support_rca.repository import InMemoryReportRepository
from support_rca.store import FailureEventStore


def _report(store: FailureEventStore, at: datetime):
    return RCAReportBuilder(store, clock=lambda: at).analyze()


def test_save_sets_latest_pointer(store: FailureEventStore, now) -> None:
    repository = InMemoryReportRepository()
    report_id = repository.save(_report(store, now))

    assert report_id == f"rca_{int(now.timestamp() * 1000)}"
    assert repository.latest().report_id == report_id
    assert repository.latest().generated_at == "2026-10-17T20:00:00Z"
    assert repository.get(report_id)["summary"]["total_failures"] == 0
    assert repository.latest_report() == repository.get(report_id)


def test_same_millisecond_saves_get_distinct_ids(store: FailureEventStore, now) -> None:
    repository = InMemoryReportRepository()
    first = repository.save(_report(store, now))
    second = repository.save(_report(store, now))

    assert first != second
    assert repository.latest().report_id == second
    assert len(repository) == 2


def test_oldest_reports_are_dropped(store: FailureEventStore, now) -> None:
    repository = InMemoryReportRepository(max_reports=2)
    ids = [repository.save(_report(store, now + timedelta(hours=i))) for i in range(3)]

    assert len(repository) == 2
    assert repository.get(ids[0]) is None
    assert repository.get(ids[2]) is not None


def test_empty_repository_has_no_latest() -> None:
    repository = InMemoryReportRepository()
    assert repository.latest() is None
    assert repository.latest_report() is None


def test_max_reports_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InMemoryReportRepository(max_reports=0)
