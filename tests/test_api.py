"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from support_rca.api import create_app
from support_rca.bootstrap import RCAService, build_rca_service
from support_rca.config import Settings
from support_rca.models import Outcome
from support_rca.summarizer import Summarizer


class FlakySummarizer(Summarizer):
    def summarize(self, stats_text: str) -> Outcome:
        raise TimeoutError("summarizer timed out")


@pytest.fixture()
def service(clock) -> RCAService:
    return build_rca_service(Settings(), summarizer=FlakySummarizer(), clock=clock)


@pytest.fixture()
def client(service: RCAService) -> TestClient:
    return TestClient(create_app(service))


def _seed(service: RCAService) -> None:
    for i in range(12):
        service.failures.log_payment_failure("hulk", f"req-s{i}", gateway="stripe")
    for i in range(3):
        service.failures.log_payment_failure("hulk", f"req-p{i}", gateway="paypal")


def test_report_json(client: TestClient, service: RCAService) -> None:
    _seed(service)

    response = client.get("/api/rca/report", params={"hours": 6})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    report = body["report"]
    assert report["time_window"]["hours"] == 6
    assert report["summary"]["total_failures"] == 15
    assert [(g["key"], g["count"], g["percentage"]) for g in report["summary"]["by_gateway"]] == [
        ("stripe", 12, 80),
        ("paypal", 3, 20),
    ]
    assert report["ai_summary"].startswith("15 failures recorded in the last 6 hours.")


def test_report_text(client: TestClient, service: RCAService) -> None:
    _seed(service)

    response = client.get("/api/rca/report", params={"format": "text"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "RCA ANALYSIS REPORT" in response.text
    assert "stripe: 12 (80%)" in response.text


def test_empty_report_defaults_to_24_hours(client: TestClient) -> None:
    report = client.get("/api/rca/report").json()["report"]
    assert report["time_window"]["hours"] == 24
    assert report["summary"]["by_type"] == []
    assert report["ai_summary"] == "No failures recorded in the specified time window."


@pytest.mark.parametrize(
    "params",
    [{"hours": "abc"}, {"hours": "0"}, {"hours": "-4"}, {"format": "xml"}],
)
def test_malformed_query_parameters(client: TestClient, params: dict) -> None:
    response = client.get("/api/rca/report", params=params)
    assert response.status_code == 422
    assert response.json()["detail"]


def test_stats(client: TestClient, service: RCAService) -> None:
    _seed(service)

    body = client.get("/api/rca/stats", params={"hours": 1}).json()

    assert body["time_window_hours"] == 1
    assert body["stats"]["total_failures"] == 15
    assert body["stats"]["top_gateway"] == {"name": "stripe", "count": 12, "percentage": 80}
    assert body["stats"]["top_failure_type"]["type"] == "payment"
    assert body["stats"]["store"]["total_events"] == 15


def test_stats_rejects_non_numeric_hours(client: TestClient) -> None:
    assert client.get("/api/rca/stats", params={"hours": "soon"}).status_code == 422


def test_stored_reports(client: TestClient, service: RCAService) -> None:
    assert client.get("/api/rca/reports/latest").status_code == 404

    _seed(service)
    event = service.scheduler.run_once()

    latest = client.get("/api/rca/reports/latest").json()
    assert latest["report_id"] == event.report_id
    assert latest["report"]["summary"]["total_failures"] == 15

    by_id = client.get(f"/api/rca/reports/{event.report_id}")
    assert by_id.status_code == 200
    assert client.get("/api/rca/reports/rca_missing").status_code == 404
