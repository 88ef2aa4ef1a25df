"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from support_rca.config import Settings, StoreSettings, load_settings


def test_defaults() -> None:
    settings = Settings()

    assert settings.store.capacity == 10_000
    assert settings.store.timezone == "UTC"
    assert settings.summarizer.model == "gemini-2.0-flash"
    assert settings.summarizer.timeout_seconds == 10.0
    assert settings.scheduler.cron == "0 * * * *"
    assert settings.scheduler.enabled is False
    assert settings.reports.max_reports == 168


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPPORT_RCA_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SUPPORT_RCA_STORE__TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("SUPPORT_RCA_SUMMARIZER__API_KEY", "secret")
    monkeypatch.setenv("SUPPORT_RCA_SCHEDULER__HOURS_BACK", "12")

    settings = load_settings()

    assert settings.log_level == "DEBUG"
    assert settings.store.timezone == "Europe/Berlin"
    assert settings.summarizer.api_key == "secret"
    assert settings.scheduler.hours_back == 12


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValidationError):
        StoreSettings(timezone="Mars/Olympus_Mons")


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        StoreSettings(capacity=0)
