"""Runtime configuration and secrets management."""

from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StoreSettings(BaseModel):
    """Failure event store sizing and time bucketing."""

    capacity: int = Field(
        default=10_000,
        gt=0,
        description="Maximum number of failure events retained in memory.",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to derive the hour-of-day of each failure.",
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class SummarizerSettings(BaseModel):
    """Configuration for the natural-language report summarizer."""

    provider: str = Field(
        default="gemini",
        description="Identifier for the summarizer implementation to load.",
    )
    api_key: Optional[str] = Field(default=None, description="API key for the summarizer provider.")
    model: str = Field(default="gemini-2.0-flash", description="Model used to produce summaries.")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the generative language REST API.",
    )
    timeout_seconds: float = Field(default=10.0, gt=0, description="Upper bound for one summarizer call.")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=150, gt=0)


class SchedulerSettings(BaseModel):
    """Periodic RCA pass settings."""

    enabled: bool = Field(default=False, description="Run the periodic RCA pass inside the API process.")
    cron: str = Field(default="0 * * * *", description="Cron expression for the periodic RCA pass.")
    hours_back: int = Field(default=24, gt=0, description="Look-back window of the periodic pass.")


class ReportRepositorySettings(BaseModel):
    """Retention of generated reports."""

    max_reports: int = Field(default=168, gt=0, description="Number of generated reports kept in memory.")


class Settings(BaseSettings):
    """Top-level settings object loaded via environment variables or .env files."""

    log_level: str = Field(default="INFO", description="Default log level for structlog.")
    store: StoreSettings = Field(default_factory=StoreSettings)
    summarizer: SummarizerSettings = Field(default_factory=SummarizerSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    reports: ReportRepositorySettings = Field(default_factory=ReportRepositorySettings)

    model_config = {
        "env_prefix": "SUPPORT_RCA_",
        "env_nested_delimiter": "__",
    }


def load_settings() -> Settings:
    """Load configuration using pydantic-settings."""

    return Settings()  # type: ignore[arg-type]
