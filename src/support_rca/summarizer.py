"""Natural-language summarizer adapters.

A summarizer restates a block of precomputed failure statistics in a sentence
or two. It never adds facts: the report numbers come from the aggregator and
the summary is best-effort decoration on top of them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from .config import SummarizerSettings
from .logging import build_logger
from .models import Outcome

SYSTEM_INSTRUCTION = (
    "You summarize failure analysis statistics for an operations team. "
    "Write one or two factual sentences describing what the numbers show. "
    "Do not recommend actions, do not speculate about causes and do not "
    "mention any figure that is not in the statistics."
)


class Summarizer(ABC):
    """Abstract base for summarizer backends."""

    def __init__(self, settings: Optional[SummarizerSettings] = None) -> None:
        self.settings = settings or SummarizerSettings()
        self._logger = build_logger(self.__class__.__name__)

    @abstractmethod
    def summarize(self, stats_text: str) -> Outcome:  # pragma: no cover - interface
        """Return ``Outcome.ok(text)`` or a failed outcome explaining why not."""
        raise NotImplementedError


class DisabledSummarizer(Summarizer):
    """Used when no summarizer backend is configured."""

    def summarize(self, stats_text: str) -> Outcome:
        return Outcome.fail("Summarizer is not configured", code="disabled")


class GeminiSummarizer(Summarizer):
    """Gemini ``generateContent`` REST client using httpx."""

    def __init__(
        self,
        settings: SummarizerSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(settings)
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.settings.base_url,
            headers={"x-goog-api-key": self.settings.api_key or ""},
            timeout=self.settings.timeout_seconds,
            transport=self._transport,
        )

    def _payload(self, stats_text: str) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": f"Summarize these failure statistics in 1-2 sentences:\n\n{stats_text}"}],
                }
            ],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_output_tokens,
            },
        }

    @staticmethod
    def _extract_text(body: Dict[str, Any]) -> str:
        candidates = body.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts).strip()

    def summarize(self, stats_text: str) -> Outcome:
        path = f"/models/{self.settings.model}:generateContent"
        with self._client() as client:
            try:
                response = client.post(path, json=self._payload(stats_text))
                response.raise_for_status()
                text = self._extract_text(response.json())
            except httpx.TimeoutException as exc:
                self._logger.warning("summarizer_timeout", timeout=self.settings.timeout_seconds)
                return Outcome.fail("Summarizer timed out", code="timeout", details={"exc": str(exc)})
            except httpx.HTTPError as exc:
                self._logger.error("summarizer_request_failed", error=str(exc))
                return Outcome.fail("Summarizer request failed", code="http_error", details={"exc": str(exc)})
            except (ValueError, AttributeError, TypeError) as exc:
                self._logger.error("summarizer_bad_response", error=str(exc))
                return Outcome.fail("Summarizer returned a malformed body", code="bad_response")
        if not text:
            return Outcome.fail("Summarizer returned an empty response", code="empty_response")
        self._logger.info("summary_generated", model=self.settings.model, chars=len(text))
        return Outcome.ok(text)


def build_summarizer(
    settings: SummarizerSettings, transport: Optional[httpx.BaseTransport] = None
) -> Summarizer:
    """Select a summarizer backend based on settings."""

    provider = (settings.provider or "").lower()
    if provider == "gemini" and settings.api_key:
        return GeminiSummarizer(settings, transport=transport)
    if provider not in {"gemini", "disabled"}:
        build_logger("build_summarizer").warning("unknown_summarizer_provider", provider=settings.provider)
    return DisabledSummarizer(settings)
