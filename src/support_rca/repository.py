"""Retention of generated RCA reports."""

import threading
from collections import OrderedDict
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .logging import build_logger
from .models import RCAReport


class LatestReportPointer(BaseModel):
    report_id: str
    generated_at: str


class InMemoryReportRepository:
    """Keeps the most recent reports as JSON documents plus a ``latest`` pointer."""

    def __init__(self, max_reports: int = 168) -> None:
        if max_reports <= 0:
            raise ValueError("max_reports must be positive")
        self._max_reports = max_reports
        self._reports: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._latest: Optional[LatestReportPointer] = None
        self._lock = threading.Lock()
        self._logger = build_logger("InMemoryReportRepository")

    def __len__(self) -> int:
        return len(self._reports)

    def save(self, report: RCAReport) -> str:
        document = report.to_json()
        base_id = f"rca_{int(report.generated_at.timestamp() * 1000)}"
        with self._lock:
            report_id = base_id
            suffix = 1
            while report_id in self._reports:
                report_id = f"{base_id}_{suffix}"
                suffix += 1
            self._reports[report_id] = document
            self._latest = LatestReportPointer(report_id=report_id, generated_at=document["generated_at"])
            while len(self._reports) > self._max_reports:
                self._reports.popitem(last=False)
        self._logger.info("report_saved", report_id=report_id, retained=len(self._reports))
        return report_id

    def get(self, report_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._reports.get(report_id)

    def latest(self) -> Optional[LatestReportPointer]:
        return self._latest

    def latest_report(self) -> Optional[Dict[str, Any]]:
        pointer = self._latest
        if pointer is None:
            return None
        return self.get(pointer.report_id)
