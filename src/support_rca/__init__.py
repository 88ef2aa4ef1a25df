"""Failure aggregation and root cause analysis for the support agents."""

from importlib import import_module
from typing import Any, Dict, Tuple

__all__ = [
    "FailureEventStore",
    "FailureLogger",
    "InvalidFailureEventError",
    "RCAReportBuilder",
    "RCAScheduler",
    "RCAService",
    "build_rca_service",
    "create_app",
]

_LAZY_IMPORTS: Dict[str, Tuple[str, str]] = {
    "FailureEventStore": ("support_rca.store", "FailureEventStore"),
    "FailureLogger": ("support_rca.failure_logger", "FailureLogger"),
    "InvalidFailureEventError": ("support_rca.errors", "InvalidFailureEventError"),
    "RCAReportBuilder": ("support_rca.report", "RCAReportBuilder"),
    "RCAScheduler": ("support_rca.scheduler", "RCAScheduler"),
    "RCAService": ("support_rca.bootstrap", "RCAService"),
    "build_rca_service": ("support_rca.bootstrap", "build_rca_service"),
    "create_app": ("support_rca.api", "create_app"),
}


def __getattr__(name: str) -> Any:  # pragma: no cover - trivial delegator
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module 'support_rca' has no attribute {name!r}")
    module_name, attr_name = _LAZY_IMPORTS[name]
    module = import_module(module_name)
    attr = getattr(module, attr_name)
    globals()[name] = attr
    return attr
