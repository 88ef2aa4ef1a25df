"""Exceptions raised to callers of the RCA engine."""

from typing import Any, Dict, List, Optional


class InvalidFailureEventError(ValueError):
    """A failure report is missing required fields or has malformed values."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []
