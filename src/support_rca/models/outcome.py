"""Result type for best-effort collaborator calls."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class OutcomeError(BaseModel):
    """Why a collaborator call did not produce a usable value."""

    message: str = Field(..., description="Human-readable failure reason.")
    code: Optional[str] = Field(default=None, description="Machine-readable reason, e.g. 'timeout'.")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Structured failure context.")


class Outcome(BaseModel):
    """Either a value (``success``) or an :class:`OutcomeError`, never both."""

    success: bool
    data: Optional[Any] = None
    error: Optional[OutcomeError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "Outcome":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> "Outcome":
        return cls(success=False, error=OutcomeError(message=message, code=code, details=details))

    def unwrap_or(self, default: Any) -> Any:
        if self.success and self.data is not None:
            return self.data
        return default
