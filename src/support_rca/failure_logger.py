"""Convenience API for agents that report failed operations."""

from typing import Any, Dict, Optional, Union

from .logging import build_logger
from .models import FailureEvent, FailureType
from .report import Clock, utcnow
from .store import FailureEventStore


class FailureLogger:
    """Stamps and records failures on behalf of the support agents.

    Example::

        failures = FailureLogger(store)
        failures.log_payment_failure(
            agent_name="hulk",
            request_id="req-123",
            gateway="stripe",
            error_message="Card declined",
        )
    """

    def __init__(self, store: FailureEventStore, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock
        self._logger = build_logger("FailureLogger")

    def log_failure(
        self,
        failure_type: Union[FailureType, str],
        agent_name: str,
        request_id: str,
        *,
        gateway: Optional[str] = None,
        correlation_id: Optional[str] = None,
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> FailureEvent:
        event = self._store.record(
            {
                "failure_type": failure_type,
                "agent_name": agent_name,
                "timestamp": self._clock(),
                "request_id": request_id,
                "gateway": gateway,
                "correlation_id": correlation_id,
                "error_message": error_message,
                "metadata": metadata,
            }
        )
        self._logger.info(
            "failure_logged",
            failure_type=event.failure_type,
            agent=agent_name,
            gateway=gateway,
            request_id=request_id,
            error=error_message,
        )
        return event

    def log_payment_failure(self, agent_name: str, request_id: str, **fields: Any) -> FailureEvent:
        return self.log_failure(FailureType.PAYMENT, agent_name, request_id, **fields)

    def log_fraud_failure(self, agent_name: str, request_id: str, **fields: Any) -> FailureEvent:
        return self.log_failure(FailureType.FRAUD, agent_name, request_id, **fields)

    def log_shipping_failure(self, agent_name: str, request_id: str, **fields: Any) -> FailureEvent:
        """``gateway`` is the carrier, e.g. ``fedex`` or ``ups``."""
        return self.log_failure(FailureType.SHIPPING, agent_name, request_id, **fields)

    def for_agent(self, agent_name: str, failure_type: Union[FailureType, str]) -> "AgentFailureLogger":
        return AgentFailureLogger(self, agent_name, failure_type)


class AgentFailureLogger:
    """FailureLogger pre-bound to one agent and failure type."""

    def __init__(self, parent: FailureLogger, agent_name: str, failure_type: Union[FailureType, str]) -> None:
        self._parent = parent
        self.agent_name = agent_name
        self.failure_type = failure_type

    def log(self, request_id: str, **fields: Any) -> FailureEvent:
        return self._parent.log_failure(self.failure_type, self.agent_name, request_id, **fields)
