"""Failure event records and the aggregate shapes derived from them."""

import copy
import uuid
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class FailureType(str, Enum):
    """Failure tags reported by the support agents.

    The event field itself is an open string so new reporters can introduce
    their own tags; these are the ones the support agents emit today.
    """

    PAYMENT = "payment"
    FRAUD = "fraud"
    SHIPPING = "shipping"


KNOWN_FAILURE_TYPES = tuple(member.value for member in FailureType)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FailureEventInput(BaseModel):
    """A failure as reported by a caller, before the store assigns an id."""

    failure_type: str = Field(..., min_length=1, description="Failure tag, see FailureType.")
    agent_name: str = Field(..., min_length=1, description="Subsystem that reported the failure.")
    timestamp: datetime = Field(..., description="When the failure happened, stamped by the caller.")
    request_id: str = Field(..., min_length=1, description="Originating request identifier.")
    gateway: Optional[str] = Field(
        default=None,
        description="Downstream dependency involved: payment processor, carrier or sub-check name.",
    )
    correlation_id: Optional[str] = Field(default=None, description="Secondary identifier such as an order id.")
    error_message: Optional[str] = Field(default=None, description="Free-text error description.")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Opaque key-value context.")

    @field_validator("failure_type", mode="before")
    @classmethod
    def _enum_to_tag(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    @field_validator("timestamp")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


def new_event_id(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"fail_{int(moment.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


class FailureEvent(FailureEventInput):
    """Immutable stored failure."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Store-assigned unique identifier.")
    metadata: Optional[Mapping[str, Any]] = Field(default=None, description="Read-only key-value context.")

    @field_validator("metadata")
    @classmethod
    def _freeze_metadata(cls, value: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
        if value is None:
            return None
        return MappingProxyType(copy.deepcopy(dict(value)))

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        return dict(value) if value is not None else None

    @classmethod
    def from_input(cls, event: FailureEventInput, event_id: str) -> "FailureEvent":
        return cls(id=event_id, **event.model_dump())

    def dimension(self, name: str) -> Optional[str]:
        return getattr(self, name)


class AggregatedGroup(BaseModel):
    key: str
    count: int
    percentage: int = Field(..., ge=0, le=100)
    first_occurrence: datetime
    last_occurrence: datetime


class HourBucket(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int
    percentage: int = Field(..., ge=0, le=100)


class RepeatedPattern(BaseModel):
    pattern: str = Field(..., description="Display key: agent:gateway:error.")
    count: int
    agent: str
    gateway: Optional[str] = None


class StoreStats(BaseModel):
    total_events: int = 0
    oldest_event: Optional[datetime] = None
    newest_event: Optional[datetime] = None
