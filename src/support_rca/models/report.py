"""RCA report structures."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .failure import AggregatedGroup, HourBucket, RepeatedPattern


class TimeWindow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: datetime = Field(..., alias="from")
    to: datetime
    hours: int


class FailureSummary(BaseModel):
    total_failures: int
    by_type: List[AggregatedGroup] = Field(default_factory=list)
    by_agent: List[AggregatedGroup] = Field(default_factory=list)
    by_gateway: List[AggregatedGroup] = Field(default_factory=list)


class TimeAnalysis(BaseModel):
    peak_hours: List[HourBucket] = Field(default_factory=list)
    hourly_distribution: List[HourBucket] = Field(default_factory=list)


class FailurePatterns(BaseModel):
    repeated_failures: List[RepeatedPattern] = Field(default_factory=list)


class RankedEntry(BaseModel):
    name: str
    percentage: int
    count: int


class PeakWindow(BaseModel):
    hours: str = Field(..., description="Human-readable hour range, e.g. '6 PM-8 PM'.")
    percentage: int


class PatternHighlight(BaseModel):
    description: str
    count: int


class Insights(BaseModel):
    most_failing_gateway: Optional[RankedEntry] = None
    most_failing_agent: Optional[RankedEntry] = None
    peak_failure_window: Optional[PeakWindow] = None
    top_pattern: Optional[PatternHighlight] = None


class RCAReport(BaseModel):
    """Outcome of one analysis pass over a look-back window."""

    generated_at: datetime
    time_window: TimeWindow
    summary: FailureSummary
    time_analysis: TimeAnalysis
    patterns: FailurePatterns
    insights: Insights
    ai_summary: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        """JSON-compatible dict; absent optional values are omitted."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TopFailureType(BaseModel):
    type: str
    count: int
    percentage: int


class QuickStats(BaseModel):
    total_failures: int
    top_failure_type: Optional[TopFailureType] = None
    top_gateway: Optional[RankedEntry] = None
    top_agent: Optional[RankedEntry] = None
