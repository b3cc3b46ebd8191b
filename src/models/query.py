"""Pydantic models for the smart-chat query pipeline."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.appointment import AppointmentResult
from models.customer import CustomerResult
from models.revenue import RevenueResult


class Intent(str, Enum):
    """What the question is about."""

    CUSTOMER = "customer"
    REVENUE = "revenue"
    APPOINTMENT = "appointment"
    ANALYTICS = "analytics"
    GENERAL = "general"


class Timeframe(str, Enum):
    """Symbolic period resolved to a concrete date range at query time."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this-week"
    LAST_WEEK = "last-week"
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"
    THIS_YEAR = "this-year"
    CUSTOM = "custom"


class Metric(str, Enum):
    """Qualifier that picks a branch within an intent."""

    BEST = "best"
    WORST = "worst"
    TOTAL = "total"
    AVERAGE = "average"
    COUNT = "count"
    AT_RISK = "at-risk"


class ResultType(str, Enum):
    """Shape of QueryResult.data, used by clients to pick a renderer."""

    CUSTOMER = "customer"
    REVENUE = "revenue"
    APPOINTMENTS = "appointments"
    CHART = "chart"
    LIST = "list"
    ERROR = "error"


class DateRange(BaseModel):
    """Concrete interval; the store only ever sees the calendar dates."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self

    def as_iso_dates(self) -> Tuple[str, str]:
        """Return (start, end) as ISO calendar dates without time of day."""
        return self.start.date().isoformat(), self.end.date().isoformat()


class StructuredQuery(BaseModel):
    """Normalized {intent, timeframe, metric, entity} tuple produced by classification."""

    model_config = ConfigDict(frozen=True)

    intent: Intent = Intent.GENERAL
    entity: Optional[str] = None
    timeframe: Timeframe = Timeframe.THIS_MONTH
    metric: Optional[Metric] = None
    custom_date: Optional[DateRange] = None


QueryData = Union[
    CustomerResult,
    RevenueResult,
    List[CustomerResult],
    List[AppointmentResult],
    None,
]


class QueryResult(BaseModel):
    """Response envelope returned for every chat question."""

    type: ResultType
    data: QueryData = None
    summary: str
    follow_up_suggestions: List[str] = Field(default_factory=list)


class ChatQueryRequest(BaseModel):
    """Inbound payload for POST /chat/query."""

    business_id: str
    message: str = Field(max_length=500)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        """Reject blank questions before they reach the classifier."""
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("message must be provided")
        return cleaned

    @model_validator(mode="after")
    def check_custom_range(self) -> "ChatQueryRequest":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be supplied together")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def custom_range(self) -> Optional[DateRange]:
        """Build an inclusive DateRange from the optional calendar dates."""
        if self.start_date is None or self.end_date is None:
            return None
        return DateRange(
            start=datetime.combine(self.start_date, datetime.min.time()),
            end=datetime.combine(self.end_date, datetime.max.time()),
        )
