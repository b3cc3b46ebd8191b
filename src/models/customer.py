"""Customer models."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CustomerSegment(str, Enum):
    """RFM-derived customer buckets."""

    CHAMPIONS = "Champions"
    LOYAL = "Loyal"
    AT_RISK = "At-Risk"
    LOST = "Lost"
    NEW = "New"
    POTENTIAL = "Potential"


class CustomerResult(BaseModel):
    """Read-only customer projection computed per request."""

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    total_spent: float = 0.0
    appointment_count: int = 0
    last_visit: Optional[date] = None
    days_since_last_visit: Optional[int] = None


class CustomerAnalytics(BaseModel):
    """Per-customer RFM row for the customer dashboard."""

    id: str
    name: str
    email: Optional[str] = None
    last_visit: Optional[date] = None
    days_since_last_visit: Optional[int] = None
    total_appointments: int
    total_spent: float
    avg_order_value: float
    customer_lifetime_value: float
    recency_score: int = Field(ge=1, le=5)
    frequency_score: int = Field(ge=1, le=5)
    monetary_score: int = Field(ge=1, le=5)
    segment: CustomerSegment


class SegmentSummary(BaseModel):
    """Customer count and combined lifetime value for one segment."""

    segment: CustomerSegment
    count: int = 0
    total_value: float = 0.0


class CustomerDashboard(BaseModel):
    """Everything the customer analytics page renders."""

    customers: List[CustomerAnalytics] = Field(default_factory=list)
    segments: List[SegmentSummary] = Field(default_factory=list)
    high_value: List[CustomerAnalytics] = Field(default_factory=list)
