"""Revenue models."""

from datetime import date
from typing import List

from pydantic import BaseModel, Field

from models.customer import CustomerSegment


class RevenueResult(BaseModel):
    """Completed-appointment revenue aggregate for one tenant and period."""

    total_revenue: float = 0.0
    appointment_count: int = 0
    avg_transaction_value: float = 0.0
    unique_customers: int = 0

    @classmethod
    def empty(cls) -> "RevenueResult":
        return cls()


class MonthlyRevenue(BaseModel):
    """One calendar month of completed revenue."""

    month: date
    label: str
    revenue: float = 0.0
    customers: int = 0
    appointments: int = 0
    avg_transaction_value: float = 0.0


class RevenueKPIs(BaseModel):
    """Headline figures shown above the revenue chart."""

    total_revenue: float = 0.0
    monthly_growth: float = 0.0
    avg_revenue_per_customer: float = 0.0
    monthly_recurring_revenue: float = 0.0
    customer_acquisition_rate: int = 0


class SegmentRevenue(BaseModel):
    """Lifetime spend attributed to one customer segment."""

    segment: CustomerSegment
    revenue: float
    percentage: float = Field(ge=0, le=100)


class RevenueDashboard(BaseModel):
    """Everything the revenue analytics page renders."""

    monthly: List[MonthlyRevenue] = Field(default_factory=list)
    kpis: RevenueKPIs = Field(default_factory=RevenueKPIs)
    segments: List[SegmentRevenue] = Field(default_factory=list)
