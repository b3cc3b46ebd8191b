"""Pydantic models for API payloads."""

from models.appointment import AppointmentResult  # noqa: F401
from models.customer import (  # noqa: F401
    CustomerAnalytics,
    CustomerDashboard,
    CustomerResult,
    CustomerSegment,
    SegmentSummary,
)
from models.query import (  # noqa: F401
    ChatQueryRequest,
    DateRange,
    Intent,
    Metric,
    QueryResult,
    ResultType,
    StructuredQuery,
    Timeframe,
)
from models.response import DashboardResponse  # noqa: F401
from models.revenue import (  # noqa: F401
    MonthlyRevenue,
    RevenueDashboard,
    RevenueKPIs,
    RevenueResult,
    SegmentRevenue,
)
