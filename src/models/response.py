"""Envelope for the dashboard endpoints."""

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from models.customer import CustomerDashboard
from models.revenue import RevenueDashboard


class DashboardResponse(BaseModel):
    """One tenant's dashboard payload plus request metadata."""

    message: str
    business_id: str
    data: Union[CustomerDashboard, RevenueDashboard]
    correlation_id: Optional[str] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
