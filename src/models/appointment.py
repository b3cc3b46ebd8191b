"""Appointment models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AppointmentResult(BaseModel):
    """Appointment row as listed by the chat assistant."""

    id: str
    customer_name: Optional[str] = None
    title: str
    start_time: datetime
    end_time: datetime
    status: str
    price: Optional[float] = None
