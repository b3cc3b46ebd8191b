"""
RFM segmentation.

Scores are 1-5 integers computed from a customer's completed appointments;
``segment`` buckets the three scores. Rules are checked top to bottom and the
first hit wins. Any score triple that satisfies the New rule also satisfies
the At-Risk rule above it, so integer scores never produce "New".
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from models.customer import CustomerAnalytics, CustomerSegment, SegmentSummary

NO_VISIT_DAYS = 999
LIFETIME_FACTOR = 2.5


def segment(recency: int, frequency: int, monetary: int) -> CustomerSegment:
    """Classify a customer from recency, frequency and monetary scores."""
    if recency >= 4 and frequency >= 4 and monetary >= 4:
        return CustomerSegment.CHAMPIONS
    if recency >= 3 and frequency >= 3 and monetary >= 3:
        return CustomerSegment.LOYAL
    if recency >= 3 and frequency <= 2:
        return CustomerSegment.AT_RISK
    if recency <= 2 and frequency <= 2:
        return CustomerSegment.LOST
    if recency >= 4 and frequency <= 1:
        return CustomerSegment.NEW
    return CustomerSegment.POTENTIAL


def recency_score(days_since_last_visit: Optional[int]) -> int:
    """Score how recently the customer last completed an appointment."""
    days = NO_VISIT_DAYS if days_since_last_visit is None else days_since_last_visit
    if days <= 30:
        return 5
    if days <= 60:
        return 4
    if days <= 90:
        return 3
    if days <= 180:
        return 2
    return 1


def frequency_score(completed_appointments: int) -> int:
    """Score how often the customer visits."""
    if completed_appointments >= 10:
        return 5
    if completed_appointments >= 7:
        return 4
    if completed_appointments >= 4:
        return 3
    if completed_appointments >= 2:
        return 2
    return 1


def monetary_score(total_spent: float) -> int:
    """Score the customer's completed spend."""
    if total_spent >= 1000:
        return 5
    if total_spent >= 500:
        return 4
    if total_spent >= 200:
        return 3
    if total_spent >= 50:
        return 2
    return 1


def lifetime_value(avg_order_value: float, completed_appointments: int) -> float:
    """Simplified CLV: average order value times visit count times a fixed lifespan factor."""
    return avg_order_value * completed_appointments * LIFETIME_FACTOR


def summarize_segments(customers: Iterable[CustomerAnalytics]) -> List[SegmentSummary]:
    """Count customers and total lifetime value per segment, in first-seen order."""
    summaries: Dict[CustomerSegment, SegmentSummary] = {}
    for customer in customers:
        summary = summaries.setdefault(customer.segment, SegmentSummary(segment=customer.segment))
        summary.count += 1
        summary.total_value += customer.customer_lifetime_value
    return list(summaries.values())
