"""
Customer-segment and revenue dashboards.

Rollups are computed here from tenant-scoped rows so the same RFM rules feed
both the dashboards and the chat assistant.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Set

from models.customer import CustomerAnalytics, CustomerDashboard, CustomerSegment
from models.revenue import MonthlyRevenue, RevenueDashboard, RevenueKPIs, SegmentRevenue
from repositories.analytics_repo import AnalyticsRepository
from services.segmentation_service import (
    frequency_score,
    lifetime_value,
    monetary_score,
    recency_score,
    segment,
    summarize_segments,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

TRAILING_MONTHS = 12
HIGH_VALUE_LIMIT = 5


def _add_months(month_start: date, months: int) -> date:
    index = month_start.year * 12 + (month_start.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class AnalyticsService:
    """Builds dashboard payloads for one tenant."""

    def __init__(self, repository: AnalyticsRepository) -> None:
        self.repository = repository

    def customer_analytics(
        self, business_id: str, today: Optional[date] = None
    ) -> List[CustomerAnalytics]:
        """Score every customer of the business and assign a segment."""
        today = today or date.today()
        customers = []
        for row in self.repository.customer_rollups(business_id):
            visits = row["total_appointments"]
            spent = row["total_spent"]
            last_visit = row["last_visit"]
            days = (today - last_visit).days if last_visit else None
            avg_order = spent / visits if visits else 0.0

            r_score = recency_score(days)
            f_score = frequency_score(visits)
            m_score = monetary_score(spent)
            customers.append(
                CustomerAnalytics(
                    id=row["id"],
                    name=row["name"],
                    email=row.get("email"),
                    last_visit=last_visit,
                    days_since_last_visit=days,
                    total_appointments=visits,
                    total_spent=spent,
                    avg_order_value=avg_order,
                    customer_lifetime_value=lifetime_value(avg_order, visits),
                    recency_score=r_score,
                    frequency_score=f_score,
                    monetary_score=m_score,
                    segment=segment(r_score, f_score, m_score),
                )
            )
        return customers

    def customer_dashboard(self, business_id: str, today: Optional[date] = None) -> CustomerDashboard:
        customers = self.customer_analytics(business_id, today)
        high_value = sorted(customers, key=lambda c: c.customer_lifetime_value, reverse=True)
        return CustomerDashboard(
            customers=customers,
            segments=summarize_segments(customers),
            high_value=high_value[:HIGH_VALUE_LIMIT],
        )

    def revenue_dashboard(self, business_id: str, today: Optional[date] = None) -> RevenueDashboard:
        """Trailing monthly revenue, headline KPIs and revenue split by segment."""
        today = today or date.today()
        monthly = self._monthly_revenue(business_id, today)
        dashboard = RevenueDashboard(
            monthly=monthly,
            kpis=self._kpis(monthly),
            segments=self._segment_revenue(self.customer_analytics(business_id, today)),
        )
        logger.info(
            "Revenue dashboard built",
            extra={"months": len(monthly), "segments": len(dashboard.segments)},
        )
        return dashboard

    def _monthly_revenue(self, business_id: str, today: date) -> List[MonthlyRevenue]:
        current = today.replace(day=1)
        months = [_add_months(current, offset) for offset in range(1 - TRAILING_MONTHS, 1)]

        revenue: Dict[date, float] = defaultdict(float)
        visits: Dict[date, int] = defaultdict(int)
        customers: Dict[date, Set[str]] = defaultdict(set)
        for row in self.repository.completed_visits_since(business_id, months[0].isoformat()):
            bucket = row["visit_date"].replace(day=1)
            revenue[bucket] += row["price"]
            visits[bucket] += 1
            if row["customer_id"]:
                customers[bucket].add(row["customer_id"])

        return [
            MonthlyRevenue(
                month=month,
                label=month.strftime("%b %y"),
                revenue=revenue[month],
                customers=len(customers[month]),
                appointments=visits[month],
                avg_transaction_value=revenue[month] / visits[month] if visits[month] else 0.0,
            )
            for month in months
        ]

    @staticmethod
    def _kpis(monthly: List[MonthlyRevenue]) -> RevenueKPIs:
        if not monthly:
            return RevenueKPIs()

        current = monthly[-1]
        previous = monthly[-2] if len(monthly) > 1 else None
        total_revenue = sum(m.revenue for m in monthly)
        peak_customers = max(m.customers for m in monthly)

        growth = 0.0
        if previous is not None and previous.revenue > 0:
            growth = (current.revenue - previous.revenue) / previous.revenue * 100

        return RevenueKPIs(
            total_revenue=total_revenue,
            monthly_growth=growth,
            avg_revenue_per_customer=total_revenue / peak_customers if peak_customers else 0.0,
            monthly_recurring_revenue=current.revenue,
            customer_acquisition_rate=current.customers,
        )

    @staticmethod
    def _segment_revenue(customers: List[CustomerAnalytics]) -> List[SegmentRevenue]:
        totals: Dict[CustomerSegment, float] = {}
        for customer in customers:
            totals[customer.segment] = totals.get(customer.segment, 0.0) + customer.total_spent

        grand_total = sum(totals.values())
        return [
            SegmentRevenue(
                segment=name,
                revenue=amount,
                percentage=amount / grand_total * 100 if grand_total > 0 else 0.0,
            )
            for name, amount in totals.items()
        ]
