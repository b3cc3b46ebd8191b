"""
Aggregation dispatcher for structured chat queries.

Routes a StructuredQuery to one read-only aggregation on the data store and
wraps the rows in a QueryResult. Empty results are answers, not errors. Any
failure below this layer is logged and turned into one generic error result;
nothing is re-raised to the caller.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Callable, Dict, Optional

from models.query import Intent, Metric, QueryResult, ResultType, StructuredQuery
from models.revenue import RevenueResult
from repositories.analytics_repo import AnalyticsRepository
from services import response_formatter as fmt
from services.date_range_service import resolve_date_range
from utils.logging_config import get_logger
from utils.validators import sanitize_text

logger = get_logger(__name__)

AUDIT_ACTION = "CHAT_QUERY"

BranchHandler = Callable[[StructuredQuery, str, str, str], QueryResult]


class QueryService:
    """Dispatches structured queries for a single tenant."""

    def __init__(
        self,
        repository: AnalyticsRepository,
        inactivity_days: int = 30,
        search_limit: int = 10,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.repository = repository
        self.inactivity_days = inactivity_days
        self.search_limit = search_limit
        self.clock = clock or datetime.now
        # Every Intent member needs an entry here.
        self._branches: Dict[Intent, BranchHandler] = {
            Intent.CUSTOMER: self._customer,
            Intent.REVENUE: self._revenue,
            Intent.APPOINTMENT: self._appointments,
            Intent.ANALYTICS: self._clarify,
            Intent.GENERAL: self._clarify,
        }

    def dispatch(self, query: StructuredQuery, business_id: str) -> QueryResult:
        """Answer ``query`` from ``business_id``'s data only."""
        try:
            now = self.clock()
            date_range = resolve_date_range(query.timeframe, now=now, custom=query.custom_date)
            start_date, end_date = date_range.as_iso_dates()

            self._audit(query, business_id)

            branch = self._branches[query.intent]
            return branch(query, business_id, start_date, end_date)
        except Exception as exc:
            logger.exception(
                "Query dispatch failed",
                extra={"intent": query.intent.value, "error_type": type(exc).__name__},
            )
            return QueryResult(
                type=ResultType.ERROR,
                data=None,
                summary=fmt.ERROR_SUMMARY,
                follow_up_suggestions=fmt.suggestions_for("error"),
            )

    def _audit(self, query: StructuredQuery, business_id: str) -> None:
        """Record the read; the audit sink never blocks or fails a query."""
        metric = query.metric.value if query.metric else "general"
        try:
            self.repository.log_access(
                business_id,
                action=AUDIT_ACTION,
                resource=f"{query.intent.value}_{metric}",
                details={
                    "query": sanitize_text(json.dumps(query.model_dump(mode="json"))),
                    "timeframe": query.timeframe.value,
                },
            )
        except Exception as exc:
            logger.warning("Audit log write failed", extra={"error": str(exc)})

    def _customer(
        self, query: StructuredQuery, business_id: str, start_date: str, end_date: str
    ) -> QueryResult:
        if query.metric is Metric.BEST:
            customer = self.repository.best_customer(business_id, start_date, end_date)
            if customer is None:
                return QueryResult(
                    type=ResultType.CUSTOMER,
                    data=None,
                    summary=fmt.no_customers_summary(query.timeframe),
                    follow_up_suggestions=fmt.suggestions_for("best_customer_empty"),
                )
            return QueryResult(
                type=ResultType.CUSTOMER,
                data=customer,
                summary=fmt.best_customer_summary(customer, query.timeframe),
                follow_up_suggestions=fmt.suggestions_for("best_customer"),
            )

        if query.metric is Metric.AT_RISK:
            customers = self.repository.at_risk_customers(
                business_id, self.inactivity_days, today=self.clock().date()
            )
            return QueryResult(
                type=ResultType.LIST,
                data=customers,
                summary=fmt.at_risk_summary(len(customers), self.inactivity_days),
                follow_up_suggestions=fmt.suggestions_for("at_risk"),
            )

        entity = sanitize_text(query.entity) if query.entity else None
        customers = self.repository.search_customers(
            business_id, entity or None, limit=self.search_limit
        )
        return QueryResult(
            type=ResultType.LIST,
            data=customers,
            summary=fmt.customer_search_summary(len(customers), entity),
            follow_up_suggestions=fmt.suggestions_for("customer_search"),
        )

    def _revenue(
        self, query: StructuredQuery, business_id: str, start_date: str, end_date: str
    ) -> QueryResult:
        revenue = self.repository.revenue_in_range(business_id, start_date, end_date)
        if revenue is None:
            return QueryResult(
                type=ResultType.REVENUE,
                data=RevenueResult.empty(),
                summary=fmt.no_revenue_summary(query.timeframe),
                follow_up_suggestions=fmt.suggestions_for("revenue_empty"),
            )
        return QueryResult(
            type=ResultType.REVENUE,
            data=revenue,
            summary=fmt.revenue_summary(revenue, query.timeframe),
            follow_up_suggestions=fmt.suggestions_for("revenue"),
        )

    def _appointments(
        self, query: StructuredQuery, business_id: str, start_date: str, end_date: str
    ) -> QueryResult:
        appointments = self.repository.appointments_in_range(business_id, start_date, end_date)
        return QueryResult(
            type=ResultType.APPOINTMENTS,
            data=appointments,
            summary=fmt.appointments_summary(len(appointments), query.timeframe),
            follow_up_suggestions=fmt.suggestions_for("appointments"),
        )

    def _clarify(
        self, query: StructuredQuery, business_id: str, start_date: str, end_date: str
    ) -> QueryResult:
        return QueryResult(
            type=ResultType.ERROR,
            data=None,
            summary=fmt.CLARIFY_SUMMARY,
            follow_up_suggestions=fmt.suggestions_for("clarify"),
        )
