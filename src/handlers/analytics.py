"""Handlers for GET /analytics/customers and GET /analytics/revenue."""

from __future__ import annotations

import uuid
from typing import Callable, Dict, Optional, Union

from models.customer import CustomerDashboard
from models.response import DashboardResponse
from models.revenue import RevenueDashboard
from utils.error_handling import AppError, RateLimitError, to_response
from utils.logging_config import get_logger
from utils.rate_limiter import get_rate_limiter
from utils.validators import ensure_business_id

logger = get_logger(__name__)

RATE_LIMIT_ACTION = "ANALYTICS_DASHBOARD"

# Lazy-loaded service to avoid import-time DB connections
_analytics_service: Optional["AnalyticsService"] = None


def _get_analytics_service():
    """Lazy-load AnalyticsService."""
    global _analytics_service
    if _analytics_service is None:
        from repositories.analytics_repo import AnalyticsRepository
        from repositories.postgres_repo import get_db_engine
        from services.analytics_service import AnalyticsService

        _analytics_service = AnalyticsService(AnalyticsRepository(get_db_engine()))
    return _analytics_service


def _serve(
    event,
    build: Callable[[str], Union[CustomerDashboard, RevenueDashboard]],
    message: str,
) -> Dict:
    """Shared validation, rate limiting and error mapping for dashboard reads."""
    correlation_id = str(uuid.uuid4())
    query_params = event.get("queryStringParameters") or {}
    try:
        business_id = ensure_business_id(query_params.get("business_id"))
        if not get_rate_limiter().check_limit(RATE_LIMIT_ACTION, business_id):
            raise RateLimitError()

        payload = build(business_id)
        logger.info(message, extra={"correlation_id": correlation_id})
        return {
            "statusCode": 200,
            "headers": {"Content-Type": "application/json"},
            "body": DashboardResponse(
                message=message,
                business_id=business_id,
                data=payload,
                correlation_id=correlation_id,
            ).model_dump_json(),
        }
    except AppError as exc:
        logger.warning(
            "Dashboard request failed",
            extra={"correlation_id": correlation_id, "status_code": exc.status_code},
        )
        return to_response(exc, correlation_id)
    except Exception:
        logger.exception("Dashboard request failed", extra={"correlation_id": correlation_id})
        return to_response(AppError("Internal error", status_code=500), correlation_id)


def customers_handler(event, context) -> Dict:
    """Return RFM scores, segment summary and top customers."""
    return _serve(
        event,
        lambda business_id: _get_analytics_service().customer_dashboard(business_id),
        "Customer analytics served",
    )


def revenue_handler(event, context) -> Dict:
    """Return trailing monthly revenue, KPIs and revenue by segment."""
    return _serve(
        event,
        lambda business_id: _get_analytics_service().revenue_dashboard(business_id),
        "Revenue analytics served",
    )
