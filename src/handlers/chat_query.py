"""
Handler for POST /chat/query.

The handler stays thin: validate, rate-limit, then hand the question to
ChatService. Fetch failures never surface here; the dispatcher already turned
them into a polite error result.
"""

from __future__ import annotations

import json
import uuid
from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from models.query import ChatQueryRequest
from utils.error_handling import AppError, RateLimitError, ValidationError, to_response
from utils.logging_config import get_logger
from utils.rate_limiter import get_rate_limiter
from utils.validators import ensure_business_id

logger = get_logger(__name__)

RATE_LIMIT_ACTION = "CHAT_QUERY"

# Lazy-loaded service to avoid import-time DB connections
_chat_service: Optional["ChatService"] = None


def _get_chat_service():
    """Lazy-load ChatService wired to the shared engine."""
    global _chat_service
    if _chat_service is None:
        from config.settings import Settings
        from repositories.analytics_repo import AnalyticsRepository
        from repositories.postgres_repo import get_db_engine
        from services.chat_service import ChatService
        from services.query_service import QueryService

        settings = Settings.from_environment()
        repository = AnalyticsRepository(get_db_engine())
        _chat_service = ChatService(
            QueryService(
                repository,
                inactivity_days=settings.inactivity_days,
                search_limit=settings.customer_search_limit,
            )
        )
    return _chat_service


def lambda_handler(event, context) -> Dict:
    """Answer one natural-language business question."""
    correlation_id = str(uuid.uuid4())
    try:
        try:
            payload = json.loads(event.get("body") or "{}")
        except json.JSONDecodeError:
            raise AppError("Request body must be valid JSON", status_code=400)

        try:
            request = ChatQueryRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(
                "; ".join(err["msg"] for err in exc.errors()) or "Invalid request"
            )
        business_id = ensure_business_id(request.business_id)

        if not get_rate_limiter().check_limit(RATE_LIMIT_ACTION, business_id):
            raise RateLimitError("Please wait a moment before asking another question")

        result = _get_chat_service().ask(
            request.message,
            business_id,
            custom_range=request.custom_range(),
            correlation_id=correlation_id,
        )
        return {
            "statusCode": 200,
            "headers": {"Content-Type": "application/json"},
            "body": result.model_dump_json(),
        }
    except AppError as exc:
        logger.info(
            "Chat query rejected",
            extra={"correlation_id": correlation_id, "status_code": exc.status_code},
        )
        return to_response(exc, correlation_id)
    except Exception:
        logger.exception("Chat query failed", extra={"correlation_id": correlation_id})
        return to_response(AppError("Internal error", status_code=500), correlation_id)
