"""
Smart-chat pipeline: sanitise -> classify -> dispatch.

The same question always produces the same structured query.
"""

from __future__ import annotations

import time
from typing import Optional

from models.query import DateRange, QueryResult, StructuredQuery, Timeframe
from services.classification_service import ClassificationService
from services.query_service import QueryService
from utils.logging_config import get_logger
from utils.validators import sanitize_text

logger = get_logger(__name__)


class ChatService:
    """Answers one business question for one tenant."""

    def __init__(
        self,
        query_service: QueryService,
        classifier: Optional[ClassificationService] = None,
    ) -> None:
        self.query_service = query_service
        self.classifier = classifier or ClassificationService()

    def interpret(self, message: str, custom_range: Optional[DateRange] = None) -> StructuredQuery:
        """Classify a question, pinning it to ``custom_range`` when one is given."""
        query = self.classifier.classify(sanitize_text(message))
        if custom_range is not None:
            query = query.model_copy(
                update={"timeframe": Timeframe.CUSTOM, "custom_date": custom_range}
            )
        return query

    def ask(
        self,
        message: str,
        business_id: str,
        custom_range: Optional[DateRange] = None,
        correlation_id: Optional[str] = None,
    ) -> QueryResult:
        """Run the full pipeline and time each stage."""
        c_start = time.perf_counter()
        query = self.interpret(message, custom_range)
        c_latency = int((time.perf_counter() - c_start) * 1000)

        d_start = time.perf_counter()
        result = self.query_service.dispatch(query, business_id)
        d_latency = int((time.perf_counter() - d_start) * 1000)

        logger.info(
            "Chat query answered",
            extra={
                "correlation_id": correlation_id,
                "intent": query.intent.value,
                "metric": query.metric.value if query.metric else None,
                "timeframe": query.timeframe.value,
                "result_type": result.type.value,
                "classification_latency_ms": c_latency,
                "dispatch_latency_ms": d_latency,
            },
        )
        return result
