"""
Question classification service.

Keyword matching over lower-cased text. Each table is scanned in order and the
first label with any trigger contained in the text wins, so ambiguous input
("which customer made the most revenue") resolves to whichever label is
listed first. There is no scoring.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TypeVar

from models.query import Intent, Metric, StructuredQuery, Timeframe
from utils.logging_config import get_logger

logger = get_logger(__name__)

Label = TypeVar("Label")
TriggerTable = Sequence[Tuple[Label, Tuple[str, ...]]]

# "week" and "month" sit before the "last-*" rows, so "last week" resolves to
# this-week. Reordering changes what users get back.
TIMEFRAME_TRIGGERS: TriggerTable = (
    (Timeframe.TODAY, ("today", "this day")),
    (Timeframe.YESTERDAY, ("yesterday",)),
    (Timeframe.THIS_WEEK, ("this week", "week")),
    (Timeframe.LAST_WEEK, ("last week",)),
    (Timeframe.THIS_MONTH, ("this month", "month")),
    (Timeframe.LAST_MONTH, ("last month",)),
    (Timeframe.THIS_YEAR, ("this year", "year")),
)

INTENT_TRIGGERS: TriggerTable = (
    (
        Intent.CUSTOMER,
        ("customer", "client", "who", "best customer", "top customer", "vip", "at risk", "churn"),
    ),
    (Intent.REVENUE, ("revenue", "money", "sales", "earnings", "income", "profit", "made")),
    (Intent.APPOINTMENT, ("appointment", "booking", "scheduled", "visit", "meeting")),
    (Intent.ANALYTICS, ("analytics", "report", "insight", "trend", "analysis")),
)

METRIC_TRIGGERS: TriggerTable = (
    (Metric.BEST, ("best", "top", "highest", "most")),
    (Metric.WORST, ("worst", "lowest", "least")),
    (Metric.TOTAL, ("total", "sum", "all")),
    (Metric.AVERAGE, ("average", "avg", "mean")),
    (Metric.COUNT, ("how many", "number of", "count")),
    (Metric.AT_RISK, ("at risk", "churn", "haven't visited", "inactive", "lost")),
)

_NAME_PATTERN = re.compile(r"named? ([A-Za-z]+)")
_SERVICE_PATTERN = re.compile(r"(service|appointment) ([A-Za-z\s]+)")


def first_match(text: str, table: TriggerTable) -> Optional[Label]:
    """Return the first label whose triggers appear in ``text``."""
    for label, triggers in table:
        if any(trigger in text for trigger in triggers):
            return label
    return None


def extract_entity(text: str) -> Optional[str]:
    """Best-effort pull of a name or service phrase; misses unprefixed multi-word names."""
    name_match = _NAME_PATTERN.search(text)
    if name_match:
        return name_match.group(1)

    service_match = _SERVICE_PATTERN.search(text)
    if service_match:
        return service_match.group(2).strip() or None

    return None


@dataclass
class ClassificationService:
    """Turns a free-text business question into a StructuredQuery."""

    default_timeframe: Timeframe = Timeframe.THIS_MONTH

    def classify(self, text: str) -> StructuredQuery:
        """Classify timeframe, intent and metric, and extract an entity."""
        lower_text = (text or "").lower()

        query = StructuredQuery(
            intent=first_match(lower_text, INTENT_TRIGGERS) or Intent.GENERAL,
            entity=extract_entity(lower_text),
            timeframe=first_match(lower_text, TIMEFRAME_TRIGGERS) or self.default_timeframe,
            metric=first_match(lower_text, METRIC_TRIGGERS),
        )

        logger.debug(
            "Question classified",
            extra={
                "intent": query.intent.value,
                "timeframe": query.timeframe.value,
                "metric": query.metric.value if query.metric else None,
            },
        )
        return query
