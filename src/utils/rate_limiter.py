"""
Per-tenant rate limiting.

Call sites only depend on ``check_limit(action, tenant_key)``. The in-memory
backend suits a single warm Lambda; the DynamoDB backend shares counters
across instances. Concurrent checks may race and over-admit slightly; limits
are best-effort.
"""

import math
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Deque, Dict, Optional

from config.settings import Settings
from repositories.dynamodb_repo import DynamoDbRepository
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimit:
    """Allowance of ``max_requests`` per ``window_seconds`` sliding window."""

    max_requests: int
    window_seconds: float


RATE_LIMITS: Dict[str, RateLimit] = {
    "CHAT_QUERY": RateLimit(max_requests=20, window_seconds=60),
    "ANALYTICS_DASHBOARD": RateLimit(max_requests=30, window_seconds=60),
}


class RateLimiter(ABC):
    """Capability interface: may ``tenant_key`` perform ``action`` now?"""

    def __init__(self, limits: Optional[Dict[str, RateLimit]] = None):
        self.limits = dict(limits or RATE_LIMITS)

    @abstractmethod
    def check_limit(self, action: str, tenant_key: str) -> bool:
        """Record an attempt and return False once the allowance is used up."""

    def _limit_for(self, action: str) -> Optional[RateLimit]:
        limit = self.limits.get(action)
        if limit is None:
            logger.debug("No rate limit configured", extra={"action": action})
        return limit


class InMemoryRateLimiter(RateLimiter):
    """Thread-safe sliding window over attempt timestamps."""

    def __init__(
        self,
        limits: Optional[Dict[str, RateLimit]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(limits)
        self.clock = clock
        self._attempts: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def check_limit(self, action: str, tenant_key: str) -> bool:
        limit = self._limit_for(action)
        if limit is None:
            return True

        key = f"{action}:{tenant_key}"
        now = self.clock()
        with self._lock:
            attempts = self._attempts.setdefault(key, deque())
            while attempts and now - attempts[0] >= limit.window_seconds:
                attempts.popleft()

            if len(attempts) >= limit.max_requests:
                return False

            attempts.append(now)
            return True

    def reset(self) -> None:
        """Forget every recorded attempt."""
        with self._lock:
            self._attempts.clear()


class DynamoDbRateLimiter(RateLimiter):
    """
    Sliding-window counter shared through DynamoDB.

    Keeps one counter per fixed window and estimates the sliding count as the
    current window plus the previous one weighted by how much of it still
    overlaps. Items expire via the table's ``expires_at`` TTL attribute.
    """

    def __init__(
        self,
        repository: DynamoDbRepository,
        limits: Optional[Dict[str, RateLimit]] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(limits)
        self.repository = repository
        self.clock = clock

    def check_limit(self, action: str, tenant_key: str) -> bool:
        limit = self._limit_for(action)
        if limit is None:
            return True

        now = self.clock()
        window = limit.window_seconds
        bucket = int(now // window)
        elapsed_fraction = (now - bucket * window) / window
        pk = f"{action}#{tenant_key}"

        try:
            previous = self.repository.get_count(pk, str(bucket - 1))
            current = self.repository.get_count(pk, str(bucket))
        except Exception as exc:
            # Fail open when the table is unreachable.
            logger.warning("Rate limit lookup failed", extra={"error": str(exc)})
            return True

        estimated = previous * (1 - elapsed_fraction) + current
        if estimated >= limit.max_requests:
            return False

        try:
            self.repository.increment(
                pk, str(bucket), expires_at=int(math.ceil((bucket + 2) * window))
            )
        except Exception as exc:
            logger.warning("Rate limit increment failed", extra={"error": str(exc)})
        return True


def build_rate_limiter(settings: Settings) -> RateLimiter:
    """Pick the backend and allowances from settings."""
    window = settings.rate_limit_window_seconds
    limits = {
        "CHAT_QUERY": RateLimit(settings.chat_queries_per_minute, window),
        "ANALYTICS_DASHBOARD": RateLimit(settings.dashboard_requests_per_minute, window),
    }
    if settings.rate_limit_backend == "dynamodb":
        return DynamoDbRateLimiter(DynamoDbRepository(settings.rate_limit_table), limits)
    return InMemoryRateLimiter(limits)


_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the limiter shared by every handler in this container."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = build_rate_limiter(Settings.from_environment())
    return _rate_limiter
