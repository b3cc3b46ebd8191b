"""
Environment-specific configuration settings.

Defaults match a single-instance development deployment.
"""

from dataclasses import dataclass
import os
from typing import Optional


@dataclass
class Settings:
    """Application settings with development defaults."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # Database Configuration
    database_url: Optional[str] = None
    db_secret_arn: Optional[str] = None

    # Query behaviour
    inactivity_days: int = 30  # at-risk threshold
    customer_search_limit: int = 10

    # Rate limiting
    chat_queries_per_minute: int = 20
    dashboard_requests_per_minute: int = 30
    rate_limit_window_seconds: int = 60
    rate_limit_backend: str = "memory"  # memory | dynamodb
    rate_limit_table: str = "crm-rate-limits"

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        settings = cls(
            environment=env,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            database_url=os.environ.get("DATABASE_URL") or None,
            db_secret_arn=os.environ.get("DB_SECRET_ARN") or None,
            inactivity_days=int(os.environ.get("INACTIVITY_DAYS", "30")),
            customer_search_limit=int(os.environ.get("CUSTOMER_SEARCH_LIMIT", "10")),
            chat_queries_per_minute=int(os.environ.get("CHAT_QUERIES_PER_MINUTE", "20")),
            dashboard_requests_per_minute=int(
                os.environ.get("DASHBOARD_REQUESTS_PER_MINUTE", "30")
            ),
            rate_limit_window_seconds=int(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "60")),
            rate_limit_backend=os.environ.get("RATE_LIMIT_BACKEND", "memory").lower(),
            rate_limit_table=os.environ.get("RATE_LIMIT_TABLE", "crm-rate-limits"),
        )

        # Production runs several Lambda instances, so counters must be shared.
        if env == "prod" and "RATE_LIMIT_BACKEND" not in os.environ:
            settings.rate_limit_backend = "dynamodb"

        return settings
