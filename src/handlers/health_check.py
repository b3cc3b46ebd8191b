"""Lightweight health check handler."""

import json
from datetime import datetime, timezone

from config.settings import Settings
from utils.logging_config import SERVICE_NAME


def lambda_handler(event, context):
    """Report liveness plus which backends this container is configured for."""
    settings = Settings.from_environment()
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "status": "ok",
                "service": SERVICE_NAME,
                "environment": settings.environment,
                "database_configured": bool(settings.database_url or settings.db_secret_arn),
                "rate_limit_backend": settings.rate_limit_backend,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ),
    }
