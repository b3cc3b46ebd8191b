"""
Single Lambda entrypoint for the HTTP API.

One function serves every route so the engine pool and the in-memory rate
limiter stay warm across chat and dashboard traffic.
"""

from types import ModuleType
from typing import Dict, Tuple
import json

from . import analytics, chat_query, health_check

# "METHOD /path" -> (module, attribute); looked up per call so tests can patch handlers.
ROUTES: Dict[str, Tuple[ModuleType, str]] = {
    "GET /health": (health_check, "lambda_handler"),
    "POST /chat/query": (chat_query, "lambda_handler"),
    "GET /analytics/customers": (analytics, "customers_handler"),
    "GET /analytics/revenue": (analytics, "revenue_handler"),
}


def _route_key(event: Dict) -> str:
    http = event.get("requestContext", {}).get("http", {})
    path = http.get("path", "").rstrip("/") or "/"
    return f"{http.get('method', '').upper()} {path}"


def _not_found(route_key: str) -> Dict:
    return {
        "statusCode": 404,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"message": "Route not found", "route": route_key}),
    }


def lambda_handler(event, context):
    """Dispatch on exact method and path; anything else is a 404."""
    route_key = _route_key(event)
    target = ROUTES.get(route_key)
    if target is None:
        return _not_found(route_key)

    module, attribute = target
    return getattr(module, attribute)(event, context)
