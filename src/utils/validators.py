"""Input validation and sanitisation helpers."""

import re
import uuid
from typing import Any

from utils.error_handling import ValidationError

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_TAG = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_DATA_SCHEME = re.compile(r"data:", re.IGNORECASE)


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy."""
    if value in (None, "", []):
        raise ValidationError(f"{field} is required")


def ensure_business_id(value: Any) -> str:
    """Return the canonical form of a tenant id, rejecting anything that is not a UUID."""
    ensure_present(value, "business_id")
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise ValidationError("business_id must be a valid UUID")


def sanitize_text(value: str) -> str:
    """Strip markup and script vectors from free text before it is parsed or logged."""
    if not value:
        return ""
    cleaned = _SCRIPT_TAG.sub("", value)
    cleaned = _IFRAME_TAG.sub("", cleaned)
    cleaned = _JS_SCHEME.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    cleaned = _DATA_SCHEME.sub("", cleaned)
    return cleaned.strip()
