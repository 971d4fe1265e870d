"""Small helpers: order numbers, slugs, date formatting."""

from __future__ import annotations

import re
import secrets
from datetime import UTC, date, datetime
from typing import Any

from pystorefront.models._base import parse_backend_datetime

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")


def generate_order_number(prefix: str = "ORD", now: datetime | None = None) -> str:
    """``PREFIX-YYYYMMDD-NNNN`` with a random four digit suffix."""
    now = now or datetime.now(UTC)
    return f"{prefix}-{now:%Y%m%d}-{secrets.randbelow(10_000):04d}"


def generate_slug(name: str) -> str:
    """``"Hello, World!"`` -> ``"hello-world"``."""
    return _SLUG_STRIP_RE.sub("-", name.lower()).strip("-")


def format_date(value: Any) -> str:
    """Long date such as ``"January 15, 2024"``; ``"N/A"`` for missing or invalid values."""
    if value is None or value == "":
        return "N/A"
    if isinstance(value, date) and not isinstance(value, datetime):
        parsed: date = value
    else:
        try:
            parsed_dt = parse_backend_datetime(value)
        except (TypeError, ValueError):
            return "N/A"
        if parsed_dt is None:
            return "N/A"
        parsed = parsed_dt
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def iso_timestamp(value: datetime) -> str:
    """UTC timestamp with millisecond precision: ``2024-01-15T10:30:00.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
