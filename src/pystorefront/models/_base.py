"""Base models for backend records.

Every record model inherits from :class:`RecordModel` which provides:

* ``alias_generator=to_camel`` so camelCase record keys map
  automatically to snake_case fields.
* The system fields every record carries (``id``, ``created``,
  ``updated``, ``collectionId``, ``collectionName``) and the ``expand``
  map holding related records requested with ``expand=``.
* A ``raw`` dict that captures the original payload.

Nested JSON values that are not records (order lines, addresses, cart
items) use :class:`StorefrontModel` which only carries the alias handling.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def parse_backend_datetime(value: Any) -> datetime | None:
    """Convert a backend date string to a UTC datetime.

    The backend serialises dates as ``"2024-01-15 10:30:00.123Z"`` and
    uses the empty string for "not set". Returns ``None`` for empty values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    text = str(value).strip()
    if not text:
        return None
    parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_backend_datetime(value: datetime) -> str:
    """Serialise a datetime the way the backend stores it."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


BackendDatetime = Annotated[datetime | None, BeforeValidator(parse_backend_datetime)]
"""Annotated type that coerces backend date strings (``""`` = unset) to UTC datetimes."""


class StorefrontModel(BaseModel):
    """Base for nested JSON values (camelCase on the wire, snake_case in Python)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON shape the backend expects."""
        return self.model_dump(mode="json", by_alias=True, exclude={"raw"})


class RecordModel(StorefrontModel):
    """Base for backend collection records."""

    id: str = ""
    created: BackendDatetime = None
    updated: BackendDatetime = None
    collection_id: str = ""
    collection_name: str = ""
    expand: dict[str, Any] = Field(default_factory=dict)
    """Related records requested with ``expand=`` (left as plain dicts)."""

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original record dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        """Stash the raw payload and drop ``null`` values so defaults apply."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep the caller's raw= when constructing with keyword arguments.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    def expanded(self, key: str) -> Any:
        """Return the expanded relation stored under *key*, or ``None``."""
        return self.expand.get(key)
