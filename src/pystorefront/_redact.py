"""Scrub secrets out of payloads before they reach DEBUG logs.

Auth requests carry passwords and OAuth2 code verifiers, auth responses echo
the JWT back, and the ``pb_auth`` cookie holds both. Record bodies are
otherwise logged as-is so field mapping problems stay visible.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"
_MAX_DEPTH = 20

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwordconfirm",
        "oldpassword",
        "token",
        "authorization",
        "cookie",
        "set-cookie",
        "pb_auth",
        "code",
        "codeverifier",
        "_csrf",
        "x-csrf-token",
    }
)


def _is_secret(key: object, value: Any) -> bool:
    # Numeric "code" fields (health, error bodies) are status codes, not OAuth2 codes.
    return str(key).lower() in _SECRET_KEYS and isinstance(value, (str, Mapping))


def _clip(text: str, limit: int) -> str:
    if text.startswith("Bearer "):
        return f"Bearer {REDACTED}"
    return text if len(text) <= limit else f"{text[:limit]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy *value* with secret fields replaced and long strings clipped."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clip(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude={"raw"})

    def nested(item: Any) -> Any:
        return redact_for_log(item, max_string=max_string, _depth=_depth + 1)

    if isinstance(value, Mapping):
        return {str(k): REDACTED if _is_secret(k, v) else nested(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [nested(item) for item in value]
    return repr(value)
