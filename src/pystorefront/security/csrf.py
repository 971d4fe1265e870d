"""Double-submit CSRF tokens."""

from __future__ import annotations

import hmac
import secrets
from collections.abc import Mapping
from typing import Any

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"
CSRF_FIELD_NAME = "_csrf"
TOKEN_BYTES = 32
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def generate_csrf_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(TOKEN_BYTES)


def tokens_match(candidate: Any, expected: str | None) -> bool:
    """Constant-time comparison; non-string or empty values never match."""
    if not isinstance(candidate, str) or not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def validate_csrf_request(
    method: str,
    cookie_token: str | None,
    headers: Mapping[str, str],
    *,
    form: Mapping[str, Any] | None = None,
    json_body: Any = None,
) -> bool:
    """Check a request's CSRF token against the cookie copy.

    Safe methods always pass. Otherwise the ``x-csrf-token`` header is
    checked first, then a ``_csrf`` field in the form or JSON body.
    """
    if method.upper() in SAFE_METHODS:
        return True
    if not cookie_token:
        return False
    header_token = next((value for name, value in headers.items() if name.lower() == CSRF_HEADER_NAME), None)
    if tokens_match(header_token, cookie_token):
        return True
    if form is not None and tokens_match(form.get(CSRF_FIELD_NAME), cookie_token):
        return True
    if isinstance(json_body, Mapping) and tokens_match(json_body.get(CSRF_FIELD_NAME), cookie_token):
        return True
    return False
