"""Auth state for calls made on behalf of a signed-in user."""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field

from pystorefront._constants import AUTH_COOKIE_NAME
from pystorefront.models.user import User

_logger = logging.getLogger(__name__)


def decode_token_payload(token: str) -> dict[str, Any]:
    """Decode the (unverified) JWT claims of *token*.

    The signature is not checked; the backend does that on every request.
    Returns an empty dict for malformed tokens.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        decoded = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (ValueError, UnicodeDecodeError):
        return {}
    return decoded if isinstance(decoded, dict) else {}


class AuthSession(BaseModel):
    """Immutable auth state after a successful sign-in.

    Parameters
    ----------
    token : str
        Bearer token sent in the ``Authorization`` header.
    record : User or None
        The authenticated user's record.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    token: str
    record: User | None = None
    created_at: float = Field(default_factory=time.time)

    @property
    def expires_at(self) -> float | None:
        """Epoch seconds from the token's ``exp`` claim, if present."""
        exp = decode_token_payload(self.token).get("exp")
        if isinstance(exp, (int, float)):
            return float(exp)
        return None

    @property
    def is_expired(self) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            # Opaque tokens without claims are trusted until the backend rejects them.
            return False
        return time.time() >= expires_at

    @property
    def is_valid(self) -> bool:
        return bool(self.token) and not self.is_expired

    @property
    def user_id(self) -> str | None:
        return self.record.id if self.record is not None else None

    def with_record(self, record: User) -> AuthSession:
        return self.model_copy(update={"record": record})

    # ------------------------------------------------------------------
    # Cookie round-trip
    # ------------------------------------------------------------------

    def export_cookie(self, *, secure: bool = False, http_only: bool = False, same_site: str = "Lax") -> str:
        """Serialise to a ``Set-Cookie`` header value compatible with the JS SDK."""
        record: dict[str, Any] | None = None
        if self.record is not None:
            record = self.record.raw or self.record.model_dump(by_alias=True, exclude={"raw"}, mode="json")
        payload = {"token": self.token, "record": record}
        parts = [f"{AUTH_COOKIE_NAME}={quote(json.dumps(payload, separators=(',', ':')))}", "Path=/"]
        expires_at = self.expires_at
        if expires_at is not None:
            parts.append(f"Expires={time.strftime('%a, %d %b %Y %H:%M:%S GMT', time.gmtime(expires_at))}")
        if secure:
            parts.append("Secure")
        if http_only:
            parts.append("HttpOnly")
        parts.append(f"SameSite={same_site}")
        return "; ".join(parts)

    @classmethod
    def from_cookie(cls, cookie_header: str) -> AuthSession | None:
        """Load auth state from a ``Cookie`` header; ``None`` when absent or unreadable."""
        raw_value = parse_cookie_header(cookie_header).get(AUTH_COOKIE_NAME)
        if not raw_value:
            return None
        try:
            data = json.loads(unquote(raw_value))
        except json.JSONDecodeError:
            _logger.debug("Ignoring malformed %s cookie", AUTH_COOKIE_NAME)
            return None
        if not isinstance(data, dict) or not data.get("token"):
            return None
        # Older SDKs stored the user under "model".
        record_data = data.get("record") or data.get("model")
        record = User.model_validate(record_data) if isinstance(record_data, dict) else None
        return cls(token=str(data["token"]), record=record)


def parse_cookie_header(cookie_header: str) -> dict[str, str]:
    """Split a ``Cookie`` header into a name -> raw value mapping."""
    cookies: dict[str, str] = {}
    for chunk in cookie_header.split(";"):
        name, sep, value = chunk.strip().partition("=")
        if sep and name:
            cookies[name] = value.strip().strip('"')
    return cookies
