"""Route guard, site password, and response security headers."""

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote, unquote, urlsplit

from pystorefront._constants import AUTH_COOKIE_NAME, DEFAULT_BASE_URL
from pystorefront.session import parse_cookie_header

_logger = logging.getLogger(__name__)

SITE_ACCESS_COOKIE = "site-access"
SITE_ACCESS_GRANTED = "granted"

PUBLIC_ROUTES = ("/password", "/api/site-access")
PROTECTED_ROUTES = ("/account", "/checkout")
ADMIN_ROUTES = ("/admin",)
AUTH_ROUTES = ("/login",)

_LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1"})


@dataclass(frozen=True, slots=True)
class CookieAuth:
    is_valid: bool = False
    is_admin: bool = False


class AccessAction(StrEnum):
    ALLOW = "allow"
    REDIRECT = "redirect"


@dataclass(frozen=True, slots=True)
class AccessDecision:
    action: AccessAction
    location: str | None = None

    @property
    def allowed(self) -> bool:
        return self.action == AccessAction.ALLOW


_ALLOW = AccessDecision(AccessAction.ALLOW)


def _redirect(location: str) -> AccessDecision:
    return AccessDecision(AccessAction.REDIRECT, location)


def _matches(path: str, routes: tuple[str, ...]) -> bool:
    return any(path.startswith(route) for route in routes)


def auth_from_cookie(cookie_header: str, *, admin_email: str | None = None) -> CookieAuth:
    """Read sign-in status from the ``pb_auth`` cookie without calling the backend.

    The token is not verified here; this only decides where to route.
    """
    raw = parse_cookie_header(cookie_header).get(AUTH_COOKIE_NAME)
    if not raw:
        return CookieAuth()
    try:
        data = json.loads(unquote(raw))
    except json.JSONDecodeError:
        _logger.debug("Unreadable %s cookie", AUTH_COOKIE_NAME)
        return CookieAuth()
    if not isinstance(data, dict):
        return CookieAuth()
    record = data.get("record") or data.get("model") or {}
    if not isinstance(record, dict):
        record = {}
    is_admin = record.get("role") == "admin" or (bool(admin_email) and record.get("email") == admin_email)
    return CookieAuth(is_valid=bool(data.get("token")), is_admin=is_admin)


def resolve_route_access(
    path: str,
    auth: CookieAuth,
    *,
    site_access_granted: bool = False,
    site_password_enabled: bool = False,
) -> AccessDecision:
    """Decide whether *path* may be served or where to redirect.

    Order: site password gate, signed-in users away from login, sign-in
    for account/checkout, admin role for the console.
    """
    if site_password_enabled and not _matches(path, PUBLIC_ROUTES) and not site_access_granted:
        return _redirect("/password")
    if _matches(path, AUTH_ROUTES) and auth.is_valid:
        return _redirect("/")
    if _matches(path, PROTECTED_ROUTES + ADMIN_ROUTES) and not auth.is_valid:
        return _redirect(f"/login?redirect={quote(path, safe='/')}")
    if _matches(path, ADMIN_ROUTES) and not auth.is_admin:
        return _redirect("/?error=unauthorized")
    return _ALLOW


def check_site_password(candidate: str, site_password: str | None) -> bool:
    """Constant-time site password check; no configured password means open access."""
    if not site_password:
        return True
    return hmac.compare_digest(candidate.encode("utf-8"), site_password.encode("utf-8"))


def build_csp_header(backend_url: str = DEFAULT_BASE_URL, *, development: bool = False) -> str:
    ws_url = backend_url.replace("http://", "ws://", 1).replace("https://", "wss://", 1)
    directives = [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline'" + (" 'unsafe-eval'" if development else ""),
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        f"img-src 'self' data: blob: {backend_url}",
        "font-src 'self' https://fonts.gstatic.com",
        f"connect-src 'self' {backend_url} {ws_url}",
        "frame-src 'self'",
        "object-src 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "frame-ancestors 'none'",
    ]
    if not development:
        directives.append("upgrade-insecure-requests")
    return "; ".join(directives)


def security_headers(backend_url: str = DEFAULT_BASE_URL, *, development: bool = False) -> dict[str, str]:
    return {
        "Content-Security-Policy": build_csp_header(backend_url, development=development),
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }


def is_origin_allowed(origin: str | None, host: str | None) -> bool:
    """Same-host or localhost origins only; requests without both headers pass."""
    if not origin or not host:
        return True
    parsed = urlsplit(origin)
    if parsed.hostname in _LOCAL_HOSTNAMES:
        return True
    return parsed.netloc == host
