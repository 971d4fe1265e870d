"""Request-guard helpers for a web front end built on pystorefront."""

from pystorefront.security.access import (
    AccessDecision,
    CookieAuth,
    auth_from_cookie,
    build_csp_header,
    check_site_password,
    is_origin_allowed,
    resolve_route_access,
    security_headers,
)
from pystorefront.security.csrf import generate_csrf_token, tokens_match, validate_csrf_request
from pystorefront.security.rate_limit import (
    RateLimitConfig,
    RateLimiter,
    RateLimitResult,
    RateLimits,
    client_id_from_headers,
    rate_limit_headers,
)

__all__ = [
    "AccessDecision",
    "CookieAuth",
    "RateLimitConfig",
    "RateLimitResult",
    "RateLimiter",
    "RateLimits",
    "auth_from_cookie",
    "build_csp_header",
    "check_site_password",
    "client_id_from_headers",
    "generate_csrf_token",
    "is_origin_allowed",
    "rate_limit_headers",
    "resolve_route_access",
    "security_headers",
    "tokens_match",
    "validate_csrf_request",
]
