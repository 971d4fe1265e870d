from __future__ import annotations

import json
from urllib.parse import quote

import pytest

from pystorefront.security.access import (
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
    RateLimits,
    client_id_from_headers,
    rate_limit_headers,
)


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_rate_limiter_blocks_after_limit_and_resets() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    config = RateLimitConfig(limit=2, window_s=10, identifier="login")

    first = limiter.hit("1.2.3.4", config)
    second = limiter.hit("1.2.3.4", config)
    third = limiter.hit("1.2.3.4", config)

    assert (first.success, first.remaining) == (True, 1)
    assert (second.success, second.remaining) == (True, 0)
    assert (third.success, third.remaining) == (False, 0)
    assert third.reset == 1_010.0

    clock.now += 11
    assert limiter.hit("1.2.3.4", config).success is True


def test_rate_limiter_keys_are_namespaced_by_identifier() -> None:
    limiter = RateLimiter(clock=FakeClock())

    for _ in range(3):
        limiter.hit("ip", RateLimits.SENSITIVE)

    assert limiter.hit("ip", RateLimits.SENSITIVE).success is False
    assert limiter.hit("ip", RateLimits.AUTH).success is True
    assert limiter.hit("other", RateLimits.SENSITIVE).success is True


def test_rate_limiter_cleans_up_expired_windows() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    limiter.hit("a", RateLimitConfig(limit=1, window_s=5))
    assert len(limiter) == 1

    clock.now += 61
    limiter.hit("b", RateLimitConfig(limit=1, window_s=5))

    assert len(limiter) == 1


def test_rate_limit_headers_and_client_id() -> None:
    limiter = RateLimiter(clock=FakeClock(100.5))
    result = limiter.hit("x", RateLimits.API)

    assert rate_limit_headers(result) == {
        "X-RateLimit-Limit": "60",
        "X-RateLimit-Remaining": "59",
        "X-RateLimit-Reset": "161",
    }
    assert client_id_from_headers({"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}) == "10.0.0.1"
    assert client_id_from_headers({"x-real-ip": " 10.0.0.9 "}) == "10.0.0.9"
    assert client_id_from_headers({}) == "unknown"


def test_csrf_tokens() -> None:
    token = generate_csrf_token()

    assert len(token) == 64
    assert token != generate_csrf_token()
    assert tokens_match(token, token)
    assert not tokens_match(token.upper() + "x", token)
    assert not tokens_match(None, token)
    assert not tokens_match("", "")


@pytest.mark.parametrize(
    ("method", "headers", "form", "json_body", "expected"),
    [
        ("GET", {}, None, None, True),
        ("POST", {"X-CSRF-Token": "tok"}, None, None, True),
        ("POST", {}, {"_csrf": "tok"}, None, True),
        ("DELETE", {}, None, {"_csrf": "tok"}, True),
        ("POST", {"x-csrf-token": "bad"}, None, None, False),
        ("PUT", {}, None, ["tok"], False),
    ],
)
def test_validate_csrf_request(
    method: str, headers: dict[str, str], form: dict[str, str] | None, json_body: object, expected: bool
) -> None:
    assert validate_csrf_request(method, "tok", headers, form=form, json_body=json_body) is expected


def test_validate_csrf_request_without_cookie() -> None:
    assert validate_csrf_request("POST", None, {"x-csrf-token": "tok"}) is False


def _auth_cookie(record: dict[str, str], token: str = "jwt") -> str:
    return "theme=dark; pb_auth=" + quote(json.dumps({"token": token, "record": record}))


def test_auth_from_cookie() -> None:
    assert auth_from_cookie("") == CookieAuth()
    assert auth_from_cookie("pb_auth=%7Bbroken") == CookieAuth()
    assert auth_from_cookie(_auth_cookie({"role": "customer"})) == CookieAuth(is_valid=True, is_admin=False)
    assert auth_from_cookie(_auth_cookie({"role": "admin"})).is_admin
    owner = _auth_cookie({"role": "customer", "email": "owner@shop.test"})
    assert auth_from_cookie(owner, admin_email="owner@shop.test").is_admin


@pytest.mark.parametrize(
    ("path", "auth", "kwargs", "location"),
    [
        ("/shop", CookieAuth(), {"site_password_enabled": True}, "/password"),
        ("/password", CookieAuth(), {"site_password_enabled": True}, None),
        ("/shop", CookieAuth(), {"site_password_enabled": True, "site_access_granted": True}, None),
        ("/login", CookieAuth(is_valid=True), {}, "/"),
        ("/account/orders", CookieAuth(), {}, "/login?redirect=/account/orders"),
        ("/checkout", CookieAuth(), {}, "/login?redirect=/checkout"),
        ("/admin", CookieAuth(is_valid=True), {}, "/?error=unauthorized"),
        ("/admin/orders", CookieAuth(is_valid=True, is_admin=True), {}, None),
        ("/products/mug", CookieAuth(), {}, None),
    ],
)
def test_resolve_route_access(path: str, auth: CookieAuth, kwargs: dict[str, bool], location: str | None) -> None:
    decision = resolve_route_access(path, auth, **kwargs)

    assert decision.location == location
    assert decision.allowed is (location is None)


def test_site_password() -> None:
    assert check_site_password("anything", None)
    assert check_site_password("secret", "secret")
    assert not check_site_password("guess", "secret")


def test_csp_and_security_headers() -> None:
    prod = build_csp_header("https://api.shop.test")
    dev = build_csp_header("http://localhost:8090", development=True)

    assert "connect-src 'self' https://api.shop.test wss://api.shop.test" in prod
    assert "upgrade-insecure-requests" in prod
    assert "'unsafe-eval'" in dev
    assert "upgrade-insecure-requests" not in dev
    assert security_headers()["X-Frame-Options"] == "DENY"


def test_origin_check() -> None:
    assert is_origin_allowed(None, "shop.test")
    assert is_origin_allowed("https://shop.test", "shop.test")
    assert is_origin_allowed("http://localhost:3000", "shop.test")
    assert not is_origin_allowed("https://evil.test", "shop.test")
