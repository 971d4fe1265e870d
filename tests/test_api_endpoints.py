from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from pystorefront._api import auth as auth_api
from pystorefront._api import discounts as discounts_api
from pystorefront._api import files as files_api
from pystorefront._api import reviews as reviews_api
from pystorefront._api import settings as settings_api
from pystorefront.exceptions import (
    StorefrontDiscountError,
    StorefrontNotAuthenticatedError,
    StorefrontTransportError,
)
from pystorefront.models.discount import Discount
from pystorefront.session import AuthSession

NOW = datetime(2024, 6, 1, tzinfo=UTC)
SESSION = AuthSession(token="jwt")


@dataclass
class RecordingTransport:
    """Answers every request with ``respond(method, path, params, body)`` and keeps a log."""

    respond: Callable[[str, str, dict[str, Any], dict[str, Any] | None], Any] = lambda *_: {}
    sent: list[tuple[str, str, dict[str, Any], dict[str, Any] | None, str | None]] = field(default_factory=list)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        payload = dict(body) if body is not None else None
        self.sent.append((method, path, clean, payload, token))
        return self.respond(method, path, clean, payload)


def _discount(**overrides: Any) -> Discount:
    data: dict[str, Any] = {"id": "d1", "code": "SAVE", "type": "fixed", "value": 500, "isActive": True}
    data.update(overrides)
    return Discount.model_validate(data)


@pytest.mark.parametrize(
    ("discount", "subtotal", "message"),
    [
        (None, 1000, "Invalid discount code"),
        (_discount(isActive=False), 1000, "Invalid discount code"),
        (_discount(expiresAt="2024-05-31 23:59:59.000Z"), 1000, "expired"),
        (_discount(maxUses=3, usedCount=3), 1000, "usage limit"),
        (_discount(minOrderValue=2000), 1999, "minimum value"),
    ],
)
def test_check_discount_rejections(discount: Discount | None, subtotal: int, message: str) -> None:
    with pytest.raises(StorefrontDiscountError, match=message):
        discounts_api.check_discount(discount, subtotal, NOW)


def test_check_discount_accepts_valid_code() -> None:
    discount = _discount(expiresAt="2024-12-31 00:00:00.000Z", maxUses=10, usedCount=9, minOrderValue=1000)

    assert discounts_api.check_discount(discount, 1000, NOW) is discount


@pytest.mark.asyncio
async def test_discount_lookup_normalizes_code() -> None:
    transport = RecordingTransport(respond=lambda *_: {"items": [{"id": "d1", "code": "SAVE10"}]})

    discount = await discounts_api.fetch_discount_by_code(transport, None, "  save10 ")

    assert discount is not None and discount.code == "SAVE10"
    assert transport.sent[0][2]["filter"] == 'isActive = true && code = "SAVE10"'
    assert await discounts_api.fetch_discount_by_code(transport, None, "   ") is None
    assert len(transport.sent) == 1


@pytest.mark.asyncio
async def test_increment_discount_usage_reads_then_bumps() -> None:
    def respond(method: str, path: str, params: dict[str, Any], body: dict[str, Any] | None) -> Any:
        if method == "GET":
            return {"id": "d1", "code": "SAVE", "usedCount": 7}
        return {"id": "d1", "code": "SAVE", **(body or {})}

    transport = RecordingTransport(respond=respond)

    updated = await discounts_api.increment_discount_usage(transport, SESSION, "d1")

    assert updated.used_count == 8
    assert [(m, b) for m, _, _, b, _ in transport.sent] == [("GET", None), ("PATCH", {"usedCount": 8})]


@pytest.mark.asyncio
async def test_oauth2_sign_in_sends_code_exchange_and_customer_defaults() -> None:
    transport = RecordingTransport(respond=lambda *_: {"token": "jwt", "record": {"id": "u1"}})

    session = await auth_api.auth_with_oauth2_code(
        transport,
        "users",
        provider="google",
        code="abc",
        code_verifier="verifier",
        redirect_url="https://shop.test/auth/callback",
    )

    method, path, _, body, _ = transport.sent[0]
    assert (method, path) == ("POST", "/api/collections/users/auth-with-oauth2")
    assert body is not None
    assert body["codeVerifier"] == "verifier"
    assert body["redirectURL"] == "https://shop.test/auth/callback"
    assert body["createData"]["role"] == "customer"
    assert body["createData"]["isBlocked"] is False
    assert session.user_id == "u1"


@pytest.mark.asyncio
async def test_auth_response_without_token_is_rejected() -> None:
    transport = RecordingTransport(respond=lambda *_: {"record": {"id": "u1"}})

    with pytest.raises(StorefrontTransportError, match="no token"):
        await auth_api.auth_with_password(transport, "users", "a@b.c", "pw")


def test_oauth2_providers_supports_both_layouts() -> None:
    assert auth_api.oauth2_providers({"oauth2": {"providers": [{"name": "google"}]}}) == [{"name": "google"}]
    assert auth_api.oauth2_providers({"authProviders": [{"name": "github"}, "junk"]}) == [{"name": "github"}]
    assert auth_api.oauth2_providers({}) == []


@pytest.mark.asyncio
async def test_reviews_are_created_unapproved_and_validated() -> None:
    transport = RecordingTransport(respond=lambda m, p, q, body: {"id": "r1", **(body or {})})

    review = await reviews_api.create_review(
        transport, SESSION, user_id="u1", product_id="p1", rating=5, title="Great", comment="Lovely mug"
    )

    assert transport.sent[0][3] is not None and transport.sent[0][3]["isApproved"] is False
    assert review.rating == 5
    with pytest.raises(ValueError, match="rating"):
        await reviews_api.create_review(transport, SESSION, user_id="u1", product_id="p1", rating=6, title="", comment="")
    with pytest.raises(ValueError, match="isApproved"):
        await reviews_api.update_review(transport, SESSION, "r1", {"isApproved": True})


@pytest.mark.asyncio
async def test_average_rating() -> None:
    transport = RecordingTransport(respond=lambda *_: {"items": [{"rating": 5}, {"rating": 4}, {"rating": 3}]})
    empty = RecordingTransport(respond=lambda *_: {"items": []})

    assert await reviews_api.fetch_average_rating(transport, None, "p1") == (4.0, 3)
    assert await reviews_api.fetch_average_rating(empty, None, "p1") == (0.0, 0)


@pytest.mark.asyncio
async def test_upsert_setting_creates_when_missing() -> None:
    def respond(method: str, path: str, params: dict[str, Any], body: dict[str, Any] | None) -> Any:
        if method == "GET":
            return {"items": []}
        return {"id": "s1", **(body or {})}

    transport = RecordingTransport(respond=respond)

    setting = await settings_api.upsert_setting(transport, SESSION, "store_tagline", "Handmade")

    assert setting.value == "Handmade"
    assert transport.sent[-1][0] == "POST"
    assert transport.sent[-1][3] == {"key": "store_tagline", "value": "Handmade", "description": ""}


@pytest.mark.asyncio
async def test_file_token_and_removal() -> None:
    transport = RecordingTransport(respond=lambda *_: {"token": "file-token"})

    with pytest.raises(StorefrontNotAuthenticatedError):
        await files_api.fetch_file_token(transport, None)
    assert await files_api.fetch_file_token(transport, SESSION) == "file-token"

    await files_api.remove_file(transport, SESSION, "products", "p1", "images", "a.png")
    await files_api.remove_file(transport, SESSION, "products", "p1", "images", None)
    assert [sent[3] for sent in transport.sent[-2:]] == [{"images-": "a.png"}, {"images": None}]
