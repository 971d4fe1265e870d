from __future__ import annotations

import base64
import json
import time

import pytest

from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import StorefrontConfigError
from pystorefront.files import (
    build_file_url,
    category_image_url,
    product_image_url,
    product_thumbnail_url,
    user_avatar_url,
)
from pystorefront.models.product import Category, Product
from pystorefront.models.user import User
from pystorefront.session import AuthSession, decode_token_payload, parse_cookie_header

_ENV_KEYS = (
    "POCKETBASE_URL",
    "NEXT_PUBLIC_POCKETBASE_URL",
    "STORE_NAME",
    "SHIPPING_FLAT_RATE",
    "FREE_SHIPPING_THRESHOLD",
    "STOREFRONT_REQUEST_TIMEOUT",
    "STOREFRONT_API_TRACE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _jwt(claims: dict[str, object]) -> str:
    segment = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"header.{segment}.signature"


def test_from_env_reads_store_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEXT_PUBLIC_POCKETBASE_URL", "https://api.shop.test/")
    monkeypatch.setenv("STORE_NAME", "Clay & Co")
    monkeypatch.setenv("SHIPPING_FLAT_RATE", "750")
    monkeypatch.setenv("STOREFRONT_API_TRACE", "yes")

    config = StorefrontConfig.from_env(free_shipping_threshold=0)

    assert config.base_url == "https://api.shop.test"
    assert config.store_name == "Clay & Co"
    assert config.shipping_flat_rate == 750
    assert config.free_shipping_threshold == 0
    assert config.api_trace_enabled is True


def test_from_env_prefers_server_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POCKETBASE_URL", "http://internal:8090")
    monkeypatch.setenv("NEXT_PUBLIC_POCKETBASE_URL", "https://public.example")

    assert StorefrontConfig.from_env().base_url == "http://internal:8090"


@pytest.mark.parametrize(("key", "value"), [("SHIPPING_FLAT_RATE", "five"), ("FREE_SHIPPING_THRESHOLD", "-1")])
def test_from_env_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(StorefrontConfigError, match=key):
        StorefrontConfig.from_env()


def test_config_validation() -> None:
    with pytest.raises(StorefrontConfigError):
        StorefrontConfig(base_url="")
    with pytest.raises(StorefrontConfigError):
        StorefrontConfig(currency_code="DOLLARS")
    assert StorefrontConfig(site_password="pw").site_password_enabled


def test_token_expiry_from_claims() -> None:
    fresh = AuthSession(token=_jwt({"exp": time.time() + 3600}))
    stale = AuthSession(token=_jwt({"exp": time.time() - 10}))
    opaque = AuthSession(token="opaque")

    assert fresh.is_valid and not fresh.is_expired
    assert stale.is_expired and not stale.is_valid
    assert opaque.expires_at is None and opaque.is_valid
    assert decode_token_payload("not-a-jwt") == {}
    assert decode_token_payload("a.!!!.c") == {}


def test_cookie_round_trip_keeps_record() -> None:
    session = AuthSession(token=_jwt({"exp": 2_000_000_000}), record=User.model_validate({"id": "u1", "email": "a@b.c"}))

    header = session.export_cookie(http_only=True)
    assert "Expires=" in header
    assert "HttpOnly" in header

    restored = AuthSession.from_cookie(header.split(";", 1)[0])
    assert restored is not None
    assert restored.token == session.token
    assert restored.record is not None and restored.record.email == "a@b.c"


def test_from_cookie_handles_missing_and_legacy_shapes() -> None:
    assert AuthSession.from_cookie("") is None
    assert AuthSession.from_cookie("pb_auth=%7Bnope") is None
    legacy = 'pb_auth=%7B%22token%22%3A%22t%22%2C%22model%22%3A%7B%22id%22%3A%22u2%22%7D%7D'
    restored = AuthSession.from_cookie(legacy)
    assert restored is not None and restored.user_id == "u2"
    assert parse_cookie_header('a=1; b="2"; junk') == {"a": "1", "b": "2"}


def test_file_urls_and_placeholders() -> None:
    product = Product.model_validate({"id": "p1", "collectionName": "products", "images": ["mug 1.png", "mug2.png"]})

    assert build_file_url("http://h/", "products", "p1", "a.png", thumb="100x100", token="t") == (
        "http://h/api/files/products/p1/a.png?thumb=100x100&token=t"
    )
    assert product_image_url("http://h", product) == "http://h/api/files/products/p1/mug%201.png"
    assert product_thumbnail_url("http://h", product, "small").endswith("?thumb=100x100")
    assert product_image_url("http://h", product, 5) == "/placeholder-product.png"
    assert category_image_url("http://h", Category(id="c1")) == "/placeholder-category.png"
    assert user_avatar_url("http://h", User(id="u1")) == "/placeholder-avatar.png"
