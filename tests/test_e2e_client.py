from __future__ import annotations

import itertools
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pystorefront.client import StorefrontClient
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import (
    StorefrontAuthenticationError,
    StorefrontConnectionError,
    StorefrontDiscountError,
    StorefrontForbiddenError,
    StorefrontNotAuthenticatedError,
    StorefrontOrderStateError,
    StorefrontValidationError,
    error_for_status,
)
from pystorefront.health import HealthStatus
from pystorefront.models.cart import CartItem
from pystorefront.models.order import ShippingAddress
from pystorefront.models.user import User
from pystorefront.session import AuthSession
from pystorefront.state.cart import CartStore, MemoryCartStorage
from pystorefront.state.wishlist import INITIAL_WISHLIST_STATE, WishlistStore
from pystorefront.sync.wishlist import WishlistSync

_RECORDS_RE = re.compile(r"^/api/collections/(?P<collection>[^/]+)/records(?:/(?P<record_id>[^/]+))?$")
_AUTH_RE = re.compile(r"^/api/collections/(?P<collection>[^/]+)/(?P<action>auth-[a-z0-9-]+)$")
_CONDITION_RE = re.compile(r'(@?\w+) = ("(?:[^"\\]|\\.)*"|true|false)')

CUSTOMER = {"id": "u1", "email": "ada@example.com", "name": "Ada", "role": "customer"}
ADMIN = {"id": "u9", "email": "owner@shop.test", "name": "Owner", "role": "admin"}
ADDRESS = ShippingAddress(name="Ada Lovelace", street="1 Main St", city="London", state="LN", zip="12345")


def _literal(text: str) -> Any:
    if text == "true":
        return True
    if text == "false":
        return False
    return text[1:-1].replace('\\"', '"').replace("\\\\", "\\")


def _matches(record: Mapping[str, Any], filter_: str | None) -> bool:
    """Evaluates the ``field = value`` conjunctions the client sends; other terms are ignored."""
    if not filter_:
        return True
    return all(record.get(name) == _literal(value) for name, value in _CONDITION_RE.findall(filter_))


@dataclass
class FakeStorefrontBackend:
    collections: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)
    passwords: dict[str, tuple[str, dict[str, Any]]] = field(default_factory=dict)
    valid_tokens: dict[str, dict[str, Any]] = field(default_factory=dict)
    refreshable_tokens: dict[str, dict[str, Any]] = field(default_factory=dict)
    health_down: bool = False
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def seed(self, collection: str, *records: dict[str, Any]) -> None:
        bucket = self.collections.setdefault(collection, {})
        for record in records:
            bucket[record["id"]] = dict(record)

    def records(self, collection: str) -> list[dict[str, Any]]:
        return list(self.collections.get(collection, {}).values())

    def _record_call(self, key: str) -> None:
        self.calls[key] = self.calls.get(key, 0) + 1

    def _expand(self, record: dict[str, Any], expand: str | None) -> dict[str, Any]:
        if expand != "productId":
            return dict(record)
        product = self.collections.get("products", {}).get(record.get("productId", ""))
        return {**record, "expand": {"productId": product} if product else {}}

    def _user_for(self, token: str | None) -> dict[str, Any] | None:
        if token is None:
            return None
        if token not in self.valid_tokens:
            raise error_for_status(401, "The request requires valid record authorization token.")
        return self.valid_tokens[token]

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        params = dict(params or {})
        self._record_call(f"{method} {path}")

        if path == "/api/health":
            if self.health_down:
                raise StorefrontConnectionError("Request to /api/health failed", endpoint=path)
            return {"code": 200, "message": "API is healthy."}

        auth_match = _AUTH_RE.match(path)
        if auth_match:
            return self._auth(auth_match["action"], body or {}, token)

        match = _RECORDS_RE.match(path)
        if match is None:
            raise error_for_status(404, endpoint=path)
        self._user_for(token)
        collection, record_id = match["collection"], match["record_id"]
        bucket = self.collections.setdefault(collection, {})

        if record_id is None and method == "GET":
            items = [r for r in bucket.values() if _matches(r, params.get("filter"))]
            if str(params.get("sort") or "").startswith("-@rowid"):
                items.reverse()
            page, per_page = int(params.get("page", 1)), int(params.get("perPage", 30))
            chunk = items[(page - 1) * per_page : page * per_page]
            return {
                "page": page,
                "perPage": per_page,
                "totalItems": len(items),
                "totalPages": -(-len(items) // per_page),
                "items": [self._expand(r, params.get("expand")) for r in chunk],
            }
        if record_id is None and method == "POST":
            new_id = f"{collection}-{next(self._ids)}"
            bucket[new_id] = {"id": new_id, "collectionName": collection, **dict(body or {})}
            return dict(bucket[new_id])
        if record_id not in bucket:
            raise error_for_status(404, endpoint=path)
        if method == "GET":
            return self._expand(bucket[record_id], params.get("expand"))
        if method == "PATCH":
            bucket[record_id].update(body or {})
            return dict(bucket[record_id])
        if method == "DELETE":
            del bucket[record_id]
            return None
        raise error_for_status(400, endpoint=path)

    def _auth(self, action: str, body: Mapping[str, Any], token: str | None) -> Any:
        if action == "auth-with-password":
            entry = self.passwords.get(body.get("identity", ""))
            if entry is None or entry[0] != body.get("password"):
                raise error_for_status(400, "Failed to authenticate.")
            new_token = f"token-{next(self._ids)}"
            self.valid_tokens[new_token] = entry[1]
            return {"token": new_token, "record": entry[1]}
        if action == "auth-refresh":
            record = self.refreshable_tokens.pop(token or "", None) or self.valid_tokens.get(token or "")
            if record is None:
                raise error_for_status(401, "Missing auth record context.")
            new_token = f"token-{next(self._ids)}"
            self.valid_tokens[new_token] = record
            return {"token": new_token, "record": record}
        raise error_for_status(404)


@pytest.fixture
def config() -> StorefrontConfig:
    return StorefrontConfig(base_url="http://shop.test", order_prefix="SHOP", admin_email="owner@shop.test")


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeStorefrontBackend:
    fake = FakeStorefrontBackend()
    fake.passwords = {"ada@example.com": ("secret", CUSTOMER), "owner@shop.test": ("hunter2", ADMIN)}
    fake.seed(
        "products",
        {"id": "p1", "name": "Mug", "slug": "mug", "basePrice": 1500, "status": "active"},
        {"id": "p2", "name": "Plate", "slug": "plate", "basePrice": 2500, "status": "active"},
        {"id": "p3", "name": "Bowl", "slug": "bowl", "basePrice": 1800, "status": "active"},
    )
    fake.seed("wishlists", {"id": "w1", "userId": "u1", "productId": "p1"})
    fake.seed(
        "discounts",
        {"id": "d1", "code": "SAVE10", "type": "percentage", "value": 10, "isActive": True, "usedCount": 4},
        {"id": "d2", "code": "BIGSPEND", "type": "fixed", "value": 500, "minOrderValue": 100000, "isActive": True},
    )

    async def fake_request(self: Any, method: str, path: str, **kwargs: Any) -> Any:
        return await fake.request(method, path, **kwargs)

    monkeypatch.setattr("pystorefront._transport.HttpTransport.request", fake_request)
    return fake


def _cart_store(discount_code: str | None = None) -> CartStore:
    store = CartStore(MemoryCartStorage())
    store.add_item(CartItem(product_id="p1", product_name="Mug", quantity=2, unit_price=1500))
    store.add_item(CartItem(product_id="p2", product_name="Plate", quantity=1, unit_price=2500))
    if discount_code:
        store.apply_discount(discount_code, 0)
    return store


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_sign_in_and_sync_wishlist(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        seen: list[User | None] = []
        client.on_auth_change(seen.append)

        user = await client.auth_with_password("ada@example.com", "secret")
        assert user is not None and user.id == "u1"
        assert [u.id if u else None for u in seen] == ["u1"]

        store = WishlistStore()
        sync = WishlistSync(store, client)
        await sync.initialize()
        assert store.state.product_ids == frozenset({"p1"})
        assert store.state.products[0].name == "Mug"

        assert await sync.add("p2") is True
        assert await sync.toggle("p1") is True
        assert store.state.product_ids == frozenset({"p2"})
        assert sorted(r["productId"] for r in backend.records("wishlists")) == ["p2"]
        assert await client.is_in_wishlist("p2") is True

        client.sign_out()
        await sync.handle_auth_change(client.current_user())
        assert store.state.product_ids == frozenset()
        assert seen[-1] is None


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_attached_wishlist_follows_sign_in_and_out(
    config: StorefrontConfig, backend: FakeStorefrontBackend
) -> None:
    async with StorefrontClient(config) as client:
        store = WishlistStore()
        sync = WishlistSync(store, client)
        detach = sync.attach(client)

        await client.auth_with_password("ada@example.com", "secret")
        await sync.wait_for_auth_changes()
        assert store.state.product_ids == frozenset({"p1"})
        assert store.state.is_initialized is True

        client.sign_out()
        assert store.state == INITIAL_WISHLIST_STATE

        detach()
        await client.auth_with_password("ada@example.com", "secret")
        await sync.wait_for_auth_changes()
        assert store.state == INITIAL_WISHLIST_STATE


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_remote_add_is_idempotent(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        await client.auth_with_password("ada@example.com", "secret")

        first = await client.add_to_wishlist("u1", "p1")
        await client.remove_from_wishlist("u1", "p3")

    assert first.id == "w1"
    assert len(backend.records("wishlists")) == 1


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_login_error_raises(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        with pytest.raises(StorefrontValidationError, match="Failed to authenticate"):
            await client.auth_with_password("ada@example.com", "wrong")
        assert client.current_user() is None


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_expired_token_is_refreshed_once(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    backend.refreshable_tokens["stale"] = CUSTOMER
    auth = AuthSession(token="stale", record=User.model_validate(CUSTOMER))

    async with StorefrontClient(config, auth=auth) as client:
        addresses = await client.get_addresses()

        assert addresses == []
        assert client.auth is not None and client.auth.token != "stale"
        assert backend.calls["POST /api/collections/users/auth-refresh"] == 1
        assert backend.calls["GET /api/collections/addresses/records"] == 2


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_failed_refresh_signs_out_and_reraises(
    config: StorefrontConfig, backend: FakeStorefrontBackend
) -> None:
    auth = AuthSession(token="revoked", record=User.model_validate(CUSTOMER))

    async with StorefrontClient(config, auth=auth) as client:
        seen: list[User | None] = []
        client.on_auth_change(seen.append)

        with pytest.raises(StorefrontAuthenticationError):
            await client.get_addresses()

        assert client.current_user() is None
        assert seen == [None]
        with pytest.raises(StorefrontNotAuthenticatedError):
            await client.get_addresses()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_place_order_with_discount(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    cart = _cart_store("save10")

    async with StorefrontClient(config) as client:
        await client.auth_with_password("ada@example.com", "secret")
        order = await client.place_order(cart, ADDRESS)

    assert order.order_number.startswith("SHOP-")
    assert order.subtotal == 5500
    assert order.shipping_cost == 1
    assert order.discount_code == "save10"
    assert order.discount_amount == 550
    assert order.total == 4950
    assert order.status_history[0].note == "Order placed"
    assert backend.collections["discounts"]["d1"]["usedCount"] == 5
    assert cart.items == ()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_place_order_drops_invalid_discount(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    cart = _cart_store("BIGSPEND")

    async with StorefrontClient(config) as client:
        await client.auth_with_password("ada@example.com", "secret")
        with pytest.raises(StorefrontDiscountError, match="minimum"):
            await client.place_order(cart, ADDRESS)

    assert cart.state.discount_code is None
    assert len(cart.items) == 2
    assert backend.records("orders") == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_place_order_requires_sign_in(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        with pytest.raises(StorefrontNotAuthenticatedError):
            await client.place_order(_cart_store(), ADDRESS)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_order_lifecycle_and_cancellation(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as shopper:
        await shopper.auth_with_password("ada@example.com", "secret")
        order = await shopper.place_order(_cart_store(), ADDRESS)

    async with StorefrontClient(config) as admin:
        await admin.auth_with_password("owner@shop.test", "hunter2")
        assert admin.is_admin()
        await admin.update_order_status(order.id, "invoice_sent")
        shipped = await admin.update_order_status(order.id, "shipped")
        assert [entry.status for entry in shipped.status_history] == ["pending_review", "invoice_sent", "shipped"]

    async with StorefrontClient(config) as shopper:
        await shopper.auth_with_password("ada@example.com", "secret")
        with pytest.raises(StorefrontOrderStateError):
            await shopper.cancel_order(order.id, "too slow")


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_admin_operations_need_staff(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        await client.auth_with_password("ada@example.com", "secret")
        assert not client.is_admin()
        with pytest.raises(StorefrontForbiddenError):
            await client.list_customers()
        with pytest.raises(StorefrontForbiddenError):
            await client.get_dashboard_stats()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_dashboard_stats(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    backend.seed("users", CUSTOMER, ADMIN)
    backend.seed("messages", {"id": "m1", "isRead": False, "isArchived": False})

    async with StorefrontClient(config) as client:
        await client.auth_with_password("owner@shop.test", "hunter2")
        stats = await client.get_dashboard_stats()

    assert stats.total_products == 3
    assert stats.total_customers == 2
    assert stats.unread_messages == 1
    assert stats.total_orders == 0


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_catalog_lookups(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        mug = await client.get_product_by_slug("mug")
        missing = await client.get_product_by_slug("teapot")
        page = await client.get_products(per_page=2)

    assert mug is not None and mug.base_price == 1500
    assert missing is None
    assert page.total_items == 3
    assert len(page.items) == 2


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_auth_cookie_round_trip(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        await client.auth_with_password("ada@example.com", "secret")
        cookie = client.export_auth_cookie(secure=True)

    assert cookie.startswith("pb_auth=")
    assert "Secure" in cookie

    async with StorefrontClient(config) as restored:
        restored.load_auth_cookie(cookie.split(";", 1)[0])
        user = restored.current_user()
        assert user is not None and user.email == "ada@example.com"
        assert await restored.get_addresses() == []


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_health_check(config: StorefrontConfig, backend: FakeStorefrontBackend) -> None:
    async with StorefrontClient(config) as client:
        healthy = await client.health_check()
        backend.health_down = True
        down = await client.health_check()

    assert healthy.status == HealthStatus.HEALTHY
    assert healthy.http_status == 200
    assert down.status == HealthStatus.UNHEALTHY
    assert down.http_status == 503
    assert down.services["backend"].message == "Request to /api/health failed"
