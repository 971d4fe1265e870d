"""High-level async client for the storefront backend."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

import aiohttp

from pystorefront import __version__
from pystorefront._api import addresses as _addresses_api
from pystorefront._api import auth as _auth_api
from pystorefront._api import categories as _categories_api
from pystorefront._api import discounts as _discounts_api
from pystorefront._api import files as _files_api
from pystorefront._api import messages as _messages_api
from pystorefront._api import orders as _orders_api
from pystorefront._api import products as _products_api
from pystorefront._api import reviews as _reviews_api
from pystorefront._api import settings as _settings_api
from pystorefront._api import users as _users_api
from pystorefront._api import wishlists as _wishlists_api
from pystorefront._client import admin as _admin
from pystorefront._client import orders as _orders
from pystorefront._transport import HttpTransport
from pystorefront.admin import DashboardStats
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import (
    StorefrontAuthenticationError,
    StorefrontError,
    StorefrontNotAuthenticatedError,
)
from pystorefront.files import file_url
from pystorefront.health import HealthReport, build_health_report
from pystorefront.models._base import RecordModel
from pystorefront.models.cart import Cart
from pystorefront.models.discount import Discount
from pystorefront.models.list_result import ListResult
from pystorefront.models.message import ContactMessage
from pystorefront.models.order import Order, OrderStatus, ShippingAddress, TrackingInfo
from pystorefront.models.product import Category, Product
from pystorefront.models.review import Review
from pystorefront.models.setting import Setting
from pystorefront.models.user import Address, User
from pystorefront.models.wishlist import WishlistEntry
from pystorefront.session import AuthSession
from pystorefront.state.cart import CartStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")

AuthListener = Callable[[User | None], None]

DEFAULT_OAUTH2_PROVIDER = "google"


class StorefrontClient:
    """Async client for the storefront backend.

    Usage::

        async with StorefrontClient(StorefrontConfig.from_env()) as client:
            await client.auth_with_password("ada@example.com", "secret")
            products = await client.get_featured_products()

    The client also satisfies :class:`pystorefront.sync.WishlistBackend`.
    """

    def __init__(
        self,
        config: StorefrontConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        auth: AuthSession | None = None,
    ) -> None:
        self._config = config or StorefrontConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None
        self._auth = auth
        self._auth_listeners: list[AuthListener] = []

    @property
    def config(self) -> StorefrontConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> StorefrontClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Auth state
    # ------------------------------------------------------------------

    @property
    def auth(self) -> AuthSession | None:
        return self._auth

    @property
    def is_authenticated(self) -> bool:
        return self._auth is not None and self._auth.is_valid

    def current_user(self) -> User | None:
        """The signed-in user, or ``None`` when signed out or the token has expired."""
        if not self.is_authenticated:
            return None
        assert self._auth is not None  # noqa: S101
        return self._auth.record

    def is_admin(self) -> bool:
        """Admin role, or the owner account named by ``config.admin_email``."""
        user = self.current_user()
        if user is None:
            return False
        if user.is_admin_role:
            return True
        return bool(self._config.admin_email) and user.email == self._config.admin_email

    def is_staff(self) -> bool:
        user = self.current_user()
        return user is not None and user.is_staff_role

    def is_blocked(self) -> bool:
        user = self.current_user()
        return user is not None and user.is_blocked

    def on_auth_change(self, listener: AuthListener) -> Callable[[], None]:
        """Call ``listener(user_or_none)`` whenever the auth state changes.

        Returns a function that removes the listener.
        """
        self._auth_listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._auth_listeners:
                self._auth_listeners.remove(listener)

        return _unsubscribe

    def _set_auth(self, auth: AuthSession | None) -> None:
        self._auth = auth
        user = self.current_user()
        for listener in list(self._auth_listeners):
            try:
                listener(user)
            except Exception:
                _logger.exception("Auth change listener failed")

    def load_auth_cookie(self, cookie_header: str) -> None:
        """Restore auth state from a request's ``Cookie`` header."""
        self._set_auth(AuthSession.from_cookie(cookie_header))

    def export_auth_cookie(self, *, secure: bool = False, http_only: bool = False, same_site: str = "Lax") -> str:
        """``Set-Cookie`` value for the current auth state (expired when signed out)."""
        if self._auth is None:
            return "pb_auth=; Path=/; Expires=Thu, 01 Jan 1970 00:00:00 GMT; SameSite=" + same_site
        return self._auth.export_cookie(secure=secure, http_only=http_only, same_site=same_site)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def auth_with_password(self, identity: str, password: str) -> User | None:
        auth = await _auth_api.auth_with_password(
            self._require_transport(), self._config.auth_collection, identity, password
        )
        self._set_auth(auth)
        return auth.record

    async def auth_with_oauth2_code(
        self,
        code: str,
        code_verifier: str,
        redirect_url: str,
        *,
        provider: str = DEFAULT_OAUTH2_PROVIDER,
        create_data: Mapping[str, Any] | None = None,
    ) -> User | None:
        """Finish an OAuth2 sign-in. New accounts are created as customers.

        The last-login timestamp is updated best effort.
        """
        auth = await _auth_api.auth_with_oauth2_code(
            self._require_transport(),
            self._config.auth_collection,
            provider=provider,
            code=code,
            code_verifier=code_verifier,
            redirect_url=redirect_url,
            create_data=create_data,
        )
        self._set_auth(auth)
        if auth.user_id is not None:
            try:
                user = await _auth_api.touch_last_login(
                    self._require_transport(), auth, self._config.auth_collection, datetime.now(UTC)
                )
            except StorefrontError:
                _logger.debug("Failed to record last login", exc_info=True)
            else:
                self._auth = auth.with_record(user)
        return self.current_user()

    async def auth_refresh(self) -> User | None:
        """Renew the token. Clears the auth state and returns ``None`` on failure."""
        auth = self._auth
        if auth is None or not auth.is_valid:
            return None
        try:
            refreshed = await _auth_api.auth_refresh(self._require_transport(), self._config.auth_collection, auth)
        except StorefrontError:
            _logger.info("Token refresh failed, signing out", exc_info=True)
            self._set_auth(None)
            return None
        self._set_auth(refreshed)
        return refreshed.record

    async def list_auth_methods(self) -> dict[str, Any]:
        return await _auth_api.list_auth_methods(self._require_transport(), self._config.auth_collection)

    def sign_out(self) -> None:
        self._set_auth(None)

    async def update_profile(self, *, name: str | None = None, phone: str | None = None) -> User:
        user = self._require_user()
        data = {key: value for key, value in (("name", name), ("phone", phone)) if value is not None}

        async def _call(auth: AuthSession | None) -> User:
            return await _auth_api.update_user(
                self._require_transport(), auth, self._config.auth_collection, user.id, data
            )

        updated = await self._call_with_refresh(_call)
        if self._auth is not None:
            self._set_auth(self._auth.with_record(updated))
        return updated

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise StorefrontError("Client not initialized. Use 'async with StorefrontClient(...) as client:'")
        return self._transport

    def _require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise StorefrontNotAuthenticatedError("Not authenticated")
        return user

    async def _call_with_refresh(self, fn: Callable[[AuthSession | None], Awaitable[T]]) -> T:
        """Run an API call, refreshing the token and retrying once on HTTP 401."""
        auth = self._auth
        try:
            return await fn(auth)
        except StorefrontAuthenticationError:
            if auth is None:
                raise
            if await self.auth_refresh() is None:
                raise
            return await fn(self._auth)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def get_products(
        self,
        *,
        page: int = 1,
        per_page: int = 20,
        filter_: str | None = None,
        sort: str | None = None,
        expand: str | None = None,
    ) -> ListResult[Product]:
        """Page of products; active products newest first unless *filter_*/*sort* say otherwise."""

        async def _call(auth: AuthSession | None) -> ListResult[Product]:
            return await _products_api.fetch_products(
                self._require_transport(),
                auth,
                page=page,
                per_page=per_page,
                filter_=filter_,
                sort=sort,
                expand=expand,
            )

        return await self._call_with_refresh(_call)

    async def get_product(self, product_id: str) -> Product | None:
        async def _call(auth: AuthSession | None) -> Product | None:
            return await _products_api.fetch_product(self._require_transport(), auth, product_id)

        return await self._call_with_refresh(_call)

    async def get_product_by_slug(self, slug: str) -> Product | None:
        async def _call(auth: AuthSession | None) -> Product | None:
            return await _products_api.fetch_product_by_slug(self._require_transport(), auth, slug)

        return await self._call_with_refresh(_call)

    async def get_featured_products(self, limit: int = 8) -> list[Product]:
        async def _call(auth: AuthSession | None) -> list[Product]:
            return await _products_api.fetch_featured_products(self._require_transport(), auth, limit=limit)

        return await self._call_with_refresh(_call)

    async def get_products_by_category(
        self,
        category_id: str,
        *,
        page: int = 1,
        per_page: int = 20,
        sort: str | None = None,
    ) -> ListResult[Product]:
        async def _call(auth: AuthSession | None) -> ListResult[Product]:
            return await _products_api.fetch_products_by_category(
                self._require_transport(), auth, category_id, page=page, per_page=per_page, sort=sort
            )

        return await self._call_with_refresh(_call)

    async def search_products(self, term: str, *, page: int = 1, per_page: int = 20) -> ListResult[Product]:
        """Active products whose name, description or SKU contains *term*."""

        async def _call(auth: AuthSession | None) -> ListResult[Product]:
            return await _products_api.search_products(
                self._require_transport(), auth, term, page=page, per_page=per_page
            )

        return await self._call_with_refresh(_call)

    async def get_categories(self) -> list[Category]:
        async def _call(auth: AuthSession | None) -> list[Category]:
            return await _categories_api.fetch_categories(self._require_transport(), auth)

        return await self._call_with_refresh(_call)

    async def get_category(self, category_id: str) -> Category | None:
        async def _call(auth: AuthSession | None) -> Category | None:
            return await _categories_api.fetch_category(self._require_transport(), auth, category_id)

        return await self._call_with_refresh(_call)

    async def get_category_by_slug(self, slug: str) -> Category | None:
        async def _call(auth: AuthSession | None) -> Category | None:
            return await _categories_api.fetch_category_by_slug(self._require_transport(), auth, slug)

        return await self._call_with_refresh(_call)

    async def get_root_categories(self) -> list[Category]:
        return await self.get_subcategories("")

    async def get_subcategories(self, parent_id: str) -> list[Category]:
        async def _call(auth: AuthSession | None) -> list[Category]:
            return await _categories_api.fetch_subcategories(self._require_transport(), auth, parent_id)

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def file_url(self, record: RecordModel, filename: str, *, thumb: str | None = None) -> str:
        return file_url(self._config.base_url, record, filename, thumb=thumb)

    async def get_file_token(self) -> str:
        """Short-lived token for downloading protected files."""

        async def _call(auth: AuthSession | None) -> str:
            return await _files_api.fetch_file_token(self._require_transport(), auth)

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Wishlist
    # ------------------------------------------------------------------

    async def fetch_wishlist_products(self, user_id: str) -> list[Product]:
        async def _call(auth: AuthSession | None) -> list[Product]:
            return await _wishlists_api.fetch_wishlist_products(self._require_transport(), auth, user_id)

        return await self._call_with_refresh(_call)

    async def add_to_wishlist(self, user_id: str, product_id: str) -> WishlistEntry:
        async def _call(auth: AuthSession | None) -> WishlistEntry:
            return await _wishlists_api.add_to_wishlist(self._require_transport(), auth, user_id, product_id)

        return await self._call_with_refresh(_call)

    async def remove_from_wishlist(self, user_id: str, product_id: str) -> None:
        async def _call(auth: AuthSession | None) -> None:
            await _wishlists_api.remove_from_wishlist(self._require_transport(), auth, user_id, product_id)

        await self._call_with_refresh(_call)

    async def is_in_wishlist(self, product_id: str) -> bool:
        """Ask the backend whether the signed-in user has saved *product_id*."""
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> WishlistEntry | None:
            return await _wishlists_api.find_wishlist_entry(self._require_transport(), auth, user.id, product_id)

        return await self._call_with_refresh(_call) is not None

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    async def get_addresses(self) -> list[Address]:
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> list[Address]:
            return await _addresses_api.fetch_addresses(self._require_transport(), auth, user.id)

        return await self._call_with_refresh(_call)

    async def get_address(self, address_id: str) -> Address | None:
        async def _call(auth: AuthSession | None) -> Address | None:
            return await _addresses_api.fetch_address(self._require_transport(), auth, address_id)

        return await self._call_with_refresh(_call)

    async def create_address(self, address: ShippingAddress, *, is_default: bool = False) -> Address:
        user = self._require_user()
        data = {**address.to_payload(), "userId": user.id, "isDefault": False}

        async def _call(auth: AuthSession | None) -> Address:
            return await _addresses_api.create_address(self._require_transport(), auth, data)

        created = await self._call_with_refresh(_call)
        if is_default:
            return await self.set_default_address(created.id)
        return created

    async def update_address(self, address_id: str, data: Mapping[str, Any]) -> Address:
        async def _call(auth: AuthSession | None) -> Address:
            return await _addresses_api.update_address(self._require_transport(), auth, address_id, data)

        return await self._call_with_refresh(_call)

    async def delete_address(self, address_id: str) -> None:
        async def _call(auth: AuthSession | None) -> None:
            await _addresses_api.delete_address(self._require_transport(), auth, address_id)

        await self._call_with_refresh(_call)

    async def set_default_address(self, address_id: str) -> Address:
        """Make *address_id* the only default address of the signed-in user."""
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> Address:
            return await _addresses_api.set_default_address(self._require_transport(), auth, user.id, address_id)

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Discounts
    # ------------------------------------------------------------------

    async def validate_discount_code(self, code: str, subtotal: int, *, now: datetime | None = None) -> Discount:
        """Return the discount for *code* if it applies to *subtotal*.

        Raises
        ------
        StorefrontDiscountError
            If the code is unknown or inactive, has expired, is used up,
            or the subtotal is below its minimum.
        """
        moment = now or datetime.now(UTC)

        async def _call(auth: AuthSession | None) -> Discount:
            return await _discounts_api.validate_discount_code(self._require_transport(), auth, code, subtotal, moment)

        return await self._call_with_refresh(_call)

    async def increment_discount_usage(self, discount_id: str) -> Discount:
        async def _call(auth: AuthSession | None) -> Discount:
            return await _discounts_api.increment_discount_usage(self._require_transport(), auth, discount_id)

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def get_user_orders(self, *, page: int = 1, per_page: int = 10) -> ListResult[Order]:
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> ListResult[Order]:
            return await _orders_api.fetch_user_orders(
                self._require_transport(), auth, user.id, page=page, per_page=per_page
            )

        return await self._call_with_refresh(_call)

    async def get_order(self, order_id: str) -> Order | None:
        async def _call(auth: AuthSession | None) -> Order | None:
            return await _orders_api.fetch_order(self._require_transport(), auth, order_id)

        return await self._call_with_refresh(_call)

    async def get_order_by_number(self, order_number: str) -> Order | None:
        async def _call(auth: AuthSession | None) -> Order | None:
            return await _orders_api.fetch_order_by_number(self._require_transport(), auth, order_number)

        return await self._call_with_refresh(_call)

    async def place_order(
        self,
        cart: Cart | CartStore,
        shipping_address: ShippingAddress,
        *,
        now: datetime | None = None,
    ) -> Order:
        """Turn *cart* into a pending order. A :class:`CartStore` is cleared afterwards."""
        return await _orders.place_order(self, cart, shipping_address, now=now)

    async def cancel_order(self, order_id: str, reason: str, *, now: datetime | None = None) -> Order:
        return await _orders.cancel_order(self, order_id, reason, now=now)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def get_product_reviews(
        self,
        product_id: str,
        *,
        page: int = 1,
        per_page: int = 10,
        only_approved: bool = True,
    ) -> ListResult[Review]:
        async def _call(auth: AuthSession | None) -> ListResult[Review]:
            return await _reviews_api.fetch_product_reviews(
                self._require_transport(),
                auth,
                product_id,
                page=page,
                per_page=per_page,
                only_approved=only_approved,
            )

        return await self._call_with_refresh(_call)

    async def get_user_reviews(self, *, page: int = 1, per_page: int = 10) -> ListResult[Review]:
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> ListResult[Review]:
            return await _reviews_api.fetch_user_reviews(
                self._require_transport(), auth, user.id, page=page, per_page=per_page
            )

        return await self._call_with_refresh(_call)

    async def create_review(
        self,
        product_id: str,
        rating: int,
        title: str,
        comment: str,
        *,
        is_verified_purchase: bool = False,
    ) -> Review:
        """Submit a review; it stays hidden until approved."""
        user = self._require_user()

        async def _call(auth: AuthSession | None) -> Review:
            return await _reviews_api.create_review(
                self._require_transport(),
                auth,
                user_id=user.id,
                product_id=product_id,
                rating=rating,
                title=title,
                comment=comment,
                is_verified_purchase=is_verified_purchase,
            )

        return await self._call_with_refresh(_call)

    async def update_review(self, review_id: str, data: Mapping[str, Any]) -> Review:
        async def _call(auth: AuthSession | None) -> Review:
            return await _reviews_api.update_review(self._require_transport(), auth, review_id, data)

        return await self._call_with_refresh(_call)

    async def delete_review(self, review_id: str) -> None:
        async def _call(auth: AuthSession | None) -> None:
            await _reviews_api.delete_review(self._require_transport(), auth, review_id)

        await self._call_with_refresh(_call)

    async def get_average_rating(self, product_id: str) -> tuple[float, int]:
        async def _call(auth: AuthSession | None) -> tuple[float, int]:
            return await _reviews_api.fetch_average_rating(self._require_transport(), auth, product_id)

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Settings and contact
    # ------------------------------------------------------------------

    async def get_setting(self, key: str) -> str | None:
        async def _call(auth: AuthSession | None) -> Setting | None:
            return await _settings_api.fetch_setting(self._require_transport(), auth, key)

        setting = await self._call_with_refresh(_call)
        return setting.value if setting is not None else None

    async def get_settings(self, keys: Sequence[str] | None = None) -> dict[str, str]:
        async def _call(auth: AuthSession | None) -> dict[str, str]:
            return await _settings_api.fetch_settings(self._require_transport(), auth, keys)

        return await self._call_with_refresh(_call)

    async def set_setting(self, key: str, value: str, description: str | None = None) -> Setting:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> Setting:
            return await _settings_api.upsert_setting(self._require_transport(), auth, key, value, description)

        return await self._call_with_refresh(_call)

    async def send_contact_message(
        self,
        *,
        name: str,
        email: str,
        subject: str,
        message: str,
        phone: str = "",
    ) -> ContactMessage:
        async def _call(auth: AuthSession | None) -> ContactMessage:
            return await _messages_api.create_message(
                self._require_transport(),
                auth,
                name=name,
                email=email,
                subject=subject,
                message=message,
                phone=phone,
            )

        return await self._call_with_refresh(_call)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus | str,
        *,
        note: str | None = None,
        tracking: TrackingInfo | None = None,
        now: datetime | None = None,
    ) -> Order:
        return await _admin.update_order_status(self, order_id, new_status, note=note, tracking=tracking, now=now)

    async def save_order_notes(self, order_id: str, notes: str) -> Order:
        return await _admin.save_order_notes(self, order_id, notes)

    async def list_orders(self, *, page: int = 1, per_page: int = 20, status: str | None = None) -> ListResult[Order]:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> ListResult[Order]:
            return await _orders_api.fetch_orders(
                self._require_transport(), auth, page=page, per_page=per_page, status=status
            )

        return await self._call_with_refresh(_call)

    async def list_customers(self, *, page: int = 1, per_page: int = 50, search: str = "") -> ListResult[User]:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> ListResult[User]:
            return await _users_api.fetch_users(
                self._require_transport(),
                auth,
                self._config.auth_collection,
                page=page,
                per_page=per_page,
                search=search,
            )

        return await self._call_with_refresh(_call)

    async def get_customer(self, user_id: str) -> User | None:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> User | None:
            return await _users_api.fetch_user(self._require_transport(), auth, self._config.auth_collection, user_id)

        return await self._call_with_refresh(_call)

    async def set_customer_blocked(self, user_id: str, blocked: bool) -> User:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> User:
            return await _users_api.set_blocked(
                self._require_transport(), auth, self._config.auth_collection, user_id, blocked
            )

        return await self._call_with_refresh(_call)

    async def save_customer_notes(self, user_id: str, notes: str) -> User:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> User:
            return await _users_api.save_notes(
                self._require_transport(), auth, self._config.auth_collection, user_id, notes
            )

        return await self._call_with_refresh(_call)

    async def create_product(self, data: Mapping[str, Any]) -> Product:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> Product:
            return await _products_api.create_product(self._require_transport(), auth, data)

        return await self._call_with_refresh(_call)

    async def update_product(self, product_id: str, data: Mapping[str, Any]) -> Product:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> Product:
            return await _products_api.update_product(self._require_transport(), auth, product_id, data)

        return await self._call_with_refresh(_call)

    async def delete_product(self, product_id: str) -> None:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> None:
            await _products_api.delete_product(self._require_transport(), auth, product_id)

        await self._call_with_refresh(_call)

    async def remove_file(
        self,
        collection: str,
        record_id: str,
        field: str,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Drop *filename* from a file field, or clear the field when *filename* is ``None``."""
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> dict[str, Any]:
            return await _files_api.remove_file(
                self._require_transport(), auth, collection, record_id, field, filename
            )

        return await self._call_with_refresh(_call)

    async def list_messages(
        self,
        *,
        page: int = 1,
        per_page: int = 20,
        filter_: str | None = None,
    ) -> ListResult[ContactMessage]:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> ListResult[ContactMessage]:
            return await _messages_api.fetch_messages(
                self._require_transport(), auth, page=page, per_page=per_page, filter_=filter_
            )

        return await self._call_with_refresh(_call)

    async def mark_message_read(self, message_id: str) -> ContactMessage:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> ContactMessage:
            return await _messages_api.mark_message_read(self._require_transport(), auth, message_id)

        return await self._call_with_refresh(_call)

    async def archive_message(self, message_id: str) -> ContactMessage:
        _admin.require_staff(self)

        async def _call(auth: AuthSession | None) -> ContactMessage:
            return await _messages_api.archive_message(self._require_transport(), auth, message_id)

        return await self._call_with_refresh(_call)

    async def get_dashboard_stats(self, *, now: datetime | None = None) -> DashboardStats:
        return await _admin.get_dashboard_stats(self, now=now)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health_check(self) -> HealthReport:
        return await build_health_report(self._require_transport(), version=__version__)
