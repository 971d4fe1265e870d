"""Keeps a :class:`WishlistStore` in sync with the backend.

Mutations are optimistic: the store changes immediately, the remote call
follows, and a failed call rolls the store back. Failures never propagate;
they land in ``state.error`` as a message fit for the shopper and are
logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from pystorefront.exceptions import StorefrontError
from pystorefront.models.product import Product
from pystorefront.models.user import User
from pystorefront.state.wishlist import WishlistStore
from pystorefront.sync.inflight import InFlightTracker

_logger = logging.getLogger(__name__)

SIGN_IN_TO_ADD = "Please sign in to add items to your wishlist"
SIGN_IN_TO_MANAGE = "Please sign in to manage your wishlist"
LOAD_FAILED = "Failed to load wishlist"
REFRESH_FAILED = "Failed to refresh wishlist"
ADD_FAILED = "Failed to add to wishlist"
REMOVE_FAILED = "Failed to remove from wishlist"


class WishlistBackend(Protocol):
    """Remote side of the wishlist. :class:`~pystorefront.client.StorefrontClient` implements it."""

    def current_user(self) -> User | None: ...

    async def fetch_wishlist_products(self, user_id: str) -> Sequence[Product]: ...

    async def add_to_wishlist(self, user_id: str, product_id: str) -> object: ...

    async def remove_from_wishlist(self, user_id: str, product_id: str) -> None: ...


class AuthEvents(Protocol):
    """Source of sign-in/sign-out notifications (``StorefrontClient.on_auth_change``)."""

    def on_auth_change(self, listener: Callable[[User | None], None]) -> Callable[[], None]: ...


def _error_message(exc: BaseException, default: str) -> str:
    if isinstance(exc, StorefrontError) and str(exc):
        return str(exc)
    return default


class WishlistSync:
    """Optimistic wishlist actions bound to one store and one backend.

    Usage::

        sync = WishlistSync(WishlistStore(), client)
        sync.attach(client)  # loads on sign-in, resets on sign-out
        await sync.initialize()
        await sync.toggle(product.id)
    """

    def __init__(self, store: WishlistStore, backend: WishlistBackend) -> None:
        self.store = store
        self._backend = backend
        self._init_lock = asyncio.Lock()
        self._inflight = InFlightTracker()
        # Bumped on reset so loads started for a previous identity are discarded.
        self._generation = 0
        self._user_id: str | None = None
        self._auth_tasks: set[asyncio.Task[None]] = set()

    @property
    def inflight(self) -> InFlightTracker:
        return self._inflight

    def is_in_wishlist(self, product_id: str) -> bool:
        return self.store.is_in_wishlist(product_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load the wishlist once per signed-in identity.

        Concurrent callers share a single fetch; later calls return
        immediately once the store is initialized.
        """
        user = self._backend.current_user()
        if user is None:
            self.reset()
            return
        if self.store.state.is_initialized:
            return
        async with self._init_lock:
            if self.store.state.is_initialized:
                return
            await self._load(user, LOAD_FAILED)

    async def refresh(self) -> None:
        """Reload from the backend even when already initialized."""
        user = self._backend.current_user()
        if user is None:
            self.reset()
            return
        async with self._init_lock:
            await self._load(user, REFRESH_FAILED)

    async def _load(self, user: User, failure_message: str) -> None:
        generation = self._generation
        self.store.set_loading(True)
        self.store.set_error(None)
        try:
            products = await self._backend.fetch_wishlist_products(user.id)
        except Exception as exc:
            _logger.warning("%s for user %s", failure_message, user.id, exc_info=True)
            if generation == self._generation:
                self.store.set_error(_error_message(exc, failure_message))
                self.store.set_loading(False)
            return
        if generation != self._generation:
            _logger.debug("Discarding wishlist loaded for a previous session")
            return
        self._user_id = user.id
        self.store.set_items(products)
        self.store.set_initialized(True)
        self.store.set_loading(False)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, product_id: str) -> bool:
        """Add *product_id*. Returns ``True`` when it is (or already was) on the wishlist."""
        async with self._inflight.hold(product_id):
            return await self._add(product_id)

    async def remove(self, product_id: str) -> bool:
        """Remove *product_id*. Returns ``True`` when it is (or already was) off the wishlist."""
        async with self._inflight.hold(product_id):
            return await self._remove(product_id)

    async def toggle(self, product_id: str) -> bool:
        """Flip membership as seen at call time, after earlier calls for the same id settle."""
        async with self._inflight.hold(product_id):
            if self.store.is_in_wishlist(product_id):
                return await self._remove(product_id)
            return await self._add(product_id)

    async def _add(self, product_id: str) -> bool:
        user = self._backend.current_user()
        if user is None:
            self.store.set_error(SIGN_IN_TO_ADD)
            return False
        if self.store.is_in_wishlist(product_id):
            return True

        generation = self._generation
        self.store.add_product_id(product_id)
        self.store.set_error(None)
        try:
            await self._backend.add_to_wishlist(user.id, product_id)
        except Exception as exc:
            _logger.warning("Failed to add %s to wishlist", product_id, exc_info=True)
            if generation != self._generation:
                return False
            self.store.remove_product_id(product_id)
            self.store.set_error(_error_message(exc, ADD_FAILED))
            return False
        return True

    async def _remove(self, product_id: str) -> bool:
        user = self._backend.current_user()
        if user is None:
            self.store.set_error(SIGN_IN_TO_MANAGE)
            return False
        state = self.store.state
        if not state.contains(product_id):
            return True

        generation = self._generation
        previous_ids, previous_products = state.product_ids, state.products
        self.store.remove_product_id(product_id)
        self.store.set_error(None)
        try:
            await self._backend.remove_from_wishlist(user.id, product_id)
        except Exception as exc:
            _logger.warning("Failed to remove %s from wishlist", product_id, exc_info=True)
            # The store was reset meanwhile; the snapshot belongs to a previous session.
            if generation != self._generation:
                return False
            self.store.restore(previous_ids, previous_products)
            self.store.set_error(_error_message(exc, REMOVE_FAILED))
            return False
        return True

    # ------------------------------------------------------------------
    # Session changes
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear every slice (e.g. on sign-out)."""
        self._generation += 1
        self._user_id = None
        self.store.reset()

    async def handle_auth_change(self, user: User | None) -> None:
        """React to sign-in/out: drop state for a departed user and load the new one."""
        if user is None:
            self.reset()
            return
        if self._user_id is not None and self._user_id != user.id:
            self.reset()
        await self.initialize()

    def attach(self, events: AuthEvents) -> Callable[[], None]:
        """Follow *events*' auth changes. Returns a function that detaches.

        Sign-out resets the store immediately. Sign-in schedules a load on the
        running loop; :meth:`wait_for_auth_changes` awaits the pending loads.
        """

        def _listener(user: User | None) -> None:
            if user is None:
                self.reset()
                return
            try:
                task = asyncio.get_running_loop().create_task(self.handle_auth_change(user))
            except RuntimeError:
                # No loop: the next initialize() call picks the user up.
                _logger.debug("No running loop; deferring wishlist load for user %s", user.id)
                if self._user_id is not None and self._user_id != user.id:
                    self.reset()
                return
            self._auth_tasks.add(task)
            task.add_done_callback(self._auth_task_done)

        return events.on_auth_change(_listener)

    def _auth_task_done(self, task: asyncio.Task[None]) -> None:
        self._auth_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Wishlist auth change handling failed", exc_info=exc)

    async def wait_for_auth_changes(self) -> None:
        """Wait until loads scheduled by :meth:`attach` have finished."""
        while self._auth_tasks:
            await asyncio.gather(*self._auth_tasks, return_exceptions=True)
