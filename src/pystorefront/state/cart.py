"""Cart store mirrored to durable local storage.

The cart never reaches the backend until checkout; between sessions it is
persisted through a :class:`CartStorage` (a JSON file by default).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pystorefront.models.cart import Cart, CartItem, cart_item_key
from pystorefront.pricing import calculate_cart_item_count, calculate_cart_subtotal
from pystorefront.state.store import Store

_logger = logging.getLogger(__name__)

EMPTY_CART = Cart()


class CartStorage(Protocol):
    def load(self) -> Cart | None: ...

    def save(self, cart: Cart) -> None: ...


class MemoryCartStorage:
    """Keeps the last saved cart in memory."""

    def __init__(self, cart: Cart | None = None) -> None:
        self.cart = cart

    def load(self) -> Cart | None:
        return self.cart

    def save(self, cart: Cart) -> None:
        self.cart = cart


class JsonFileCartStorage:
    """Persists the cart as ``{"items": [...], "discountCode": ..., "discountAmount": ...}``.

    Writes go to a temporary file that is renamed over the target so a
    crash never leaves a half-written cart behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> Cart | None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return Cart.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError):
            _logger.debug("Discarding unreadable cart file %s", self.path, exc_info=True)
            return None

    def save(self, cart: Cart) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(cart.to_payload(), separators=(",", ":"))
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class CartStore(Store[Cart]):
    """Cart actions. Lines are identified by product id plus variant choices.

    When a *storage* is given the cart is loaded from it on construction and
    saved after every change.
    """

    def __init__(self, storage: CartStorage | None = None) -> None:
        self._storage = storage
        initial = storage.load() if storage is not None else None
        super().__init__(initial or EMPTY_CART)
        if storage is not None:
            self.subscribe(self._persist)

    def _persist(self, new: Cart, old: Cart) -> None:
        assert self._storage is not None  # noqa: S101
        try:
            self._storage.save(new)
        except OSError:
            _logger.warning("Failed to persist cart", exc_info=True)

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self.state.items

    def add_item(self, item: CartItem) -> None:
        """Add *item*, merging quantities into an existing line with the same variants."""
        cart = self.state
        items = list(cart.items)
        for index, existing in enumerate(items):
            if existing.key == item.key:
                items[index] = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
                break
        else:
            items.append(item)
        self.set_state(cart.model_copy(update={"items": tuple(items)}))

    def remove_item(self, product_id: str, variants: dict[str, str] | None = None) -> None:
        key = cart_item_key(product_id, variants)
        cart = self.state
        items = tuple(item for item in cart.items if item.key != key)
        if len(items) != len(cart.items):
            self.set_state(cart.model_copy(update={"items": items}))

    def update_quantity(self, product_id: str, variants: dict[str, str] | None, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id, variants)
            return
        key = cart_item_key(product_id, variants)
        cart = self.state
        if not any(item.key == key for item in cart.items):
            return
        items = tuple(
            item.model_copy(update={"quantity": quantity}) if item.key == key else item for item in cart.items
        )
        self.set_state(cart.model_copy(update={"items": items}))

    def clear(self) -> None:
        self.set_state(EMPTY_CART)

    def apply_discount(self, code: str, amount: int) -> None:
        self.set_state(self.state.model_copy(update={"discount_code": code, "discount_amount": amount}))

    def remove_discount(self) -> None:
        self.set_state(self.state.model_copy(update={"discount_code": None, "discount_amount": 0}))

    @property
    def subtotal(self) -> int:
        return calculate_cart_subtotal(self.state.items)

    @property
    def item_count(self) -> int:
        return calculate_cart_item_count(self.state.items)
