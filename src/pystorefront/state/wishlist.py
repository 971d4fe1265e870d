"""Wishlist store: membership ids, cached products, and load status."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from pystorefront.models.product import Product
from pystorefront.state.store import Store


@dataclass(frozen=True, slots=True)
class WishlistState:
    """Snapshot of the wishlist.

    ``product_ids`` is authoritative for membership; ``products`` caches
    the matching records when they have been fetched.
    """

    product_ids: frozenset[str] = frozenset()
    products: tuple[Product, ...] = ()
    is_loading: bool = False
    is_initialized: bool = False
    error: str | None = None

    def contains(self, product_id: str) -> bool:
        return product_id in self.product_ids

    @property
    def count(self) -> int:
        return len(self.product_ids)


INITIAL_WISHLIST_STATE = WishlistState()


class WishlistStore(Store[WishlistState]):
    """Pure, synchronous wishlist actions.

    Each action replaces only the slices it touches; untouched slices keep
    their identity.
    """

    def __init__(self, initial: WishlistState = INITIAL_WISHLIST_STATE) -> None:
        super().__init__(initial)

    def is_in_wishlist(self, product_id: str) -> bool:
        return self.state.contains(product_id)

    def set_product_ids(self, product_ids: Iterable[str]) -> None:
        self.set_state(replace(self.state, product_ids=frozenset(product_ids)))

    def set_products(self, products: Iterable[Product]) -> None:
        self.set_state(replace(self.state, products=tuple(products)))

    def set_items(self, products: Iterable[Product]) -> None:
        """Replace ids and products together from one fetched list."""
        items = tuple(products)
        self.set_state(
            replace(
                self.state,
                product_ids=frozenset(product.id for product in items),
                products=items,
            )
        )

    def set_loading(self, is_loading: bool) -> None:
        if self.state.is_loading != is_loading:
            self.set_state(replace(self.state, is_loading=is_loading))

    def set_initialized(self, is_initialized: bool) -> None:
        if self.state.is_initialized != is_initialized:
            self.set_state(replace(self.state, is_initialized=is_initialized))

    def set_error(self, error: str | None) -> None:
        if self.state.error != error:
            self.set_state(replace(self.state, error=error))

    def add_product_id(self, product_id: str) -> None:
        state = self.state
        if product_id in state.product_ids:
            return
        self.set_state(replace(state, product_ids=state.product_ids | {product_id}))

    def remove_product_id(self, product_id: str) -> None:
        """Drop *product_id* and its cached product."""
        state = self.state
        if product_id not in state.product_ids and not any(p.id == product_id for p in state.products):
            return
        self.set_state(
            replace(
                state,
                product_ids=state.product_ids - {product_id},
                products=tuple(p for p in state.products if p.id != product_id),
            )
        )

    def restore(self, product_ids: frozenset[str], products: tuple[Product, ...]) -> None:
        """Put back a snapshot of both membership slices."""
        self.set_state(replace(self.state, product_ids=product_ids, products=products))

    def reset(self) -> None:
        self.set_state(INITIAL_WISHLIST_STATE)
