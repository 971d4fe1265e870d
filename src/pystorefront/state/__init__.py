"""Client-side state layer.

Stores hold immutable snapshots; every mutation swaps in a new snapshot so
subscribers can detect changes by identity alone.
"""

from pystorefront.state.cart import CartStorage, CartStore, JsonFileCartStorage, MemoryCartStorage
from pystorefront.state.store import Store
from pystorefront.state.wishlist import WishlistState, WishlistStore

__all__ = [
    "CartStorage",
    "CartStore",
    "JsonFileCartStorage",
    "MemoryCartStorage",
    "Store",
    "WishlistState",
    "WishlistStore",
]
