"""Optimistic synchronization between client stores and the backend."""

from pystorefront.sync.inflight import InFlightTracker
from pystorefront.sync.wishlist import AuthEvents, WishlistBackend, WishlistSync

__all__ = ["AuthEvents", "InFlightTracker", "WishlistBackend", "WishlistSync"]
