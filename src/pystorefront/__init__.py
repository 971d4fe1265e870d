"""pystorefront - Async Python client for a PocketBase-backed online store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pystorefront")
except PackageNotFoundError:
    __version__ = "0+local"
from pystorefront.client import StorefrontClient
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import (
    ErrorCode,
    StorefrontApiError,
    StorefrontAuthenticationError,
    StorefrontConfigError,
    StorefrontConnectionError,
    StorefrontDiscountError,
    StorefrontDuplicateError,
    StorefrontError,
    StorefrontForbiddenError,
    StorefrontNotAuthenticatedError,
    StorefrontNotFoundError,
    StorefrontOrderStateError,
    StorefrontRateLimitError,
    StorefrontTransportError,
    StorefrontValidationError,
)
from pystorefront.models import (
    Address,
    Cart,
    CartItem,
    Category,
    ContactMessage,
    Discount,
    DiscountType,
    ListResult,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductStatus,
    Review,
    Setting,
    ShippingAddress,
    TrackingInfo,
    User,
    UserRole,
    WishlistEntry,
)
from pystorefront.session import AuthSession
from pystorefront.state import CartStore, JsonFileCartStorage, MemoryCartStorage, Store, WishlistState, WishlistStore
from pystorefront.sync import InFlightTracker, WishlistSync

__all__ = [
    "Address",
    "AuthSession",
    "Cart",
    "CartItem",
    "CartStore",
    "Category",
    "ContactMessage",
    "Discount",
    "DiscountType",
    "ErrorCode",
    "InFlightTracker",
    "JsonFileCartStorage",
    "ListResult",
    "MemoryCartStorage",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductStatus",
    "Review",
    "Setting",
    "ShippingAddress",
    "Store",
    "StorefrontApiError",
    "StorefrontAuthenticationError",
    "StorefrontClient",
    "StorefrontConfig",
    "StorefrontConfigError",
    "StorefrontConnectionError",
    "StorefrontDiscountError",
    "StorefrontDuplicateError",
    "StorefrontError",
    "StorefrontForbiddenError",
    "StorefrontNotAuthenticatedError",
    "StorefrontNotFoundError",
    "StorefrontOrderStateError",
    "StorefrontRateLimitError",
    "StorefrontTransportError",
    "StorefrontValidationError",
    "TrackingInfo",
    "User",
    "UserRole",
    "WishlistEntry",
    "WishlistState",
    "WishlistStore",
    "__version__",
]
