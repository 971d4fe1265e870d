"""Data models for backend records and client-side state."""

from pystorefront.models._base import (
    BackendDatetime,
    RecordModel,
    StorefrontModel,
    format_backend_datetime,
    parse_backend_datetime,
)
from pystorefront.models.cart import Cart, CartItem, cart_item_key
from pystorefront.models.discount import Discount, DiscountType
from pystorefront.models.list_result import ListResult
from pystorefront.models.message import ContactMessage
from pystorefront.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    ShippingAddress,
    StatusHistoryEntry,
    TrackingInfo,
)
from pystorefront.models.product import Category, Product, ProductStatus, VariantOption
from pystorefront.models.review import Review
from pystorefront.models.setting import Setting
from pystorefront.models.user import Address, User, UserRole
from pystorefront.models.wishlist import WishlistEntry

__all__ = [
    "Address",
    "BackendDatetime",
    "Cart",
    "CartItem",
    "Category",
    "ContactMessage",
    "Discount",
    "DiscountType",
    "ListResult",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductStatus",
    "RecordModel",
    "Review",
    "Setting",
    "ShippingAddress",
    "StatusHistoryEntry",
    "StorefrontModel",
    "TrackingInfo",
    "User",
    "UserRole",
    "VariantOption",
    "WishlistEntry",
    "cart_item_key",
    "format_backend_datetime",
    "parse_backend_datetime",
]
