"""Internal constants shared across the library."""

DEFAULT_BASE_URL = "http://localhost:8090"
USER_AGENT = "pystorefront/1"

#: Name of the cookie PocketBase-style backends use to persist auth state.
AUTH_COOKIE_NAME = "pb_auth"

# ------------------------------------------------------------------
# Collections
# ------------------------------------------------------------------

COLLECTION_PRODUCTS = "products"
COLLECTION_CATEGORIES = "categories"
COLLECTION_USERS = "users"
COLLECTION_ADDRESSES = "addresses"
COLLECTION_WISHLISTS = "wishlists"
COLLECTION_ORDERS = "orders"
COLLECTION_DISCOUNTS = "discounts"
COLLECTION_MESSAGES = "messages"
COLLECTION_REVIEWS = "reviews"
COLLECTION_SETTINGS = "settings"

#: Page size used when draining a collection with ``get_full_list``.
FULL_LIST_BATCH_SIZE = 500

#: Default newest-first sort understood by the backend.
DEFAULT_SORT = "-@rowid"

# ------------------------------------------------------------------
# Placeholders served when a record carries no image
# ------------------------------------------------------------------

PLACEHOLDER_PRODUCT = "/placeholder-product.png"
PLACEHOLDER_CATEGORY = "/placeholder-category.png"
PLACEHOLDER_AVATAR = "/placeholder-avatar.png"

# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------

#: Days between sending an invoice and payment being due.
PAYMENT_DUE_DAYS = 14

#: The backend rejects a zero shipping cost; free shipping is stored as 1 cent.
MIN_STORED_SHIPPING_COST = 1
