"""Order models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, Field

from pystorefront.models._base import BackendDatetime, RecordModel, StorefrontModel
from pystorefront.models.user import Address


class OrderStatus(StrEnum):
    """Order workflow.

    ``pending_review -> invoice_sent -> payment_received -> processing ->
    shipped -> delivered``; ``cancelled`` may be entered before shipping.
    """

    PENDING_REVIEW = "pending_review"
    INVOICE_SENT = "invoice_sent"
    PAYMENT_RECEIVED = "payment_received"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(StorefrontModel):
    """An order line; ``variants`` holds the chosen options, e.g. ``{"size": "L"}``."""

    product_id: str
    product_name: str = ""
    sku: str = ""
    variants: dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(default=1, ge=1)
    unit_price: int = 0
    total_price: int = 0


class ShippingAddress(StorefrontModel):
    name: str = ""
    street: str = ""
    apt: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    @classmethod
    def from_address(cls, address: Address) -> ShippingAddress:
        return cls(
            name=address.name,
            street=address.street,
            apt=address.apt,
            city=address.city,
            state=address.state,
            zip=address.zip,
        )


class TrackingInfo(StorefrontModel):
    carrier: str = ""
    number: str = ""
    url: str = ""


class StatusHistoryEntry(StorefrontModel):
    status: OrderStatus
    timestamp: str
    """ISO-8601 timestamp as written by the storefront."""
    note: str | None = None


class Order(RecordModel):
    """A placed order. Money fields are integer cents."""

    order_number: str = ""
    user_id: str = Field(default="", validation_alias=AliasChoices("userId", "user", "user_id"))
    customer_email: str = ""
    customer_name: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    subtotal: int = 0
    shipping_cost: int = 0
    discount_code: str = ""
    discount_amount: int = 0
    total: int = 0
    status: OrderStatus = OrderStatus.PENDING_REVIEW
    invoice_sent_at: BackendDatetime = None
    payment_due_at: BackendDatetime = None
    tracking: TrackingInfo | None = None
    cancelled_at: BackendDatetime = None
    cancellation_reason: str = ""
    admin_notes: str = ""
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_cancellable(self) -> bool:
        return self.status not in (OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED)
