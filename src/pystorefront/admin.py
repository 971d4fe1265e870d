"""Admin console logic: order status changes and dashboard statistics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from pystorefront._constants import PAYMENT_DUE_DAYS
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import StorefrontOrderStateError
from pystorefront.models._base import format_backend_datetime
from pystorefront.models.order import Order, OrderStatus, TrackingInfo
from pystorefront.utils import iso_timestamp

DEFAULT_CANCELLATION_REASON = "Cancelled by admin"
RECENT_ORDER_COUNT = 5
STALE_PENDING_AGE = timedelta(hours=24)

# Orders in these states have not produced revenue.
_NON_REVENUE_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.PENDING_REVIEW})

_STATUS_NAMES: dict[OrderStatus, str] = {
    OrderStatus.PENDING_REVIEW: "Pending Review",
    OrderStatus.INVOICE_SENT: "Invoice Sent",
    OrderStatus.PAYMENT_RECEIVED: "Payment Received",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

_STATUS_COLORS: dict[str, str] = {
    OrderStatus.PENDING_REVIEW: "#EAB308",
    OrderStatus.INVOICE_SENT: "#3B82F6",
    OrderStatus.PAYMENT_RECEIVED: "#06B6D4",
    OrderStatus.PROCESSING: "#8B5CF6",
    OrderStatus.SHIPPED: "#F97316",
    OrderStatus.DELIVERED: "#22C55E",
    OrderStatus.CANCELLED: "#EF4444",
}

_DEFAULT_STATUS_COLOR = "#6B7280"


def status_display_name(status: OrderStatus | str, config: StorefrontConfig | None = None) -> str:
    """Human label for *status*; ``processing`` uses the configured name."""
    if status == OrderStatus.PROCESSING:
        name = (config or StorefrontConfig()).processing_status_name
        return name[:1].upper() + name[1:]
    try:
        return _STATUS_NAMES[OrderStatus(status)]
    except ValueError:
        return str(status)


def status_color(status: OrderStatus | str) -> str:
    return _STATUS_COLORS.get(str(status), _DEFAULT_STATUS_COLOR)


def _history_with(order: Order, status: OrderStatus, now: datetime, note: str | None) -> list[dict[str, Any]]:
    history = [entry.to_payload() for entry in order.status_history]
    entry: dict[str, Any] = {"status": status.value, "timestamp": iso_timestamp(now)}
    if note:
        entry["note"] = note
    history.append(entry)
    return history


def build_status_update(
    order: Order,
    new_status: OrderStatus | str,
    *,
    note: str | None = None,
    tracking: TrackingInfo | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Record patch moving *order* to *new_status*.

    The history entry is always appended. ``invoice_sent`` also stamps the
    invoice time and a payment due date; ``shipped`` stores *tracking* when
    it has a number; ``cancelled`` stamps the cancellation time and reason.
    """
    status = OrderStatus(new_status)
    now = now or datetime.now(UTC)
    update: dict[str, Any] = {
        "status": status.value,
        "statusHistory": _history_with(order, status, now, note),
    }
    if status == OrderStatus.INVOICE_SENT:
        update["invoiceSentAt"] = format_backend_datetime(now)
        update["paymentDueAt"] = format_backend_datetime(now + timedelta(days=PAYMENT_DUE_DAYS))
    elif status == OrderStatus.SHIPPED and tracking is not None and tracking.number:
        update["tracking"] = tracking.to_payload()
    elif status == OrderStatus.CANCELLED:
        update["cancelledAt"] = format_backend_datetime(now)
        update["cancellationReason"] = note or DEFAULT_CANCELLATION_REASON
    return update


def build_cancellation(order: Order, reason: str, *, now: datetime | None = None) -> dict[str, Any]:
    """Record patch for a customer cancelling *order*.

    Raises
    ------
    StorefrontOrderStateError
        Once the order has shipped, been delivered, or is already cancelled.
    """
    if not order.is_cancellable:
        raise StorefrontOrderStateError(f"Order {order.order_number or order.id} cannot be cancelled at this stage")
    now = now or datetime.now(UTC)
    return {
        "status": OrderStatus.CANCELLED.value,
        "statusHistory": _history_with(order, OrderStatus.CANCELLED, now, reason),
        "cancelledAt": format_backend_datetime(now),
        "cancellationReason": reason,
    }


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_orders: int
    pending_orders: int
    total_products: int
    total_customers: int
    unread_messages: int
    today_revenue: int
    week_revenue: int
    month_revenue: int
    recent_orders: tuple[Order, ...]
    stale_pending_orders: tuple[Order, ...]


def compute_dashboard_stats(
    orders: Sequence[Order],
    *,
    product_count: int,
    customer_count: int,
    unread_messages: int,
    now: datetime | None = None,
) -> DashboardStats:
    """Summarise *orders* (newest first) for the admin dashboard.

    Revenue windows start at midnight of *now*'s day, and 7 and 30 days
    before it. A naive *now* is taken as UTC.
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = today - timedelta(days=7)
    month_ago = today - timedelta(days=30)

    today_revenue = week_revenue = month_revenue = 0
    pending = 0
    for order in orders:
        if order.status == OrderStatus.PENDING_REVIEW:
            pending += 1
        if order.status in _NON_REVENUE_STATUSES or order.created is None:
            continue
        if order.created >= today:
            today_revenue += order.total
        if order.created >= week_ago:
            week_revenue += order.total
        if order.created >= month_ago:
            month_revenue += order.total

    recent = tuple(orders[:RECENT_ORDER_COUNT])
    stale = tuple(
        order
        for order in recent
        if order.status == OrderStatus.PENDING_REVIEW
        and order.created is not None
        and now - order.created > STALE_PENDING_AGE
    )
    return DashboardStats(
        total_orders=len(orders),
        pending_orders=pending,
        total_products=product_count,
        total_customers=customer_count,
        unread_messages=unread_messages,
        today_revenue=today_revenue,
        week_revenue=week_revenue,
        month_revenue=month_revenue,
        recent_orders=recent,
        stale_pending_orders=stale,
    )
