from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pystorefront.admin import (
    build_cancellation,
    build_status_update,
    compute_dashboard_stats,
    status_color,
    status_display_name,
)
from pystorefront.checkout import build_order_draft, new_order_payload
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import StorefrontOrderStateError, StorefrontValidationError
from pystorefront.models.cart import Cart, CartItem
from pystorefront.models.order import Order, OrderStatus, ShippingAddress, TrackingInfo
from pystorefront.models.user import User

NOW = datetime(2024, 3, 10, 15, 0, tzinfo=UTC)
ADDRESS = ShippingAddress(name="Ada Lovelace", street="1 Main St", city="London", state="LN", zip="12345")
USER = User(id="u1", email="ada@example.com", name="Ada")


def _cart(discount_code: str | None = None, discount_amount: int = 0) -> Cart:
    return Cart(
        items=(
            CartItem(product_id="p1", product_name="Mug", sku="MUG", quantity=2, unit_price=1500),
            CartItem(product_id="p2", product_name="Plate", quantity=1, unit_price=1500, variants={"size": "L"}),
        ),
        discount_code=discount_code,
        discount_amount=discount_amount,
    )


def _order(status: OrderStatus, *, total: int = 1000, created: datetime = NOW, number: str = "ORD-1") -> Order:
    return Order(id=number, order_number=number, status=status, total=total, created=created)


def test_draft_prices_lines_and_shipping() -> None:
    draft = build_order_draft(_cart(), USER, ADDRESS, StorefrontConfig())

    assert [item.total_price for item in draft.items] == [3000, 1500]
    assert draft.subtotal == 4500
    assert draft.shipping_cost == 500
    assert draft.total == 5000
    assert draft.customer_name == "Ada"


def test_draft_uses_revalidated_discount_and_caps_it() -> None:
    draft = build_order_draft(_cart("SAVE", 100), USER, ADDRESS, StorefrontConfig(), discount_amount=99_999)

    assert draft.discount_amount == 4500
    assert draft.total == 500


def test_draft_ignores_amount_without_code() -> None:
    draft = build_order_draft(_cart(None, 700), USER, ADDRESS, StorefrontConfig())

    assert draft.discount_amount == 0


def test_empty_cart_is_rejected() -> None:
    with pytest.raises(StorefrontValidationError, match="Cart is empty"):
        build_order_draft(Cart(), USER, ADDRESS, StorefrontConfig())


def test_payload_starts_pending_with_history_and_min_shipping() -> None:
    config = StorefrontConfig(order_prefix="SHOP", free_shipping_threshold=1000)
    draft = build_order_draft(_cart(), USER, ADDRESS, config)

    payload = new_order_payload(draft, config, NOW)

    assert payload["orderNumber"].startswith("SHOP-20240310-")
    assert payload["status"] == "pending_review"
    assert payload["shippingCost"] == 1
    assert payload["statusHistory"] == [
        {"status": "pending_review", "timestamp": "2024-03-10T15:00:00.000Z", "note": "Order placed"}
    ]
    assert payload["items"][1]["variants"] == {"size": "L"}
    assert payload["shippingAddress"]["zip"] == "12345"


def test_invoice_sent_sets_due_date() -> None:
    update = build_status_update(_order(OrderStatus.PENDING_REVIEW), OrderStatus.INVOICE_SENT, now=NOW)

    assert update["status"] == "invoice_sent"
    assert update["invoiceSentAt"] == "2024-03-10 15:00:00.000Z"
    assert update["paymentDueAt"] == "2024-03-24 15:00:00.000Z"
    assert update["statusHistory"][-1] == {"status": "invoice_sent", "timestamp": "2024-03-10T15:00:00.000Z"}


def test_shipped_records_tracking_only_with_number() -> None:
    order = _order(OrderStatus.PROCESSING)
    tracking = TrackingInfo(carrier="UPS", number="1Z999", url="https://ups.example/1Z999")

    with_number = build_status_update(order, "shipped", tracking=tracking, note="Out the door", now=NOW)
    without = build_status_update(order, "shipped", tracking=TrackingInfo(carrier="UPS"), now=NOW)

    assert with_number["tracking"]["number"] == "1Z999"
    assert with_number["statusHistory"][-1]["note"] == "Out the door"
    assert "tracking" not in without


def test_admin_cancel_defaults_reason() -> None:
    update = build_status_update(_order(OrderStatus.INVOICE_SENT), OrderStatus.CANCELLED, now=NOW)

    assert update["cancellationReason"] == "Cancelled by admin"
    assert update["cancelledAt"] == "2024-03-10 15:00:00.000Z"


def test_history_is_appended_not_replaced() -> None:
    order = Order.model_validate(
        {
            "id": "o1",
            "status": "pending_review",
            "statusHistory": [{"status": "pending_review", "timestamp": "2024-03-01T00:00:00.000Z", "note": "Order placed"}],
        }
    )

    update = build_status_update(order, OrderStatus.INVOICE_SENT, now=NOW)

    assert [entry["status"] for entry in update["statusHistory"]] == ["pending_review", "invoice_sent"]


@pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_customer_cannot_cancel_late_orders(status: OrderStatus) -> None:
    with pytest.raises(StorefrontOrderStateError):
        build_cancellation(_order(status), "changed my mind", now=NOW)


def test_customer_cancellation_payload() -> None:
    update = build_cancellation(_order(OrderStatus.PAYMENT_RECEIVED), "changed my mind", now=NOW)

    assert update["status"] == "cancelled"
    assert update["cancellationReason"] == "changed my mind"
    assert update["statusHistory"][-1]["note"] == "changed my mind"


def test_dashboard_revenue_windows_skip_pending_and_cancelled() -> None:
    orders = [
        _order(OrderStatus.PAYMENT_RECEIVED, total=1000, created=NOW - timedelta(hours=1), number="a"),
        _order(OrderStatus.PENDING_REVIEW, total=5000, created=NOW - timedelta(hours=30), number="b"),
        _order(OrderStatus.SHIPPED, total=2000, created=NOW - timedelta(days=3), number="c"),
        _order(OrderStatus.CANCELLED, total=9000, created=NOW - timedelta(days=3), number="d"),
        _order(OrderStatus.DELIVERED, total=4000, created=NOW - timedelta(days=20), number="e"),
        _order(OrderStatus.DELIVERED, total=8000, created=NOW - timedelta(days=60), number="f"),
    ]

    stats = compute_dashboard_stats(orders, product_count=12, customer_count=4, unread_messages=2, now=NOW)

    assert stats.total_orders == 6
    assert stats.pending_orders == 1
    assert stats.today_revenue == 1000
    assert stats.week_revenue == 3000
    assert stats.month_revenue == 7000
    assert [o.order_number for o in stats.recent_orders] == ["a", "b", "c", "d", "e"]
    assert [o.order_number for o in stats.stale_pending_orders] == ["b"]
    assert (stats.total_products, stats.total_customers, stats.unread_messages) == (12, 4, 2)


def test_dashboard_accepts_naive_now_as_utc() -> None:
    orders = [_order(OrderStatus.DELIVERED, total=1200, created=NOW - timedelta(hours=2), number="a")]

    stats = compute_dashboard_stats(
        orders, product_count=0, customer_count=0, unread_messages=0, now=NOW.replace(tzinfo=None)
    )

    assert stats.today_revenue == 1200
    assert stats.month_revenue == 1200


def test_status_labels_and_colors() -> None:
    assert status_display_name(OrderStatus.PENDING_REVIEW) == "Pending Review"
    assert status_display_name("processing", StorefrontConfig(processing_status_name="crafting")) == "Crafting"
    assert status_display_name("mystery") == "mystery"
    assert status_color(OrderStatus.SHIPPED) == "#F97316"
    assert status_color("mystery") == "#6B7280"
