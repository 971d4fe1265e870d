"""Product reviews (``reviews`` collection).

New reviews are stored unapproved and only show up in product listings
once a moderator approves them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pystorefront._api import _records
from pystorefront._constants import COLLECTION_REVIEWS, DEFAULT_SORT
from pystorefront._transport import Transport
from pystorefront.models.list_result import ListResult
from pystorefront.models.review import Review
from pystorefront.query import QueryBuilder
from pystorefront.session import AuthSession

_EDITABLE_FIELDS = frozenset({"rating", "title", "comment"})


def _product_filter(product_id: str, only_approved: bool) -> str:
    query = QueryBuilder().where("productId", "=", product_id)
    if only_approved:
        query.and_("isApproved", "=", True)
    return query.build()


async def fetch_product_reviews(
    transport: Transport,
    session: AuthSession | None,
    product_id: str,
    *,
    page: int = 1,
    per_page: int = 10,
    only_approved: bool = True,
) -> ListResult[Review]:
    data = await _records.get_list(
        transport,
        COLLECTION_REVIEWS,
        page=page,
        per_page=per_page,
        filter_=_product_filter(product_id, only_approved),
        sort=DEFAULT_SORT,
        expand="userId",
        token=_records.bearer(session),
    )
    return _records.parse_list(data, Review)


async def fetch_user_reviews(
    transport: Transport,
    session: AuthSession | None,
    user_id: str,
    *,
    page: int = 1,
    per_page: int = 10,
) -> ListResult[Review]:
    data = await _records.get_list(
        transport,
        COLLECTION_REVIEWS,
        page=page,
        per_page=per_page,
        filter_=QueryBuilder().where("userId", "=", user_id).build(),
        sort=DEFAULT_SORT,
        expand="productId",
        token=_records.bearer(session),
    )
    return _records.parse_list(data, Review)


async def create_review(
    transport: Transport,
    session: AuthSession | None,
    *,
    user_id: str,
    product_id: str,
    rating: int,
    title: str,
    comment: str,
    is_verified_purchase: bool = False,
) -> Review:
    if not 1 <= rating <= 5:
        raise ValueError(f"rating must be between 1 and 5, got {rating}")
    body = {
        "userId": user_id,
        "productId": product_id,
        "rating": rating,
        "title": title,
        "comment": comment,
        "isVerifiedPurchase": is_verified_purchase,
        "isApproved": False,
    }
    created = await _records.create(transport, COLLECTION_REVIEWS, body, token=_records.bearer(session))
    return Review.model_validate(created)


async def update_review(
    transport: Transport,
    session: AuthSession | None,
    review_id: str,
    data: Mapping[str, Any],
) -> Review:
    """Update the rating, title, or comment of a review. Other keys are rejected."""
    unknown = set(data) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update review fields: {', '.join(sorted(unknown))}")
    updated = await _records.update(transport, COLLECTION_REVIEWS, review_id, data, token=_records.bearer(session))
    return Review.model_validate(updated)


async def delete_review(transport: Transport, session: AuthSession | None, review_id: str) -> None:
    await _records.delete(transport, COLLECTION_REVIEWS, review_id, token=_records.bearer(session))


async def fetch_average_rating(
    transport: Transport,
    session: AuthSession | None,
    product_id: str,
) -> tuple[float, int]:
    """``(average, count)`` over approved reviews; ``(0.0, 0)`` when there are none."""
    items = await _records.get_full_list(
        transport,
        COLLECTION_REVIEWS,
        filter_=_product_filter(product_id, True),
        fields="rating",
        token=_records.bearer(session),
    )
    ratings = [int(item.get("rating") or 0) for item in items]
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)
