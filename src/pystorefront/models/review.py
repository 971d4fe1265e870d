"""Product review model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pystorefront.models._base import RecordModel


class Review(RecordModel):
    user_id: str = Field(default="", validation_alias=AliasChoices("userId", "user", "user_id"))
    product_id: str = Field(default="", validation_alias=AliasChoices("productId", "product", "product_id"))
    rating: int = Field(default=0, ge=0, le=5)
    title: str = ""
    comment: str = ""
    is_verified_purchase: bool = False
    is_approved: bool = False
