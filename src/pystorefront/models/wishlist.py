"""Wishlist membership record."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pystorefront.models._base import RecordModel
from pystorefront.models.product import Product, product_from_record


class WishlistEntry(RecordModel):
    """One (user, product) membership row."""

    user_id: str = Field(default="", validation_alias=AliasChoices("userId", "user", "user_id"))
    product_id: str = Field(default="", validation_alias=AliasChoices("productId", "product", "product_id"))

    @property
    def product(self) -> Product | None:
        """The expanded product, when the entry was fetched with ``expand=productId``."""
        return product_from_record(self.expanded("productId"))
