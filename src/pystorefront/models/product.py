"""Catalog models: products, their variants, and categories."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, Field

from pystorefront.models._base import RecordModel, StorefrontModel


class ProductStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class VariantOption(StorefrontModel):
    """A selectable variant (size, colour, material ...) and its price delta in cents."""

    name: str = ""
    price_modifier: int = 0
    metadata: dict[str, str | int | float] = Field(default_factory=dict)
    """Optional extras, e.g. ``{"hex": "#ff0000"}`` for colours."""


class Category(RecordModel):
    """A product category; categories nest through ``parentId``."""

    name: str = ""
    slug: str = ""
    parent_id: str = Field(default="", validation_alias=AliasChoices("parentId", "parent", "parent_id"))
    order: int = 0
    image: str = ""

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    @property
    def parent(self) -> Category | None:
        data = self.expanded("parentId")
        return Category.model_validate(data) if isinstance(data, dict) else None


class Product(RecordModel):
    """A catalog product. Prices are integer cents."""

    name: str = ""
    slug: str = ""
    description: str = ""
    base_price: int = 0
    sku: str = ""
    category_id: str = Field(default="", validation_alias=AliasChoices("categoryId", "category", "category_id"))
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    """File names stored on the record; see :mod:`pystorefront.files`."""
    sizes: list[VariantOption] = Field(default_factory=list)
    colors: list[VariantOption] = Field(default_factory=list)
    options: list[VariantOption] = Field(default_factory=list)
    status: ProductStatus = ProductStatus.ACTIVE
    is_featured: bool = False
    badge: str = ""
    """``"new"``, ``"sale"`` or empty."""

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @property
    def category(self) -> Category | None:
        data = self.expanded("categoryId")
        return Category.model_validate(data) if isinstance(data, dict) else None

    def variant_groups(self) -> dict[str, list[VariantOption]]:
        """Non-empty variant groups keyed by their field name."""
        groups = {"size": self.sizes, "color": self.colors, "option": self.options}
        return {key: value for key, value in groups.items() if value}

    def price_for(self, variants: dict[str, str] | None = None) -> int:
        """Unit price in cents for a selection such as ``{"size": "Large"}``.

        Unknown selections contribute nothing.
        """
        price = self.base_price
        for group, choice in (variants or {}).items():
            for option in self.variant_groups().get(group, []):
                if option.name == choice:
                    price += option.price_modifier
                    break
        return max(0, price)


def product_from_record(data: Any) -> Product | None:
    """Validate an expanded product relation, ignoring missing ones."""
    if not isinstance(data, dict):
        return None
    return Product.model_validate(data)
