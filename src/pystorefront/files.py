"""URLs for files stored on backend records.

Files live at ``{base}/api/files/{collection}/{record}/{filename}``.
Images missing from a record resolve to a placeholder path so callers can
always render something.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from pystorefront._constants import PLACEHOLDER_AVATAR, PLACEHOLDER_CATEGORY, PLACEHOLDER_PRODUCT
from pystorefront.models._base import RecordModel
from pystorefront.models.product import Category, Product
from pystorefront.models.user import User

THUMB_SIZES: dict[str, str] = {
    "small": "100x100",
    "medium": "300x300",
    "large": "500x500",
}


def build_file_url(
    base_url: str,
    collection: str,
    record_id: str,
    filename: str,
    *,
    thumb: str | None = None,
    download: bool = False,
    token: str | None = None,
) -> str:
    url = "/".join(
        (
            base_url.rstrip("/"),
            "api/files",
            quote(collection, safe=""),
            quote(record_id, safe=""),
            quote(filename, safe=""),
        )
    )
    query: dict[str, str] = {}
    if thumb:
        query["thumb"] = thumb
    if download:
        query["download"] = "1"
    if token:
        query["token"] = token
    return f"{url}?{urlencode(query)}" if query else url


def file_url(
    base_url: str,
    record: RecordModel,
    filename: str,
    *,
    thumb: str | None = None,
    download: bool = False,
    token: str | None = None,
) -> str:
    """URL of *filename* on *record*; empty when there is no file name."""
    if not filename:
        return ""
    collection = record.collection_id or record.collection_name
    return build_file_url(base_url, collection, record.id, filename, thumb=thumb, download=download, token=token)


def product_image_url(
    base_url: str,
    product: Product,
    index: int = 0,
    *,
    thumb: str | None = None,
    token: str | None = None,
) -> str:
    if not 0 <= index < len(product.images) or not product.images[index]:
        return PLACEHOLDER_PRODUCT
    return file_url(base_url, product, product.images[index], thumb=thumb, token=token)


def product_image_urls(base_url: str, product: Product, *, thumb: str | None = None) -> list[str]:
    return [file_url(base_url, product, name, thumb=thumb) for name in product.images if name]


def product_thumbnail_url(base_url: str, product: Product, size: str = "medium") -> str:
    """Thumbnail of the first image; *size* is a preset name or ``"WxH"``."""
    return product_image_url(base_url, product, 0, thumb=THUMB_SIZES.get(size, size))


def category_image_url(base_url: str, category: Category, *, thumb: str | None = None) -> str:
    if not category.image:
        return PLACEHOLDER_CATEGORY
    return file_url(base_url, category, category.image, thumb=thumb)


def user_avatar_url(base_url: str, user: User, *, thumb: str | None = None) -> str:
    if not user.avatar:
        return PLACEHOLDER_AVATAR
    return file_url(base_url, user, user.avatar, thumb=thumb)
