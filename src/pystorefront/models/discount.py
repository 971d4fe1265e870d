"""Discount code model."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pystorefront.models._base import BackendDatetime, RecordModel


class DiscountType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Discount(RecordModel):
    """A discount code.

    ``value`` is a percentage for ``percentage`` codes and cents for
    ``fixed`` ones. ``max_uses == 0`` and ``min_order_value == 0`` mean
    "no limit".
    """

    code: str = ""
    type: DiscountType = DiscountType.FIXED
    value: float = 0
    min_order_value: int = 0
    max_uses: int = 0
    used_count: int = 0
    expires_at: BackendDatetime = None
    is_active: bool = True

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses > 0 and self.used_count >= self.max_uses
