"""Key/value store setting."""

from __future__ import annotations

from pystorefront.models._base import RecordModel


class Setting(RecordModel):
    key: str = ""
    value: str = ""
    description: str = ""
