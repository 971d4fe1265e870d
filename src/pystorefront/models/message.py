"""Contact form message model."""

from __future__ import annotations

from pystorefront.models._base import RecordModel


class ContactMessage(RecordModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""
    is_read: bool = False
    is_archived: bool = False
