"""Customer accounts and saved addresses."""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, Field

from pystorefront.models._base import BackendDatetime, RecordModel


class UserRole(StrEnum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


class User(RecordModel):
    """A record from the auth collection."""

    email: str = ""
    email_visibility: bool = False
    verified: bool = False
    name: str = ""
    avatar: str = ""
    phone: str = ""
    role: str = UserRole.CUSTOMER.value
    is_blocked: bool = False
    admin_notes: str = ""
    last_login_at: BackendDatetime = None

    @property
    def is_admin_role(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff_role(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.STAFF)


class Address(RecordModel):
    """A saved shipping address belonging to a user."""

    user_id: str = Field(default="", validation_alias=AliasChoices("userId", "user", "user_id"))
    name: str = ""
    street: str = ""
    apt: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    is_default: bool = False
