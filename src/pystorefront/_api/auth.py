"""Auth collection endpoints: password/OAuth2 sign-in, token refresh, auth methods."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import quote

from pystorefront._api import _records
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontTransportError
from pystorefront.models._base import format_backend_datetime
from pystorefront.models.user import User, UserRole
from pystorefront.session import AuthSession


def _auth_path(collection: str, action: str) -> str:
    return f"/api/collections/{quote(collection, safe='')}/{action}"


def parse_auth_response(endpoint: str, data: Any) -> AuthSession:
    """Turn an ``{token, record}`` auth response into an :class:`AuthSession`.

    Raises
    ------
    StorefrontTransportError
        If the response carries no token.
    """
    if not isinstance(data, dict) or not data.get("token"):
        raise StorefrontTransportError(f"Auth response from {endpoint} has no token", endpoint=endpoint)
    record = data.get("record")
    return AuthSession(
        token=str(data["token"]),
        record=User.model_validate(record) if isinstance(record, dict) else None,
    )


async def auth_with_password(
    transport: Transport,
    collection: str,
    identity: str,
    password: str,
) -> AuthSession:
    path = _auth_path(collection, "auth-with-password")
    data = await transport.request("POST", path, body={"identity": identity, "password": password})
    return parse_auth_response(path, data)


def default_oauth2_create_data(name: str = "") -> dict[str, Any]:
    """Fields set on accounts created by a first OAuth2 sign-in."""
    return {
        "name": name,
        "role": UserRole.CUSTOMER.value,
        "emailVisibility": False,
        "isBlocked": False,
    }


async def auth_with_oauth2_code(
    transport: Transport,
    collection: str,
    *,
    provider: str,
    code: str,
    code_verifier: str,
    redirect_url: str,
    create_data: Mapping[str, Any] | None = None,
) -> AuthSession:
    """Finish an OAuth2 authorization-code flow."""
    path = _auth_path(collection, "auth-with-oauth2")
    body: dict[str, Any] = {
        "provider": provider,
        "code": code,
        "codeVerifier": code_verifier,
        "redirectURL": redirect_url,
        "createData": dict(create_data) if create_data is not None else default_oauth2_create_data(),
    }
    data = await transport.request("POST", path, body=body)
    return parse_auth_response(path, data)


async def auth_refresh(transport: Transport, collection: str, session: AuthSession) -> AuthSession:
    path = _auth_path(collection, "auth-refresh")
    data = await transport.request("POST", path, token=session.token)
    return parse_auth_response(path, data)


async def list_auth_methods(transport: Transport, collection: str) -> dict[str, Any]:
    path = _auth_path(collection, "auth-methods")
    data = await transport.request("GET", path)
    return data if isinstance(data, dict) else {}


def oauth2_providers(auth_methods: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Provider entries from an auth-methods response.

    Newer backends nest them under ``oauth2.providers``, older ones expose
    ``authProviders`` at the top level.
    """
    oauth2 = auth_methods.get("oauth2")
    providers: Any = oauth2.get("providers") if isinstance(oauth2, dict) else None
    if providers is None:
        providers = auth_methods.get("authProviders")
    if not isinstance(providers, list):
        return []
    return [item for item in providers if isinstance(item, dict)]


async def update_user(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    user_id: str,
    data: Mapping[str, Any],
) -> User:
    updated = await _records.update(transport, collection, user_id, data, token=_records.bearer(session))
    return User.model_validate(updated)


async def touch_last_login(
    transport: Transport,
    session: AuthSession,
    collection: str,
    now: datetime,
) -> User:
    """Record *now* as the user's last sign-in time."""
    if session.user_id is None:
        raise ValueError("Session has no user record")
    return await update_user(
        transport,
        session,
        collection,
        session.user_id,
        {"lastLoginAt": format_backend_datetime(now)},
    )
