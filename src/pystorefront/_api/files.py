"""File access tokens and file field edits."""

from __future__ import annotations

from pystorefront._api import _records
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontNotAuthenticatedError, StorefrontTransportError
from pystorefront.session import AuthSession

FILE_TOKEN_PATH = "/api/files/token"


async def fetch_file_token(transport: Transport, session: AuthSession | None) -> str:
    """Short-lived token for protected files (appended as ``?token=``)."""
    token = _records.bearer(session)
    if token is None:
        raise StorefrontNotAuthenticatedError("Authentication required to access protected files")
    data = await transport.request("POST", FILE_TOKEN_PATH, token=token)
    if not isinstance(data, dict) or not data.get("token"):
        raise StorefrontTransportError("File token response has no token", endpoint=FILE_TOKEN_PATH)
    return str(data["token"])


async def remove_file(
    transport: Transport,
    session: AuthSession | None,
    collection: str,
    record_id: str,
    field: str,
    filename: str | None,
) -> dict:
    """Remove *filename* from a file field, or clear the field when *filename* is ``None``."""
    body: dict[str, str | None] = {field: None} if filename is None else {f"{field}-": filename}
    return await _records.update(transport, collection, record_id, body, token=_records.bearer(session))
