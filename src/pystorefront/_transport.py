"""HTTP transport for the backend REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pystorefront._constants import USER_AGENT
from pystorefront._redact import redact_for_log
from pystorefront.config import StorefrontConfig
from pystorefront.exceptions import (
    StorefrontConnectionError,
    StorefrontTransportError,
    error_for_status,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        ...


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop unset query parameters and stringify the rest."""
    if not params:
        return {}
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned


class HttpTransport:
    """JSON-over-HTTP transport with backend error mapping."""

    def __init__(
        self,
        config: StorefrontConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns ``None`` for empty (``204``) responses. Non-2xx answers are
        raised as the :class:`StorefrontApiError` subclass matching the
        status code.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if token:
            headers["authorization"] = token

        url = f"{self._config.base_url}{path}"
        query = _clean_params(params)

        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled:
            _logger.debug(
                "request %s %s params=%s body=%s",
                method,
                path,
                redact_for_log(query),
                redact_for_log(body),
            )

        try:
            async with self._http.request(
                method,
                url,
                params=query or None,
                json=dict(body) if body is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except TimeoutError as exc:
            raise StorefrontConnectionError(
                f"Request to {path} timed out",
                endpoint=path,
            ) from exc
        except aiohttp.ClientError as exc:
            raise StorefrontConnectionError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
            ) from exc

        decoded: Any = None
        if text.strip():
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError as exc:
                if 200 <= status < 300:
                    raise StorefrontTransportError(
                        f"Invalid JSON from {path}: {text[:200]}",
                        status_code=status,
                        endpoint=path,
                    ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("response %s %s status=%d body=%s", method, path, status, redact_for_log(decoded))

        if not 200 <= status < 300:
            message = ""
            data: dict[str, Any] | None = None
            if isinstance(decoded, dict):
                message = str(decoded.get("message") or "")
                raw_data = decoded.get("data")
                data = raw_data if isinstance(raw_data, dict) else None
            raise error_for_status(status, message, endpoint=path, data=data)

        return decoded
