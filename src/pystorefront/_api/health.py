"""Backend health endpoint: GET /api/health."""

from __future__ import annotations

from typing import Any

from pystorefront._transport import Transport

HEALTH_PATH = "/api/health"


async def fetch_health(transport: Transport) -> dict[str, Any]:
    data = await transport.request("GET", HEALTH_PATH)
    return data if isinstance(data, dict) else {}
