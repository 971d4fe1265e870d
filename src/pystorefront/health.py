"""Health report for the storefront and its backend."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from pystorefront._api import health as _health_api
from pystorefront._transport import Transport
from pystorefront.exceptions import StorefrontError
from pystorefront.utils import iso_timestamp

_logger = logging.getLogger(__name__)


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ServiceState(StrEnum):
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ServiceStatus:
    status: ServiceState
    latency_ms: int | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class HealthReport:
    status: HealthStatus
    timestamp: str
    version: str
    services: dict[str, ServiceStatus] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        """200 while serving (healthy or degraded), 503 otherwise."""
        return 503 if self.status == HealthStatus.UNHEALTHY else 200


def overall_status(services: dict[str, ServiceStatus]) -> HealthStatus:
    """Healthy when everything is up; unhealthy when the backend is down."""
    if all(service.status == ServiceState.UP for service in services.values()):
        return HealthStatus.HEALTHY
    backend = services.get("backend")
    if backend is not None and backend.status == ServiceState.DOWN:
        return HealthStatus.UNHEALTHY
    return HealthStatus.DEGRADED


async def check_backend(transport: Transport, *, clock: Callable[[], float] = time.monotonic) -> ServiceStatus:
    started = clock()
    try:
        await _health_api.fetch_health(transport)
    except StorefrontError as exc:
        _logger.warning("Backend health check failed: %s", exc)
        return ServiceStatus(ServiceState.DOWN, int((clock() - started) * 1000), str(exc) or "Connection failed")
    return ServiceStatus(ServiceState.UP, int((clock() - started) * 1000))


async def build_health_report(
    transport: Transport,
    *,
    version: str,
    clock: Callable[[], float] = time.monotonic,
    now: datetime | None = None,
) -> HealthReport:
    started = clock()
    backend = await check_backend(transport, clock=clock)
    services = {
        "app": ServiceStatus(ServiceState.UP, int((clock() - started) * 1000)),
        "backend": backend,
    }
    return HealthReport(
        status=overall_status(services),
        timestamp=iso_timestamp(now or datetime.now(UTC)),
        version=version,
        services=services,
    )
