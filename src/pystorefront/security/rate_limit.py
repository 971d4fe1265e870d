"""Fixed-window, in-memory request rate limiting.

State lives in one process; deployments with several workers need a shared
store instead.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

CLEANUP_INTERVAL_S = 60.0


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    limit: int
    window_s: float
    identifier: str = "default"


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset: float
    """Epoch seconds at which the current window ends."""
    limit: int


class RateLimits:
    """Preset limits."""

    AUTH = RateLimitConfig(limit=5, window_s=60, identifier="auth")
    API = RateLimitConfig(limit=60, window_s=60, identifier="api")
    GENERAL = RateLimitConfig(limit=100, window_s=60, identifier="general")
    SENSITIVE = RateLimitConfig(limit=3, window_s=300, identifier="sensitive")


@dataclass(slots=True)
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts hits per ``identifier:key`` inside fixed windows."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL_S:
            return
        self._last_cleanup = now
        expired = [key for key, window in self._windows.items() if window.reset_at < now]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        """Count one request from *key* and report whether it is allowed."""
        now = self._clock()
        self._cleanup(now)
        full_key = f"{config.identifier}:{key}"
        window = self._windows.get(full_key)
        if window is None or window.reset_at < now:
            window = _Window(count=0, reset_at=now + config.window_s)
            self._windows[full_key] = window
        window.count += 1
        return RateLimitResult(
            success=window.count <= config.limit,
            remaining=max(0, config.limit - window.count),
            reset=window.reset_at,
            limit=config.limit,
        )

    def clear(self) -> None:
        self._windows.clear()


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(math.ceil(result.reset)),
    }


def client_id_from_headers(headers: Mapping[str, str]) -> str:
    """Best-effort client address: first ``X-Forwarded-For`` hop, then ``X-Real-IP``."""
    lowered = {name.lower(): value for name, value in headers.items()}
    forwarded = lowered.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = lowered.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"
