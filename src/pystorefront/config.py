"""Client configuration for pystorefront."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pystorefront._constants import DEFAULT_BASE_URL
from pystorefront.exceptions import StorefrontConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env_key: str, value: str) -> int:
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise StorefrontConfigError(f"{env_key} must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise StorefrontConfigError(f"{env_key} must not be negative, got {parsed}")
    return parsed


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value.strip())
    except ValueError as exc:
        raise StorefrontConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class StorefrontConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL (no trailing ``/api``).
    store_name : str
        Display name of the store.
    order_prefix : str
        Prefix for generated order numbers (``ORD-20240115-0042``).
    currency_code : str
        ISO 4217 currency code.
    currency_symbol : str
        Symbol used by :func:`pystorefront.pricing.format_price`.
    locale : str
        BCP 47 locale tag.
    shipping_flat_rate : int
        Shipping cost in cents charged below the free-shipping threshold.
    free_shipping_threshold : int
        Subtotal in cents at or above which shipping is free. ``0`` disables
        free shipping.
    processing_status_name : str
        Display label for the ``processing`` order status (e.g.
        ``"printing"``).
    admin_email : str or None
        Owner account treated as admin regardless of its role.
    site_password : str or None
        Shared password gating the whole storefront when set.
    auth_collection : str
        Auth collection that holds customer accounts.
    request_timeout : float
        Total timeout in seconds for a single backend request.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = DEFAULT_BASE_URL
    store_name: str = "My Store"
    order_prefix: str = "ORD"
    currency_code: str = "USD"
    currency_symbol: str = "$"
    locale: str = "en-US"
    shipping_flat_rate: int = 500
    free_shipping_threshold: int = 5000
    processing_status_name: str = "processing"
    admin_email: str | None = None
    site_password: str | None = None
    auth_collection: str = "users"
    request_timeout: float = 30.0
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise StorefrontConfigError("base_url must be non-empty")
        if len(self.currency_code) != 3:
            raise StorefrontConfigError(f"currency_code must be a 3-letter code, got {self.currency_code!r}")
        # Normalise once so URL joins never produce a double slash.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def site_password_enabled(self) -> bool:
        return bool(self.site_password)

    @classmethod
    def from_env(cls, **overrides: Any) -> StorefrontConfig:
        """Create configuration from environment variables.

        Reads ``POCKETBASE_URL`` (falling back to
        ``NEXT_PUBLIC_POCKETBASE_URL``) and the store variables
        (``STORE_NAME``, ``ORDER_PREFIX``, ``SHIPPING_FLAT_RATE`` ...).
        Explicit keyword arguments override environment values.

        Raises
        ------
        StorefrontConfigError
            When a numeric variable cannot be parsed.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        base_url = env.get("POCKETBASE_URL") or env.get("NEXT_PUBLIC_POCKETBASE_URL")
        if base_url:
            config_kwargs["base_url"] = base_url

        _ENV_CONFIG_MAP = {
            "STORE_NAME": "store_name",
            "ORDER_PREFIX": "order_prefix",
            "CURRENCY_CODE": "currency_code",
            "CURRENCY_SYMBOL": "currency_symbol",
            "LOCALE": "locale",
            "PROCESSING_STATUS_NAME": "processing_status_name",
            "ADMIN_EMAIL": "admin_email",
            "SITE_PASSWORD": "site_password",
            "AUTH_COLLECTION": "auth_collection",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and val != "":
                config_kwargs[field_name] = val

        # Cents values are integers, handle separately
        for env_key, field_name in (
            ("SHIPPING_FLAT_RATE", "shipping_flat_rate"),
            ("FREE_SHIPPING_THRESHOLD", "free_shipping_threshold"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        timeout_env = env.get("STOREFRONT_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("STOREFRONT_REQUEST_TIMEOUT", timeout_env)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("STOREFRONT_API_TRACE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
