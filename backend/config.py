"""
Runtime settings for the catalog. Overridable via CATALOG_* env vars.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from backend.corpus import FALLBACK_PRODUCTS_PATH

_DEFAULT_API_URL = "https://api.baserow.io/api/database/rows/table/659848/"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _read_env_float(name: str, default: float) -> float:
    """Read env var as float; return default if unset or invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _read_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _read_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class CatalogConfig:
    api_url: str = _DEFAULT_API_URL
    api_token: str = ""
    auth_scheme: str = "Token"
    public_field: str = "Public"
    request_timeout: float = 10.0
    fallback_path: Path = FALLBACK_PRODUCTS_PATH
    shop_name: str = "Neo Shop"
    currency_symbol: str = "R$"
    contact_base_url: str = "https://wa.me"
    contact_phone: str = "5500000000000"
    search_debounce_seconds: float = 0.3
    banner_ttl_seconds: float = 10.0
    # Promotional price wins for the contact message, with no check that it is lower.
    prefer_promotional_price: bool = True

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Build config from CATALOG_* env vars, falling back to defaults."""
        defaults = cls()
        return cls(
            api_url=_read_env_str("CATALOG_API_URL", defaults.api_url),
            api_token=_read_env_str("CATALOG_API_TOKEN", defaults.api_token),
            auth_scheme=_read_env_str("CATALOG_AUTH_SCHEME", defaults.auth_scheme),
            public_field=_read_env_str("CATALOG_PUBLIC_FIELD", defaults.public_field),
            request_timeout=_read_env_float("CATALOG_REQUEST_TIMEOUT", defaults.request_timeout),
            fallback_path=Path(
                _read_env_str("CATALOG_FALLBACK_PATH", str(defaults.fallback_path))
            ),
            shop_name=_read_env_str("CATALOG_SHOP_NAME", defaults.shop_name),
            currency_symbol=_read_env_str("CATALOG_CURRENCY_SYMBOL", defaults.currency_symbol),
            contact_base_url=_read_env_str("CATALOG_CONTACT_BASE_URL", defaults.contact_base_url),
            contact_phone=_read_env_str("CATALOG_CONTACT_PHONE", defaults.contact_phone),
            search_debounce_seconds=_read_env_float(
                "CATALOG_SEARCH_DEBOUNCE_SECONDS", defaults.search_debounce_seconds
            ),
            banner_ttl_seconds=_read_env_float(
                "CATALOG_BANNER_TTL_SECONDS", defaults.banner_ttl_seconds
            ),
            prefer_promotional_price=_read_env_bool(
                "CATALOG_PREFER_PROMOTIONAL_PRICE", defaults.prefer_promotional_price
            ),
        )
