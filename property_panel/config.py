"""Environment-driven settings for upstream providers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_TIMEOUT_SECONDS = 20.0


def _env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return default


@dataclass(frozen=True)
class Settings:
    primary_api_key: Optional[str]
    primary_base_url: str
    county_api_key: Optional[str]
    county_base_url: str
    geocoder_url: str
    geocoder_user_agent: str
    census_api_key: Optional[str]
    census_year: str
    timeout: float
    cors_origins: str

    @property
    def primary_enabled(self) -> bool:
        return bool(self.primary_api_key)

    @property
    def county_enabled(self) -> bool:
        return bool(self.county_api_key)


def get_settings() -> Settings:
    """Read settings from the environment on every call; nothing is cached."""

    timeout_raw = _env("UPSTREAM_TIMEOUT_SECONDS", default=str(DEFAULT_TIMEOUT_SECONDS))
    try:
        timeout = float(timeout_raw)
    except ValueError:
        timeout = DEFAULT_TIMEOUT_SECONDS
    return Settings(
        primary_api_key=_env("PRIMARY_PROVIDER_API_KEY", "RENTCAST_API_KEY") or None,
        primary_base_url=_env("PRIMARY_PROVIDER_BASE_URL", default="https://api.rentcast.io/v1").rstrip("/"),
        county_api_key=_env("COUNTY_PROVIDER_API_KEY", "REALIE_API_KEY") or None,
        county_base_url=_env("COUNTY_PROVIDER_BASE_URL", default="https://app.realie.ai/api").rstrip("/"),
        geocoder_url=_env("GEOCODER_URL", default="https://nominatim.openstreetmap.org/search"),
        geocoder_user_agent=_env("GEOCODER_USER_AGENT", default="property-panel/0.1 (contact: ops)"),
        census_api_key=_env("CENSUS_API_KEY") or None,
        census_year=_env("CENSUS_YEAR", default="2022"),
        timeout=timeout,
        cors_origins=_env("CORS_ALLOW_ORIGINS", default="*"),
    )


__all__ = ["Settings", "get_settings", "DEFAULT_TIMEOUT_SECONDS"]
