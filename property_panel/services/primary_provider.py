"""Primary property-records provider (RentCast API)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ..config import Settings, get_settings
from ..models.panel import MAX_RENTAL_COMP_LIMIT, RentalCompsResult
from ..models.result import SourceResult
from ..utils.coerce import to_number
from ..utils.logging import get_logger
from .http import ProviderClient, ProviderError, first_record, is_no_data, record_list
from .normalizer import normalize_comparables

LOGGER = get_logger("services.primary_provider")


class PrimaryProvider(ProviderClient):
    name = "primary"

    PROPERTY_PATH = "/properties"
    RENT_COMPS_PATH = "/avm/rent/long-term"

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        settings = settings or get_settings()
        super().__init__(settings.primary_base_url, settings.primary_api_key, settings.timeout, session)

    def auth_headers(self) -> Dict[str, str]:
        return {"X-Api-Key": self.api_key or ""}

    def raw_property(self, address: str) -> Any:
        """Unfiltered provider payload for ``address``; raises ProviderError."""

        return self.get(self.PROPERTY_PATH, {"address": address.strip()})

    def lookup_property(self, address: str) -> SourceResult[Dict[str, Any]]:
        if not self.enabled:
            return SourceResult.degraded("Primary provider skipped: API key not configured.")
        try:
            payload = self.raw_property(address)
        except ProviderError as exc:
            if is_no_data(exc):
                return SourceResult.degraded(f"Primary provider has no record for {address!r}.")
            return SourceResult.degraded(f"Primary provider lookup failed (status={exc.status}).")
        record = first_record(payload)
        if record is None:
            return SourceResult.degraded(f"Primary provider has no record for {address!r}.")
        return SourceResult.ok(record)

    def rental_comps(self, address: str, radius: float = 1.0, limit: int = 10) -> RentalCompsResult:
        """Rental comparables near ``address``.

        400/404/422 from the provider mean "nothing found" and give an empty
        result; any other failure raises ProviderError.
        """

        limit = max(1, min(int(limit), MAX_RENTAL_COMP_LIMIT))
        params = {"address": address.strip(), "maxRadius": radius, "compCount": limit}
        try:
            payload = self.get(self.RENT_COMPS_PATH, params)
        except ProviderError as exc:
            if not is_no_data(exc):
                raise
            LOGGER.info("rent_comps_no_data provider=%s status=%s address=%r", self.name, exc.status, address)
            return RentalCompsResult(provider=self.name, warning=f"No rental comps found (provider status {exc.status}).")

        raw = record_list(payload, ("comparables", "comps", "listings"))
        comps = normalize_comparables(raw[:limit], kind="rent", source=self.name)
        rent_estimate = to_number(payload.get("rent")) if isinstance(payload, dict) else None
        warning = None if comps else "No rental comps found."
        return RentalCompsResult(
            provider=self.name,
            count=len(comps),
            comps=comps,
            rent_estimate=rent_estimate,
            warning=warning,
        )


__all__ = ["PrimaryProvider"]
