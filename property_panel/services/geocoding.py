"""Forward geocoding through a Nominatim-compatible search endpoint."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests

from ..config import Settings, get_settings
from ..models.property import GeocodeResult
from ..models.result import SourceResult
from ..utils.coerce import to_str
from ..utils.logging import get_logger

LOGGER = get_logger("services.geocoding")

STATE_ABBREVIATIONS = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR", "california": "CA",
    "colorado": "CO", "connecticut": "CT", "delaware": "DE", "district of columbia": "DC",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID", "illinois": "IL",
    "indiana": "IN", "iowa": "IA", "kansas": "KS", "kentucky": "KY", "louisiana": "LA",
    "maine": "ME", "maryland": "MD", "massachusetts": "MA", "michigan": "MI", "minnesota": "MN",
    "mississippi": "MS", "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK", "oregon": "OR",
    "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC", "south dakota": "SD",
    "tennessee": "TN", "texas": "TX", "utah": "UT", "vermont": "VT", "virginia": "VA",
    "washington": "WA", "west virginia": "WV", "wisconsin": "WI", "wyoming": "WY",
    "puerto rico": "PR",
}

_CITY_KEYS = ("city", "town", "village", "hamlet", "municipality")


class GeocodingService:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def geocode(self, address: str) -> SourceResult[GeocodeResult]:
        """Resolve ``address`` to a ZIP and coordinates; never raises."""

        if not address or not address.strip():
            return SourceResult.degraded("Geocoding skipped: no full address supplied.")
        params = {
            "q": address.strip(),
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": 1,
            "countrycodes": "us",
        }
        headers = {"User-Agent": self.settings.geocoder_user_agent, "Accept": "application/json"}
        try:
            resp = self.session.get(self.settings.geocoder_url, params=params, headers=headers, timeout=self.settings.timeout)
            resp.raise_for_status()
            hits = resp.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("geocode_failed address=%r error=%s", address, exc)
            return SourceResult.degraded(f"Geocoding failed: {exc}")

        if not isinstance(hits, list) or not hits:
            LOGGER.info("geocode_no_match address=%r", address)
            return SourceResult.degraded("Geocoding returned no match for the address.")

        hit = hits[0] if isinstance(hits[0], Mapping) else {}
        components: Dict[str, Any] = dict(hit.get("address") or {})
        result = GeocodeResult(
            zip=to_str(components.get("postcode")) or None,
            latitude=_float(hit.get("lat")),
            longitude=_float(hit.get("lon")),
            raw_components=components,
        )
        return SourceResult.ok(result)


def _float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def city_from_components(components: Mapping[str, Any]) -> Optional[str]:
    for key in _CITY_KEYS:
        value = to_str(components.get(key))
        if value:
            return value
    return None


def county_from_components(components: Mapping[str, Any]) -> Optional[str]:
    county = to_str(components.get("county"))
    if not county:
        return None
    if county.lower().endswith(" county"):
        county = county[: -len(" county")].strip()
    return county or None


def state_from_components(components: Mapping[str, Any]) -> Optional[str]:
    iso = to_str(components.get("ISO3166-2-lvl4"))
    if iso.upper().startswith("US-") and len(iso) == 5:
        return iso[3:].upper()
    name = to_str(components.get("state")).lower()
    return STATE_ABBREVIATIONS.get(name)


__all__ = [
    "GeocodingService",
    "city_from_components",
    "county_from_components",
    "state_from_components",
]
