"""ZIP-level demographics from the Census ACS 5-year API."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import requests

from ..config import Settings, get_settings
from ..models.property import Demographics
from ..models.result import SourceResult
from ..utils.coerce import round2, to_number, to_str
from ..utils.logging import get_logger

LOGGER = get_logger("services.census")

ZIP_PATTERN = re.compile(r"^\d{5}$")

# ACS variable -> Demographics field
ACS_FIELDS = {
    "B01003_001E": "population",
    "B19013_001E": "median_household_income",
    "B25064_001E": "median_gross_rent",
    "B25077_001E": "median_home_value_proxy",
    "B25002_001E": "total_housing_units",
    "B25002_003E": "vacant_housing_units",
    "B25003_002E": "owner_occupied_units",
    "B25003_003E": "renter_occupied_units",
}


def clean_zip(value: Any) -> Optional[str]:
    """Cut ``value`` down to a 5-digit ZIP, e.g. "78701-1234" -> "78701"."""

    text = to_str(value)[:5]
    return text if ZIP_PATTERN.match(text) else None


def parse_table(rows: Any) -> Dict[str, Any]:
    """Turn the ACS ``[[header...], [values...]]`` table into a mapping."""

    if not isinstance(rows, list) or len(rows) < 2:
        return {}
    header, values = rows[0], rows[1]
    if not isinstance(header, list) or not isinstance(values, list):
        return {}
    return dict(zip(header, values))


def _acs_number(value: Any) -> Optional[float]:
    number = to_number(value)
    # ACS encodes suppressed estimates as large negative sentinels.
    if number is None or number < 0:
        return None
    return number


def _share(part: Optional[float], whole: Optional[float]) -> Optional[float]:
    if part is None or not whole or whole <= 0:
        return None
    return round2(part / whole * 100)


def build_demographics(zip_code: str, table: Dict[str, Any], year: str) -> Demographics:
    values: Dict[str, Optional[float]] = {field: _acs_number(table.get(var)) for var, field in ACS_FIELDS.items()}

    owner = values["owner_occupied_units"]
    renter = values["renter_occupied_units"]
    occupied = None
    if owner is not None and renter is not None:
        occupied = owner + renter

    return Demographics(
        zip=zip_code,
        vacancy_rate_percent=_share(values["vacant_housing_units"], values["total_housing_units"]),
        owner_occupied_share_percent=_share(owner, occupied),
        renter_occupied_share_percent=_share(renter, occupied),
        year=year,
        **values,
    )


class CensusService:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return f"https://api.census.gov/data/{self.settings.census_year}/acs/acs5"

    def demographics(self, zip_value: Any) -> SourceResult[Demographics]:
        zip_code = clean_zip(zip_value)
        if zip_code is None:
            return SourceResult.degraded("Census enrichment skipped: no valid 5-digit ZIP.")

        variables: List[str] = list(ACS_FIELDS)
        params = {
            "get": ",".join(variables),
            "for": f"zip code tabulation area:{zip_code}",
        }
        if self.settings.census_api_key:
            params["key"] = self.settings.census_api_key
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.settings.timeout)
            resp.raise_for_status()
            rows = resp.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("census_failed zip=%s error=%s", zip_code, exc)
            return SourceResult.degraded(f"Census enrichment failed for ZIP {zip_code}: {exc}")

        table = parse_table(rows)
        if not table:
            LOGGER.info("census_empty zip=%s", zip_code)
            return SourceResult.degraded(f"Census returned no data for ZIP {zip_code}.")
        return SourceResult.ok(build_demographics(zip_code, table, self.settings.census_year))


__all__ = ["CensusService", "ACS_FIELDS", "clean_zip", "parse_table", "build_demographics"]
