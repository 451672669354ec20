"""County property-records provider (Realie API) and its sale-comp search."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from ..config import Settings, get_settings
from ..models.panel import MAX_RENTAL_COMP_LIMIT, MAX_SALE_COMP_LIMIT, RentalCompsResult, SaleCompsResult
from ..models.property import Comparable
from ..models.result import SourceResult
from ..utils.logging import get_logger
from .http import ProviderClient, ProviderError, first_record, is_no_data, record_list
from .normalizer import normalize_comparables

LOGGER = get_logger("services.county_provider")

_COMP_LIST_KEYS = ("comparables", "comps", "properties", "results", "data")


class CountyProvider(ProviderClient):
    name = "county"

    ADDRESS_PATH = "/public/property/address/"
    SEARCH_PATH = "/public/property/search/"
    PREMIUM_COMPS_PATH = "/public/premium/comparables/"
    RENT_COMPS_PATH = "/public/premium/rental-comparables/"

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        settings = settings or get_settings()
        super().__init__(settings.county_base_url, settings.county_api_key, settings.timeout, session)

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": self.api_key or ""}

    def lookup_property(
        self,
        state: str,
        address_line1: str,
        city: Optional[str] = None,
        county: Optional[str] = None,
    ) -> SourceResult[Dict[str, Any]]:
        if not self.enabled:
            return SourceResult.degraded("County provider skipped: API key not configured.")
        params = {"state": state.strip().upper(), "address": address_line1.strip(), "city": city, "county": county}
        try:
            payload = self.get(self.ADDRESS_PATH, params)
        except ProviderError as exc:
            if is_no_data(exc):
                return SourceResult.degraded(f"County provider has no record for {address_line1!r}.")
            return SourceResult.degraded(f"County provider lookup failed (status={exc.status}).")
        record = first_record(payload)
        if record is None:
            return SourceResult.degraded(f"County provider has no record for {address_line1!r}.")
        return SourceResult.ok(record)

    def rental_comps(self, address: str, radius: float = 1.0, limit: int = 10) -> RentalCompsResult:
        limit = max(1, min(int(limit), MAX_RENTAL_COMP_LIMIT))
        try:
            payload = self.get(self.RENT_COMPS_PATH, {"address": address.strip(), "radius": radius, "limit": limit})
        except ProviderError as exc:
            if not is_no_data(exc):
                raise
            LOGGER.info("rent_comps_no_data provider=%s status=%s address=%r", self.name, exc.status, address)
            return RentalCompsResult(provider=self.name, warning=f"No rental comps found (provider status {exc.status}).")
        comps = normalize_comparables(record_list(payload, _COMP_LIST_KEYS)[:limit], kind="rent", source=self.name)
        return RentalCompsResult(
            provider=self.name,
            count=len(comps),
            comps=comps,
            warning=None if comps else "No rental comps found.",
        )

    def sale_comps(
        self,
        state: Optional[str],
        county: Optional[str],
        limit: int = 10,
        subject_sqft: Optional[float] = None,
    ) -> SourceResult[SaleCompsResult]:
        if not self.enabled:
            return SourceResult.degraded("Sale comps skipped: county provider API key not configured.")
        if not state or not county:
            return SourceResult.degraded("Sale comps skipped: state and county are both required.")
        search = SaleCompSearch(self, state, county, limit, subject_sqft)
        return search.run()


class SaleCompStage(Enum):
    UNATTEMPTED = "unattempted"
    PREMIUM_TRIED = "premium_tried"
    FALLBACK_TRIED = "fallback_tried"
    RESOLVED = "resolved"


class SaleCompSearch:
    """Premium comparables first, then a broad record search ranked by size.

    Each tier can be called on its own; ``run`` walks the stages in order.
    """

    def __init__(
        self,
        provider: CountyProvider,
        state: str,
        county: str,
        limit: int = 10,
        subject_sqft: Optional[float] = None,
    ) -> None:
        self.provider = provider
        self.state = state.strip().upper()
        self.county = county.strip()
        self.limit = max(1, min(int(limit), MAX_SALE_COMP_LIMIT))
        self.subject_sqft = subject_sqft if subject_sqft and subject_sqft > 0 else None
        self.stage = SaleCompStage.UNATTEMPTED
        self.notes: List[str] = []

    def run(self) -> SourceResult[SaleCompsResult]:
        result: Optional[SaleCompsResult] = None
        while self.stage is not SaleCompStage.RESOLVED:
            if self.stage is SaleCompStage.UNATTEMPTED:
                result = self.premium_tier()
                self.stage = SaleCompStage.RESOLVED if result is not None else SaleCompStage.PREMIUM_TRIED
            elif self.stage is SaleCompStage.PREMIUM_TRIED:
                result = self.fallback_tier()
                self.stage = SaleCompStage.FALLBACK_TRIED
            else:
                self.stage = SaleCompStage.RESOLVED

        warning = " ".join(self.notes) or None
        if result is None:
            return SourceResult.degraded(warning or "Sale comps unavailable.")
        if not result.comps:
            warning = " ".join(self.notes + ["No sale comps with price and square footage found."])
        return SourceResult.ok(result, warning=warning)

    def premium_tier(self) -> Optional[SaleCompsResult]:
        params = {"state": self.state, "county": self.county, "limit": self.limit}
        try:
            payload = self.provider.get(CountyProvider.PREMIUM_COMPS_PATH, params)
        except ProviderError as exc:
            LOGGER.info("premium_comps_failed state=%s county=%s status=%s", self.state, self.county, exc.status)
            self.notes.append(f"Premium sale comps unavailable (status={exc.status}); used record search.")
            return None

        comps = normalize_comparables(record_list(payload, _COMP_LIST_KEYS), kind="sale", source=self.provider.name)
        usable = [comp for comp in comps if comp.is_priced()]
        if not usable:
            self.notes.append("Premium sale comps lacked price and square footage; used record search.")
            return None
        usable = usable[: self.limit]
        return SaleCompsResult(tier="premium", count=len(usable), comps=usable)

    def fallback_tier(self) -> Optional[SaleCompsResult]:
        params = {"state": self.state, "county": self.county, "limit": max(self.limit * 5, 50)}
        try:
            payload = self.provider.get(CountyProvider.SEARCH_PATH, params)
        except ProviderError as exc:
            LOGGER.warning("sale_comp_search_failed state=%s county=%s status=%s", self.state, self.county, exc.status)
            self.notes.append(f"Sale comp record search failed (status={exc.status}).")
            return None

        comps = normalize_comparables(record_list(payload, _COMP_LIST_KEYS), kind="sale", source=self.provider.name)
        usable = [comp for comp in comps if comp.is_priced()]
        ranked = rank_by_size(usable, self.subject_sqft, self.limit)
        return SaleCompsResult(tier="fallback", count=len(ranked), comps=ranked)


def rank_by_size(comps: List[Comparable], subject_sqft: Optional[float], limit: int) -> List[Comparable]:
    """Keep the ``limit`` comps closest in size to the subject, stable on ties."""

    if not comps:
        return []
    if not subject_sqft:
        return comps[:limit]
    df = pd.DataFrame({"sqft": [comp.square_feet for comp in comps]})
    df["gap"] = (df["sqft"] - subject_sqft).abs()
    order = df.sort_values("gap", kind="stable").head(limit).index
    return [comps[idx] for idx in order]


__all__ = ["CountyProvider", "SaleCompSearch", "SaleCompStage", "rank_by_size"]
