"""Build the consolidated property panel from every upstream source."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import Settings, get_settings
from ..models.panel import PanelOptions, PropertyPanel, SaleCompsResult
from ..models.property import AddressQuery, GeocodeResult, SubjectProperty
from ..models.result import SourceResult
from ..utils.logging import bind_logger, get_logger, new_request_id
from .census import CensusService
from .county_provider import CountyProvider
from .geocoding import GeocodingService, city_from_components, county_from_components, state_from_components
from .normalizer import subject_field
from .primary_provider import PrimaryProvider
from .valuation import FinancingTerms, estimate_arv, estimate_avm, investment_summary

LOGGER = get_logger("services.panel")


class PanelValidationError(ValueError):
    """The query does not identify a property."""


@dataclass
class ResolvedLocation:
    full_address: Optional[str]
    state: Optional[str]
    address_line1: Optional[str]
    city: Optional[str]
    county: Optional[str]

    @classmethod
    def from_query(cls, query: AddressQuery) -> "ResolvedLocation":
        def clean(value: Optional[str]) -> Optional[str]:
            value = (value or "").strip()
            return value or None

        return cls(
            full_address=clean(query.full_address),
            state=clean(query.state),
            address_line1=clean(query.address_line1),
            city=clean(query.city),
            county=clean(query.county),
        )


@dataclass
class PanelContext:
    """Per-request state; discarded once the panel is returned."""

    query: AddressQuery
    options: PanelOptions
    location: ResolvedLocation
    warnings: List[str] = field(default_factory=list)
    log: logging.LoggerAdapter = field(default_factory=lambda: bind_logger(LOGGER, request=new_request_id()))

    def collect(self, result: SourceResult) -> Any:
        if result.warning:
            self.warn(result.warning)
        return result.value

    def warn(self, message: str) -> None:
        self.log.info("panel_warning message=%r", message)
        self.warnings.append(message)


class PanelService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        geocoder: Optional[GeocodingService] = None,
        census: Optional[CensusService] = None,
        primary: Optional[PrimaryProvider] = None,
        county: Optional[CountyProvider] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.geocoder = geocoder or GeocodingService(self.settings)
        self.census = census or CensusService(self.settings)
        self.primary = primary or PrimaryProvider(self.settings)
        self.county = county or CountyProvider(self.settings)

    def build(self, query: AddressQuery, options: Optional[PanelOptions] = None) -> PropertyPanel:
        options = options or PanelOptions()
        if not query.has_identity():
            raise PanelValidationError("Provide full_address, or both state and address_line1.")

        ctx = PanelContext(query=query, options=options, location=ResolvedLocation.from_query(query))
        ctx.log.info("panel_start full_address=%r state=%s", ctx.location.full_address, ctx.location.state)

        geocoding = self._geocode(ctx)
        demographics = None
        if geocoding is not None and geocoding.zip:
            demographics = ctx.collect(self.census.demographics(geocoding.zip))
        else:
            ctx.warn("Census enrichment skipped: no ZIP from geocoding.")
        self._derive_location(ctx, geocoding)

        primary_record, county_record = self._lookup_records(ctx)
        subject = self._resolve_subject(ctx, primary_record, county_record)

        sale_comps = self._sale_comps(ctx, subject)
        comps = sale_comps.comps if sale_comps else []
        arv = estimate_arv(comps, subject.square_feet)
        avm = estimate_avm(comps, subject.square_feet, subject.rent_estimate_monthly, options.cap_rate_percent)

        terms = FinancingTerms(
            vacancy_percent=options.vacancy_percent,
            expense_percent=options.expense_percent,
            down_payment_percent=options.down_payment_percent,
            interest_rate_percent=options.interest_rate_percent,
            loan_years=options.loan_years,
        )
        investment = investment_summary(subject.purchase_price, subject.rent_estimate_monthly, terms)

        ctx.log.info(
            "panel_done avm_method=%s arv_ok=%s investment_ok=%s warnings=%d",
            avm.method,
            arv.ok,
            investment.ok,
            len(ctx.warnings),
        )
        return PropertyPanel(
            inputs={
                "query": query.model_dump(),
                "options": options.model_dump(),
                "resolved": vars(ctx.location).copy(),
            },
            geocoding=geocoding,
            demographics=demographics,
            primary_provider_data=primary_record,
            secondary_provider_data=county_record,
            sale_comps=sale_comps,
            subject=subject,
            arv=arv,
            avm=avm,
            investment=investment,
            warnings=ctx.warnings,
        )

    # ------------------------------------------------------------------
    # Stages
    def _geocode(self, ctx: PanelContext) -> Optional[GeocodeResult]:
        if not ctx.location.full_address:
            ctx.warn("Geocoding skipped: no full address supplied.")
            return None
        return ctx.collect(self.geocoder.geocode(ctx.location.full_address))

    def _derive_location(self, ctx: PanelContext, geocoding: Optional[GeocodeResult]) -> None:
        loc = ctx.location
        if not loc.address_line1 and loc.full_address:
            first = loc.full_address.split(",")[0].strip()
            if first:
                loc.address_line1 = first
                ctx.warn(f"address_line1 derived from full address: {first!r}.")

        components = geocoding.raw_components if geocoding is not None else {}
        derivations = (
            ("state", state_from_components),
            ("county", county_from_components),
            ("city", city_from_components),
        )
        for name, derive in derivations:
            if getattr(loc, name) or not components:
                continue
            value = derive(components)
            if value:
                setattr(loc, name, value)
                ctx.warn(f"{name} derived from geocoding: {value!r}.")

    def _lookup_records(self, ctx: PanelContext) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        loc = ctx.location
        tasks: Dict[str, Callable[[], SourceResult]] = {}

        if not self.primary.enabled:
            primary_skip = "Primary provider skipped: API key not configured."
        elif not loc.full_address:
            primary_skip = "Primary provider skipped: no full address supplied."
        else:
            primary_skip = None
            tasks["primary"] = lambda: self.primary.lookup_property(loc.full_address)

        if not self.county.enabled:
            county_skip = "County provider skipped: API key not configured."
        elif not (loc.state and loc.address_line1):
            county_skip = "County provider skipped: state and address_line1 are required."
        else:
            county_skip = None
            tasks["county"] = lambda: self.county.lookup_property(loc.state, loc.address_line1, loc.city, loc.county)

        results: Dict[str, SourceResult] = {}
        if tasks:
            with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
                futures = {name: pool.submit(task) for name, task in tasks.items()}
                results = {name: future.result() for name, future in futures.items()}

        primary_record = None
        if primary_skip:
            ctx.warn(primary_skip)
        else:
            primary_record = ctx.collect(results["primary"])

        county_record = None
        if county_skip:
            ctx.warn(county_skip)
        else:
            county_record = ctx.collect(results["county"])
        return primary_record, county_record

    def _resolve_subject(self, ctx: PanelContext, primary_record, county_record) -> SubjectProperty:
        resolved: Dict[str, Any] = {}
        for field_name in ("square_feet", "rent_estimate", "purchase_price"):
            value, source = None, None
            for provider, record in (("primary", primary_record), ("county", county_record)):
                value = subject_field(provider, field_name, record)
                if value is not None:
                    source = provider
                    break
            resolved[field_name] = (value, source)

        price, price_source = resolved["purchase_price"]
        override = ctx.options.purchase_price_override
        if price is None and override is not None and override > 0:
            price, price_source = override, "override"

        sqft, sqft_source = resolved["square_feet"]
        rent, rent_source = resolved["rent_estimate"]
        if sqft is None:
            ctx.warn("Subject square footage unavailable from providers.")
        if rent is None:
            ctx.warn("Subject rent estimate unavailable from providers.")
        if price is None:
            ctx.warn("Purchase price unavailable from providers or override.")
        return SubjectProperty(
            square_feet=sqft,
            rent_estimate_monthly=rent,
            purchase_price=price,
            square_feet_source=sqft_source,
            rent_estimate_source=rent_source,
            purchase_price_source=price_source,
        )

    def _sale_comps(self, ctx: PanelContext, subject: SubjectProperty) -> Optional[SaleCompsResult]:
        loc = ctx.location
        if not (loc.state and loc.county):
            ctx.warn("Sale comps skipped: state and county are both required.")
            return None
        result = self.county.sale_comps(loc.state, loc.county, ctx.options.sale_comp_limit, subject.square_feet)
        return ctx.collect(result)


def build_property_panel(
    query: AddressQuery,
    options: Optional[PanelOptions] = None,
    settings: Optional[Settings] = None,
) -> PropertyPanel:
    """Module-level helper used by the FastAPI layer; builds fresh adapters per call."""

    return PanelService(settings=settings).build(query, options)


__all__ = ["PanelService", "PanelValidationError", "build_property_panel"]
