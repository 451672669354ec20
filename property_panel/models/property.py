"""Pydantic models representing property domain objects."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AddressQuery(BaseModel):
    full_address: Optional[str] = None
    state: Optional[str] = None
    address_line1: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None

    def has_identity(self) -> bool:
        """True when the query names a property either way we can look it up."""

        if _present(self.full_address):
            return True
        return _present(self.state) and _present(self.address_line1)


class GeocodeResult(BaseModel):
    zip: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    raw_components: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class Demographics(BaseModel):
    zip: str
    population: Optional[float] = None
    median_household_income: Optional[float] = None
    median_gross_rent: Optional[float] = None
    median_home_value_proxy: Optional[float] = None
    total_housing_units: Optional[float] = None
    vacant_housing_units: Optional[float] = None
    vacancy_rate_percent: Optional[float] = None
    owner_occupied_units: Optional[float] = None
    renter_occupied_units: Optional[float] = None
    owner_occupied_share_percent: Optional[float] = None
    renter_occupied_share_percent: Optional[float] = None
    source: str = "US Census ACS 5-year"
    year: str


class Comparable(BaseModel):
    address: str = ""
    price: Optional[float] = None
    square_feet: Optional[float] = None
    price_per_square_foot: Optional[float] = None
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    distance: Optional[float] = None
    similarity_score: Optional[float] = None
    property_type: Optional[str] = None
    last_seen_or_sold_date: Optional[str] = None
    source: Optional[str] = None

    def is_priced(self) -> bool:
        return bool(self.price and self.price > 0 and self.square_feet and self.square_feet > 0)


class SubjectProperty(BaseModel):
    square_feet: Optional[float] = None
    rent_estimate_monthly: Optional[float] = None
    purchase_price: Optional[float] = None
    square_feet_source: Optional[str] = None
    rent_estimate_source: Optional[str] = None
    purchase_price_source: Optional[str] = None


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


__all__ = ["AddressQuery", "GeocodeResult", "Demographics", "Comparable", "SubjectProperty"]
