"""Map raw provider comparables and records onto stable internal shapes.

Every logical field is described by a ranked table of ``(path, keys)`` pairs.
The path selects a nested object (empty tuple for the top level) and the keys
are tried in order inside it. New provider quirks are handled by adding keys
or paths to these tables, not by adding branches to the code below.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from ..models.property import Comparable
from ..utils.coerce import pick_path, round2, to_number, to_str

FieldTable = Sequence[Tuple[Tuple[str, ...], Sequence[str]]]
CompKind = Literal["rent", "sale"]

_ADDRESS_KEYS = ["formattedAddress", "address", "fullAddress", "addressLine1", "streetAddress", "addressFull"]
_RENT_KEYS = [
    "listedRent",
    "rent",
    "price",
    "monthlyRent",
    "rentEstimate",
    "listPrice",
    "listingPrice",
    "listRent",
    "rentAmount",
]
_SALE_PRICE_KEYS = [
    "salePrice",
    "lastSalePrice",
    "soldPrice",
    "transferPrice",
    "closePrice",
    "price",
    "listPrice",
    "listingPrice",
]
_SQFT_KEYS = ["squareFootage", "squareFeet", "sqft", "livingArea", "buildingArea", "livingAreaSqft", "buildingSize"]
_BED_KEYS = ["bedrooms", "beds", "totalBedrooms", "bedroomCount"]
_BATH_KEYS = ["bathrooms", "baths", "totalBathrooms", "bathroomCount"]
_TYPE_KEYS = ["propertyType", "type", "useCode", "landUse"]

COMPARABLE_FIELDS: Dict[str, FieldTable] = {
    "address": [((), _ADDRESS_KEYS), (("property",), _ADDRESS_KEYS), (("listing",), _ADDRESS_KEYS)],
    "rent": [
        ((), _RENT_KEYS),
        (("pricing",), _RENT_KEYS),
        (("listing",), _RENT_KEYS),
        (("avm",), _RENT_KEYS),
    ],
    "sale_price": [
        ((), _SALE_PRICE_KEYS),
        (("property",), _SALE_PRICE_KEYS),
        (("pricing",), _SALE_PRICE_KEYS),
        (("listing",), _SALE_PRICE_KEYS),
        (("avm",), ["value", "price", "estimatedValue"]),
    ],
    "square_feet": [
        ((), _SQFT_KEYS),
        (("property",), _SQFT_KEYS),
        (("features",), _SQFT_KEYS),
        (("listing",), _SQFT_KEYS),
    ],
    "bedrooms": [((), _BED_KEYS), (("property",), _BED_KEYS), (("features",), _BED_KEYS)],
    "bathrooms": [((), _BATH_KEYS), (("property",), _BATH_KEYS), (("features",), _BATH_KEYS)],
    "distance": [((), ["distance", "distanceMiles", "distance_mi"]), (("property",), ["distance"])],
    "similarity": [((), ["correlation", "similarity", "similarityScore", "score"])],
    "property_type": [((), _TYPE_KEYS), (("property",), _TYPE_KEYS), (("features",), _TYPE_KEYS)],
    "rent_date": [
        ((), ["lastSeenDate", "listedDate", "removedDate", "lastSeen"]),
        (("listing",), ["lastSeenDate", "listedDate"]),
    ],
    "sale_date": [
        ((), ["lastSaleDate", "saleDate", "soldDate", "transferDate", "recordingDate"]),
        (("property",), ["lastSaleDate", "transferDate"]),
        (("listing",), ["soldDate", "closeDate"]),
    ],
}

# Subject property lookups, per provider record.
SUBJECT_FIELDS: Dict[str, Dict[str, FieldTable]] = {
    "primary": {
        "square_feet": [((), ["squareFootage", "sqft", "livingArea", "buildingArea"]), (("features",), _SQFT_KEYS)],
        "rent_estimate": [
            ((), ["rentEstimate", "rent", "monthlyRent", "rentZestimate"]),
            (("avm",), ["rent", "rentEstimate"]),
        ],
        "purchase_price": [
            ((), ["price", "listPrice", "lastSalePrice", "value", "estimatedValue"]),
            (("avm",), ["value", "price"]),
        ],
    },
    "county": {
        "square_feet": [((), ["buildingArea", "livingArea", "squareFootage", "sqft"]), (("features",), _SQFT_KEYS)],
        "rent_estimate": [((), ["rentEstimate", "modelRent", "monthlyRent", "rent"])],
        "purchase_price": [
            ((), ["modelValue", "totalMarketValue", "transferPrice", "lastSalePrice", "totalAssessedValue"]),
        ],
    },
}


def _number(record: Mapping[str, Any], table: FieldTable) -> Optional[float]:
    return to_number(pick_path(record, table))


def _text(record: Mapping[str, Any], table: FieldTable) -> Optional[str]:
    value = pick_path(record, table)
    if value is None:
        return None
    return to_str(value) or None


def price_per_square_foot(price: Optional[float], square_feet: Optional[float]) -> Optional[float]:
    if price and square_feet and price > 0 and square_feet > 0:
        return round2(price / square_feet)
    return None


def normalize_comparable(raw: Any, kind: CompKind = "rent", source: Optional[str] = None) -> Comparable:
    """Build a Comparable from one raw provider record.

    Missing fields become None and an unusable address becomes "";
    filtering is left to the caller.
    """

    record: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    price_table = COMPARABLE_FIELDS["rent" if kind == "rent" else "sale_price"]
    date_table = COMPARABLE_FIELDS["rent_date" if kind == "rent" else "sale_date"]

    price = _number(record, price_table)
    square_feet = _number(record, COMPARABLE_FIELDS["square_feet"])
    return Comparable(
        address=to_str(pick_path(record, COMPARABLE_FIELDS["address"])),
        price=price,
        square_feet=square_feet,
        price_per_square_foot=price_per_square_foot(price, square_feet),
        bedrooms=_number(record, COMPARABLE_FIELDS["bedrooms"]),
        bathrooms=_number(record, COMPARABLE_FIELDS["bathrooms"]),
        distance=_number(record, COMPARABLE_FIELDS["distance"]),
        similarity_score=_number(record, COMPARABLE_FIELDS["similarity"]),
        property_type=_text(record, COMPARABLE_FIELDS["property_type"]),
        last_seen_or_sold_date=_text(record, date_table),
        source=source,
    )


def normalize_comparables(raw_items: Any, kind: CompKind = "rent", source: Optional[str] = None) -> List[Comparable]:
    if not isinstance(raw_items, list):
        return []
    return [normalize_comparable(item, kind=kind, source=source) for item in raw_items]


def subject_field(provider: str, field: str, record: Optional[Mapping[str, Any]]) -> Optional[float]:
    """Resolve one numeric subject field from a provider record, positive values only."""

    if not record:
        return None
    value = _number(record, SUBJECT_FIELDS[provider][field])
    if value is None or value <= 0:
        return None
    return value


__all__ = [
    "COMPARABLE_FIELDS",
    "SUBJECT_FIELDS",
    "normalize_comparable",
    "normalize_comparables",
    "price_per_square_foot",
    "subject_field",
]
