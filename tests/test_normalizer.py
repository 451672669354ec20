from property_panel.services.normalizer import normalize_comparable, normalize_comparables, subject_field


def test_rental_comp_from_top_level_fields():
    comp = normalize_comparable(
        {
            "formattedAddress": "10 Elm St, Austin, TX 78701",
            "price": "$2,100",
            "squareFootage": 1050,
            "bedrooms": 2,
            "bathrooms": "1.5",
            "distance": 0.42,
            "correlation": 0.97,
            "propertyType": "Condo",
            "lastSeenDate": "2024-05-01",
        },
        kind="rent",
        source="primary",
    )
    assert comp.address == "10 Elm St, Austin, TX 78701"
    assert comp.price == 2100
    assert comp.square_feet == 1050
    assert comp.price_per_square_foot == 2.0
    assert comp.bathrooms == 1.5
    assert comp.similarity_score == 0.97
    assert comp.property_type == "Condo"
    assert comp.last_seen_or_sold_date == "2024-05-01"
    assert comp.source == "primary"


def test_rent_priority_prefers_listed_rent_over_price():
    comp = normalize_comparable({"price": 2500, "listedRent": 2300})
    assert comp.price == 2300


def test_rental_comp_from_nested_objects():
    comp = normalize_comparable(
        {
            "property": {"address": "22 Oak Ave", "beds": 3},
            "pricing": {"monthlyRent": "1,800"},
            "features": {"livingArea": "1,200 sqft", "propertyType": "Single Family"},
        }
    )
    assert comp.address == "22 Oak Ave"
    assert comp.price == 1800
    assert comp.square_feet == 1200
    assert comp.bedrooms == 3
    assert comp.property_type == "Single Family"


def test_sale_comp_uses_sale_price_fields():
    comp = normalize_comparable(
        {"addressFull": "5 Pine Rd", "transferPrice": 250000, "buildingArea": 1250, "transferDate": "2023-11-02"},
        kind="sale",
    )
    assert comp.price == 250000
    assert comp.price_per_square_foot == 200.0
    assert comp.last_seen_or_sold_date == "2023-11-02"
    assert comp.is_priced()


def test_missing_fields_become_none_and_empty_address():
    comp = normalize_comparable({"squareFootage": "unknown"})
    assert comp.address == ""
    assert comp.price is None
    assert comp.square_feet is None
    assert comp.price_per_square_foot is None
    assert not comp.is_priced()


def test_normalize_comparables_ignores_non_lists():
    assert normalize_comparables(None) == []
    assert len(normalize_comparables([{}, "junk"])) == 2


def test_subject_field_requires_positive_values():
    assert subject_field("primary", "square_feet", {"squareFootage": 1400}) == 1400
    assert subject_field("primary", "square_feet", {"squareFootage": 0}) is None
    assert subject_field("county", "purchase_price", {"modelValue": "$410,000"}) == 410000
    assert subject_field("county", "rent_estimate", None) is None
