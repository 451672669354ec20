import requests

from conftest import FakeResponse, FakeSession
from property_panel.services.geocoding import (
    GeocodingService,
    city_from_components,
    county_from_components,
    state_from_components,
)

HIT = {
    "lat": "30.2672",
    "lon": "-97.7431",
    "address": {
        "house_number": "123",
        "road": "Main Street",
        "city": "Austin",
        "county": "Travis County",
        "state": "Texas",
        "ISO3166-2-lvl4": "US-TX",
        "postcode": "78701",
    },
}


def test_geocode_extracts_zip_and_coordinates(settings):
    session = FakeSession({"geocoder.test": FakeResponse(200, [HIT])})
    result = GeocodingService(settings, session=session).geocode("123 Main St, Austin, TX")
    assert result.available
    assert result.value.zip == "78701"
    assert result.value.latitude == 30.2672
    assert result.value.longitude == -97.7431
    assert result.value.raw_components["county"] == "Travis County"
    params = session.calls[0]["params"]
    assert params["limit"] == 1
    assert params["addressdetails"] == 1


def test_geocode_empty_result_is_not_fatal(settings):
    session = FakeSession({"geocoder.test": FakeResponse(200, [])})
    result = GeocodingService(settings, session=session).geocode("nowhere")
    assert result.value is None
    assert "no match" in result.warning


def test_geocode_network_failure_is_not_fatal(settings):
    session = FakeSession({"geocoder.test": requests.ConnectionError("refused")})
    result = GeocodingService(settings, session=session).geocode("123 Main St")
    assert result.value is None
    assert result.warning.startswith("Geocoding failed")


def test_component_derivations():
    components = HIT["address"]
    assert city_from_components(components) == "Austin"
    assert county_from_components(components) == "Travis"
    assert state_from_components(components) == "TX"
    assert state_from_components({"state": "New York"}) == "NY"
    assert city_from_components({"town": "Marfa"}) == "Marfa"
    assert county_from_components({}) is None
