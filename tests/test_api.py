import requests
from fastapi.testclient import TestClient

from conftest import FakeResponse
from property_panel import api
from property_panel.api import app

client = TestClient(app)


def test_ping_and_health():
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert client.get("/api/health").json() == {"status": "ok"}


def test_panel_rejects_query_without_address():
    resp = client.post("/api/property-panel", json={"state": "TX"})
    assert resp.status_code == 400
    resp = client.get("/api/property-panel")
    assert resp.status_code == 400


def test_panel_without_credentials_is_still_successful(clear_provider_env):
    resp = client.post(
        "/api/property-panel",
        json={"state": "TX", "address_line1": "1 Main St", "options": {"cap_rate_percent": 7}},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["inputs"]["options"]["cap_rate_percent"] == 7
    assert payload["avm"]["method"] == "insufficient"
    assert payload["arv"]["ok"] is False
    assert payload["investment"]["ok"] is False
    assert any("Primary provider skipped" in w for w in payload["warnings"])
    assert any("County provider skipped" in w for w in payload["warnings"])


def test_sale_comp_limit_is_clamped(clear_provider_env):
    params = {"state": "TX", "address_line1": "1 Main St", "sale_comp_limit": 50}
    resp = client.get("/api/property-panel", params=params)
    assert resp.status_code == 200
    assert resp.json()["inputs"]["options"]["sale_comp_limit"] == 20
    assert resp.json()["generated_at"].endswith("+00:00")

    resp = client.post("/api/property-panel", json={"state": "TX", "address_line1": "1 Main St", "options": {"sale_comp_limit": 0}})
    assert resp.status_code == 200
    assert resp.json()["inputs"]["options"]["sale_comp_limit"] == 1


def test_panel_internal_error_is_a_server_error(monkeypatch):
    def explode(query, options):
        raise RuntimeError("malformed provider payload")

    monkeypatch.setattr(api, "build_property_panel", explode)
    resp = client.post("/api/property-panel", json={"full_address": "1 Main St, Austin, TX"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to build property panel", "message": "malformed provider payload"}


def test_property_requires_address():
    assert client.get("/api/property").status_code == 400


def test_property_passthrough_reports_provider_failure(monkeypatch):
    monkeypatch.setenv("PRIMARY_PROVIDER_API_KEY", "test-key")
    monkeypatch.setattr(requests.Session, "get", lambda self, url, **kwargs: FakeResponse(503, {"message": "down"}))
    resp = client.get("/api/property", params={"address": "1 Main St"})
    assert resp.status_code == 503
    assert resp.json() == {"error": "Failed to fetch property data", "details": {"message": "down"}}


def test_rent_comps_not_found_is_empty_success(monkeypatch):
    monkeypatch.setenv("PRIMARY_PROVIDER_API_KEY", "test-key")
    monkeypatch.setattr(requests.Session, "get", lambda self, url, **kwargs: FakeResponse(404, {"message": "none"}))
    resp = client.get("/api/rent-comps", params={"address": "1 Main St"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["count"] == 0
    assert payload["comps"] == []
    assert "No rental comps found" in payload["warning"]


def test_rent_comps_without_key_reports_error(clear_provider_env):
    resp = client.get("/api/rent-comps", params={"address": "1 Main St"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Failed to fetch rental comps"
