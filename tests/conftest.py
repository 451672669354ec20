from typing import Any, Dict, List, Optional

import pytest
import requests

from property_panel.config import Settings


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Routes GETs to canned responses by URL substring, first match wins."""

    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "headers": dict(headers or {}), "timeout": timeout})
        for fragment, outcome in self.routes.items():
            if fragment in url:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected request to {url}")

    def calls_to(self, fragment: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if fragment in call["url"]]


def make_settings(primary_key: Optional[str] = "primary-key", county_key: Optional[str] = "county-key") -> Settings:
    return Settings(
        primary_api_key=primary_key,
        primary_base_url="https://primary.test/v1",
        county_api_key=county_key,
        county_base_url="https://county.test/api",
        geocoder_url="https://geocoder.test/search",
        geocoder_user_agent="property-panel-tests",
        census_api_key=None,
        census_year="2022",
        timeout=20.0,
        cors_origins="*",
    )


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clear_provider_env(monkeypatch):
    for name in ("PRIMARY_PROVIDER_API_KEY", "RENTCAST_API_KEY", "COUNTY_PROVIDER_API_KEY", "REALIE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
