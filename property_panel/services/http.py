"""Shared GET helper for the property record providers."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ..utils.logging import get_logger

LOGGER = get_logger("services.http")

# Providers answer these when they simply have nothing for the query.
NO_DATA_STATUSES = frozenset({400, 404, 422})


class ProviderError(Exception):
    """A provider call failed for a reason other than "no data"."""

    def __init__(self, provider: str, status: Optional[int], details: Any) -> None:
        super().__init__(f"{provider} request failed (status={status})")
        self.provider = provider
        self.status = status
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "status": self.status, "details": self.details}


def _details(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def provider_get(
    session: requests.Session,
    provider: str,
    url: str,
    headers: Dict[str, str],
    params: Dict[str, Any],
    timeout: float,
) -> Any:
    """GET ``url`` and return the decoded JSON body.

    Raises ProviderError with the upstream status and body on any HTTP error
    status, and with ``status=None`` on transport failures and timeouts.
    """

    try:
        response = session.get(url, headers=headers, params=params, timeout=timeout)
    except requests.RequestException as exc:
        LOGGER.warning("provider_transport_error provider=%s url=%s error=%s", provider, url, exc)
        raise ProviderError(provider, None, {"message": str(exc)}) from exc
    if response.status_code >= 400:
        details = _details(response)
        LOGGER.warning("provider_http_error provider=%s url=%s status=%s", provider, url, response.status_code)
        raise ProviderError(provider, response.status_code, details)
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(provider, response.status_code, {"message": "invalid JSON body"}) from exc


def is_no_data(error: ProviderError) -> bool:
    return error.status in NO_DATA_STATUSES


class ProviderClient:
    """Base for API-key authenticated record providers."""

    name = "provider"

    def __init__(self, base_url: str, api_key: Optional[str], timeout: float, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def auth_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def get(self, path: str, params: Dict[str, Any]) -> Any:
        if not self.enabled:
            raise ProviderError(self.name, 401, {"message": f"{self.name} API key is not configured"})
        headers = {"Accept": "application/json"}
        headers.update(self.auth_headers())
        url = f"{self.base_url}/{path.lstrip('/')}"
        clean = {key: value for key, value in params.items() if value not in (None, "")}
        return provider_get(self.session, self.name, url, headers, clean, self.timeout)


def first_record(payload: Any, keys: tuple = ("results", "properties", "property", "data")) -> Optional[Dict[str, Any]]:
    """Pull the first record out of the list/envelope shapes providers return."""

    if isinstance(payload, list):
        return payload[0] if payload and isinstance(payload[0], dict) else None
    if isinstance(payload, dict):
        enveloped = False
        for key in keys:
            if key not in payload:
                continue
            enveloped = True
            value = payload[key]
            if isinstance(value, list) and value and isinstance(value[0], dict):
                return value[0]
            if isinstance(value, dict) and value:
                return value
        # An envelope with only null/empty record keys means "not found".
        if enveloped:
            return None
        return payload or None
    return None


def record_list(payload: Any, keys: tuple) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []

__all__ = ["ProviderError", "ProviderClient", "provider_get", "is_no_data", "first_record", "record_list", "NO_DATA_STATUSES"]
