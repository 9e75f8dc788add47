from __future__ import annotations

import logging
from typing import Any

import requests

from wayfinder.errors import DiscoveryError


class ConsulCatalog:
    """Read-only view of the Consul service catalog over its HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: int,
        token: str = "",
        logger: logging.Logger | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger(__name__)
        self._session = session or requests.Session()
        self._headers = {"X-Consul-Token": token} if token else {}

    def _get(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(url, headers=self._headers, timeout=self._timeout_seconds)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DiscoveryError(f"Consul request to {url} failed: {exc}") from exc

    def list_services(self) -> dict[str, list[str]]:
        data = self._get("/v1/catalog/services")
        if not isinstance(data, dict):
            raise DiscoveryError(f"Unexpected Consul services payload: {data!r}")
        services: dict[str, list[str]] = {}
        for name, tags in data.items():
            services[str(name)] = [str(tag) for tag in tags or []]
        self._logger.debug("Consul reported %d services", len(services))
        return services

    def first_instance_address(self, service: str) -> str:
        data = self._get(f"/v1/catalog/service/{service}")
        if not isinstance(data, list) or not data:
            raise DiscoveryError(f"Consul has no registered instances for service {service}")
        first = data[0]
        if not isinstance(first, dict):
            raise DiscoveryError(f"Unexpected Consul instance payload for {service}: {first!r}")
        address = str(first.get("Address") or "")
        if not address:
            raise DiscoveryError(f"Consul instance of {service} has no address")
        return address
