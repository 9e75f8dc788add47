from __future__ import annotations

import logging
import time
from typing import Any

import requests

from wayfinder.errors import ProviderError
from wayfinder.providers import DNSProvider
from wayfinder.records import RECORD_TYPE, CurrentRecord, DesiredRecord


class CloudflareAPIError(ProviderError):
    pass


class CloudflareProvider(DNSProvider):
    def __init__(
        self,
        api_token: str,
        timeout_seconds: int,
        logger: logging.Logger | None = None,
        session: requests.Session | None = None,
        retries: int = 3,
    ) -> None:
        self._base_url = "https://api.cloudflare.com/client/v4"
        self._timeout_seconds = timeout_seconds
        self._retries = retries
        self._logger = logger or logging.getLogger(__name__)
        self._session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    @property
    def name(self) -> str:
        return "Cloudflare"

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        last_error: Exception | None = None
        for attempt in range(1, self._retries + 1):
            try:
                response = self._session.request(
                    method=method,
                    url=url,
                    params=params,
                    json=payload,
                    headers=self._headers,
                    timeout=self._timeout_seconds,
                )
                if response.status_code == 429 or 500 <= response.status_code < 600:
                    raise CloudflareAPIError(f"Retryable Cloudflare status {response.status_code}: {response.text}")
            except (requests.RequestException, CloudflareAPIError) as exc:
                last_error = exc
                if attempt >= self._retries:
                    break
                sleep_seconds = attempt
                self._logger.warning(
                    "Cloudflare request failed attempt %d/%d for %s %s: %s. Retrying in %ss.",
                    attempt,
                    self._retries,
                    method,
                    path,
                    exc,
                    sleep_seconds,
                )
                time.sleep(sleep_seconds)
                continue
            return self._parse_response(method, path, response)
        raise CloudflareAPIError(f"Cloudflare request failed for {method} {path}: {last_error}")

    @staticmethod
    def _parse_response(method: str, path: str, response: requests.Response) -> dict[str, Any]:
        # Other 4xx (auth, validation) go straight to the caller.
        if response.status_code >= 400:
            raise CloudflareAPIError(f"Cloudflare status {response.status_code} for {method} {path}: {response.text}")
        try:
            data = response.json()
        except ValueError as exc:
            raise CloudflareAPIError(f"Invalid Cloudflare response for {method} {path}: {exc}") from exc
        if not data.get("success", False):
            errors = data.get("errors", [])
            raise CloudflareAPIError(f"Cloudflare API error for {method} {path}: {errors}")
        return data

    def list_records(self, zone_id: str) -> dict[str, CurrentRecord]:
        page = 1
        records: dict[str, CurrentRecord] = {}
        while True:
            params: dict[str, Any] = {"type": RECORD_TYPE, "page": page, "per_page": 100}
            data = self._request("GET", f"/zones/{zone_id}/dns_records", params=params)
            for record in data.get("result", []):
                name = str(record.get("name", "")).rstrip(".")
                records[name] = CurrentRecord(
                    id=str(record.get("id", "")),
                    name=name,
                    type=str(record.get("type", "")),
                    ttl=int(record.get("ttl", 0)),
                    content=str(record.get("content", "")),
                )
            info = data.get("result_info", {})
            total_pages = info.get("total_pages", 1)
            if page >= total_pages:
                break
            page += 1
        return records

    def create_record(self, zone_id: str, desired: DesiredRecord) -> str:
        payload = {
            "type": desired.type,
            "name": desired.name,
            "content": desired.content,
            "ttl": desired.ttl,
            "proxied": desired.proxied,
        }
        data = self._request("POST", f"/zones/{zone_id}/dns_records", payload=payload)
        return str(data["result"]["id"])

    def upsert_or_replace(self, zone_id: str, current: CurrentRecord | None, desired: DesiredRecord) -> str:
        # No native upsert for a changed record: delete the old one first.
        if current is not None and current.id:
            self._logger.info("Delete Cloudflare record %s (%s)", current.name, current.id)
            self.delete_record(zone_id, current.id)
        self._logger.info("Create Cloudflare record %s -> %s proxied=%s", desired.name, desired.content, desired.proxied)
        return self.create_record(zone_id, desired)

    def delete_record(self, zone_id: str, record_id: str) -> None:
        self._request("DELETE", f"/zones/{zone_id}/dns_records/{record_id}")
