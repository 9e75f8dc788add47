"""DNS provider interface and provider selection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from wayfinder.errors import ConfigError
from wayfinder.records import CurrentRecord, DesiredRecord

if TYPE_CHECKING:
    from wayfinder.config import AppConfig


class DNSProvider(ABC):
    """Common shape over the supported DNS backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name for logging."""

    @abstractmethod
    def list_records(self, zone_id: str) -> dict[str, CurrentRecord]:
        """Return every A record in the zone keyed by name without a trailing dot."""

    @abstractmethod
    def create_record(self, zone_id: str, desired: DesiredRecord) -> str:
        """Create a record and return the provider-assigned identifier."""

    @abstractmethod
    def upsert_or_replace(self, zone_id: str, current: CurrentRecord | None, desired: DesiredRecord) -> str:
        """Make the zone hold ``desired``, replacing ``current`` if given.

        Returns the identifier of the resulting record.
        """

    @abstractmethod
    def delete_record(self, zone_id: str, record_id: str) -> None:
        """Delete a record by its provider identifier."""


def build_provider(config: AppConfig, logger: logging.Logger | None = None) -> DNSProvider:
    if config.provider == "cloudflare":
        from wayfinder.cloudflare_client import CloudflareProvider

        return CloudflareProvider(
            api_token=config.cloudflare_api_token,
            timeout_seconds=config.request_timeout_seconds,
            logger=logger,
        )

    if config.provider == "route53":
        import boto3

        session = boto3.session.Session(region_name=config.region)
        if session.get_credentials() is None:
            raise ConfigError("No Cloudflare token and no AWS credentials found. Set CLOUDFLARE_API_TOKEN or AWS credentials.")

        from wayfinder.route53_client import Route53Provider

        return Route53Provider(
            client=session.client("route53"),
            wait_for_changes=config.wait_for_changes,
            logger=logger,
        )

    raise ConfigError(f"Unknown DNS provider: {config.provider}")
