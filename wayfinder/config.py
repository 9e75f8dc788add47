from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from wayfinder.errors import ConfigError
from wayfinder.ip_resolver import DEFAULT_IP_SOURCES

DEFAULT_CONSUL_URL = "http://consul.service.consul:8500"
DEFAULT_REGION = "us-west-2"


def _parse_bool(value: str | bool | None, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise ConfigError(f"Invalid boolean value: {value}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def select_provider(cloudflare_api_token: str) -> str:
    """Cloudflare when a token is configured, Route53 otherwise."""
    return "cloudflare" if cloudflare_api_token else "route53"


@dataclass(frozen=True)
class AppConfig:
    zone_id: str
    provider: str
    cloudflare_api_token: str
    region: str
    consul_url: str
    consul_token: str
    dry_run: bool
    skip_unresolved_public: bool
    wait_for_changes: bool
    interval_seconds: int
    ip_sources: list[str]
    log_level: str
    request_timeout_seconds: int


def load_config(argv: list[str] | None = None) -> AppConfig:
    parser = argparse.ArgumentParser(
        prog="wayfinder",
        description="Publish Consul services as DNS A records in Cloudflare or Route53.",
    )
    parser.add_argument("--zone-id", help="Cloudflare zone id or Route53 hosted zone id (env CLOUDFLARE_ZONE_ID or ZONE_ID).")
    parser.add_argument("--cloudflare-api-key", help="Cloudflare API token (env CLOUDFLARE_API_TOKEN). Route53 is used when unset.")
    parser.add_argument("--region", help=f"AWS region for Route53 (env AWS_REGION, default {DEFAULT_REGION}).")
    parser.add_argument("--consul-url", help=f"Consul HTTP address (env CONSUL_URL, default {DEFAULT_CONSUL_URL}).")
    parser.add_argument("--consul-token", help="Consul ACL token (env CONSUL_HTTP_TOKEN).")
    parser.add_argument("--dry-run", action="store_true", help="Report decisions without mutating DNS.")
    parser.add_argument(
        "--skip-unresolved-public",
        action="store_true",
        help="Skip public services when the public IP cannot be resolved instead of using the catalog address.",
    )
    parser.add_argument(
        "--wait-for-changes",
        action="store_true",
        help="Wait for each Route53 change to reach INSYNC.",
    )
    parser.add_argument("--interval", type=int, help="Repeat every N seconds (default: run once).")

    args = parser.parse_args(argv)

    zone_id = args.zone_id or os.getenv("CLOUDFLARE_ZONE_ID") or os.getenv("ZONE_ID") or ""
    if not zone_id:
        raise ConfigError("Missing zone id. Set --zone-id, CLOUDFLARE_ZONE_ID or ZONE_ID.")

    token = args.cloudflare_api_key or os.getenv("CLOUDFLARE_API_TOKEN", "")

    interval = args.interval if args.interval is not None else _parse_int(
        "SYNC_INTERVAL_SECONDS", os.getenv("SYNC_INTERVAL_SECONDS", "0")
    )
    if interval < 0:
        raise ConfigError(f"SYNC_INTERVAL_SECONDS/--interval must be >= 0, got {interval}")

    timeout = _parse_int("REQUEST_TIMEOUT_SECONDS", os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))
    if timeout <= 0:
        raise ConfigError(f"REQUEST_TIMEOUT_SECONDS must be > 0, got {timeout}")

    ip_sources_raw = os.getenv("IP_SOURCES", "")
    if ip_sources_raw.strip():
        ip_sources = [entry.strip() for entry in ip_sources_raw.split(",") if entry.strip()]
    else:
        ip_sources = DEFAULT_IP_SOURCES.copy()

    return AppConfig(
        zone_id=zone_id,
        provider=select_provider(token),
        cloudflare_api_token=token,
        region=args.region or os.getenv("AWS_REGION") or DEFAULT_REGION,
        consul_url=args.consul_url or os.getenv("CONSUL_URL") or DEFAULT_CONSUL_URL,
        consul_token=args.consul_token or os.getenv("CONSUL_HTTP_TOKEN", ""),
        dry_run=args.dry_run or _parse_bool(os.getenv("DRY_RUN"), default=False),
        skip_unresolved_public=args.skip_unresolved_public
        or _parse_bool(os.getenv("SKIP_UNRESOLVED_PUBLIC"), default=False),
        wait_for_changes=args.wait_for_changes or _parse_bool(os.getenv("ROUTE53_WAIT_FOR_CHANGES"), default=False),
        interval_seconds=interval,
        ip_sources=ip_sources,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        request_timeout_seconds=timeout,
    )
