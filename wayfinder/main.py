from __future__ import annotations

import logging
import signal
import sys
import time

from wayfinder.catalog import ConsulCatalog
from wayfinder.config import AppConfig, load_config
from wayfinder.errors import ConfigError, DiscoveryError, ProviderError
from wayfinder.ip_resolver import resolve_public_ipv4
from wayfinder.logging_setup import setup_logging
from wayfinder.providers import DNSProvider, build_provider
from wayfinder.reconciler import ReconcileSummary, reconcile


class _StopFlag:
    def __init__(self) -> None:
        self.requested = False

    def __call__(self) -> bool:
        return self.requested

    def request(self, signum: int, _frame: object) -> None:
        self.requested = True


def run_once(
    config: AppConfig,
    logger: logging.Logger,
    provider: DNSProvider,
    catalog: ConsulCatalog,
    cancelled: _StopFlag | None = None,
) -> ReconcileSummary:
    public_ip = resolve_public_ipv4(
        sources=config.ip_sources,
        timeout_seconds=config.request_timeout_seconds,
        logger=logger,
    )
    logger.info("Resolved public IPv4: %s", public_ip or "(unavailable)")

    services = catalog.list_services()
    logger.info("Discovered %d services in Consul at %s", len(services), config.consul_url)

    summary = reconcile(
        services=services,
        zone_id=config.zone_id,
        public_ip=public_ip,
        preview_only=config.dry_run,
        resolve_fallback=catalog.first_instance_address,
        provider=provider,
        skip_unresolved_public=config.skip_unresolved_public,
        cancelled=cancelled,
        logger=logger,
    )
    logger.info(
        "Reconciliation completed. matched=%d planned=%d applied=%d failed=%d skipped=%d",
        summary.matched,
        summary.planned,
        summary.applied,
        summary.failed,
        summary.skipped,
    )
    for failure in summary.failures:
        logger.error("Failed %s: %s", failure.service, failure.detail)
    return summary


def main(argv: list[str] | None = None) -> int:
    try:
        config = load_config(argv=argv)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    logger = logging.getLogger("wayfinder")
    logger.info(
        "Starting wayfinder provider=%s zone=%s dry_run=%s consul=%s",
        config.provider,
        config.zone_id,
        config.dry_run,
        config.consul_url,
    )

    try:
        provider = build_provider(config, logger=logger)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    catalog = ConsulCatalog(
        base_url=config.consul_url,
        timeout_seconds=config.request_timeout_seconds,
        token=config.consul_token,
        logger=logger,
    )

    stop = _StopFlag()
    signal.signal(signal.SIGTERM, stop.request)

    exit_code = 0
    while not stop():
        try:
            summary = run_once(config=config, logger=logger, provider=provider, catalog=catalog, cancelled=stop)
            exit_code = 1 if summary.failed else 0
        except DiscoveryError as exc:
            logger.error("Service discovery failed: %s", exc)
            exit_code = 1
        except ProviderError as exc:
            logger.error("DNS provider error, nothing was changed: %s", exc)
            exit_code = 1

        if config.interval_seconds <= 0 or stop():
            break
        time.sleep(config.interval_seconds)

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
