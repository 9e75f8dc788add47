from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from wayfinder.differ import NoChange, ReconciliationDecision, decide
from wayfinder.errors import BaselineFetchError, DiscoveryError, MutationError, ProviderError
from wayfinder.providers import DNSProvider
from wayfinder.records import CurrentRecord, DesiredRecord, synthesize, uses_public_ip
from wayfinder.tag_parser import collect_directives, parse_tags

SKIPPED = "skipped"
MATCHED = "matched"
PLANNED = "planned"
APPLIED = "applied"
FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    service: str
    status: str
    record: DesiredRecord | None = None
    decision: ReconciliationDecision | None = None
    detail: str = ""


@dataclass(frozen=True)
class ReconcileSummary:
    outcomes: tuple[Outcome, ...] = ()
    cancelled: bool = False

    def _count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def skipped(self) -> int:
        return self._count(SKIPPED)

    @property
    def matched(self) -> int:
        return self._count(MATCHED)

    @property
    def planned(self) -> int:
        return self._count(PLANNED)

    @property
    def applied(self) -> int:
        return self._count(APPLIED)

    @property
    def failed(self) -> int:
        return self._count(FAILED)

    @property
    def failures(self) -> list[Outcome]:
        return [outcome for outcome in self.outcomes if outcome.status == FAILED]


def _reconcile_service(
    service: str,
    tags: Sequence[str],
    snapshot: Mapping[str, CurrentRecord],
    zone_id: str,
    public_ip: str,
    preview_only: bool,
    resolve_fallback: Callable[[str], str],
    provider: DNSProvider,
    skip_unresolved_public: bool,
    logger: logging.Logger,
) -> Outcome:
    service_tags = parse_tags(tags, logger=logger)
    if not service_tags:
        return Outcome(service=service, status=SKIPPED, detail="no wayfinder tags")

    directives = collect_directives(service_tags)
    if not directives.domain:
        logger.info("Skipping %s: no wayfinder.domain tag", service)
        return Outcome(service=service, status=SKIPPED, detail="no domain")

    if skip_unresolved_public and not public_ip and uses_public_ip(service_tags):
        logger.warning("Skipping %s: public record requested but public IP is unknown", service)
        return Outcome(service=service, status=SKIPPED, detail="public IP unresolved")

    try:
        desired = synthesize(service_tags, lambda: resolve_fallback(service), public_ip)
    except DiscoveryError as exc:
        logger.error("Cannot resolve catalog address for %s: %s", service, exc)
        return Outcome(service=service, status=FAILED, detail=str(exc))

    current = snapshot.get(desired.name)
    decision = decide(current, desired)

    if isinstance(decision, NoChange):
        logger.info("Record matches, no update needed: %s (%s -> %s)", service, desired.name, desired.content)
        return Outcome(service=service, status=MATCHED, record=desired, decision=decision)

    logger.info(
        "Records don't match for %s: %s %s -> %s (current=%s)",
        service,
        decision.action,
        desired.name,
        desired.content,
        current,
    )
    if preview_only:
        logger.info("Dry run: not applying %s for %s", decision.action, desired.name)
        return Outcome(service=service, status=PLANNED, record=desired, decision=decision)

    try:
        record_id = provider.upsert_or_replace(zone_id, current, desired)
    except ProviderError as exc:
        error = MutationError(f"{provider.name} {decision.action} of {desired.name} failed: {exc}")
        logger.error("%s", error)
        return Outcome(service=service, status=FAILED, record=desired, decision=decision, detail=str(error))

    return Outcome(service=service, status=APPLIED, record=desired, decision=decision, detail=record_id)


def reconcile(
    services: Mapping[str, Sequence[str]],
    zone_id: str,
    public_ip: str,
    preview_only: bool,
    resolve_fallback: Callable[[str], str],
    provider: DNSProvider,
    skip_unresolved_public: bool = False,
    cancelled: Callable[[], bool] | None = None,
    logger: logging.Logger | None = None,
) -> ReconcileSummary:
    """Bring the zone in line with the tagged catalog services in a single pass.

    The current records are fetched once up front; if that fails nothing is
    mutated. Each service is then handled in turn and a failure for one
    service is recorded without stopping the others.
    """
    logger = logger or logging.getLogger(__name__)
    try:
        snapshot = provider.list_records(zone_id)
    except ProviderError as exc:
        raise BaselineFetchError(f"Failed to retrieve {provider.name} records for zone {zone_id}: {exc}") from exc
    logger.info("Fetched %d existing A records from %s", len(snapshot), provider.name)

    outcomes: list[Outcome] = []
    for service, tags in services.items():
        if cancelled is not None and cancelled():
            logger.warning("Reconciliation cancelled before %s", service)
            return ReconcileSummary(outcomes=tuple(outcomes), cancelled=True)
        outcomes.append(
            _reconcile_service(
                service=service,
                tags=tags,
                snapshot=snapshot,
                zone_id=zone_id,
                public_ip=public_ip,
                preview_only=preview_only,
                resolve_fallback=resolve_fallback,
                provider=provider,
                skip_unresolved_public=skip_unresolved_public,
                logger=logger,
            )
        )
    return ReconcileSummary(outcomes=tuple(outcomes))
