from __future__ import annotations

import ipaddress
import logging
from typing import Iterable

import requests

DEFAULT_IP_SOURCES = [
    "https://icanhazip.com",
]


def resolve_public_ipv4(
    sources: Iterable[str],
    timeout_seconds: int,
    logger: logging.Logger | None = None,
    session: requests.Session | None = None,
) -> str:
    """Return this host's public IPv4 address, or "" when no source answers.

    An empty result is not fatal: services that rely on it fall back to their
    catalog address.
    """
    logger = logger or logging.getLogger(__name__)
    session = session or requests.Session()
    errors: list[str] = []

    for source in sources:
        try:
            response = session.get(source, timeout=timeout_seconds)
            response.raise_for_status()
            value = response.text.strip()
            ipaddress.IPv4Address(value)
            return value
        except (requests.RequestException, ValueError) as exc:
            errors.append(f"{source}: {exc}")
            logger.warning("Failed resolving IP from %s: %s", source, exc)
            continue

    logger.warning("Unable to resolve public IPv4 from configured sources: %s", "; ".join(errors))
    return ""
