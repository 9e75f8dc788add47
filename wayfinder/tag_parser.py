from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

TAG_NAMESPACE = "wayfinder"
DOMAIN_KEY = "domain"
PUBLIC_KEY = "public"
ADDRESS_KEY = "address"
KNOWN_KEYS = frozenset({DOMAIN_KEY, PUBLIC_KEY, ADDRESS_KEY})

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceTag:
    raw: str
    key: str
    value: str

    @classmethod
    def parse(cls, raw: str) -> ServiceTag | None:
        """Split a ``wayfinder.key=value`` tag on the first ``=``.

        Returns None for tags outside the namespace and for tags without a value.
        """
        if not raw.startswith(f"{TAG_NAMESPACE}."):
            return None
        name, sep, value = raw.partition("=")
        if not sep:
            return None
        key = name[len(TAG_NAMESPACE) + 1 :]
        return cls(raw=raw, key=key, value=value)

    @property
    def is_true(self) -> bool:
        return self.value.lower() == "true"


@dataclass(frozen=True)
class Directive:
    domain: str | None = None
    public: bool | None = None
    address: str | None = None


def parse_tags(tags: Iterable[str], logger: logging.Logger | None = None) -> list[ServiceTag]:
    logger = logger or _logger
    parsed: list[ServiceTag] = []
    for raw in tags:
        tag = ServiceTag.parse(raw)
        if tag is None:
            if raw.startswith(f"{TAG_NAMESPACE}."):
                logger.debug("Ignoring malformed tag %r", raw)
            continue
        if tag.key not in KNOWN_KEYS:
            logger.debug("Ignoring unknown tag %r", raw)
            continue
        parsed.append(tag)
    return parsed


def collect_directives(tags: Iterable[ServiceTag]) -> Directive:
    domain: str | None = None
    public: bool | None = None
    address: str | None = None
    for tag in tags:
        if tag.key == DOMAIN_KEY:
            domain = tag.value
        elif tag.key == PUBLIC_KEY:
            public = tag.is_true
        elif tag.key == ADDRESS_KEY:
            address = tag.value
    return Directive(domain=domain, public=public, address=address)
