from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Union

from wayfinder.tag_parser import ADDRESS_KEY, DOMAIN_KEY, PUBLIC_KEY, ServiceTag

RECORD_TYPE = "A"
# Cloudflare treats ttl=1 as "automatic".
AUTO_TTL = 1

FallbackAddress = Union[str, Callable[[], str]]


@dataclass(frozen=True)
class DesiredRecord:
    name: str
    content: str
    type: str = RECORD_TYPE
    ttl: int = AUTO_TTL
    proxied: bool = False


@dataclass(frozen=True)
class CurrentRecord:
    name: str
    content: str
    type: str = RECORD_TYPE
    ttl: int = AUTO_TTL
    id: str = ""


def synthesize(tags: Iterable[ServiceTag], fallback_address: FallbackAddress, public_ip: str) -> DesiredRecord:
    """Build the desired A record for one service from its tags.

    Tags are applied in catalog order, so a later ``public``/``address`` tag
    overrides an earlier one. When neither supplies content the catalog
    address is used and the record is never proxied. ``fallback_address`` may
    be a callable so the catalog is only queried when it is needed.
    """
    name = ""
    content = ""
    proxied = False
    for tag in tags:
        if tag.key == DOMAIN_KEY:
            name = tag.value
        elif tag.key == PUBLIC_KEY and tag.is_true:
            content = public_ip
            proxied = True
        elif tag.key == ADDRESS_KEY:
            content = tag.value

    if not content:
        content = fallback_address() if callable(fallback_address) else fallback_address
        proxied = False

    return DesiredRecord(name=name, content=content, proxied=proxied)


def uses_public_ip(tags: Iterable[ServiceTag]) -> bool:
    """True when the last content-setting tag is ``public=true``."""
    uses_public = False
    for tag in tags:
        if tag.key == PUBLIC_KEY and tag.is_true:
            uses_public = True
        elif tag.key == ADDRESS_KEY:
            uses_public = False
    return uses_public
