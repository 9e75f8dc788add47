from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from wayfinder.records import CurrentRecord, DesiredRecord


@dataclass(frozen=True)
class NoChange:
    current: CurrentRecord

    @property
    def action(self) -> str:
        return "none"


@dataclass(frozen=True)
class Create:
    desired: DesiredRecord

    @property
    def action(self) -> str:
        return "create"


@dataclass(frozen=True)
class Replace:
    current: CurrentRecord
    desired: DesiredRecord

    @property
    def action(self) -> str:
        return "replace"


ReconciliationDecision = Union[NoChange, Create, Replace]


def decide(current: CurrentRecord | None, desired: DesiredRecord) -> ReconciliationDecision:
    if current is None or not current.name:
        return Create(desired=desired)
    if current.content == desired.content and current.ttl == desired.ttl and current.type == desired.type:
        return NoChange(current=current)
    return Replace(current=current, desired=desired)
