from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from wayfinder.errors import ProviderError
from wayfinder.providers import DNSProvider
from wayfinder.records import RECORD_TYPE, CurrentRecord, DesiredRecord

CHANGE_COMMENT = "Wayfinder Managed Domain"
VALUE_SEPARATOR = ", "


class Route53Error(ProviderError):
    pass


def _fqdn(name: str) -> str:
    return name if name.endswith(".") else f"{name}."


class Route53Provider(DNSProvider):
    """Hosted-zone backend. Route53 has no record ids, so a record's id is its FQDN."""

    def __init__(
        self,
        client: Any,
        wait_for_changes: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._wait_for_changes = wait_for_changes
        self._logger = logger or logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return "Route53"

    def list_records(self, zone_id: str) -> dict[str, CurrentRecord]:
        records: dict[str, CurrentRecord] = {}
        try:
            paginator = self._client.get_paginator("list_resource_record_sets")
            for page in paginator.paginate(HostedZoneId=zone_id):
                for record_set in page.get("ResourceRecordSets", []):
                    if record_set.get("Type") != RECORD_TYPE:
                        continue
                    if "AliasTarget" in record_set:
                        self._logger.debug("Skipping alias record %s", record_set.get("Name"))
                        continue
                    fqdn = str(record_set["Name"])
                    name = fqdn.rstrip(".")
                    values = [str(entry["Value"]) for entry in record_set.get("ResourceRecords", [])]
                    records[name] = CurrentRecord(
                        id=fqdn,
                        name=name,
                        type=RECORD_TYPE,
                        ttl=int(record_set.get("TTL", 0)),
                        content=VALUE_SEPARATOR.join(values),
                    )
        except (BotoCoreError, ClientError) as exc:
            raise Route53Error(f"Failed listing record sets for hosted zone {zone_id}: {exc}") from exc
        return records

    def create_record(self, zone_id: str, desired: DesiredRecord) -> str:
        self._change(zone_id, "CREATE", self._record_set(desired))
        return _fqdn(desired.name)

    def upsert_or_replace(self, zone_id: str, current: CurrentRecord | None, desired: DesiredRecord) -> str:
        self._logger.info("Upsert Route53 record %s -> %s", desired.name, desired.content)
        self._change(zone_id, "UPSERT", self._record_set(desired))
        return _fqdn(desired.name)

    def delete_record(self, zone_id: str, record_id: str) -> None:
        fqdn = _fqdn(record_id)
        try:
            response = self._client.list_resource_record_sets(
                HostedZoneId=zone_id,
                StartRecordName=fqdn,
                StartRecordType=RECORD_TYPE,
                MaxItems="1",
            )
        except (BotoCoreError, ClientError) as exc:
            raise Route53Error(f"Failed looking up {fqdn} in hosted zone {zone_id}: {exc}") from exc

        matches = [
            record_set
            for record_set in response.get("ResourceRecordSets", [])
            if record_set.get("Name") == fqdn and record_set.get("Type") == RECORD_TYPE
        ]
        if not matches:
            raise Route53Error(f"No A record set named {fqdn} in hosted zone {zone_id}")
        self._change(zone_id, "DELETE", matches[0])

    @staticmethod
    def _record_set(desired: DesiredRecord) -> dict[str, Any]:
        return {
            "Name": desired.name,
            "Type": desired.type,
            "TTL": desired.ttl,
            "ResourceRecords": [{"Value": value} for value in desired.content.split(VALUE_SEPARATOR)],
        }

    def _change(self, zone_id: str, action: str, record_set: dict[str, Any]) -> None:
        try:
            response = self._client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch={
                    "Comment": CHANGE_COMMENT,
                    "Changes": [{"Action": action, "ResourceRecordSet": record_set}],
                },
            )
            change_id = response["ChangeInfo"]["Id"]
            self._logger.info("Route53 %s %s submitted as %s", action, record_set["Name"], change_id)
            if self._wait_for_changes:
                self._client.get_waiter("resource_record_sets_changed").wait(Id=change_id)
                self._logger.info("Route53 change %s is INSYNC", change_id)
        except (BotoCoreError, ClientError) as exc:
            raise Route53Error(f"Route53 {action} of {record_set['Name']} failed: {exc}") from exc
