from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from wayfinder.records import CurrentRecord, DesiredRecord
from wayfinder.route53_client import CHANGE_COMMENT, Route53Error, Route53Provider


def _client(pages: list[dict] | None = None) -> MagicMock:
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = pages or []
    client.change_resource_record_sets.return_value = {"ChangeInfo": {"Id": "/change/C1", "Status": "PENDING"}}
    return client


def _denied(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


def test_list_records_keeps_a_records_and_strips_trailing_dot() -> None:
    client = _client(
        [
            {
                "ResourceRecordSets": [
                    {"Name": "example.com.", "Type": "NS", "TTL": 172800, "ResourceRecords": [{"Value": "ns-1."}]},
                    {
                        "Name": "b.example.com.",
                        "Type": "A",
                        "TTL": 1,
                        "ResourceRecords": [{"Value": "10.0.0.5"}, {"Value": "10.0.0.6"}],
                    },
                ]
            },
            {
                "ResourceRecordSets": [
                    {"Name": "alias.example.com.", "Type": "A", "AliasTarget": {"DNSName": "lb.aws."}},
                ]
            },
        ]
    )
    records = Route53Provider(client).list_records("Z123")
    assert records == {
        "b.example.com": CurrentRecord(
            id="b.example.com.", name="b.example.com", type="A", ttl=1, content="10.0.0.5, 10.0.0.6"
        )
    }
    client.get_paginator.assert_called_once_with("list_resource_record_sets")
    client.get_paginator.return_value.paginate.assert_called_once_with(HostedZoneId="Z123")


def test_list_records_wraps_client_errors() -> None:
    client = _client()
    client.get_paginator.return_value.paginate.side_effect = _denied("ListResourceRecordSets")
    with pytest.raises(Route53Error):
        Route53Provider(client).list_records("Z123")


def test_upsert_sends_single_change_batch() -> None:
    client = _client()
    provider = Route53Provider(client)
    record_id = provider.upsert_or_replace(
        "Z123",
        CurrentRecord(id="b.example.com.", name="b.example.com", content="10.0.0.9"),
        DesiredRecord(name="b.example.com", content="10.0.0.5"),
    )
    assert record_id == "b.example.com."
    client.change_resource_record_sets.assert_called_once_with(
        HostedZoneId="Z123",
        ChangeBatch={
            "Comment": CHANGE_COMMENT,
            "Changes": [
                {
                    "Action": "UPSERT",
                    "ResourceRecordSet": {
                        "Name": "b.example.com",
                        "Type": "A",
                        "TTL": 1,
                        "ResourceRecords": [{"Value": "10.0.0.5"}],
                    },
                }
            ],
        },
    )
    client.get_waiter.assert_not_called()


def test_create_record_uses_create_action_and_splits_values() -> None:
    client = _client()
    Route53Provider(client).create_record("Z123", DesiredRecord(name="a.example.com", content="192.0.2.1, 192.0.2.2"))
    change = client.change_resource_record_sets.call_args.kwargs["ChangeBatch"]["Changes"][0]
    assert change["Action"] == "CREATE"
    assert change["ResourceRecordSet"]["ResourceRecords"] == [{"Value": "192.0.2.1"}, {"Value": "192.0.2.2"}]


def test_wait_for_changes_uses_waiter() -> None:
    client = _client()
    Route53Provider(client, wait_for_changes=True).upsert_or_replace(
        "Z123", None, DesiredRecord(name="a.example.com", content="192.0.2.1")
    )
    client.get_waiter.assert_called_once_with("resource_record_sets_changed")
    client.get_waiter.return_value.wait.assert_called_once_with(Id="/change/C1")


def test_delete_record_looks_up_record_set() -> None:
    client = _client()
    record_set = {"Name": "b.example.com.", "Type": "A", "TTL": 1, "ResourceRecords": [{"Value": "10.0.0.9"}]}
    client.list_resource_record_sets.return_value = {"ResourceRecordSets": [record_set]}

    Route53Provider(client).delete_record("Z123", "b.example.com")

    client.list_resource_record_sets.assert_called_once_with(
        HostedZoneId="Z123", StartRecordName="b.example.com.", StartRecordType="A", MaxItems="1"
    )
    change = client.change_resource_record_sets.call_args.kwargs["ChangeBatch"]["Changes"][0]
    assert change == {"Action": "DELETE", "ResourceRecordSet": record_set}


def test_delete_record_missing_raises() -> None:
    client = _client()
    client.list_resource_record_sets.return_value = {
        "ResourceRecordSets": [{"Name": "c.example.com.", "Type": "A", "TTL": 1, "ResourceRecords": []}]
    }
    with pytest.raises(Route53Error):
        Route53Provider(client).delete_record("Z123", "b.example.com.")
    client.change_resource_record_sets.assert_not_called()


def test_change_failure_is_wrapped() -> None:
    client = _client()
    client.change_resource_record_sets.side_effect = _denied("ChangeResourceRecordSets")
    with pytest.raises(Route53Error, match="UPSERT"):
        Route53Provider(client).upsert_or_replace("Z123", None, DesiredRecord(name="a.example.com", content="1.2.3.4"))
