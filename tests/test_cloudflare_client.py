from __future__ import annotations

from typing import Any

import pytest
import requests

from wayfinder.cloudflare_client import CloudflareAPIError, CloudflareProvider
from wayfinder.records import CurrentRecord, DesiredRecord


class _Response:
    def __init__(self, payload: dict[str, Any], status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status={self.status_code}")

    def json(self) -> dict[str, Any]:
        return self._payload


class _Session:
    def __init__(self, responses: list[_Response]) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> _Response:
        self.calls.append(kwargs)
        return self.responses.pop(0)


def _ok(result: Any, total_pages: int = 1) -> _Response:
    return _Response({"success": True, "result": result, "result_info": {"total_pages": total_pages}})


def _provider(session: _Session, retries: int = 3) -> CloudflareProvider:
    return CloudflareProvider(api_token="t0k", timeout_seconds=5, session=session, retries=retries)  # type: ignore[arg-type]


def test_list_records_paginates_and_normalizes_names() -> None:
    session = _Session(
        [
            _ok([{"id": "1", "name": "a.example.com", "type": "A", "ttl": 1, "content": "10.0.0.1"}], total_pages=2),
            _ok([{"id": "2", "name": "b.example.com.", "type": "A", "ttl": 300, "content": "10.0.0.2"}], total_pages=2),
        ]
    )
    records = _provider(session).list_records("zone1")
    assert records == {
        "a.example.com": CurrentRecord(id="1", name="a.example.com", type="A", ttl=1, content="10.0.0.1"),
        "b.example.com": CurrentRecord(id="2", name="b.example.com", type="A", ttl=300, content="10.0.0.2"),
    }
    assert session.calls[0]["params"] == {"type": "A", "page": 1, "per_page": 100}
    assert session.calls[1]["params"]["page"] == 2
    assert session.calls[0]["headers"]["Authorization"] == "Bearer t0k"


def test_create_record_posts_desired_fields() -> None:
    session = _Session([_ok({"id": "new-id"})])
    record_id = _provider(session).create_record(
        "zone1", DesiredRecord(name="a.example.com", content="203.0.113.10", proxied=True)
    )
    assert record_id == "new-id"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/zones/zone1/dns_records")
    assert call["json"] == {"type": "A", "name": "a.example.com", "content": "203.0.113.10", "ttl": 1, "proxied": True}


def test_upsert_or_replace_deletes_existing_then_creates() -> None:
    session = _Session([_ok({"id": "42"}), _ok({"id": "43"})])
    record_id = _provider(session).upsert_or_replace(
        "zone1",
        CurrentRecord(id="42", name="b.example.com", content="10.0.0.9"),
        DesiredRecord(name="b.example.com", content="10.0.0.5"),
    )
    assert record_id == "43"
    assert [call["method"] for call in session.calls] == ["DELETE", "POST"]
    assert session.calls[0]["url"].endswith("/zones/zone1/dns_records/42")
    assert session.calls[1]["json"]["content"] == "10.0.0.5"


def test_upsert_or_replace_without_current_only_creates() -> None:
    session = _Session([_ok({"id": "43"})])
    _provider(session).upsert_or_replace("zone1", None, DesiredRecord(name="b.example.com", content="10.0.0.5"))
    assert [call["method"] for call in session.calls] == ["POST"]


def test_auth_failure_is_not_retried(monkeypatch) -> None:
    monkeypatch.setattr("wayfinder.cloudflare_client.time.sleep", lambda seconds: None)
    session = _Session([_Response({"success": False, "errors": [{"code": 10000}]}, status_code=403) for _ in range(3)])
    with pytest.raises(CloudflareAPIError, match="403"):
        _provider(session).list_records("zone1")
    assert len(session.calls) == 1


def test_unsuccessful_body_is_not_retried(monkeypatch) -> None:
    monkeypatch.setattr("wayfinder.cloudflare_client.time.sleep", lambda seconds: None)
    session = _Session([_Response({"success": False, "errors": [{"code": 9109}]}) for _ in range(3)])
    with pytest.raises(CloudflareAPIError):
        _provider(session).create_record("zone1", DesiredRecord(name="a.example.com", content="192.0.2.1"))
    assert len(session.calls) == 1


def test_server_errors_are_raised_after_retries(monkeypatch) -> None:
    monkeypatch.setattr("wayfinder.cloudflare_client.time.sleep", lambda seconds: None)
    session = _Session([_Response({}, status_code=502) for _ in range(3)])
    with pytest.raises(CloudflareAPIError):
        _provider(session).list_records("zone1")
    assert len(session.calls) == 3


def test_retryable_status_recovers(monkeypatch) -> None:
    monkeypatch.setattr("wayfinder.cloudflare_client.time.sleep", lambda seconds: None)
    session = _Session([_Response({}, status_code=429), _ok([])])
    assert _provider(session).list_records("zone1") == {}
    assert len(session.calls) == 2
