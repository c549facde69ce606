from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from speeddns.domain.models import RunConfiguration
from speeddns.infrastructure.cloudflare import RECORD_TTL, CloudflareDNSClient, DNSAPIError

BASE = "https://api.example.test/client/v4"


class _FakeResponse:
    def __init__(self, status_code: int, body: Any = None, raw: Optional[str] = None) -> None:
        self.status_code = status_code
        self._body = body
        self._raw = raw

    def json(self) -> Any:
        if self._raw is not None:
            return json.loads(self._raw)
        return self._body


class _FakeSession:
    def __init__(self, responses: List[Any]) -> None:
        self.headers: Dict[str, str] = {}
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


def _client(*responses: Any) -> tuple[CloudflareDNSClient, _FakeSession]:
    session = _FakeSession(list(responses))
    client = CloudflareDNSClient(
        zone_id="zone-1",
        api_key="secret",
        email="ops@example.com",
        base_url=BASE + "/",
        session=session,  # type: ignore[arg-type]
    )
    return client, session


def test_sets_auth_headers() -> None:
    _, session = _client()

    assert session.headers["X-Auth-Email"] == "ops@example.com"
    assert session.headers["X-Auth-Key"] == "secret"
    assert session.headers["Content-Type"] == "application/json"


def test_fetch_zone_name() -> None:
    client, session = _client(_FakeResponse(200, {"success": True, "result": {"name": "example.com"}}))

    assert client.fetch_zone_name() == "example.com"
    assert session.requests[0]["method"] == "GET"
    assert session.requests[0]["url"] == f"{BASE}/zones/zone-1"
    assert session.requests[0]["timeout"] is None


def test_list_records_filters_by_exact_name() -> None:
    body = {
        "success": True,
        "result": [
            {"id": "r1", "name": "cdn.example.com", "type": "A", "content": "192.0.2.1", "ttl": 60},
            {"id": "r2", "name": "cdn.example.com", "type": "AAAA", "content": "2001:db8::9"},
        ],
    }
    client, session = _client(_FakeResponse(200, body))

    records = client.list_records("cdn.example.com")

    assert [r.id for r in records] == ["r1", "r2"]
    assert session.requests[0]["url"] == f"{BASE}/zones/zone-1/dns_records"
    assert session.requests[0]["params"] == {"name": "cdn.example.com", "per_page": 100}


def test_create_record_payload() -> None:
    client, session = _client(
        _FakeResponse(200, {"success": True, "result": {"id": "new", "name": "cdn.example.com"}})
    )

    record = client.create_record("cdn", "2001:db8::1")

    assert record.id == "new"
    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["json"] == {
        "type": "AAAA",
        "name": "cdn",
        "content": "2001:db8::1",
        "ttl": RECORD_TTL,
        "proxied": False,
    }


def test_delete_record_url() -> None:
    client, session = _client(_FakeResponse(200, {"success": True, "result": {"id": "r1"}}))

    client.delete_record("r1")

    assert session.requests[0]["method"] == "DELETE"
    assert session.requests[0]["url"] == f"{BASE}/zones/zone-1/dns_records/r1"


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(403, {"success": False, "errors": [{"code": 9109, "message": "Invalid access token"}]}),
        _FakeResponse(200, {"success": False, "errors": [{"code": 1004}]}),
        _FakeResponse(502, raw="<html>bad gateway</html>"),
        _FakeResponse(200, raw="not json"),
        requests.ConnectionError("connection refused"),
    ],
)
def test_failures_raise_dns_api_error(response: Any) -> None:
    client, _ = _client(response)

    with pytest.raises(DNSAPIError):
        client.delete_record("r1")


def test_zone_without_name_is_an_error() -> None:
    client, _ = _client(_FakeResponse(200, {"success": True, "result": {}}))

    with pytest.raises(DNSAPIError):
        client.fetch_zone_name()


def test_from_config_uses_credentials() -> None:
    config = RunConfiguration(zone_id="z9", api_key="k9", email="me@example.com")

    client = CloudflareDNSClient.from_config(config, base_url=BASE, timeout=5.0)

    assert client.zone_id == "z9"
    assert client.timeout == 5.0
    assert client.session.headers["X-Auth-Key"] == "k9"
    client.close()
