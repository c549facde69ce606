"""
Client for the Cloudflare v4 zone API.

Only the four calls the reconciler needs are implemented: zone lookup, record
listing by exact name, record deletion and record creation. Every call is
authenticated with the account email / global key headers. A transport error,
an HTTP status >= 400, an undecodable body or a `success: false` envelope all
raise `DNSAPIError`; callers decide whether that is fatal.

Nothing here retries. A call blocks until the server answers unless a timeout
is configured via `DNS_API_TIMEOUT`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import requests

from speeddns.domain.models import DNSRecord, RunConfiguration
from speeddns.domain.records import record_type_for
from speeddns.utils.logging import get_logger

log = get_logger(__name__)

RECORD_TTL = 60
RECORDS_PER_PAGE = 100


class DNSAPIError(RuntimeError):
    """A DNS API call failed (transport, HTTP status, or API envelope)."""


@runtime_checkable
class DNSZoneClient(Protocol):
    """
    The zone operations the reconciler depends on.
    """

    def fetch_zone_name(self) -> str:
        """Return the canonical root domain of the configured zone."""
        ...

    def list_records(self, name: str) -> List[DNSRecord]:
        """Return every record whose name equals `name` exactly."""
        ...

    def delete_record(self, record_id: str) -> None:
        ...

    def create_record(self, name: str, content: str) -> DNSRecord:
        ...


class CloudflareDNSClient:
    """
    Synchronous Cloudflare zone client backed by a `requests.Session`.

    Parameters
    ----------
    zone_id : str
        Zone identifier all record calls are scoped to.
    api_key : str
        Global API key (`X-Auth-Key`).
    email : str
        Account email (`X-Auth-Email`).
    base_url : str
        API root, e.g. `https://api.cloudflare.com/client/v4`.
    timeout : float | None
        Per-request timeout in seconds; None waits indefinitely.
    """

    def __init__(
        self,
        zone_id: str,
        api_key: str,
        email: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.zone_id = zone_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "X-Auth-Email": email,
                "X-Auth-Key": api_key,
                "Content-Type": "application/json",
            }
        )

    @classmethod
    def from_config(
        cls,
        config: RunConfiguration,
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout: Optional[float] = None,
    ) -> "CloudflareDNSClient":
        return cls(
            zone_id=config.zone_id,
            api_key=config.api_key,
            email=config.email,
            base_url=base_url,
            timeout=timeout,
        )

    @property
    def _zone_url(self) -> str:
        return f"{self.base_url}/zones/{self.zone_id}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        log.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise DNSAPIError(f"{method} {url} failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            if resp.status_code >= 400:
                raise DNSAPIError(f"status code {resp.status_code}") from exc
            raise DNSAPIError(f"invalid JSON in response to {method} {url}") from exc

        if resp.status_code >= 400:
            raise DNSAPIError(f"status code {resp.status_code}: {_errors(body)}")
        if not isinstance(body, dict) or body.get("success") is False:
            raise DNSAPIError(f"api error: {_errors(body)}")
        return body

    def fetch_zone_name(self) -> str:
        body = self._request("GET", self._zone_url)
        name = (body.get("result") or {}).get("name")
        if not name:
            raise DNSAPIError("zone lookup returned no name")
        return str(name)

    def list_records(self, name: str) -> List[DNSRecord]:
        body = self._request(
            "GET",
            f"{self._zone_url}/dns_records",
            params={"name": name, "per_page": RECORDS_PER_PAGE},
        )
        return [DNSRecord.model_validate(item) for item in body.get("result") or []]

    def delete_record(self, record_id: str) -> None:
        self._request("DELETE", f"{self._zone_url}/dns_records/{record_id}")

    def create_record(self, name: str, content: str) -> DNSRecord:
        payload = {
            "type": record_type_for(content),
            "name": name,
            "content": content,
            "ttl": RECORD_TTL,
            "proxied": False,
        }
        body = self._request("POST", f"{self._zone_url}/dns_records", json=payload)
        result = body.get("result") or {}
        return DNSRecord(
            id=str(result.get("id", "")),
            name=result.get("name", name),
            type=result.get("type", payload["type"]),
            content=result.get("content", content),
        )

    def close(self) -> None:
        self.session.close()


def _errors(body: Any) -> Any:
    if isinstance(body, dict):
        return body.get("errors") or body
    return body


__all__ = [
    "CloudflareDNSClient",
    "DNSAPIError",
    "DNSZoneClient",
    "RECORD_TTL",
]
