"""
Pytest configuration for speeddns.

Provides fixtures for:
- An isolated data directory and Settings pointing at it
- A log sink on that directory
- An in-memory zone client standing in for the DNS API
- A fake cfst executable that copies a canned result CSV
"""

from __future__ import annotations

import itertools
import os
from pathlib import Path
from typing import Dict, Generator, List, Optional, Set, Tuple

import pytest

from scripts.generate_results import _generate_results_csv, _write_fake_cfst, _write_pool
from speeddns.config import Settings
from speeddns.domain.models import DNSRecord, RunConfiguration
from speeddns.domain.records import record_type_for
from speeddns.infrastructure.cloudflare import DNSAPIError
from speeddns.infrastructure.config_store import ConfigStore
from speeddns.utils.log_sink import LogSink

RANKED_ENDPOINTS = [
    "198.51.100.7",
    "198.51.100.8",
    "203.0.113.10",
    "2001:db8::1",
    "203.0.113.11",
]


class FakeZoneClient:
    """
    In-memory zone with call tracking and injectable failures.

    Records are stored under their FQDN; created records are expanded
    relative to the zone, like the real API does.
    """

    def __init__(
        self,
        zone_name: str = "example.com",
        zone_error: bool = False,
    ) -> None:
        self.zone_name = zone_name
        self.zone_error = zone_error
        self.records: Dict[str, Tuple[str, DNSRecord]] = {}
        self._ids = itertools.count(1)
        self.calls: List[Tuple[str, ...]] = []
        self.fail_list: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.fail_create: Set[str] = set()

    def seed(self, domain: str, content: str, record_type: Optional[str] = None) -> str:
        record_id = f"rec-{next(self._ids)}"
        self.records[record_id] = (
            domain,
            DNSRecord(id=record_id, name=domain, type=record_type or record_type_for(content), content=content),
        )
        return record_id

    def contents_for(self, domain: str) -> List[str]:
        return sorted(r.content or "" for d, r in self.records.values() if d == domain)

    def fetch_zone_name(self) -> str:
        self.calls.append(("zone",))
        if self.zone_error:
            raise DNSAPIError("zone lookup failed")
        return self.zone_name

    def list_records(self, name: str) -> List[DNSRecord]:
        self.calls.append(("list", name))
        if name in self.fail_list:
            raise DNSAPIError(f"cannot list {name}")
        return [record for domain, record in self.records.values() if domain == name]

    def delete_record(self, record_id: str) -> None:
        self.calls.append(("delete", record_id))
        if record_id in self.fail_delete:
            raise DNSAPIError(f"cannot delete {record_id}")
        self.records.pop(record_id, None)

    def create_record(self, name: str, content: str) -> DNSRecord:
        self.calls.append(("create", name, content))
        if content in self.fail_create:
            raise DNSAPIError(f"cannot create {content}")
        record_id = f"rec-{next(self._ids)}"
        domain = self._fqdn(name)
        record = DNSRecord(id=record_id, name=domain, type=record_type_for(content), content=content)
        self.records[record_id] = (domain, record)
        return record

    def _fqdn(self, name: str) -> str:
        """Expand a record name the way a zone API scopes it to the zone."""
        zone = self.zone_name.lower()
        if name == "@":
            return self.zone_name
        if name.lower() == zone or name.lower().endswith("." + zone):
            return name
        return f"{name}.{self.zone_name}"

    def creations(self) -> List[Tuple[str, str]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "create"]


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def test_settings(data_dir: Path) -> Settings:
    """
    Settings fixture pointing every path at a temporary data directory.
    """
    return Settings(data_dir=data_dir, log_level="DEBUG")


@pytest.fixture
def sink(test_settings: Settings) -> Generator[LogSink, None, None]:
    log_sink = LogSink(test_settings.log_file)
    try:
        yield log_sink
    finally:
        log_sink.close()


@pytest.fixture
def fake_client() -> FakeZoneClient:
    return FakeZoneClient()


@pytest.fixture
def run_config() -> RunConfiguration:
    return RunConfiguration(
        zone_id="zone-123",
        api_key="key-abc",
        email="ops@example.com",
        main_domain="example.com",
        domains="cdn.example.com",
        max_result=3,
    )


@pytest.fixture
def config_store(test_settings: Settings, run_config: RunConfiguration) -> ConfigStore:
    store = ConfigStore(test_settings.config_file)
    store.save(**run_config.model_dump())
    return store


@pytest.fixture
def address_pools(test_settings: Settings) -> Tuple[Path, Path]:
    _write_pool(test_settings.ip4_file, ["198.51.100.7", "198.51.100.8", "203.0.113.10"])
    _write_pool(test_settings.ip6_file, ["2001:db8::1", "2001:db8::2"])
    return test_settings.ip4_file, test_settings.ip6_file


@pytest.fixture
def canned_result(tmp_path: Path) -> Path:
    """A ranked result CSV whose first column is RANKED_ENDPOINTS, in order."""
    path = tmp_path / "canned_result.csv"
    path.write_text(
        "IP Address,Sent,Received,Loss Rate,Avg Latency,Download Speed (MB/s)\n"
        + "".join(f"{ip},4,4,0.00,{50 + i}.00,{30 - i}.00\n" for i, ip in enumerate(RANKED_ENDPOINTS)),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_cfst(test_settings: Settings, canned_result: Path) -> Path:
    """Install a stand-in cfst in the data directory."""
    if os.name != "posix":
        pytest.skip("fake cfst is a POSIX shell script")
    _write_fake_cfst(test_settings.cfst_file, canned_result)
    return test_settings.cfst_file


@pytest.fixture
def generated_result(tmp_path: Path) -> Path:
    path = tmp_path / "generated.csv"
    _generate_results_csv(path, ["198.51.100.1", "198.51.100.2", "198.51.100.3"], seed=7)
    return path
