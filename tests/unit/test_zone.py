from __future__ import annotations

import logging

import pytest
from conftest import FakeZoneClient

from speeddns.domain.models import RunConfiguration
from speeddns.zone import resolve_zone_name


def _fail_factory(config: RunConfiguration) -> FakeZoneClient:
    raise AssertionError("the API must not be contacted")


def test_configured_main_domain_bypasses_api() -> None:
    config = RunConfiguration(main_domain="  example.net ", zone_id="z", api_key="k")

    assert resolve_zone_name(config, _fail_factory) == "example.net"


def test_looks_up_zone_when_not_configured() -> None:
    client = FakeZoneClient(zone_name="example.org")
    config = RunConfiguration(zone_id="z", api_key="k")

    assert resolve_zone_name(config, lambda c: client) == "example.org"
    assert client.calls == [("zone",)]


def test_lookup_failure_degrades_to_empty(caplog: pytest.LogCaptureFixture) -> None:
    client = FakeZoneClient(zone_error=True)
    config = RunConfiguration(zone_id="z", api_key="k")

    with caplog.at_level(logging.WARNING):
        assert resolve_zone_name(config, lambda c: client) == ""
    assert "lookup failed" in caplog.text
    assert "main_domain" in caplog.text


def test_no_credentials_and_no_main_domain() -> None:
    assert resolve_zone_name(RunConfiguration(), _fail_factory) == ""
