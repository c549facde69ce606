"""
Domain models for speeddns.

`RunConfiguration` mirrors the persisted `config.json` document edited by
operators. `DNSRecord` is the small view of a remote record the reconciler
needs; records are never updated in place, only deleted and recreated.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MAX_RESULT = 10
DEFAULT_TEST_PORT = 443


class IPType(str, Enum):
    """Which uploaded address pool feeds the measurement run."""

    V4 = "v4"
    V6 = "v6"
    BOTH = "both"


class RunConfiguration(BaseModel):
    """
    Operator-facing configuration for one measurement + DNS publication run.
    """

    cron_spec: str = Field("", description="Cron expression; empty disables scheduling.")
    zone_id: str = Field("", description="DNS API zone identifier.")
    api_key: str = Field("", description="DNS API secret key.")
    email: str = Field("", description="DNS API account email.")
    main_domain: str = Field("", description="Explicit root domain of the zone.")
    domains: str = Field("", description="Comma-separated list of target domains.")
    download_url: str = Field("", description="Custom download URL for speed tests.")
    test_count: int = Field(0, ge=0, description="Requested number of cfst results.")
    max_result: int = Field(DEFAULT_MAX_RESULT, ge=0, description="Records to publish.")
    min_speed: float = Field(0.0, ge=0, description="Minimum download speed (MB/s).")
    max_delay: int = Field(9999, ge=0, description="Maximum average latency (ms).")
    min_delay: int = Field(0, ge=0, description="Minimum average latency (ms).")
    test_port: int = Field(DEFAULT_TEST_PORT, ge=0, le=65535)
    ip_type: IPType = Field(IPType.V4)
    colo: str = Field("", description="Region code filter, e.g. HKG,SJC.")
    enable_httping: bool = Field(False)

    model_config = {
        "validate_assignment": True,
        "use_enum_values": False,
    }

    @field_validator("main_domain")
    @classmethod
    def _strip_main_domain(cls, value: str) -> str:
        return value.strip()

    @field_validator("colo")
    @classmethod
    def _upper_colo(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("ip_type", mode="before")
    @classmethod
    def _default_ip_type(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return IPType.V4
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def has_credentials(self) -> bool:
        return bool(self.zone_id and self.api_key)

    @property
    def effective_max_result(self) -> int:
        return self.max_result if self.max_result > 0 else DEFAULT_MAX_RESULT

    @property
    def effective_port(self) -> int:
        return self.test_port if self.test_port > 0 else DEFAULT_TEST_PORT

    def domain_list(self) -> List[str]:
        return parse_domains(self.domains)


class DNSRecord(BaseModel):
    """
    A record as listed by the remote zone API.
    """

    id: str = Field(..., description="Remote record identifier.")
    name: Optional[str] = Field(None)
    type: Optional[str] = Field(None)
    content: Optional[str] = Field(None)

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }


def parse_domains(value: str) -> List[str]:
    """Split a comma-separated domain list, dropping blanks and keeping order."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


__all__ = [
    "DEFAULT_MAX_RESULT",
    "DEFAULT_TEST_PORT",
    "DNSRecord",
    "IPType",
    "RunConfiguration",
    "parse_domains",
]
