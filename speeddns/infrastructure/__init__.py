"""
Infrastructure package for speeddns.

Centralizes I/O concerns: the DNS zone API client and the persisted
configuration store. Keep this layer focused on I/O and resource management,
decoupled from reconciliation/orchestration logic.
"""

from speeddns.infrastructure.cloudflare import (
    CloudflareDNSClient,
    DNSAPIError,
    DNSZoneClient,
)
from speeddns.infrastructure.config_store import ConfigStore

__all__ = [
    "CloudflareDNSClient",
    "ConfigStore",
    "DNSAPIError",
    "DNSZoneClient",
]
