"""
Zone name resolution for record-name suffix stripping.
"""

from __future__ import annotations

from typing import Callable

from speeddns.domain.models import RunConfiguration
from speeddns.infrastructure.cloudflare import DNSAPIError, DNSZoneClient
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


def resolve_zone_name(
    config: RunConfiguration,
    client_factory: Callable[[RunConfiguration], DNSZoneClient],
) -> str:
    """
    Return the root domain of the zone, or "" when it cannot be determined.

    A configured `main_domain` always wins and skips the API. Otherwise the
    zone is looked up remotely; a failed lookup is logged and degrades to "",
    in which case records are created under the full domain name.
    """
    if config.main_domain:
        log.info(f"[ZONE] Using configured root domain: {config.main_domain}")
        return config.main_domain

    if not config.has_credentials:
        log.warning("[ZONE] No root domain configured and no API credentials; using full domain names")
        return ""

    try:
        zone_name = client_factory(config).fetch_zone_name().strip()
    except DNSAPIError as exc:
        log.warning(
            f"[ZONE] Root domain lookup failed: {exc}. Records will use full domain "
            "names, which some zones suffix a second time; set main_domain to fix.",
            extra={"zone_id": config.zone_id},
        )
        return ""

    log.info(f"[ZONE] Detected root domain: {zone_name}")
    return zone_name


__all__ = ["resolve_zone_name"]
