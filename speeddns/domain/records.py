"""
Record naming and typing rules shared by both distribution policies.
"""
from __future__ import annotations

ZONE_APEX = "@"


def record_name_for(domain: str, zone_name: str) -> str:
    """
    Compute the record name relative to the zone apex.

    Some zone APIs append their own zone suffix to whatever name they are
    given, so passing `sub.example.com` for zone `example.com` can produce
    `sub.example.com.example.com`. Stripping the suffix here avoids that.
    Without a zone name (or when the domain is outside the zone) the FQDN is
    returned unchanged.
    """
    if not zone_name:
        return domain
    domain_lower = domain.lower()
    zone_lower = zone_name.lower()
    if domain_lower == zone_lower:
        return ZONE_APEX
    if domain_lower.endswith("." + zone_lower):
        return domain[: len(domain) - len(zone_lower) - 1]
    return domain


def record_type_for(address: str) -> str:
    """A colon means IPv6; everything else is sent as an A record."""
    return "AAAA" if ":" in address else "A"


__all__ = ["ZONE_APEX", "record_name_for", "record_type_for"]
