"""
Domain package for speeddns.

Exports the configuration/record models and the record naming rules used by
the reconciler. Keep this package focused on data definitions and pure rules.
"""

from speeddns.domain.models import (
    DNSRecord,
    IPType,
    RunConfiguration,
    parse_domains,
)
from speeddns.domain.records import ZONE_APEX, record_name_for, record_type_for

__all__ = [
    "DNSRecord",
    "IPType",
    "RunConfiguration",
    "ZONE_APEX",
    "parse_domains",
    "record_name_for",
    "record_type_for",
]
