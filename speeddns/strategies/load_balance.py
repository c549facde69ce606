"""
Load-balance (fan-out) policy: one domain, many endpoints.

The single advertised name resolves to several good endpoints at once, so
clients spread themselves across multiple A/AAAA answers.
"""

from __future__ import annotations

from typing import List, Sequence

from speeddns.domain.models import DEFAULT_MAX_RESULT
from speeddns.infrastructure.cloudflare import DNSZoneClient
from speeddns.strategies.abstract import AbstractReconcileStrategy, DomainOutcome
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class LoadBalanceStrategy(AbstractReconcileStrategy):
    """
    Point the only domain at the top `max_result` endpoints.
    """

    name: str = "load_balance"
    description: str = "Single domain, one record per ranked endpoint (capped)."

    def __init__(self, max_result: int = DEFAULT_MAX_RESULT) -> None:
        self.max_result = max_result if max_result > 0 else DEFAULT_MAX_RESULT

    def apply(
        self,
        client: DNSZoneClient,
        domains: Sequence[str],
        endpoints: Sequence[str],
        zone_name: str,
    ) -> List[DomainOutcome]:
        if len(domains) != 1:
            raise ValueError(f"{self.name} expects exactly one domain, got {len(domains)}")
        domain = domains[0]
        selected = list(endpoints[: self.max_result])
        log.info(
            f"[DNS] Updating domain [{domain}] (load-balance mode, {len(selected)} endpoint(s))"
        )
        return [self.replace_records(client, domain, selected, zone_name)]


__all__ = ["LoadBalanceStrategy"]
