"""
One-to-one policy: the i-th fastest endpoint goes to the i-th domain.
"""

from __future__ import annotations

from typing import List, Sequence

from speeddns.infrastructure.cloudflare import DNSZoneClient
from speeddns.strategies.abstract import AbstractReconcileStrategy, DomainOutcome
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class OneToOneStrategy(AbstractReconcileStrategy):
    """
    Pair domains with endpoints by rank; each domain gets exactly one record.

    Domains beyond the end of the endpoint list are left untouched and
    reported as skipped, one warning each.
    """

    name: str = "one_to_one"
    description: str = "Multiple domains, domain i -> endpoint i."

    def apply(
        self,
        client: DNSZoneClient,
        domains: Sequence[str],
        endpoints: Sequence[str],
        zone_name: str,
    ) -> List[DomainOutcome]:
        log.info(f"[DNS] Updating {len(domains)} domains (1:1 mode)")
        outcomes: List[DomainOutcome] = []
        for index, domain in enumerate(domains):
            if index >= len(endpoints):
                log.warning(f"[DNS] No endpoint left for [{domain}], leaving it unchanged")
                outcomes.append(DomainOutcome(domain=domain, skipped=True, created=0))
                continue
            endpoint = endpoints[index]
            log.info(f"[DNS]  -> [{domain}] resolves to [{endpoint}]")
            outcomes.append(self.replace_records(client, domain, [endpoint], zone_name))
        return outcomes


__all__ = ["OneToOneStrategy"]
