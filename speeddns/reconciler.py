"""
DNS reconciliation entry point.

Chooses the distribution policy from the shape of the domain list and runs it
against the zone API:

- exactly one domain  -> load balance (all top endpoints on that name)
- several domains     -> one-to-one (domain i gets endpoint i)
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Sequence

from speeddns.domain.models import RunConfiguration
from speeddns.infrastructure.cloudflare import DNSZoneClient
from speeddns.strategies.abstract import DomainOutcome, ReconcileStrategy
from speeddns.strategies.load_balance import LoadBalanceStrategy
from speeddns.strategies.one_to_one import OneToOneStrategy
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class DistributionPolicy(str, Enum):
    LOAD_BALANCE = "load_balance"
    ONE_TO_ONE = "one_to_one"


def select_policy(domains: Sequence[str]) -> DistributionPolicy:
    """Pick the policy for a non-empty domain list."""
    if not domains:
        raise ValueError("at least one domain is required")
    if len(domains) == 1:
        return DistributionPolicy.LOAD_BALANCE
    return DistributionPolicy.ONE_TO_ONE


def _strategy_factories(
    config: RunConfiguration,
) -> Dict[DistributionPolicy, Callable[[], ReconcileStrategy]]:
    """Registry of available policies."""
    return {
        DistributionPolicy.LOAD_BALANCE: lambda: LoadBalanceStrategy(
            max_result=config.effective_max_result
        ),
        DistributionPolicy.ONE_TO_ONE: lambda: OneToOneStrategy(),
    }


def available_policies() -> List[str]:
    """List available policy names."""
    return sorted(policy.value for policy in DistributionPolicy)


def reconcile_dns(
    config: RunConfiguration,
    domains: Sequence[str],
    endpoints: Sequence[str],
    zone_name: str,
    client_factory: Callable[[RunConfiguration], DNSZoneClient],
) -> List[DomainOutcome]:
    """
    Publish `endpoints` for `domains` and return per-domain outcomes.

    Without zone credentials nothing is contacted and an empty list is
    returned; that is logged as skipped, not as a failure.
    """
    if not config.has_credentials:
        log.warning("[DNS] API credentials missing, skipping DNS update")
        return []

    policy = select_policy(domains)
    strategy = _strategy_factories(config)[policy]()
    log.info(
        f"[DNS] Applying {strategy.name} policy",
        extra={"policy": policy.value, "domains": len(domains), "endpoints": len(endpoints)},
    )
    return strategy.apply(client_factory(config), list(domains), list(endpoints), zone_name)


__all__ = [
    "DistributionPolicy",
    "available_policies",
    "reconcile_dns",
    "select_policy",
]
