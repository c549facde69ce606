"""
speeddns - publish the fastest cfst endpoints as DNS records.

This package wraps the external cfst speed-test tool and a Cloudflare-style
zone API:

- Picks the IPv4 / IPv6 / merged address pool for the run
- Runs cfst with arguments derived from the stored configuration
- Parses the ranked result CSV
- Replaces the DNS records of one domain (load balance) or of several
  domains (one endpoint per domain, by rank)

Runs are triggered by a cron schedule or on demand, and never overlap.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from speeddns.config import Settings, get_settings
from speeddns.orchestrator import RunCoordinator, RunResult
from speeddns.reconciler import DistributionPolicy, reconcile_dns, select_policy
from speeddns.strategies.abstract import (
    AbstractReconcileStrategy,
    DomainOutcome,
    ReconcileStrategy,
)
from speeddns.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Orchestration
    "RunCoordinator",
    "RunResult",
    # Reconciliation
    "DistributionPolicy",
    "reconcile_dns",
    "select_policy",
    # Strategy abstractions
    "AbstractReconcileStrategy",
    "DomainOutcome",
    "ReconcileStrategy",
    # Logging
    "configure_logging",
    "get_logger",
]
