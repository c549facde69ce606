"""
Strategies package for speeddns.

This module re-exports the abstract interfaces and the concrete distribution
policies so downstream code can import from `speeddns.strategies` directly.
"""

from speeddns.strategies.abstract import (
    AbstractReconcileStrategy,
    DomainOutcome,
    ReconcileStrategy,
)
from speeddns.strategies.load_balance import LoadBalanceStrategy
from speeddns.strategies.one_to_one import OneToOneStrategy

__all__ = [
    # Abstracts
    "AbstractReconcileStrategy",
    "DomainOutcome",
    "ReconcileStrategy",
    # Concrete strategies
    "LoadBalanceStrategy",
    "OneToOneStrategy",
]
