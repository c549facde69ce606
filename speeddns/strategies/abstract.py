"""
Reconciliation strategy interfaces and the per-domain outcome contract.

A strategy decides which endpoints each domain should point at. Publishing is
shared: every domain is converged by listing its records, deleting all of them
and then creating the new ones, always in that order.
"""

from __future__ import annotations

import abc
from typing import List, Optional, Protocol, Sequence, TypedDict, runtime_checkable

from speeddns.domain.records import record_name_for
from speeddns.infrastructure.cloudflare import DNSAPIError, DNSZoneClient
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class DomainOutcome(TypedDict, total=False):
    """
    What happened to one domain during reconciliation.

    Fields are optional so skipped domains can report only what applies.
    """

    domain: str
    record_name: str
    endpoints: List[str]
    deleted: int
    delete_failures: int
    created: int
    create_failures: int
    skipped: bool
    error: Optional[str]


@runtime_checkable
class ReconcileStrategy(Protocol):
    """
    Common interface for distribution policies.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the policy.
    """

    name: str
    description: str

    def apply(
        self,
        client: DNSZoneClient,
        domains: Sequence[str],
        endpoints: Sequence[str],
        zone_name: str,
    ) -> List[DomainOutcome]:
        """
        Converge `domains` onto `endpoints` and report per-domain outcomes.

        Parameters
        ----------
        client : DNSZoneClient
            Zone API used for listing, deleting and creating records.
        domains : Sequence[str]
            Ordered target domains.
        endpoints : Sequence[str]
            Ranked endpoint addresses, best first.
        zone_name : str
            Root domain used to compute record names; may be empty.
        """
        ...


class AbstractReconcileStrategy(abc.ABC):
    """
    ABC helper providing the shared full-replacement publish step.

    Subclasses set `name` and `description` and implement `apply`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def apply(
        self,
        client: DNSZoneClient,
        domains: Sequence[str],
        endpoints: Sequence[str],
        zone_name: str,
    ) -> List[DomainOutcome]:  # pragma: no cover - interface only
        raise NotImplementedError

    def replace_records(
        self,
        client: DNSZoneClient,
        domain: str,
        endpoints: Sequence[str],
        zone_name: str,
    ) -> DomainOutcome:
        """
        Delete every record named `domain`, then create one per endpoint.

        Failing to list the existing records aborts this domain only. Single
        delete or create failures are logged and the loop carries on: an
        orphaned old record is better than not publishing the new ones.
        """
        record_name = record_name_for(domain, zone_name)
        outcome = DomainOutcome(
            domain=domain,
            record_name=record_name,
            endpoints=list(endpoints),
            deleted=0,
            delete_failures=0,
            created=0,
            create_failures=0,
            skipped=False,
            error=None,
        )

        try:
            records = client.list_records(domain)
        except DNSAPIError as exc:
            log.error(f"[DNS] Failed to list existing records [{domain}]: {exc}")
            outcome["error"] = str(exc)
            return outcome

        if records:
            log.info(f"[DNS] Found {len(records)} old record(s) [{domain}], removing")
        else:
            log.info(f"[DNS] No old records [{domain}]")

        for record in records:
            try:
                client.delete_record(record.id)
                outcome["deleted"] += 1
            except DNSAPIError as exc:
                outcome["delete_failures"] += 1
                log.warning(f"[DNS] Failed to delete record (ID: {record.id}): {exc}")

        for endpoint in endpoints:
            try:
                client.create_record(record_name, endpoint)
                outcome["created"] += 1
            except DNSAPIError as exc:
                outcome["create_failures"] += 1
                log.error(f"[DNS] Failed to create record [{record_name} -> {endpoint}]: {exc}")

        log.info(
            f"[DNS] Added {outcome['created']} new record(s) [{domain}]",
            extra={
                "domain": domain,
                "record_name": record_name,
                "created": outcome["created"],
                "create_failures": outcome["create_failures"],
            },
        )
        return outcome


__all__ = [
    "AbstractReconcileStrategy",
    "DomainOutcome",
    "ReconcileStrategy",
]
