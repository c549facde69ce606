"""
Run coordinator: one speed test + DNS publication, never two at once.

Usage (example from CLI):
    from speeddns.orchestrator import RunCoordinator

    coordinator = RunCoordinator(settings, store, sink)
    result = coordinator.run_once()      # blocking, on-demand
    coordinator.trigger()                # background thread, used by the scheduler

A run walks through: executable check -> address pool resolution -> domain
validation -> zone name resolution -> cfst arguments -> cfst execution ->
result parsing -> DNS reconciliation. Every milestone and every early exit is
logged. While a run holds the run lock, further attempts return immediately
with status "skipped".
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, TypedDict

from speeddns.config import Settings
from speeddns.domain.models import RunConfiguration
from speeddns.infrastructure.cloudflare import CloudflareDNSClient, DNSZoneClient
from speeddns.infrastructure.config_store import ConfigStore
from speeddns.measurement.invoker import (
    MeasurementError,
    MeasurementInvoker,
    build_arguments,
    resolve_counts,
)
from speeddns.measurement.results import parse_result_csv
from speeddns.measurement.sources import EndpointSourceError, resolve_source_file
from speeddns.reconciler import reconcile_dns, select_policy
from speeddns.strategies.abstract import DomainOutcome
from speeddns.utils.log_sink import LogSink
from speeddns.utils.logging import get_logger
from speeddns.zone import resolve_zone_name

log = get_logger(__name__)

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"

ClientFactory = Callable[[RunConfiguration], DNSZoneClient]


class RunResult(TypedDict, total=False):
    """
    Summary of one coordinator run.

    Only `status` is always present; the rest is filled in as far as the run
    got before finishing or bailing out.
    """

    status: str
    reason: Optional[str]
    started_at: str
    finished_at: str
    source_file: str
    zone_name: str
    policy: str
    command: List[str]
    required_count: int
    test_count: int
    exit_code: int
    measurement_seconds: float
    measurement_peak_rss_bytes: Optional[int]
    endpoints: List[str]
    domains: List[DomainOutcome]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _memoized(factory: ClientFactory) -> ClientFactory:
    """Build at most one client; a run shares it between zone lookup and DNS updates."""
    cache: Dict[str, DNSZoneClient] = {}

    def build(config: RunConfiguration) -> DNSZoneClient:
        if "client" not in cache:
            cache["client"] = factory(config)
        return cache["client"]

    return build


class RunCoordinator:
    """
    Sequence a full run and enforce single-flight execution.

    Parameters
    ----------
    settings : Settings
        Process settings (data directory paths, DNS API endpoint).
    store : ConfigStore
        Source of the run configuration; a snapshot is taken per run.
    sink : LogSink
        Shared log file; receives cfst's streamed output.
    client_factory : callable | None
        Builds a zone client from a configuration. Defaults to Cloudflare.
    invoker : MeasurementInvoker | None
        cfst runner. Defaults to the executable in the data directory.
    """

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore,
        sink: LogSink,
        client_factory: Optional[ClientFactory] = None,
        invoker: Optional[MeasurementInvoker] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.sink = sink
        self.client_factory = client_factory or self._default_client_factory
        self.invoker = invoker or MeasurementInvoker(settings.cfst_file, settings.data_dir, sink)
        self._run_lock = threading.Lock()

    def _default_client_factory(self, config: RunConfiguration) -> DNSZoneClient:
        return CloudflareDNSClient.from_config(
            config,
            base_url=self.settings.dns_api_base_url,
            timeout=self.settings.dns_api_timeout,
        )

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def trigger(self) -> threading.Thread:
        """Start a run in a background thread and return that thread."""
        worker = threading.Thread(target=self.run_once, name="speeddns-run", daemon=True)
        worker.start()
        return worker

    def run_once(self) -> RunResult:
        """
        Run the task now, or return immediately if a run is in progress.
        """
        if not self._run_lock.acquire(blocking=False):
            log.warning("[RUN SKIPPED] A task is already running, ignoring this request")
            return RunResult(status=STATUS_SKIPPED, reason="already running")
        try:
            # Pick up saves made by another process (`speeddns configure`).
            self.store.refresh()
            return self._execute(self.store.current)
        finally:
            self._run_lock.release()

    def _fail(self, result: RunResult, reason: str) -> RunResult:
        log.error(f"[RUN FAILED] {reason}")
        result["status"] = STATUS_FAILED
        result["reason"] = reason
        result["finished_at"] = _now()
        return result

    def _execute(self, config: RunConfiguration) -> RunResult:
        settings = self.settings
        client_factory = _memoized(self.client_factory)
        result = RunResult(status=STATUS_FAILED, reason=None, started_at=_now())
        log.info("[RUN START] Speed test task started")

        # 1. Files
        if not self.invoker.is_available():
            return self._fail(result, f"cfst executable not found: {self.invoker.executable}")

        try:
            source_file = resolve_source_file(
                config.ip_type,
                settings.ip4_file,
                settings.ip6_file,
                settings.combined_ip_file,
            )
        except EndpointSourceError as exc:
            return self._fail(result, str(exc))
        result["source_file"] = str(source_file)

        # 2. Domains and zone
        domains = config.domain_list()
        if not domains:
            return self._fail(result, "no target domains configured")
        result["policy"] = select_policy(domains).value

        zone_name = resolve_zone_name(config, client_factory)
        result["zone_name"] = zone_name

        # 3. cfst arguments
        counts = resolve_counts(config, len(domains))
        args = build_arguments(config, settings.result_file, source_file, counts.test_count)
        result["required_count"] = counts.required
        result["test_count"] = counts.test_count
        result["command"] = [self.invoker.executable.name, *args]
        log.info(f"[MEASURE] Running: {' '.join(result['command'])}")

        # 4. Run
        try:
            outcome = self.invoker.run(args)
        except MeasurementError as exc:
            return self._fail(result, str(exc))
        result["exit_code"] = outcome.exit_code
        result["measurement_seconds"] = round(outcome.duration_seconds, 2)
        result["measurement_peak_rss_bytes"] = outcome.peak_rss_bytes

        # 5. Results
        endpoints = parse_result_csv(settings.result_file, counts.required)
        if not endpoints:
            return self._fail(result, "no valid endpoints in the result file")
        result["endpoints"] = endpoints
        log.info(f"[RESULTS] Got {len(endpoints)} preferred endpoint(s)")

        # 6. DNS
        result["domains"] = reconcile_dns(config, domains, endpoints, zone_name, client_factory)

        result["status"] = STATUS_COMPLETED
        result["finished_at"] = _now()
        log.info(
            "[RUN COMPLETE] Task completed",
            extra={
                "endpoints": len(endpoints),
                "created": sum(d.get("created", 0) for d in result["domains"]),
            },
        )
        return result


__all__ = [
    "STATUS_COMPLETED",
    "STATUS_FAILED",
    "STATUS_SKIPPED",
    "RunCoordinator",
    "RunResult",
]
