"""
Cron trigger for the run coordinator.

A daemon thread sleeps until the next fire time of the configured cron
expression and then calls the trigger callback, which starts a run in its own
thread. The callback never blocks the scheduler: if a run is still going, the
coordinator refuses the new one on its own.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

from croniter import croniter

from speeddns.domain.models import RunConfiguration
from speeddns.utils.logging import get_logger

log = get_logger(__name__)


class CronScheduler:
    """
    Fire `trigger` on a cron schedule until `stop` is called.

    Parameters
    ----------
    trigger : callable
        Called at every fire time; expected to return quickly.
    clock : callable
        Returns "now" as a naive local datetime. Injected in tests.
    """

    def __init__(
        self,
        trigger: Callable[[], object],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._trigger = trigger
        self._clock = clock
        self._spec = ""
        self._iter: Optional[croniter] = None
        self._wakeup = threading.Event()
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def spec(self) -> str:
        return self._spec

    @property
    def enabled(self) -> bool:
        return self._iter is not None

    def update(self, spec: str) -> bool:
        """
        Replace the schedule. An empty or invalid spec disables scheduling.

        Returns True when a valid schedule is active afterwards.
        """
        spec = (spec or "").strip()
        with self._lock:
            self._spec = spec
            if not spec:
                self._iter = None
                log.info("[SCHEDULE] No cron expression configured, scheduling disabled")
            elif not croniter.is_valid(spec):
                self._iter = None
                log.error(f"[SCHEDULE] Invalid cron expression: {spec!r}, scheduling disabled")
            else:
                self._iter = croniter(spec, self._clock())
                log.info(f"[SCHEDULE] Scheduled with cron expression: {spec}")
            enabled = self._iter is not None
        self._wakeup.set()
        return enabled

    def on_config_saved(self, config: RunConfiguration) -> None:
        """ConfigStore listener: reschedule when the cron expression changes."""
        if config.cron_spec.strip() != self._spec:
            self.update(config.cron_spec)

    def next_fire_time(self) -> Optional[datetime]:
        with self._lock:
            if self._iter is None:
                return None
            return self._iter.get_current(datetime)

    def _advance(self) -> Optional[datetime]:
        with self._lock:
            if self._iter is None:
                return None
            return self._iter.get_next(datetime)

    def _loop(self) -> None:
        fire_at = self._advance()
        while not self._stopped.is_set():
            if fire_at is None:
                self._wakeup.wait()
            else:
                delay = (fire_at - self._clock()).total_seconds()
                if delay > 0:
                    self._wakeup.wait(timeout=delay)
            if self._stopped.is_set():
                return
            if self._wakeup.is_set():
                # Schedule replaced; recompute from the new expression.
                self._wakeup.clear()
                fire_at = self._advance()
                continue
            if fire_at is not None and self._clock() >= fire_at:
                log.info("[SCHEDULE] Cron fired, starting task")
                self._trigger()
                fire_at = self._advance()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._wakeup.clear()
        self._thread = threading.Thread(target=self._loop, name="speeddns-cron", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        self._wakeup.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None


__all__ = ["CronScheduler"]
