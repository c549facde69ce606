"""
Profiling utilities for the measurement step.

The cfst child process does the heavy lifting, so the profiler samples that
process (not the coordinator) for:
- Wall-clock time (perf_counter)
- Peak RSS via a background sampling thread (psutil)
- CPU percent (psutil, best-effort snapshot before the process exits)

Usage:
    proc = subprocess.Popen(args)
    with profile_block("cfst", pid=proc.pid) as stats:
        proc.wait()

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)


@contextlib.contextmanager
def profile_block(
    label: str, pid: Optional[int] = None, sample_interval_ms: int = 100
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code and, optionally, a process.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    pid : int | None
        Process to sample. Defaults to the current process.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling.

    Notes
    -----
    A sampled process may exit at any moment; sampling errors simply stop the
    sampler and whatever peak was observed so far is reported.
    """
    stats = ProfileStats(label=label)
    try:
        process: Optional[psutil.Process] = psutil.Process(pid)
        process.cpu_percent(interval=None)
    except psutil.Error:
        process = None
    peak_rss = 0
    cpu_seen: Optional[float] = None
    stop_sampling = threading.Event()

    def _sample() -> None:
        nonlocal peak_rss, cpu_seen
        if process is None:
            return
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
                cpu_seen = process.cpu_percent(interval=None)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    sampler = threading.Thread(target=_sample, name=f"profile:{label}", daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        stop_sampling.set()
        sampler.join(timeout=1.0)

        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
        stats.cpu_percent = cpu_seen


__all__ = ["ProfileStats", "profile_block"]
