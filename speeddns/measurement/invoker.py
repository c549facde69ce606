"""
Runs the external cfst speed-test executable.

The invoker turns a `RunConfiguration` into cfst's argument vector, starts the
tool in the data directory, copies its stdout and stderr line by line into the
log sink while it runs, and waits for it to exit. The exit code is advisory:
cfst exits non-zero when no address met the thresholds, yet the result file may
still be worth parsing.
"""

from __future__ import annotations

import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional

from speeddns.domain.models import RunConfiguration
from speeddns.utils.log_sink import LogSink
from speeddns.utils.logging import get_logger
from speeddns.utils.profiler import profile_block

log = get_logger(__name__)

HTTPING_FLAG = "-httping"


class MeasurementError(RuntimeError):
    """cfst could not be started."""


@dataclass(frozen=True)
class MeasurementCounts:
    """How many results to keep (`required`) and to ask cfst for (`test_count`)."""

    required: int
    test_count: int


@dataclass
class MeasurementOutcome:
    exit_code: int
    duration_seconds: float
    peak_rss_bytes: Optional[int] = None


def resolve_counts(config: RunConfiguration, domain_count: int) -> MeasurementCounts:
    """
    Work out the result counts for a run.

    Each domain in a multi-domain setup needs its own endpoint, so the
    required count grows to the number of domains; cfst is then asked for at
    least that many results.
    """
    required = config.effective_max_result
    if domain_count > 1 and domain_count > required:
        required = domain_count

    test_count = config.test_count
    if test_count < required:
        test_count = required
        log.info(
            f"[MEASURE] Requested result count raised to {test_count}",
            extra={"configured": config.test_count, "test_count": test_count},
        )
    return MeasurementCounts(required=required, test_count=test_count)


def build_arguments(
    config: RunConfiguration,
    result_file: Path | str,
    source_file: Path | str,
    test_count: int,
) -> List[str]:
    """Build cfst's argument vector (without the executable itself)."""
    args = [
        "-o", str(result_file),
        "-dn", str(test_count),
        "-sl", f"{config.min_speed:.2f}",
        "-tl", str(config.max_delay),
        "-tll", str(config.min_delay),
        "-tp", str(config.effective_port),
        "-f", str(source_file),
    ]  # fmt: skip

    if config.download_url:
        args += ["-url", config.download_url]
    if config.colo:
        # Region filtering only works in HTTPing mode.
        args += ["-cfcolo", config.colo, HTTPING_FLAG]
    if config.enable_httping and HTTPING_FLAG not in args:
        args.append(HTTPING_FLAG)
    return args


def _copy_stream(stream: IO[bytes], sink: LogSink) -> None:
    with stream:
        for raw in iter(stream.readline, b""):
            sink.write(raw.decode("utf-8", errors="replace"))


class MeasurementInvoker:
    """
    Start cfst once per call to `run` and stream its output into `sink`.

    Parameters
    ----------
    executable : Path
        The cfst binary.
    workdir : Path
        Working directory for the child (the shared data directory).
    sink : LogSink
        Destination for the child's combined output.
    """

    def __init__(self, executable: Path | str, workdir: Path | str, sink: LogSink) -> None:
        self.executable = Path(executable)
        self.workdir = Path(workdir)
        self.sink = sink

    def is_available(self) -> bool:
        return self.executable.is_file()

    def ensure_executable(self) -> None:
        self.executable.chmod(0o755)

    def run(self, args: List[str]) -> MeasurementOutcome:
        """
        Execute cfst with `args` and block until it exits.

        Raises
        ------
        MeasurementError
            The executable is missing or the process could not be started.
        """
        if not self.is_available():
            raise MeasurementError(f"cfst executable not found: {self.executable}")
        try:
            self.ensure_executable()
            proc = subprocess.Popen(
                [str(self.executable), *args],
                cwd=self.workdir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise MeasurementError(f"failed to start cfst: {exc}") from exc

        assert proc.stdout is not None and proc.stderr is not None
        copiers = [
            threading.Thread(target=_copy_stream, args=(stream, self.sink), daemon=True)
            for stream in (proc.stdout, proc.stderr)
        ]
        with profile_block("cfst", pid=proc.pid) as stats:
            for copier in copiers:
                copier.start()
            exit_code = proc.wait()
            for copier in copiers:
                copier.join()

        if exit_code != 0:
            log.warning(
                f"[MEASURE] cfst exited with code {exit_code} "
                "(often no address met the thresholds)",
                extra={"exit_code": exit_code},
            )
        return MeasurementOutcome(
            exit_code=exit_code,
            duration_seconds=stats.duration_seconds,
            peak_rss_bytes=stats.peak_rss_bytes,
        )


__all__ = [
    "HTTPING_FLAG",
    "MeasurementCounts",
    "MeasurementError",
    "MeasurementInvoker",
    "MeasurementOutcome",
    "build_arguments",
    "resolve_counts",
]
