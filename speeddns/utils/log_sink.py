"""
Append-only log file shared by the coordinator and the streamed cfst output.

All writes go through a queue drained by a single writer thread, so producers
(the two child-process stream copiers and the logging handler) never interleave
partial lines. Readers fetch incremental chunks by byte offset, which is how a
tailing client follows the file.

Usage:
    sink = get_log_sink(settings.log_file)
    sink.log("task started")
    content, offset = sink.read(0)
"""

from __future__ import annotations

import atexit
import queue
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import IO, Dict, Optional, Tuple

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
CLEARED_MARKER = "=== logs cleared ==="

_STOP = object()


class _Truncate:
    """Queue command: truncate the file in writer order."""


def format_line(message: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"[{stamp}] {message}\n"


class LogSink:
    """
    Serialized append channel in front of a single log file.

    Parameters
    ----------
    path : Path | str
        Target file; parent directories are created on demand.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()
        # Last I/O failure of the writer; cleared once the file is writable again.
        self.error: Optional[OSError] = None
        self._writer = threading.Thread(
            target=self._drain, name=f"log-sink:{self.path.name}", daemon=True
        )
        self._writer.start()

    def _open(self, mode: str) -> Optional[IO[str]]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return self.path.open(mode, encoding="utf-8")
        except OSError as exc:
            self._report(exc)
            return None

    def _report(self, exc: OSError) -> None:
        # Logging would route back into this sink, so failures go to stderr, once per outage.
        if self.error is None:
            print(f"log sink {self.path}: {exc}", file=sys.stderr)
        self.error = exc

    def _drain(self) -> None:
        handle = self._open("a")
        try:
            while True:
                item = self._queue.get()
                try:
                    if item is _STOP:
                        return
                    if isinstance(item, _Truncate):
                        if handle is not None:
                            handle.close()
                        handle = self._open("w")
                        continue
                    if handle is None:
                        handle = self._open("a")
                        if handle is None:
                            continue
                    handle.write(item)  # type: ignore[arg-type]
                    handle.flush()
                    self.error = None
                except OSError as exc:
                    self._report(exc)
                finally:
                    self._queue.task_done()
        finally:
            if handle is not None:
                handle.close()

    def write(self, text: str) -> None:
        """Append raw text (used for streamed child output)."""
        if not text:
            return
        with self._lock:
            if self._closed:
                return
            self._queue.put(text)

    def log(self, message: str) -> None:
        """Append one timestamped line."""
        self.write(format_line(message))

    def flush(self) -> None:
        """
        Block until every queued write has been handled.

        Returns at once when the writer thread is gone (after `close`), since
        nothing would drain the queue.
        """
        if not self._writer.is_alive():
            return
        self._queue.join()

    def read(self, offset: int = 0) -> Tuple[str, int]:
        """
        Return content from `offset` and the offset to resume from.

        An offset past the end means the file was truncated since the last
        read, so reading restarts from the beginning.
        """
        self.flush()
        if not self.path.exists():
            return "", 0
        size = self.path.stat().st_size
        if offset < 0 or offset > size:
            offset = 0
        with self.path.open("rb") as f:
            f.seek(offset)
            data = f.read()
        return data.decode("utf-8", errors="replace"), offset + len(data)

    def clear(self) -> None:
        """Truncate the file and record that it was cleared."""
        with self._lock:
            if self._closed:
                return
            self._queue.put(_Truncate())
        self.log(CLEARED_MARKER)
        self.flush()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._writer.join(timeout=5.0)


_sinks: Dict[Path, LogSink] = {}
_sinks_lock = threading.Lock()


def get_log_sink(path: Path | str) -> LogSink:
    """Return the process-wide sink for `path`, creating it on first use."""
    key = Path(path).resolve()
    with _sinks_lock:
        sink = _sinks.get(key)
        if sink is None:
            sink = LogSink(key)
            _sinks[key] = sink
        return sink


def close_all_sinks() -> None:
    with _sinks_lock:
        sinks = list(_sinks.values())
        _sinks.clear()
    for sink in sinks:
        sink.close()


atexit.register(close_all_sinks)


__all__ = [
    "CLEARED_MARKER",
    "LogSink",
    "close_all_sinks",
    "format_line",
    "get_log_sink",
]
