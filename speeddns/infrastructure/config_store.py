"""
Single-owner store for the persisted `RunConfiguration`.

Saves happen under an exclusive lock and are written to disk synchronously
(temp file + rename) before the lock is released. Runs take an unsynchronized
snapshot, so a save made while a run is in progress only affects the next run.

`speeddns configure` saves from its own process, so a long-running `serve`
process calls `refresh()` to pick up the file when it changed on disk.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from speeddns.domain.models import RunConfiguration
from speeddns.utils.logging import get_logger

log = get_logger(__name__)

ConfigListener = Callable[[RunConfiguration], None]

# (inode, size, mtime_ns); the atomic rename gives every save a new inode.
FileSignature = Optional[Tuple[int, int, int]]


class ConfigStore:
    """
    Load, snapshot and persist the operator configuration.

    Listeners registered with `subscribe` are called, outside the lock, with
    the new configuration after every successful save and after a `refresh`
    that found a changed file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._listeners: List[ConfigListener] = []
        self._signature = self._stat()
        self._config = self._load()

    def _stat(self) -> FileSignature:
        try:
            st = self.path.stat()
        except OSError:
            return None
        return st.st_ino, st.st_size, st.st_mtime_ns

    def _load(self) -> RunConfiguration:
        if not self.path.exists():
            return RunConfiguration()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return RunConfiguration.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as exc:
            log.warning(
                "Could not load configuration, using defaults",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return RunConfiguration()

    def _reload_if_changed(self) -> bool:
        # Caller holds self._lock.
        signature = self._stat()
        if signature == self._signature:
            return False
        self._signature = signature
        self._config = self._load()
        log.info("Configuration reloaded from disk", extra={"path": str(self.path)})
        return True

    @property
    def current(self) -> RunConfiguration:
        """Snapshot of the configuration as of now."""
        return self._config.model_copy()

    def subscribe(self, listener: ConfigListener) -> None:
        self._listeners.append(listener)

    def _notify(self, config: RunConfiguration) -> None:
        for listener in list(self._listeners):
            listener(config.model_copy())

    def refresh(self) -> bool:
        """
        Re-read the file if another process replaced it since the last load.

        Returns True when the configuration was reloaded.
        """
        with self._lock:
            changed = self._reload_if_changed()
            config = self._config
        if changed:
            self._notify(config)
        return changed

    def save(self, **changes: Any) -> RunConfiguration:
        """
        Apply `changes`, validate, persist, then notify listeners.

        Changes are merged onto the file's latest content, so saves from
        separate processes do not drop each other's fields. Raises pydantic's
        ValidationError for invalid values; nothing is written in that case.
        """
        with self._lock:
            self._reload_if_changed()
            merged = self._config.model_dump()
            merged.update(changes)
            updated = RunConfiguration.model_validate(merged)
            self._write(updated)
            self._config = updated
            self._signature = self._stat()
        log.info("Configuration saved", extra={"path": str(self.path)})
        self._notify(updated)
        return updated.model_copy()

    def _write(self, config: RunConfiguration) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".config-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(mode="json"), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["ConfigStore"]
