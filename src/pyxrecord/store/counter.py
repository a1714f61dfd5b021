"""Sequence counters used to assign record ids."""

from __future__ import annotations

import contextlib
import fcntl
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

from pyxrecord.exceptions import CounterError

_logger = logging.getLogger(__name__)


class MemoryCounter:
    """Process-local counters."""

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str, default: int = 0) -> int:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: int) -> None:
        with self._lock:
            self._values[key] = int(value)

    def allocate(self, key: str, persist: Callable[[int], bool]) -> int | None:
        with self._lock:
            candidate = self.get(key, 0) + 1
            if not persist(candidate):
                return None
            self.set(key, candidate)
            return candidate


class JsonFileCounter:
    """Counters persisted as a flat JSON object on disk.

    Every read goes to the file so separate instances pointing at the same
    path agree on the current value. Writes replace the file atomically.
    Each operation holds an exclusive ``flock`` on a ``<name>.lock`` sidecar,
    so ``allocate`` is atomic across instances and processes, not just
    threads sharing this object.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock_path = self._path.with_name(f"{self._path.name}.lock")
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        # The sidecar is never replaced, unlike the counter file itself.
        with self._lock:
            try:
                self._lock_path.parent.mkdir(parents=True, exist_ok=True)
                handle = self._lock_path.open("a+", encoding="utf-8")
            except OSError as exc:
                raise CounterError(f"cannot open counter lock {self._lock_path}: {exc}") from exc
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            finally:
                handle.close()

    def _read(self) -> dict[str, int]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise CounterError(f"cannot read counters from {self._path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CounterError(f"corrupt counter file {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CounterError(f"corrupt counter file {self._path}: expected an object")
        values: dict[str, int] = {}
        for key, value in data.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise CounterError(f"counter {key!r} in {self._path} is not an integer")
            values[str(key)] = value
        return values

    def _write(self, values: dict[str, int]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(values, fh, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            raise CounterError(f"cannot write counters to {self._path}: {exc}") from exc

    def get(self, key: str, default: int = 0) -> int:
        with self._locked():
            return self._read().get(key, default)

    def set(self, key: str, value: int) -> None:
        with self._locked():
            values = self._read()
            values[key] = int(value)
            self._write(values)

    def allocate(self, key: str, persist: Callable[[int], bool]) -> int | None:
        with self._locked():
            values = self._read()
            candidate = values.get(key, 0) + 1
            if not persist(candidate):
                return None
            values[key] = candidate
            self._write(values)
            _logger.debug("Counter %s advanced to %d in %s", key, candidate, self._path)
            return candidate
