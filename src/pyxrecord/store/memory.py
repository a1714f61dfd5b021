"""In-memory index store."""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from typing import Any

from pyxrecord._constants import ID_FIELD, TYPE_FIELD

_SCHEMA: frozenset[str] = frozenset({ID_FIELD, TYPE_FIELD})


def _matches(row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    return all(row.get(key) == value for key, value in criteria.items())


class MemoryIndexStore:
    """Dict-backed index store, ordered by insertion.

    Useful for tests and for applications whose record identity does not need
    to outlive the process.
    """

    def __init__(self) -> None:
        self._rows: dict[int, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def schema_fields(self) -> set[str]:
        return set(_SCHEMA)

    def query(self, criteria: Mapping[str, Any]) -> list[dict[str, Any]]:
        usable = {k: v for k, v in criteria.items() if k in _SCHEMA}
        with self._lock:
            return [copy.deepcopy(row) for row in self._rows.values() if _matches(row, usable)]

    def create(self, row: Mapping[str, Any]) -> bool:
        record_id = row.get(ID_FIELD)
        if not isinstance(record_id, int):
            return False
        with self._lock:
            if record_id in self._rows:
                return False
            self._rows[record_id] = {ID_FIELD: record_id, TYPE_FIELD: row.get(TYPE_FIELD)}
        return True

    def destroy(self, row: Mapping[str, Any]) -> bool:
        with self._lock:
            return self._rows.pop(row.get(ID_FIELD), None) is not None

    def __len__(self) -> int:
        return len(self._rows)
