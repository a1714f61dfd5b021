"""SQLite-backed index store."""

from __future__ import annotations

import logging
import re
import sqlite3
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pyxrecord._constants import ID_FIELD, TYPE_FIELD
from pyxrecord.exceptions import IndexStoreError

_logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteIndexStore:
    """Index store persisted in a single SQLite table.

    One connection is kept open for the lifetime of the store so that
    ``":memory:"`` databases work; access is serialized with a lock.

    Parameters
    ----------
    path : str or Path
        Database file, or ``":memory:"``.
    table : str
        Table holding the index rows. Created when missing.
    """

    def __init__(self, path: str | Path = ":memory:", *, table: str = "record_index") -> None:
        if not _IDENTIFIER.match(table):
            raise ValueError(f"invalid table name: {table!r}")
        self._table = table
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(str(path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} (id INTEGER PRIMARY KEY, type TEXT)"
                )
            self._columns = self._read_columns()
        except sqlite3.Error as exc:
            raise IndexStoreError(f"cannot open index store at {path}: {exc}") from exc

    def _read_columns(self) -> frozenset[str]:
        rows = self._conn.execute(f"PRAGMA table_info({self._table})").fetchall()
        return frozenset(str(row["name"]) for row in rows)

    def schema_fields(self) -> set[str]:
        return set(self._columns)

    def query(self, criteria: Mapping[str, Any]) -> list[dict[str, Any]]:
        usable = {k: v for k, v in criteria.items() if k in self._columns}
        sql = f"SELECT * FROM {self._table}"
        params: list[Any] = []
        if usable:
            clauses = []
            for key, value in usable.items():
                if value is None:
                    clauses.append(f'"{key}" IS NULL')
                else:
                    clauses.append(f'"{key}" = ?')
                    params.append(value)
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"
        with self._lock:
            try:
                rows = self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise IndexStoreError(f"index query failed: {exc}") from exc
        return [dict(row) for row in rows]

    def create(self, row: Mapping[str, Any]) -> bool:
        record_id = row.get(ID_FIELD)
        if not isinstance(record_id, int):
            return False
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        f"INSERT INTO {self._table} (id, type) VALUES (?, ?)",
                        (record_id, row.get(TYPE_FIELD)),
                    )
            except sqlite3.IntegrityError as exc:
                _logger.debug("Index insert for id=%s rejected: %s", record_id, exc)
                return False
            except sqlite3.Error as exc:
                raise IndexStoreError(f"index insert failed: {exc}") from exc
        return True

    def destroy(self, row: Mapping[str, Any]) -> bool:
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        f"DELETE FROM {self._table} WHERE id = ?",
                        (row.get(ID_FIELD),),
                    )
            except sqlite3.Error as exc:
                raise IndexStoreError(f"index delete failed: {exc}") from exc
        return cursor.rowcount > 0

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SqliteIndexStore:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
