from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import pytest

from pyxrecord.coordinator import RecordCoordinator
from pyxrecord.hooks.registry import HookRegistry
from pyxrecord.hooks.topics import RecordTopic
from pyxrecord.models.record import Record
from pyxrecord.store.counter import MemoryCounter
from pyxrecord.store.memory import MemoryIndexStore


class FieldContributor:
    """A contributor that persists a fixed set of fields in a dict."""

    def __init__(self, *fields: str) -> None:
        self.fields = frozenset(fields)
        self.rows: dict[int, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []

    def attach(self, hooks: HookRegistry) -> FieldContributor:
        hooks.subscribe(RecordTopic.LOADED, self.on_loaded)
        hooks.subscribe(RecordTopic.CREATED, self.on_written)
        hooks.subscribe(RecordTopic.UPDATED, self.on_written)
        hooks.subscribe(RecordTopic.DELETED, self.on_deleted)
        hooks.subscribe(RecordTopic.QUERY, self.on_query)
        return self

    def _owned(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in values.items() if k in self.fields}

    def on_loaded(self, record: Record) -> dict[str, Any] | None:
        self.calls.append(("loaded", record.id))
        return dict(self.rows.get(record.id, {})) or None

    def on_written(self, record: Record, values: Mapping[str, Any]) -> dict[str, Any] | None:
        self.calls.append(("written", record.id))
        owned = self._owned(values)
        if not owned:
            return None
        self.rows.setdefault(record.id, {}).update(owned)
        return owned

    def on_deleted(self, record_id: int) -> None:
        self.calls.append(("deleted", record_id))
        self.rows.pop(record_id, None)

    def on_query(self, criteria: Mapping[str, Any]) -> Iterable[dict[str, Any]] | None:
        self.calls.append(("query", dict(criteria)))
        wanted = self._owned(criteria)
        if not wanted:
            return None
        return [
            {"id": record_id, **{k: row[k] for k in wanted}}
            for record_id, row in self.rows.items()
            if all(row.get(k) == v for k, v in wanted.items())
        ]


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def store() -> MemoryIndexStore:
    return MemoryIndexStore()


@pytest.fixture
def counter() -> MemoryCounter:
    return MemoryCounter()


@pytest.fixture
def coordinator(store: MemoryIndexStore, hooks: HookRegistry, counter: MemoryCounter) -> RecordCoordinator:
    return RecordCoordinator(store, hooks=hooks, counter=counter)


@pytest.fixture
def titles(hooks: HookRegistry) -> FieldContributor:
    return FieldContributor("title").attach(hooks)


@pytest.fixture
def bodies(hooks: HookRegistry) -> FieldContributor:
    return FieldContributor("body", "status").attach(hooks)


@pytest.fixture
def make_contributor(hooks: HookRegistry):
    def _make(*fields: str) -> FieldContributor:
        return FieldContributor(*fields).attach(hooks)

    return _make
