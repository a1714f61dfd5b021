"""Record lifecycle coordinator."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pyxrecord._constants import ID_FIELD
from pyxrecord._redact import redact_for_log
from pyxrecord.config import RecordConfig
from pyxrecord.exceptions import RecordValidationError
from pyxrecord.hooks.contributions import partial_record, query_rows
from pyxrecord.hooks.registry import HookRegistry, handler_name
from pyxrecord.hooks.topics import RecordTopic
from pyxrecord.merge import fold_into, strip_reserved
from pyxrecord.models.query import CombineMode, QueryOptions, SortOrder
from pyxrecord.models.record import Record
from pyxrecord.query import filter_candidates, reconcile_by_id, sort_records, split_criteria
from pyxrecord.store.base import IndexStore, SequenceCounter
from pyxrecord.store.counter import MemoryCounter

_logger = logging.getLogger(__name__)


class RecordCoordinator:
    """Load, create, update, delete and query extensible records.

    The index store only knows ``id`` and ``type``. Every other field lives
    with the contributors subscribed to the coordinator's hooks and is
    collected through one broadcast per operation.

    Usage::

        hooks = HookRegistry()
        records = RecordCoordinator(MemoryIndexStore(), hooks=hooks)
        hooks.subscribe(RecordTopic.LOADED, titles.on_loaded)

        post = records.create("post", {"title": "Hello"})
        same = records.load(post.id)

    ``load``/``update`` return ``None`` and ``delete`` returns ``False`` when
    the id is unknown or the index store rejects the write; callers are
    expected to branch on that.

    Without an explicit *counter* the coordinator keeps ids in a
    :class:`~pyxrecord.store.counter.MemoryCounter` seeded from the highest
    id in the index. Pass a shared counter such as
    :class:`~pyxrecord.store.counter.JsonFileCounter` when several
    coordinators or processes write to the same store.
    """

    def __init__(
        self,
        store: IndexStore,
        *,
        hooks: HookRegistry | None = None,
        counter: SequenceCounter | None = None,
        config: RecordConfig | None = None,
    ) -> None:
        self._store = store
        self._hooks = hooks if hooks is not None else HookRegistry()
        self._config = config if config is not None else RecordConfig()
        self._counter: SequenceCounter = counter if counter is not None else self._seeded_counter()

    def _seeded_counter(self) -> MemoryCounter:
        # Start after the highest id already in the index so a reopened store keeps allocating.
        last = max((row[ID_FIELD] for row in self._store.query({})), default=0)
        if last:
            _logger.debug("Seeding in-memory counter %s at %d from the index store", self._config.counter_key, last)
        return MemoryCounter({self._config.counter_key: last})

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def store(self) -> IndexStore:
        return self._store

    @property
    def config(self) -> RecordConfig:
        return self._config

    # ------------------------------------------------------------------
    # Merge protocol
    # ------------------------------------------------------------------

    def _broadcast(self, topic: RecordTopic, record: Record, values: Mapping[str, Any] | None = None) -> Record:
        """Publish *record* on *topic* and fold every contribution into it.

        Handlers get their own deep copy of the record so only returned
        contributions can change the result.
        """
        args: tuple[Any, ...] = (record.model_copy(deep=True),)
        if values is not None:
            args += (copy.deepcopy(dict(values)),)

        deliveries = self._hooks.publish(topic, *args, isolate_errors=self._config.isolate_listener_errors)
        for delivery in deliveries:
            contribution = partial_record(delivery, topic)
            if contribution is None:
                continue
            fold_into(record, contribution, source=handler_name(delivery.handler))
        return record

    def _fetch_row(self, record_id: int) -> dict[str, Any] | None:
        rows = self._store.query({ID_FIELD: record_id})
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def exists(self, record_id: int) -> bool:
        """Whether the index store holds *record_id*. No broadcast."""
        return self._fetch_row(record_id) is not None

    def last_id(self) -> int:
        """The most recently assigned record id (``0`` before the first create)."""
        return self._counter.get(self._config.counter_key, 0)

    def load(self, record_id: int) -> Record | None:
        """Reconstitute a record from its index row and every contributor."""
        row = self._fetch_row(record_id)
        if row is None:
            _logger.debug("load(%s): not in index", record_id)
            return None
        return self._broadcast(RecordTopic.LOADED, Record.from_row(row))

    def load_many(self, record_ids: Iterable[int]) -> list[Record]:
        """Load each id in order, skipping the ones that do not exist."""
        records: list[Record] = []
        for record_id in record_ids:
            record = self.load(record_id)
            if record is not None:
                records.append(record)
        return records

    def create(self, record_type: str | None = None, values: Mapping[str, Any] | None = None) -> Record | None:
        """Create a record and let contributors persist their fields.

        Returns ``None`` when the index store rejects the new row, in which
        case nothing is broadcast and the id counter is not advanced.
        """
        if record_type is not None and not isinstance(record_type, str):
            raise RecordValidationError(f"record type must be a string, got {type(record_type).__name__}")
        if self._config.require_type and not record_type:
            raise RecordValidationError("record type is required")

        new_values = strip_reserved(values)

        def _persist(candidate: int) -> bool:
            return self._store.create(Record(id=candidate, type=record_type).index_row())

        record_id = self._counter.allocate(self._config.counter_key, _persist)
        if record_id is None:
            _logger.warning("Index store rejected new %s record", record_type or "untyped")
            return None

        _logger.debug("Created %s record %d: %s", record_type or "untyped", record_id, redact_for_log(new_values))
        record = Record(id=record_id, type=record_type, data=copy.deepcopy(new_values))
        folded = self._broadcast(RecordTopic.CREATED, record, new_values)
        if self._config.reload_after_write:
            return self.load(record_id)
        return folded

    def update(self, record_id: int, values: Mapping[str, Any] | None = None) -> Record | None:
        """Broadcast new field values for an existing record.

        The index store is never written; contributors persist their own
        fields.
        """
        row = self._fetch_row(record_id)
        if row is None:
            _logger.debug("update(%s): not in index", record_id)
            return None

        new_values = strip_reserved(values)
        record = Record.from_row(row)
        record.data.update(copy.deepcopy(new_values))
        _logger.debug("Updating record %s: %s", record_id, redact_for_log(new_values))
        folded = self._broadcast(RecordTopic.UPDATED, record, new_values)
        if self._config.reload_after_write:
            return self.load(record_id)
        return folded

    def delete(self, record_id: int) -> bool:
        """Remove the index row, then tell contributors to drop their data."""
        row = self._fetch_row(record_id)
        if row is None:
            _logger.debug("delete(%s): not in index", record_id)
            return False
        if not self._store.destroy(row):
            _logger.warning("Index store refused to delete record %s", record_id)
            return False
        self._hooks.publish(
            RecordTopic.DELETED,
            row[ID_FIELD],
            isolate_errors=self._config.isolate_listener_errors,
        )
        return True

    # ------------------------------------------------------------------
    # Federated query
    # ------------------------------------------------------------------

    def query(
        self,
        criteria: Mapping[str, Any] | None = None,
        combine: CombineMode | str | None = None,
        sort_field: str | None = None,
        sort_order: SortOrder | str = SortOrder.ASC,
    ) -> list[Record]:
        """Find records matching *criteria* across the index and contributors.

        Parameters
        ----------
        criteria : mapping
            Field/value equality predicates.
        combine : CombineMode or str
            ``OR`` keeps everything any source matched; ``AND`` keeps
            records equal on every criteria field. Defaults to
            ``config.default_combine``.
        sort_field : str or None
            Field to sort the loaded records on.
        sort_order : SortOrder or str
            ``asc`` or ``desc``.
        """
        options = QueryOptions(
            combine=combine if combine is not None else self._config.default_combine,
            sort_field=sort_field,
            sort_order=sort_order,
        )
        criteria = dict(criteria or {})

        rows: list[dict[str, Any]] = []
        index_criteria = split_criteria(criteria, self._store.schema_fields())
        if index_criteria:
            rows.extend(self._store.query(index_criteria))

        deliveries = self._hooks.publish(
            RecordTopic.QUERY,
            copy.deepcopy(criteria),
            isolate_errors=self._config.isolate_listener_errors,
        )
        for delivery in deliveries:
            rows.extend(query_rows(delivery, RecordTopic.QUERY))

        candidates = filter_candidates(reconcile_by_id(rows), criteria, options.combine)

        records: list[Record] = []
        for candidate in candidates:
            record = self.load(candidate[ID_FIELD])
            if record is None:
                _logger.warning("Query matched id %s which is not in the index; dropping it", candidate[ID_FIELD])
                continue
            records.append(record)

        _logger.debug(
            "query(%s, %s) -> %d record(s)",
            redact_for_log(criteria),
            options.combine,
            len(records),
        )
        return sort_records(records, options.sort_field, options.sort_order)
