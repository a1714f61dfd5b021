"""Topics published by the record coordinator."""

from __future__ import annotations

from enum import StrEnum


class RecordTopic(StrEnum):
    """Broadcast topics and the arguments their handlers receive.

    - ``LOADED``: ``(record)`` -> partial record or ``None``
    - ``CREATED``: ``(record, values)`` -> partial record or ``None``
    - ``UPDATED``: ``(record, values)`` -> partial record or ``None``
    - ``DELETED``: ``(record_id)`` -> ignored
    - ``QUERY``: ``(criteria)`` -> iterable of rows or ``None``
    """

    LOADED = "record.loaded"
    CREATED = "record.created"
    UPDATED = "record.updated"
    DELETED = "record.deleted"
    QUERY = "record.query"
