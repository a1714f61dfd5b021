"""Validation of what listeners hand back.

Listener output is checked here, at the protocol boundary, so the merge
and reconciliation code only ever sees well-formed mappings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pyxrecord._constants import ID_FIELD
from pyxrecord.exceptions import ContributionError
from pyxrecord.hooks.registry import Delivery, handler_name
from pyxrecord.models.record import Record


def _error(delivery: Delivery, topic: str, message: str) -> ContributionError:
    name = handler_name(delivery.handler)
    return ContributionError(
        f"{name} returned an invalid contribution for {topic}: {message}",
        topic=str(topic),
        handler=name,
    )


def _as_mapping(delivery: Delivery, topic: str, value: Any) -> dict[str, Any]:
    if isinstance(value, Record):
        return value.to_dict()
    if not isinstance(value, Mapping):
        raise _error(delivery, topic, f"expected a mapping, got {type(value).__name__}")
    for key in value:
        if not isinstance(key, str):
            raise _error(delivery, topic, f"field names must be strings, got {key!r}")
    return dict(value)


def partial_record(delivery: Delivery, topic: str) -> dict[str, Any] | None:
    """Return the partial record carried by *delivery*, or ``None`` for "no change"."""
    if delivery.failed or delivery.result is None:
        return None
    partial = _as_mapping(delivery, topic, delivery.result)
    return partial or None


def query_rows(delivery: Delivery, topic: str) -> list[dict[str, Any]]:
    """Return the rows carried by a query *delivery*.

    A single mapping counts as one row. Every row must carry an integer ``id``.
    """
    if delivery.failed or delivery.result is None:
        return []

    result = delivery.result
    if isinstance(result, (Mapping, Record)):
        items: Iterable[Any] = [result]
    elif isinstance(result, Iterable) and not isinstance(result, (str, bytes, bytearray)):
        items = result
    else:
        raise _error(delivery, topic, f"expected rows, got {type(result).__name__}")

    rows: list[dict[str, Any]] = []
    for item in items:
        row = _as_mapping(delivery, topic, item)
        record_id = row.get(ID_FIELD)
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise _error(delivery, topic, f"row without an integer id: {row!r}")
        rows.append(row)
    return rows
