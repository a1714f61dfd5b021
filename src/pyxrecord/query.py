"""Federated query algorithm.

A query is answered by the index store (for the fields it knows) and by
every contributor (for the fields they own). The partial rows are then
reconciled by ``id``, filtered by the combine mode and finally sorted once
the records are fully loaded.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import cmp_to_key
from typing import Any

from pyxrecord._constants import ID_FIELD
from pyxrecord.merge import merge_rows
from pyxrecord.models.query import CombineMode, SortOrder
from pyxrecord.models.record import Record


def split_criteria(criteria: Mapping[str, Any], schema_fields: Iterable[str]) -> dict[str, Any]:
    """The part of *criteria* the index store can answer itself."""
    known = set(schema_fields)
    return {key: value for key, value in criteria.items() if key in known}


def reconcile_by_id(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Group rows by ``id`` and merge each group into one candidate.

    Candidates come out in the order their ``id`` was first seen.
    """
    groups: dict[Any, list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(row[ID_FIELD], []).append(dict(row))
    return [merge_rows(group) for group in groups.values()]


def _strictly_equal(left: Any, right: Any) -> bool:
    # True == 1 and 1 == 1.0 hold in Python; a criterion only matches its own type.
    return type(left) is type(right) and left == right


def matches_all(row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """Strict equality on every criteria key; a missing key never matches."""
    return all(key in row and _strictly_equal(row[key], value) for key, value in criteria.items())


def filter_candidates(
    candidates: list[dict[str, Any]],
    criteria: Mapping[str, Any],
    combine: CombineMode,
) -> list[dict[str, Any]]:
    if combine == CombineMode.OR:
        return candidates
    return [row for row in candidates if matches_all(row, criteria)]


def _compare_on(field: str):
    def _compare(left: Record, right: Record) -> int:
        # Missing or incomparable values express no preference.
        if not left.has(field) or not right.has(field):
            return 0
        a, b = left.get(field), right.get(field)
        try:
            if a < b:
                return -1
            if b < a:
                return 1
        except TypeError:
            return 0
        return 0

    return _compare


def sort_records(records: list[Record], field: str | None, order: SortOrder = SortOrder.ASC) -> list[Record]:
    """Sort loaded records on a single field. Python's sort keeps ties in input order."""
    if not field:
        return list(records)
    return sorted(records, key=cmp_to_key(_compare_on(field)), reverse=order == SortOrder.DESC)
