"""Merge protocol fold helpers.

This is the only component allowed to fold contributor output into a
record. Semantics are field-level overwrite: keys in a contribution replace
the same keys on the record, keys it does not mention are left alone. When
two contributors return the same field the later one in delivery order wins.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from pyxrecord._constants import RESERVED_FIELDS
from pyxrecord._redact import redact_for_log
from pyxrecord.models.record import Record

_logger = logging.getLogger(__name__)


def strip_reserved(values: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop caller-supplied ``id``/``type`` keys. Not an error, only logged."""
    if not values:
        return {}
    discarded = RESERVED_FIELDS.intersection(values)
    if discarded:
        _logger.debug("Discarding reserved field(s) %s from caller values", sorted(discarded))
    return {k: v for k, v in values.items() if k not in RESERVED_FIELDS}


def merge_patch(target: dict[str, Any], patch: Mapping[str, Any]) -> list[str]:
    """Apply *patch* onto *target* and return the keys whose value changed."""
    changed = [key for key, value in patch.items() if key in target and target[key] != value]
    target.update(copy.deepcopy(dict(patch)))
    return changed


def fold_into(record: Record, contribution: Mapping[str, Any], *, source: str = "") -> Record:
    """Merge one contribution into *record* in place.

    Reserved keys in the contribution are ignored: identity belongs to the
    index store.
    """
    patch = strip_reserved(contribution)
    if not patch:
        return record
    overwritten = merge_patch(record.data, patch)
    if overwritten:
        _logger.debug(
            "Contribution from %s overwrote %s on record %s",
            source or "<unknown>",
            overwritten,
            record.id,
        )
    _logger.debug("Folded %s into record %s: %s", source or "<unknown>", record.id, redact_for_log(patch))
    return record


def merge_rows(rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Field-merge rows that describe the same record; later rows win."""
    merged: dict[str, Any] = {}
    for row in rows:
        merge_patch(merged, row)
    return merged
