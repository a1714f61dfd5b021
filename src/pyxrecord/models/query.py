"""Query options for the federated record query."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class CombineMode(StrEnum):
    """How partial matches from the index and contributors are combined."""

    AND = "and"
    OR = "or"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class QueryOptions(BaseModel):
    """Combination and ordering options for :meth:`RecordCoordinator.query`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    combine: CombineMode = CombineMode.OR
    sort_field: str | None = None
    sort_order: SortOrder = SortOrder.ASC

    @field_validator("combine", "sort_order", mode="before")
    @classmethod
    def _normalize_enum_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("sort_field")
    @classmethod
    def _blank_sort_field_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        field = value.strip()
        return field or None
