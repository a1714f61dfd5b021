"""The record model.

A :class:`Record` keeps the coordinator-owned identity (``id`` and ``type``)
as typed members and every contributor-owned value in :attr:`Record.data`.
Reserved names never appear inside ``data``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyxrecord._constants import ID_FIELD, RESERVED_FIELDS, TYPE_FIELD


class Record(BaseModel):
    """A logical record assembled from the index row and its contributors."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: int = Field(..., frozen=True, description="Index store identifier")
    type: str | None = Field(default=None, frozen=True, description="Record type tag")
    data: dict[str, Any] = Field(default_factory=dict, description="Contributor-owned fields")

    @field_validator("data")
    @classmethod
    def _reject_reserved(cls, value: dict[str, Any]) -> dict[str, Any]:
        clash = RESERVED_FIELDS.intersection(value)
        if clash:
            raise ValueError(f"reserved field(s) not allowed in data: {sorted(clash)}")
        return value

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Record:
        """Build a record from a flat row (``{"id": ..., "type": ..., **fields}``)."""
        return cls(
            id=row[ID_FIELD],
            type=row.get(TYPE_FIELD),
            data={k: v for k, v in row.items() if k not in RESERVED_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a single mapping with ``id`` and ``type`` first."""
        flat: dict[str, Any] = {ID_FIELD: self.id, TYPE_FIELD: self.type}
        flat.update(self.data)
        return flat

    def index_row(self) -> dict[str, Any]:
        """The identity-only row persisted to the index store."""
        return {ID_FIELD: self.id, TYPE_FIELD: self.type}

    def get(self, name: str, default: Any = None) -> Any:
        if name == ID_FIELD:
            return self.id
        if name == TYPE_FIELD:
            return self.type
        return self.data.get(name, default)

    def has(self, name: str) -> bool:
        return name in RESERVED_FIELDS or name in self.data

    def __getitem__(self, name: str) -> Any:
        if not self.has(name):
            raise KeyError(name)
        return self.get(name)
