"""Pydantic models for records and query options."""

from pyxrecord.models.query import CombineMode, QueryOptions, SortOrder
from pyxrecord.models.record import Record

__all__ = [
    "CombineMode",
    "QueryOptions",
    "Record",
    "SortOrder",
]
