"""Index stores and sequence counters.

The coordinator only depends on the :class:`IndexStore` and
:class:`SequenceCounter` protocols; the classes here are ready-made
implementations.
"""

from pyxrecord.store.base import IndexStore, SequenceCounter
from pyxrecord.store.counter import JsonFileCounter, MemoryCounter
from pyxrecord.store.memory import MemoryIndexStore
from pyxrecord.store.sqlite import SqliteIndexStore

__all__ = [
    "IndexStore",
    "JsonFileCounter",
    "MemoryCounter",
    "MemoryIndexStore",
    "SequenceCounter",
    "SqliteIndexStore",
]
