"""pyxrecord - Extensible records assembled from independent contributors."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyxrecord")
except PackageNotFoundError:
    __version__ = "0+local"
from pyxrecord.config import RecordConfig
from pyxrecord.coordinator import RecordCoordinator
from pyxrecord.exceptions import (
    ContributionError,
    CounterError,
    IndexStoreError,
    ListenerError,
    RecordConfigError,
    RecordError,
    RecordValidationError,
)
from pyxrecord.hooks import HookRegistry, RecordTopic
from pyxrecord.models import CombineMode, QueryOptions, Record, SortOrder
from pyxrecord.store import (
    IndexStore,
    JsonFileCounter,
    MemoryCounter,
    MemoryIndexStore,
    SequenceCounter,
    SqliteIndexStore,
)

__all__ = [
    "__version__",
    "CombineMode",
    "ContributionError",
    "CounterError",
    "HookRegistry",
    "IndexStore",
    "IndexStoreError",
    "JsonFileCounter",
    "ListenerError",
    "MemoryCounter",
    "MemoryIndexStore",
    "QueryOptions",
    "Record",
    "RecordConfig",
    "RecordConfigError",
    "RecordCoordinator",
    "RecordError",
    "RecordTopic",
    "RecordValidationError",
    "SequenceCounter",
    "SortOrder",
]
