"""Structural contracts for the collaborators behind the coordinator.

Having protocols here makes it easy to pass test doubles while keeping the
shipped implementations concrete.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol


class IndexStore(Protocol):
    """Authoritative store of record identity (``id`` and ``type`` only)."""

    def query(self, criteria: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Rows whose columns equal every criteria value. Unknown fields are ignored."""
        ...

    def create(self, row: Mapping[str, Any]) -> bool:
        """Insert *row*. Returns ``False`` when the row could not be persisted."""
        ...

    def destroy(self, row: Mapping[str, Any]) -> bool:
        """Remove the row with ``row["id"]``. Returns ``False`` when nothing was removed."""
        ...

    def schema_fields(self) -> set[str]:
        """Names of the columns this store can filter on."""
        ...


class SequenceCounter(Protocol):
    """Persisted monotonic counters keyed by name."""

    def get(self, key: str, default: int = 0) -> int: ...

    def set(self, key: str, value: int) -> None: ...

    def allocate(self, key: str, persist: Callable[[int], bool]) -> int | None:
        """Atomically reserve ``get(key) + 1``.

        *persist* is called with the candidate value while the counter is
        held. The counter only advances when *persist* returns ``True``;
        otherwise ``None`` is returned and the stored value is unchanged.
        """
        ...
