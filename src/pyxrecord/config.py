"""Coordinator configuration for pyxrecord."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyxrecord._constants import DEFAULT_COUNTER_KEY
from pyxrecord.exceptions import RecordConfigError
from pyxrecord.models.query import CombineMode


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RecordConfig:
    """Coordinator configuration.

    Parameters
    ----------
    counter_key : str
        Sequence counter key holding the last assigned record id.
    require_type : bool
        Reject ``create`` calls without a type tag. Disable for untyped
        record collections, in which case ``type`` is stored as ``None``.
    reload_after_write : bool
        Return the result of a fresh ``load`` after ``create``/``update``
        instead of the record folded during the write broadcast. The reload
        guarantees the index store view of ``id``/``type`` and runs the same
        fold as ``load``.
    isolate_listener_errors : bool
        Log and skip a listener that raises instead of aborting the
        operation with :class:`~pyxrecord.exceptions.ListenerError`.
    default_combine : CombineMode
        Combine mode used by ``query`` when none is given.
    """

    counter_key: str = DEFAULT_COUNTER_KEY
    require_type: bool = True
    reload_after_write: bool = True
    isolate_listener_errors: bool = True
    default_combine: CombineMode = CombineMode.OR

    def __post_init__(self) -> None:
        if not self.counter_key or not self.counter_key.strip():
            raise RecordConfigError("counter_key must be non-empty")
        if not isinstance(self.default_combine, CombineMode):
            try:
                combine = CombineMode(str(self.default_combine).strip().lower())
            except ValueError as exc:
                raise RecordConfigError(f"invalid default_combine: {self.default_combine!r}") from exc
            object.__setattr__(self, "default_combine", combine)

    @classmethod
    def from_env(cls, **overrides: Any) -> RecordConfig:
        """Create configuration from ``PYXRECORD_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        counter_key = env.get("PYXRECORD_COUNTER_KEY")
        if counter_key is not None:
            config_kwargs["counter_key"] = counter_key.strip()

        _ENV_BOOL_MAP = {
            "PYXRECORD_REQUIRE_TYPE": ("require_type", True),
            "PYXRECORD_RELOAD_AFTER_WRITE": ("reload_after_write", True),
            "PYXRECORD_ISOLATE_LISTENER_ERRORS": ("isolate_listener_errors", True),
        }
        for env_key, (field_name, default) in _ENV_BOOL_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_bool(val, default)

        combine_env = env.get("PYXRECORD_DEFAULT_COMBINE")
        if combine_env is not None and "default_combine" not in overrides:
            try:
                config_kwargs["default_combine"] = CombineMode(combine_env.strip().lower())
            except ValueError as exc:
                raise RecordConfigError(
                    f"PYXRECORD_DEFAULT_COMBINE must be 'and' or 'or', got {combine_env!r}"
                ) from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
