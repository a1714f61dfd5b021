"""Helpers for safe debug logging.

Records carry whatever fields contributors attach to them, which may include
credentials or very large blobs. Payloads go through :func:`redact_for_log`
before they reach a DEBUG log line.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# Compared after lower-casing and dropping "_" / "-".
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "apikey",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
    }
)

_MAX_DEPTH = 20


def is_sensitive_key(key: Any) -> bool:
    normalized = str(key).lower().replace("_", "").replace("-", "")
    return normalized in _SENSITIVE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    # Records log as their flat dict form.
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        value = to_dict()

    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>"
            if is_sensitive_key(k)
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
