"""Publish/subscribe layer used to reach record contributors."""

from pyxrecord.hooks.registry import Delivery, Handler, HookRegistry
from pyxrecord.hooks.topics import RecordTopic

__all__ = [
    "Delivery",
    "Handler",
    "HookRegistry",
    "RecordTopic",
]
