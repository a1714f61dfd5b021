"""Synchronous publish/subscribe registry.

Handlers are called in registration order. That order decides which
contributor wins when two of them return the same field, so it has to be
deterministic for ``load`` to be idempotent.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pyxrecord.exceptions import ListenerError

_logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


def handler_name(handler: Handler) -> str:
    """Readable name for logs and error messages."""
    module = getattr(handler, "__module__", None)
    qualname = getattr(handler, "__qualname__", None)
    if qualname is None:
        return repr(handler)
    return f"{module}.{qualname}" if module else qualname


@dataclass(slots=True)
class Delivery:
    """Outcome of calling one handler during a publish round."""

    handler: Handler
    result: Any = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class HookRegistry:
    """Ordered, synchronous topic -> handlers registry.

    Usage::

        hooks = HookRegistry()

        @hooks.on(RecordTopic.LOADED)
        def add_title(record):
            return {"title": titles.get(record.id)}
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> Handler:
        """Register *handler* for *topic*. Registering the same handler twice is a no-op."""
        with self._lock:
            handlers = self._handlers.setdefault(str(topic), [])
            if handler not in handlers:
                handlers.append(handler)
        return handler

    def on(self, topic: str) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`subscribe`."""

        def _register(handler: Handler) -> Handler:
            return self.subscribe(topic, handler)

        return _register

    def unsubscribe(self, topic: str, handler: Handler) -> bool:
        with self._lock:
            handlers = self._handlers.get(str(topic))
            if not handlers or handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def listeners(self, topic: str) -> tuple[Handler, ...]:
        with self._lock:
            return tuple(self._handlers.get(str(topic), ()))

    def publish(self, topic: str, *args: Any, isolate_errors: bool = True) -> list[Delivery]:
        """Call every handler of *topic* with *args*, in registration order.

        With *isolate_errors* a raising handler is logged and reported as a
        failed :class:`Delivery`; the remaining handlers still run. Without it
        the first failure is raised as :class:`ListenerError`.
        """
        deliveries: list[Delivery] = []
        # Snapshot so handlers may (un)subscribe while a round is running.
        for handler in self.listeners(topic):
            try:
                result = handler(*args)
            except Exception as exc:
                name = handler_name(handler)
                if not isolate_errors:
                    raise ListenerError(
                        f"listener {name} failed on {topic}: {exc}",
                        topic=str(topic),
                        handler=name,
                    ) from exc
                _logger.exception("Listener %s failed on %s; ignoring its contribution", name, topic)
                deliveries.append(Delivery(handler=handler, error=exc))
                continue
            deliveries.append(Delivery(handler=handler, result=result))
        return deliveries

    def clear(self, topic: str | None = None) -> None:
        with self._lock:
            if topic is None:
                self._handlers.clear()
            else:
                self._handlers.pop(str(topic), None)
