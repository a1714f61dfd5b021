"""Custom exception hierarchy for pyxrecord."""

from __future__ import annotations


class RecordError(Exception):
    """Base exception for all pyxrecord errors."""


class RecordConfigError(RecordError):
    """Invalid or missing configuration."""


class RecordValidationError(RecordError):
    """Caller supplied arguments that can never form a valid record."""


class ContributionError(RecordError):
    """A listener returned data that cannot be folded into a record.

    Raised instead of silently corrupting the merged result, e.g. when a
    ``record.loaded`` handler returns a list or a ``record.query`` handler
    yields a row without an integer ``id``.
    """

    def __init__(
        self,
        message: str,
        *,
        topic: str = "",
        handler: str = "",
    ) -> None:
        self.topic = topic
        self.handler = handler
        super().__init__(message)


class ListenerError(RecordError):
    """A listener raised while handling a broadcast.

    Only raised when listener fault isolation is disabled. The handler's
    exception is available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        topic: str = "",
        handler: str = "",
    ) -> None:
        self.topic = topic
        self.handler = handler
        super().__init__(message)


class IndexStoreError(RecordError):
    """The index store backend failed for a reason other than a rejected write."""


class CounterError(RecordError):
    """The sequence counter could not be read or written."""
