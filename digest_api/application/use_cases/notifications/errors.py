"""Exceptions raised while building notification digests."""

from __future__ import annotations


class SummaryError(RuntimeError):
    """Base class for failures that abort a single user's summary."""


class SummarySourceUnavailableError(SummaryError):
    """An activity source could not be queried."""

    def __init__(self, source: str, message: str | None = None) -> None:
        self.source = source
        super().__init__(message or f"Activity source '{source}' is unavailable")


class SummaryPersistenceError(SummaryError):
    """The digest notification could not be stored."""


__all__ = ["SummaryError", "SummaryPersistenceError", "SummarySourceUnavailableError"]
