"""Error types raised by the reconciliation and ingestion core."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Raised by remote store adapters when a read or write fails."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


class ReconciliationError(RuntimeError):
    """A reconciliation call aborted; names the failing step and table."""

    def __init__(self, step: str, table: str, cause: BaseException) -> None:
        super().__init__(f"{step} {table}: {cause}")
        self.step = step
        self.table = table


class FeedFetchError(RuntimeError):
    """The feed could not be downloaded (network failure or non-success status)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedParseError(ValueError):
    """The feed body is not a readable calendar."""


class FeedValidationError(ValueError):
    """A feed create/update request carried invalid values."""


class FeedLimitError(FeedValidationError):
    """The scope already holds the maximum number of feeds for a platform."""


class FeedNotFoundError(LookupError):
    """No feed with the requested id exists in the caller's scope."""
