"""Ports for fetching and reading external calendar data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from refledger.domain.model import FeedEntry


@runtime_checkable
class FeedFetcher(Protocol):
    """Download a feed body in a single attempt.

    Implementations raise ``FeedFetchError`` on transport failure or a
    non-success status.
    """

    async def __call__(self, url: str) -> str: ...


@runtime_checkable
class FeedParser(Protocol):
    """Turn a feed body into entries; raises ``FeedParseError`` on malformed text.

    Entries without a uid or a start are left out.
    """

    def __call__(self, text: str) -> list[FeedEntry]: ...


__all__ = ["FeedFetcher", "FeedParser"]
