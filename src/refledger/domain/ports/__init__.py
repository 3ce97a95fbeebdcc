"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FeedFetcher, FeedParser
from .snapshots import SnapshotCache
from .store import Filters, RemoteStore, Row, is_multi_value

__all__ = [
    "FeedFetcher",
    "FeedParser",
    "Filters",
    "RemoteStore",
    "Row",
    "SnapshotCache",
    "is_multi_value",
]
