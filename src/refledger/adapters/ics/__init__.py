"""iCalendar feed adapters."""

from __future__ import annotations

from .fetcher import HttpFeedFetcher
from .parser import parse_feed_entries, translate_event
from .schema import IcsEvent

__all__ = [
    "HttpFeedFetcher",
    "IcsEvent",
    "parse_feed_entries",
    "translate_event",
]
