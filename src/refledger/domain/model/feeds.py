"""Calendar feed subscriptions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Final
from urllib.parse import urlsplit

from refledger.domain.model.entity import TimestampedRecord
from refledger.domain.model.enums import FeedPlatform, Sport


@dataclass(slots=True, kw_only=True)
class CalendarFeed(TimestampedRecord):
    """A remote subscription. ``feed_url`` stays inside the core."""

    user_id: str
    platform: FeedPlatform
    name: str
    feed_url: str = field(repr=False)
    enabled: bool = True
    sport: Sport | None = None
    default_league: str | None = None
    last_synced_at: datetime | None = None

    def summary(self) -> FeedSummary:
        return FeedSummary(
            id=self.id,
            platform=self.platform,
            name=self.name,
            enabled=self.enabled,
            sport=self.sport,
            default_league=self.default_league,
            last_synced_at=self.last_synced_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
            masked_feed_url=mask_url(self.feed_url),
        )


@dataclass(slots=True, kw_only=True)
class FeedSummary:
    """What callers get to see of a feed."""

    id: str
    platform: FeedPlatform
    name: str
    enabled: bool
    sport: Sport | None
    default_league: str | None
    last_synced_at: datetime | None
    created_at: datetime
    updated_at: datetime
    masked_feed_url: str


def mask_url(url: str) -> str:
    """Reduce a feed URL to ``scheme://host/...`` so tokens never leak."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return "invalid-url"
    if not parts.scheme or not parts.hostname:
        return "invalid-url"
    return f"{parts.scheme}://{parts.hostname}/..."


PLATFORM_FEED_LIMITS: Final[Mapping[FeedPlatform, int]] = MappingProxyType(
    {
        FeedPlatform.DRAGONFLY: 1,
        FeedPlatform.REFQUEST: 8,
    }
)


@dataclass(slots=True, kw_only=True)
class FeedEntry:
    """One calendar entry as read from a feed body.

    ``start``/``end`` are ``date`` values for all-day entries and may be naive
    datetimes for floating local times.
    """

    uid: str
    start: datetime | date
    end: datetime | date | None = None
    all_day: bool = False
    summary: str | None = None
    description: str | None = None
    location: str | None = None
