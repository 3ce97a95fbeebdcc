"""Create, list, update and delete calendar feed subscriptions.

Everything is scoped to the caller's ``user_id``. Validation and the
per-platform limits run before any write. Callers only ever get
``FeedSummary`` values back, so a stored feed URL never leaves this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit, urlunsplit

from refledger.domain.errors import FeedLimitError, FeedNotFoundError, FeedValidationError
from refledger.domain.model import (
    PLATFORM_FEED_LIMITS,
    CalendarFeed,
    FeedPlatform,
    Sport,
    new_id,
    utcnow,
)
from refledger.domain.reconciliation.collections import FEEDS_TABLE
from refledger.domain.reconciliation.rows import feed_to_row, row_to_feed

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from refledger.domain.model import FeedSummary
    from refledger.domain.ports import RemoteStore


log = getLogger(__name__)


class Unset(Enum):
    """Marker for update fields the caller did not supply."""

    UNSET = "unset"


UNSET: Final = Unset.UNSET


@dataclass(slots=True, kw_only=True)
class FeedCreate:
    platform: str
    name: str
    feed_url: str
    enabled: bool = True
    sport: str | None = None
    default_league: str | None = None


@dataclass(slots=True, kw_only=True)
class FeedUpdate:
    platform: str | Unset = UNSET
    name: str | Unset = UNSET
    feed_url: str | Unset = UNSET
    enabled: bool | Unset = UNSET
    sport: str | None | Unset = UNSET
    default_league: str | None | Unset = UNSET


def validate_platform(value: object) -> FeedPlatform:
    try:
        return FeedPlatform(value)
    except ValueError:
        raise FeedValidationError("platform must be RefQuest or DragonFly") from None


def validate_feed_url(value: object) -> str:
    raw = str(value or "").strip()
    if not raw:
        raise FeedValidationError("feed_url is required")
    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
    except ValueError:
        raise FeedValidationError("feed_url must be a valid URL") from None
    if parts.scheme.lower() not in {"http", "https"}:
        raise FeedValidationError("feed_url must be http(s)")
    if not hostname:
        raise FeedValidationError("feed_url must be a valid URL")
    return urlunsplit(parts._replace(path=parts.path or "/"))


def validate_name(value: object, *, required: bool = True) -> str:
    name = str(value or "").strip()
    if not name:
        raise FeedValidationError("name is required" if required else "name cannot be blank")
    return name


def normalize_sport(value: object) -> Sport | None:
    """Unknown sports mean "infer per entry"."""
    try:
        return Sport(value)
    except ValueError:
        return None


def normalize_league(value: object) -> str | None:
    return str(value or "").strip() or None


async def _enforce_platform_limit(
    store: RemoteStore,
    user_id: str,
    platform: FeedPlatform,
    *,
    exclude_id: str | None = None,
    limits: Mapping[FeedPlatform, int] = PLATFORM_FEED_LIMITS,
) -> None:
    rows = await store.select(FEEDS_TABLE, {"user_id": user_id, "platform": platform.value})
    count = sum(1 for row in rows if row["id"] != exclude_id)
    limit = limits[platform]
    if count >= limit:
        noun = "feed URL" if limit == 1 else "feed URLs"
        qualifier = "only" if limit == 1 else "at most"
        raise FeedLimitError(f"{platform.value} supports {qualifier} {limit} {noun}")


async def _get_feed(store: RemoteStore, user_id: str, feed_id: str) -> CalendarFeed:
    rows = await store.select(FEEDS_TABLE, {"user_id": user_id, "id": feed_id})
    if not rows:
        raise FeedNotFoundError("Feed not found")
    return row_to_feed(rows[0])


async def list_feeds(store: RemoteStore, user_id: str) -> list[FeedSummary]:
    """Summaries of the scope's feeds ordered by platform, then creation time."""

    feeds = [row_to_feed(row) for row in await store.select(FEEDS_TABLE, {"user_id": user_id})]
    feeds.sort(key=lambda feed: (feed.platform.value, feed.created_at))
    return [feed.summary() for feed in feeds]


async def create_feed(
    store: RemoteStore,
    user_id: str,
    request: FeedCreate,
    *,
    limits: Mapping[FeedPlatform, int] = PLATFORM_FEED_LIMITS,
    now: datetime | None = None,
) -> FeedSummary:
    platform = validate_platform(request.platform)
    await _enforce_platform_limit(store, user_id, platform, limits=limits)
    name = validate_name(request.name)
    feed_url = validate_feed_url(request.feed_url)

    now = now or utcnow()
    feed = CalendarFeed(
        id=new_id(),
        user_id=user_id,
        platform=platform,
        name=name,
        feed_url=feed_url,
        enabled=request.enabled,
        sport=normalize_sport(request.sport),
        default_league=normalize_league(request.default_league),
        created_at=now,
        updated_at=now,
    )
    await store.insert(FEEDS_TABLE, [feed_to_row(feed)])
    log.info("Created %s feed %s for %s", platform.value, feed.id, user_id)
    return feed.summary()


async def update_feed(
    store: RemoteStore,
    user_id: str,
    feed_id: str,
    request: FeedUpdate,
    *,
    limits: Mapping[FeedPlatform, int] = PLATFORM_FEED_LIMITS,
    now: datetime | None = None,
) -> FeedSummary:
    feed = await _get_feed(store, user_id, feed_id)

    platform = (
        feed.platform if request.platform is UNSET else validate_platform(request.platform)
    )
    await _enforce_platform_limit(store, user_id, platform, exclude_id=feed.id, limits=limits)

    feed.platform = platform
    if request.name is not UNSET:
        feed.name = validate_name(request.name, required=False)
    if request.feed_url is not UNSET:
        feed.feed_url = validate_feed_url(request.feed_url)
    if request.enabled is not UNSET:
        feed.enabled = bool(request.enabled)
    if request.sport is not UNSET:
        feed.sport = normalize_sport(request.sport)
    if request.default_league is not UNSET:
        feed.default_league = normalize_league(request.default_league)
    feed.updated_at = now or utcnow()

    patch = feed_to_row(feed)
    for column in ("id", "user_id", "created_at", "last_synced_at"):
        patch.pop(column)
    await store.update(FEEDS_TABLE, patch, {"user_id": user_id, "id": feed.id})
    log.info("Updated feed %s for %s", feed.id, user_id)
    return feed.summary()


async def delete_feed(store: RemoteStore, user_id: str, feed_id: str) -> None:
    """Remove a feed; records it already produced stay in place."""

    feed_id = feed_id.strip()
    if not feed_id:
        raise FeedValidationError("id is required")
    await store.delete(FEEDS_TABLE, {"user_id": user_id, "id": feed_id})
    log.info("Deleted feed %s for %s", feed_id, user_id)
