"""Turn parsed feed entries into classified, time-resolved values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Final
from zoneinfo import ZoneInfo

from refledger.domain.model import CompetitionLevel, Role, Sport

from .classifier import classify, entry_text

if TYPE_CHECKING:
    from refledger.domain.model import CalendarFeed, FeedEntry

DEFAULT_TIMEZONE: Final[str] = "America/New_York"
DEFAULT_EVENT_DURATION: Final[timedelta] = timedelta(hours=2)
DEFAULT_EVENT_TITLE: Final[str] = "Assigned Game"


@dataclass(frozen=True, slots=True)
class IngestOptions:
    """Local conventions applied while normalizing entries."""

    timezone: str = DEFAULT_TIMEZONE
    default_event_duration: timedelta = DEFAULT_EVENT_DURATION
    default_title: str = DEFAULT_EVENT_TITLE

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True, slots=True)
class NormalizedEntry:
    uid: str
    external_ref: str
    title: str
    location: str | None
    notes: str | None
    start: datetime
    end: datetime
    all_day: bool
    sport: Sport
    competition_level: CompetitionLevel
    level_detail: str | None
    role: Role | None
    game_date: date
    start_time: time | None


def external_ref_for(feed: CalendarFeed, uid: str) -> str:
    """Idempotency key of a feed entry across repeated syncs."""
    return f"{feed.platform.value}:{feed.id}:{uid}"


def trim_or_none(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def to_instant(value: datetime | date, zone: ZoneInfo) -> datetime:
    """Resolve a feed time to a UTC instant.

    Dates mean local midnight; naive datetimes are floating local times.
    """

    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(UTC)


def normalize_entry(
    entry: FeedEntry,
    feed: CalendarFeed,
    options: IngestOptions | None = None,
) -> NormalizedEntry:
    options = options or IngestOptions()
    zone = options.zone

    start = to_instant(entry.start, zone)
    end = (
        to_instant(entry.end, zone)
        if entry.end is not None
        else start + options.default_event_duration
    )
    classification = classify(
        entry_text(entry.summary, entry.description, entry.location),
        platform=feed.platform,
        feed_sport=feed.sport,
    )
    local_start = start.astimezone(zone)

    return NormalizedEntry(
        uid=entry.uid,
        external_ref=external_ref_for(feed, entry.uid),
        title=entry.summary or options.default_title,
        location=trim_or_none(entry.location),
        notes=trim_or_none(entry.description),
        start=start,
        end=end,
        all_day=entry.all_day,
        sport=classification.sport,
        competition_level=classification.competition_level,
        level_detail=classification.level_detail,
        role=classification.role,
        game_date=local_start.date(),
        start_time=None if entry.all_day else local_start.time().replace(second=0, microsecond=0),
    )
