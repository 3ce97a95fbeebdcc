"""Officiating assignments and the calendar entries that place them.

``Game.calendar_event_id`` and ``CalendarEvent.linked_game_id`` form a circular
reference: both are absent, or each points back at the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time

from refledger.domain.model.entity import TimestampedRecord
from refledger.domain.model.enums import (
    CompetitionLevel,
    EventSource,
    EventStatus,
    EventType,
    GameStatus,
    Role,
    Sport,
)


@dataclass(slots=True, kw_only=True)
class Game(TimestampedRecord):
    sport: Sport
    competition_level: CompetitionLevel
    game_date: date
    location_address: str
    status: GameStatus = GameStatus.SCHEDULED

    league: str | None = None
    level_detail: str | None = None
    role: Role | None = None
    start_time: time | None = None

    distance_miles: float | None = None
    roundtrip_miles: float | None = None

    game_fee: float | None = None
    paid_confirmed: bool = False
    paid_date: date | None = None

    home_team: str | None = None
    away_team: str | None = None
    notes: str | None = None

    platform_confirmations: dict[str, bool] = field(default_factory=dict[str, bool])
    calendar_event_id: str | None = None


@dataclass(slots=True, kw_only=True)
class CalendarEvent(TimestampedRecord):
    event_type: EventType
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    timezone: str
    source: EventSource = EventSource.MANUAL
    status: EventStatus = EventStatus.SCHEDULED

    location_address: str | None = None
    notes: str | None = None
    external_ref: str | None = None

    platform_confirmations: dict[str, bool] = field(default_factory=dict[str, bool])
    linked_game_id: str | None = None

    def __post_init__(self) -> None:
        # (user_id, external_ref) is unique; a blank reference means none
        if not self.external_ref:
            self.external_ref = None
