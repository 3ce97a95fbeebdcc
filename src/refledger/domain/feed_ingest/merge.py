"""Merge normalized feed entries with the records they already produced.

Feed-derived values describe the assignment (when, where, what level). Values a
user maintains by hand (fees, payment, mileage, teams, status) are carried
forward from the existing game untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from refledger.domain.model import (
    CalendarEvent,
    EventSource,
    EventStatus,
    EventType,
    Game,
    GameStatus,
    new_id,
)

if TYPE_CHECKING:
    from datetime import datetime

    from refledger.domain.model import CalendarFeed

    from .normalization import NormalizedEntry


def build_event(
    entry: NormalizedEntry,
    existing: CalendarEvent | None,
    *,
    timezone: str,
    now: datetime,
) -> CalendarEvent:
    return CalendarEvent(
        id=existing.id if existing else new_id(),
        event_type=EventType.GAME,
        title=entry.title,
        start=entry.start,
        end=entry.end,
        all_day=entry.all_day,
        timezone=timezone,
        source=existing.source if existing else EventSource.MANUAL,
        status=EventStatus.SCHEDULED,
        location_address=entry.location,
        notes=entry.notes,
        external_ref=entry.external_ref,
        linked_game_id=existing.linked_game_id if existing else None,
        platform_confirmations=dict(existing.platform_confirmations) if existing else {},
        created_at=existing.created_at if existing else now,
        updated_at=now,
    )


def build_game(
    entry: NormalizedEntry,
    existing: Game | None,
    *,
    feed: CalendarFeed,
    calendar_event_id: str,
    now: datetime,
) -> Game:
    if existing is None:
        return Game(
            id=new_id(),
            sport=entry.sport,
            competition_level=entry.competition_level,
            league=feed.default_league,
            level_detail=entry.level_detail,
            role=entry.role,
            game_date=entry.game_date,
            start_time=entry.start_time,
            location_address=entry.location or "",
            status=GameStatus.SCHEDULED,
            notes=entry.notes,
            calendar_event_id=calendar_event_id,
            created_at=now,
            updated_at=now,
        )

    return Game(
        id=existing.id,
        sport=entry.sport,
        competition_level=entry.competition_level,
        # a league already on the game is never replaced by the feed default
        league=existing.league or feed.default_league,
        level_detail=entry.level_detail or existing.level_detail,
        role=entry.role or existing.role,
        game_date=entry.game_date,
        start_time=entry.start_time or existing.start_time,
        location_address=entry.location or existing.location_address or "",
        distance_miles=existing.distance_miles,
        roundtrip_miles=existing.roundtrip_miles,
        status=existing.status,
        game_fee=existing.game_fee,
        paid_confirmed=existing.paid_confirmed,
        paid_date=existing.paid_date,
        home_team=existing.home_team,
        away_team=existing.away_team,
        notes=entry.notes or existing.notes,
        platform_confirmations=dict(existing.platform_confirmations),
        calendar_event_id=calendar_event_id,
        created_at=existing.created_at,
        updated_at=now,
    )
