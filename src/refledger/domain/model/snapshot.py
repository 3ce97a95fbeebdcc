"""The complete set of one scope's records at a point in time."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from refledger.domain.model.games import CalendarEvent, Game
from refledger.domain.model.records import (
    CsvImport,
    CsvImportRow,
    Expense,
    RequirementActivity,
    RequirementDefinition,
    RequirementInstance,
)
from refledger.domain.model.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(slots=True, kw_only=True)
class Snapshot:
    settings: Settings = field(default_factory=Settings)
    games: list[Game] = field(default_factory=list[Game])
    calendar_events: list[CalendarEvent] = field(default_factory=list[CalendarEvent])
    expenses: list[Expense] = field(default_factory=list[Expense])
    requirement_definitions: list[RequirementDefinition] = field(
        default_factory=list[RequirementDefinition]
    )
    requirement_instances: list[RequirementInstance] = field(
        default_factory=list[RequirementInstance]
    )
    requirement_activities: list[RequirementActivity] = field(
        default_factory=list[RequirementActivity]
    )
    csv_imports: list[CsvImport] = field(default_factory=list[CsvImport])
    csv_import_rows: list[CsvImportRow] = field(default_factory=list[CsvImportRow])

    def copy(self) -> Snapshot:
        """Shallow copy with fresh collection lists."""
        return replace(
            self,
            settings=replace(
                self.settings,
                assigning_platforms=list(self.settings.assigning_platforms),
                leagues=list(self.settings.leagues),
            ),
            games=list(self.games),
            calendar_events=list(self.calendar_events),
            expenses=list(self.expenses),
            requirement_definitions=list(self.requirement_definitions),
            requirement_instances=list(self.requirement_instances),
            requirement_activities=list(self.requirement_activities),
            csv_imports=list(self.csv_imports),
            csv_import_rows=list(self.csv_import_rows),
        )

    def link_violations(self) -> list[str]:
        """Describe every Game <-> CalendarEvent link that does not point back."""

        return find_link_violations(self.games, self.calendar_events)


def find_link_violations(
    games: Sequence[Game],
    calendar_events: Sequence[CalendarEvent],
) -> list[str]:
    games_by_id = {game.id: game for game in games}
    events_by_id = {event.id: event for event in calendar_events}
    problems: list[str] = []

    for game in games:
        if game.calendar_event_id is None:
            continue
        event = events_by_id.get(game.calendar_event_id)
        if event is None:
            problems.append(f"game {game.id} links to missing event {game.calendar_event_id}")
        elif event.linked_game_id != game.id:
            problems.append(
                f"game {game.id} links to event {event.id}, "
                f"which links to {event.linked_game_id}"
            )

    for event in calendar_events:
        if event.linked_game_id is None:
            continue
        game = games_by_id.get(event.linked_game_id)
        if game is None:
            problems.append(f"event {event.id} links to missing game {event.linked_game_id}")
        elif game.calendar_event_id != event.id:
            problems.append(
                f"event {event.id} links to game {game.id}, "
                f"which links to {game.calendar_event_id}"
            )

    return problems
