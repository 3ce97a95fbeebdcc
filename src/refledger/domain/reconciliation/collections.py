"""Registry of the snapshot collections the store knows about.

Each entry ties a ``Snapshot`` attribute to its table and row mapping. The two
ordering tuples encode the foreign-key dependencies between tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, cast

from . import rows

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from refledger.domain.model import Identified, Snapshot
    from refledger.domain.ports import Row

SETTINGS_TABLE: Final[str] = "user_settings"
FEEDS_TABLE: Final[str] = "calendar_feeds"


@dataclass(frozen=True, slots=True)
class CollectionSpec:
    name: str
    table: str
    to_row: Callable[[Any, str], Row]
    from_row: Callable[[Mapping[str, Any]], Any]
    link_column: str | None = None

    def records(self, snapshot: Snapshot) -> list[Identified]:
        return cast("list[Identified]", getattr(snapshot, self.name))

    def rows_for(self, records: list[Identified], user_id: str) -> list[Row]:
        return [self.to_row(record, user_id) for record in records]


GAMES = CollectionSpec(
    name="games",
    table="games",
    to_row=rows.game_to_row,
    from_row=rows.row_to_game,
    link_column=rows.GAME_LINK_COLUMN,
)
CALENDAR_EVENTS = CollectionSpec(
    name="calendar_events",
    table="calendar_events",
    to_row=rows.calendar_event_to_row,
    from_row=rows.row_to_calendar_event,
    link_column=rows.EVENT_LINK_COLUMN,
)
EXPENSES = CollectionSpec(
    name="expenses",
    table="expenses",
    to_row=rows.expense_to_row,
    from_row=rows.row_to_expense,
)
REQUIREMENT_DEFINITIONS = CollectionSpec(
    name="requirement_definitions",
    table="requirement_definitions",
    to_row=rows.requirement_definition_to_row,
    from_row=rows.row_to_requirement_definition,
)
REQUIREMENT_INSTANCES = CollectionSpec(
    name="requirement_instances",
    table="requirement_instances",
    to_row=rows.requirement_instance_to_row,
    from_row=rows.row_to_requirement_instance,
)
REQUIREMENT_ACTIVITIES = CollectionSpec(
    name="requirement_activities",
    table="requirement_activities",
    to_row=rows.requirement_activity_to_row,
    from_row=rows.row_to_requirement_activity,
)
CSV_IMPORTS = CollectionSpec(
    name="csv_imports",
    table="csv_imports",
    to_row=rows.csv_import_to_row,
    from_row=rows.row_to_csv_import,
)
CSV_IMPORT_ROWS = CollectionSpec(
    name="csv_import_rows",
    table="csv_import_rows",
    to_row=rows.csv_import_row_to_row,
    from_row=rows.row_to_csv_import_row,
)

COLLECTIONS: Final[tuple[CollectionSpec, ...]] = (
    GAMES,
    CALENDAR_EVENTS,
    EXPENSES,
    REQUIREMENT_DEFINITIONS,
    REQUIREMENT_INSTANCES,
    REQUIREMENT_ACTIVITIES,
    CSV_IMPORTS,
    CSV_IMPORT_ROWS,
)

# dependents first
DELETE_ORDER: Final[tuple[CollectionSpec, ...]] = (
    CSV_IMPORT_ROWS,
    CSV_IMPORTS,
    REQUIREMENT_ACTIVITIES,
    REQUIREMENT_INSTANCES,
    EXPENSES,
    CALENDAR_EVENTS,
    GAMES,
    REQUIREMENT_DEFINITIONS,
)

# written after games and calendar events, owners first
DEPENDENT_UPSERT_ORDER: Final[tuple[CollectionSpec, ...]] = (
    REQUIREMENT_DEFINITIONS,
    REQUIREMENT_INSTANCES,
    REQUIREMENT_ACTIVITIES,
    EXPENSES,
    CSV_IMPORTS,
    CSV_IMPORT_ROWS,
)
