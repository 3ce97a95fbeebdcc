"""Table definitions for the remote store.

Column names match the row dictionaries produced by
``refledger.domain.reconciliation.rows``. Enumerated values are stored as
their display strings.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Time,
    TypeDecorator,
    UniqueConstraint,
)

ID_LENGTH: Final[int] = 36
LABEL_LENGTH: Final[int] = 32


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _id_column() -> Column[str]:
    return Column("id", String(ID_LENGTH), primary_key=True)


def _user_column() -> Column[str]:
    return Column("user_id", String(ID_LENGTH), nullable=False, index=True)


def _timestamps() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    )


user_settings_table = Table(
    "user_settings",
    metadata,
    Column("user_id", String(ID_LENGTH), primary_key=True),
    Column("home_address", Text, nullable=False),
    Column("assigning_platforms", JSON, nullable=False),
    Column("leagues", JSON, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

# games.calendar_event_id and calendar_events.linked_game_id reference each
# other; both sides null out when the target row goes away.
games_table = Table(
    "games",
    metadata,
    _id_column(),
    _user_column(),
    Column("sport", String(LABEL_LENGTH), nullable=False),
    Column("competition_level", String(LABEL_LENGTH), nullable=False),
    Column("league", String, nullable=True),
    Column("level_detail", String, nullable=True),
    Column("game_date", Date, nullable=False),
    Column("start_time", Time, nullable=True),
    Column("location_address", Text, nullable=False),
    Column("distance_miles", Float, nullable=True),
    Column("roundtrip_miles", Float, nullable=True),
    Column("role", String(LABEL_LENGTH), nullable=True),
    Column("status", String(LABEL_LENGTH), nullable=False),
    Column("game_fee", Float, nullable=True),
    Column("paid_confirmed", Boolean, nullable=False, default=False),
    Column("paid_date", Date, nullable=True),
    Column("home_team", String, nullable=True),
    Column("away_team", String, nullable=True),
    Column("notes", Text, nullable=True),
    Column("platform_confirmations", JSON, nullable=False),
    Column(
        "calendar_event_id",
        String(ID_LENGTH),
        ForeignKey("calendar_events.id", use_alter=True, ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    *_timestamps(),
)

calendar_events_table = Table(
    "calendar_events",
    metadata,
    _id_column(),
    _user_column(),
    Column("event_type", String(LABEL_LENGTH), nullable=False),
    Column("title", String, nullable=False),
    Column("start_ts", UTCDateTime(), nullable=False),
    Column("end_ts", UTCDateTime(), nullable=False),
    Column("all_day", Boolean, nullable=False, default=False),
    Column("timezone", String(64), nullable=False),
    Column("location_address", Text, nullable=True),
    Column("notes", Text, nullable=True),
    Column("source", String(LABEL_LENGTH), nullable=False),
    Column("external_ref", String, nullable=True),
    Column("status", String(LABEL_LENGTH), nullable=False),
    Column(
        "linked_game_id",
        String(ID_LENGTH),
        ForeignKey("games.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("platform_confirmations", JSON, nullable=False),
    *_timestamps(),
    UniqueConstraint("user_id", "external_ref"),
)

expenses_table = Table(
    "expenses",
    metadata,
    _id_column(),
    _user_column(),
    Column("expense_date", Date, nullable=False),
    Column("amount", Float, nullable=False),
    Column("category", String(LABEL_LENGTH), nullable=False),
    Column("vendor", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("tax_deductible", Boolean, nullable=False),
    Column(
        "game_id",
        String(ID_LENGTH),
        ForeignKey("games.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("miles", Float, nullable=True),
    Column("notes", Text, nullable=True),
    *_timestamps(),
)

requirement_definitions_table = Table(
    "requirement_definitions",
    metadata,
    _id_column(),
    _user_column(),
    Column("name", String, nullable=False),
    Column("governing_body", String, nullable=True),
    Column("sport", String(LABEL_LENGTH), nullable=True),
    Column("competition_level", String(LABEL_LENGTH), nullable=True),
    Column("frequency", String(LABEL_LENGTH), nullable=False),
    Column("required_count", Integer, nullable=True),
    Column("evidence_type", String(LABEL_LENGTH), nullable=False),
    Column("notes", Text, nullable=True),
    *_timestamps(),
)

requirement_instances_table = Table(
    "requirement_instances",
    metadata,
    _id_column(),
    _user_column(),
    Column(
        "definition_id",
        String(ID_LENGTH),
        ForeignKey("requirement_definitions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("season_name", String, nullable=True),
    Column("year", Integer, nullable=True),
    Column("due_date", Date, nullable=True),
    Column("status", String(LABEL_LENGTH), nullable=False),
    Column("completed_date", Date, nullable=True),
    Column("completion_notes", Text, nullable=True),
    *_timestamps(),
)

requirement_activities_table = Table(
    "requirement_activities",
    metadata,
    _id_column(),
    _user_column(),
    Column(
        "instance_id",
        String(ID_LENGTH),
        ForeignKey("requirement_instances.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("activity_date", Date, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("result", String, nullable=True),
    Column("evidence_link", String, nullable=True),
    Column("notes", Text, nullable=True),
    *_timestamps(),
)

csv_imports_table = Table(
    "csv_imports",
    metadata,
    _id_column(),
    _user_column(),
    Column("import_type", String(LABEL_LENGTH), nullable=False),
    Column("file_name", String, nullable=False),
    Column("imported_at", UTCDateTime(), nullable=False),
    Column("row_count", Integer, nullable=False),
    Column("notes", Text, nullable=True),
)

csv_import_rows_table = Table(
    "csv_import_rows",
    metadata,
    _id_column(),
    _user_column(),
    Column(
        "import_id",
        String(ID_LENGTH),
        ForeignKey("csv_imports.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("row_number", Integer, nullable=False),
    Column("raw_json", JSON, nullable=False),
    Column("status", String(LABEL_LENGTH), nullable=False),
    Column("error_message", Text, nullable=True),
    Column(
        "created_calendar_event_id",
        String(ID_LENGTH),
        ForeignKey("calendar_events.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "created_game_id",
        String(ID_LENGTH),
        ForeignKey("games.id", ondelete="SET NULL"),
        nullable=True,
    ),
)

calendar_feeds_table = Table(
    "calendar_feeds",
    metadata,
    _id_column(),
    _user_column(),
    Column("platform", String(LABEL_LENGTH), nullable=False),
    Column("name", String, nullable=False),
    Column("feed_url", Text, nullable=False),
    Column("enabled", Boolean, nullable=False, default=True),
    Column("sport", String(LABEL_LENGTH), nullable=True),
    Column("default_league", String, nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=True),
    *_timestamps(),
)

Index(
    "ix_calendar_feeds_user_platform",
    calendar_feeds_table.c.user_id,
    calendar_feeds_table.c.platform,
)

TABLES: Final[dict[str, Table]] = dict(metadata.tables)
