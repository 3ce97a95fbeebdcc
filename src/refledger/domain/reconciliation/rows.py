"""Translation between domain records and storage rows.

This is the only place that knows storage column names. Readers are tolerant
of the shapes different stores hand back (ISO strings for dates and instants,
``Decimal`` for numerics, ``None`` for empty JSON objects).
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any, cast

from refledger.domain.model import (
    CalendarEvent,
    CalendarFeed,
    CompetitionLevel,
    CsvImport,
    CsvImportRow,
    EventSource,
    EventStatus,
    EventType,
    EvidenceType,
    Expense,
    ExpenseCategory,
    FeedPlatform,
    Game,
    GameStatus,
    ImportRowStatus,
    ImportType,
    RequirementActivity,
    RequirementDefinition,
    RequirementFrequency,
    RequirementInstance,
    RequirementStatus,
    Role,
    Settings,
    Sport,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from refledger.domain.ports import Row

GAME_LINK_COLUMN = "calendar_event_id"
EVENT_LINK_COLUMN = "linked_game_id"


# value readers ---------------------------------------------------------------


def as_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Expected a datetime, got {type(value).__name__}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def as_optional_datetime(value: object) -> datetime | None:
    return None if value is None else as_datetime(value)


def as_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def as_optional_date(value: object) -> date | None:
    return None if value in (None, "") else as_date(value)


def as_optional_time(value: object) -> time | None:
    if value in (None, ""):
        return None
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise TypeError(f"Expected a time, got {type(value).__name__}")


def as_optional_float(value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal, str)):
        return float(value)
    raise TypeError(f"Expected a number, got {type(value).__name__}")


def as_optional_int(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, (int, Decimal, str)):
        return int(value)
    raise TypeError(f"Expected an integer, got {type(value).__name__}")


def as_optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def as_flags(value: object) -> dict[str, bool]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"Expected a mapping, got {type(value).__name__}")
    flags = cast("dict[object, object]", value)
    return {str(key): bool(flag) for key, flag in flags.items()}


def _enum_or_any[E: (Sport, CompetitionLevel)](enum_type: type[E], value: object) -> E | str | None:
    if value is None:
        return None
    try:
        return enum_type(value)
    except ValueError:
        return str(value)


# settings --------------------------------------------------------------------


def settings_to_row(settings: Settings, user_id: str, *, updated_at: datetime) -> Row:
    return {
        "user_id": user_id,
        "home_address": settings.home_address,
        "assigning_platforms": list(settings.assigning_platforms),
        "leagues": list(settings.leagues),
        "updated_at": updated_at,
    }


def row_to_settings(row: Mapping[str, Any]) -> Settings:
    defaults = Settings()
    home_address = row.get("home_address")
    return Settings(
        home_address=defaults.home_address if home_address is None else str(home_address),
        assigning_platforms=list(row.get("assigning_platforms") or []),
        leagues=list(row.get("leagues") or []),
    )


# games & calendar events -----------------------------------------------------


def game_to_row(game: Game, user_id: str) -> Row:
    return {
        "id": game.id,
        "user_id": user_id,
        "sport": game.sport.value,
        "competition_level": game.competition_level.value,
        "league": game.league,
        "level_detail": game.level_detail,
        "game_date": game.game_date,
        "start_time": game.start_time,
        "location_address": game.location_address,
        "distance_miles": game.distance_miles,
        "roundtrip_miles": game.roundtrip_miles,
        "role": game.role.value if game.role else None,
        "status": game.status.value,
        "game_fee": game.game_fee,
        "paid_confirmed": game.paid_confirmed,
        "paid_date": game.paid_date,
        "home_team": game.home_team,
        "away_team": game.away_team,
        "notes": game.notes,
        "platform_confirmations": dict(game.platform_confirmations),
        GAME_LINK_COLUMN: game.calendar_event_id,
        "created_at": game.created_at,
        "updated_at": game.updated_at,
    }


def row_to_game(row: Mapping[str, Any]) -> Game:
    return Game(
        id=str(row["id"]),
        sport=Sport(row["sport"]),
        competition_level=CompetitionLevel(row["competition_level"]),
        league=as_optional_str(row.get("league")),
        level_detail=as_optional_str(row.get("level_detail")),
        game_date=as_date(row["game_date"]),
        start_time=as_optional_time(row.get("start_time")),
        location_address=row.get("location_address") or "",
        distance_miles=as_optional_float(row.get("distance_miles")),
        roundtrip_miles=as_optional_float(row.get("roundtrip_miles")),
        role=Role(row["role"]) if row.get("role") else None,
        status=GameStatus(row["status"]),
        game_fee=as_optional_float(row.get("game_fee")),
        paid_confirmed=bool(row.get("paid_confirmed") or False),
        paid_date=as_optional_date(row.get("paid_date")),
        home_team=as_optional_str(row.get("home_team")),
        away_team=as_optional_str(row.get("away_team")),
        notes=as_optional_str(row.get("notes")),
        platform_confirmations=as_flags(row.get("platform_confirmations")),
        calendar_event_id=as_optional_str(row.get(GAME_LINK_COLUMN)),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def calendar_event_to_row(event: CalendarEvent, user_id: str) -> Row:
    return {
        "id": event.id,
        "user_id": user_id,
        "event_type": event.event_type.value,
        "title": event.title,
        "start_ts": event.start,
        "end_ts": event.end,
        "all_day": event.all_day,
        "timezone": event.timezone,
        "location_address": event.location_address,
        "notes": event.notes,
        "source": event.source.value,
        "external_ref": event.external_ref,
        "status": event.status.value,
        EVENT_LINK_COLUMN: event.linked_game_id,
        "platform_confirmations": dict(event.platform_confirmations),
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def row_to_calendar_event(row: Mapping[str, Any]) -> CalendarEvent:
    return CalendarEvent(
        id=str(row["id"]),
        event_type=EventType(row["event_type"]),
        title=str(row["title"]),
        start=as_datetime(row["start_ts"]),
        end=as_datetime(row["end_ts"]),
        all_day=bool(row.get("all_day") or False),
        timezone=str(row["timezone"]),
        location_address=as_optional_str(row.get("location_address")),
        notes=as_optional_str(row.get("notes")),
        source=EventSource(row["source"]),
        external_ref=as_optional_str(row.get("external_ref")),
        status=EventStatus(row["status"]),
        linked_game_id=as_optional_str(row.get(EVENT_LINK_COLUMN)),
        platform_confirmations=as_flags(row.get("platform_confirmations")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


# auxiliary kinds -------------------------------------------------------------


def expense_to_row(expense: Expense, user_id: str) -> Row:
    return {
        "id": expense.id,
        "user_id": user_id,
        "expense_date": expense.expense_date,
        "amount": expense.amount,
        "category": expense.category.value,
        "vendor": expense.vendor,
        "description": expense.description,
        "tax_deductible": expense.tax_deductible,
        "game_id": expense.game_id,
        "miles": expense.miles,
        "notes": expense.notes,
        "created_at": expense.created_at,
        "updated_at": expense.updated_at,
    }


def row_to_expense(row: Mapping[str, Any]) -> Expense:
    return Expense(
        id=str(row["id"]),
        expense_date=as_date(row["expense_date"]),
        amount=float(row["amount"]),
        category=ExpenseCategory(row["category"]),
        vendor=as_optional_str(row.get("vendor")),
        description=as_optional_str(row.get("description")),
        tax_deductible=bool(row.get("tax_deductible")),
        game_id=as_optional_str(row.get("game_id")),
        miles=as_optional_float(row.get("miles")),
        notes=as_optional_str(row.get("notes")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def requirement_definition_to_row(definition: RequirementDefinition, user_id: str) -> Row:
    return {
        "id": definition.id,
        "user_id": user_id,
        "name": definition.name,
        "governing_body": definition.governing_body,
        "sport": None if definition.sport is None else str(definition.sport),
        "competition_level": (
            None
            if definition.competition_level is None
            else str(definition.competition_level)
        ),
        "frequency": definition.frequency.value,
        "required_count": definition.required_count,
        "evidence_type": definition.evidence_type.value,
        "notes": definition.notes,
        "created_at": definition.created_at,
        "updated_at": definition.updated_at,
    }


def row_to_requirement_definition(row: Mapping[str, Any]) -> RequirementDefinition:
    return RequirementDefinition(
        id=str(row["id"]),
        name=str(row["name"]),
        governing_body=as_optional_str(row.get("governing_body")),
        sport=_enum_or_any(Sport, row.get("sport")),
        competition_level=_enum_or_any(CompetitionLevel, row.get("competition_level")),
        frequency=RequirementFrequency(row["frequency"]),
        required_count=as_optional_int(row.get("required_count")),
        evidence_type=EvidenceType(row["evidence_type"]),
        notes=as_optional_str(row.get("notes")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def requirement_instance_to_row(instance: RequirementInstance, user_id: str) -> Row:
    return {
        "id": instance.id,
        "user_id": user_id,
        "definition_id": instance.definition_id,
        "season_name": instance.season_name,
        "year": instance.year,
        "due_date": instance.due_date,
        "status": instance.status.value,
        "completed_date": instance.completed_date,
        "completion_notes": instance.completion_notes,
        "created_at": instance.created_at,
        "updated_at": instance.updated_at,
    }


def row_to_requirement_instance(row: Mapping[str, Any]) -> RequirementInstance:
    return RequirementInstance(
        id=str(row["id"]),
        definition_id=str(row["definition_id"]),
        season_name=as_optional_str(row.get("season_name")),
        year=as_optional_int(row.get("year")),
        due_date=as_optional_date(row.get("due_date")),
        status=RequirementStatus(row["status"]),
        completed_date=as_optional_date(row.get("completed_date")),
        completion_notes=as_optional_str(row.get("completion_notes")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def requirement_activity_to_row(activity: RequirementActivity, user_id: str) -> Row:
    return {
        "id": activity.id,
        "user_id": user_id,
        "instance_id": activity.instance_id,
        "activity_date": activity.activity_date,
        "quantity": activity.quantity,
        "result": activity.result,
        "evidence_link": activity.evidence_link,
        "notes": activity.notes,
        "created_at": activity.created_at,
        "updated_at": activity.updated_at,
    }


def row_to_requirement_activity(row: Mapping[str, Any]) -> RequirementActivity:
    return RequirementActivity(
        id=str(row["id"]),
        instance_id=str(row["instance_id"]),
        activity_date=as_date(row["activity_date"]),
        quantity=int(row["quantity"]),
        result=as_optional_str(row.get("result")),
        evidence_link=as_optional_str(row.get("evidence_link")),
        notes=as_optional_str(row.get("notes")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )


def csv_import_to_row(csv_import: CsvImport, user_id: str) -> Row:
    return {
        "id": csv_import.id,
        "user_id": user_id,
        "import_type": csv_import.import_type.value,
        "file_name": csv_import.file_name,
        "imported_at": csv_import.imported_at,
        "row_count": csv_import.row_count,
        "notes": csv_import.notes,
    }


def row_to_csv_import(row: Mapping[str, Any]) -> CsvImport:
    return CsvImport(
        id=str(row["id"]),
        import_type=ImportType(row["import_type"]),
        file_name=str(row["file_name"]),
        imported_at=as_datetime(row["imported_at"]),
        row_count=int(row["row_count"]),
        notes=as_optional_str(row.get("notes")),
    )


def csv_import_row_to_row(import_row: CsvImportRow, user_id: str) -> Row:
    return {
        "id": import_row.id,
        "user_id": user_id,
        "import_id": import_row.import_id,
        "row_number": import_row.row_number,
        "raw_json": dict(import_row.raw_json),
        "status": import_row.status.value,
        "error_message": import_row.error_message,
        "created_calendar_event_id": import_row.created_calendar_event_id,
        "created_game_id": import_row.created_game_id,
    }


def row_to_csv_import_row(row: Mapping[str, Any]) -> CsvImportRow:
    return CsvImportRow(
        id=str(row["id"]),
        import_id=str(row["import_id"]),
        row_number=int(row["row_number"]),
        raw_json=dict(row.get("raw_json") or {}),
        status=ImportRowStatus(row["status"]),
        error_message=as_optional_str(row.get("error_message")),
        created_calendar_event_id=as_optional_str(row.get("created_calendar_event_id")),
        created_game_id=as_optional_str(row.get("created_game_id")),
    )


# calendar feeds --------------------------------------------------------------


def feed_to_row(feed: CalendarFeed) -> Row:
    return {
        "id": feed.id,
        "user_id": feed.user_id,
        "platform": feed.platform.value,
        "name": feed.name,
        "feed_url": feed.feed_url,
        "enabled": feed.enabled,
        "sport": feed.sport.value if feed.sport else None,
        "default_league": feed.default_league,
        "last_synced_at": feed.last_synced_at,
        "created_at": feed.created_at,
        "updated_at": feed.updated_at,
    }


def row_to_feed(row: Mapping[str, Any]) -> CalendarFeed:
    return CalendarFeed(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        platform=FeedPlatform(row["platform"]),
        name=str(row["name"]),
        feed_url=str(row.get("feed_url") or ""),
        enabled=bool(row.get("enabled")),
        sport=Sport(row["sport"]) if row.get("sport") else None,
        default_league=as_optional_str(row.get("default_league")),
        last_synced_at=as_optional_datetime(row.get("last_synced_at")),
        created_at=as_datetime(row["created_at"]),
        updated_at=as_datetime(row["updated_at"]),
    )
