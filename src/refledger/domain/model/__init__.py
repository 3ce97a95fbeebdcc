"""Public domain model surface."""

from __future__ import annotations

from refledger.domain.model.entity import Identified, Record, TimestampedRecord, new_id, utcnow
from refledger.domain.model.enums import (
    CompetitionLevel,
    EventSource,
    EventStatus,
    EventType,
    EvidenceType,
    ExpenseCategory,
    FeedPlatform,
    GameStatus,
    ImportRowStatus,
    ImportType,
    RequirementFrequency,
    RequirementStatus,
    Role,
    Sport,
)
from refledger.domain.model.feeds import (
    PLATFORM_FEED_LIMITS,
    CalendarFeed,
    FeedEntry,
    FeedSummary,
    mask_url,
)
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
from refledger.domain.model.snapshot import Snapshot, find_link_violations

__all__ = [  # noqa: RUF022
    # base
    "Identified",
    "Record",
    "TimestampedRecord",
    "new_id",
    "utcnow",
    # games
    "Game",
    "CalendarEvent",
    "find_link_violations",
    # feeds
    "CalendarFeed",
    "FeedEntry",
    "PLATFORM_FEED_LIMITS",
    "FeedSummary",
    "mask_url",
    # auxiliary
    "Expense",
    "RequirementDefinition",
    "RequirementInstance",
    "RequirementActivity",
    "CsvImport",
    "CsvImportRow",
    # aggregate
    "Settings",
    "Snapshot",
    # enums
    "CompetitionLevel",
    "EventSource",
    "EventStatus",
    "EventType",
    "EvidenceType",
    "ExpenseCategory",
    "FeedPlatform",
    "GameStatus",
    "ImportRowStatus",
    "ImportType",
    "RequirementFrequency",
    "RequirementStatus",
    "Role",
    "Sport",
]
