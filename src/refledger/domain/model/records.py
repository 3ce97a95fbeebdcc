"""Auxiliary record kinds.

The reconciliation core moves these by identity only and never interprets
their fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from refledger.domain.model.entity import Record, TimestampedRecord
from refledger.domain.model.enums import (
    CompetitionLevel,
    EvidenceType,
    ExpenseCategory,
    ImportRowStatus,
    ImportType,
    RequirementFrequency,
    RequirementStatus,
    Sport,
)


@dataclass(slots=True, kw_only=True)
class Expense(TimestampedRecord):
    expense_date: date
    amount: float
    category: ExpenseCategory
    tax_deductible: bool
    vendor: str | None = None
    description: str | None = None
    game_id: str | None = None
    miles: float | None = None
    notes: str | None = None


@dataclass(slots=True, kw_only=True)
class RequirementDefinition(TimestampedRecord):
    name: str
    frequency: RequirementFrequency
    evidence_type: EvidenceType
    governing_body: str | None = None
    # "Any" is stored alongside the enumerated values
    sport: Sport | str | None = None
    competition_level: CompetitionLevel | str | None = None
    required_count: int | None = None
    notes: str | None = None


@dataclass(slots=True, kw_only=True)
class RequirementInstance(TimestampedRecord):
    definition_id: str
    status: RequirementStatus = RequirementStatus.NOT_STARTED
    season_name: str | None = None
    year: int | None = None
    due_date: date | None = None
    completed_date: date | None = None
    completion_notes: str | None = None


@dataclass(slots=True, kw_only=True)
class RequirementActivity(TimestampedRecord):
    instance_id: str
    activity_date: date
    quantity: int
    result: str | None = None
    evidence_link: str | None = None
    notes: str | None = None


@dataclass(slots=True, kw_only=True)
class CsvImport(Record):
    import_type: ImportType
    file_name: str
    imported_at: datetime
    row_count: int
    notes: str | None = None


@dataclass(slots=True, kw_only=True)
class CsvImportRow(Record):
    import_id: str
    row_number: int
    status: ImportRowStatus
    raw_json: dict[str, Any] = field(default_factory=dict[str, Any])
    error_message: str | None = None
    created_calendar_event_id: str | None = None
    created_game_id: str | None = None
