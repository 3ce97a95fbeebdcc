"""
Base building blocks:
identity and timestamps shared by every stored record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


@runtime_checkable
class Identified(Protocol):
    """Anything keyed by a stable string identity."""

    @property
    def id(self) -> str: ...


@dataclass(slots=True, kw_only=True)
class Record:
    """Identity-keyed record; equality is structural across all fields."""

    id: str


@dataclass(slots=True, kw_only=True)
class TimestampedRecord(Record):
    created_at: datetime
    updated_at: datetime
