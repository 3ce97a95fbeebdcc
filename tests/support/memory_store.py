"""In-memory ``RemoteStore`` fake with failure injection for reconciliation tests."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from refledger.domain.errors import StoreError
from refledger.domain.ports import is_multi_value

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from refledger.domain.ports import Filters, Row

# columns cleared when the referenced row is deleted
_SET_NULL: dict[str, tuple[tuple[str, str], ...]] = {
    "games": (
        ("calendar_events", "linked_game_id"),
        ("expenses", "game_id"),
        ("csv_import_rows", "created_game_id"),
    ),
    "calendar_events": (
        ("games", "calendar_event_id"),
        ("csv_import_rows", "created_calendar_event_id"),
    ),
}


def _matches(row: Mapping[str, Any], filters: Filters) -> bool:
    for name, value in filters.items():
        if is_multi_value(value):
            if row.get(name) not in set(value):
                return False
        elif row.get(name) != value:
            return False
    return True


class InMemoryRemoteStore:
    """Tables are lists of row dicts; every call is recorded in ``calls``."""

    def __init__(self) -> None:
        self.tables: dict[str, list[Row]] = {}
        self.calls: list[tuple[str, str]] = []
        self._failures: dict[tuple[str, str], str] = {}

    def fail_on(self, operation: str, table: str, message: str = "boom") -> None:
        self._failures[(operation, table)] = message

    def clear_failures(self) -> None:
        self._failures.clear()

    def rows(self, table: str) -> list[Row]:
        return self.tables.setdefault(table, [])

    def seed(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        self.rows(table).extend(copy.deepcopy(dict(row)) for row in rows)

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] != "select"]

    def _record(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        message = self._failures.get((operation, table))
        if message is not None:
            raise StoreError(message, table=table)

    async def select(self, table: str, filters: Filters) -> list[Row]:
        self._record("select", table)
        return [copy.deepcopy(row) for row in self.rows(table) if _matches(row, filters)]

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        self._record("insert", table)
        stored = self.rows(table)
        for row in rows:
            if "id" in row and any(existing.get("id") == row["id"] for existing in stored):
                raise StoreError(f"duplicate key value violates unique constraint on {table}")
            stored.append(copy.deepcopy(dict(row)))

    async def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        conflict_key: Sequence[str],
        *,
        ignore_duplicates: bool = False,
    ) -> list[Row]:
        self._record("upsert", table)
        stored = self.rows(table)
        frozen = {"id", *conflict_key}
        written: list[Row] = []
        for row in rows:
            key = {column: row.get(column) for column in conflict_key}
            existing = next((candidate for candidate in stored if _matches(candidate, key)), None)
            if existing is None:
                if "id" in row and any(other.get("id") == row["id"] for other in stored):
                    raise StoreError(f"duplicate key value violates unique constraint on {table}")
                new_row = copy.deepcopy(dict(row))
                stored.append(new_row)
                written.append(copy.deepcopy(new_row))
                continue
            if ignore_duplicates or existing.get("user_id") != row.get("user_id"):
                continue
            for column, value in row.items():
                if column not in frozen:
                    existing[column] = copy.deepcopy(value)
            written.append(copy.deepcopy(existing))
        return written

    async def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int:
        self._record("update", table)
        count = 0
        for row in self.rows(table):
            if _matches(row, filters):
                row.update(copy.deepcopy(dict(patch)))
                count += 1
        return count

    async def delete(self, table: str, filters: Filters) -> int:
        self._record("delete", table)
        kept: list[Row] = []
        removed: list[Row] = []
        for row in self.rows(table):
            (removed if _matches(row, filters) else kept).append(row)
        self.tables[table] = kept
        removed_ids = {row["id"] for row in removed if "id" in row}
        for dependent, column in _SET_NULL.get(table, ()):
            for row in self.rows(dependent):
                if row.get(column) in removed_ids:
                    row[column] = None
        return len(removed)
