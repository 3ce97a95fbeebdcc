"""Row-oriented port onto the remote relational store.

Rows are plain mappings keyed by storage column names. Every table carries a
``user_id`` column; callers always pass it in filters and rows.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

type Row = dict[str, Any]
# A filter value that is a list, tuple, set or frozenset means "column IN (...)".
type Filters = Mapping[str, Any]


@runtime_checkable
class RemoteStore(Protocol):
    """Minimal contract the core needs from a store; failures raise ``StoreError``."""

    async def select(self, table: str, filters: Filters) -> list[Row]: ...

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None: ...

    async def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        conflict_key: Sequence[str],
        *,
        ignore_duplicates: bool = False,
    ) -> list[Row]:
        """Insert or update ``rows``; return the rows as stored.

        On conflict the stored row keeps its ``id`` and the conflict-key columns.
        Rows owned by a different ``user_id`` are never overwritten.
        """
        ...

    async def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int: ...

    async def delete(self, table: str, filters: Filters) -> int: ...


def is_multi_value(value: object) -> bool:
    """Whether a filter value should be matched with ``IN``."""
    return isinstance(value, (list, tuple, set, frozenset))
