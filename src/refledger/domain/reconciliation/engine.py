"""Keep one scope's remote rows consistent with a local snapshot.

Games and calendar events reference each other, so both write paths follow the
same protocol: write both collections with their link columns stripped, then
restore every link with a point update once both sides exist. Links whose
target is not part of the snapshot being written are skipped.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from refledger.domain.errors import ReconciliationError, StoreError
from refledger.domain.model import Settings, Snapshot, utcnow

from .collections import (
    CALENDAR_EVENTS,
    COLLECTIONS,
    DELETE_ORDER,
    DEPENDENT_UPSERT_ORDER,
    GAMES,
    SETTINGS_TABLE,
    CollectionSpec,
)
from .diff import diff_snapshots
from .rows import (
    EVENT_LINK_COLUMN,
    GAME_LINK_COLUMN,
    row_to_settings,
    settings_to_row,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from refledger.domain.model import Identified
    from refledger.domain.ports import RemoteStore, Row


log = getLogger(__name__)


@contextmanager
def _step(step: str, table: str) -> Iterator[None]:
    try:
        yield
    except StoreError as exc:
        raise ReconciliationError(step, table, exc) from exc


def _strip_link(row: Row, spec: CollectionSpec) -> Row:
    if spec.link_column is not None:
        row[spec.link_column] = None
    return row


@dataclass(slots=True)
class ReconciliationEngine:
    """Stateless writer/reader of whole snapshots against a ``RemoteStore``."""

    store: RemoteStore

    async def full_replace(self, user_id: str, snapshot: Snapshot) -> None:
        """Make the scope's remote rows equal ``snapshot``.

        A failure part-way leaves whatever was already written; the caller keeps
        its previous snapshot as the authoritative one.
        """

        log.info(
            "Full replace for %s: %d games, %d calendar events",
            user_id,
            len(snapshot.games),
            len(snapshot.calendar_events),
        )
        scope = {"user_id": user_id}
        for spec in DELETE_ORDER:
            with _step("Delete", spec.table):
                await self.store.delete(spec.table, scope)
        with _step("Delete", SETTINGS_TABLE):
            await self.store.delete(SETTINGS_TABLE, scope)

        await self._upsert_settings(user_id, snapshot.settings)

        games = GAMES.records(snapshot)
        events = CALENDAR_EVENTS.records(snapshot)
        for spec, records in ((GAMES, games), (CALENDAR_EVENTS, events)):
            await self._insert(spec, records, user_id)
        await self._relink(user_id, snapshot, games=games, events=events)

        for spec in DEPENDENT_UPSERT_ORDER:
            await self._insert(spec, spec.records(snapshot), user_id)
        log.info("Full replace for %s finished", user_id)

    async def incremental_sync(self, user_id: str, previous: Snapshot, next_: Snapshot) -> None:
        """Write only what changed between ``previous`` and ``next_``."""

        changes = diff_snapshots(previous, next_)
        if changes.is_empty:
            log.debug("Incremental sync for %s: nothing to write", user_id)
            return

        if changes.settings_changed:
            await self._upsert_settings(user_id, next_.settings)

        for spec in DELETE_ORDER:
            deletes = changes.for_collection(spec.name).deletes
            if not deletes:
                continue
            log.debug("Deleting %d rows from %s", len(deletes), spec.table)
            with _step("Delete", spec.table):
                await self.store.delete(spec.table, {"user_id": user_id, "id": deletes})

        games = changes.for_collection(GAMES.name).upserts
        events = changes.for_collection(CALENDAR_EVENTS.name).upserts
        await self._upsert(GAMES, games, user_id)
        await self._upsert(CALENDAR_EVENTS, events, user_id)
        await self._relink(user_id, next_, games=games, events=events)

        for spec in DEPENDENT_UPSERT_ORDER:
            await self._upsert(spec, changes.for_collection(spec.name).upserts, user_id)
        log.info("Incremental sync for %s finished", user_id)

    async def fetch_all(self, user_id: str) -> Snapshot:
        """Read every collection of the scope concurrently.

        The first failing read cancels the others and is raised on its own.
        """

        scope = {"user_id": user_id}

        async def fetch(table: str) -> list[Row]:
            with _step("Fetch", table):
                return await self.store.select(table, scope)

        try:
            async with asyncio.TaskGroup() as group:
                settings_task = group.create_task(fetch(SETTINGS_TABLE))
                collection_tasks = [group.create_task(fetch(spec.table)) for spec in COLLECTIONS]
        except ExceptionGroup as failures:
            raise failures.exceptions[0]  # noqa: B904

        settings_rows = settings_task.result()
        fields: dict[str, Any] = {
            spec.name: [spec.from_row(row) for row in task.result()]
            for spec, task in zip(COLLECTIONS, collection_tasks, strict=True)
        }
        settings = row_to_settings(settings_rows[0]) if settings_rows else Settings()
        return Snapshot(settings=settings, **fields)

    async def ensure_settings(self, user_id: str, settings: Settings | None = None) -> None:
        """Create the settings row for a scope that has none; never overwrite."""

        row = settings_to_row(settings or Settings(), user_id, updated_at=utcnow())
        with _step("Upsert", SETTINGS_TABLE):
            await self.store.upsert(SETTINGS_TABLE, [row], ["user_id"], ignore_duplicates=True)

    async def _upsert_settings(self, user_id: str, settings: Settings) -> None:
        row = settings_to_row(settings, user_id, updated_at=utcnow())
        with _step("Upsert", SETTINGS_TABLE):
            await self.store.upsert(SETTINGS_TABLE, [row], ["user_id"])

    async def _insert(
        self, spec: CollectionSpec, records: Sequence[Identified], user_id: str
    ) -> None:
        if not records:
            return
        rows = [_strip_link(spec.to_row(record, user_id), spec) for record in records]
        log.debug("Inserting %d rows into %s", len(rows), spec.table)
        with _step("Insert", spec.table):
            await self.store.insert(spec.table, rows)

    async def _upsert(
        self, spec: CollectionSpec, records: Sequence[Identified], user_id: str
    ) -> None:
        if not records:
            return
        rows = [_strip_link(spec.to_row(record, user_id), spec) for record in records]
        log.debug("Upserting %d rows into %s", len(rows), spec.table)
        with _step("Upsert", spec.table):
            await self.store.upsert(spec.table, rows, ["id"])

    async def _relink(
        self,
        user_id: str,
        snapshot: Snapshot,
        *,
        games: Sequence[Identified],
        events: Sequence[Identified],
    ) -> None:
        game_ids = {record.id for record in GAMES.records(snapshot)}
        event_ids = {record.id for record in CALENDAR_EVENTS.records(snapshot)}
        for spec, column, records, targets in (
            (GAMES, GAME_LINK_COLUMN, games, event_ids),
            (CALENDAR_EVENTS, EVENT_LINK_COLUMN, events, game_ids),
        ):
            for record in records:
                target = getattr(record, column)
                if target is None or target not in targets:
                    continue
                with _step("Link", spec.table):
                    await self.store.update(
                        spec.table,
                        {column: target},
                        {"user_id": user_id, "id": record.id},
                    )
