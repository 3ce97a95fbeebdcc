from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from refledger.domain.errors import ReconciliationError
from refledger.domain.model import Settings, Snapshot
from refledger.domain.reconciliation import ReconciliationEngine
from tests.support.memory_store import InMemoryRemoteStore
from tests.support.records import (
    make_blank_text_snapshot,
    make_game,
    make_linked_pair,
    make_removal_pair,
    make_snapshot,
    sorted_by_id,
)

if TYPE_CHECKING:
    from refledger.domain.ports import Filters, Row

pytestmark = pytest.mark.asyncio

USER = "user-1"


def _normalized(snapshot: Snapshot) -> Snapshot:
    copied = snapshot.copy()
    for name in (
        "games",
        "calendar_events",
        "expenses",
        "requirement_definitions",
        "requirement_instances",
        "requirement_activities",
        "csv_imports",
        "csv_import_rows",
    ):
        setattr(copied, name, sorted_by_id(getattr(copied, name)))
    return copied


async def test_full_replace_then_fetch_all_round_trips(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)
    snapshot = make_snapshot()

    await engine.full_replace(USER, snapshot)
    fetched = await engine.fetch_all(USER)

    assert _normalized(fetched) == _normalized(snapshot)
    assert fetched.link_violations() == []


async def test_blank_text_round_trips_and_settles(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)
    snapshot = make_blank_text_snapshot()

    await engine.full_replace(USER, snapshot)
    fetched = await engine.fetch_all(USER)
    memory_store.calls.clear()
    await engine.incremental_sync(USER, fetched, snapshot)

    assert _normalized(fetched) == _normalized(snapshot)
    assert fetched.settings.home_address == ""
    assert fetched.games[0].start_time is not None
    assert fetched.games[0].start_time.second == 15
    assert memory_store.writes() == []


async def test_full_replace_writes_links_after_both_sides_exist(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)

    await engine.full_replace(USER, make_snapshot())

    writes = memory_store.writes()
    assert writes.index(("insert", "games")) < writes.index(("insert", "calendar_events"))
    assert writes.index(("insert", "calendar_events")) < writes.index(("update", "games"))
    assert writes.index(("update", "calendar_events")) < writes.index(
        ("insert", "requirement_definitions")
    )
    assert writes.index(("delete", "csv_import_rows")) < writes.index(("delete", "games"))


async def test_full_replace_removes_rows_missing_from_the_snapshot(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    await engine.full_replace(USER, make_snapshot())

    await engine.full_replace(USER, Snapshot())
    fetched = await engine.fetch_all(USER)

    assert fetched.games == []
    assert fetched.calendar_events == []
    assert fetched.requirement_definitions == []
    assert fetched.settings == Settings()


async def test_full_replace_skips_links_to_records_outside_the_snapshot(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    dangling = make_game("game-1", calendar_event_id="event-elsewhere")

    await engine.full_replace(USER, make_snapshot(games=[dangling], calendar_events=[]))

    assert memory_store.rows("games")[0]["calendar_event_id"] is None
    assert ("update", "games") not in memory_store.writes()


async def test_full_replace_leaves_other_scopes_untouched(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    other = Snapshot(games=[make_game("other-game")])
    await engine.full_replace("user-2", other)

    await engine.full_replace(USER, make_snapshot())

    assert [game.id for game in (await engine.fetch_all("user-2")).games] == ["other-game"]


async def test_fetch_all_of_empty_scope_uses_default_settings(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)

    assert await engine.fetch_all(USER) == Snapshot()


async def test_incremental_sync_without_changes_writes_nothing(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    snapshot = make_snapshot()
    await engine.full_replace(USER, snapshot)
    memory_store.calls.clear()

    await engine.incremental_sync(USER, snapshot, snapshot.copy())

    assert memory_store.writes() == []


async def test_incremental_sync_writes_only_the_difference(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    previous = make_snapshot()
    await engine.full_replace(USER, previous)
    memory_store.calls.clear()

    next_ = previous.copy()
    next_.games = [replace(previous.games[0], game_fee=65.0, paid_confirmed=True)]
    next_.expenses = []
    await engine.incremental_sync(USER, previous, next_)

    assert memory_store.writes() == [
        ("delete", "expenses"),
        ("upsert", "games"),
        ("update", "games"),
    ]
    fetched = await engine.fetch_all(USER)
    assert fetched.games == next_.games
    assert fetched.expenses == []
    assert fetched.link_violations() == []


async def test_incremental_sync_deletes_dependents_first(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    previous, next_ = make_removal_pair()
    await engine.full_replace(USER, previous)
    memory_store.calls.clear()

    await engine.incremental_sync(USER, previous, next_)

    assert memory_store.writes() == [
        ("delete", "csv_import_rows"),
        ("delete", "csv_imports"),
        ("delete", "requirement_activities"),
        ("delete", "requirement_instances"),
        ("delete", "expenses"),
        ("delete", "calendar_events"),
        ("delete", "games"),
        ("delete", "requirement_definitions"),
    ]
    fetched = await engine.fetch_all(USER)
    assert _normalized(fetched) == _normalized(next_)
    assert fetched.link_violations() == []


async def test_incremental_sync_links_new_pair(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)
    previous = make_snapshot()
    await engine.full_replace(USER, previous)

    game, event = make_linked_pair("game-2", "event-2")
    next_ = previous.copy()
    next_.games.append(game)
    next_.calendar_events.append(event)
    await engine.incremental_sync(USER, previous, next_)

    fetched = await engine.fetch_all(USER)
    assert _normalized(fetched) == _normalized(next_)
    assert fetched.link_violations() == []


async def test_incremental_sync_updates_settings_only_when_changed(
    memory_store: InMemoryRemoteStore,
) -> None:
    engine = ReconciliationEngine(memory_store)
    previous = make_snapshot()
    await engine.full_replace(USER, previous)
    memory_store.calls.clear()

    next_ = previous.copy()
    next_.settings = Settings(home_address="1 Main St", leagues=["OHSAA"])
    await engine.incremental_sync(USER, previous, next_)

    assert memory_store.writes() == [("upsert", "user_settings")]
    assert (await engine.fetch_all(USER)).settings.home_address == "1 Main St"


async def test_store_failure_names_step_and_table(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)
    memory_store.fail_on("delete", "games", "permission denied")

    with pytest.raises(ReconciliationError) as exc:
        await engine.full_replace(USER, make_snapshot())

    assert str(exc.value) == "Delete games: permission denied"
    assert exc.value.step == "Delete"
    assert exc.value.table == "games"


async def test_fetch_failure_is_reported(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)
    memory_store.fail_on("select", "expenses", "timeout")

    with pytest.raises(ReconciliationError, match="Fetch expenses: timeout"):
        await engine.fetch_all(USER)


class StalledExpensesStore(InMemoryRemoteStore):
    """Expense reads never finish on their own; cancellation is recorded."""

    def __init__(self) -> None:
        super().__init__()
        self.expense_read_cancelled = False

    async def select(self, table: str, filters: Filters) -> list[Row]:
        if table != "expenses":
            return await super().select(table, filters)
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.expense_read_cancelled = True
            raise
        return []


async def test_fetch_failure_cancels_the_other_reads() -> None:
    store = StalledExpensesStore()
    store.fail_on("select", "games", "permission denied")

    with pytest.raises(ReconciliationError) as exc:
        await ReconciliationEngine(store).fetch_all(USER)

    assert (exc.value.step, exc.value.table) == ("Fetch", "games")
    assert store.expense_read_cancelled


async def test_ensure_settings_never_overwrites(memory_store: InMemoryRemoteStore) -> None:
    engine = ReconciliationEngine(memory_store)

    await engine.ensure_settings(USER, Settings(home_address="1 Main St"))
    await engine.ensure_settings(USER, Settings(home_address="2 Side St"))

    assert (await engine.fetch_all(USER)).settings.home_address == "1 Main St"
    assert len(memory_store.rows("user_settings")) == 1
