from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from refledger.adapters.ics import parse_feed_entries
from refledger.domain.errors import ReconciliationError, StoreError
from refledger.domain.feed_ingest import sync_all
from refledger.domain.model import RequirementInstance
from refledger.domain.reconciliation import ReconciliationEngine
from refledger.domain.reconciliation.rows import (
    calendar_event_to_row,
    feed_to_row,
    game_to_row,
)
from tests.support.feeds import FakeFetcher
from tests.support.ics import calendar, vevent
from tests.support.records import (
    NOW,
    make_blank_text_snapshot,
    make_event,
    make_feed,
    make_game,
    make_linked_pair,
    make_removal_pair,
    make_snapshot,
    sorted_by_id,
)

if TYPE_CHECKING:
    from refledger.adapters.sqlalchemy import SqlAlchemyRemoteStore
    from refledger.domain.ports import Filters

pytestmark = pytest.mark.asyncio

USER = "user-1"


async def test_snapshot_round_trip(sqlite_store: SqlAlchemyRemoteStore) -> None:
    engine = ReconciliationEngine(sqlite_store)
    snapshot = make_snapshot()

    await engine.full_replace(USER, snapshot)
    fetched = await engine.fetch_all(USER)

    assert fetched.settings == snapshot.settings
    assert fetched.games == snapshot.games
    assert fetched.calendar_events == snapshot.calendar_events
    assert fetched.expenses == snapshot.expenses
    assert fetched.requirement_definitions == snapshot.requirement_definitions
    assert fetched.requirement_activities == snapshot.requirement_activities
    assert fetched.csv_import_rows == snapshot.csv_import_rows


async def test_replace_twice_and_incremental_sync(sqlite_store: SqlAlchemyRemoteStore) -> None:
    engine = ReconciliationEngine(sqlite_store)
    previous = make_snapshot()
    await engine.full_replace(USER, previous)
    await engine.full_replace(USER, previous)

    game, event = make_linked_pair("game-2", "event-2")
    next_ = previous.copy()
    next_.games.append(game)
    next_.calendar_events.append(event)
    next_.expenses = []
    await engine.incremental_sync(USER, previous, next_)

    fetched = await engine.fetch_all(USER)
    assert sorted_by_id(fetched.games) == sorted_by_id(next_.games)
    assert sorted_by_id(fetched.calendar_events) == sorted_by_id(next_.calendar_events)
    assert fetched.expenses == []
    assert fetched.link_violations() == []


class DeleteRecorder:
    """Passes every call through to ``store`` and notes which tables lost rows."""

    def __init__(self, store: SqlAlchemyRemoteStore) -> None:
        self.store = store
        self.deleted_from: list[str] = []

    def __getattr__(self, name: str) -> Any:
        return getattr(self.store, name)

    async def delete(self, table: str, filters: Filters) -> int:
        self.deleted_from.append(table)
        return await self.store.delete(table, filters)


async def test_blank_text_and_seconds_round_trip(sqlite_store: SqlAlchemyRemoteStore) -> None:
    engine = ReconciliationEngine(sqlite_store)
    snapshot = make_blank_text_snapshot()

    await engine.full_replace(USER, snapshot)
    fetched = await engine.fetch_all(USER)

    assert fetched.settings == snapshot.settings
    assert fetched.games == snapshot.games
    assert fetched.calendar_events == snapshot.calendar_events
    assert fetched.games[0].league == ""
    assert fetched.games[0].start_time is not None
    assert fetched.games[0].start_time.second == 15


async def test_incremental_removal_deletes_dependents_first(
    sqlite_store: SqlAlchemyRemoteStore,
) -> None:
    previous, next_ = make_removal_pair()
    await ReconciliationEngine(sqlite_store).full_replace(USER, previous)
    recorder = DeleteRecorder(sqlite_store)

    await ReconciliationEngine(recorder).incremental_sync(USER, previous, next_)

    assert recorder.deleted_from == [
        "csv_import_rows",
        "csv_imports",
        "requirement_activities",
        "requirement_instances",
        "expenses",
        "calendar_events",
        "games",
        "requirement_definitions",
    ]
    fetched = await ReconciliationEngine(sqlite_store).fetch_all(USER)
    assert sorted_by_id(fetched.games) == next_.games
    assert sorted_by_id(fetched.calendar_events) == next_.calendar_events
    assert fetched.expenses == []
    assert fetched.requirement_definitions == []
    assert fetched.requirement_instances == []
    assert fetched.csv_imports == []
    assert fetched.csv_import_rows == []
    assert fetched.link_violations() == []


async def test_foreign_key_failure_names_step(sqlite_store: SqlAlchemyRemoteStore) -> None:
    engine = ReconciliationEngine(sqlite_store)
    orphan = RequirementInstance(
        id="reqinst-orphan",
        definition_id="reqdef-missing",
        created_at=NOW,
        updated_at=NOW,
    )
    snapshot = make_snapshot(requirement_instances=[orphan], requirement_activities=[])

    with pytest.raises(ReconciliationError) as exc:
        await engine.full_replace(USER, snapshot)

    assert exc.value.step == "Insert"
    assert exc.value.table == "requirement_instances"
    assert "FOREIGN KEY" in str(exc.value)


async def test_upsert_keeps_id_on_conflict_key(sqlite_store: SqlAlchemyRemoteStore) -> None:
    first = make_event("event-1", external_ref="RefQuest:feed-1:uid-1")
    await sqlite_store.insert("calendar_events", [calendar_event_to_row(first, USER)])

    incoming = make_event("event-other", external_ref="RefQuest:feed-1:uid-1", title="Moved")
    stored = await sqlite_store.upsert(
        "calendar_events",
        [calendar_event_to_row(incoming, USER)],
        ["user_id", "external_ref"],
    )

    assert [(row["id"], row["title"]) for row in stored] == [("event-1", "Moved")]
    rows = await sqlite_store.select("calendar_events", {"user_id": USER})
    assert [row["id"] for row in rows] == ["event-1"]


async def test_upsert_never_touches_another_scope(sqlite_store: SqlAlchemyRemoteStore) -> None:
    await sqlite_store.insert("games", [game_to_row(make_game("game-1"), "user-2")])

    stored = await sqlite_store.upsert(
        "games", [game_to_row(make_game("game-1", notes="hijacked"), USER)], ["id"]
    )

    assert stored == []
    rows = await sqlite_store.select("games", {"user_id": "user-2"})
    assert rows[0]["notes"] is None


async def test_upsert_ignore_duplicates(sqlite_store: SqlAlchemyRemoteStore) -> None:
    await sqlite_store.insert("games", [game_to_row(make_game("game-1"), USER)])

    stored = await sqlite_store.upsert(
        "games",
        [game_to_row(make_game("game-1", notes="ignored"), USER)],
        ["id"],
        ignore_duplicates=True,
    )

    assert stored == []
    assert (await sqlite_store.select("games", {"user_id": USER}))[0]["notes"] is None


async def test_deleting_a_game_clears_the_event_link(
    sqlite_store: SqlAlchemyRemoteStore,
) -> None:
    game, event = make_linked_pair()
    await sqlite_store.insert("games", [game_to_row(make_game(game.id), USER)])
    await sqlite_store.insert("calendar_events", [calendar_event_to_row(event, USER)])
    await sqlite_store.update(
        "games", {"calendar_event_id": event.id}, {"user_id": USER, "id": game.id}
    )

    deleted = await sqlite_store.delete("games", {"user_id": USER, "id": [game.id]})

    assert deleted == 1
    rows = await sqlite_store.select("calendar_events", {"user_id": USER})
    assert rows[0]["linked_game_id"] is None


async def test_filters_support_in_and_null(sqlite_store: SqlAlchemyRemoteStore) -> None:
    rows = [
        game_to_row(make_game("game-1", league="OHSAA"), USER),
        game_to_row(make_game("game-2"), USER),
        game_to_row(make_game("game-3"), USER),
    ]
    await sqlite_store.insert("games", rows)

    selected = await sqlite_store.select("games", {"user_id": USER, "id": ["game-1", "game-2"]})
    unleagued = await sqlite_store.select("games", {"user_id": USER, "league": None})

    assert sorted(row["id"] for row in selected) == ["game-1", "game-2"]
    assert sorted(row["id"] for row in unleagued) == ["game-2", "game-3"]


async def test_unscoped_and_unknown_access_is_refused(
    sqlite_store: SqlAlchemyRemoteStore,
) -> None:
    with pytest.raises(StoreError, match="filters must include user_id"):
        await sqlite_store.select("games", {"id": "game-1"})
    with pytest.raises(StoreError, match="unknown table"):
        await sqlite_store.select("players", {"user_id": USER})
    with pytest.raises(StoreError, match="no column"):
        await sqlite_store.delete("games", {"user_id": USER, "colour": "red"})


async def test_feed_sync_against_sqlite(sqlite_store: SqlAlchemyRemoteStore) -> None:
    feed = make_feed(user_id=USER, default_league="OHSAA")
    await sqlite_store.insert("calendar_feeds", [feed_to_row(feed)])
    body = calendar(
        vevent("uid-1", summary="Varsity Boys Lacrosse", description="Head Umpire"),
        vevent("uid-2", dtstart="DTSTART;VALUE=DATE:20250322", dtend=None, summary="U12 Cup"),
    )
    fetcher = FakeFetcher({feed.feed_url: body})

    first = await sync_all(USER, store=sqlite_store, fetcher=fetcher, parser=parse_feed_entries)
    second = await sync_all(USER, store=sqlite_store, fetcher=fetcher, parser=parse_feed_entries)

    assert (first.created_events, first.created_games, first.errors) == (2, 2, [])
    assert (second.created_events, second.updated_games, second.errors) == (0, 2, [])
    snapshot = await ReconciliationEngine(sqlite_store).fetch_all(USER)
    assert len(snapshot.games) == 2
    assert snapshot.link_violations() == []
    lacrosse = next(game for game in snapshot.games if game.level_detail == "Varsity")
    assert lacrosse.role == "Lead"
    assert lacrosse.league == "OHSAA"
    cup = next(game for game in snapshot.games if game.level_detail == "U12")
    assert cup.start_time is None
    feeds = await sqlite_store.select("calendar_feeds", {"user_id": USER})
    assert feeds[0]["last_synced_at"] is not None
