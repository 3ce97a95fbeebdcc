"""Run calendar feed syncs for one scope.

A single feed moves through fetch, parse, event merge, game merge, linking and
stamping. Failures are reported as ``"<feed name>: <step> failed: <reason>"``
strings on the result; a failed step ends that feed's sync but never another
feed's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from refledger.domain.errors import FeedFetchError, FeedParseError, StoreError
from refledger.domain.model import utcnow
from refledger.domain.reconciliation.collections import (
    CALENDAR_EVENTS,
    FEEDS_TABLE,
    GAMES,
)
from refledger.domain.reconciliation.rows import (
    calendar_event_to_row,
    game_to_row,
    row_to_calendar_event,
    row_to_feed,
    row_to_game,
)

from .merge import build_event, build_game
from .normalization import IngestOptions, normalize_entry

if TYPE_CHECKING:
    from datetime import datetime

    from refledger.domain.model import CalendarEvent, CalendarFeed, Game
    from refledger.domain.ports import FeedFetcher, FeedParser, RemoteStore

    from .normalization import NormalizedEntry


log = getLogger(__name__)


@dataclass(slots=True)
class FeedSyncResult:
    created_events: int = 0
    updated_events: int = 0
    created_games: int = 0
    updated_games: int = 0
    errors: list[str] = field(default_factory=list[str])

    def absorb(self, other: FeedSyncResult) -> None:
        self.created_events += other.created_events
        self.updated_events += other.updated_events
        self.created_games += other.created_games
        self.updated_games += other.updated_games
        self.errors.extend(other.errors)


class _StepFailedError(Exception):
    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"{step} failed: {cause}")


@dataclass(slots=True)
class _FeedSync:
    feed: CalendarFeed
    store: RemoteStore
    options: IngestOptions
    now: datetime
    result: FeedSyncResult = field(default_factory=FeedSyncResult)

    @property
    def scope(self) -> dict[str, str]:
        return {"user_id": self.feed.user_id}

    async def run(self, entries: list[NormalizedEntry]) -> None:
        if entries:
            events = await self._merge_events(entries)
            games = await self._merge_games(entries, events)
            await self._link(games)
        await self._stamp()

    async def _merge_events(self, entries: list[NormalizedEntry]) -> dict[str, str]:
        """Upsert one event per entry; return event ids keyed by external ref."""

        refs = [entry.external_ref for entry in entries]
        try:
            rows = await self.store.select(
                CALENDAR_EVENTS.table, {**self.scope, "external_ref": refs}
            )
        except StoreError as exc:
            raise _StepFailedError("event lookup", exc) from exc
        existing: dict[str, CalendarEvent] = {}
        for row in rows:
            event = row_to_calendar_event(row)
            if event.external_ref is not None:
                existing[event.external_ref] = event

        events = [
            build_event(
                entry,
                existing.get(entry.external_ref),
                timezone=self.options.timezone,
                now=self.now,
            )
            for entry in entries
        ]
        try:
            stored = await self.store.upsert(
                CALENDAR_EVENTS.table,
                [calendar_event_to_row(event, self.feed.user_id) for event in events],
                ["user_id", "external_ref"],
            )
        except StoreError as exc:
            raise _StepFailedError("event upsert", exc) from exc

        for event in events:
            if event.external_ref in existing:
                self.result.updated_events += 1
            else:
                self.result.created_events += 1
        log.debug(
            "%s: %d events created, %d updated",
            self.feed.name,
            self.result.created_events,
            self.result.updated_events,
        )
        return {str(row["external_ref"]): str(row["id"]) for row in stored}

    async def _merge_games(
        self, entries: list[NormalizedEntry], event_ids: dict[str, str]
    ) -> list[Game]:
        try:
            rows = await self.store.select(
                GAMES.table, {**self.scope, "calendar_event_id": list(event_ids.values())}
            )
        except StoreError as exc:
            raise _StepFailedError("game lookup", exc) from exc
        existing: dict[str, Game] = {}
        for row in rows:
            game = row_to_game(row)
            if game.calendar_event_id is not None:
                existing[game.calendar_event_id] = game

        games: list[Game] = []
        for entry in entries:
            event_id = event_ids[entry.external_ref]
            games.append(
                build_game(
                    entry,
                    existing.get(event_id),
                    feed=self.feed,
                    calendar_event_id=event_id,
                    now=self.now,
                )
            )
        try:
            await self.store.upsert(
                GAMES.table,
                [game_to_row(game, self.feed.user_id) for game in games],
                ["id"],
            )
        except StoreError as exc:
            raise _StepFailedError("game upsert", exc) from exc

        for game in games:
            if game.calendar_event_id in existing:
                self.result.updated_games += 1
            else:
                self.result.created_games += 1
        return games

    async def _link(self, games: list[Game]) -> None:
        for game in games:
            try:
                await self.store.update(
                    CALENDAR_EVENTS.table,
                    {"linked_game_id": game.id, "updated_at": self.now},
                    {**self.scope, "id": game.calendar_event_id},
                )
            except StoreError as exc:
                raise _StepFailedError(
                    f"link update for event {game.calendar_event_id}", exc
                ) from exc

    async def _stamp(self) -> None:
        try:
            await self.store.update(
                FEEDS_TABLE,
                {"last_synced_at": self.now, "updated_at": self.now},
                {**self.scope, "id": self.feed.id},
            )
        except StoreError as exc:
            raise _StepFailedError("last_synced_at update", exc) from exc


async def sync_feed(
    feed: CalendarFeed,
    *,
    store: RemoteStore,
    fetcher: FeedFetcher,
    parser: FeedParser,
    options: IngestOptions | None = None,
    now: datetime | None = None,
) -> FeedSyncResult:
    """Fetch ``feed`` once and merge its entries into the feed owner's records."""

    options = options or IngestOptions()
    sync = _FeedSync(feed=feed, store=store, options=options, now=now or utcnow())
    log.info("Syncing feed %s (%s)", feed.name, feed.platform)

    try:
        body = await fetcher(feed.feed_url)
    except FeedFetchError as exc:
        log.warning("%s: fetch failed: %s", feed.name, exc)
        sync.result.errors.append(f"{feed.name}: fetch failed: {exc}")
        return sync.result

    try:
        parsed = [normalize_entry(entry, feed, options) for entry in parser(body)]
    except FeedParseError as exc:
        log.warning("%s: parse failed: %s", feed.name, exc)
        sync.result.errors.append(f"{feed.name}: parse failed: {exc}")
        return sync.result

    # a uid repeated within one body keeps its last occurrence
    entries = list({entry.external_ref: entry for entry in parsed}.values())

    try:
        await sync.run(entries)
    except _StepFailedError as exc:
        log.warning("%s: %s", feed.name, exc)
        sync.result.errors.append(f"{feed.name}: {exc}")

    log.info(
        "Finished feed %s: %d entries, events +%d/~%d, games +%d/~%d",
        feed.name,
        len(entries),
        sync.result.created_events,
        sync.result.updated_events,
        sync.result.created_games,
        sync.result.updated_games,
    )
    return sync.result


async def sync_all(
    user_id: str,
    feed_id: str | None = None,
    *,
    store: RemoteStore,
    fetcher: FeedFetcher,
    parser: FeedParser,
    options: IngestOptions | None = None,
    now: datetime | None = None,
) -> FeedSyncResult:
    """Sync one feed by id, or every enabled feed of the scope, in order."""

    filters: dict[str, object] = {"user_id": user_id}
    if feed_id:
        filters["id"] = feed_id
    else:
        filters["enabled"] = True
    feeds = [row_to_feed(row) for row in await store.select(FEEDS_TABLE, filters)]

    total = FeedSyncResult()
    for feed in feeds:
        try:
            result = await sync_feed(
                feed,
                store=store,
                fetcher=fetcher,
                parser=parser,
                options=options,
                now=now,
            )
        except Exception as exc:  # noqa: BLE001
            log.exception("Feed %s failed", feed.name)
            total.errors.append(f"{feed.name}: {exc}")
            continue
        total.absorb(result)
    return total
