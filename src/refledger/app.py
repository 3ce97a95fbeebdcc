"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from refledger.adapters.ics import HttpFeedFetcher, parse_feed_entries
from refledger.adapters.snapshot_file import LocalSnapshotCache
from refledger.adapters.sqlalchemy import SqlAlchemyRemoteStore, create_store_engine
from refledger.adapters.sqlalchemy.migrations import upgrade_head
from refledger.config import get_database_config, get_feed_sync_config, get_storage_config
from refledger.domain.feed_ingest import FeedSyncResult, sync_all
from refledger.domain.feed_management import (
    create_feed,
    delete_feed,
    list_feeds,
    update_feed,
)
from refledger.domain.model import Snapshot
from refledger.domain.reconciliation import ConfirmedSnapshot, ReconciliationEngine

if TYPE_CHECKING:
    from refledger.config import FeedSyncConfig
    from refledger.domain.feed_management import FeedCreate, FeedUpdate
    from refledger.domain.model import FeedSummary
    from refledger.domain.ports import FeedFetcher, FeedParser, RemoteStore, SnapshotCache

StoreFactory = Callable[[], AbstractAsyncContextManager["RemoteStore"]]


log = getLogger(__name__)


def build_store(database_uri: str | None = None) -> SqlAlchemyRemoteStore:
    """Store on the configured database (async driver)."""

    uri = database_uri or get_database_config().uri
    return SqlAlchemyRemoteStore(create_store_engine(uri))


@asynccontextmanager
async def _configured_store() -> AsyncIterator[RemoteStore]:
    store = build_store()
    try:
        yield store
    finally:
        await store.aclose()


def default_snapshot_cache() -> LocalSnapshotCache:
    return LocalSnapshotCache(get_storage_config().snapshot_cache_path())


def default_confirmed_cache() -> LocalSnapshotCache:
    # with no baseline yet, push treats every remote row as unseen and keeps it
    return LocalSnapshotCache(get_storage_config().confirmed_snapshot_path(), seed=Snapshot)


def initialise_database(database_uri: str | None = None) -> None:
    """Bring the database schema up to the latest migration."""

    upgrade_head(database_uri=database_uri or get_database_config().uri)
    log.info("Database schema is up to date")


def sync_calendar_feeds(
    *,
    user_id: str,
    feed_id: str | None = None,
    store_factory: StoreFactory | None = None,
    fetcher: FeedFetcher | None = None,
    parser: FeedParser | None = None,
    config: FeedSyncConfig | None = None,
) -> FeedSyncResult:
    """Sync one feed, or every enabled feed, for ``user_id``."""

    effective_config = config or get_feed_sync_config()
    effective_fetcher = fetcher or HttpFeedFetcher(effective_config.resilience)
    effective_parser = parser or parse_feed_entries
    open_store = store_factory or _configured_store
    log.info("Starting calendar feed sync: user=%s, feed=%s", user_id, feed_id or "all enabled")

    async def run() -> FeedSyncResult:
        async with open_store() as store:
            return await sync_all(
                user_id,
                feed_id,
                store=store,
                fetcher=effective_fetcher,
                parser=effective_parser,
                options=effective_config.ingest_options(),
            )

    result = asyncio.run(run())
    log.info(
        f"Finished calendar feed sync: events created={result.created_events}, "
        f"updated={result.updated_events}; games created={result.created_games}, "
        f"updated={result.updated_games}; errors={len(result.errors)}"
    )
    return result


def pull_snapshot(
    *,
    user_id: str,
    store_factory: StoreFactory | None = None,
    cache: SnapshotCache | None = None,
    confirmed: SnapshotCache | None = None,
) -> Snapshot:
    """Replace the local cache with the remote state.

    The pulled state also becomes the confirmed baseline for the next push.
    """

    effective_cache = cache or default_snapshot_cache()
    baseline = confirmed or default_confirmed_cache()
    open_store = store_factory or _configured_store

    async def run() -> Snapshot:
        async with open_store() as store:
            engine = ReconciliationEngine(store)
            holder = ConfirmedSnapshot(engine, user_id, Snapshot(), cache=baseline)
            return await holder.refresh()

    snapshot = asyncio.run(run())
    effective_cache.save(snapshot)
    log.info(
        "Pulled snapshot for %s: %d games, %d calendar events",
        user_id,
        len(snapshot.games),
        len(snapshot.calendar_events),
    )
    return snapshot


def push_snapshot(
    *,
    user_id: str,
    overwrite: bool = False,
    store_factory: StoreFactory | None = None,
    cache: SnapshotCache | None = None,
    confirmed: SnapshotCache | None = None,
) -> Snapshot:
    """Write the local cache to the remote store.

    By default only the difference against the last confirmed snapshot is
    written, so remote rows created since then (by a feed sync, say) are left
    alone. ``overwrite`` replaces the scope's remote rows wholesale.
    """

    effective_cache = cache or default_snapshot_cache()
    baseline = confirmed or default_confirmed_cache()
    open_store = store_factory or _configured_store
    local = effective_cache.load()

    async def run() -> Snapshot:
        async with open_store() as store:
            engine = ReconciliationEngine(store)
            if overwrite:
                holder = ConfirmedSnapshot(engine, user_id, Snapshot(), cache=baseline)
                await holder.replace(local)
                return holder.snapshot
            await engine.ensure_settings(user_id, local.settings)
            holder = ConfirmedSnapshot(engine, user_id, baseline.load(), cache=baseline)
            await holder.commit(local)
            return holder.snapshot

    snapshot = asyncio.run(run())
    log.info("Pushed snapshot for %s (overwrite=%s)", user_id, overwrite)
    return snapshot


def list_calendar_feeds(
    *, user_id: str, store_factory: StoreFactory | None = None
) -> list[FeedSummary]:
    open_store = store_factory or _configured_store

    async def run() -> list[FeedSummary]:
        async with open_store() as store:
            return await list_feeds(store, user_id)

    return asyncio.run(run())


def add_calendar_feed(
    *,
    user_id: str,
    request: FeedCreate,
    store_factory: StoreFactory | None = None,
    config: FeedSyncConfig | None = None,
) -> FeedSummary:
    limits = (config or get_feed_sync_config()).platform_limits
    open_store = store_factory or _configured_store

    async def run() -> FeedSummary:
        async with open_store() as store:
            return await create_feed(store, user_id, request, limits=limits)

    return asyncio.run(run())


def update_calendar_feed(
    *,
    user_id: str,
    feed_id: str,
    request: FeedUpdate,
    store_factory: StoreFactory | None = None,
    config: FeedSyncConfig | None = None,
) -> FeedSummary:
    limits = (config or get_feed_sync_config()).platform_limits
    open_store = store_factory or _configured_store

    async def run() -> FeedSummary:
        async with open_store() as store:
            return await update_feed(store, user_id, feed_id, request, limits=limits)

    return asyncio.run(run())


def remove_calendar_feed(
    *, user_id: str, feed_id: str, store_factory: StoreFactory | None = None
) -> None:
    open_store = store_factory or _configured_store

    async def run() -> None:
        async with open_store() as store:
            await delete_feed(store, user_id, feed_id)

    asyncio.run(run())
