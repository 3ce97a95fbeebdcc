from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest

from refledger.domain.errors import FeedLimitError, FeedNotFoundError, FeedValidationError
from refledger.domain.feed_management import (
    FeedCreate,
    FeedUpdate,
    create_feed,
    delete_feed,
    list_feeds,
    update_feed,
)
from refledger.domain.model import FeedPlatform, Sport
from tests.support.memory_store import InMemoryRemoteStore

pytestmark = pytest.mark.asyncio

USER = "user-1"
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _request(platform: str = "RefQuest", **overrides: object) -> FeedCreate:
    values: dict[str, object] = {
        "platform": platform,
        "name": "Spring Assignments",
        "feed_url": "https://refquest.example.com/ics/abc123?key=secret",
    }
    values.update(overrides)
    return FeedCreate(**values)  # pyright: ignore[reportArgumentType]


async def test_create_returns_masked_summary(memory_store: InMemoryRemoteStore) -> None:
    summary = await create_feed(
        memory_store,
        USER,
        _request(name="  Spring Assignments ", sport="Lacrosse", default_league=" "),
        now=NOW,
    )

    assert summary.platform is FeedPlatform.REFQUEST
    assert summary.name == "Spring Assignments"
    assert summary.sport is Sport.LACROSSE
    assert summary.default_league is None
    assert summary.enabled is True
    assert summary.last_synced_at is None
    assert summary.masked_feed_url == "https://refquest.example.com/..."
    stored = memory_store.rows("calendar_feeds")[0]
    assert stored["user_id"] == USER
    assert stored["feed_url"] == "https://refquest.example.com/ics/abc123?key=secret"


async def test_unknown_sport_means_infer(memory_store: InMemoryRemoteStore) -> None:
    summary = await create_feed(memory_store, USER, _request(sport="Hockey"))

    assert summary.sport is None


@pytest.mark.parametrize(
    ("request_", "message"),
    [
        (_request(platform="ArbiterSports"), "platform must be RefQuest or DragonFly"),
        (_request(name="   "), "name is required"),
        (_request(feed_url=""), "feed_url is required"),
        (_request(feed_url="ftp://files.example.com/cal.ics"), "feed_url must be http(s)"),
        (_request(feed_url="https://"), "feed_url must be a valid URL"),
    ],
)
async def test_create_rejects_invalid_requests(
    memory_store: InMemoryRemoteStore, request_: FeedCreate, message: str
) -> None:
    with pytest.raises(FeedValidationError, match=re.escape(message)):
        await create_feed(memory_store, USER, request_)

    assert memory_store.rows("calendar_feeds") == []


async def test_dragonfly_allows_a_single_feed(memory_store: InMemoryRemoteStore) -> None:
    await create_feed(memory_store, USER, _request("DragonFly"))

    with pytest.raises(FeedLimitError, match="DragonFly supports only 1 feed URL"):
        await create_feed(memory_store, USER, _request("DragonFly"))

    await create_feed(memory_store, "user-2", _request("DragonFly"))


async def test_refquest_allows_eight_feeds(memory_store: InMemoryRemoteStore) -> None:
    for index in range(8):
        await create_feed(memory_store, USER, _request(name=f"Feed {index}"))

    with pytest.raises(FeedLimitError, match="RefQuest supports at most 8 feed URLs"):
        await create_feed(memory_store, USER, _request(name="Feed 9"))


async def test_list_orders_by_platform_then_creation(memory_store: InMemoryRemoteStore) -> None:
    late = _request(name="Late", feed_url="https://a.example.com")
    await create_feed(memory_store, USER, late, now=NOW + timedelta(hours=1))
    await create_feed(memory_store, USER, _request(name="Early"), now=NOW)
    await create_feed(memory_store, USER, _request("DragonFly", name="Dragon"), now=NOW)
    await create_feed(memory_store, "user-2", _request(name="Other"), now=NOW)

    summaries = await list_feeds(memory_store, USER)

    assert [summary.name for summary in summaries] == ["Dragon", "Early", "Late"]
    assert summaries[2].masked_feed_url == "https://a.example.com/..."


async def test_update_applies_only_supplied_fields(memory_store: InMemoryRemoteStore) -> None:
    created = await create_feed(
        memory_store, USER, _request(sport="Soccer", default_league="OHSAA"), now=NOW
    )
    later = NOW + timedelta(days=1)

    updated = await update_feed(
        memory_store,
        USER,
        created.id,
        FeedUpdate(name="Renamed", enabled=False, default_league=None),
        now=later,
    )

    assert updated.name == "Renamed"
    assert updated.enabled is False
    assert updated.default_league is None
    assert updated.sport is Sport.SOCCER
    assert updated.created_at == NOW
    assert updated.updated_at == later
    stored = memory_store.rows("calendar_feeds")[0]
    assert stored["name"] == "Renamed"
    assert stored["feed_url"] == "https://refquest.example.com/ics/abc123?key=secret"


async def test_update_does_not_count_the_feed_itself(memory_store: InMemoryRemoteStore) -> None:
    created = await create_feed(memory_store, USER, _request("DragonFly"))

    updated = await update_feed(memory_store, USER, created.id, FeedUpdate(name="Only One"))

    assert updated.name == "Only One"


async def test_update_to_a_full_platform_is_rejected(memory_store: InMemoryRemoteStore) -> None:
    await create_feed(memory_store, USER, _request("DragonFly"))
    refquest = await create_feed(memory_store, USER, _request("RefQuest"))

    with pytest.raises(FeedLimitError):
        await update_feed(memory_store, USER, refquest.id, FeedUpdate(platform="DragonFly"))


async def test_update_rejects_blank_name(memory_store: InMemoryRemoteStore) -> None:
    created = await create_feed(memory_store, USER, _request())

    with pytest.raises(FeedValidationError, match="name cannot be blank"):
        await update_feed(memory_store, USER, created.id, FeedUpdate(name=" "))


async def test_update_of_another_scopes_feed_is_not_found(
    memory_store: InMemoryRemoteStore,
) -> None:
    created = await create_feed(memory_store, "user-2", _request())

    with pytest.raises(FeedNotFoundError, match="Feed not found"):
        await update_feed(memory_store, USER, created.id, FeedUpdate(name="Mine now"))


async def test_delete_is_scoped(memory_store: InMemoryRemoteStore) -> None:
    mine = await create_feed(memory_store, USER, _request())
    theirs = await create_feed(memory_store, "user-2", _request())

    await delete_feed(memory_store, USER, theirs.id)
    await delete_feed(memory_store, USER, mine.id)

    assert [row["id"] for row in memory_store.rows("calendar_feeds")] == [theirs.id]


async def test_delete_requires_an_id(memory_store: InMemoryRemoteStore) -> None:
    with pytest.raises(FeedValidationError, match="id is required"):
        await delete_feed(memory_store, USER, "  ")
