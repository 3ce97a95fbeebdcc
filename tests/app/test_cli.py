from __future__ import annotations

from typing import Any

import pytest

from refledger.domain.errors import FeedNotFoundError, FeedValidationError, StoreError
from refledger.domain.feed_ingest import FeedSyncResult
from refledger.domain.feed_management import UNSET, FeedCreate, FeedUpdate
from refledger.domain.model import Snapshot
from refledger.ui import cli
from tests.support.records import make_feed


class Recorder:
    """Stand-in for an app entry point that records its keyword arguments."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls.append({"args": args, **kwargs})
        if self.error is not None:
            raise self.error
        return self.result


def _patch(monkeypatch: pytest.MonkeyPatch, name: str, recorder: Recorder) -> Recorder:
    monkeypatch.setattr(cli, name, recorder)
    return recorder


def test_feeds_add_builds_create_request(monkeypatch: pytest.MonkeyPatch) -> None:
    add = _patch(monkeypatch, "add_calendar_feed", Recorder(make_feed().summary()))

    cli.main(
        [
            "feeds",
            "add",
            "--user-id",
            "user-1",
            "--platform",
            "RefQuest",
            "--name",
            "Spring",
            "--url",
            "https://calendar.example.com/a.ics",
            "--sport",
            "Lacrosse",
            "--disabled",
        ]
    )

    (call,) = add.calls
    assert call["user_id"] == "user-1"
    assert call["request"] == FeedCreate(
        platform="RefQuest",
        name="Spring",
        feed_url="https://calendar.example.com/a.ics",
        enabled=False,
        sport="Lacrosse",
        default_league=None,
    )


def test_feeds_update_leaves_omitted_fields_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    update = _patch(monkeypatch, "update_calendar_feed", Recorder(make_feed().summary()))

    cli.main(
        [
            "feeds",
            "update",
            "--user-id",
            "user-1",
            "--feed-id",
            "feed-1",
            "--default-league",
            "",
            "--disable",
        ]
    )

    (call,) = update.calls
    assert call["feed_id"] == "feed-1"
    assert call["request"] == FeedUpdate(
        platform=UNSET,
        name=UNSET,
        feed_url=UNSET,
        enabled=False,
        sport=UNSET,
        default_league="",
    )


def test_feeds_list_and_remove(monkeypatch: pytest.MonkeyPatch) -> None:
    listing = _patch(monkeypatch, "list_calendar_feeds", Recorder([make_feed().summary()]))
    remove = _patch(monkeypatch, "remove_calendar_feed", Recorder())

    cli.main(["feeds", "list", "--user-id", "user-1"])
    cli.main(["feeds", "remove", "--user-id", "user-1", "--feed-id", "feed-1"])

    assert listing.calls == [{"args": (), "user_id": "user-1"}]
    assert remove.calls == [{"args": (), "user_id": "user-1", "feed_id": "feed-1"}]


@pytest.mark.parametrize(
    "error", [FeedValidationError("feed_url must be http(s)"), FeedNotFoundError("Feed not found")]
)
def test_invalid_requests_exit_with_two(
    monkeypatch: pytest.MonkeyPatch, error: Exception
) -> None:
    _patch(monkeypatch, "remove_calendar_feed", Recorder(error=error))

    with pytest.raises(SystemExit) as exc:
        cli.main(["feeds", "remove", "--user-id", "user-1", "--feed-id", "feed-1"])

    assert exc.value.code == 2


def test_runtime_errors_exit_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch(monkeypatch, "pull_snapshot", Recorder(error=StoreError("connection refused")))

    with pytest.raises(SystemExit) as exc:
        cli.main(["pull", "--user-id", "user-1"])

    assert exc.value.code == 1


def test_sync_feeds_exits_with_one_when_a_feed_failed(monkeypatch: pytest.MonkeyPatch) -> None:
    sync = _patch(
        monkeypatch,
        "sync_calendar_feeds",
        Recorder(FeedSyncResult(created_events=1, errors=["Spring: fetch failed: HTTP 404"])),
    )

    with pytest.raises(SystemExit) as exc:
        cli.main(["sync-feeds", "--user-id", "user-1", "--feed-id", "feed-1"])

    assert exc.value.code == 1
    assert sync.calls == [{"args": (), "user_id": "user-1", "feed_id": "feed-1"}]


def test_clean_sync_and_push_return_normally(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch(monkeypatch, "sync_calendar_feeds", Recorder(FeedSyncResult(created_events=2)))
    push = _patch(monkeypatch, "push_snapshot", Recorder(Snapshot()))

    cli.main(["sync-feeds", "--user-id", "user-1"])
    cli.main(["push", "--user-id", "user-1", "--overwrite"])

    assert push.calls == [{"args": (), "user_id": "user-1", "overwrite": True}]


def test_init_db_passes_database_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    init = _patch(monkeypatch, "initialise_database", Recorder())

    cli.main(["init-db", "--database-uri", "sqlite+aiosqlite:///ledger.db"])

    assert init.calls == [{"args": ("sqlite+aiosqlite:///ledger.db",)}]


def test_missing_subcommand_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])

    assert exc.value.code == 2
