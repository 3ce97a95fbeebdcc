from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from refledger.app import (
    add_calendar_feed,
    initialise_database,
    list_calendar_feeds,
    pull_snapshot,
    push_snapshot,
    remove_calendar_feed,
    sync_calendar_feeds,
    update_calendar_feed,
)
from refledger.config import configure_logging
from refledger.domain.errors import FeedNotFoundError, FeedValidationError
from refledger.domain.feed_management import UNSET, FeedCreate, FeedUpdate
from refledger.domain.model import FeedPlatform, Sport

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

PLATFORM_CHOICES = [platform.value for platform in FeedPlatform]
SPORT_CHOICES = [sport.value for sport in Sport]


def _add_user_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--user-id",
        type=str,
        required=True,
        help="Scope (owner id) every read and write is restricted to",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep refledger records in sync")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create or upgrade the database schema")
    init_db.add_argument(
        "--database-uri",
        type=str,
        help="Database URI (defaults to DATABASE_URI or the local data directory)",
    )

    feeds = subparsers.add_parser("feeds", help="Manage calendar feed subscriptions")
    feeds_sub = feeds.add_subparsers(dest="feeds_command", required=True)

    feeds_list = feeds_sub.add_parser("list", help="List feeds with masked URLs")
    _add_user_id(feeds_list)

    feeds_add = feeds_sub.add_parser("add", help="Subscribe to a calendar feed")
    _add_user_id(feeds_add)
    feeds_add.add_argument("--platform", choices=PLATFORM_CHOICES, required=True)
    feeds_add.add_argument("--name", type=str, required=True)
    feeds_add.add_argument("--url", type=str, required=True, help="http(s) iCalendar feed URL")
    feeds_add.add_argument(
        "--sport",
        choices=SPORT_CHOICES,
        help="Fixed sport for every entry (inferred per entry when omitted)",
    )
    feeds_add.add_argument("--default-league", type=str)
    feeds_add.add_argument("--disabled", action="store_true", help="Create the feed disabled")

    feeds_update = feeds_sub.add_parser("update", help="Change a feed subscription")
    _add_user_id(feeds_update)
    feeds_update.add_argument("--feed-id", type=str, required=True)
    feeds_update.add_argument("--platform", choices=PLATFORM_CHOICES)
    feeds_update.add_argument("--name", type=str)
    feeds_update.add_argument("--url", type=str)
    feeds_update.add_argument("--sport", type=str, help="Soccer, Lacrosse, or '' to infer")
    feeds_update.add_argument("--default-league", type=str, help="'' clears the league")
    enabled = feeds_update.add_mutually_exclusive_group()
    enabled.add_argument("--enable", dest="enabled", action="store_true", default=None)
    enabled.add_argument("--disable", dest="enabled", action="store_false")

    feeds_remove = feeds_sub.add_parser("remove", help="Delete a feed subscription")
    _add_user_id(feeds_remove)
    feeds_remove.add_argument("--feed-id", type=str, required=True)

    sync_feeds = subparsers.add_parser("sync-feeds", help="Ingest calendar feeds")
    _add_user_id(sync_feeds)
    sync_feeds.add_argument(
        "--feed-id",
        type=str,
        help="Sync only this feed (defaults to every enabled feed)",
    )

    pull = subparsers.add_parser("pull", help="Replace the local cache with the remote state")
    _add_user_id(pull)

    push = subparsers.add_parser("push", help="Write the local cache to the remote store")
    _add_user_id(push)
    push.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace all remote rows instead of writing only the differences",
    )

    return parser.parse_args(list(argv))


def _feed_update(args: argparse.Namespace) -> FeedUpdate:
    return FeedUpdate(
        platform=args.platform if args.platform is not None else UNSET,
        name=args.name if args.name is not None else UNSET,
        feed_url=args.url if args.url is not None else UNSET,
        enabled=args.enabled if args.enabled is not None else UNSET,
        sport=args.sport if args.sport is not None else UNSET,
        default_league=args.default_league if args.default_league is not None else UNSET,
    )


def _run_feeds(args: argparse.Namespace) -> None:
    if args.feeds_command == "list":
        summaries = list_calendar_feeds(user_id=args.user_id)
        if not summaries:
            log.info("No calendar feeds for %s", args.user_id)
        for summary in summaries:
            log.info(
                "%s  %-9s  %-24s  enabled=%s  last_synced=%s  %s",
                summary.id,
                summary.platform,
                summary.name,
                summary.enabled,
                summary.last_synced_at.isoformat() if summary.last_synced_at else "never",
                summary.masked_feed_url,
            )
    elif args.feeds_command == "add":
        summary = add_calendar_feed(
            user_id=args.user_id,
            request=FeedCreate(
                platform=args.platform,
                name=args.name,
                feed_url=args.url,
                enabled=not args.disabled,
                sport=args.sport,
                default_league=args.default_league,
            ),
        )
        log.info("Created feed %s (%s)", summary.id, summary.masked_feed_url)
    elif args.feeds_command == "update":
        summary = update_calendar_feed(
            user_id=args.user_id, feed_id=args.feed_id, request=_feed_update(args)
        )
        log.info("Updated feed %s (%s)", summary.id, summary.masked_feed_url)
    elif args.feeds_command == "remove":
        remove_calendar_feed(user_id=args.user_id, feed_id=args.feed_id)
        log.info("Removed feed %s", args.feed_id)
    else:
        raise ValueError(f"Unsupported feeds command: {args.feeds_command}")


def _run(args: argparse.Namespace) -> int:
    if args.command == "init-db":
        initialise_database(args.database_uri)
    elif args.command == "feeds":
        _run_feeds(args)
    elif args.command == "sync-feeds":
        result = sync_calendar_feeds(user_id=args.user_id, feed_id=args.feed_id)
        for error in result.errors:
            log.warning(error)
        if result.errors:
            return 1
    elif args.command == "pull":
        pull_snapshot(user_id=args.user_id)
    elif args.command == "push":
        push_snapshot(user_id=args.user_id, overwrite=args.overwrite)
    else:
        raise ValueError(f"Unsupported command: {args.command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        status = _run(parsed_args)
    except (FeedValidationError, FeedNotFoundError) as exc:
        log.error("Invalid request: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
