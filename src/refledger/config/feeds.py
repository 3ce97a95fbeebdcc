"""Calendar feed ingestion settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from refledger.domain.feed_ingest.normalization import (
    DEFAULT_EVENT_DURATION,
    DEFAULT_EVENT_TITLE,
    DEFAULT_TIMEZONE,
    IngestOptions,
)
from refledger.domain.model import PLATFORM_FEED_LIMITS, FeedPlatform

from .env import env_float
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_FEED_TIMEOUT_SECONDS: Final[float] = 20.0
FEED_USER_AGENT: Final[str] = "refledger-feed-sync"


def _default_feed_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="calendar-feeds",
        timeout_seconds=DEFAULT_FEED_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        default_headers={"User-Agent": FEED_USER_AGENT, "Accept": "text/calendar, */*"},
    )


@dataclass(frozen=True, slots=True)
class FeedSyncConfig:
    timezone: str = DEFAULT_TIMEZONE
    default_event_duration: timedelta = DEFAULT_EVENT_DURATION
    default_title: str = DEFAULT_EVENT_TITLE
    platform_limits: dict[FeedPlatform, int] = field(
        default_factory=lambda: dict(PLATFORM_FEED_LIMITS)
    )
    resilience: ResilienceConfig = field(default_factory=_default_feed_resilience)

    @property
    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from exc

    def ingest_options(self) -> IngestOptions:
        return IngestOptions(
            timezone=self.timezone,
            default_event_duration=self.default_event_duration,
            default_title=self.default_title,
        )


def get_feed_sync_config() -> FeedSyncConfig:
    timezone = os.getenv("REFLEDGER_TIMEZONE") or DEFAULT_TIMEZONE
    timeout = env_float("REFLEDGER_FEED_TIMEOUT_SECONDS", DEFAULT_FEED_TIMEOUT_SECONDS)
    resilience = _default_feed_resilience()
    config = FeedSyncConfig(
        timezone=timezone,
        resilience=ResilienceConfig(
            name=resilience.name,
            timeout_seconds=timeout,
            ratelimit=resilience.ratelimit,
            default_headers=resilience.default_headers,
        ),
    )
    _ = config.zone
    return config
