"""HTTP transport for calendar feeds."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from refledger.adapters.http_resilience import ResilientClient
from refledger.domain.errors import FeedFetchError

if TYPE_CHECKING:
    from collections.abc import Callable

    from refledger.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class HttpFeedFetcher:
    """Download a feed body with a single GET."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient

    async def __call__(self, url: str) -> str:
        try:
            async with self._client_factory(self._config) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise FeedFetchError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise FeedFetchError(f"HTTP {response.status_code}", status_code=response.status_code)
        log.debug("Fetched %d bytes from %s", len(response.content), response.url.host)
        return response.text
