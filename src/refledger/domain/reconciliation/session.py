"""Caller-owned holder of the last snapshot known to match the remote store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from refledger.domain.model import Snapshot
    from refledger.domain.ports import SnapshotCache

    from .engine import ReconciliationEngine


log = getLogger(__name__)


class ConfirmedSnapshot:
    """Swap in a new snapshot only once every remote write for it succeeded.

    When a write raises, the held snapshot is unchanged and stays the base for
    the next incremental sync.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        user_id: str,
        snapshot: Snapshot,
        *,
        cache: SnapshotCache | None = None,
    ) -> None:
        self._engine = engine
        self._user_id = user_id
        self._snapshot = snapshot
        self._cache = cache

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    async def commit(self, next_: Snapshot) -> None:
        """Write the difference to ``next_`` and confirm it."""
        await self._engine.incremental_sync(self._user_id, self._snapshot, next_)
        self._confirm(next_)

    async def replace(self, next_: Snapshot) -> None:
        """Overwrite the remote scope with ``next_`` and confirm it."""
        await self._engine.full_replace(self._user_id, next_)
        self._confirm(next_)

    async def refresh(self) -> Snapshot:
        """Adopt the remote state as the confirmed snapshot."""
        self._confirm(await self._engine.fetch_all(self._user_id))
        return self._snapshot

    def _confirm(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot.copy()
        if self._cache is not None:
            self._cache.save(self._snapshot)
            log.debug("Saved confirmed snapshot for %s", self._user_id)
