"""Port for keeping a local copy of the confirmed snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from refledger.domain.model import Snapshot


@runtime_checkable
class SnapshotCache(Protocol):
    def load(self) -> Snapshot: ...

    def save(self, snapshot: Snapshot) -> None: ...


__all__ = ["SnapshotCache"]
