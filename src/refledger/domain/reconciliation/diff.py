"""Identity-keyed differencing between two snapshots of one record kind."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from refledger.domain.model import Identified

from .collections import COLLECTIONS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from refledger.domain.model import Snapshot


@dataclass(slots=True)
class SnapshotDiff[T: Identified]:
    upserts: list[T] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list[str])

    @property
    def is_empty(self) -> bool:
        return not self.upserts and not self.deletes


def diff_by_id[T: Identified](previous: Sequence[T], next_: Sequence[T]) -> SnapshotDiff[T]:
    """Compute the writes that turn ``previous`` into ``next_``.

    A record in ``next_`` is an upsert when its id is new or when it differs
    structurally from the ``previous`` record with that id. Ids only present in
    ``previous`` are deletes. Upserts keep ``next_``'s order, deletes keep
    ``previous``'s order.
    """

    previous_by_id = {record.id: record for record in previous}
    next_ids = {record.id for record in next_}

    upserts = [
        record
        for record in next_
        if record.id not in previous_by_id or previous_by_id[record.id] != record
    ]
    deletes = [record.id for record in previous if record.id not in next_ids]
    return SnapshotDiff(upserts=upserts, deletes=deletes)


@dataclass(slots=True)
class SnapshotChanges:
    """Per-collection diffs between two full snapshots."""

    settings_changed: bool
    collections: dict[str, SnapshotDiff[Identified]]

    @property
    def is_empty(self) -> bool:
        return not self.settings_changed and all(d.is_empty for d in self.collections.values())

    def for_collection(self, name: str) -> SnapshotDiff[Identified]:
        return self.collections.get(name) or SnapshotDiff()


def diff_snapshots(previous: Snapshot, next_: Snapshot) -> SnapshotChanges:
    return SnapshotChanges(
        settings_changed=previous.settings != next_.settings,
        collections={
            spec.name: diff_by_id(spec.records(previous), spec.records(next_))
            for spec in COLLECTIONS
        },
    )
