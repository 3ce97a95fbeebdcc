"""Diff-based synchronisation of a local snapshot with the remote store."""

from __future__ import annotations

from .collections import COLLECTIONS, DELETE_ORDER, DEPENDENT_UPSERT_ORDER, CollectionSpec
from .diff import SnapshotChanges, SnapshotDiff, diff_by_id, diff_snapshots
from .engine import ReconciliationEngine
from .session import ConfirmedSnapshot

__all__ = [
    "COLLECTIONS",
    "DELETE_ORDER",
    "DEPENDENT_UPSERT_ORDER",
    "CollectionSpec",
    "ConfirmedSnapshot",
    "ReconciliationEngine",
    "SnapshotChanges",
    "SnapshotDiff",
    "diff_by_id",
    "diff_snapshots",
]
