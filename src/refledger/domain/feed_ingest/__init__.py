"""Calendar feed ingestion: classification, normalization and merging."""

from __future__ import annotations

from .classifier import (
    Classification,
    Rule,
    classify,
    entry_text,
    infer_competition_level,
    infer_level_detail,
    infer_role,
    infer_sport,
)
from .merge import build_event, build_game
from .normalization import IngestOptions, NormalizedEntry, external_ref_for, normalize_entry
from .runner import FeedSyncResult, sync_all, sync_feed

__all__ = [
    "Classification",
    "FeedSyncResult",
    "IngestOptions",
    "NormalizedEntry",
    "Rule",
    "build_event",
    "build_game",
    "classify",
    "entry_text",
    "external_ref_for",
    "infer_competition_level",
    "infer_level_detail",
    "infer_role",
    "infer_sport",
    "normalize_entry",
    "sync_all",
    "sync_feed",
]
