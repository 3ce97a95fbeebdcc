"""JSON file caches for the working snapshot and the last confirmed one."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, cast

from pydantic import TypeAdapter, ValidationError

from refledger.domain.model import (
    CompetitionLevel,
    EvidenceType,
    RequirementDefinition,
    RequirementFrequency,
    Snapshot,
    Sport,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

log = getLogger(__name__)

SNAPSHOT_ADAPTER: Final[TypeAdapter[Snapshot]] = TypeAdapter(Snapshot)

ANY_SPORT: Final[str] = "Any"


def seed_snapshot(*, now: datetime | None = None) -> Snapshot:
    """Snapshot for a first run: default settings and the standing requirements."""

    now = now or utcnow()
    return Snapshot(
        requirement_definitions=[
            RequirementDefinition(
                id="reqdef_hs_meetings",
                name="Local Meetings",
                governing_body="Local Association",
                sport=ANY_SPORT,
                competition_level=CompetitionLevel.HIGH_SCHOOL,
                frequency=RequirementFrequency.SEASON,
                required_count=4,
                evidence_type=EvidenceType.ATTENDANCE,
                notes=(
                    "Track each meeting as an activity (quantity 1). "
                    "No need to create four separate requirements."
                ),
                created_at=now,
                updated_at=now,
            ),
            RequirementDefinition(
                id="reqdef_ussoccer_fitness",
                name="US Soccer Fitness Test",
                governing_body="US Soccer",
                sport=Sport.SOCCER,
                competition_level=CompetitionLevel.CLUB,
                frequency=RequirementFrequency.ANNUAL,
                required_count=1,
                evidence_type=EvidenceType.PASS_FAIL,
                notes="Add other US Soccer requirements as you confirm them.",
                created_at=now,
                updated_at=now,
            ),
        ],
    )


class LocalSnapshotCache:
    """Read and write one snapshot as a JSON document at ``path``.

    ``seed`` supplies the snapshot used when the file holds nothing usable.
    """

    def __init__(self, path: Path, *, seed: Callable[[], Snapshot] = seed_snapshot) -> None:
        self.path = path
        self.seed = seed

    def load(self) -> Snapshot:
        """Return the cached snapshot, or the seed when there is nothing usable.

        Keys missing from the file are filled from the seed; settings are merged
        field by field.
        """

        seed = self.seed()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return seed
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable snapshot cache %s: %s", self.path, exc)
            return seed
        if not isinstance(raw, dict):
            log.warning("Ignoring snapshot cache %s: not a JSON object", self.path)
            return seed

        stored = cast("dict[str, Any]", raw)
        defaults = cast("dict[str, Any]", SNAPSHOT_ADAPTER.dump_python(seed, mode="json"))
        settings = stored.get("settings")
        merged = {
            **defaults,
            **stored,
            "settings": {
                **defaults["settings"],
                **(settings if isinstance(settings, dict) else {}),
            },
        }
        try:
            return SNAPSHOT_ADAPTER.validate_json(json.dumps(merged))
        except ValidationError as exc:
            log.warning("Ignoring invalid snapshot cache %s: %s", self.path, exc)
            return seed

    def save(self, snapshot: Snapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(SNAPSHOT_ADAPTER.dump_json(snapshot, indent=2))

    def reset(self) -> None:
        self.path.unlink(missing_ok=True)
