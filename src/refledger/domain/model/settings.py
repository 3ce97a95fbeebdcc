"""Per-scope singleton settings record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

DEFAULT_HOME_ADDRESS: Final[str] = "399 S. Columbia Ave, Bexley, OH 43209"
DEFAULT_ASSIGNING_PLATFORMS: Final[tuple[str, ...]] = ("DragonFly", "RefQuest")


@dataclass(slots=True, kw_only=True)
class Settings:
    home_address: str = DEFAULT_HOME_ADDRESS
    assigning_platforms: list[str] = field(
        default_factory=lambda: list(DEFAULT_ASSIGNING_PLATFORMS)
    )
    leagues: list[str] = field(default_factory=list[str])
