"""Infer structured game fields from free-text calendar entries.

Each field is decided by an ordered table of ``(pattern, outcome)`` rules that
are matched case-insensitively against the entry text; the first matching rule
wins and a per-field default applies when none does. An outcome is either a
fixed value or a function of the match.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from refledger.domain.model import CompetitionLevel, FeedPlatform, Role, Sport

if TYPE_CHECKING:
    from collections.abc import Sequence

TEXT_SEPARATOR: Final[str] = " | "


@dataclass(frozen=True, slots=True)
class Rule[T]:
    pattern: re.Pattern[str]
    outcome: T | Callable[[re.Match[str]], T]

    def apply(self, text: str) -> tuple[bool, T | None]:
        match = self.pattern.search(text)
        if match is None:
            return False, None
        if callable(self.outcome):
            return True, self.outcome(match)
        return True, self.outcome


def _rule[T](pattern: str, outcome: T | Callable[[re.Match[str]], T]) -> Rule[T]:
    return Rule(re.compile(pattern, re.IGNORECASE), outcome)


def first_match[T](rules: Sequence[Rule[T]], text: str, default: T) -> T:
    for rule in rules:
        matched, outcome = rule.apply(text)
        if matched:
            return outcome  # pyright: ignore[reportReturnType]
    return default


SPORT_RULES: Final[tuple[Rule[Sport], ...]] = (
    _rule(r"\blacrosse\b|\blax\b", Sport.LACROSSE),
)

COMPETITION_LEVEL_RULES: Final[tuple[Rule[CompetitionLevel], ...]] = (
    _rule(r"\bcollege\b|\bncaa\b|\bnaia\b|\bjuco\b", CompetitionLevel.COLLEGE),
    _rule(
        r"\bvarsity\b|\bjv\b|junior varsity|\bms\b|middle school|\bhs\b|high school",
        CompetitionLevel.HIGH_SCHOOL,
    ),
    _rule(r"\badult\b|\bu\d{1,2}\b|\bclub\b", CompetitionLevel.CLUB),
)

LEVEL_DETAIL_RULES: Final[tuple[Rule[str | None], ...]] = (
    _rule(r"\b(U\d{1,2})\b", lambda match: match.group(1).upper()),
    _rule(r"\bvarsity\b", "Varsity"),
    _rule(r"\bjv\b|junior varsity", "JV"),
    _rule(r"\bms\b|middle school", "MS"),
)

# Only RefQuest lacrosse assignments carry a role in their text.
LACROSSE_ROLE_RULES: Final[tuple[Rule[Role | None], ...]] = (
    _rule(r"head umpire", Role.LEAD),
    _rule(r"umpire\s*(1|2)\b", Role.REF),
)


@dataclass(frozen=True, slots=True)
class Classification:
    sport: Sport
    competition_level: CompetitionLevel
    level_detail: str | None
    role: Role | None


def entry_text(*fields: str | None) -> str:
    """Join the non-empty text fields of an entry for matching."""
    return TEXT_SEPARATOR.join(field for field in fields if field)


def infer_sport(text: str, *, feed_sport: Sport | None = None) -> Sport:
    if feed_sport is not None:
        return feed_sport
    return first_match(SPORT_RULES, text, Sport.SOCCER)


def infer_competition_level(text: str) -> CompetitionLevel:
    return first_match(COMPETITION_LEVEL_RULES, text, CompetitionLevel.HIGH_SCHOOL)


def infer_level_detail(text: str) -> str | None:
    return first_match(LEVEL_DETAIL_RULES, text, None)


def infer_role(text: str, *, platform: FeedPlatform, sport: Sport) -> Role | None:
    if platform is not FeedPlatform.REFQUEST or sport is not Sport.LACROSSE:
        return None
    return first_match(LACROSSE_ROLE_RULES, text, None)


def classify(
    text: str,
    *,
    platform: FeedPlatform,
    feed_sport: Sport | None = None,
) -> Classification:
    sport = infer_sport(text, feed_sport=feed_sport)
    return Classification(
        sport=sport,
        competition_level=infer_competition_level(text),
        level_detail=infer_level_detail(text),
        role=infer_role(text, platform=platform, sport=sport),
    )
