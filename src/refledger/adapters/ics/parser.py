"""Read iCalendar text into domain ``FeedEntry`` values."""

from __future__ import annotations

from logging import getLogger

from icalendar import Calendar, Component
from pydantic import ValidationError

from refledger.domain.errors import FeedParseError
from refledger.domain.model import FeedEntry

from .schema import IcsEvent

log = getLogger(__name__)

_TEXT_PROPERTIES = {
    "uid": "UID",
    "summary": "SUMMARY",
    "description": "DESCRIPTION",
    "location": "LOCATION",
}
_TIME_PROPERTIES = {
    "dtstart": "DTSTART",
    "dtend": "DTEND",
    "duration": "DURATION",
}


def _component_payload(component: Component) -> dict[str, object]:
    payload: dict[str, object] = {}
    for field, prop in _TEXT_PROPERTIES.items():
        value = component.get(prop)
        if value is not None:
            payload[field] = str(value)
    for field, prop in _TIME_PROPERTIES.items():
        if prop in component:
            payload[field] = component.decoded(prop)
    return payload


def translate_event(event: IcsEvent) -> FeedEntry:
    return FeedEntry(
        uid=event.uid,
        start=event.dtstart,
        end=event.end,
        all_day=event.all_day,
        summary=event.summary,
        description=event.description,
        location=event.location,
    )


def parse_feed_entries(text: str) -> list[FeedEntry]:
    """Parse ``text`` and return one entry per usable VEVENT.

    Events without a UID or DTSTART are skipped; anything that is not an
    iCalendar document raises ``FeedParseError``.
    """

    if not text.strip():
        raise FeedParseError("empty calendar body")
    try:
        calendar = Calendar.from_ical(text)
    except ValueError as exc:
        raise FeedParseError(str(exc) or "malformed calendar body") from exc

    entries: list[FeedEntry] = []
    for component in calendar.walk("VEVENT"):
        payload = _component_payload(component)
        if "uid" not in payload or "dtstart" not in payload:
            log.debug("Skipping VEVENT without UID or DTSTART")
            continue
        try:
            event = IcsEvent.model_validate(payload)
        except ValidationError as exc:
            log.debug("Skipping unreadable VEVENT %s: %s", payload.get("uid"), exc)
            continue
        entries.append(translate_event(event))
    return entries
