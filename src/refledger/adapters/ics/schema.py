"""Pydantic model for the VEVENT properties the ingestion engine reads."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class IcsEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    uid: str
    dtstart: datetime | date
    dtend: datetime | date | None = None
    duration: timedelta | None = None
    summary: str | None = None
    description: str | None = None
    location: str | None = None

    normalize_text = field_validator("summary", "description", "location", mode="before")(
        _blank_to_none
    )

    @field_validator("uid", mode="before")
    @classmethod
    def _require_uid(cls, value: object) -> object:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("UID is blank")
        return text

    @property
    def all_day(self) -> bool:
        return not isinstance(self.dtstart, datetime)

    @property
    def end(self) -> datetime | date | None:
        if self.dtend is not None:
            return self.dtend
        if self.duration is not None:
            return self.dtstart + self.duration
        return None
