"""Domain models for the calendar: event definitions and recurrence patterns."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# 0=Sunday .. 6=Saturday
Weekday = Annotated[int, Field(ge=0, le=6)]


# ---------------------------------------------------------------------------
# Recurrence patterns (tagged on ``type``)
# ---------------------------------------------------------------------------


class _Pattern(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    interval: int = Field(default=1, ge=1)
    end_date: date | None = None


class DailyRecurrence(_Pattern):
    """Every ``interval`` days, optionally capped at ``occurrences``."""

    type: Literal["daily"] = "daily"
    occurrences: int | None = Field(default=None, ge=1)


class WeeklyRecurrence(_Pattern):
    """On the given weekdays, every ``interval`` elapsed weeks."""

    type: Literal["weekly"] = "weekly"
    weekdays: frozenset[Weekday] = Field(min_length=1)
    # Accepted for storage only; weekly evaluation does not count occurrences.
    occurrences: int | None = Field(default=None, ge=1)


class MonthlyRecurrence(_Pattern):
    type: Literal["monthly"] = "monthly"
    occurrences: int | None = Field(default=None, ge=1)


class CustomRecurrence(_Pattern):
    type: Literal["custom"] = "custom"
    occurrences: int | None = Field(default=None, ge=1)


RecurrencePattern = Annotated[
    Union[DailyRecurrence, WeeklyRecurrence, MonthlyRecurrence, CustomRecurrence],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Event definitions
# ---------------------------------------------------------------------------


class EventDraft(BaseModel):
    """Everything the user fills in for an event; validated at the boundary."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    start_date: date
    start_time: time
    end_time: time
    color: str = "#3b82f6"
    recurrence: RecurrencePattern | None = None

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title is required")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _minute_precision(cls, value: time) -> time:
        return value.replace(second=0, microsecond=0)

    @model_validator(mode="after")
    def _end_after_start(self) -> EventDraft:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventDefinition(EventDraft):
    """A stored event. Immutable; edits replace it wholesale under the same id."""

    id: str = Field(default_factory=_new_id)

    @classmethod
    def from_draft(cls, draft: EventDraft, event_id: str | None = None) -> EventDefinition:
        data = draft.model_dump()
        if event_id is not None:
            data["id"] = event_id
        return cls(**data)


class ConflictCandidate(BaseModel):
    """A time range to test against the occurrences on its date.

    Either bound may be missing while a form is still being filled in; such a
    candidate never conflicts.
    """

    id: str | None = None
    start_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None

    @classmethod
    def from_event(cls, event: EventDefinition) -> ConflictCandidate:
        return cls(
            id=event.id,
            start_date=event.start_date,
            start_time=event.start_time,
            end_time=event.end_time,
        )


class ConflictWarning(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    on: date
    conflicting_event_ids: list[str]
    detected_at: datetime = Field(default_factory=_utcnow)


class GridDay(BaseModel):
    """One cell of the month grid."""

    day: date
    is_current_month: bool
    is_today: bool
    events: list[EventDefinition] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class MoveEventRequest(BaseModel):
    new_date: date


class EventSaveResponse(BaseModel):
    event: EventDefinition
    conflicts: list[str] = Field(default_factory=list)


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicting_event_ids: list[str] = Field(default_factory=list)
