"""Domain events published when the event catalog changes."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class EventCreated(BaseModel):
    """Fired after a new definition is added to the catalog."""

    event_id: str


class EventUpdated(BaseModel):
    """Fired after a definition is replaced by an edited one."""

    event_id: str


class EventMoved(BaseModel):
    """Fired after a definition is re-anchored on another date."""

    event_id: str
    new_date: date


class EventDeleted(BaseModel):
    event_id: str


class ConflictDetected(BaseModel):
    """Fired when a saved event overlaps others occurring on its date."""

    event_id: str
    on: date
    conflicting_event_ids: list[str]
