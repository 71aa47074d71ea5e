"""FastAPI application — entry point for the calendar service."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import FastAPI, HTTPException, Path

from calendar_app.config import settings
from calendar_app.domain.bus import EventBus
from calendar_app.domain.events import EventCreated, EventDeleted, EventMoved, EventUpdated
from calendar_app.domain.handlers import HandlerRegistry
from calendar_app.domain.models import (
    ConflictCandidate,
    ConflictCheckResponse,
    ConflictWarning,
    EventDefinition,
    EventDraft,
    EventSaveResponse,
    GridDay,
    MoveEventRequest,
)
from calendar_app.repos.memory import ConflictWarningRepository, create_event_repository
from calendar_app.services.conflicts import find_conflicts
from calendar_app.services.grid import month_grid
from calendar_app.services.recurrence import occurrences_on

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = create_event_repository(settings)
warning_repo = ConflictWarningRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    warning_repo=warning_repo,
)


def _get_or_404(event_id: str) -> EventDefinition:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _describe_conflicts(event: EventDefinition) -> list[str]:
    """Describe the warnings the save handlers just recorded for *event*."""
    described: list[str] = []
    for warning in warning_repo.list_for_event(event.id):
        for cid in warning.conflicting_event_ids:
            conflicting = event_repo.get(cid)
            described.append(f"{conflicting.title} ({cid})" if conflicting else cid)
    return described


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/events", response_model=EventSaveResponse)
def create_event(draft: EventDraft) -> EventSaveResponse:
    """Add a new event definition to the catalog."""
    event = EventDefinition.from_draft(draft)
    event_repo.add(event)
    logger.info("Created event %s (%s)", event.id, event.title)

    event_bus.publish(EventCreated(event_id=event.id))
    return EventSaveResponse(event=event, conflicts=_describe_conflicts(event))


@app.get("/events", response_model=list[EventDefinition])
def list_events() -> list[EventDefinition]:
    """Return the whole catalog in insertion order."""
    return event_repo.list_all()


@app.get("/events/{event_id}", response_model=EventDefinition)
def get_event(event_id: str) -> EventDefinition:
    return _get_or_404(event_id)


@app.put("/events/{event_id}", response_model=EventSaveResponse)
def update_event(event_id: str, draft: EventDraft) -> EventSaveResponse:
    """Replace an event definition wholesale, keeping its id."""
    _get_or_404(event_id)
    event = EventDefinition.from_draft(draft, event_id=event_id)
    event_repo.update(event)
    logger.info("Updated event %s", event_id)

    event_bus.publish(EventUpdated(event_id=event_id))
    return EventSaveResponse(event=event, conflicts=_describe_conflicts(event))


@app.post("/events/{event_id}/move", response_model=EventSaveResponse)
def move_event(event_id: str, body: MoveEventRequest) -> EventSaveResponse:
    """Re-anchor an event on another date (drag and drop on the grid)."""
    _get_or_404(event_id)
    event = event_repo.move(event_id, body.new_date)
    logger.info("Moved event %s to %s", event_id, body.new_date.isoformat())

    event_bus.publish(EventMoved(event_id=event_id, new_date=body.new_date))
    return EventSaveResponse(event=event, conflicts=_describe_conflicts(event))


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    _get_or_404(event_id)
    event_repo.delete(event_id)
    logger.info("Deleted event %s", event_id)

    event_bus.publish(EventDeleted(event_id=event_id))
    return {"status": "deleted"}


@app.get("/events/{event_id}/warnings", response_model=list[ConflictWarning])
def list_warnings(event_id: str) -> list[ConflictWarning]:
    """Return the conflict warnings recorded for the event's current definition."""
    _get_or_404(event_id)
    return warning_repo.list_for_event(event_id)


@app.get("/occurrences", response_model=list[EventDefinition])
def list_occurrences(on: date) -> list[EventDefinition]:
    """Return the events occurring on *on*, in catalog order."""
    return occurrences_on(event_repo.list_all(), on)


@app.get("/calendar/{year}/{month}", response_model=list[GridDay])
def get_month(
    # Grids spill into neighbouring years, which must stay representable.
    year: int = Path(gt=1, lt=9999),
    month: int = Path(ge=1, le=12),
    today: date | None = None,
) -> list[GridDay]:
    """Return the Sunday-first grid of whole weeks covering *month*."""
    return month_grid(event_repo.list_all(), year, month, today or date.today())


@app.post("/conflicts/check", response_model=ConflictCheckResponse)
def check_conflicts(candidate: ConflictCandidate) -> ConflictCheckResponse:
    """Report whether *candidate* overlaps anything on its date."""
    target = candidate.start_date or date.today()
    conflicts = find_conflicts(
        candidate,
        occurrences_on(event_repo.list_all(), target),
        exclude_id=candidate.id,
    )
    return ConflictCheckResponse(
        has_conflict=bool(conflicts),
        conflicting_event_ids=[c.id for c in conflicts],
    )


def main() -> None:
    import uvicorn

    uvicorn.run("calendar_app.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
