"""Domain event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from calendar_app.domain.bus import EventBus
from calendar_app.domain.events import (
    ConflictDetected,
    EventCreated,
    EventDeleted,
    EventMoved,
    EventUpdated,
)
from calendar_app.domain.models import ConflictCandidate, ConflictWarning
from calendar_app.repos.memory import ConflictWarningRepository, EventRepository
from calendar_app.services.conflicts import find_conflicts
from calendar_app.services.recurrence import occurrences_on

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires catalog-change handlers to the bus."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        warning_repo: ConflictWarningRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.warning_repo = warning_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_saved)
        self.bus.subscribe(EventUpdated, self.on_event_saved)
        self.bus.subscribe(EventMoved, self.on_event_saved)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_saved(self, event: EventCreated | EventUpdated | EventMoved) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        # Warnings describe the current definition only.
        self.warning_repo.clear_for_event(stored.id)

        same_day = occurrences_on(self.event_repo.list_all(), stored.start_date)
        conflicts = find_conflicts(
            ConflictCandidate.from_event(stored), same_day, exclude_id=stored.id
        )
        if conflicts:
            self.bus.publish(
                ConflictDetected(
                    event_id=stored.id,
                    on=stored.start_date,
                    conflicting_event_ids=[c.id for c in conflicts],
                )
            )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        self.warning_repo.add(
            ConflictWarning(
                event_id=event.event_id,
                on=event.on,
                conflicting_event_ids=event.conflicting_event_ids,
            )
        )
        logger.warning(
            "Event %s conflicts on %s with %s",
            event.event_id,
            event.on.isoformat(),
            ", ".join(event.conflicting_event_ids),
        )

    def on_event_deleted(self, event: EventDeleted) -> None:
        self.warning_repo.clear_for_event(event.event_id)
