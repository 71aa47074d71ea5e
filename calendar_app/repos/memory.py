"""Repositories for the event catalog and the conflict warnings raised against it."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import date
from pathlib import Path

from pydantic import TypeAdapter

from calendar_app.config import Settings
from calendar_app.domain.models import ConflictWarning, EventDefinition

logger = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(list[EventDefinition])


class EventRepository:
    """Dict-backed catalog of EventDefinition instances, keyed by id.

    Iteration order is insertion order; replacing a definition keeps its
    position.
    """

    def __init__(self) -> None:
        self._store: dict[str, EventDefinition] = {}

    def add(self, event: EventDefinition) -> None:
        self._store[event.id] = event
        self._changed()

    def get(self, event_id: str) -> EventDefinition | None:
        return self._store.get(event_id)

    def list_all(self) -> list[EventDefinition]:
        return list(self._store.values())

    def update(self, event: EventDefinition) -> EventDefinition | None:
        """Replace the stored definition with the same id, wholesale."""
        if event.id not in self._store:
            return None
        self._store[event.id] = event
        self._changed()
        return event

    def move(self, event_id: str, new_date: date) -> EventDefinition | None:
        """Re-anchor an event on *new_date*, keeping everything else."""
        current = self._store.get(event_id)
        if current is None:
            return None
        moved = current.model_copy(update={"start_date": new_date})
        self._store[event_id] = moved
        self._changed()
        return moved

    def delete(self, event_id: str) -> None:
        if self._store.pop(event_id, None) is not None:
            self._changed()

    def _changed(self) -> None:
        """Hook called after every mutation."""


class JsonFileEventRepository(EventRepository):
    """EventRepository that rewrites the whole catalog to a JSON file on change."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            for event in _CATALOG_ADAPTER.validate_json(self.path.read_bytes()):
                self._store[event.id] = event
            logger.info("Loaded %d events from %s", len(self._store), self.path)

    def _changed(self) -> None:
        payload = _CATALOG_ADAPTER.dump_json(self.list_all(), indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write a sibling file and swap it in so the catalog is never half-written.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved %d events to %s", len(self._store), self.path)


class ConflictWarningRepository:
    """List-backed store for ConflictWarning instances."""

    def __init__(self) -> None:
        self._warnings: list[ConflictWarning] = []

    def add(self, warning: ConflictWarning) -> None:
        self._warnings.append(warning)

    def list_for_event(self, event_id: str) -> list[ConflictWarning]:
        return sorted(
            [w for w in self._warnings if w.event_id == event_id],
            key=lambda w: w.detected_at,
        )

    def clear_for_event(self, event_id: str) -> None:
        self._warnings = [w for w in self._warnings if w.event_id != event_id]


def create_event_repository(settings: Settings) -> EventRepository:
    """Return a file-backed repository if a storage path is configured."""
    if settings.storage_path is not None:
        return JsonFileEventRepository(settings.storage_path)
    return EventRepository()
