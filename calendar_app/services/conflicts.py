"""Service for detecting time overlaps between a candidate and existing occurrences."""

from __future__ import annotations

from datetime import date, time
from typing import Iterable

from calendar_app.domain.models import ConflictCandidate, EventDefinition
from calendar_app.services.recurrence import OccurrenceResolver, occurrences_on


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _overlaps(start: int, end: int, existing: EventDefinition) -> bool:
    # Half-open ranges: 09:00-10:00 and 10:00-11:00 do not overlap.
    return start < time_to_minutes(existing.end_time) and end > time_to_minutes(
        existing.start_time
    )


def _candidates(
    occurrences: Iterable[EventDefinition], exclude_id: str | None
) -> Iterable[EventDefinition]:
    return (o for o in occurrences if exclude_id is None or o.id != exclude_id)


def find_conflicts(
    candidate: ConflictCandidate,
    occurrences: Iterable[EventDefinition],
    exclude_id: str | None = None,
) -> list[EventDefinition]:
    """Return the occurrences whose time range overlaps *candidate*.

    *occurrences* must already be resolved for the candidate's date. The
    occurrence with id *exclude_id* is skipped, so an event being edited is
    never reported against itself. A candidate missing either bound has no
    conflicts.
    """
    if candidate.start_time is None or candidate.end_time is None:
        return []
    start = time_to_minutes(candidate.start_time)
    end = time_to_minutes(candidate.end_time)
    return [o for o in _candidates(occurrences, exclude_id) if _overlaps(start, end, o)]


def has_conflict_among(
    candidate: ConflictCandidate,
    occurrences: Iterable[EventDefinition],
    exclude_id: str | None = None,
) -> bool:
    """Existence form of :func:`find_conflicts`; stops at the first overlap."""
    if candidate.start_time is None or candidate.end_time is None:
        return False
    start = time_to_minutes(candidate.start_time)
    end = time_to_minutes(candidate.end_time)
    return any(_overlaps(start, end, o) for o in _candidates(occurrences, exclude_id))


def has_conflict(
    candidate: ConflictCandidate,
    catalog: Iterable[EventDefinition],
    resolve_occurrences: OccurrenceResolver = occurrences_on,
) -> bool:
    """Return True if *candidate* overlaps anything occurring on its date.

    The candidate's own id is excluded. Without a ``start_date`` the current
    date is checked.
    """
    if candidate.start_time is None or candidate.end_time is None:
        return False
    target = candidate.start_date or date.today()
    return has_conflict_among(
        candidate, resolve_occurrences(catalog, target), exclude_id=candidate.id
    )
