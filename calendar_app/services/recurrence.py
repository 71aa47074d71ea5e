"""Service for deciding which event definitions occur on a given calendar date.

Every function here is pure: the catalog is passed in as a snapshot and
nothing is cached between calls.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable

from calendar_app.domain.models import (
    CustomRecurrence,
    DailyRecurrence,
    EventDefinition,
    MonthlyRecurrence,
    WeeklyRecurrence,
)

OccurrenceResolver = Callable[[Iterable[EventDefinition], date], list[EventDefinition]]


# ---------------------------------------------------------------------------
# Civil-date arithmetic
# ---------------------------------------------------------------------------


def days_between(start: date, end: date) -> int:
    """Whole days from *start* to *end* (negative when *end* is earlier)."""
    return (end - start).days


def months_between(start: date, end: date) -> int:
    """Calendar-month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def weekday_index(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


# ---------------------------------------------------------------------------
# Per-type rules
# ---------------------------------------------------------------------------


def _daily_occurs_on(anchor: date, target: date, pattern: DailyRecurrence) -> bool:
    # Walk forward instead of using a modulus so the occurrence cap is exact.
    current = anchor
    steps = 0
    while current <= target:
        if current == target:
            return True
        # Never step past the target; the next date may not be representable.
        if days_between(current, target) < pattern.interval:
            return False
        current += timedelta(days=pattern.interval)
        steps += 1
        if pattern.occurrences is not None and steps >= pattern.occurrences:
            return False
    return False


def _weekly_occurs_on(anchor: date, target: date, pattern: WeeklyRecurrence) -> bool:
    if weekday_index(target) not in pattern.weekdays:
        return False
    elapsed = days_between(anchor, target)
    if elapsed < 0:
        return False
    # Weeks are counted in elapsed 7-day periods, not calendar weeks.
    return (elapsed // 7) % pattern.interval == 0


def _monthly_occurs_on(anchor: date, target: date, pattern: MonthlyRecurrence) -> bool:
    # Months too short for the anchor's day are skipped, never clamped.
    if target.day != anchor.day:
        return False
    months = months_between(anchor, target)
    return months >= 0 and months % pattern.interval == 0


def _custom_occurs_on(anchor: date, target: date, pattern: CustomRecurrence) -> bool:
    elapsed = days_between(anchor, target)
    return elapsed >= 0 and elapsed % pattern.interval == 0


_RULES = {
    "daily": _daily_occurs_on,
    "weekly": _weekly_occurs_on,
    "monthly": _monthly_occurs_on,
    "custom": _custom_occurs_on,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def occurs_on(definition: EventDefinition, target: date) -> bool:
    """Return True if *definition* has an occurrence on *target*.

    A definition without recurrence occurs only on its ``start_date``. For a
    recurring definition nothing occurs after ``recurrence.end_date``, and the
    ``occurrences`` cap is honoured by the daily rule only.
    """
    pattern = definition.recurrence
    if pattern is None:
        return target == definition.start_date

    if pattern.end_date is not None and target > pattern.end_date:
        return False

    return _RULES[pattern.type](definition.start_date, target, pattern)


def occurrences_on(
    catalog: Iterable[EventDefinition], target: date
) -> list[EventDefinition]:
    """Return the definitions occurring on *target*, in catalog order."""
    return [definition for definition in catalog if occurs_on(definition, target)]
