"""Service for laying out a month as a Sunday-first grid of whole weeks."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, rrule

from calendar_app.domain.models import EventDefinition, GridDay
from calendar_app.services.recurrence import (
    OccurrenceResolver,
    occurrences_on,
    weekday_index,
)


def grid_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day shown for *month*: Sunday before the 1st to Saturday after the end."""
    first = date(year, month, 1)
    last = first + relativedelta(months=1, days=-1)
    grid_start = first - timedelta(days=weekday_index(first))
    grid_end = last + timedelta(days=6 - weekday_index(last))
    return grid_start, grid_end


def month_grid(
    catalog: Sequence[EventDefinition],
    year: int,
    month: int,
    today: date,
    resolve_occurrences: OccurrenceResolver = occurrences_on,
) -> list[GridDay]:
    """Resolve every day of the grid for *month* against *catalog*.

    Each day's events are sorted by start time; the sort is stable so events
    starting together keep catalog order.
    """
    grid_start, grid_end = grid_bounds(year, month)
    days: list[GridDay] = []
    for dt in rrule(DAILY, dtstart=grid_start, until=grid_end):
        day = dt.date()
        events = sorted(resolve_occurrences(catalog, day), key=lambda e: e.start_time)
        days.append(
            GridDay(
                day=day,
                is_current_month=day.month == month,
                is_today=day == today,
                events=events,
            )
        )
    return days
