"""Tests for the recurrence evaluator."""

from __future__ import annotations

from datetime import date, time, timedelta

import pytest

from calendar_app.domain.models import (
    CustomRecurrence,
    DailyRecurrence,
    EventDefinition,
    MonthlyRecurrence,
    WeeklyRecurrence,
)
from calendar_app.services.recurrence import (
    days_between,
    months_between,
    occurrences_on,
    occurs_on,
    weekday_index,
)

# Monday
_START = date(2024, 1, 1)


def _make_event(**overrides) -> EventDefinition:
    defaults = dict(
        title="Test event",
        start_date=_START,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )
    defaults.update(overrides)
    return EventDefinition(**defaults)


def _dates(first: date, count: int) -> list[date]:
    return [first + timedelta(days=i) for i in range(count)]


# ---------------------------------------------------------------------------
# Date arithmetic
# ---------------------------------------------------------------------------


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2024, 1, 7)) == 0
    assert weekday_index(date(2024, 1, 1)) == 1
    assert weekday_index(date(2024, 1, 6)) == 6


def test_days_and_months_between():
    assert days_between(date(2024, 1, 1), date(2024, 3, 1)) == 60
    assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == -9
    assert months_between(date(2023, 11, 30), date(2024, 2, 1)) == 3
    assert months_between(date(2024, 2, 1), date(2024, 1, 31)) == -1


# ---------------------------------------------------------------------------
# Non-recurring
# ---------------------------------------------------------------------------


def test_single_event_occurs_only_on_start_date():
    event = _make_event()
    assert occurs_on(event, _START) is True
    assert occurs_on(event, _START + timedelta(days=1)) is False
    assert occurs_on(event, _START - timedelta(days=1)) is False
    assert occurs_on(event, date(2025, 1, 1)) is False


# ---------------------------------------------------------------------------
# Daily
# ---------------------------------------------------------------------------


def test_daily_every_day_from_start():
    event = _make_event(recurrence=DailyRecurrence())

    assert all(occurs_on(event, d) for d in _dates(_START, 120))
    assert occurs_on(event, _START - timedelta(days=1)) is False
    assert occurs_on(event, date(2030, 6, 15)) is True


def test_daily_interval_with_occurrence_cap():
    """Every 3 days, 4 times: Jan 1, 4, 7, 10 and nothing else."""
    event = _make_event(recurrence=DailyRecurrence(interval=3, occurrences=4))

    expected = {date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 10)}
    actual = {d for d in _dates(_START - timedelta(days=5), 60) if occurs_on(event, d)}
    assert actual == expected
    assert occurs_on(event, date(2024, 1, 2)) is False
    assert occurs_on(event, date(2024, 1, 13)) is False


def test_daily_single_occurrence_cap():
    event = _make_event(recurrence=DailyRecurrence(occurrences=1))
    assert occurs_on(event, _START) is True
    assert occurs_on(event, _START + timedelta(days=1)) is False


def test_daily_walk_from_distant_past_terminates():
    anchor = date(1824, 1, 1)
    event = _make_event(start_date=anchor, recurrence=DailyRecurrence(interval=7))

    week = _dates(date(2024, 1, 1), 7)
    hits = [d for d in week if occurs_on(event, d)]
    assert len(hits) == 1
    assert days_between(anchor, hits[0]) % 7 == 0


def test_daily_near_end_of_calendar():
    event = _make_event(
        start_date=date(9999, 12, 30), recurrence=DailyRecurrence(interval=2)
    )
    assert occurs_on(event, date(9999, 12, 30)) is True
    assert occurs_on(event, date(9999, 12, 31)) is False
    assert occurrences_on([event], date(9999, 12, 31)) == []


@pytest.mark.parametrize("interval", [5_000_000, 10**12])
def test_daily_interval_beyond_calendar_range(interval):
    event = _make_event(recurrence=DailyRecurrence(interval=interval))
    assert occurs_on(event, _START) is True
    assert occurs_on(event, date(2024, 1, 2)) is False
    assert occurrences_on([event], date(9999, 12, 31)) == []


# ---------------------------------------------------------------------------
# Weekly
# ---------------------------------------------------------------------------


def test_weekly_monday_and_wednesday():
    event = _make_event(recurrence=WeeklyRecurrence(weekdays={1, 3}))

    for d in _dates(_START, 90):
        assert occurs_on(event, d) is (weekday_index(d) in (1, 3)), d


def test_weekly_every_other_monday():
    event = _make_event(recurrence=WeeklyRecurrence(weekdays={1}, interval=2))

    for d in (date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 29)):
        assert occurs_on(event, d) is True
    for d in (date(2024, 1, 8), date(2024, 1, 22)):
        assert occurs_on(event, d) is False


def test_weekly_counts_elapsed_weeks_not_calendar_weeks():
    """Anchored on a Wednesday, the following Monday is still in week 0."""
    event = _make_event(
        start_date=date(2024, 1, 3),
        recurrence=WeeklyRecurrence(weekdays={1, 3}, interval=2),
    )

    assert occurs_on(event, date(2024, 1, 3)) is True
    assert occurs_on(event, date(2024, 1, 8)) is True  # 5 days -> week 0
    assert occurs_on(event, date(2024, 1, 10)) is False  # 7 days -> week 1
    assert occurs_on(event, date(2024, 1, 15)) is False  # 12 days -> week 1
    assert occurs_on(event, date(2024, 1, 17)) is True  # 14 days -> week 2
    assert occurs_on(event, date(2024, 1, 22)) is True  # 19 days -> week 2


def test_weekly_never_before_start():
    event = _make_event(recurrence=WeeklyRecurrence(weekdays={1}))
    assert occurs_on(event, date(2023, 12, 25)) is False


def test_weekly_anchor_off_pattern_is_not_an_occurrence():
    event = _make_event(
        start_date=date(2024, 1, 2), recurrence=WeeklyRecurrence(weekdays={1})
    )
    assert occurs_on(event, date(2024, 1, 2)) is False
    assert occurs_on(event, date(2024, 1, 8)) is True


def test_weekly_without_weekdays_never_occurs():
    """A pattern that bypassed validation degrades to no occurrences."""
    pattern = WeeklyRecurrence.model_construct(
        type="weekly", interval=1, end_date=None, weekdays=frozenset(), occurrences=None
    )
    event = _make_event(recurrence=pattern)
    assert not any(occurs_on(event, d) for d in _dates(_START, 14))


# ---------------------------------------------------------------------------
# Monthly
# ---------------------------------------------------------------------------


def test_monthly_on_31st_skips_short_months():
    event = _make_event(start_date=date(2024, 1, 31), recurrence=MonthlyRecurrence())

    assert not any(occurs_on(event, d) for d in _dates(date(2024, 2, 1), 29))
    assert occurs_on(event, date(2024, 3, 31)) is True
    assert occurs_on(event, date(2024, 4, 30)) is False
    assert occurs_on(event, date(2024, 5, 31)) is True


def test_monthly_interval():
    event = _make_event(
        start_date=date(2024, 1, 15), recurrence=MonthlyRecurrence(interval=3)
    )

    assert occurs_on(event, date(2024, 1, 15)) is True
    assert occurs_on(event, date(2024, 4, 15)) is True
    assert occurs_on(event, date(2025, 1, 15)) is True
    assert occurs_on(event, date(2024, 2, 15)) is False
    assert occurs_on(event, date(2024, 4, 16)) is False
    assert occurs_on(event, date(2023, 10, 15)) is False


# ---------------------------------------------------------------------------
# Custom
# ---------------------------------------------------------------------------


def test_custom_every_ten_days():
    event = _make_event(recurrence=CustomRecurrence(interval=10))

    assert occurs_on(event, date(2024, 1, 11)) is True
    assert occurs_on(event, date(2024, 1, 21)) is True
    assert occurs_on(event, date(2024, 1, 12)) is False
    assert occurs_on(event, date(2023, 12, 22)) is False


@pytest.mark.parametrize(
    "pattern, third_occurrence",
    [
        (WeeklyRecurrence(weekdays={1}, occurrences=2), date(2024, 1, 15)),
        (MonthlyRecurrence(occurrences=2), date(2024, 3, 1)),
        (CustomRecurrence(occurrences=2), date(2024, 1, 3)),
    ],
    ids=["weekly", "monthly", "custom"],
)
def test_occurrence_cap_applies_to_daily_only(pattern, third_occurrence):
    event = _make_event(recurrence=pattern)
    assert occurs_on(event, third_occurrence) is True


# ---------------------------------------------------------------------------
# End date
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "pattern",
    [
        DailyRecurrence(end_date=date(2024, 1, 10)),
        WeeklyRecurrence(weekdays=set(range(7)), end_date=date(2024, 1, 10)),
        MonthlyRecurrence(end_date=date(2024, 1, 10)),
        CustomRecurrence(end_date=date(2024, 1, 10)),
    ],
    ids=["daily", "weekly", "monthly", "custom"],
)
def test_nothing_occurs_after_end_date(pattern):
    event = _make_event(recurrence=pattern)
    assert not any(occurs_on(event, d) for d in _dates(date(2024, 1, 11), 400))


def test_end_date_itself_is_included():
    event = _make_event(recurrence=DailyRecurrence(end_date=date(2024, 1, 10)))
    assert occurs_on(event, date(2024, 1, 10)) is True


# ---------------------------------------------------------------------------
# occurrences_on
# ---------------------------------------------------------------------------


def test_occurrences_on_filters_and_keeps_catalog_order():
    late = _make_event(title="Late", start_time=time(18, 0), end_time=time(19, 0))
    other_day = _make_event(title="Other day", start_date=date(2024, 1, 2))
    daily = _make_event(title="Daily", recurrence=DailyRecurrence())
    early = _make_event(title="Early", start_time=time(7, 0), end_time=time(8, 0))

    result = occurrences_on([late, other_day, daily, early], _START)
    assert [e.title for e in result] == ["Late", "Daily", "Early"]


def test_occurrences_on_is_repeatable():
    catalog = [
        _make_event(recurrence=WeeklyRecurrence(weekdays={1, 3})),
        _make_event(start_date=date(2024, 1, 3)),
    ]
    first = occurrences_on(catalog, date(2024, 1, 3))
    second = occurrences_on(catalog, date(2024, 1, 3))
    assert first == second
    assert len(first) == 2


def test_occurrences_on_empty_catalog():
    assert occurrences_on([], _START) == []
