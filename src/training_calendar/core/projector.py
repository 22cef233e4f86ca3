"""
Project weekly-recurring session templates onto calendar windows.

The projector is a pure function of its inputs: templates and completion
history are supplied by the caller, nothing is read from storage.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from . import calendar_math
from .config import MONTH_INDICATOR_CAP
from .models import (
    CalendarDay,
    CalendarWindow,
    DaySchedule,
    DayView,
    MonthCell,
    MonthView,
    ScheduledSession,
    ScheduleStatus,
    SessionAttempt,
    SessionTemplate,
    WeekView,
    YearView,
)

CalendarProjection = DayView | WeekView | MonthView | YearView


@dataclass
class CompletionIndex:
    """
    Per-calendar-day view of attempt history.

    Completions are attributed to the day the attempt's completed_at falls
    on, never to the day of the template.  Open (not yet completed) attempts
    are indexed by the day they were created.
    """

    completed_by_day: dict[date, set[str]] = field(default_factory=dict)
    started_by_day: dict[date, set[str]] = field(default_factory=dict)
    count_by_day: dict[date, int] = field(default_factory=dict)

    @classmethod
    def from_attempts(cls, attempts: Iterable[SessionAttempt]) -> "CompletionIndex":
        completed: dict[date, set[str]] = defaultdict(set)
        started: dict[date, set[str]] = defaultdict(set)
        counts: dict[date, int] = defaultdict(int)
        for attempt in attempts:
            if attempt.completed_at is not None:
                day = attempt.completed_at.date()
                completed[day].add(attempt.session_id)
                counts[day] += 1
            else:
                started[attempt.created_at.date()].add(attempt.session_id)
        return cls(dict(completed), dict(started), dict(counts))

    def status_for(self, day: date, session_id: str) -> ScheduleStatus:
        if session_id in self.completed_by_day.get(day, ()):
            return "completed"
        if session_id in self.started_by_day.get(day, ()):
            return "in_progress"
        return "planned"


def sort_templates(
    templates: Iterable[SessionTemplate], today: date | datetime
) -> list[SessionTemplate]:
    """
    Order templates for display: today's sessions first, then by program name.

    The sort is stable, so templates of the same program keep their input
    order.
    """
    today_dow = calendar_math.day_of_week(today)
    return sorted(
        templates,
        key=lambda t: (t.day_of_week != today_dow, t.program_name),
    )


def group_by_day_of_week(
    templates: Iterable[SessionTemplate], today: date | datetime
) -> dict[int, list[SessionTemplate]]:
    """
    Bucket templates by day_of_week 1..7.

    Templates without a day_of_week are never scheduled and are dropped.
    """
    grouped: dict[int, list[SessionTemplate]] = {dow: [] for dow in range(1, 8)}
    for template in sort_templates(templates, today):
        if template.day_of_week is None:
            continue
        grouped[template.day_of_week].append(template)
    return grouped


def _schedule_day(
    day: CalendarDay,
    by_dow: dict[int, list[SessionTemplate]],
    completions: CompletionIndex,
) -> DaySchedule:
    return DaySchedule(
        day=day,
        sessions=[
            ScheduledSession(template=t, status=completions.status_for(day.date, t.id))
            for t in by_dow[day.day_of_week]
        ],
    )


def _month_cell(schedule: DaySchedule, cap: int) -> MonthCell:
    total = len(schedule.sessions)
    return MonthCell(
        day=schedule.day,
        indicators=schedule.sessions[:cap],
        total=total,
        remaining=max(total - cap, 0),
    )


def _year_counts(year: int, completions: CompletionIndex) -> dict[int, int]:
    counts = {month_index: 0 for month_index in range(12)}
    for day, count in completions.count_by_day.items():
        if day.year == year:
            counts[day.month - 1] += count
    return counts


def project(
    templates: Sequence[SessionTemplate],
    window: CalendarWindow,
    completions: CompletionIndex | None,
    now: date | datetime,
    indicator_cap: int = MONTH_INDICATOR_CAP,
) -> CalendarProjection:
    """
    Project templates onto the requested calendar window.

    Args:
        templates: De-duplicated session templates (own + assigned programs)
        window: View kind and anchor date
        completions: Attempt history indexed per day (None = no history)
        now: Reference instant for is_today and the today-first ordering
        indicator_cap: Max indicators per month cell before the overflow count

    Returns:
        DayView, WeekView, MonthView or YearView matching window.kind
    """
    completions = completions or CompletionIndex()
    anchor = window.anchor

    if window.kind == "year":
        return YearView(kind="year", year=anchor.year, counts_by_month=_year_counts(anchor.year, completions))

    by_dow = group_by_day_of_week(templates, now)

    if window.kind == "day":
        day = calendar_math.single_day(anchor, now)
        return DayView(kind="day", schedule=_schedule_day(day, by_dow, completions))

    if window.kind == "week":
        return WeekView(
            kind="week",
            days=[_schedule_day(d, by_dow, completions) for d in calendar_math.week_days(anchor, now)],
        )

    grid = calendar_math.month_grid(anchor.year, anchor.month, now)
    return MonthView(
        kind="month",
        year=anchor.year,
        month=anchor.month,
        cells=[_month_cell(_schedule_day(d, by_dow, completions), indicator_cap) for d in grid],
    )
