"""
Progress aggregation over completed attempt history.

All functions are pure; "today" is always supplied by the caller.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Mapping

from . import calendar_math
from .config import TOP_RECORDS_LIMIT, WEEKLY_BUCKETS_BACK
from .models import (
    ExerciseSetLog,
    PersonalRecord,
    ProgressSummary,
    SessionAttempt,
    WeeklyBucket,
)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def streak(completed_dates: Iterable[date | datetime], today: date | datetime) -> int:
    """
    Consecutive days with at least one completed attempt.

    Walks backwards from today.  If today has no completion the walk starts
    from yesterday instead, so a streak is not lost before the day is over;
    any missing day ends the walk.

    Examples (T = today):
        {T, T-1, T-2} -> 3
        {T-1, T-2}    -> 2
        {T-1, T-3}    -> 1
    """
    days = {_as_date(d) for d in completed_dates}
    cursor = _as_date(today)
    if cursor not in days:
        cursor -= timedelta(days=1)

    count = 0
    while cursor in days:
        count += 1
        cursor -= timedelta(days=1)
    return count


def week_label(week_start: date) -> str:
    return f"{week_start.day} {week_start.strftime('%b')}"


def weekly_buckets(
    completed_at: Iterable[date | datetime],
    today: date | datetime,
    weeks_back: int = WEEKLY_BUCKETS_BACK,
) -> list[WeeklyBucket]:
    """
    Count completions per Monday-aligned week for the trailing weeks_back weeks.

    Every completion counts (two attempts on the same day count twice).

    Returns:
        weeks_back buckets, oldest first; the last one is the current week
    """
    current = calendar_math.week_start(_as_date(today))
    starts = [current - timedelta(weeks=i) for i in range(weeks_back - 1, -1, -1)]
    counts = {start: 0 for start in starts}
    for value in completed_at:
        start = calendar_math.week_start(_as_date(value))
        if start in counts:
            counts[start] += 1
    return [WeeklyBucket(week_start=s, label=week_label(s), count=counts[s]) for s in starts]


def monthly_counts(completed_at: Iterable[date | datetime], year: int) -> dict[int, int]:
    """Completed workouts per month index 0..11 of the given year."""
    counts = {month_index: 0 for month_index in range(12)}
    for value in completed_at:
        y, month_index = calendar_math.year_month_key(value)
        if y == year:
            counts[month_index] += 1
    return counts


def count_since(completed_at: Iterable[date | datetime], start: date) -> int:
    return sum(1 for value in completed_at if _as_date(value) >= start)


def personal_records(
    logs: Iterable[ExerciseSetLog],
    exercise_names: Mapping[str, str] | None = None,
) -> dict[str, PersonalRecord]:
    """
    Heaviest logged set per exercise.

    Logs without a weight are ignored; on equal weights the first log
    encountered is kept.
    """
    names = exercise_names or {}
    records: dict[str, PersonalRecord] = {}
    for log in logs:
        if not log.weight_kg:
            continue
        best = records.get(log.exercise_id)
        if best is None or best.weight < log.weight_kg:
            records[log.exercise_id] = PersonalRecord(
                exercise_id=log.exercise_id,
                name=names.get(log.exercise_id, log.exercise_id),
                weight=log.weight_kg,
                reps=log.reps_completed or 0,
                date=log.created_at,
            )
    return records


def top_records(
    records: Mapping[str, PersonalRecord], limit: int = TOP_RECORDS_LIMIT
) -> list[PersonalRecord]:
    return sorted(records.values(), key=lambda r: r.weight, reverse=True)[:limit]


def total_volume(logs: Iterable[ExerciseSetLog]) -> float:
    """Sum of weight_kg * reps_completed; a missing value contributes 0."""
    return sum((log.weight_kg or 0) * (log.reps_completed or 0) for log in logs)


def summarize(
    attempts: Iterable[SessionAttempt],
    logs: Iterable[ExerciseSetLog],
    today: date | datetime,
    exercise_names: Mapping[str, str] | None = None,
    weeks_back: int = WEEKLY_BUCKETS_BACK,
    top_n: int = TOP_RECORDS_LIMIT,
) -> ProgressSummary:
    """
    Dashboard aggregate for one athlete.

    Only completed attempts count towards sessions, minutes and streak.
    """
    day = _as_date(today)
    completed = [a for a in attempts if a.completed_at is not None]
    completed_at = [a.completed_at for a in completed]
    logs = list(logs)
    total_minutes = sum(a.duration_minutes or 0 for a in completed)

    return ProgressSummary(
        sessions_this_week=count_since(completed_at, calendar_math.week_start(day)),
        sessions_this_month=count_since(completed_at, day.replace(day=1)),
        total_sessions=len(completed),
        total_minutes=total_minutes,
        total_hours=int(total_minutes // 60),
        total_volume=total_volume(logs),
        streak=streak(completed_at, day),
        weekly=weekly_buckets(completed_at, day, weeks_back),
        top_records=top_records(personal_records(logs, exercise_names), top_n),
    )
