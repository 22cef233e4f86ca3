"""
Pure calendar computations.

Weeks are Monday-first and day-of-week values exposed to other components
are 1 (Monday) .. 7 (Sunday).  Nothing here reads the clock: "now" is always
passed in by the caller.  No timezone conversion is performed; callers must
normalize values to one zone before comparing them.
"""

from datetime import date, datetime, timedelta
from typing import TypeVar

from .config import DAYS_PER_WEEK, MONTH_GRID_CELLS
from .models import CalendarDay, ViewKind

D = TypeVar("D", date, datetime)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_of_week(value: date | datetime) -> int:
    """Return 1 for Monday through 7 for Sunday."""
    return value.isoweekday()


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    """Compare calendar dates, ignoring the time of day."""
    return _as_date(a) == _as_date(b)


def week_start(value: D) -> D:
    """
    Return the Monday of the week containing value.

    A datetime comes back at 00:00 with its tzinfo preserved; a date comes
    back as a date.
    """
    monday = value - timedelta(days=value.weekday())
    if isinstance(monday, datetime):
        return monday.replace(hour=0, minute=0, second=0, microsecond=0)
    return monday


def normalize_month(year: int, month: int) -> tuple[int, int]:
    """
    Fold an out-of-range month into the right year.

    (2026, 13) -> (2027, 1); (2026, 0) -> (2025, 12); (2026, -1) -> (2025, 11).
    """
    index = year * 12 + (month - 1)
    return index // 12, index % 12 + 1


def add_months(value: D, months: int) -> D:
    """
    Shift value by a number of months.

    When the target month is shorter than value's day, the surplus days
    overflow into the following month (Jan 31 + 1 month -> Mar 3 in a
    non-leap year), the same rollover native date arithmetic performs.
    """
    year, month = normalize_month(value.year, value.month + months)
    first = value.replace(year=year, month=month, day=1)
    return first + timedelta(days=value.day - 1)


def shift_anchor(anchor: date, kind: ViewKind, steps: int = 1) -> date:
    """Move a view anchor forward (steps > 0) or back by whole view units."""
    if kind == "day":
        return anchor + timedelta(days=steps)
    if kind == "week":
        return anchor + timedelta(days=DAYS_PER_WEEK * steps)
    if kind == "month":
        return add_months(anchor, steps)
    return add_months(anchor, 12 * steps)


def year_month_key(value: date | datetime) -> tuple[int, int]:
    """Bucket key (year, month index 0..11)."""
    return value.year, value.month - 1


def _calendar_day(d: date, today: date | None, is_current_month: bool) -> CalendarDay:
    return CalendarDay(
        date=d,
        is_today=d == today,
        is_current_month=is_current_month,
        day_of_week=day_of_week(d),
    )


def month_grid(year: int, month: int, now: date | datetime) -> list[CalendarDay]:
    """
    Build the 6x7 grid for a month.

    The first row is padded with the trailing days of the previous month and
    the grid is completed with leading days of the next month; both are
    flagged is_current_month=False and never is_today, so a grid has one
    is_today cell only when now falls inside the month.  Out-of-range
    months roll over (month 13 is January of the following year).

    Args:
        year: Calendar year
        month: Month number, 1-based; values outside 1..12 are normalized
        now: Reference instant for is_today

    Returns:
        Exactly 42 CalendarDay values, Monday first
    """
    year, month = normalize_month(year, month)
    today = _as_date(now)
    first = date(year, month, 1)
    grid_start = week_start(first)

    days: list[CalendarDay] = []
    for offset in range(MONTH_GRID_CELLS):
        d = grid_start + timedelta(days=offset)
        in_month = d.year == year and d.month == month
        days.append(_calendar_day(d, today if in_month else None, in_month))
    return days


def week_days(value: date | datetime, now: date | datetime) -> list[CalendarDay]:
    """
    The seven days of value's week, Monday first.

    is_current_month is relative to value's own month.
    """
    anchor = _as_date(value)
    monday = week_start(anchor)
    today = _as_date(now)
    return [
        _calendar_day(
            monday + timedelta(days=i),
            today,
            (monday + timedelta(days=i)).month == anchor.month,
        )
        for i in range(DAYS_PER_WEEK)
    ]


def single_day(value: date | datetime, now: date | datetime) -> CalendarDay:
    d = _as_date(value)
    return _calendar_day(d, _as_date(now), True)
