"""
Data models for training-calendar.

All core dataclasses representing templates, attempts, logs and the derived
calendar/progress values.  Persisted entities validate their own ranges in
__post_init__; derived view values are plain containers.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .config import (
    READINESS_INPUT_MAX,
    READINESS_INPUT_MIN,
    RPE_MAX,
    RPE_MIN,
    SESSION_TYPES,
)
from .errors import InvalidInput

SessionType = Literal["strength", "cardio", "flexibility"]
ViewKind = Literal["day", "week", "month", "year"]
AttemptState = Literal["not_started", "open", "paused", "completed"]
ScheduleStatus = Literal["planned", "in_progress", "completed"]
Trend = Literal["improving", "stable", "declining"]


def _check_rpe(value: int | None, name: str) -> None:
    if value is not None and not RPE_MIN <= value <= RPE_MAX:
        raise InvalidInput(f"{name} must be between {RPE_MIN} and {RPE_MAX}, got {value}")


def _check_non_negative(value: int | float | None, name: str) -> None:
    if value is not None and value < 0:
        raise InvalidInput(f"{name} must be non-negative, got {value}")


# =============================================================================
# Persisted entities
# =============================================================================


@dataclass
class SessionTemplate:
    """
    Coach-authored, weekly-recurring session definition.

    day_of_week is 1 (Monday) .. 7 (Sunday); None means the session is
    never scheduled on the calendar.
    """

    id: str
    name: str
    program_id: str
    day_of_week: int | None
    week_number: int = 1
    session_type: SessionType = "strength"
    program_name: str = ""
    description: str | None = None
    estimated_duration_minutes: int | None = None

    def __post_init__(self) -> None:
        if self.day_of_week is not None and not 1 <= self.day_of_week <= 7:
            raise InvalidInput(f"day_of_week must be 1..7 or None, got {self.day_of_week}")
        if self.week_number < 1:
            raise InvalidInput("week_number must be >= 1")
        if self.session_type not in SESSION_TYPES:
            raise InvalidInput(f"Invalid session_type: {self.session_type}")
        _check_non_negative(self.estimated_duration_minutes, "estimated_duration_minutes")


@dataclass
class SessionAttempt:
    """
    One athlete's pass through one session on one day (a session log).

    Never both paused and completed; immutable once completed_at is set.
    duration_minutes is either the caller-supplied value or the net elapsed
    time derived on completion.
    """

    id: str
    session_id: str
    athlete_id: str
    created_at: datetime
    paused_at: datetime | None = None
    total_paused_seconds: int = 0
    completed_at: datetime | None = None
    overall_rpe: int | None = None
    duration_minutes: float | None = None
    athlete_notes: str | None = None

    def __post_init__(self) -> None:
        if self.total_paused_seconds < 0:
            raise InvalidInput("total_paused_seconds must be non-negative")
        if self.paused_at is not None and self.completed_at is not None:
            raise InvalidInput("A completed attempt cannot be paused")
        _check_rpe(self.overall_rpe, "overall_rpe")
        _check_non_negative(self.duration_minutes, "duration_minutes")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None


@dataclass
class ExerciseSetLog:
    """
    A single logged set (strength) or effort (cardio) within an attempt.

    set_number is supplied by the caller; the engine does not renumber.
    """

    id: str
    session_attempt_id: str
    exercise_id: str
    athlete_id: str
    set_number: int
    created_at: datetime
    weight_kg: float | None = None
    reps_completed: int | None = None
    rpe: int | None = None
    notes: str | None = None
    # cardio
    distance_km: float | None = None
    duration_minutes: int | None = None
    heart_rate_avg: int | None = None
    heart_rate_max: int | None = None
    pace_per_km_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.set_number < 1:
            raise InvalidInput("set_number must be >= 1")
        _check_non_negative(self.weight_kg, "weight_kg")
        _check_non_negative(self.reps_completed, "reps_completed")
        _check_rpe(self.rpe, "rpe")
        _check_non_negative(self.distance_km, "distance_km")
        _check_non_negative(self.duration_minutes, "duration_minutes")


@dataclass
class ReadinessLog:
    """Daily subjective wellness check-in; one per athlete per log_date."""

    id: str
    athlete_id: str
    log_date: date
    sleep_quality: int
    energy_level: int
    muscle_soreness: int
    stress_level: int
    overall_score: float
    created_at: datetime
    updated_at: datetime
    notes: str | None = None

    def __post_init__(self) -> None:
        for name in ("sleep_quality", "energy_level", "muscle_soreness", "stress_level"):
            value = getattr(self, name)
            if not READINESS_INPUT_MIN <= value <= READINESS_INPUT_MAX:
                raise InvalidInput(
                    f"{name} must be between {READINESS_INPUT_MIN} and "
                    f"{READINESS_INPUT_MAX}, got {value}"
                )


@dataclass
class MotivationalQuote:
    id: str
    content: str
    author: str | None = None
    is_active: bool = True


@dataclass
class CoachMessage:
    """Motivational note from a coach, shown from display_date until expires_at."""

    id: str
    coach_id: str
    athlete_id: str
    content: str
    display_date: date
    created_at: datetime
    expires_at: date | None = None
    is_read: bool = False


# =============================================================================
# Derived calendar values (never persisted)
# =============================================================================


@dataclass(frozen=True)
class CalendarDay:
    date: date
    is_today: bool
    is_current_month: bool
    day_of_week: int  # 1 (Monday) .. 7 (Sunday)


@dataclass(frozen=True)
class CalendarWindow:
    """What the caller wants to see: a view kind anchored on one date."""

    kind: ViewKind
    anchor: date

    def __post_init__(self) -> None:
        if self.kind not in ("day", "week", "month", "year"):
            raise InvalidInput(f"Invalid view kind: {self.kind}")


@dataclass
class ScheduledSession:
    template: SessionTemplate
    status: ScheduleStatus

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


@dataclass
class DaySchedule:
    day: CalendarDay
    sessions: list[ScheduledSession] = field(default_factory=list)


@dataclass
class MonthCell:
    """
    One cell of the month grid.

    indicators holds at most the configured cap; remaining = total - cap
    (never negative).
    """

    day: CalendarDay
    indicators: list[ScheduledSession]
    total: int
    remaining: int


@dataclass
class DayView:
    kind: Literal["day"]
    schedule: DaySchedule


@dataclass
class WeekView:
    kind: Literal["week"]
    days: list[DaySchedule]


@dataclass
class MonthView:
    kind: Literal["month"]
    year: int
    month: int
    cells: list[MonthCell]


@dataclass
class YearView:
    kind: Literal["year"]
    year: int
    counts_by_month: dict[int, int]  # month index 0..11 -> completed workouts


# =============================================================================
# Derived metrics
# =============================================================================


@dataclass
class DataBasedReadiness:
    score: float
    training_load: int
    avg_rpe: float
    rest_days: int
    trend: Trend


@dataclass
class PersonalRecord:
    exercise_id: str
    name: str
    weight: float
    reps: int
    date: datetime


@dataclass
class WeeklyBucket:
    week_start: date
    label: str
    count: int


@dataclass
class ProgressSummary:
    sessions_this_week: int
    sessions_this_month: int
    total_sessions: int
    total_minutes: float
    total_hours: int
    total_volume: float
    streak: int
    weekly: list[WeeklyBucket]
    top_records: list[PersonalRecord]


@dataclass
class DailyMessage:
    """Either a coach message or the quote of the day (coach message wins)."""

    source: Literal["coach", "quote"]
    content: str
    author: str | None = None
    message_id: str | None = None
    is_read: bool = True
