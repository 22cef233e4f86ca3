"""
Session attempt lifecycle.

States: not_started -> open -> {paused <-> open} -> completed (terminal).

Every transition takes the caller's "now" and returns a new SessionAttempt;
inputs are never mutated, so a rejected transition leaves the attempt
untouched.  Repeated pause/resume/start calls are silent no-ops that return
the attempt they were given.

Timestamps are truncated to whole seconds before they are stored, which
keeps every interval an integer number of seconds.  duration_minutes is
that count divided by 60, so duration_minutes * 60 rounds back to the
elapsed time shown just before complete(); it can differ from it by float
rounding (31 s gives 31.000000000000004).
"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable

from .errors import AlreadyCompleted, InvalidTransition
from .models import AttemptState, ExerciseSetLog, SessionAttempt


def new_id() -> str:
    return uuid.uuid4().hex


def _whole_seconds(ts: datetime) -> datetime:
    return ts.replace(microsecond=0)


def _seconds_between(later: datetime, earlier: datetime) -> int:
    return int((later - earlier).total_seconds())


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    return notes.strip() or None


def state_of(attempt: SessionAttempt | None) -> AttemptState:
    if attempt is None:
        return "not_started"
    if attempt.completed_at is not None:
        return "completed"
    if attempt.paused_at is not None:
        return "paused"
    return "open"


def _require_started(attempt: SessionAttempt | None, action: str) -> SessionAttempt:
    if attempt is None:
        raise InvalidTransition(f"Cannot {action} a session that has not been started")
    return attempt


def _require_not_completed(attempt: SessionAttempt) -> None:
    if attempt.completed_at is not None:
        raise AlreadyCompleted(attempt.id)


# =============================================================================
# Start
# =============================================================================


def reusable_attempt_matcher(
    session_id: str, athlete_id: str, now: datetime
) -> Callable[[SessionAttempt], bool]:
    """
    Predicate selecting the attempt start() should hand back instead of
    creating a new one: same session and athlete, created on now's calendar
    day, not completed.
    """
    day = now.date()

    def _match(attempt: SessionAttempt) -> bool:
        return (
            attempt.session_id == session_id
            and attempt.athlete_id == athlete_id
            and attempt.created_at.date() == day
            and attempt.completed_at is None
        )

    return _match


def new_attempt(
    session_id: str, athlete_id: str, now: datetime, attempt_id: str | None = None
) -> SessionAttempt:
    return SessionAttempt(
        id=attempt_id or new_id(),
        session_id=session_id,
        athlete_id=athlete_id,
        created_at=_whole_seconds(now),
        total_paused_seconds=0,
    )


def start(
    existing: Iterable[SessionAttempt],
    session_id: str,
    athlete_id: str,
    now: datetime,
    attempt_id: str | None = None,
) -> SessionAttempt:
    """
    Open a session for the day, or return the attempt already open for it.

    Args:
        existing: Attempts already recorded for this athlete
        session_id: Template being performed
        athlete_id: Acting athlete
        now: Caller's clock
        attempt_id: Id for a newly created attempt (random when omitted)

    Returns:
        The open attempt for (session, athlete, today)
    """
    match = reusable_attempt_matcher(session_id, athlete_id, now)
    for attempt in existing:
        if match(attempt):
            return attempt
    return new_attempt(session_id, athlete_id, now, attempt_id)


# =============================================================================
# Pause / resume / complete
# =============================================================================


def pause(attempt: SessionAttempt | None, now: datetime) -> SessionAttempt:
    """Open -> paused.  No-op when already paused or completed."""
    attempt = _require_started(attempt, "pause")
    if attempt.completed_at is not None or attempt.paused_at is not None:
        return attempt
    return replace(attempt, paused_at=_whole_seconds(now))


def resume(attempt: SessionAttempt | None, now: datetime) -> SessionAttempt:
    """
    Paused -> open, crediting the paused interval to total_paused_seconds.

    No-op when the attempt is not paused.
    """
    attempt = _require_started(attempt, "resume")
    if attempt.paused_at is None:
        return attempt
    paused_for = max(0, _seconds_between(_whole_seconds(now), attempt.paused_at))
    return replace(
        attempt,
        paused_at=None,
        total_paused_seconds=attempt.total_paused_seconds + paused_for,
    )


def complete(
    attempt: SessionAttempt | None,
    now: datetime,
    overall_rpe: int | None = None,
    notes: str | None = None,
    explicit_duration_minutes: float | None = None,
) -> SessionAttempt:
    """
    Finish an attempt.

    Completing while paused first resumes, so the paused interval is
    accounted for.  A caller-supplied duration is stored as given; otherwise
    the net elapsed time (floored at 0) is stored in minutes.

    Raises:
        InvalidTransition: attempt was never started
        AlreadyCompleted: attempt already has completed_at
        InvalidInput: overall_rpe out of 1..10 or negative duration
    """
    attempt = _require_started(attempt, "complete")
    _require_not_completed(attempt)

    resumed = resume(attempt, now)
    completed_at = _whole_seconds(now)

    if explicit_duration_minutes is not None:
        duration = explicit_duration_minutes
    else:
        net = _seconds_between(completed_at, resumed.created_at) - resumed.total_paused_seconds
        duration = max(0, net) / 60

    return replace(
        resumed,
        completed_at=completed_at,
        overall_rpe=overall_rpe,
        athlete_notes=_clean_notes(notes),
        duration_minutes=duration,
    )


def annotate(attempt: SessionAttempt | None, notes: str | None) -> SessionAttempt:
    """Replace the athlete's notes on a not-yet-completed attempt."""
    attempt = _require_started(attempt, "annotate")
    _require_not_completed(attempt)
    return replace(attempt, athlete_notes=_clean_notes(notes))


def elapsed_seconds(attempt: SessionAttempt | None, now: datetime) -> int:
    """
    Net training time for live display.

    open:      (now - created_at) - paused
    paused:    (paused_at - created_at) - paused
    completed: (completed_at - created_at) - paused
    """
    if attempt is None:
        return 0
    if attempt.completed_at is not None:
        end = attempt.completed_at
    elif attempt.paused_at is not None:
        end = attempt.paused_at
    else:
        end = _whole_seconds(now)
    return max(0, _seconds_between(end, attempt.created_at) - attempt.total_paused_seconds)


# =============================================================================
# Set logging
# =============================================================================


def log_set(
    attempt: SessionAttempt | None,
    exercise_id: str,
    set_number: int,
    now: datetime,
    weight_kg: float | None = None,
    reps_completed: int | None = None,
    rpe: int | None = None,
    notes: str | None = None,
    log_id: str | None = None,
) -> ExerciseSetLog:
    """
    Record one strength set against a running attempt.

    set_number must already be the next unused number for this exercise;
    the caller owns that sequence.
    """
    attempt = _require_started(attempt, "log a set for")
    _require_not_completed(attempt)
    return ExerciseSetLog(
        id=log_id or new_id(),
        session_attempt_id=attempt.id,
        exercise_id=exercise_id,
        athlete_id=attempt.athlete_id,
        set_number=set_number,
        created_at=_whole_seconds(now),
        weight_kg=weight_kg,
        reps_completed=reps_completed,
        rpe=rpe,
        notes=_clean_notes(notes),
    )


def cardio_pace(distance_km: float | None, duration_minutes: int | None) -> int | None:
    """Seconds per km, or None unless both distance and duration are positive."""
    if not distance_km or not duration_minutes:
        return None
    if distance_km <= 0 or duration_minutes <= 0:
        return None
    return round(duration_minutes * 60 / distance_km)


def log_cardio(
    attempt: SessionAttempt | None,
    exercise_id: str,
    now: datetime,
    distance_km: float | None = None,
    duration_minutes: int | None = None,
    heart_rate_avg: int | None = None,
    heart_rate_max: int | None = None,
    notes: str | None = None,
    log_id: str | None = None,
) -> ExerciseSetLog:
    """Record a cardio effort (always set 1) with its derived pace."""
    attempt = _require_started(attempt, "log cardio for")
    _require_not_completed(attempt)
    return ExerciseSetLog(
        id=log_id or new_id(),
        session_attempt_id=attempt.id,
        exercise_id=exercise_id,
        athlete_id=attempt.athlete_id,
        set_number=1,
        created_at=_whole_seconds(now),
        distance_km=distance_km,
        duration_minutes=duration_minutes,
        heart_rate_avg=heart_rate_avg,
        heart_rate_max=heart_rate_max,
        pace_per_km_seconds=cardio_pace(distance_km, duration_minutes),
        notes=_clean_notes(notes),
    )


def update_set(
    log: ExerciseSetLog,
    attempt: SessionAttempt,
    weight_kg: float | None = None,
    reps_completed: int | None = None,
    rpe: int | None = None,
    notes: str | None = None,
) -> ExerciseSetLog:
    """Correct a logged set while its attempt is still open."""
    _require_not_completed(attempt)
    return replace(
        log,
        weight_kg=weight_kg,
        reps_completed=reps_completed,
        rpe=rpe,
        notes=_clean_notes(notes),
    )
