"""
Training actions: start, pause, resume and complete a session attempt, and
log sets against it.

Each action is scoped to the acting athlete, takes the caller's clock and
writes through the DataStore.  Lifecycle rules live in core.lifecycle; this
module only loads, checks ownership, persists and logs.
"""

from datetime import datetime

from loguru import logger

from ..core import lifecycle
from ..core.errors import AlreadyCompleted, PermissionDenied, TrainingCalendarError
from ..core.models import ExerciseSetLog, SessionAttempt, SessionTemplate
from ..io.store import EXERCISE_LOGS, SESSION_ATTEMPTS, SESSION_TEMPLATES, DataStore


def _load_attempt(store: DataStore, attempt_id: str, athlete_id: str) -> SessionAttempt:
    attempt = store.get(SESSION_ATTEMPTS, attempt_id)
    if attempt.athlete_id != athlete_id:
        raise PermissionDenied(SESSION_ATTEMPTS, attempt_id, athlete_id)
    return attempt


def _save_transition(
    store: DataStore, before: SessionAttempt, after: SessionAttempt, athlete_id: str, action: str
) -> SessionAttempt:
    if after is before:
        logger.debug(f"[TRAINING] {action} on attempt {before.id} was a no-op (state={lifecycle.state_of(before)})")
        return before
    saved = store.update(SESSION_ATTEMPTS, after, actor_id=athlete_id)
    logger.info(f"[TRAINING] {action} attempt {saved.id} for athlete_id={athlete_id}")
    return saved


def start_session(store: DataStore, session_id: str, athlete_id: str, now: datetime) -> SessionAttempt:
    """
    Open session_id for today, or return the attempt already open today.

    Raises:
        NotFound: If the session template does not exist
    """
    template: SessionTemplate = store.get(SESSION_TEMPLATES, session_id)
    attempt, created = store.get_or_create(
        SESSION_ATTEMPTS,
        match=lifecycle.reusable_attempt_matcher(session_id, athlete_id, now),
        factory=lambda: lifecycle.new_attempt(session_id, athlete_id, now),
        actor_id=athlete_id,
    )
    if created:
        logger.info(f"[TRAINING] Started '{template.name}' (attempt {attempt.id}) for athlete_id={athlete_id}")
    else:
        logger.info(f"[TRAINING] Session '{template.name}' already started today, reusing attempt {attempt.id}")
    return attempt


def pause_session(store: DataStore, attempt_id: str, athlete_id: str, now: datetime) -> SessionAttempt:
    attempt = _load_attempt(store, attempt_id, athlete_id)
    return _save_transition(store, attempt, lifecycle.pause(attempt, now), athlete_id, "Paused")


def resume_session(store: DataStore, attempt_id: str, athlete_id: str, now: datetime) -> SessionAttempt:
    attempt = _load_attempt(store, attempt_id, athlete_id)
    return _save_transition(store, attempt, lifecycle.resume(attempt, now), athlete_id, "Resumed")


def complete_session(
    store: DataStore,
    attempt_id: str,
    athlete_id: str,
    now: datetime,
    overall_rpe: int | None = None,
    notes: str | None = None,
    duration_minutes: float | None = None,
) -> SessionAttempt:
    """
    Finish an attempt.

    Raises:
        AlreadyCompleted: If the attempt was completed before
        InvalidInput: If overall_rpe or duration_minutes is out of range
    """
    attempt = _load_attempt(store, attempt_id, athlete_id)
    try:
        completed = lifecycle.complete(
            attempt,
            now,
            overall_rpe=overall_rpe,
            notes=notes,
            explicit_duration_minutes=duration_minutes,
        )
    except AlreadyCompleted:
        logger.warning(f"[TRAINING] Attempt {attempt_id} is already completed; rejecting completion")
        raise
    saved = store.update(SESSION_ATTEMPTS, completed, actor_id=athlete_id)
    logger.info(
        f"[TRAINING] Completed attempt {saved.id} for athlete_id={athlete_id}: "
        f"duration={saved.duration_minutes:.1f} min, rpe={saved.overall_rpe}"
    )
    return saved


def elapsed(store: DataStore, attempt_id: str, athlete_id: str, now: datetime) -> int:
    """Net elapsed seconds for live display; callers poll this."""
    return lifecycle.elapsed_seconds(_load_attempt(store, attempt_id, athlete_id), now)


def log_exercise_set(
    store: DataStore,
    attempt_id: str,
    athlete_id: str,
    exercise_id: str,
    set_number: int,
    now: datetime,
    weight_kg: float | None = None,
    reps_completed: int | None = None,
    rpe: int | None = None,
    notes: str | None = None,
) -> ExerciseSetLog:
    attempt = _load_attempt(store, attempt_id, athlete_id)
    try:
        log = lifecycle.log_set(
            attempt,
            exercise_id,
            set_number,
            now,
            weight_kg=weight_kg,
            reps_completed=reps_completed,
            rpe=rpe,
            notes=notes,
        )
    except TrainingCalendarError as e:
        logger.warning(f"[TRAINING] Rejected set log on attempt {attempt_id}: {e}")
        raise
    saved = store.insert(EXERCISE_LOGS, log, actor_id=athlete_id)
    logger.debug(f"[TRAINING] Logged set {set_number} of {exercise_id} on attempt {attempt_id}")
    return saved


def log_cardio_exercise(
    store: DataStore,
    attempt_id: str,
    athlete_id: str,
    exercise_id: str,
    now: datetime,
    distance_km: float | None = None,
    duration_minutes: int | None = None,
    heart_rate_avg: int | None = None,
    heart_rate_max: int | None = None,
    notes: str | None = None,
) -> ExerciseSetLog:
    attempt = _load_attempt(store, attempt_id, athlete_id)
    try:
        log = lifecycle.log_cardio(
            attempt,
            exercise_id,
            now,
            distance_km=distance_km,
            duration_minutes=duration_minutes,
            heart_rate_avg=heart_rate_avg,
            heart_rate_max=heart_rate_max,
            notes=notes,
        )
    except TrainingCalendarError as e:
        logger.warning(f"[TRAINING] Rejected cardio log on attempt {attempt_id}: {e}")
        raise
    saved = store.insert(EXERCISE_LOGS, log, actor_id=athlete_id)
    logger.debug(f"[TRAINING] Logged cardio {exercise_id} on attempt {attempt_id}, pace={saved.pace_per_km_seconds}")
    return saved


def update_exercise_log(
    store: DataStore,
    log_id: str,
    athlete_id: str,
    weight_kg: float | None = None,
    reps_completed: int | None = None,
    rpe: int | None = None,
    notes: str | None = None,
) -> ExerciseSetLog:
    log: ExerciseSetLog = store.get(EXERCISE_LOGS, log_id)
    attempt = _load_attempt(store, log.session_attempt_id, athlete_id)
    updated = lifecycle.update_set(
        log, attempt, weight_kg=weight_kg, reps_completed=reps_completed, rpe=rpe, notes=notes
    )
    return store.update(EXERCISE_LOGS, updated, actor_id=athlete_id)


def get_session_attempts(store: DataStore, session_id: str, athlete_id: str) -> list[SessionAttempt]:
    """The athlete's attempts at one session, newest first."""
    attempts = store.find(SESSION_ATTEMPTS, session_id=session_id, athlete_id=athlete_id)
    return sorted(attempts, key=lambda a: a.created_at, reverse=True)


def get_attempt_sets(store: DataStore, attempt_id: str, athlete_id: str) -> list[ExerciseSetLog]:
    _load_attempt(store, attempt_id, athlete_id)
    logs = store.find(EXERCISE_LOGS, session_attempt_id=attempt_id)
    return sorted(logs, key=lambda log: (log.exercise_id, log.set_number))


def get_last_exercise_performance(
    store: DataStore, exercise_id: str, athlete_id: str
) -> ExerciseSetLog | None:
    """Most recent log of exercise_id that belongs to a completed attempt."""
    completed_ids = {
        a.id
        for a in store.find(SESSION_ATTEMPTS, athlete_id=athlete_id)
        if a.completed_at is not None
    }
    logs = [
        log
        for log in store.find(EXERCISE_LOGS, exercise_id=exercise_id, athlete_id=athlete_id)
        if log.session_attempt_id in completed_ids
    ]
    return max(logs, key=lambda log: log.created_at, default=None)
