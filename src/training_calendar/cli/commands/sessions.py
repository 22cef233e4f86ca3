"""Workout commands: start, pause, resume, complete, elapsed, log-set, log-cardio."""

from typing import Annotated, Optional

import typer

from ...core.models import SessionAttempt
from ...io.store import SESSION_ATTEMPTS, DataStore
from ...services import training
from .. import views
from ..app import AthleteOption, DataDirOption, app, engine_errors, now, open_store, resolve_athlete

AttemptArgument = Annotated[
    Optional[str],
    typer.Argument(help="Attempt id (default: your most recent open attempt)"),
]


def _open_attempt_id(store: DataStore, athlete_id: str, attempt_id: str | None) -> str:
    """Return attempt_id, or the newest not-yet-completed attempt of the athlete."""
    if attempt_id is not None:
        return attempt_id
    open_attempts = [
        a for a in store.find(SESSION_ATTEMPTS, athlete_id=athlete_id) if a.completed_at is None
    ]
    if not open_attempts:
        views.print_error("No open session attempt. Start one with 'start <template-id>'.")
        raise typer.Exit(1)
    newest: SessionAttempt = max(open_attempts, key=lambda a: a.created_at)
    return newest.id


@app.command()
def start(
    session_id: Annotated[str, typer.Argument(help="Session template id")],
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Start a session, or pick up the attempt already started today.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    with engine_errors():
        attempt = training.start_session(store, session_id, athlete_id, now())
    views.print_success(f"Session running. Attempt id: {attempt.id}")


@app.command()
def pause(
    attempt_id: AttemptArgument = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Pause the running timer.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    with engine_errors():
        attempt = training.pause_session(store, attempt_id, athlete_id, now())
    views.print_info(f"Paused at {attempt.paused_at:%H:%M:%S}" if attempt.paused_at else "Attempt is not running")


@app.command()
def resume(
    attempt_id: AttemptArgument = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Resume a paused timer.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    with engine_errors():
        attempt = training.resume_session(store, attempt_id, athlete_id, now())
        seconds = training.elapsed(store, attempt.id, athlete_id, now())
    views.print_info(f"Resumed. Elapsed {views.format_elapsed(seconds)}")


@app.command()
def complete(
    attempt_id: AttemptArgument = None,
    rpe: Annotated[
        Optional[int], typer.Option("--rpe", help="Overall session RPE (1-10)")
    ] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", "-n")] = None,
    minutes: Annotated[
        Optional[float], typer.Option("--minutes", help="Override the measured duration")
    ] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Finish a session and record its duration.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    at = now()
    with engine_errors():
        attempt = training.complete_session(
            store, attempt_id, athlete_id, at, overall_rpe=rpe, notes=notes, duration_minutes=minutes
        )
        sets = training.get_attempt_sets(store, attempt.id, athlete_id)
    views.print_success("Session completed!")
    views.print_attempt(attempt, training.elapsed(store, attempt.id, athlete_id, at))
    views.print_sets(sets)


@app.command()
def elapsed(
    attempt_id: AttemptArgument = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Show the timer of an attempt.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    at = now()
    with engine_errors():
        seconds = training.elapsed(store, attempt_id, athlete_id, at)
        attempt = store.get(SESSION_ATTEMPTS, attempt_id)
        sets = training.get_attempt_sets(store, attempt_id, athlete_id)
    views.print_attempt(attempt, seconds)
    views.print_sets(sets)


@app.command("log-set")
def log_set(
    exercise: Annotated[str, typer.Argument(help="Exercise id")],
    set_number: Annotated[int, typer.Argument(help="Set number (1-based)")],
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Weight in kg")] = None,
    reps: Annotated[Optional[int], typer.Option("--reps", "-r")] = None,
    rpe: Annotated[Optional[int], typer.Option("--rpe")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", "-n")] = None,
    attempt_id: Annotated[
        Optional[str], typer.Option("--attempt", help="Attempt id (default: most recent open)")
    ] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Log a strength set against a running attempt.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    with engine_errors():
        previous = training.get_last_exercise_performance(store, exercise, athlete_id)
        log = training.log_exercise_set(
            store, attempt_id, athlete_id, exercise, set_number, now(),
            weight_kg=weight, reps_completed=reps, rpe=rpe, notes=notes,
        )
    views.print_success(f"Logged {exercise} set {log.set_number}")
    if previous is not None and previous.weight_kg is not None:
        views.print_info(
            f"Last time: {previous.weight_kg:g} kg x {previous.reps_completed or 0} "
            f"on {previous.created_at:%Y-%m-%d}"
        )


@app.command("log-cardio")
def log_cardio(
    exercise: Annotated[str, typer.Argument(help="Exercise id")],
    distance: Annotated[Optional[float], typer.Option("--distance", help="Distance in km")] = None,
    minutes: Annotated[Optional[int], typer.Option("--minutes", help="Duration in minutes")] = None,
    hr_avg: Annotated[Optional[int], typer.Option("--hr-avg", help="Average heart rate")] = None,
    hr_max: Annotated[Optional[int], typer.Option("--hr-max", help="Max heart rate")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", "-n")] = None,
    attempt_id: Annotated[
        Optional[str], typer.Option("--attempt", help="Attempt id (default: most recent open)")
    ] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Log a cardio effort against a running attempt.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    attempt_id = _open_attempt_id(store, athlete_id, attempt_id)
    with engine_errors():
        log = training.log_cardio_exercise(
            store, attempt_id, athlete_id, exercise, now(),
            distance_km=distance, duration_minutes=minutes,
            heart_rate_avg=hr_avg, heart_rate_max=hr_max, notes=notes,
        )
    views.print_success(f"Logged {exercise}")
    if log.pace_per_km_seconds is not None:
        views.print_info(f"Pace: {views.format_elapsed(log.pace_per_km_seconds)} /km")
