"""Dashboard commands: calendar, readiness-log, readiness, progress, today, message-send, message-read."""

from typing import Annotated, Optional

import typer

from ...core import calendar_math
from ...core.config import VIEW_KINDS
from ...core.models import CalendarWindow
from ...services import calendar as calendar_service
from ...services import motivation as motivation_service
from ...services import progress as progress_service
from ...services import readiness as readiness_service
from .. import views
from ..app import (
    AthleteOption,
    DataDirOption,
    app,
    engine_errors,
    get_settings,
    now,
    open_store,
    parse_date_option,
    resolve_athlete,
)


@app.command()
def calendar(
    view: Annotated[str, typer.Option("--view", "-v", help="day, week, month or year")] = "week",
    on: Annotated[
        Optional[str], typer.Option("--date", help="Anchor date YYYY-MM-DD (default: today)")
    ] = None,
    offset: Annotated[
        int, typer.Option("--offset", help="Step the view back (<0) or forward (>0)")
    ] = 0,
    program: Annotated[
        Optional[list[str]], typer.Option("--program", "-p", help="Only these programs (repeatable)")
    ] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Show scheduled sessions and their status for a day, week, month or year.
    """
    if view not in VIEW_KINDS:
        views.print_error(f"Invalid view '{view}'. Use one of: {', '.join(VIEW_KINDS)}")
        raise typer.Exit(1)
    anchor = parse_date_option(on)
    if offset:
        anchor = calendar_math.shift_anchor(anchor, view, offset)  # type: ignore[arg-type]

    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    with engine_errors():
        projection = calendar_service.get_calendar_view(
            store,
            athlete_id,
            CalendarWindow(kind=view, anchor=anchor),  # type: ignore[arg-type]
            now(),
            program_ids=program or None,
            indicator_cap=get_settings().month_indicator_cap,
        )
    views.print_calendar(projection)


@app.command("readiness-log")
def readiness_log(
    sleep: Annotated[int, typer.Option("--sleep", help="Sleep quality 1-10")],
    energy: Annotated[int, typer.Option("--energy", help="Energy level 1-10")],
    soreness: Annotated[int, typer.Option("--soreness", help="Muscle soreness 1-10 (10 = very sore)")],
    stress: Annotated[int, typer.Option("--stress", help="Stress level 1-10 (10 = very stressed)")],
    notes: Annotated[Optional[str], typer.Option("--notes", "-n")] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Record today's readiness check-in. Logging again the same day overwrites it.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    with engine_errors():
        log = readiness_service.log_readiness(store, athlete_id, now(), sleep, energy, soreness, stress, notes)
    views.print_success(f"Readiness {log.overall_score:.2f}/10 saved for {log.log_date}")


@app.command()
def readiness(
    history: Annotated[
        int, typer.Option("--history", help="Also list check-ins from the last N days")
    ] = 0,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Show today's check-in and the score derived from recent training.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    at = now()
    with engine_errors():
        today_log = readiness_service.get_today_readiness(store, athlete_id, at.date())
        data_based = readiness_service.calculate_data_based_readiness(
            store, athlete_id, at, get_settings().readiness_window_days
        )
        past = readiness_service.get_readiness_history(store, athlete_id, at.date(), history) if history else []
    views.print_readiness(today_log, data_based)
    for entry in past:
        views.console.print(f"  {entry.log_date}  {entry.overall_score:5.2f}")


@app.command()
def progress(
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Show streak, session counts, weekly chart and personal records.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    settings = get_settings()
    with engine_errors():
        summary = progress_service.get_progress_summary(
            store,
            athlete_id,
            now().date(),
            weeks_back=settings.weeks_back,
            top_n=settings.top_records,
        )
    views.print_progress(summary)


@app.command()
def today(
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Today's message, sessions and readiness at a glance.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    at = now()
    with engine_errors():
        message = motivation_service.get_daily_message(store, athlete_id, at.date())
        day = calendar_service.get_calendar_view(
            store, athlete_id, CalendarWindow(kind="day", anchor=at.date()), at
        )
        today_log = readiness_service.get_today_readiness(store, athlete_id, at.date())
        data_based = readiness_service.calculate_data_based_readiness(
            store, athlete_id, at, get_settings().readiness_window_days
        )
    views.print_daily_message(message)
    views.console.print()
    views.print_calendar(day)
    views.console.print()
    views.print_readiness(today_log, data_based)


@app.command("message-send")
def message_send(
    to: Annotated[str, typer.Option("--to", help="Recipient athlete id")],
    content: Annotated[str, typer.Argument(help="Message text")],
    on: Annotated[
        Optional[str], typer.Option("--date", help="Display date YYYY-MM-DD (default: today)")
    ] = None,
    expires: Annotated[
        Optional[str], typer.Option("--expires", help="Last day to show, YYYY-MM-DD")
    ] = None,
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Send a message to an athlete (acting as their coach).
    """
    store = open_store(data_dir)
    coach_id = resolve_athlete(athlete)
    display_date = parse_date_option(on)
    expires_at = parse_date_option(expires) if expires else None
    with engine_errors():
        message = motivation_service.send_coach_message(
            store, coach_id, to, content, now(), display_date=display_date, expires_at=expires_at
        )
    views.print_success(f"Message {message.id} sent to {to}")


@app.command("message-read")
def message_read(
    message_id: Annotated[str, typer.Argument(help="Message id")],
    data_dir: DataDirOption = None,
    athlete: AthleteOption = None,
) -> None:
    """
    Mark a coach message as read.
    """
    store = open_store(data_dir)
    athlete_id = resolve_athlete(athlete)
    with engine_errors():
        motivation_service.mark_message_read(store, message_id, athlete_id)
    views.print_success("Marked as read")
