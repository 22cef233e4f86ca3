"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of calendar, workout and progress data.
"""

from datetime import date, timedelta

from rich.console import Console
from rich.table import Table

from ..core import calendar_math
from ..core.lifecycle import state_of
from ..core.models import (
    DailyMessage,
    DataBasedReadiness,
    DaySchedule,
    DayView,
    ExerciseSetLog,
    MonthView,
    ProgressSummary,
    ReadinessLog,
    ScheduledSession,
    SessionAttempt,
    SessionTemplate,
    WeekView,
    YearView,
)

console = Console()

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_STATUS_MARKS = {"completed": "[green]✓[/green]", "in_progress": "[yellow]▶[/yellow]", "planned": "[dim]○[/dim]"}
_TYPE_STYLES = {"strength": "red", "cardio": "blue", "flexibility": "magenta"}


def format_elapsed(seconds: int) -> str:
    """H:MM:SS when an hour or more has passed, M:SS otherwise."""
    hours, rest = divmod(max(0, seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def view_title(kind: str, anchor: date) -> str:
    """Header line for a calendar view."""
    if kind == "day":
        return f"{WEEKDAY_LABELS[anchor.weekday()]} {anchor.day} {MONTH_LABELS[anchor.month - 1]} {anchor.year}"
    if kind == "week":
        start = calendar_math.week_start(anchor)
        end = start + timedelta(days=6)
        if start.month == end.month:
            return f"{start.day} - {end.day} {MONTH_LABELS[start.month - 1]} {start.year}"
        return (
            f"{start.day} {MONTH_LABELS[start.month - 1]} - "
            f"{end.day} {MONTH_LABELS[end.month - 1]} {end.year}"
        )
    if kind == "month":
        return f"{MONTH_LABELS[anchor.month - 1]} {anchor.year}"
    return str(anchor.year)


def _session_line(scheduled: ScheduledSession) -> str:
    t = scheduled.template
    style = _TYPE_STYLES.get(t.session_type, "white")
    duration = f" ({t.estimated_duration_minutes} min)" if t.estimated_duration_minutes else ""
    return f"{_STATUS_MARKS[scheduled.status]} [{style}]{t.name}[/{style}]{duration}"


def _day_header(schedule: DaySchedule) -> str:
    d = schedule.day
    label = f"{WEEKDAY_LABELS[d.day_of_week - 1]} {d.date.day}"
    return f"[bold green]{label}[/bold green]" if d.is_today else label


def print_day_view(view: DayView) -> None:
    schedule = view.schedule
    console.print(f"[bold]{view_title('day', schedule.day.date)}[/bold]")
    if not schedule.sessions:
        console.print("[dim]No session scheduled.[/dim]")
        return
    table = Table(show_header=True, header_style="dim")
    table.add_column("", width=2)
    table.add_column("Session", style="cyan")
    table.add_column("Program")
    table.add_column("Type")
    table.add_column("Est. min", justify="right")
    table.add_column("ID", style="dim")
    for s in schedule.sessions:
        t = s.template
        table.add_row(
            _STATUS_MARKS[s.status],
            t.name,
            t.program_name or "-",
            t.session_type,
            str(t.estimated_duration_minutes) if t.estimated_duration_minutes else "-",
            t.id,
        )
    console.print(table)


def print_week_view(view: WeekView) -> None:
    console.print(f"[bold]{view_title('week', view.days[0].day.date)}[/bold]")
    table = Table(show_header=True, show_lines=True)
    for schedule in view.days:
        table.add_column(_day_header(schedule), vertical="top")
    cells = [
        "\n".join(_session_line(s) for s in schedule.sessions) or "[dim]-[/dim]"
        for schedule in view.days
    ]
    table.add_row(*cells)
    console.print(table)


def print_month_view(view: MonthView) -> None:
    console.print(f"[bold]{view_title('month', date(view.year, view.month, 1))}[/bold]")
    table = Table(show_header=True, show_lines=True)
    for label in WEEKDAY_LABELS:
        table.add_column(label, justify="center")
    for row_start in range(0, len(view.cells), 7):
        row = []
        for cell in view.cells[row_start:row_start + 7]:
            day = str(cell.day.date.day)
            if cell.day.is_today:
                day = f"[bold green]{day}[/bold green]"
            elif not cell.day.is_current_month:
                day = f"[dim]{day}[/dim]"
            marks = "".join(_STATUS_MARKS[s.status] for s in cell.indicators)
            if cell.remaining:
                marks += f"[dim]+{cell.remaining}[/dim]"
            row.append(f"{day}\n{marks}" if marks else day)
        table.add_row(*row)
    console.print(table)


def print_year_view(view: YearView) -> None:
    console.print(f"[bold]{view.year}[/bold]")
    peak = max(view.counts_by_month.values(), default=0) or 1
    for month_index in range(12):
        count = view.counts_by_month.get(month_index, 0)
        bar = "█" * int(count / peak * 30)
        console.print(f"{MONTH_LABELS[month_index]:>4} │{bar} {count}")


def print_calendar(view: DayView | WeekView | MonthView | YearView) -> None:
    if isinstance(view, DayView):
        print_day_view(view)
    elif isinstance(view, WeekView):
        print_week_view(view)
    elif isinstance(view, MonthView):
        print_month_view(view)
    else:
        print_year_view(view)


def print_templates(templates: list[SessionTemplate]) -> None:
    if not templates:
        console.print("[yellow]No session templates yet.[/yellow]")
        return
    table = Table(title="Session Templates")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Program")
    table.add_column("Day")
    table.add_column("Type")
    for t in templates:
        day = WEEKDAY_LABELS[t.day_of_week - 1] if t.day_of_week else "-"
        table.add_row(t.id, t.name, t.program_name or t.program_id, day, t.session_type)
    console.print(table)


def print_attempt(attempt: SessionAttempt, elapsed: int) -> None:
    state = state_of(attempt)
    console.print(f"Attempt [bold]{attempt.id}[/bold]  state: [cyan]{state}[/cyan]")
    console.print(f"  Started:  {attempt.created_at:%Y-%m-%d %H:%M:%S}")
    console.print(f"  Elapsed:  {format_elapsed(elapsed)}")
    if attempt.total_paused_seconds:
        console.print(f"  Paused:   {format_elapsed(attempt.total_paused_seconds)}")
    if attempt.completed_at is not None:
        console.print(f"  Finished: {attempt.completed_at:%Y-%m-%d %H:%M:%S}")
        if attempt.duration_minutes is not None:
            console.print(f"  Duration: {attempt.duration_minutes:.1f} min")
        if attempt.overall_rpe is not None:
            console.print(f"  RPE:      {attempt.overall_rpe}")


def print_sets(logs: list[ExerciseSetLog]) -> None:
    if not logs:
        return
    table = Table(show_header=True, header_style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("kg", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("RPE", justify="right")
    for log in logs:
        table.add_row(
            log.exercise_id,
            str(log.set_number),
            f"{log.weight_kg:g}" if log.weight_kg is not None else "-",
            str(log.reps_completed) if log.reps_completed is not None else "-",
            str(log.rpe) if log.rpe is not None else "-",
        )
    console.print(table)


def print_readiness(today_log: ReadinessLog | None, data_based: DataBasedReadiness) -> None:
    console.print("[bold]Readiness[/bold]")
    if today_log is not None:
        console.print(
            f"- Check-in:   {today_log.overall_score:.2f}/10  "
            f"(sleep {today_log.sleep_quality}, energy {today_log.energy_level}, "
            f"soreness {today_log.muscle_soreness}, stress {today_log.stress_level})"
        )
    else:
        console.print("- Check-in:   [dim]not logged today[/dim]")
    console.print(f"- Data-based: {data_based.score:.1f}/10")
    console.print(f"  training load {data_based.training_load}, avg RPE {data_based.avg_rpe:.1f}, "
                  f"rest days {data_based.rest_days}, trend {data_based.trend}")


def print_progress(summary: ProgressSummary) -> None:
    console.print("[bold]Progress[/bold]")
    console.print(f"- Streak:      {summary.streak} day(s)")
    console.print(f"- This week:   {summary.sessions_this_week}")
    console.print(f"- This month:  {summary.sessions_this_month}")
    console.print(f"- Total:       {summary.total_sessions} sessions, {summary.total_hours} h")
    console.print(f"- Volume:      {summary.total_volume:,.0f} kg")

    console.print()
    peak = max((b.count for b in summary.weekly), default=0) or 1
    for bucket in summary.weekly:
        bar = "█" * int(bucket.count / peak * 20)
        console.print(f"{bucket.label:>7} │{bar} {bucket.count}")

    if summary.top_records:
        console.print()
        table = Table(title="Personal Records")
        table.add_column("Exercise", style="cyan")
        table.add_column("kg", justify="right", style="bold")
        table.add_column("Reps", justify="right")
        table.add_column("Date")
        for record in summary.top_records:
            table.add_row(record.name, f"{record.weight:g}", str(record.reps), f"{record.date:%Y-%m-%d}")
        console.print(table)


def print_daily_message(message: DailyMessage | None) -> None:
    if message is None:
        console.print("[dim]Nothing for today.[/dim]")
        return
    if message.source == "coach":
        flag = " [yellow](new)[/yellow]" if not message.is_read else ""
        console.print(f"[bold]Message from your coach[/bold]{flag}")
        console.print(f"[italic]“{message.content}”[/italic]")
        return
    console.print(f"[italic]“{message.content}”[/italic]")
    if message.author:
        console.print(f"[dim]- {message.author}[/dim]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
