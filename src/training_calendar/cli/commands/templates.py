"""Setup commands: init, template-add, template-list, quote-add."""

from typing import Annotated, Optional

import typer

from ...core.config import SESSION_TYPES
from ...services import calendar as calendar_service
from ...services import motivation as motivation_service
from .. import views
from ..app import DataDirOption, app, engine_errors, get_store, open_store

_DAY_NAMES = {name.lower(): i for i, name in enumerate(views.WEEKDAY_LABELS, 1)}


def _parse_day(value: str | None) -> int | None:
    """Accept 1..7 (Mon=1) or a weekday abbreviation like 'mon'."""
    if value is None:
        return None
    key = value.strip().lower()[:3]
    if key in _DAY_NAMES:
        return _DAY_NAMES[key]
    if key.isdigit() and 1 <= int(key) <= 7:
        return int(key)
    views.print_error(f"Invalid day '{value}'. Use 1-7 (Mon=1) or mon..sun.")
    raise typer.Exit(1)


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory and empty collection files.
    """
    with engine_errors():
        store = get_store(data_dir)
        already = store.exists()
        store.init()
    if already:
        views.print_info(f"Data directory already exists: {store.data_dir}")
    else:
        views.print_success(f"Initialized data directory: {store.data_dir}")


@app.command("template-add")
def template_add(
    name: Annotated[str, typer.Argument(help="Session name, e.g. 'Upper body A'")],
    program: Annotated[str, typer.Option("--program", "-p", help="Program id")] = "default",
    program_name: Annotated[str, typer.Option("--program-name", help="Program display name")] = "",
    day: Annotated[
        Optional[str], typer.Option("--day", help="Day of week: 1-7 (Mon=1) or mon..sun")
    ] = None,
    week: Annotated[int, typer.Option("--week", help="Program week number")] = 1,
    session_type: Annotated[
        str, typer.Option("--type", "-t", help="strength, cardio or flexibility")
    ] = "strength",
    minutes: Annotated[
        Optional[int], typer.Option("--minutes", help="Estimated duration in minutes")
    ] = None,
    description: Annotated[Optional[str], typer.Option("--description")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a session template to a program.
    """
    if session_type not in SESSION_TYPES:
        views.print_error(f"Invalid session type '{session_type}'. Use one of: {', '.join(SESSION_TYPES)}")
        raise typer.Exit(1)
    day_of_week = _parse_day(day)
    store = open_store(data_dir)
    with engine_errors():
        template = calendar_service.add_template(
            store,
            name=name,
            program_id=program,
            program_name=program_name,
            day_of_week=day_of_week,
            week_number=week,
            session_type=session_type,
            description=description,
            estimated_duration_minutes=minutes,
        )
    views.print_success(f"Added template '{template.name}' ({template.id})")
    if day_of_week is None:
        views.print_warning("No day of week set; the template will not appear on the calendar.")


@app.command("template-list")
def template_list(
    program: Annotated[
        Optional[str], typer.Option("--program", "-p", help="Only this program")
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    List session templates.
    """
    store = open_store(data_dir)
    templates = calendar_service.load_templates(store, [program] if program else None)
    templates.sort(key=lambda t: (t.program_name or t.program_id, t.day_of_week or 8, t.name))
    views.print_templates(templates)


@app.command("quote-add")
def quote_add(
    content: Annotated[str, typer.Argument(help="Quote text")],
    author: Annotated[Optional[str], typer.Option("--author")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a motivational quote to the daily rotation.
    """
    store = open_store(data_dir)
    with engine_errors():
        quote = motivation_service.add_quote(store, content, author)
    views.print_success(f"Added quote {quote.id}")
