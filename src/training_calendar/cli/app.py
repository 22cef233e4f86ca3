"""Shared Typer app object, shared option types, and store utility."""

import sys
from contextlib import contextmanager
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from loguru import logger

from ..core.engine.config_loader import Settings, load_settings
from ..core.errors import TrainingCalendarError
from ..io.store import JsonlStore
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory holding the JSONL data files"),
]

# Shared --athlete option type used across all commands
AthleteOption = Annotated[
    Optional[str],
    typer.Option("--athlete", "-a", help="Acting athlete id (default from settings.yaml)"),
]

app = typer.Typer(
    name="training-calendar",
    help="Training calendar and workout session tracker for coached athletes.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def configure_logging(verbose: bool = False) -> None:
    """Send loguru output to stderr at the configured level."""
    level = "DEBUG" if verbose else get_settings().log_level
    logger.remove()
    logger.add(sys.stderr, level=level)


def get_store(data_dir: Path | None) -> JsonlStore:
    """Get the store at data_dir, or at the configured default location."""
    return JsonlStore(data_dir if data_dir is not None else get_settings().data_dir)


def open_store(data_dir: Path | None) -> JsonlStore:
    """Like get_store, but exit with an error when init has not been run."""
    with engine_errors():
        store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Data directory not found: {store.data_dir}")
        views.print_info("Run 'init' first to create the data directory.")
        raise typer.Exit(1)
    return store


def resolve_athlete(athlete: str | None) -> str:
    return athlete or get_settings().athlete_id


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def parse_date_option(value: str | None) -> date:
    """Parse a YYYY-MM-DD option value, defaulting to today."""
    if value is None:
        return now().date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        views.print_error(f"Invalid date '{value}'. Use YYYY-MM-DD.")
        raise typer.Exit(1)


@contextmanager
def engine_errors() -> Iterator[None]:
    """Print engine errors in red and exit with status 1."""
    try:
        yield
    except TrainingCalendarError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
