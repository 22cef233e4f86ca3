"""
CLI entry point using Typer.

Provides commands for the training calendar:
- init: Create the data directory
- template-add / template-list: Manage session templates
- calendar: Day, week, month or year view of scheduled sessions
- start / pause / resume / complete / elapsed: Run a workout session
- log-set / log-cardio: Record exercise sets against a running session
- readiness-log / readiness: Daily check-in and readiness scores
- progress: Streak, counts, weekly chart and personal records
- today: Daily message, today's sessions and readiness
"""

from typing import Annotated

import typer

from . import views
from .app import app, configure_logging

# Importing the command modules registers their commands on `app`.
from .commands import analysis, sessions, templates  # noqa: F401


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log debug output to stderr")] = False,
) -> None:
    """
    Training calendar and workout session tracker. Run without a command for today's overview.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return

    views.console.print("[bold cyan]training-calendar[/bold cyan]")
    views.print_info("Run 'training-calendar today' for today's overview, or --help for all commands.")


if __name__ == "__main__":
    app()
