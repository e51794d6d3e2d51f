"""
CLI entry point using Typer.

Provides commands for the 5/3/1 program:
- init: Set up the athlete from one-rep maxes
- status: Show cycle, week and training maxes
- workout: Show today's workout
- toggle / amrap / complete: Record training
- advance: Force the next week or cycle
- history / progress: Review training
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from . import views
from .app import app
from .commands import profile, progress, workouts  # noqa: F401  (register commands)

MENU = (
    ("init", "Set up athlete and training maxes"),
    ("status", "Current cycle, week and training maxes"),
    ("workout", "Today's workout"),
    ("toggle", "Mark a set done"),
    ("amrap", "Record AMRAP reps"),
    ("complete", "Finish today's workout"),
    ("advance", "Skip to the next week"),
    ("history", "All workouts"),
    ("progress", "Volume and estimated maxes"),
    ("edit-profile", "Change name / weight class"),
    ("edit-maxes", "Re-enter one-rep maxes"),
    ("reset", "Delete all data"),
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=views.console, show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine and storage activity"),
    ] = False,
) -> None:
    """
    5/3/1 strength training tracker. Run without a command for an overview.
    """
    _configure_logging(verbose)

    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]wrestle-strong[/bold cyan]: 5/3/1 training tracker")
    views.console.print()
    for command, desc in MENU:
        views.console.print(f"  [green]{command:<13}[/green] {desc}")
    views.console.print()
    views.console.print("Run [bold]wrestle-strong COMMAND --help[/bold] for options.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
