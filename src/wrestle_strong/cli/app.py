"""Shared Typer app object, shared option types, and service utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.progression import ProgressionService
from ..io.serializers import ValidationError
from ..io.store import WorkoutStore, get_default_store
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Directory holding profile.json and workouts.jsonl"),
]

app = typer.Typer(
    name="wrestle-strong",
    help="5/3/1 strength training tracker for wrestlers.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(data_dir: Path | None) -> WorkoutStore:
    """Get the workout store from a directory or the default location."""
    if data_dir is None:
        return get_default_store()
    return WorkoutStore(data_dir)


def get_service(data_dir: Path | None) -> ProgressionService:
    """Load the progression service; exits with an error on unreadable data."""
    store = get_store(data_dir)
    try:
        return ProgressionService(store)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def require_profile(service: ProgressionService) -> None:
    """Exit with a hint when no athlete has been set up yet."""
    if service.profile is None:
        views.print_error("No athlete profile found.")
        views.print_info("Run 'init' first to set up your training maxes.")
        raise typer.Exit(1)
