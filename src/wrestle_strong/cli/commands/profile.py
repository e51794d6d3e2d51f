"""Profile commands: init, status, edit-profile, edit-maxes, reset."""

import json
from typing import Annotated, Optional

import typer

from ...core.calculator import training_max
from ...core.templates import template_count
from ...io.serializers import profile_to_dict
from ...io.store import StorageError
from .. import views
from ..app import DataDirOption, app, get_service, get_store, require_profile


def _one_rep_maxes(squat: float, bench: float, deadlift: float, power_clean: float) -> dict[str, float]:
    return {
        "SQUAT": squat,
        "BENCH_PRESS": bench,
        "DEADLIFT": deadlift,
        "POWER_CLEAN": power_clean,
    }


@app.command()
def init(
    name: Annotated[str, typer.Option("--name", "-n", help="Athlete name")],
    squat: Annotated[float, typer.Option("--squat", min=0.0, help="Back squat 1RM")],
    bench: Annotated[float, typer.Option("--bench", min=0.0, help="Bench press 1RM")],
    deadlift: Annotated[float, typer.Option("--deadlift", min=0.0, help="Deadlift 1RM")],
    power_clean: Annotated[float, typer.Option("--power-clean", min=0.0, help="Power clean 1RM")],
    weight_class: Annotated[
        str,
        typer.Option("--weight-class", "-c", help="Competition weight class"),
    ] = "",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Discard existing profile and workouts"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Set up the athlete from one-rep maxes and generate cycle 1.

    Training maxes are 90% of each 1RM.
    """
    if get_store(data_dir).exists() and not force:
        views.print_error("A profile already exists. Use --force to start over.")
        raise typer.Exit(1)

    service = get_service(data_dir)

    try:
        if force:
            service.reset()
        profile = service.setup_profile(
            name=name,
            weight_class=weight_class,
            one_rep_maxes=_one_rep_maxes(squat, bench, deadlift, power_clean),
        )
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Profile created for {profile.name}.")
    views.console.print(views.format_profile(profile))
    views.print_info(f"Generated {len(service.workouts)} workouts for cycle 1.")


@app.command()
def status(
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the athlete, current cycle/week and training maxes.
    """
    service = get_service(data_dir)
    require_profile(service)
    profile = service.profile

    if json_out:
        print(json.dumps(profile_to_dict(profile), indent=2))
        return

    cycle = profile.current_cycle
    done = sum(1 for w in service.workouts_for_week(cycle.number, cycle.week) if w.completed)

    views.console.print()
    views.console.print(views.format_profile(profile))
    views.console.print(f"- This week: {done}/{template_count()} workouts done")
    views.console.print()


@app.command("edit-profile")
def edit_profile(
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    weight_class: Annotated[
        Optional[str],
        typer.Option("--weight-class", "-c", help="New weight class"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Change the athlete's name or weight class.
    """
    if name is None and weight_class is None:
        views.print_error("Nothing to change. Pass --name and/or --weight-class.")
        raise typer.Exit(1)

    service = get_service(data_dir)
    require_profile(service)

    try:
        profile = service.update_profile(name=name, weight_class=weight_class)
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success("Profile updated.")
    views.console.print(views.format_profile(profile))


@app.command("edit-maxes")
def edit_maxes(
    squat: Annotated[float, typer.Option("--squat", min=0.0, help="Back squat 1RM")],
    bench: Annotated[float, typer.Option("--bench", min=0.0, help="Bench press 1RM")],
    deadlift: Annotated[float, typer.Option("--deadlift", min=0.0, help="Deadlift 1RM")],
    power_clean: Annotated[float, typer.Option("--power-clean", min=0.0, help="Power clean 1RM")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Recalculate all training maxes from new one-rep maxes.

    Workouts already generated keep their weights; run 'workout --new' to
    re-prescribe the next one.
    """
    service = get_service(data_dir)
    require_profile(service)

    try:
        profile = service.update_training_maxes(
            _one_rep_maxes(squat, bench, deadlift, power_clean)
        )
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Training maxes updated (e.g. squat 1RM {squat:g} → TM {training_max(squat)})."
    )
    views.console.print(views.format_profile(profile))


@app.command()
def reset(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete the profile and every workout.
    """
    if not yes and not views.confirm_action("Delete ALL training data?"):
        views.print_info("Cancelled.")
        return

    service = get_service(data_dir)
    try:
        service.reset()
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success("All training data deleted.")
