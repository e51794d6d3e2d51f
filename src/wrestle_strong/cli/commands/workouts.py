"""Workout commands: workout, toggle, amrap, complete, advance, history."""

from typing import Annotated, Optional

import typer

from ...core.models import Workout
from ...core.progression import ProgressionService, TrainingLookupError
from ...io.store import StorageError
from .. import views
from ..app import DataDirOption, app, get_service, require_profile

WorkoutIdOption = Annotated[
    Optional[str],
    typer.Option("--workout", "-w", help="Workout id (default: current workout)"),
]


def _resolve_workout(service: ProgressionService, workout_id: str | None) -> Workout:
    """Named workout, or the current one when no id is given."""
    if workout_id is not None:
        workout = service.get_workout(workout_id)
        if workout is None:
            views.print_error(f"No workout with id {workout_id!r}")
            raise typer.Exit(1)
        return workout

    workout = service.get_current_workout()
    if workout is None:
        views.print_info("All workouts for this week are done. Run 'advance' to move on.")
        raise typer.Exit(1)
    return workout


def _exercise_id(workout: Workout, position: int) -> str:
    """Exercise id for a 1-based position as shown by 'workout'."""
    exercises = workout.exercises()
    if not 1 <= position <= len(exercises):
        views.print_error(f"Exercise must be between 1 and {len(exercises)}")
        raise typer.Exit(1)
    return exercises[position - 1].id


@app.command()
def workout(
    new: Annotated[
        bool,
        typer.Option("--new", help="Re-assemble the next workout from current training maxes"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show today's workout.
    """
    service = get_service(data_dir)
    require_profile(service)

    try:
        current = service.generate_new_workout() if new else service.get_current_workout()
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if current is None:
        views.print_info("All workouts for this week are done. Run 'advance' to move on.")
        return

    views.print_workout(current)


@app.command()
def toggle(
    exercise: Annotated[int, typer.Option("--exercise", "-e", help="Exercise number (1-based)")],
    set_number: Annotated[int, typer.Option("--set", "-s", help="Set number (1-based)")],
    workout_id: WorkoutIdOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Mark a set done (or undo it).
    """
    service = get_service(data_dir)
    require_profile(service)

    try:
        target = _resolve_workout(service, workout_id)
        updated = service.toggle_set(target.id, _exercise_id(target, exercise), set_number - 1)
    except (TrainingLookupError, StorageError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = "done" if updated.completed else "not done"
    views.print_success(f"Set {updated.number} marked {state}.")


@app.command()
def amrap(
    reps: Annotated[int, typer.Argument(min=0, help="Reps achieved")],
    set_number: Annotated[
        Optional[int],
        typer.Option("--set", "-s", help="Set number (default: the AMRAP set)"),
    ] = None,
    workout_id: WorkoutIdOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Record the result of the main lift's AMRAP set.
    """
    service = get_service(data_dir)
    require_profile(service)

    try:
        target = _resolve_workout(service, workout_id)
        main = target.main_lift
        if set_number is None:
            amrap_sets = [i for i, s in enumerate(main.sets) if s.amrap]
            if not amrap_sets:
                views.print_error(f"{main.name} has no AMRAP set this week (deload).")
                raise typer.Exit(1)
            index = amrap_sets[0]
        else:
            index = set_number - 1
        updated = service.record_amrap(target.id, main.id, index, reps)
    except (TrainingLookupError, StorageError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Recorded {updated.actual_reps} reps @ {updated.weight:g} on {main.name}."
    )


@app.command()
def complete(
    workout_id: WorkoutIdOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Mark a workout completed. Finishing every workout of the week advances
    to the next week (or the next cycle after week 4).
    """
    service = get_service(data_dir)
    require_profile(service)
    before = service.profile.current_cycle

    try:
        target = _resolve_workout(service, workout_id)
        service.complete_workout(target.id)
    except (TrainingLookupError, StorageError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Completed {target.name} (cycle {target.cycle}, week {target.week}).")

    after = service.profile.current_cycle
    if (after.number, after.week) != (before.number, before.week):
        views.print_info(f"Week finished. Now cycle {after.number}, week {after.week}.")


@app.command()
def advance(
    data_dir: DataDirOption = None,
) -> None:
    """
    Move to the next week (or next cycle) without finishing this one.
    """
    service = get_service(data_dir)
    require_profile(service)

    try:
        profile = service.advance()
    except StorageError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Now at cycle {profile.current_cycle.number}, week {profile.current_cycle.week}."
    )
    if profile.current_cycle.week == 1:
        views.console.print(views.format_profile(profile))


@app.command()
def history(
    cycle: Annotated[
        Optional[int],
        typer.Option("--cycle", help="Only show one cycle"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    List generated workouts and their completion.
    """
    service = get_service(data_dir)
    require_profile(service)

    workouts = service.workouts
    if cycle is not None:
        workouts = [w for w in workouts if w.cycle == cycle]
    workouts.sort(key=lambda w: (w.cycle, w.week, w.day))
    views.print_history(workouts)
