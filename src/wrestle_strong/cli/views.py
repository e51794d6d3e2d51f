"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of athlete and workout data.
"""

from rich.console import Console
from rich.table import Table

from ..core.metrics import ProgressSummary, workout_volume
from ..core.models import AthleteProfile, Exercise, Workout, WorkoutSet

console = Console()

LIFT_LABELS = {
    "SQUAT": "Squat",
    "BENCH_PRESS": "Bench Press",
    "DEADLIFT": "Deadlift",
    "POWER_CLEAN": "Power Clean",
}


def _fmt_reps(s: WorkoutSet) -> str:
    if s.amrap and s.actual_reps is not None:
        return f"{s.reps} ({s.actual_reps})"
    return str(s.reps)


def _fmt_weight(s: WorkoutSet) -> str:
    if s.is_bodyweight:
        return "BW"
    return f"{s.weight:g}"


def format_profile(profile: AthleteProfile) -> str:
    """
    Format the athlete profile as a text block.

    Args:
        profile: Athlete to display

    Returns:
        Formatted string
    """
    cycle = profile.current_cycle
    lines = [
        f"[bold]{profile.name}[/bold] • {profile.weight_class}",
        f"- Cycle {cycle.number}, Week {cycle.week}",
    ]
    if profile.start_date:
        lines.append(f"- Started: {profile.start_date}")
    lines.append("- Training maxes:")
    for lift, tm in profile.training_maxes.as_dict().items():
        lines.append(f"    {LIFT_LABELS[lift]:<12} {tm:g}")
    return "\n".join(lines)


def format_exercise_table(exercise: Exercise, position: int) -> Table:
    """Rich table of one exercise's sets."""
    table = Table(title=f"{position}. {exercise.name}", title_justify="left")

    table.add_column("Set", justify="right", style="dim", width=3)
    table.add_column("Type", style="magenta")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("Weight", justify="right", style="cyan")
    table.add_column("%TM", justify="right")
    table.add_column("Done", justify="center")

    for s in exercise.sets:
        table.add_row(
            str(s.number),
            "AMRAP" if s.amrap else s.set_type.replace("_", "-").lower(),
            _fmt_reps(s),
            _fmt_weight(s),
            f"{s.percentage * 100:.0f}%" if s.percentage is not None else "-",
            "[green]✓[/green]" if s.completed else "·",
        )

    return table


def print_workout(workout: Workout) -> None:
    """
    Print a full workout: header line plus one table per exercise.

    Args:
        workout: Workout to display
    """
    status = "[green]completed[/green]" if workout.completed else "[yellow]open[/yellow]"
    console.print()
    console.print(
        f"[bold cyan]{workout.name}[/bold cyan] · cycle {workout.cycle}, "
        f"week {workout.week}, day {workout.day}  ({workout.date}, {status})"
    )
    console.print(f"[dim]id: {workout.id}[/dim]")
    for i, exercise in enumerate(workout.exercises(), 1):
        console.print(format_exercise_table(exercise, i))


def format_history_table(workouts: list[Workout]) -> Table:
    """
    Create a Rich table listing workouts.

    Args:
        workouts: Workouts to display

    Returns:
        Rich Table object
    """
    table = Table(title="Workouts")

    table.add_column("Id", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Cycle", justify="right")
    table.add_column("Week", justify="right")
    table.add_column("Day", style="magenta")
    table.add_column("Main lift", justify="right", style="bold")
    table.add_column("Volume", justify="right")
    table.add_column("Done", justify="center")

    for w in workouts:
        top = w.main_lift.sets[-1] if w.main_lift.sets else None
        table.add_row(
            w.id,
            w.date,
            str(w.cycle),
            str(w.week),
            w.name,
            f"{top.reps} @ {top.weight:g}" if top is not None else "-",
            f"{workout_volume(w):,.0f}" if w.completed else "-",
            "[green]✓[/green]" if w.completed else "·",
        )

    return table


def print_history(workouts: list[Workout]) -> None:
    """Print the workout list to console."""
    if not workouts:
        console.print("[yellow]No workouts generated yet.[/yellow]")
        return
    console.print(format_history_table(workouts))


def print_progress(summary: ProgressSummary) -> None:
    """
    Print the progress overview and AMRAP history.

    Args:
        summary: Progress summary to display
    """
    console.print()
    console.print("[bold]Progress[/bold]")
    console.print(f"- Position: cycle {summary.cycle}, week {summary.week}")
    console.print(f"- Completed workouts: {summary.completed_workouts}")
    console.print(f"- Total volume: {summary.total_volume:,.0f}")

    if not summary.amrap_records:
        console.print("[dim]No AMRAP results recorded yet.[/dim]")
        return

    table = Table(title="AMRAP results")
    table.add_column("Date", style="cyan")
    table.add_column("Lift", style="magenta")
    table.add_column("C/W", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("e1RM", justify="right", style="green")

    for r in summary.amrap_records:
        table.add_row(
            r.date,
            LIFT_LABELS.get(r.lift_type, r.lift_type),
            f"{r.cycle}/{r.week}",
            f"{r.weight:g}",
            str(r.reps),
            str(r.estimated_1rm),
        )
    console.print(table)


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


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
