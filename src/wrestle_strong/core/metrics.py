"""
Progress metrics computed from the workout collection.

Pure functions over workouts; nothing here mutates state.
"""

from dataclasses import dataclass, field

from .calculator import round_half_up
from .config import EPLEY_DIVISOR
from .models import AthleteProfile, Workout, WorkoutSet


@dataclass
class AmrapRecord:
    """One recorded AMRAP result on a main lift."""

    date: str
    cycle: int
    week: int
    lift_type: str
    weight: float
    reps: int
    estimated_1rm: int


@dataclass
class ProgressSummary:
    """Overview for the progress screen."""

    completed_workouts: int
    total_volume: float
    cycle: int
    week: int
    training_maxes: dict[str, int] = field(default_factory=dict)
    amrap_records: list[AmrapRecord] = field(default_factory=list)


def estimated_one_rep_max(weight: float, reps: int) -> int:
    """
    Epley estimate: weight * (1 + reps / 30), rounded half up.

    Args:
        weight: Weight lifted
        reps: Reps achieved

    Returns:
        Estimated 1RM
    """
    return round_half_up(weight * (1 + reps / EPLEY_DIVISOR))


def completed_workouts(workouts: list[Workout]) -> list[Workout]:
    return [w for w in workouts if w.completed]


def _set_volume(s: WorkoutSet) -> float:
    if not s.completed or s.is_bodyweight:
        return 0.0
    return s.weight * s.performed_reps


def workout_volume(workout: Workout) -> float:
    """
    Weight x reps over the completed sets of a workout.

    AMRAP sets count the recorded reps when present, otherwise the prescribed
    minimum; bodyweight assistance sets count nothing.
    """
    return sum(
        _set_volume(s) for exercise in workout.exercises() for s in exercise.sets
    )


def total_volume(workouts: list[Workout]) -> float:
    """Volume summed over completed workouts only."""
    return sum(workout_volume(w) for w in completed_workouts(workouts))


def amrap_history(workouts: list[Workout], lift_type: str | None = None) -> list[AmrapRecord]:
    """
    AMRAP results from completed workouts, oldest first.

    Args:
        workouts: Workout collection
        lift_type: Restrict to one main lift (e.g. "SQUAT"); None for all

    Returns:
        One record per completed workout whose main-lift AMRAP set has a result
    """
    records: list[AmrapRecord] = []
    for workout in completed_workouts(workouts):
        main = workout.main_lift
        if lift_type is not None and main.lift_type != lift_type:
            continue
        amrap_set = next((s for s in main.sets if s.amrap and s.actual_reps), None)
        if amrap_set is None:
            continue
        records.append(
            AmrapRecord(
                date=workout.date,
                cycle=workout.cycle,
                week=workout.week,
                lift_type=main.lift_type,
                weight=amrap_set.weight,
                reps=amrap_set.actual_reps,
                estimated_1rm=estimated_one_rep_max(amrap_set.weight, amrap_set.actual_reps),
            )
        )
    records.sort(key=lambda r: (r.date, r.cycle, r.week))
    return records


def progress_summary(profile: AthleteProfile, workouts: list[Workout]) -> ProgressSummary:
    """Build the progress overview for an athlete."""
    return ProgressSummary(
        completed_workouts=len(completed_workouts(workouts)),
        total_volume=total_volume(workouts),
        cycle=profile.current_cycle.number,
        week=profile.current_cycle.week,
        training_maxes=profile.training_maxes.as_dict(),
        amrap_records=amrap_history(workouts),
    )
