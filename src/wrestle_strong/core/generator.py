"""
Workout generation for the 5/3/1 program.

Turns (athlete training maxes, cycle, week, day template) into a fully
prescribed Workout, expands that across a whole cycle, and resolves the next
workout the athlete has not completed yet.

Identifiers are pure functions of the program slot, so regenerating the same
(cycle, week, day) always yields the same workout and exercise ids; the
progression service relies on this to reconcile against stored workouts.
"""

import re
from datetime import datetime
from typing import Iterable, Sequence

from .calculator import main_lift_sets, percent_of
from .config import ASSISTANCE_BUCKETS, DEFAULT_ASSISTANCE_LOAD, WEEKS_PER_CYCLE
from .models import AthleteProfile, Exercise, TrainingMaxes, Workout, WorkoutSet
from .templates import TEMPLATE_CATALOG, AssistanceSpec, WorkoutTemplate


def workout_id(cycle: int, week: int, day: int) -> str:
    """Deterministic workout id for a program slot, e.g. "workout-1-2-3"."""
    return f"workout-{cycle}-{week}-{day}"


def exercise_id(workout_id: str, exercise_type: str, exercise_name: str) -> str:
    """Deterministic exercise id: workout id + type + name with whitespace removed."""
    compact = re.sub(r"\s+", "", exercise_name)
    return f"{workout_id}-{exercise_type}-{compact}"


def assistance_weight(exercise_name: str, training_maxes: TrainingMaxes) -> int:
    """
    Load for a weighted assistance exercise.

    The name is looked up in the assistance buckets (lower body, upper body,
    explosive, loaded carry); each bucket is a fixed fraction of one main
    lift's training max. Unknown names fall back to 20% of bench.
    """
    for names, lift_type, fraction in ASSISTANCE_BUCKETS.values():
        if exercise_name in names:
            return percent_of(training_maxes.for_lift(lift_type), fraction)
    lift_type, fraction = DEFAULT_ASSISTANCE_LOAD
    return percent_of(training_maxes.for_lift(lift_type), fraction)


def _assistance_exercise(
    spec: AssistanceSpec, wid: str, training_maxes: TrainingMaxes
) -> Exercise:
    weight = 0 if spec.is_bodyweight else assistance_weight(spec.name, training_maxes)
    sets = [
        WorkoutSet(
            number=i + 1,
            reps=spec.reps,
            weight=weight,
            set_type="ASSISTANCE",
            is_bodyweight=spec.is_bodyweight,
        )
        for i in range(spec.sets)
    ]
    return Exercise(
        id=exercise_id(wid, "ASSISTANCE", spec.name),
        name=spec.name,
        lift_type="ASSISTANCE",
        role="ASSISTANCE",
        sets=sets,
    )


def assemble_workout(
    template: WorkoutTemplate,
    profile: AthleteProfile,
    cycle: int,
    week: int,
    today: str | None = None,
) -> Workout:
    """
    Build one complete workout for a template and program slot.

    Args:
        template: Day template from the catalog
        profile: Athlete whose training maxes drive the weights
        cycle: Cycle number (>= 1)
        week: Week of the cycle (1-4); the main lift falls back to the
            week 1 percentages for anything else
        today: ISO date to stamp (default: current date)

    Returns:
        Workout with main, supplementary and assistance exercises, not completed
    """
    if today is None:
        today = datetime.now().strftime("%Y-%m-%d")

    maxes = profile.training_maxes
    wid = workout_id(cycle, week, template.day)

    main = template.main_lift
    main_lift = Exercise(
        id=exercise_id(wid, main.lift_type, main.name),
        name=main.name,
        lift_type=main.lift_type,
        role="MAIN",
        sets=main_lift_sets(maxes.for_lift(main.lift_type), week),
    )

    supp = template.supplementary_lift
    supp_weight = percent_of(maxes.for_lift(supp.lift_type), supp.percentage_of_tm)
    supplementary_lift = Exercise(
        id=exercise_id(wid, supp.lift_type, supp.name),
        name=supp.name,
        lift_type=supp.lift_type,
        role="SUPPLEMENTARY",
        sets=[
            WorkoutSet(
                number=i + 1,
                reps=reps,
                weight=supp_weight,
                set_type="SUPPLEMENTARY",
                percentage=supp.percentage_of_tm,
            )
            for i, reps in enumerate(supp.rep_scheme)
        ],
    )

    return Workout(
        id=wid,
        day=template.day,
        name=template.name,
        date=today,
        cycle=cycle,
        week=week,
        main_lift=main_lift,
        supplementary_lift=supplementary_lift,
        assistance_exercises=[
            _assistance_exercise(spec, wid, maxes) for spec in template.assistance
        ],
    )


def generate_cycle_workouts(
    profile: AthleteProfile,
    templates: Sequence[WorkoutTemplate] = TEMPLATE_CATALOG,
    today: str | None = None,
) -> list[Workout]:
    """
    All workouts of the athlete's current cycle, week-major then catalog order.

    Pure: does not look at stored workouts. Always returns
    ``WEEKS_PER_CYCLE * len(templates)`` workouts.
    """
    cycle = profile.current_cycle.number
    return [
        assemble_workout(template, profile, cycle, week, today=today)
        for week in range(1, WEEKS_PER_CYCLE + 1)
        for template in templates
    ]


def get_next_workout(
    profile: AthleteProfile,
    completed_ids: Iterable[str],
    templates: Sequence[WorkoutTemplate] = TEMPLATE_CATALOG,
    today: str | None = None,
) -> Workout | None:
    """
    First workout of the athlete's current (cycle, week) not yet completed.

    Args:
        profile: Athlete state
        completed_ids: Ids of workouts already completed
        templates: Day templates in catalog order

    Returns:
        The assembled workout, or None if the whole week is done
    """
    done = set(completed_ids)
    cycle = profile.current_cycle.number
    week = profile.current_cycle.week
    for workout in generate_cycle_workouts(profile, templates, today=today):
        if workout.cycle == cycle and workout.week == week and workout.id not in done:
            return workout
    return None
