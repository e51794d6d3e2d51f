"""
5/3/1 arithmetic: training maxes, weight rounding and main-lift sets.

All functions are pure. Rounding is round-half-up (202.5 -> 203), applied
the same way everywhere a weight is derived from a percentage.
"""

import math

from .config import (
    BAR_WEIGHT,
    DEFAULT_WEEK,
    LOWER_BODY_INCREMENT,
    TRAINING_MAX_FACTOR,
    UPPER_BODY_INCREMENT,
    UPPER_BODY_LIFTS,
    WARMUP_REPS,
    WEEK_PERCENTAGES,
    WEIGHT_ROUNDING,
)
from .models import TrainingMaxes, WorkoutSet


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


def round_to_increment(weight: float, increment: int = WEIGHT_ROUNDING) -> int:
    """Round a weight to the nearest plate increment: round(w / 5) * 5."""
    return round_half_up(weight / increment) * increment


def percent_of(training_max: float, percentage: float) -> int:
    """Weight for a percentage of a training max, rounded to the nearest 5."""
    return round_to_increment(training_max * percentage)


def training_max(one_rep_max: float) -> int:
    """
    Derive a training max from a true one-rep max.

    Args:
        one_rep_max: Tested or estimated 1RM (non-negative)

    Returns:
        round(1RM * 0.9), halves rounded up (225 -> 203)
    """
    return round_half_up(one_rep_max * TRAINING_MAX_FACTOR)


def next_cycle_training_max(current: float, is_upper_body: bool) -> float:
    """Training max for the next cycle: +5 upper body, +10 lower body."""
    return current + (UPPER_BODY_INCREMENT if is_upper_body else LOWER_BODY_INCREMENT)


def is_upper_body(lift_type: str) -> bool:
    return lift_type in UPPER_BODY_LIFTS


def progress_training_maxes(maxes: TrainingMaxes) -> TrainingMaxes:
    """Apply one cycle of linear progression to every lift."""
    return TrainingMaxes(
        deadlift=next_cycle_training_max(maxes.deadlift, is_upper_body("DEADLIFT")),
        bench_press=next_cycle_training_max(maxes.bench_press, is_upper_body("BENCH_PRESS")),
        squat=next_cycle_training_max(maxes.squat, is_upper_body("SQUAT")),
        power_clean=next_cycle_training_max(maxes.power_clean, is_upper_body("POWER_CLEAN")),
    )


def training_maxes_from_one_rep_maxes(one_rep_maxes: dict[str, float]) -> TrainingMaxes:
    """
    Build TrainingMaxes from 1RMs keyed by lift type.

    Raises:
        KeyError: If any of the four main lifts is missing
    """
    return TrainingMaxes(
        deadlift=training_max(one_rep_maxes["DEADLIFT"]),
        bench_press=training_max(one_rep_maxes["BENCH_PRESS"]),
        squat=training_max(one_rep_maxes["SQUAT"]),
        power_clean=training_max(one_rep_maxes["POWER_CLEAN"]),
    )


def warmup_sets(first_working_weight: float, bar_weight: float = BAR_WEIGHT) -> list[WorkoutSet]:
    """
    Two warm-up sets: the empty bar, then halfway to the first working set.

    Args:
        first_working_weight: Weight of the first working set
        bar_weight: Empty bar weight

    Returns:
        Warm-up sets numbered 1 and 2
    """
    halfway = round_to_increment((first_working_weight - bar_weight) / 2 + bar_weight)
    return [
        WorkoutSet(number=1, reps=WARMUP_REPS, weight=bar_weight, set_type="WARM_UP"),
        WorkoutSet(number=2, reps=WARMUP_REPS, weight=halfway, set_type="WARM_UP"),
    ]


def main_lift_sets(training_max: float, week: int, bar_weight: float = BAR_WEIGHT) -> list[WorkoutSet]:
    """
    Prescribed sets for a main lift in a given week of the cycle.

    Week 1 is 5/5/5+ at 65/75/85%, week 2 is 3/3/3+ at 70/80/90%, week 3 is
    5/3/1+ at 75/85/95% and week 4 is a 5/5/5 deload at 40/50/60% with no
    AMRAP set. An unknown week falls back to the week 1 row.

    Args:
        training_max: Training max for the lift
        week: Week of the cycle (1-4)
        bar_weight: Empty bar weight for the first warm-up

    Returns:
        Two warm-up sets followed by three working sets, numbered 1..5
    """
    row = WEEK_PERCENTAGES.get(week, WEEK_PERCENTAGES[DEFAULT_WEEK])

    first_working_weight = percent_of(training_max, row[0][1])
    sets = warmup_sets(first_working_weight, bar_weight)

    for reps, percentage in row:
        sets.append(
            WorkoutSet(
                number=len(sets) + 1,
                reps=reps,
                weight=percent_of(training_max, percentage),
                set_type="MAIN",
                percentage=percentage,
            )
        )

    return sets
