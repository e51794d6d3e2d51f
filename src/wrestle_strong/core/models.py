"""
Data models for wrestle-strong.

All core dataclasses representing the athlete, prescribed sets, exercises
and workouts. Template (catalog) types live in core.templates.base.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

LiftType = Literal["DEADLIFT", "BENCH_PRESS", "SQUAT", "POWER_CLEAN", "ASSISTANCE"]
ExerciseRole = Literal["MAIN", "SUPPLEMENTARY", "ASSISTANCE"]
SetType = Literal["WARM_UP", "MAIN", "SUPPLEMENTARY", "ASSISTANCE"]

# Reps are either a plain count or "<n>+" for an AMRAP set.
Reps = int | str

LIFT_TYPES: tuple[str, ...] = ("DEADLIFT", "BENCH_PRESS", "SQUAT", "POWER_CLEAN", "ASSISTANCE")
MAIN_LIFT_TYPES: tuple[str, ...] = ("DEADLIFT", "BENCH_PRESS", "SQUAT", "POWER_CLEAN")
EXERCISE_ROLES: tuple[str, ...] = ("MAIN", "SUPPLEMENTARY", "ASSISTANCE")
SET_TYPES: tuple[str, ...] = ("WARM_UP", "MAIN", "SUPPLEMENTARY", "ASSISTANCE")

_AMRAP_PATTERN = re.compile(r"^(\d+)\+$")


def is_amrap_reps(reps: Reps) -> bool:
    """Return True if the prescribed reps pattern denotes an AMRAP set."""
    return isinstance(reps, str) and "+" in reps


def reps_count(reps: Reps) -> int:
    """Numeric part of a reps prescription ("5+" -> 5)."""
    if isinstance(reps, str):
        match = _AMRAP_PATTERN.match(reps.strip())
        if match is None:
            raise ValueError(f"Invalid reps pattern: {reps!r}. Expected '<n>+'")
        return int(match.group(1))
    return int(reps)


def validate_iso_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


@dataclass
class TrainingMaxes:
    """
    Per-lift training maxes (pounds).

    Keyed by the four main lifts; assistance work has no training max of its
    own and resolves to 0.
    """

    deadlift: int
    bench_press: int
    squat: int
    power_clean: int

    def __post_init__(self) -> None:
        for name in ("deadlift", "bench_press", "squat", "power_clean"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} training max must be non-negative")

    def for_lift(self, lift_type: str) -> int:
        """Return the training max for a lift type (0 for ASSISTANCE)."""
        return {
            "DEADLIFT": self.deadlift,
            "BENCH_PRESS": self.bench_press,
            "SQUAT": self.squat,
            "POWER_CLEAN": self.power_clean,
        }.get(lift_type, 0)

    def as_dict(self) -> dict[str, int]:
        """Lift type -> training max for the four main lifts."""
        return {lift: self.for_lift(lift) for lift in MAIN_LIFT_TYPES}


@dataclass
class CycleState:
    """Position in the program: cycle number (>= 1) and week (1-4)."""

    number: int = 1
    week: int = 1

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("cycle number must be >= 1")
        if self.week not in (1, 2, 3, 4):
            raise ValueError(f"week must be in 1..4, got {self.week}")


@dataclass
class AthleteProfile:
    """
    The athlete: identity, weight class, training maxes and program position.
    """

    id: str
    name: str
    weight_class: str
    training_maxes: TrainingMaxes
    current_cycle: CycleState = field(default_factory=CycleState)
    start_date: str = ""  # ISO date the athlete started the program

    def __post_init__(self) -> None:
        if self.start_date:
            validate_iso_date(self.start_date)


@dataclass
class WorkoutSet:
    """
    A single prescribed set.

    ``amrap`` is derived from the reps pattern so the flag can never disagree
    with the prescription. ``actual_reps`` is only meaningful for AMRAP sets
    and stays None until a result is recorded.
    """

    number: int
    reps: Reps
    weight: float
    set_type: SetType = "MAIN"
    percentage: float | None = None
    completed: bool = False
    actual_reps: int | None = None
    is_bodyweight: bool = False

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("set number must be >= 1")
        if isinstance(self.reps, str):
            reps_count(self.reps)
        elif self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.actual_reps is not None and self.actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        if self.set_type not in SET_TYPES:
            raise ValueError(f"Invalid set_type: {self.set_type}")

    @property
    def amrap(self) -> bool:
        return is_amrap_reps(self.reps)

    @property
    def performed_reps(self) -> int:
        """Reps actually done: the recorded AMRAP result, else the prescription."""
        if self.actual_reps is not None:
            return self.actual_reps
        return reps_count(self.reps)


@dataclass
class Exercise:
    """An exercise within a workout; set order is significant (warm-ups first)."""

    id: str
    name: str
    lift_type: LiftType
    role: ExerciseRole
    sets: list[WorkoutSet] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.lift_type not in LIFT_TYPES:
            raise ValueError(f"Invalid lift_type: {self.lift_type}")
        if self.role not in EXERCISE_ROLES:
            raise ValueError(f"Invalid role: {self.role}")


@dataclass
class Workout:
    """
    One training day of one week of one cycle.

    Identity (id, cycle, week, day) is fixed at assembly time; only set
    completion, AMRAP results and ``completed`` change afterwards.
    """

    id: str
    day: int
    name: str
    date: str  # ISO format: YYYY-MM-DD
    cycle: int
    week: int
    main_lift: Exercise
    supplementary_lift: Exercise
    assistance_exercises: list[Exercise] = field(default_factory=list)
    completed: bool = False

    def __post_init__(self) -> None:
        validate_iso_date(self.date)
        if self.day < 1:
            raise ValueError("day must be >= 1")
        if self.cycle < 1:
            raise ValueError("cycle must be >= 1")
        if self.week not in (1, 2, 3, 4):
            raise ValueError(f"week must be in 1..4, got {self.week}")

    @property
    def slot(self) -> tuple[int, int, int]:
        """(cycle, week, day) triple identifying the program slot."""
        return (self.cycle, self.week, self.day)

    def exercises(self) -> list[Exercise]:
        """All exercises in display order: main, supplementary, assistance."""
        return [self.main_lift, self.supplementary_lift, *self.assistance_exercises]

    def find_exercise(self, exercise_id: str) -> Exercise | None:
        for exercise in self.exercises():
            if exercise.id == exercise_id:
                return exercise
        return None
