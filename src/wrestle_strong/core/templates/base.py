"""
Base types for the workout template catalog.

A WorkoutTemplate describes one training day of the fixed weekly split:
its main lift, the supplementary lift with a fixed rep scheme, and the
assistance work. Templates are configuration data, never persisted.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LiftSpec:
    """A main lift slot."""

    lift_type: str   # "SQUAT" | "BENCH_PRESS" | "DEADLIFT" | "POWER_CLEAN"
    name: str        # e.g. "Back Squat"


@dataclass(frozen=True)
class SupplementarySpec:
    """Secondary lift at a fixed percentage of the same lift's training max."""

    lift_type: str
    name: str
    rep_scheme: tuple[int, ...]   # one entry per set, e.g. (5, 5, 5, 5, 5)
    percentage_of_tm: float       # e.g. 0.6


@dataclass(frozen=True)
class AssistanceSpec:
    """Auxiliary work with fixed sets x reps."""

    name: str
    sets: int
    reps: int
    is_bodyweight: bool = False


@dataclass(frozen=True)
class WorkoutTemplate:
    """One day of the weekly split."""

    day: int                      # 1-based position in the week
    name: str                     # e.g. "Squat Day"
    main_lift: LiftSpec
    supplementary_lift: SupplementarySpec
    assistance: tuple[AssistanceSpec, ...] = field(default_factory=tuple)
