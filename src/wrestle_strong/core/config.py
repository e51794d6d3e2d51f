"""
Configuration constants for the 5/3/1 training engine.

All adjustable parameters are centralized here for easy tuning.
Weights are in pounds; every derived weight is rounded to WEIGHT_ROUNDING.
"""

import os
from pathlib import Path
from typing import Final

# =============================================================================
# TRAINING MAX
# =============================================================================

TRAINING_MAX_FACTOR: Final[float] = 0.9  # TM = 90% of true 1RM
WEIGHT_ROUNDING: Final[int] = 5  # Plates: round every derived weight to 5 lb

# =============================================================================
# CYCLE PROGRESSION
# =============================================================================

WEEKS_PER_CYCLE: Final[int] = 4
UPPER_BODY_INCREMENT: Final[int] = 5  # Added to bench / power clean TM per cycle
LOWER_BODY_INCREMENT: Final[int] = 10  # Added to squat / deadlift TM per cycle

# Lift types that progress with the upper-body increment
UPPER_BODY_LIFTS: Final[frozenset[str]] = frozenset({"BENCH_PRESS", "POWER_CLEAN"})

# =============================================================================
# MAIN LIFT PERCENTAGE TABLE
# =============================================================================

# week -> [(reps, fraction of TM), ...]; a "+" reps string marks the AMRAP set.
WEEK_PERCENTAGES: Final[dict[int, tuple[tuple[int | str, float], ...]]] = {
    1: ((5, 0.65), (5, 0.75), ("5+", 0.85)),  # volume
    2: ((3, 0.70), (3, 0.80), ("3+", 0.90)),  # intensity
    3: ((5, 0.75), (3, 0.85), ("1+", 0.95)),  # peak
    4: ((5, 0.40), (5, 0.50), (5, 0.60)),  # deload, no AMRAP
}

DEFAULT_WEEK: Final[int] = 1  # Fallback row for an out-of-range week

# =============================================================================
# WARM-UP
# =============================================================================

BAR_WEIGHT: Final[int] = 45
WARMUP_REPS: Final[int] = 5

# =============================================================================
# ASSISTANCE LOADS
# =============================================================================

# bucket -> (exercise names, main lift the load is based on, fraction of its TM)
# Names must match the template catalog exactly or the default load applies.
ASSISTANCE_BUCKETS: Final[dict[str, tuple[frozenset[str], str, float]]] = {
    "lower_body": (
        frozenset({
            "Bulgarian Split Squat",
            "GHD or Back Extension",
            "Single-Leg Glute Bridge",
        }),
        "SQUAT",
        0.3,
    ),
    "upper_body": (
        frozenset({
            "Dumbbell Row",
            "Face Pulls",
            "Tricep Extension",
            "Weighted Pull-ups",
        }),
        "BENCH_PRESS",
        0.25,
    ),
    "explosive": (
        frozenset({
            "Clean High Pull",
            "Kettlebell Swing",
            "Medicine Ball Throw",
        }),
        "POWER_CLEAN",
        0.4,
    ),
    "carry": (
        frozenset({"Farmer's Carry"}),
        "DEADLIFT",
        0.5,
    ),
}

DEFAULT_ASSISTANCE_LOAD: Final[tuple[str, float]] = ("BENCH_PRESS", 0.2)

# =============================================================================
# PROGRESS METRICS
# =============================================================================

EPLEY_DIVISOR: Final[int] = 30  # e1RM = weight * (1 + reps / 30)

# =============================================================================
# DATA LOCATION
# =============================================================================

DATA_HOME_ENV: Final[str] = "WRESTLE_STRONG_HOME"


def data_home() -> Path:
    """Directory holding profile, workouts and template overrides.

    ``$WRESTLE_STRONG_HOME`` when set, else ``~/.wrestle-strong``.
    """
    override = os.environ.get(DATA_HOME_ENV)
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".wrestle-strong"
