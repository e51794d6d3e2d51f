"""
JSON serialization for athlete and workout models.

Handles conversion between dataclasses and JSON-compatible dicts.
The reps field keeps its dual shape: an int for fixed sets, a "<n>+"
string for AMRAP sets.
"""

import json
import re
from typing import Any

from ..core.models import (
    EXERCISE_ROLES,
    LIFT_TYPES,
    SET_TYPES,
    AthleteProfile,
    CycleState,
    Exercise,
    Reps,
    TrainingMaxes,
    Workout,
    WorkoutSet,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate date string is ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        The same YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}", date_str):
        raise ValidationError(f"Invalid date format: {date_str!r}. Expected YYYY-MM-DD")
    return date_str[:10]


def validate_reps(reps: Any) -> Reps:
    """
    Validate a reps prescription: non-negative int or "<n>+".

    Raises:
        ValidationError: If reps is neither shape
    """
    if isinstance(reps, bool):
        raise ValidationError(f"Invalid reps: {reps!r}")
    if isinstance(reps, int):
        if reps < 0:
            raise ValidationError(f"reps must be non-negative, got {reps}")
        return reps
    if isinstance(reps, str) and re.match(r"^\d+\+$", reps):
        return reps
    raise ValidationError(f"Invalid reps: {reps!r}. Expected an integer or '<n>+'")


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def set_to_dict(s: WorkoutSet) -> dict[str, Any]:
    """Convert WorkoutSet to JSON-compatible dict."""
    data: dict[str, Any] = {
        "number": s.number,
        "reps": s.reps,
        "weight": s.weight,
        "type": s.set_type,
        "completed": s.completed,
        "amrap": s.amrap,
    }
    if s.percentage is not None:
        data["percentage"] = s.percentage
    if s.actual_reps is not None:
        data["actual_reps"] = s.actual_reps
    if s.is_bodyweight:
        data["is_bodyweight"] = True
    return data


def dict_to_set(data: dict[str, Any]) -> WorkoutSet:
    """
    Convert dict to WorkoutSet.

    The stored ``amrap`` flag is ignored; it is always re-derived from reps.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        actual = data.get("actual_reps")
        return WorkoutSet(
            number=int(data["number"]),
            reps=validate_reps(data["reps"]),
            weight=validate_non_negative(data["weight"], "weight"),
            set_type=validate_choice(data.get("type", "MAIN"), SET_TYPES, "set type"),
            percentage=float(data["percentage"]) if data.get("percentage") is not None else None,
            completed=bool(data.get("completed", False)),
            actual_reps=int(validate_non_negative(actual, "actual_reps")) if actual is not None else None,
            is_bodyweight=bool(data.get("is_bodyweight", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set record {data!r}: {e}") from e


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert Exercise to JSON-compatible dict."""
    return {
        "id": exercise.id,
        "name": exercise.name,
        "type": exercise.lift_type,
        "role": exercise.role,
        "sets": [set_to_dict(s) for s in exercise.sets],
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return Exercise(
            id=str(data["id"]),
            name=str(data["name"]),
            lift_type=validate_choice(data["type"], LIFT_TYPES, "lift type"),
            role=validate_choice(data["role"], EXERCISE_ROLES, "exercise role"),
            sets=[dict_to_set(s) for s in data.get("sets", [])],
        )
    except KeyError as e:
        raise ValidationError(f"Exercise record missing field {e}") from e


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    """Convert Workout to JSON-compatible dict."""
    return {
        "id": workout.id,
        "day": workout.day,
        "name": workout.name,
        "date": workout.date,
        "cycle": workout.cycle,
        "week": workout.week,
        "completed": workout.completed,
        "main_lift": exercise_to_dict(workout.main_lift),
        "supplementary_lift": exercise_to_dict(workout.supplementary_lift),
        "assistance_exercises": [exercise_to_dict(e) for e in workout.assistance_exercises],
    }


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert dict to Workout.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        week = int(data["week"])
        if week not in (1, 2, 3, 4):
            raise ValidationError(f"Invalid week: {week}. Must be 1-4")
        return Workout(
            id=str(data["id"]),
            day=int(data["day"]),
            name=str(data["name"]),
            date=validate_date(data["date"]),
            cycle=int(data["cycle"]),
            week=week,
            completed=bool(data.get("completed", False)),
            main_lift=dict_to_exercise(data["main_lift"]),
            supplementary_lift=dict_to_exercise(data["supplementary_lift"]),
            assistance_exercises=[dict_to_exercise(e) for e in data.get("assistance_exercises", [])],
        )
    except KeyError as e:
        raise ValidationError(f"Workout record missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid workout record: {e}") from e


def workout_to_json_line(workout: Workout) -> str:
    """Serialize a workout to a single JSONL line."""
    return json.dumps(workout_to_dict(workout), separators=(",", ":"))


def profile_to_dict(profile: AthleteProfile) -> dict[str, Any]:
    """Convert AthleteProfile to JSON-compatible dict."""
    maxes = profile.training_maxes
    return {
        "id": profile.id,
        "name": profile.name,
        "weight_class": profile.weight_class,
        "training_maxes": {
            "deadlift": maxes.deadlift,
            "bench_press": maxes.bench_press,
            "squat": maxes.squat,
            "power_clean": maxes.power_clean,
        },
        "current_cycle": {
            "number": profile.current_cycle.number,
            "week": profile.current_cycle.week,
        },
        "start_date": profile.start_date,
    }


def dict_to_profile(data: dict[str, Any]) -> AthleteProfile:
    """
    Convert dict to AthleteProfile.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        tm = data["training_maxes"]
        cycle = data.get("current_cycle", {})
        start_date = data.get("start_date") or ""
        return AthleteProfile(
            id=str(data["id"]),
            name=str(data["name"]),
            weight_class=str(data.get("weight_class", "")),
            training_maxes=TrainingMaxes(
                deadlift=validate_non_negative(tm["deadlift"], "deadlift"),
                bench_press=validate_non_negative(tm["bench_press"], "bench_press"),
                squat=validate_non_negative(tm["squat"], "squat"),
                power_clean=validate_non_negative(tm["power_clean"], "power_clean"),
            ),
            current_cycle=CycleState(
                number=int(cycle.get("number", 1)),
                week=int(cycle.get("week", 1)),
            ),
            start_date=validate_date(start_date) if start_date else "",
        )
    except KeyError as e:
        raise ValidationError(f"Profile missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid profile: {e}") from e
