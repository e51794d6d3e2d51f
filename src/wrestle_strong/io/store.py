"""
File-based storage for the athlete profile and workouts.

profile.json holds the single athlete profile; workouts.jsonl holds one
workout per line. save_workout upserts by workout id.
"""

import json
import logging
from pathlib import Path

from ..core.config import data_home
from ..core.models import AthleteProfile, Workout
from .serializers import (
    ValidationError,
    dict_to_profile,
    dict_to_workout,
    profile_to_dict,
    workout_to_json_line,
)

log = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when profile or workout data cannot be written."""

    pass


class WorkoutStore:
    """
    Manages the athlete profile (profile.json) and workouts (workouts.jsonl).

    Implements the storage boundary the progression service depends on:
    load_profile / save_profile / load_workouts / save_workout / clear_all.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding profile.json and workouts.jsonl
        """
        self.data_dir = Path(data_dir)
        self.profile_path = self.data_dir / "profile.json"
        self.workouts_path = self.data_dir / "workouts.jsonl"

    def exists(self) -> bool:
        """Check if a profile has been saved."""
        return self.profile_path.exists()

    def load_profile(self) -> AthleteProfile | None:
        """
        Load the athlete profile.

        Returns:
            AthleteProfile if the file exists and is valid, None otherwise
        """
        if not self.profile_path.exists():
            return None

        try:
            with open(self.profile_path, "r") as f:
                data = json.load(f)
            return dict_to_profile(data)
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning("Ignoring unreadable profile %s: %s", self.profile_path, e)
            return None

    def save_profile(self, profile: AthleteProfile) -> None:
        """
        Save the athlete profile to profile.json.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.profile_path, "w") as f:
                json.dump(profile_to_dict(profile), f, indent=2)
        except OSError as e:
            raise StorageError(f"Could not save profile to {self.profile_path}: {e}") from e
        log.debug("Saved profile %s", profile.id)

    def load_workouts(self) -> list[Workout]:
        """
        Load all workouts in stored order.

        Returns:
            List of Workout (empty if the file doesn't exist)

        Raises:
            ValidationError: If a line cannot be parsed
        """
        if not self.workouts_path.exists():
            return []

        workouts: list[Workout] = []

        with open(self.workouts_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    workouts.append(dict_to_workout(json.loads(line)))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.workouts_path}: {e}"
                    ) from e

        return workouts

    def save_workout(self, workout: Workout) -> None:
        """
        Upsert a workout by id: replace the stored entry with the same id,
        or append if there is none.

        Raises:
            StorageError: If the file cannot be written
        """
        workouts = self.load_workouts()

        for i, existing in enumerate(workouts):
            if existing.id == workout.id:
                workouts[i] = workout
                break
        else:
            workouts.append(workout)

        self._write_workouts(workouts)
        log.debug("Saved workout %s", workout.id)

    def _write_workouts(self, workouts: list[Workout]) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.workouts_path, "w") as f:
                for workout in workouts:
                    f.write(workout_to_json_line(workout) + "\n")
        except OSError as e:
            raise StorageError(f"Could not save workouts to {self.workouts_path}: {e}") from e

    def clear_all(self) -> None:
        """
        Delete the profile and all workouts (dangerous - use with caution).

        Raises:
            StorageError: If a file cannot be removed
        """
        for path in (self.profile_path, self.workouts_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Could not remove {path}: {e}") from e
        log.info("Cleared all data in %s", self.data_dir)


def get_default_store() -> WorkoutStore:
    """
    Get a WorkoutStore in the default data directory.

    Returns:
        WorkoutStore rooted at ~/.wrestle-strong (or $WRESTLE_STRONG_HOME)
    """
    return WorkoutStore(data_home())
