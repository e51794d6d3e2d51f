"""
Progression service: the single owner of athlete state.

Holds the athlete profile and the workout collection for one session,
serves "today's workout", records set results, and advances the program
week by week. Training maxes are recalculated and the next cycle generated
whenever week 4 rolls over.

Mutations are serialized by one lock. Each mutation updates memory first,
then persists a snapshot of what changed; storage writes happen outside the
state lock (in mutation order) so queries never wait on I/O. A storage
failure is re-raised to the caller of the mutating operation; memory keeps
the new state and ``sync()`` can be used to write it again.

Operations that need an athlete profile return None and change nothing when
no profile exists. Naming a workout, exercise or set that does not exist
raises a TrainingLookupError.
"""

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Protocol, Sequence

from .calculator import progress_training_maxes, training_maxes_from_one_rep_maxes
from .config import WEEKS_PER_CYCLE
from .generator import generate_cycle_workouts, get_next_workout
from .models import AthleteProfile, CycleState, Workout, WorkoutSet
from .templates import TEMPLATE_CATALOG, WorkoutTemplate

log = logging.getLogger(__name__)


class WorkoutRepository(Protocol):
    """Storage boundary. save_workout must upsert by workout id."""

    def load_profile(self) -> AthleteProfile | None: ...

    def save_profile(self, profile: AthleteProfile) -> None: ...

    def load_workouts(self) -> list[Workout]: ...

    def save_workout(self, workout: Workout) -> None: ...

    def clear_all(self) -> None: ...


class TrainingLookupError(LookupError):
    """A workout, exercise or set named by the caller does not exist."""


class WorkoutNotFoundError(TrainingLookupError):
    pass


class ExerciseNotFoundError(TrainingLookupError):
    pass


class SetNotFoundError(TrainingLookupError):
    pass


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


@dataclass
class _PendingWrites:
    """What a mutation needs persisted once it releases the state lock."""

    clear: bool = False
    profile: bool = False
    workout_ids: list[str] = field(default_factory=list)

    def workout(self, workout_id: str) -> None:
        if workout_id not in self.workout_ids:
            self.workout_ids.append(workout_id)

    @property
    def empty(self) -> bool:
        return not (self.clear or self.profile or self.workout_ids)


@dataclass
class _Snapshot:
    seq: int
    clear: bool
    profile: AthleteProfile | None
    workouts: list[Workout]


class ProgressionService:
    """
    State machine over (cycle, week) for one athlete.

    Args:
        store: Storage collaborator (see WorkoutRepository)
        templates: Day templates in catalog order
        clock: Returns today's ISO date; used to stamp new workouts
    """

    def __init__(
        self,
        store: WorkoutRepository,
        templates: Sequence[WorkoutTemplate] = TEMPLATE_CATALOG,
        clock: Callable[[], str] = _today,
    ):
        self.store = store
        self.templates = tuple(templates)
        self.clock = clock
        self._lock = threading.RLock()
        self._persist_turn = threading.Condition()
        self._next_seq = 0
        self._next_flush = 0
        self._profile: AthleteProfile | None = store.load_profile()
        self._workouts: list[Workout] = store.load_workouts()
        self._current_id: str | None = None

    # ------------------------------------------------------------------
    # Locking / persistence
    # ------------------------------------------------------------------

    @contextmanager
    def _writing(self) -> Iterator[_PendingWrites]:
        """
        Run a mutation under the state lock, then persist what it changed.

        Each snapshot takes a sequence number while the state lock is held and
        is written only once every earlier snapshot has been written. Waiting
        for that turn happens after the state lock is released.
        """
        pending = _PendingWrites()
        with self._lock:
            yield pending
            if pending.empty:
                return
            snapshot = self._snapshot(pending)

        with self._persist_turn:
            self._persist_turn.wait_for(lambda: self._next_flush == snapshot.seq)
        try:
            self._flush(snapshot)
        finally:
            with self._persist_turn:
                self._next_flush = snapshot.seq + 1
                self._persist_turn.notify_all()

    def _snapshot(self, pending: _PendingWrites) -> _Snapshot:
        by_id = {w.id: w for w in self._workouts}
        seq = self._next_seq
        self._next_seq += 1
        return _Snapshot(
            seq=seq,
            clear=pending.clear,
            profile=copy.deepcopy(self._profile) if pending.profile else None,
            workouts=[copy.deepcopy(by_id[i]) for i in pending.workout_ids if i in by_id],
        )

    def _flush(self, snapshot: _Snapshot) -> None:
        if snapshot.clear:
            self.store.clear_all()
        if snapshot.profile is not None:
            self.store.save_profile(snapshot.profile)
        for workout in snapshot.workouts:
            self.store.save_workout(workout)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def profile(self) -> AthleteProfile | None:
        """Copy of the athlete profile, or None before setup."""
        with self._lock:
            return copy.deepcopy(self._profile)

    @property
    def workouts(self) -> list[Workout]:
        """Copy of every known workout in storage order."""
        with self._lock:
            return copy.deepcopy(self._workouts)

    def get_workout(self, workout_id: str) -> Workout | None:
        with self._lock:
            workout = self._find(workout_id)
            return copy.deepcopy(workout) if workout is not None else None

    def workouts_for_week(self, cycle: int, week: int) -> list[Workout]:
        """Workouts of one program week, ordered by day."""
        with self._lock:
            selected = [w for w in self._workouts if w.cycle == cycle and w.week == week]
            return copy.deepcopy(sorted(selected, key=lambda w: w.day))

    def _find(self, workout_id: str) -> Workout | None:
        for workout in self._workouts:
            if workout.id == workout_id:
                return workout
        return None

    def _find_open_slot(self, slot: tuple[int, int, int]) -> Workout | None:
        for workout in self._workouts:
            if workout.slot == slot and not workout.completed:
                return workout
        return None

    def _locate_set(
        self, workout_id: str, exercise_id: str, set_index: int
    ) -> tuple[Workout, WorkoutSet]:
        workout = self._find(workout_id)
        if workout is None:
            raise WorkoutNotFoundError(f"No workout with id {workout_id!r}")
        exercise = workout.find_exercise(exercise_id)
        if exercise is None:
            raise ExerciseNotFoundError(
                f"No exercise {exercise_id!r} in workout {workout_id!r}"
            )
        if not 0 <= set_index < len(exercise.sets):
            raise SetNotFoundError(
                f"Set index {set_index} out of range for {exercise.name} "
                f"(0-{len(exercise.sets) - 1})"
            )
        return workout, exercise.sets[set_index]

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def setup_profile(
        self,
        name: str,
        weight_class: str,
        one_rep_maxes: dict[str, float],
        athlete_id: str | None = None,
    ) -> AthleteProfile:
        """
        Create the athlete at cycle 1, week 1 and generate the whole first cycle.

        Args:
            name: Display name
            weight_class: Free-form weight class
            one_rep_maxes: 1RM per main lift type ("SQUAT", "BENCH_PRESS", ...)
            athlete_id: Identifier (default: random uuid4 hex)

        Returns:
            The new profile
        """
        profile = AthleteProfile(
            id=athlete_id or uuid.uuid4().hex,
            name=name,
            weight_class=weight_class,
            training_maxes=training_maxes_from_one_rep_maxes(one_rep_maxes),
            current_cycle=CycleState(number=1, week=1),
            start_date=self.clock(),
        )
        with self._writing() as pending:
            self._profile = profile
            self._current_id = None
            pending.profile = True
            self._add_cycle_workouts(pending)
            log.info("Set up athlete %s (%s)", profile.name, profile.id)
            return copy.deepcopy(profile)

    def update_profile(
        self, name: str | None = None, weight_class: str | None = None
    ) -> AthleteProfile | None:
        """Edit display name and/or weight class."""
        with self._writing() as pending:
            if self._profile is None:
                return None
            if name is not None:
                self._profile.name = name
            if weight_class is not None:
                self._profile.weight_class = weight_class
            pending.profile = True
            return copy.deepcopy(self._profile)

    def update_training_maxes(self, one_rep_maxes: dict[str, float]) -> AthleteProfile | None:
        """
        Replace all training maxes with 90% of new one-rep maxes.

        Workouts already generated keep their weights; use
        generate_new_workout() to re-prescribe the next one.
        """
        with self._writing() as pending:
            if self._profile is None:
                return None
            self._profile.training_maxes = training_maxes_from_one_rep_maxes(one_rep_maxes)
            pending.profile = True
            log.info("Training maxes updated: %s", self._profile.training_maxes.as_dict())
            return copy.deepcopy(self._profile)

    def reset(self) -> None:
        """Forget the athlete and every workout, in memory and in storage."""
        with self._writing() as pending:
            self._profile = None
            self._workouts = []
            self._current_id = None
            pending.clear = True
            log.info("All training data reset")

    def sync(self) -> None:
        """Write the full in-memory state to storage again."""
        with self._writing() as pending:
            pending.profile = self._profile is not None
            for workout in self._workouts:
                pending.workout(workout.id)

    # ------------------------------------------------------------------
    # Workouts
    # ------------------------------------------------------------------

    def get_current_workout(self) -> Workout | None:
        """
        The workout to do now.

        Returns the cached current workout if there is one; otherwise the
        first workout of the current (cycle, week) not yet completed, reusing
        the stored record for that slot when one exists. Returns None when the
        week is done or there is no profile.
        """
        with self._lock:
            if self._profile is None:
                return None
            cached = self._cached_current()
            if cached is not None:
                return copy.deepcopy(cached)

        with self._writing() as pending:
            if self._profile is None:
                return None
            cached = self._cached_current()
            if cached is not None:
                return copy.deepcopy(cached)
            return copy.deepcopy(self._resolve_next(pending, fresh=False))

    def _cached_current(self) -> Workout | None:
        if self._current_id is None:
            return None
        return self._find(self._current_id)

    def generate_new_workout(self) -> Workout | None:
        """
        Assemble the next unfinished workout from scratch, ignoring the cache.

        An open stored record for the same slot is replaced (same id), so
        set progress on it is discarded and current training maxes apply.
        """
        with self._writing() as pending:
            if self._profile is None:
                return None
            return copy.deepcopy(self._resolve_next(pending, fresh=True))

    def _resolve_next(self, pending: _PendingWrites, fresh: bool) -> Workout | None:
        completed_ids = {w.id for w in self._workouts if w.completed}
        candidate = get_next_workout(
            self._profile, completed_ids, self.templates, today=self.clock()
        )
        if candidate is None:
            self._current_id = None
            return None

        existing = self._find_open_slot(candidate.slot)
        if existing is not None and not fresh:
            self._current_id = existing.id
            return existing

        if existing is not None:
            self._workouts[self._workouts.index(existing)] = candidate
            log.info("Regenerated workout %s", candidate.id)
        else:
            self._workouts.append(candidate)
            log.info("Created workout %s", candidate.id)
        pending.workout(candidate.id)
        self._current_id = candidate.id
        return candidate

    def toggle_set(self, workout_id: str, exercise_id: str, set_index: int) -> WorkoutSet | None:
        """
        Flip the completed flag of one set.

        Args:
            workout_id: Workout id
            exercise_id: Exercise id within that workout
            set_index: 0-based position of the set in the exercise

        Returns:
            The updated set, or None if there is no profile

        Raises:
            TrainingLookupError: If the workout, exercise or set does not exist
        """
        with self._writing() as pending:
            if self._profile is None:
                return None
            workout, target = self._locate_set(workout_id, exercise_id, set_index)
            target.completed = not target.completed
            pending.workout(workout.id)
            return copy.deepcopy(target)

    def record_amrap(
        self, workout_id: str, exercise_id: str, set_index: int, actual_reps: int
    ) -> WorkoutSet | None:
        """
        Record the reps achieved on an AMRAP set and mark it completed.

        Recording again overwrites the previous result.

        Raises:
            TrainingLookupError: If the workout, exercise or set does not exist
            ValueError: If the set is not an AMRAP set or reps are negative
        """
        if actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        with self._writing() as pending:
            if self._profile is None:
                return None
            workout, target = self._locate_set(workout_id, exercise_id, set_index)
            if not target.amrap:
                raise ValueError(
                    f"Set {target.number} ({target.reps} reps) is not an AMRAP set"
                )
            target.actual_reps = actual_reps
            target.completed = True
            pending.workout(workout.id)
            return copy.deepcopy(target)

    def complete_workout(self, workout_id: str) -> Workout | None:
        """
        Mark a workout completed; advance the program once every workout of
        the current week is completed.

        Raises:
            WorkoutNotFoundError: If no workout has that id
        """
        with self._writing() as pending:
            if self._profile is None:
                return None
            workout = self._find(workout_id)
            if workout is None:
                raise WorkoutNotFoundError(f"No workout with id {workout_id!r}")
            if workout.completed:
                return copy.deepcopy(workout)

            workout.completed = True
            pending.workout(workout.id)
            if self._current_id == workout.id:
                self._current_id = None
            log.info("Completed workout %s", workout.id)

            current = self._profile.current_cycle
            done = sum(
                1
                for w in self._workouts
                if w.completed and w.cycle == current.number and w.week == current.week
            )
            if done >= len(self.templates):
                self._advance(pending)
            return copy.deepcopy(workout)

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def advance(self) -> AthleteProfile | None:
        """
        Move to the next week, or to week 1 of the next cycle after week 4,
        regardless of how many workouts were completed.
        """
        with self._writing() as pending:
            if self._profile is None:
                return None
            self._advance(pending)
            return copy.deepcopy(self._profile)

    def _advance(self, pending: _PendingWrites) -> None:
        profile = self._profile
        current = profile.current_cycle
        self._current_id = None
        pending.profile = True

        if current.week < WEEKS_PER_CYCLE:
            profile.current_cycle = CycleState(number=current.number, week=current.week + 1)
            log.info("Advanced to cycle %d week %d", current.number, current.week + 1)
            return

        profile.training_maxes = progress_training_maxes(profile.training_maxes)
        profile.current_cycle = CycleState(number=current.number + 1, week=1)
        log.info(
            "Advanced to cycle %d; training maxes now %s",
            current.number + 1,
            profile.training_maxes.as_dict(),
        )
        self._add_cycle_workouts(pending)

    def _add_cycle_workouts(self, pending: _PendingWrites) -> None:
        """Generate the profile's current cycle and keep workouts not already stored."""
        known = {w.id for w in self._workouts}
        for workout in generate_cycle_workouts(self._profile, self.templates, today=self.clock()):
            if workout.id in known:
                continue
            self._workouts.append(workout)
            pending.workout(workout.id)
