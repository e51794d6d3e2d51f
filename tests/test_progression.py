"""
Integration tests for the progression service.

Each test drives the full pipeline: ProgressionService → generator →
WorkoutStore on a temporary directory, checking both in-memory state and
what was persisted.

Athlete used throughout (training maxes):
  squat 300, bench 200, deadlift 400, power clean 150
"""

import threading
import time

import pytest

from wrestle_strong.core.models import AthleteProfile, CycleState, TrainingMaxes
from wrestle_strong.core.progression import (
    ExerciseNotFoundError,
    ProgressionService,
    SetNotFoundError,
    TrainingLookupError,
    WorkoutNotFoundError,
)
from wrestle_strong.io.store import StorageError, WorkoutStore

TODAY = "2026-03-02"

# Index of the AMRAP set within main-lift sets (2 warm-ups + 3 working sets)
AMRAP_INDEX = 4


# ===========================================================================
# Helpers
# ===========================================================================


def _profile(week: int = 1, cycle: int = 1) -> AthleteProfile:
    return AthleteProfile(
        id="athlete-1",
        name="Sam",
        weight_class="62 kg",
        training_maxes=TrainingMaxes(deadlift=400, bench_press=200, squat=300, power_clean=150),
        current_cycle=CycleState(number=cycle, week=week),
        start_date=TODAY,
    )


def _service(store: WorkoutStore, profile: AthleteProfile | None = None) -> ProgressionService:
    """Service over a store pre-seeded with a profile (no workouts yet)."""
    if profile is not None:
        store.save_profile(profile)
    return ProgressionService(store, clock=lambda: TODAY)


def _complete_week(service: ProgressionService) -> None:
    """Complete every workout of the athlete's current week via get_current_workout."""
    start = service.profile.current_cycle
    for _ in range(len(service.templates)):
        workout = service.get_current_workout()
        assert (workout.cycle, workout.week) == (start.number, start.week)
        service.complete_workout(workout.id)


class FlakyStore(WorkoutStore):
    """WorkoutStore whose writes fail while ``broken`` is set."""

    broken = False

    def save_profile(self, profile):
        if self.broken:
            raise StorageError("disk full")
        super().save_profile(profile)

    def save_workout(self, workout):
        if self.broken:
            raise StorageError("disk full")
        super().save_workout(workout)


class GatedStore(WorkoutStore):
    """WorkoutStore whose profile writes hold until ``gate`` is open; records write order."""

    def __init__(self, data_dir):
        super().__init__(data_dir)
        self.gate = threading.Event()
        self.gate.set()
        self.entered = threading.Event()
        self.writes: list[str] = []

    def save_profile(self, profile):
        self.entered.set()
        self.gate.wait(timeout=5)
        super().save_profile(profile)
        self.writes.append(f"profile:{profile.name}")

    def save_workout(self, workout):
        super().save_workout(workout)
        self.writes.append(f"workout:{workout.id}")


def _call_in_thread(fn, timeout: float = 2.0):
    """Run fn on another thread and fail if it does not return within timeout."""
    result = {}
    worker = threading.Thread(target=lambda: result.setdefault("value", fn()), daemon=True)
    worker.start()
    worker.join(timeout)
    assert not worker.is_alive(), "call waited on a pending save"
    return result["value"]


@pytest.fixture
def store(tmp_path):
    return WorkoutStore(tmp_path)


# ===========================================================================
# Setup / profile edits
# ===========================================================================


class TestSetup:
    ONE_RMS = {"SQUAT": 300, "BENCH_PRESS": 200, "DEADLIFT": 400, "POWER_CLEAN": 150}

    def test_setup_creates_profile_and_first_cycle(self, store):
        service = _service(store)
        profile = service.setup_profile("Sam", "62 kg", self.ONE_RMS, athlete_id="a1")

        assert profile.training_maxes.as_dict() == {
            "DEADLIFT": 360, "BENCH_PRESS": 180, "SQUAT": 270, "POWER_CLEAN": 135,
        }
        assert (profile.current_cycle.number, profile.current_cycle.week) == (1, 1)
        assert profile.start_date == TODAY
        assert len(service.workouts) == 16

        # persisted
        assert store.load_profile().id == "a1"
        assert len(store.load_workouts()) == 16

    def test_current_workout_reuses_eager_workout(self, store):
        service = _service(store)
        service.setup_profile("Sam", "62 kg", self.ONE_RMS)

        current = service.get_current_workout()
        assert current.id == "workout-1-1-1"
        assert len(service.workouts) == 16
        assert len(store.load_workouts()) == 16

    def test_update_profile(self, store):
        service = _service(store, _profile())
        updated = service.update_profile(weight_class="65 kg")
        assert updated.name == "Sam"
        assert updated.weight_class == "65 kg"
        assert store.load_profile().weight_class == "65 kg"

    def test_update_training_maxes(self, store):
        service = _service(store, _profile())
        updated = service.update_training_maxes(
            {"SQUAT": 400, "BENCH_PRESS": 250, "DEADLIFT": 500, "POWER_CLEAN": 200}
        )
        assert updated.training_maxes.squat == 360
        assert store.load_profile().training_maxes.bench_press == 225

    def test_reset(self, store):
        service = _service(store, _profile())
        service.get_current_workout()
        service.reset()
        assert service.profile is None
        assert service.workouts == []
        assert store.load_profile() is None
        assert store.load_workouts() == []


# ===========================================================================
# Current workout / reconciliation
# ===========================================================================


class TestCurrentWorkout:
    def test_lazy_creation(self, store):
        service = _service(store, _profile())
        workout = service.get_current_workout()
        assert workout.id == "workout-1-1-1"
        assert [w.id for w in store.load_workouts()] == ["workout-1-1-1"]

    def test_same_workout_twice(self, store):
        service = _service(store, _profile())
        first = service.get_current_workout()
        second = service.get_current_workout()
        assert first.id == second.id
        assert len(service.workouts) == 1

    def test_reuses_stored_record_after_restart(self, store):
        service = _service(store, _profile())
        first = service.get_current_workout()
        service.toggle_set(first.id, first.main_lift.id, 0)

        restarted = ProgressionService(store, clock=lambda: TODAY)
        again = restarted.get_current_workout()
        assert again.id == first.id
        assert again.main_lift.sets[0].completed is True
        assert len(restarted.workouts) == 1

    def test_completion_moves_to_next_day(self, store):
        service = _service(store, _profile())
        first = service.get_current_workout()
        service.complete_workout(first.id)
        assert service.get_current_workout().id == "workout-1-1-2"

    def test_returned_workout_is_a_copy(self, store):
        service = _service(store, _profile())
        workout = service.get_current_workout()
        workout.main_lift.sets[0].completed = True
        assert service.get_current_workout().main_lift.sets[0].completed is False

    def test_generate_new_replaces_open_record(self, store):
        service = _service(store, _profile())
        old = service.get_current_workout()
        service.update_training_maxes(
            {"SQUAT": 400, "BENCH_PRESS": 200, "DEADLIFT": 400, "POWER_CLEAN": 150}
        )

        fresh = service.generate_new_workout()
        assert fresh.id == old.id
        # squat TM 360, week 1 top set 0.85 * 360 = 306 → 305
        assert fresh.main_lift.sets[-1].weight == 305
        assert len(service.workouts) == 1
        assert store.load_workouts()[0].main_lift.sets[-1].weight == 305

    def test_generate_new_never_replaces_completed(self, store):
        service = _service(store, _profile())
        first = service.get_current_workout()
        service.complete_workout(first.id)

        fresh = service.generate_new_workout()
        assert fresh.id == "workout-1-1-2"
        assert service.get_workout(first.id).completed is True


# ===========================================================================
# Set results
# ===========================================================================


class TestSetResults:
    def test_toggle_set(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        ex = w.assistance_exercises[0]

        updated = service.toggle_set(w.id, ex.id, 1)
        assert updated.completed is True
        assert store.load_workouts()[0].assistance_exercises[0].sets[1].completed is True

        service.toggle_set(w.id, ex.id, 1)
        assert service.get_workout(w.id).assistance_exercises[0].sets[1].completed is False

    def test_toggle_only_touches_one_set(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        service.toggle_set(w.id, w.supplementary_lift.id, 2)
        after = service.get_workout(w.id)
        flags = [s.completed for e in after.exercises() for s in e.sets]
        assert flags.count(True) == 1

    def test_record_amrap(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()

        result = service.record_amrap(w.id, w.main_lift.id, AMRAP_INDEX, 8)
        assert result.actual_reps == 8
        assert result.completed is True

        corrected = service.record_amrap(w.id, w.main_lift.id, AMRAP_INDEX, 9)
        assert corrected.actual_reps == 9
        assert store.load_workouts()[0].main_lift.sets[AMRAP_INDEX].actual_reps == 9

    def test_record_amrap_on_fixed_set_rejected(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        with pytest.raises(ValueError):
            service.record_amrap(w.id, w.main_lift.id, 2, 5)
        assert service.get_workout(w.id).main_lift.sets[2].actual_reps is None

    def test_record_negative_reps_rejected(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        with pytest.raises(ValueError):
            service.record_amrap(w.id, w.main_lift.id, AMRAP_INDEX, -1)

    def test_unknown_workout(self, store):
        service = _service(store, _profile())
        with pytest.raises(WorkoutNotFoundError):
            service.toggle_set("workout-9-9-9", "x", 0)
        with pytest.raises(WorkoutNotFoundError):
            service.complete_workout("workout-9-9-9")

    def test_unknown_exercise(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        with pytest.raises(ExerciseNotFoundError):
            service.toggle_set(w.id, "no-such-exercise", 0)

    @pytest.mark.parametrize("index", [5, 99, -1])
    def test_unknown_set_index(self, store, index):
        service = _service(store, _profile())
        w = service.get_current_workout()
        with pytest.raises(SetNotFoundError):
            service.toggle_set(w.id, w.main_lift.id, index)

    def test_lookup_errors_share_base(self):
        assert issubclass(SetNotFoundError, TrainingLookupError)
        assert issubclass(TrainingLookupError, LookupError)


# ===========================================================================
# Progression
# ===========================================================================


class TestProgression:
    def test_partial_week_does_not_advance(self, store):
        service = _service(store, _profile())
        for _ in range(3):
            service.complete_workout(service.get_current_workout().id)
        assert service.profile.current_cycle.week == 1

    def test_full_week_advances_week(self, store):
        service = _service(store, _profile())
        _complete_week(service)
        profile = service.profile
        assert (profile.current_cycle.number, profile.current_cycle.week) == (1, 2)
        assert profile.training_maxes.squat == 300
        assert store.load_profile().current_cycle.week == 2
        assert service.get_current_workout().id == "workout-1-2-1"

    def test_completing_twice_is_harmless(self, store):
        service = _service(store, _profile())
        w = service.get_current_workout()
        service.complete_workout(w.id)
        service.complete_workout(w.id)
        assert service.profile.current_cycle.week == 1

    def test_week4_completion_rolls_cycle(self, store):
        """Squat 300 → 310 (lower body), bench 200 → 205 (upper body)."""
        service = _service(store, _profile(week=4))
        _complete_week(service)

        after = service.profile
        assert (after.current_cycle.number, after.current_cycle.week) == (2, 1)
        assert after.training_maxes.squat == 310
        assert after.training_maxes.bench_press == 205
        assert after.training_maxes.deadlift == 410
        assert after.training_maxes.power_clean == 155

        cycle2 = [w for w in service.workouts if w.cycle == 2]
        assert len(cycle2) == 16
        week1 = service.workouts_for_week(2, 1)
        assert [w.day for w in week1] == [1, 2, 3, 4]
        # squat day top set: 0.85 * 310 = 263.5 → 265
        assert week1[0].main_lift.sets[-1].weight == 265
        assert len([w for w in store.load_workouts() if w.cycle == 2]) == 16

    def test_bench_grows_by_five_and_squat_by_ten(self, store):
        service = _service(store, _profile(week=4))
        service.advance()
        maxes = service.profile.training_maxes
        assert maxes.squat - 300 == 10
        assert maxes.bench_press - 200 == 5

    def test_manual_advance_week(self, store):
        service = _service(store, _profile(week=2))
        profile = service.advance()
        assert (profile.current_cycle.number, profile.current_cycle.week) == (1, 3)
        assert service.workouts == []

    def test_manual_advance_clears_current(self, store):
        service = _service(store, _profile())
        service.get_current_workout()
        service.advance()
        assert service.get_current_workout().id == "workout-1-2-1"

    def test_monotonic_over_many_advances(self, store):
        service = _service(store, _profile())
        seen = []
        for _ in range(12):
            before = service.profile.current_cycle
            after = service.advance().current_cycle
            assert after.number >= before.number
            assert after.week in (1, 2, 3, 4)
            if before.week == 4:
                assert (after.number, after.week) == (before.number + 1, 1)
            seen.append((after.number, after.week))
        assert seen[-1] == (4, 1)

    def test_cycle_advance_does_not_duplicate(self, store):
        service = _service(store, _profile(week=4))
        service.get_current_workout()  # workout-1-4-1 stored lazily
        service.advance()
        ids = [w.id for w in service.workouts]
        assert len(ids) == len(set(ids))
        assert len(ids) == 17


# ===========================================================================
# Missing profile
# ===========================================================================


class TestNoProfile:
    def test_operations_are_noops(self, store):
        service = _service(store)
        assert service.advance() is None
        assert service.get_current_workout() is None
        assert service.generate_new_workout() is None
        assert service.update_profile(name="x") is None
        assert service.update_training_maxes({}) is None
        assert service.toggle_set("workout-1-1-1", "x", 0) is None
        assert service.record_amrap("workout-1-1-1", "x", 0, 5) is None
        assert service.complete_workout("workout-1-1-1") is None
        assert service.profile is None
        assert store.load_profile() is None
        assert store.load_workouts() == []


# ===========================================================================
# Persistence failure
# ===========================================================================


class TestPersistenceFailure:
    def test_failure_surfaces_and_memory_keeps_new_state(self, tmp_path):
        store = FlakyStore(tmp_path)
        service = _service(store, _profile())
        store.broken = True

        with pytest.raises(StorageError):
            service.advance()

        assert service.profile.current_cycle.week == 2
        assert store.load_profile().current_cycle.week == 1

    def test_sync_repairs_divergence(self, tmp_path):
        store = FlakyStore(tmp_path)
        service = _service(store, _profile())
        store.broken = True
        with pytest.raises(StorageError):
            service.get_current_workout()

        store.broken = False
        service.sync()
        assert [w.id for w in store.load_workouts()] == ["workout-1-1-1"]

    def test_lock_released_after_failure(self, tmp_path):
        store = FlakyStore(tmp_path)
        service = _service(store, _profile())
        store.broken = True
        with pytest.raises(StorageError):
            service.advance()
        store.broken = False
        assert service.advance().current_cycle.week == 3
        assert store.load_profile().current_cycle.week == 3


# ===========================================================================
# Concurrency
# ===========================================================================


class TestConcurrency:
    def test_reads_do_not_wait_for_a_save(self, tmp_path):
        store = GatedStore(tmp_path)
        service = _service(store, _profile())
        current = service.get_current_workout()

        store.gate.clear()
        store.entered.clear()
        writer = threading.Thread(target=service.update_profile, kwargs={"name": "Alex"})
        writer.start()
        try:
            assert store.entered.wait(timeout=5)

            assert _call_in_thread(lambda: service.profile).name == "Alex"
            assert _call_in_thread(service.get_current_workout).id == current.id
            assert _call_in_thread(lambda: service.get_workout(current.id)) is not None
            assert len(_call_in_thread(lambda: service.workouts)) == 1
        finally:
            store.gate.set()
            writer.join(timeout=5)

        assert store.load_profile().name == "Alex"

    def test_queued_writer_does_not_hold_state(self, tmp_path):
        store = GatedStore(tmp_path)
        service = _service(store, _profile())
        current = service.get_current_workout()

        store.gate.clear()
        store.entered.clear()
        store.writes.clear()
        first = threading.Thread(target=service.update_profile, kwargs={"name": "Alex"})
        second = threading.Thread(
            target=service.toggle_set, args=(current.id, current.main_lift.id, 0)
        )
        first.start()
        try:
            assert store.entered.wait(timeout=5)
            second.start()

            # the toggle lands in memory while its write waits behind the profile save
            for _ in range(200):
                workout = _call_in_thread(lambda: service.get_workout(current.id))
                if workout.main_lift.sets[0].completed:
                    break
                time.sleep(0.01)
            else:
                pytest.fail("toggle never became visible")
            assert store.writes == []
        finally:
            store.gate.set()
            first.join(timeout=5)
            second.join(timeout=5)

        assert store.writes == ["profile:Alex", f"workout:{current.id}"]
        assert store.load_workouts()[0].main_lift.sets[0].completed is True

    def test_concurrent_completions_advance_once(self, store):
        service = _service(store)
        service.setup_profile("Sam", "62 kg", TestSetup.ONE_RMS)
        week1 = service.workouts_for_week(1, 1)

        barrier = threading.Barrier(2 * len(week1))

        def finish(workout_id):
            barrier.wait(timeout=5)
            service.complete_workout(workout_id)

        threads = [
            threading.Thread(target=finish, args=(w.id,)) for w in week1 for _ in range(2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert (service.profile.current_cycle.number, service.profile.current_cycle.week) == (1, 2)
        assert store.load_profile().current_cycle.week == 2
        stored = {w.id: w for w in store.load_workouts()}
        assert all(stored[w.id].completed for w in week1)

    def test_snapshots_stay_consistent_during_advances(self, store):
        service = _service(store, _profile())
        stop = threading.Event()
        seen = []

        def watch():
            while not stop.is_set():
                seen.append(service.profile)
                time.sleep(0.001)

        def advance_cycle():
            for _ in range(4):
                service.advance()

        watcher = threading.Thread(target=watch)
        watcher.start()
        advancers = [threading.Thread(target=advance_cycle) for _ in range(4)]
        for t in advancers:
            t.start()
        for t in advancers:
            t.join(timeout=30)
        stop.set()
        watcher.join(timeout=5)

        final = service.profile
        assert (final.current_cycle.number, final.current_cycle.week) == (5, 1)
        assert final.training_maxes.squat == 340
        assert final.training_maxes.bench_press == 220

        for profile in seen:
            rollovers = profile.current_cycle.number - 1
            assert profile.training_maxes.squat == 300 + 10 * rollovers
            assert profile.training_maxes.bench_press == 200 + 5 * rollovers

        # writes land in mutation order, so storage ends on the final state
        stored = store.load_profile()
        assert stored.current_cycle == final.current_cycle
        assert stored.training_maxes == final.training_maxes
        assert len(service.workouts) == 4 * 16
