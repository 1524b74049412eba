"""
Tests for the YAML catalog, settings loader, serializers and the JSONL
workout store.
"""

import json
import tempfile
from pathlib import Path

import pytest

from lift_rotation.core.catalog import ExerciseCatalog, exercise_from_dict, load_catalog
from lift_rotation.core.engine.config_loader import (
    deep_merge,
    default_set_count,
    get_bundled_path,
    linear_params,
    load_model_config,
    starting_weights,
)
from lift_rotation.core.models import (
    Exercise,
    ExerciseEntry,
    ExerciseMetadata,
    RecentTypeWindow,
    SetRecord,
    UserState,
    Workout,
)
from lift_rotation.core.rotation import categorize_accessories
from lift_rotation.io.history_store import WorkoutStore
from lift_rotation.io.serializers import (
    ValidationError,
    dict_to_entry,
    dict_to_set_record,
    dict_to_user_state,
    dict_to_workout,
    workout_to_dict,
)

SQUAT = Exercise(exercise_id="squat", name="Squat", categories=("knee_dominant",), tags=("compound",))
PLANK = Exercise(exercise_id="plank", name="Plank", tags=("core",))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    s = WorkoutStore(temp_dir / "workouts.jsonl")
    s.init()
    return s


def _workout(workout_id: str, date: str, completed: bool = False, sub_type="full_body") -> Workout:
    return Workout(
        workout_id=workout_id,
        date=date,
        exercises=[
            ExerciseEntry(SQUAT, [SetRecord(60.0, 5, True), SetRecord(60.0, 4, False)]),
            ExerciseEntry(
                PLANK,
                [SetRecord(0.0, 60, True)],
                exercise_type="accessory",
                accessory_category="Core",
            ),
        ],
        completed=completed,
        sub_type=sub_type,
        exercise_metadata=ExerciseMetadata(1, [("plank", "Core")]),
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class TestBundledCatalog:
    def setup_method(self):
        self.catalog = load_catalog(get_bundled_path("exercises.yaml"))

    def test_loads_all_entries(self):
        assert len(self.catalog) == 26
        assert "squat" in self.catalog
        assert self.catalog.get_by_id("squat").name == "Squat"
        assert self.catalog.get_by_id("missing") is None

    def test_every_pattern_has_two_options(self):
        for pattern in ("knee_dominant", "hip_dominant", "upper_body_push", "upper_body_pull"):
            assert len([ex for ex in self.catalog.get_all() if ex.has_category(pattern)]) >= 2

    def test_every_accessory_pool_is_filled(self):
        cats = categorize_accessories(self.catalog.get_all())
        assert cats.core
        assert all(cats.upper.values())
        assert all(cats.lower.values())

    def test_search(self):
        ids = [ex.exercise_id for ex in self.catalog.search("CURL")]
        assert ids == ["dumbbell_curl", "hammer_curl", "leg_curl", "nordic_hamstring_curl"]

    def test_by_muscle_group(self):
        assert all("chest" in ex.muscle_groups for ex in self.catalog.get_by_muscle_group(["chest"]))


class TestCatalogLoading:
    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_catalog(temp_dir / "nope.yaml")

    def test_invalid_entries_are_skipped(self, temp_dir):
        path = temp_dir / "exercises.yaml"
        path.write_text(
            "exercises:\n"
            "  - exercise_id: squat\n"
            "    name: Squat\n"
            "  - exercise_id: broken\n"
            "  - exercise_id: bad_tags\n"
            "    name: Bad\n"
            "    tags: compound\n"
        )
        with pytest.warns(UserWarning, match="skipping exercise"):
            catalog = load_catalog(path)
        assert [ex.exercise_id for ex in catalog.get_all()] == ["squat"]

    def test_user_file_is_merged(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        user_dir = temp_dir / ".lift-rotation"
        user_dir.mkdir()
        (user_dir / "exercises.yaml").write_text(
            "exercises:\n"
            "  - exercise_id: squat\n"
            "    name: Back Squat\n"
            "  - exercise_id: sissy_squat\n"
            "    name: Sissy Squat\n"
            "    categories: [knee_dominant]\n"
        )
        catalog = load_catalog()
        squat = catalog.get_by_id("squat")
        assert squat.name == "Back Squat"
        assert "knee_dominant" in squat.categories
        assert "sissy_squat" in catalog

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ExerciseCatalog([SQUAT, SQUAT])

    def test_exercise_from_dict_requires_name(self):
        with pytest.raises(ValueError):
            exercise_from_dict({"exercise_id": "x"})


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_bundled_defaults(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        cfg = load_model_config()
        assert default_set_count(cfg) == 3
        assert linear_params(cfg) == {"weight_increment": 2.5, "min_successful_sessions": 1}
        assert linear_params(cfg, "advanced_linear")["weight_increment"] == 1.25
        assert starting_weights(cfg)["deadlift"] == 50.0

    def test_user_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        (temp_dir / ".lift-rotation").mkdir()
        (temp_dir / ".lift-rotation" / "settings.yaml").write_text(
            "progression:\n  linear:\n    weight_increment: 5\n"
        )
        cfg = load_model_config()
        assert linear_params(cfg) == {"weight_increment": 5.0, "min_successful_sessions": 1}
        assert default_set_count(cfg) == 3

    def test_broken_user_file_is_ignored(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        (temp_dir / ".lift-rotation").mkdir()
        (temp_dir / ".lift-rotation" / "settings.yaml").write_text("progression: [unclosed\n")
        with pytest.warns(UserWarning, match="ignoring"):
            cfg = load_model_config()
        assert default_set_count(cfg) == 3

    def test_deep_merge_is_non_destructive(self):
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"b": 9}})
        assert merged == {"a": {"b": 9, "c": 2}}
        assert base == {"a": {"b": 1, "c": 2}}


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------


class TestSerializers:
    def test_workout_dict_layout(self):
        d = workout_to_dict(_workout("w1", "2026-01-01T10:00:00", completed=True))
        assert d["type"] == "strength"
        assert d["sub_type"] == "full_body"
        assert d["exercise_metadata"]["accessories"] == [{"exercise_id": "plank", "category": "Core"}]
        assert d["exercises"][1]["accessory_category"] == "Core"
        assert dict_to_workout(d) == _workout("w1", "2026-01-01T10:00:00", completed=True)

    def test_invalid_date(self):
        d = workout_to_dict(_workout("w1", "2026-01-01"))
        d["date"] = "yesterday"
        with pytest.raises(ValidationError, match="Invalid date"):
            dict_to_workout(d)

    def test_invalid_sub_type(self):
        d = workout_to_dict(_workout("w1", "2026-01-01"))
        d["sub_type"] = "arms_day"
        with pytest.raises(ValidationError):
            dict_to_workout(d)

    def test_negative_weight(self):
        with pytest.raises(ValidationError):
            dict_to_set_record({"weight": -5, "reps": 5})

    def test_completed_must_be_boolean(self):
        d = workout_to_dict(_workout("w1", "2026-01-01"))
        d["completed"] = "false"
        with pytest.raises(ValidationError, match="true or false"):
            dict_to_workout(d)
        with pytest.raises(ValidationError):
            dict_to_set_record({"weight": 60, "reps": 5, "completed": "false"})

    def test_state_flags_must_be_boolean(self):
        with pytest.raises(ValidationError):
            dict_to_user_state({"is_premium": "false"})
        with pytest.raises(ValidationError):
            dict_to_user_state({"progression_enabled": 0})

    def test_non_object_set_and_entry(self):
        with pytest.raises(ValidationError):
            dict_to_set_record(5)
        with pytest.raises(ValidationError):
            dict_to_entry("squat")

    def test_missing_exercise(self):
        d = workout_to_dict(_workout("w1", "2026-01-01"))
        del d["exercises"][0]["exercise"]
        with pytest.raises(ValidationError):
            dict_to_workout(d)


# ---------------------------------------------------------------------------
# Workout store
# ---------------------------------------------------------------------------


class TestWorkoutStore:
    def test_init_creates_files(self, temp_dir):
        s = WorkoutStore(temp_dir / "sub" / "workouts.jsonl")
        assert not s.exists()
        s.init()
        assert s.exists()
        assert s.state_path.exists()
        assert s.load_history() == {}
        assert s.load_state() == UserState()

    def test_missing_history_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            WorkoutStore(temp_dir / "workouts.jsonl").load_history()

    def test_history_is_ordered_by_date(self, store):
        store.save_workout(_workout("late", "2026-02-01"))
        store.save_workout(_workout("early", "2026-01-01"))
        assert list(store.load_history()) == ["early", "late"]

    def test_save_replaces_same_id(self, store):
        store.save_workout(_workout("w1", "2026-01-01"))
        updated = _workout("w1", "2026-01-01")
        updated.exercises[0].sets[1] = SetRecord(60.0, 5, True)
        store.save_workout(updated)
        history = store.load_history()
        assert len(history) == 1
        assert history["w1"].exercises[0].sets[1].completed

    def test_bad_lines_are_skipped(self, store):
        store.save_workout(_workout("w1", "2026-01-01"))
        with open(store.history_path, "a") as f:
            f.write("{not json\n")
            f.write(json.dumps({"workout_id": "w2", "date": "nope", "exercises": []}) + "\n")
        with pytest.warns(UserWarning, match="skipping line"):
            history = store.load_history()
        assert list(history) == ["w1"]

    def test_malformed_nested_items_are_skipped(self, store):
        store.save_workout(_workout("ok", "2026-01-01"))
        bad_entry = workout_to_dict(_workout("bad_entry", "2026-01-02"))
        bad_entry["exercises"] = ["squat"]
        bad_set = workout_to_dict(_workout("bad_set", "2026-01-03"))
        bad_set["exercises"][0]["sets"] = [5]
        bad_meta = workout_to_dict(_workout("bad_meta", "2026-01-04"))
        bad_meta["exercise_metadata"] = "plank"
        with open(store.history_path, "a") as f:
            for d in (bad_entry, bad_set, bad_meta):
                f.write(json.dumps(d) + "\n")
        with pytest.warns(UserWarning, match="skipping line"):
            history = store.load_history()
        assert list(history) == ["ok"]

    def test_complete_records_recent_type(self, store):
        store.save_workout(_workout("w1", "2026-01-01", sub_type="upper_body"))
        store.complete_workout("w1")
        store.complete_workout("w1")
        assert store.get_workout("w1").completed
        assert store.load_state().recent_types == RecentTypeWindow(("upper_body",))

    def test_complete_unknown_raises(self, store):
        with pytest.raises(KeyError):
            store.complete_workout("missing")

    def test_latest_open_workout(self, store):
        store.save_workout(_workout("w1", "2026-01-01"))
        store.save_workout(_workout("w2", "2026-01-02", completed=True))
        assert store.latest_open_workout().workout_id == "w1"
        store.complete_workout("w1")
        assert store.latest_open_workout() is None

    def test_delete(self, store):
        store.save_workout(_workout("w1", "2026-01-01"))
        store.delete_workout("w1")
        assert store.load_history() == {}
        with pytest.raises(KeyError):
            store.delete_workout("w1")

    def test_state_round_trip(self, store):
        state = UserState(
            active_exercises=["squat", "plank"],
            recent_types=RecentTypeWindow(("lower_body", "upper_body")),
            active_plan_id="basic_progression",
            is_premium=True,
            progression_enabled=False,
        )
        store.save_state(state)
        assert store.load_state() == state

    def test_corrupt_state_raises(self, store):
        store.state_path.write_text("[]")
        with pytest.raises(ValidationError):
            store.load_state()
