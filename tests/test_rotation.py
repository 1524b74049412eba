"""
Tests for accessory categorisation and round-robin rotation.
"""

import json

import pytest

from lift_rotation.core.models import Exercise, RotationState
from lift_rotation.core.rotation import (
    AccessoryRotationPolicy,
    InMemoryRotationStore,
    categorize_accessories,
    rotate_accessories,
)
from lift_rotation.io.rotation_store import JsonRotationStore, get_rotation_path
from lift_rotation.io.serializers import ValidationError


def _acc(exercise_id: str, name: str, *tags: str) -> Exercise:
    return Exercise(exercise_id=exercise_id, name=name, tags=tuple(tags))


PLANK = _acc("plank", "Plank", "core")
LEG_RAISE = _acc("leg_raise", "Hanging Leg Raise", "core")
CURL = _acc("curl", "Dumbbell Curl", "isolation", "upper_body", "biceps")
HAMMER = _acc("hammer", "Hammer Curl", "isolation", "upper_body")
PUSHDOWN = _acc("pushdown", "Tricep Pushdown", "isolation", "upper_body")
LATERAL = _acc("lateral", "Lateral Raise", "isolation", "upper_body")
LEG_CURL = _acc("leg_curl", "Leg Curl", "isolation", "lower_body")
LEG_EXT = _acc("leg_ext", "Leg Extension", "isolation", "lower_body")
CALF = _acc("calf", "Standing Calf Raise", "isolation", "lower_body", "calves")
SQUAT = Exercise(exercise_id="squat", name="Squat", tags=("compound", "lower_body"))

ALL = [PLANK, LEG_RAISE, CURL, HAMMER, PUSHDOWN, LATERAL, LEG_CURL, LEG_EXT, CALF, SQUAT]


class TestCategorizeAccessories:
    def test_pools(self):
        cats = categorize_accessories(ALL)
        assert cats.core == [PLANK, LEG_RAISE]
        assert cats.upper == {"biceps": [CURL, HAMMER], "triceps": [PUSHDOWN], "shoulder": [LATERAL]}
        assert cats.lower == {"hamstring": [LEG_CURL], "quadriceps": [LEG_EXT], "calves": [CALF]}

    def test_compound_lifts_are_not_accessories(self):
        cats = categorize_accessories([SQUAT])
        assert cats.core == []
        assert all(not pool for pool in cats.lower.values())

    def test_earlier_sub_group_wins(self):
        # biceps is checked before triceps; "curl" in the name matches it first
        odd = _acc("odd", "Tricep Curl", "isolation", "upper_body", "triceps")
        cats = categorize_accessories([odd])
        assert cats.upper["biceps"] == [odd]
        assert cats.upper["triceps"] == []

    def test_tag_places_exercise_without_name_hint(self):
        press = _acc("press", "Cable Kickback", "isolation", "upper_body", "triceps")
        cats = categorize_accessories([press])
        assert cats.upper["triceps"] == [press]

    def test_lower_order(self):
        # hamstring is checked before calves
        odd = _acc("odd", "Leg Curl Calf Combo", "isolation", "lower_body", "calves")
        cats = categorize_accessories([odd])
        assert cats.lower["hamstring"] == [odd]
        assert cats.lower["calves"] == []

    def test_pool_for_label(self):
        cats = categorize_accessories(ALL)
        assert cats.pool_for("Core") == [PLANK, LEG_RAISE]
        assert cats.pool_for("Biceps") == [CURL, HAMMER]
        assert cats.pool_for("Quadriceps") == [LEG_EXT]
        assert cats.pool_for("Forearms") == []

    def test_unclassifiable_isolation_is_dropped(self):
        cats = categorize_accessories([_acc("x", "Wrist Roller", "isolation", "upper_body")])
        assert all(not pool for pool in cats.upper.values())


class TestRotateAccessories:
    def test_first_step_from_zero_state(self):
        slots, next_state = rotate_accessories(RotationState(), categorize_accessories(ALL))
        assert [s.exercise for s in slots] == [PLANK, CURL, LEG_CURL]
        assert [s.label for s in slots] == ["Core", "Upper (Biceps)", "Lower (Hamstring)"]
        assert next_state == RotationState(
            core_index=1, upper_index=1, upper_type_index=1, lower_index=0, lower_type_index=1
        )

    def test_cycles_through_sub_groups(self):
        cats = categorize_accessories(ALL)
        state = RotationState()
        labels = []
        for _ in range(4):
            slots, state = rotate_accessories(state, cats)
            labels.append(tuple(s.label for s in slots[1:]))
        assert labels == [
            ("Upper (Biceps)", "Lower (Hamstring)"),
            ("Upper (Triceps)", "Lower (Quadriceps)"),
            ("Upper (Shoulder)", "Lower (Calves)"),
            ("Upper (Biceps)", "Lower (Hamstring)"),
        ]

    def test_core_never_repeats_back_to_back(self):
        cats = categorize_accessories(ALL)
        state = RotationState()
        picks = []
        for _ in range(6):
            slots, state = rotate_accessories(state, cats)
            picks.append(slots[0].exercise)
        assert all(a is not b for a, b in zip(picks, picks[1:]))

    def test_empty_pools_yield_no_slots_but_advance(self):
        slots, next_state = rotate_accessories(RotationState(), categorize_accessories([]))
        assert slots == []
        assert next_state.upper_type_index == 1
        assert next_state.lower_type_index == 1
        assert next_state.core_index == 0

    def test_partial_pools(self):
        slots, _ = rotate_accessories(RotationState(), categorize_accessories([PLANK, CALF]))
        # biceps and hamstring pools are empty on the first step
        assert [s.exercise for s in slots] == [PLANK]

    def test_oversized_cursor_wraps(self):
        state = RotationState(core_index=7)
        slots, _ = rotate_accessories(state, categorize_accessories([PLANK, LEG_RAISE]))
        assert slots[0].exercise is LEG_RAISE


class TestAccessoryRotationPolicy:
    def test_saves_once_per_selection(self):
        store = InMemoryRotationStore()
        policy = AccessoryRotationPolicy(store)
        assert policy.select_accessories(ALL) == [PLANK, CURL, LEG_CURL]
        assert store.saves == 1
        assert store.state.upper_type_index == 1

    def test_current_accessory_types(self):
        policy = AccessoryRotationPolicy(InMemoryRotationStore())
        assert policy.current_accessory_types() == {"upper": "Biceps", "lower": "Hamstring"}
        policy.select_accessory_slots(ALL)
        assert policy.current_accessory_types() == {"upper": "Triceps", "lower": "Quadriceps"}

    def test_default_store_is_in_memory(self):
        policy = AccessoryRotationPolicy()
        policy.select_accessories(ALL)
        assert policy.store.load().core_index == 1


class TestJsonRotationStore:
    def test_missing_file_loads_zero_state(self, tmp_path):
        assert JsonRotationStore(tmp_path / "rotation.json").load() == RotationState()

    def test_save_then_load(self, tmp_path):
        store = JsonRotationStore(tmp_path / "nested" / "rotation.json")
        state = RotationState(core_index=2, upper_type_index=1)
        store.save(state)
        assert store.load() == state

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "rotation.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError):
            JsonRotationStore(path).load()

    def test_negative_cursor_raises(self, tmp_path):
        path = tmp_path / "rotation.json"
        path.write_text(json.dumps({"core_index": -1}))
        with pytest.raises(ValidationError):
            JsonRotationStore(path).load()

    def test_policy_persists_between_instances(self, tmp_path):
        path = get_rotation_path(tmp_path / "workouts.jsonl")
        AccessoryRotationPolicy(JsonRotationStore(path)).select_accessories(ALL)
        second = AccessoryRotationPolicy(JsonRotationStore(path)).select_accessory_slots(ALL)
        assert [s.label for s in second] == ["Core", "Upper (Triceps)", "Lower (Quadriceps)"]
        assert second[0].exercise is LEG_RAISE
