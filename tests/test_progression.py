"""
Progression rule and service tests.

Expected values are hand-computed from the rule definitions:
memory repeats the last session, linear adds a fixed increment after
enough fully completed sessions.
"""

import pytest

from lift_rotation.core.models import (
    Exercise,
    ExerciseEntry,
    ExerciseHistory,
    ProgressionRecommendation,
    RuleSpec,
    SessionData,
    SetRecord,
    Workout,
)
from lift_rotation.core.progression import (
    LinearProgressionRule,
    MemoryRule,
    ProgressionService,
    build_default_plans,
    build_exercise_history,
    build_rule,
    target_reps,
)
from lift_rotation.core.progression.base import round_half_up
from lift_rotation.core.progression.linear import normalize_exercise_name
from lift_rotation.core.progression.registry import describe_rule

SQUAT = Exercise(exercise_id="squat", name="Squat", tags=("compound",))
BENCH = Exercise(exercise_id="bench", name="Bench  Press", categories=("compound",))
CURL = Exercise(exercise_id="curl", name="Dumbbell Curl", tags=("isolation",))

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sets(*specs: tuple[float, int, bool]) -> list[SetRecord]:
    return [SetRecord(weight=w, reps=r, completed=c) for w, r, c in specs]


def _exercise_history(*sessions: list[SetRecord]) -> ExerciseHistory:
    return ExerciseHistory(
        exercise_id="squat",
        sessions=[SessionData(date=f"2026-01-{i + 1:02d}", sets=s) for i, s in enumerate(sessions)],
    )


def _workout(workout_id: str, date: str, exercise: Exercise, sets: list[SetRecord]) -> Workout:
    return Workout(
        workout_id=workout_id,
        date=date,
        exercises=[ExerciseEntry(exercise, sets)],
        completed=True,
    )


# ---------------------------------------------------------------------------
# Memory rule
# ---------------------------------------------------------------------------


class TestMemoryRule:
    def test_repeats_last_session(self):
        history = _exercise_history(_sets((50.0, 5, True), (52.5, 4, True)))
        rec = MemoryRule().calculate(SQUAT, history)
        assert rec.weight == 52.5
        assert rec.reps == 5  # mean 4.5, round half up
        assert rec.sets == 2
        assert rec.confidence == 1.0
        assert rec.notes == "Last time: 52.5kg × 5 reps × 2 sets"

    def test_only_last_session_counts(self):
        history = _exercise_history(
            _sets((100.0, 10, True)),
            _sets((40.0, 8, True), (40.0, 8, True), (40.0, 8, False)),
        )
        rec = MemoryRule().calculate(SQUAT, history)
        assert (rec.weight, rec.reps, rec.sets) == (40.0, 8, 3)

    def test_zero_sets_are_ignored_in_averages(self):
        history = _exercise_history(_sets((0.0, 0, False), (30.0, 6, True)))
        rec = MemoryRule().calculate(SQUAT, history)
        assert (rec.weight, rec.reps, rec.sets) == (30.0, 6, 2)

    def test_no_history(self):
        rec = MemoryRule().calculate(SQUAT, _exercise_history())
        assert rec.weight == 0.0
        assert rec.reps == 0
        assert rec.confidence == 0.0
        assert "No previous data" in rec.notes

    def test_all_zero_session_is_no_data(self):
        rec = MemoryRule().calculate(SQUAT, _exercise_history(_sets((0.0, 0, False))))
        assert rec.confidence == 0.0

    @pytest.mark.parametrize("value,expected", [(4.5, 5), (4.49, 4), (0.5, 1), (7.0, 7)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


# ---------------------------------------------------------------------------
# Linear rule
# ---------------------------------------------------------------------------


class TestLinearRule:
    def test_starting_weight_from_table(self):
        rec = LinearProgressionRule().calculate(SQUAT, _exercise_history())
        assert rec.weight == 40.0
        assert rec.reps == 5
        assert rec.confidence == 0.7
        assert rec.sets is None

    def test_starting_weight_uses_normalized_name(self):
        assert normalize_exercise_name("Bench  Press") == "bench_press"
        rec = LinearProgressionRule().calculate(BENCH, _exercise_history())
        assert rec.weight == 30.0

    def test_unknown_exercise_starts_at_default(self):
        rec = LinearProgressionRule().calculate(CURL, _exercise_history())
        assert rec.weight == 20.0
        assert rec.reps == 8

    def test_progresses_after_successful_session(self):
        history = _exercise_history(_sets((60.0, 5, True), (60.0, 5, True)))
        rec = LinearProgressionRule().calculate(SQUAT, history)
        assert rec.weight == 62.5
        assert rec.confidence == 0.8

    def test_holds_after_failed_session(self):
        history = _exercise_history(_sets((60.0, 5, True), (60.0, 3, False)))
        rec = LinearProgressionRule().calculate(SQUAT, history)
        assert rec.weight == 60.0
        assert rec.confidence == 0.9

    def test_stricter_threshold_needs_two_sessions(self):
        rule = LinearProgressionRule(weight_increment=1.25, min_successful_sessions=2)
        one = _exercise_history(_sets((60.0, 5, True)))
        assert rule.calculate(SQUAT, one).weight == 60.0

        two = _exercise_history(_sets((60.0, 5, True)), _sets((60.0, 5, True)))
        assert rule.calculate(SQUAT, two).weight == 61.25

        mixed = _exercise_history(_sets((60.0, 5, True)), _sets((60.0, 4, False)))
        assert rule.calculate(SQUAT, mixed).weight == 60.0

    def test_window_is_twice_the_threshold(self):
        rule = LinearProgressionRule(min_successful_sessions=1)
        history = _exercise_history(
            _sets((50.0, 5, True)),
            _sets((55.0, 5, False)),
            _sets((55.0, 5, False)),
        )
        assert rule.recent_successful_sessions(history) == []

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            LinearProgressionRule(weight_increment=-1)
        with pytest.raises(ValueError):
            LinearProgressionRule(min_successful_sessions=0)

    def test_target_reps(self):
        assert target_reps(SQUAT) == 5
        assert target_reps(BENCH) == 5
        assert target_reps(CURL) == 8


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_build_known_rules(self):
        assert isinstance(build_rule(RuleSpec("memory")), MemoryRule)
        rule = build_rule(RuleSpec("linear", (("weight_increment", 5.0),)))
        assert isinstance(rule, LinearProgressionRule)
        assert rule.weight_increment == 5.0

    def test_starting_weights_only_reach_linear(self):
        rule = build_rule(RuleSpec("linear"), starting_weights={"squat": 99.0})
        assert rule.starting_weights == {"squat": 99.0}
        assert isinstance(build_rule(RuleSpec("memory"), starting_weights={}), MemoryRule)

    def test_unknown_rule(self):
        with pytest.raises(ValueError, match="Unknown progression rule"):
            build_rule(RuleSpec("periodized"))

    def test_describe_rule(self):
        assert describe_rule(RuleSpec("memory"))["name"] == "Last Performance Memory"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestExerciseHistory:
    def test_sorted_oldest_first_with_record(self):
        history = {
            "w2": _workout("w2", "2026-01-05", SQUAT, _sets((70.0, 3, True))),
            "w1": _workout("w1", "2026-01-01", SQUAT, _sets((60.0, 5, True))),
            "w3": _workout("w3", "2026-01-09", SQUAT, _sets((65.0, 5, True))),
        }
        result = build_exercise_history("squat", history)
        assert [s.date for s in result.sessions] == ["2026-01-01", "2026-01-05", "2026-01-09"]
        assert result.personal_record.weight == 70.0
        assert result.personal_record.reps == 3
        assert result.personal_record.date == "2026-01-05"

    def test_skips_other_exercises_and_empty_entries(self):
        history = {
            "w1": _workout("w1", "2026-01-01", SQUAT, []),
            "w2": _workout("w2", "2026-01-02", CURL, _sets((10.0, 8, True))),
        }
        assert build_exercise_history("squat", history).sessions == []

    def test_skips_unparseable_dates(self):
        history = {"w1": _workout("w1", "someday", SQUAT, _sets((60.0, 5, True)))}
        assert build_exercise_history("squat", history).sessions == []


class TestProgressionService:
    def test_default_plan_is_memory(self):
        service = ProgressionService()
        assert service.get_active_plan().plan_id == "memory"

    def test_free_user_sees_free_plans(self):
        plans = ProgressionService().get_available_plans()
        assert [p.plan_id for p in plans] == ["memory", "basic_progression"]

    def test_premium_user_sees_all_plans(self):
        plans = ProgressionService(is_premium=True).get_available_plans()
        assert [p.plan_id for p in plans] == ["memory", "basic_progression", "advanced_linear"]

    def test_locked_plan_is_a_no_op(self):
        service = ProgressionService()
        service.set_active_plan("advanced_linear")
        assert service.get_active_plan().plan_id == "memory"

        service.upgrade_to_premium()
        assert service.is_premium_user()
        service.set_active_plan("advanced_linear")
        assert service.get_active_plan().plan_id == "advanced_linear"

    def test_unknown_plan_is_a_no_op(self):
        service = ProgressionService()
        service.set_active_plan("basic_progression")
        service.set_active_plan("does_not_exist")
        assert service.get_active_plan().plan_id == "basic_progression"

    def test_disabled_returns_default(self):
        service = ProgressionService()
        service.set_progression_enabled(False)
        history = {"w1": _workout("w1", "2026-01-01", SQUAT, _sets((60.0, 5, True)))}
        rec = service.calculate_progression(SQUAT, history)
        assert rec == ProgressionRecommendation(
            weight=0.0, reps=0, sets=3, notes="Enter your preferred weight and reps", confidence=0.0
        )

    def test_memory_plan_end_to_end(self):
        history = {
            "w1": _workout("w1", "2026-01-01", SQUAT, _sets((50.0, 5, True), (52.5, 4, True))),
        }
        rec = ProgressionService().calculate_progression(SQUAT, history)
        assert (rec.weight, rec.reps, rec.sets, rec.confidence) == (52.5, 5, 2, 1.0)

    def test_basic_plan_end_to_end(self):
        service = ProgressionService()
        service.set_active_plan("basic_progression")
        assert service.calculate_progression(SQUAT, {}).weight == 40.0

        history = {"w1": _workout("w1", "2026-01-01", SQUAT, _sets((60.0, 5, True)))}
        assert service.calculate_progression(SQUAT, history).weight == 62.5

    def test_settings_override_increment_and_start(self):
        settings = {
            "progression": {
                "linear": {"weight_increment": 5},
                "starting_weights": {"squat": 45},
                "default_sets": 4,
            }
        }
        service = ProgressionService(settings=settings)
        service.set_active_plan("basic_progression")
        assert service.calculate_progression(SQUAT, {}).weight == 45.0

        history = {"w1": _workout("w1", "2026-01-01", SQUAT, _sets((60.0, 5, True)))}
        assert service.calculate_progression(SQUAT, history).weight == 65.0

        service.set_progression_enabled(False)
        assert service.calculate_progression(SQUAT, history).sets == 4

    def test_default_plan_parameters(self):
        plans = {p.plan_id: p for p in build_default_plans()}
        basic = plans["basic_progression"].rules[0].kwargs()
        advanced = plans["advanced_linear"].rules[0].kwargs()
        assert basic == {"min_successful_sessions": 1, "weight_increment": 2.5}
        assert advanced == {"min_successful_sessions": 2, "weight_increment": 1.25}
        assert plans["advanced_linear"].is_premium
