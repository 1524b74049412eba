"""
Progression service.

Holds the catalog of progression plans, the active-plan pointer and the
premium entitlement, and turns the full workout history into an
exercise history for the active plan's rule.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..config import DEFAULT_PLAN_ID
from ..engine.config_loader import default_set_count, linear_params, starting_weights
from ..models import (
    Exercise,
    ExerciseHistory,
    PersonalRecord,
    ProgressionPlan,
    ProgressionRecommendation,
    RuleSpec,
    SessionData,
    SetRecord,
    Workout,
)
from .base import ProgressionRule
from .registry import build_rule


def build_default_plans(settings: dict[str, Any] | None = None) -> tuple[ProgressionPlan, ...]:
    """The fixed plan catalog, parameterised from settings."""
    basic = linear_params(settings, "linear")
    advanced = linear_params(settings, "advanced_linear")
    return (
        ProgressionPlan(
            plan_id="memory",
            name="Last Performance Memory",
            description=(
                "Recalls your last weights and reps without suggesting progression"
                " - perfect for Cruise Mode"
            ),
            rules=(RuleSpec("memory"),),
            is_premium=False,
        ),
        ProgressionPlan(
            plan_id="basic_progression",
            name="Basic Progression",
            description="Simple linear progression - add weight when all sets are completed",
            rules=(RuleSpec("linear", tuple(sorted(basic.items()))),),
            is_premium=False,
        ),
        ProgressionPlan(
            plan_id="advanced_linear",
            name="Advanced Linear Progression",
            description=(
                "Refined linear progression with smaller increments"
                " and stricter success criteria"
            ),
            rules=(RuleSpec("linear", tuple(sorted(advanced.items()))),),
            is_premium=True,
        ),
    )


def build_exercise_history(
    exercise_id: str,
    history: Mapping[str, Workout],
) -> ExerciseHistory:
    """
    Collect every session of one exercise, oldest first.

    Workouts with an unparseable date and entries without sets are
    skipped.  The personal record is the heaviest set seen, keeping the
    earliest session that reached it.
    """
    dated = [(w.timestamp(), w) for w in history.values()]
    ordered = sorted(
        ((ts, w) for ts, w in dated if ts is not None),
        key=lambda pair: pair[0],
    )

    sessions: list[SessionData] = []
    record = PersonalRecord()

    for _, workout in ordered:
        entry = workout.entry_for(exercise_id)
        if entry is None or not entry.sets:
            continue

        sets = [SetRecord(s.weight, s.reps, s.completed) for s in entry.sets]
        sessions.append(SessionData(date=workout.date, sets=sets))

        max_weight = max(s.weight for s in sets)
        if max_weight > record.weight:
            reps = next(s.reps for s in sets if s.weight == max_weight)
            record = PersonalRecord(weight=max_weight, reps=reps, date=workout.date)

    return ExerciseHistory(exercise_id=exercise_id, sessions=sessions, personal_record=record)


class ProgressionService:
    """
    Plan management and recommendation entry point.

    Args:
        is_premium: Whether premium plans may be activated
        settings: Merged settings dict (see config_loader.load_model_config);
            None uses the built-in defaults
    """

    def __init__(self, is_premium: bool = False, settings: dict[str, Any] | None = None):
        self._is_premium = is_premium
        self._enabled = True
        self._settings = settings
        self._plans = build_default_plans(settings)
        self._starting_weights = starting_weights(settings)
        self._active_plan_id: str | None = DEFAULT_PLAN_ID

    # -- recommendations ----------------------------------------------------

    def calculate_progression(
        self,
        exercise: Exercise,
        history: Mapping[str, Workout],
    ) -> ProgressionRecommendation:
        """Recommendation for ``exercise`` from the active plan's first rule."""
        if not self.is_progression_enabled():
            return self._default_recommendation()

        rule = self._active_rule()
        if rule is None:
            return self._default_recommendation()

        exercise_history = self.get_exercise_history(exercise.exercise_id, history)
        return rule.calculate(exercise, exercise_history)

    def get_exercise_history(
        self,
        exercise_id: str,
        history: Mapping[str, Workout],
    ) -> ExerciseHistory:
        return build_exercise_history(exercise_id, history)

    def _active_rule(self) -> ProgressionRule | None:
        plan = self.get_active_plan()
        if plan is None or not plan.rules:
            return None
        return build_rule(plan.rules[0], starting_weights=self._starting_weights)

    def _default_recommendation(self) -> ProgressionRecommendation:
        return ProgressionRecommendation(
            weight=0.0,
            reps=0,
            sets=default_set_count(self._settings),
            notes="Enter your preferred weight and reps",
            confidence=0.0,
        )

    # -- plan management ----------------------------------------------------

    def get_available_plans(self) -> list[ProgressionPlan]:
        if self._is_premium:
            return list(self._plans)
        return [p for p in self._plans if not p.is_premium]

    def get_plan(self, plan_id: str) -> ProgressionPlan | None:
        for plan in self._plans:
            if plan.plan_id == plan_id:
                return plan
        return None

    def set_active_plan(self, plan_id: str) -> None:
        """
        Activate a plan if it exists and the user is entitled to it.

        Unknown ids and locked premium plans are ignored; re-read
        get_active_plan() to see whether the call took effect.
        """
        plan = self.get_plan(plan_id)
        if plan is not None and (self._is_premium or not plan.is_premium):
            self._active_plan_id = plan_id

    def get_active_plan(self) -> ProgressionPlan | None:
        if self._active_plan_id is None:
            return None
        return self.get_plan(self._active_plan_id)

    # -- entitlements -------------------------------------------------------

    def is_progression_enabled(self) -> bool:
        return self._enabled

    def set_progression_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def is_premium_user(self) -> bool:
        return self._is_premium

    def upgrade_to_premium(self) -> None:
        self._is_premium = True
