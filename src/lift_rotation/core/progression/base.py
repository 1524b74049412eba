"""
Base types for progression rules.

A progression rule turns one exercise's session history into a
weight / reps / sets recommendation.  Rules are looked up by id in
registry.py; plans reference them through RuleSpec.
"""

import math
from typing import ClassVar, Protocol

from ..config import COMPOUND_TARGET_REPS, ISOLATION_TARGET_REPS
from ..models import Exercise, ExerciseHistory, ProgressionRecommendation, SessionData


class ProgressionRule(Protocol):
    """Interface implemented by every registered rule."""

    rule_id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]

    def calculate(
        self,
        exercise: Exercise,
        history: ExerciseHistory,
    ) -> ProgressionRecommendation: ...


def is_compound(exercise: Exercise) -> bool:
    return exercise.has_tag("compound") or exercise.has_category("compound")


def target_reps(exercise: Exercise) -> int:
    """Lower reps for compound lifts, higher for isolation work."""
    return COMPOUND_TARGET_REPS if is_compound(exercise) else ISOLATION_TARGET_REPS


def session_max_weight(session: SessionData) -> float:
    """Heaviest set in a session (0.0 for a session without sets)."""
    return max((s.weight for s in session.sets), default=0.0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))
