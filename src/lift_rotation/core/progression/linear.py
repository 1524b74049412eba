"""
Linear progression rule.

Add a fixed increment once the lifter has completed every set in the
required number of recent sessions; otherwise hold the weight.
"""

import re
from typing import ClassVar, Mapping

from ..config import (
    DEFAULT_MIN_SUCCESSFUL_SESSIONS,
    DEFAULT_STARTING_WEIGHT,
    DEFAULT_WEIGHT_INCREMENT,
    LINEAR_HOLD_CONFIDENCE,
    LINEAR_PROGRESS_CONFIDENCE,
    LINEAR_START_CONFIDENCE,
    STARTING_WEIGHTS,
)
from ..models import Exercise, ExerciseHistory, ProgressionRecommendation, SessionData
from .base import session_max_weight, target_reps


def normalize_exercise_name(name: str) -> str:
    """'Bench Press' -> 'bench_press'."""
    return re.sub(r"\s+", "_", name.strip().lower())


class LinearProgressionRule:
    """
    Increase weight by a fixed amount when all sets were completed.

    Args:
        weight_increment: kg added after enough successful sessions
        min_successful_sessions: successful sessions required to progress
        starting_weights: normalized exercise name -> first-session weight
    """

    rule_id: ClassVar[str] = "linear"
    name: ClassVar[str] = "Linear Progression"
    description: ClassVar[str] = (
        "Increase weight by fixed amount when all sets completed successfully"
    )

    def __init__(
        self,
        weight_increment: float | None = None,
        min_successful_sessions: int | None = None,
        starting_weights: Mapping[str, float] | None = None,
    ):
        self.weight_increment = float(
            DEFAULT_WEIGHT_INCREMENT if weight_increment is None else weight_increment
        )
        self.min_successful_sessions = int(
            DEFAULT_MIN_SUCCESSFUL_SESSIONS
            if min_successful_sessions is None
            else min_successful_sessions
        )
        self.starting_weights = dict(
            starting_weights if starting_weights is not None else STARTING_WEIGHTS
        )

        if self.weight_increment < 0:
            raise ValueError("weight_increment must be non-negative")
        if self.min_successful_sessions < 1:
            raise ValueError("min_successful_sessions must be at least 1")

    def calculate(
        self,
        exercise: Exercise,
        history: ExerciseHistory,
    ) -> ProgressionRecommendation:
        if not history.sessions:
            return self._starting_recommendation(exercise)

        current_weight = session_max_weight(history.sessions[-1])
        successful = self.recent_successful_sessions(history)

        if len(successful) >= self.min_successful_sessions:
            return ProgressionRecommendation(
                weight=current_weight + self.weight_increment,
                reps=target_reps(exercise),
                notes=(
                    "Previous weight completed successfully. "
                    f"Increase by {self.weight_increment:g}kg."
                ),
                confidence=LINEAR_PROGRESS_CONFIDENCE,
            )

        return ProgressionRecommendation(
            weight=current_weight,
            reps=target_reps(exercise),
            notes="Focus on completing all sets before increasing weight.",
            confidence=LINEAR_HOLD_CONFIDENCE,
        )

    def recent_successful_sessions(self, history: ExerciseHistory) -> list[SessionData]:
        """
        Most recent fully-completed sessions.

        Looks back over the last ``2 × min_successful_sessions`` sessions,
        keeps those with every set completed, and returns the newest
        ``min_successful_sessions`` of them.
        """
        count = self.min_successful_sessions
        window = history.sessions[-count * 2:]
        completed = [s for s in window if all(st.completed for st in s.sets)]
        return completed[-count:]

    def _starting_recommendation(self, exercise: Exercise) -> ProgressionRecommendation:
        key = normalize_exercise_name(exercise.name)
        return ProgressionRecommendation(
            weight=float(self.starting_weights.get(key, DEFAULT_STARTING_WEIGHT)),
            reps=target_reps(exercise),
            notes="Starting weight for new exercise.",
            confidence=LINEAR_START_CONFIDENCE,
        )
