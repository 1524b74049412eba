"""Last-performance memory rule: repeats what was done last time."""

from typing import ClassVar

from ..config import DEFAULT_SET_COUNT, MEMORY_CONFIDENCE
from ..models import Exercise, ExerciseHistory, ProgressionRecommendation
from .base import round_half_up


class MemoryRule:
    """
    Recall the last session's figures without suggesting progression.

    weight = heaviest non-zero set, reps = mean of non-zero reps
    (round half up), sets = number of sets logged.
    """

    rule_id: ClassVar[str] = "memory"
    name: ClassVar[str] = "Last Performance Memory"
    description: ClassVar[str] = (
        "Recalls your last weights, reps, and sets without suggesting progression"
    )

    def calculate(
        self,
        exercise: Exercise,
        history: ExerciseHistory,
    ) -> ProgressionRecommendation:
        if not history.sessions:
            return self._empty_recommendation()

        last_sets = history.sessions[-1].sets
        weights = [s.weight for s in last_sets if s.weight > 0]
        reps = [s.reps for s in last_sets if s.reps > 0]

        last_weight = max(weights) if weights else 0.0
        last_reps = round_half_up(sum(reps) / len(reps)) if reps else 0

        if last_weight == 0 and last_reps == 0:
            return self._empty_recommendation()

        return ProgressionRecommendation(
            weight=last_weight,
            reps=last_reps,
            sets=len(last_sets),
            notes=f"Last time: {last_weight:g}kg × {last_reps} reps × {len(last_sets)} sets",
            confidence=MEMORY_CONFIDENCE,
        )

    @staticmethod
    def _empty_recommendation() -> ProgressionRecommendation:
        return ProgressionRecommendation(
            weight=0.0,
            reps=0,
            sets=DEFAULT_SET_COUNT,
            notes="No previous data - enter your preferred weight and reps",
            confidence=0.0,
        )
