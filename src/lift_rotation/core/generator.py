"""
Workout generation strategies for lift-rotation.

A strategy turns the catalog, the user's active exercises and the
workout history into a WorkoutPlan.  Cruise Mode is the main strategy:
one main movement per pattern chosen by recency, accessories from the
rotation policy, and optional progression recommendations.  Strength
and Endurance are simpler filters over the active exercises.

Strategies are looked up by id via get_strategy().  Every selector
degrades to "fewer exercises" when a pool is empty; callers must
accept plans shorter than the nominal exercise count.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from .config import (
    CRUISE_REST_DAYS,
    DEFAULT_SET_COUNT,
    ENDURANCE_EQUIPMENT,
    ENDURANCE_MAX_EXERCISES,
    ENDURANCE_REST_DAYS,
    FULL_BODY_CATEGORIES,
    HIP_DOMINANT,
    KNEE_DOMINANT,
    MAX_MAIN_EXERCISES,
    STRENGTH_MAX_EXERCISES,
    STRENGTH_PULL_GROUPS,
    STRENGTH_PUSH_GROUPS,
    STRENGTH_REST_DAYS,
    TARGET_MUSCLES,
    UPPER_BODY_PULL,
    UPPER_BODY_PUSH,
)
from .models import (
    MUSCLE_GROUPS,
    SUB_TYPES,
    Exercise,
    ExerciseEntry,
    ExerciseMetadata,
    ProgressionRecommendation,
    SetRecord,
    Workout,
    WorkoutPlan,
)
from .progression.service import ProgressionService
from .recency import build_recency_index
from .rotation import AccessoryRotationPolicy, categorize_accessories
from .selection import (
    filter_active,
    filter_by_category,
    filter_by_equipment,
    filter_by_muscle_group,
    least_recently_used,
    random_excluding,
    select_with_fallback,
    switch_between_two_least_recent,
    two_least_recently_used,
    without,
)


@dataclass
class GeneratorOptions:
    """
    Inputs for one generate() call.

    ``active_exercises`` of None means every catalog exercise is eligible.
    ``rng`` is any object with ``choice`` (e.g. ``random.Random``); None
    uses the module-level generator.
    """

    history: Mapping[str, Workout] = field(default_factory=dict)
    active_exercises: Sequence[str] | None = None
    sub_type: str = "full_body"
    target_muscle_groups: Sequence[str] | None = None
    progression_service: ProgressionService | None = None
    rotation_policy: AccessoryRotationPolicy | None = None
    rng: Any = None

    def __post_init__(self) -> None:
        if self.sub_type not in SUB_TYPES:
            raise ValueError(
                f"Invalid sub_type: {self.sub_type}. Must be one of {SUB_TYPES}"
            )


def _progression_data(
    exercises: Sequence[Exercise],
    options: GeneratorOptions,
) -> dict[str, ProgressionRecommendation] | None:
    service = options.progression_service
    if service is None:
        return None
    return {
        ex.exercise_id: service.calculate_progression(ex, options.history)
        for ex in exercises
    }


def _dedupe(exercises: Sequence[Exercise]) -> list[Exercise]:
    seen: set[str] = set()
    result = []
    for ex in exercises:
        if ex.exercise_id not in seen:
            seen.add(ex.exercise_id)
            result.append(ex)
    return result


# =============================================================================
# CRUISE MODE
# =============================================================================


class CruiseModeStrategy:
    """
    Smart exercise rotation without planned progression.

    full_body: one knee-dominant, hip-dominant, push and pull movement
    plus rotated accessories.  upper_body: two push + two pull.
    lower_body: two knee-dominant + two hip-dominant.
    """

    strategy_id = "cruise_mode"
    name = "Cruise Mode"
    description = (
        "Smart exercise rotation, allowing you to self regulate progress or just "
        "cruise along. Ideal if you don't want to worry about workout planning."
    )

    def __init__(self, rotation_policy: AccessoryRotationPolicy | None = None):
        self.rotation_policy = rotation_policy or AccessoryRotationPolicy()

    def generate(self, exercises: Sequence[Exercise], options: GeneratorOptions) -> WorkoutPlan:
        available = filter_active(exercises, options.active_exercises)
        sub_type = options.sub_type

        if sub_type == "upper_body":
            main = self.select_pairs(
                available, (UPPER_BODY_PUSH, UPPER_BODY_PULL), options
            )
        elif sub_type == "lower_body":
            main = self.select_pairs(
                available, (KNEE_DOMINANT, HIP_DOMINANT), options
            )
        else:
            main = self.select_full_body(available, options)

        slots = []
        if sub_type == "full_body":
            policy = options.rotation_policy or self.rotation_policy
            slots = policy.select_accessory_slots(available)

        all_exercises = main + [slot.exercise for slot in slots]

        return WorkoutPlan(
            exercises=all_exercises,
            rest_days=CRUISE_REST_DAYS,
            workout_type="strength",
            intensity="low",
            target_muscle_groups=list(TARGET_MUSCLES[sub_type]),
            sub_type=sub_type,  # type: ignore[arg-type]
            progression_data=_progression_data(all_exercises, options),
            exercise_metadata=ExerciseMetadata(
                main_exercise_count=len(main),
                accessories=[(s.exercise.exercise_id, s.label) for s in slots],
            ),
        )

    def select_full_body(
        self,
        exercises: Sequence[Exercise],
        options: GeneratorOptions,
    ) -> list[Exercise]:
        """One exercise per movement pattern; empty patterns are skipped."""
        selected = []
        for category in FULL_BODY_CATEGORIES:
            pool = filter_by_category(exercises, [category])
            chosen = select_with_fallback(pool, options.history, "random", options.rng)
            if chosen is not None:
                selected.append(chosen)
        return selected[:MAX_MAIN_EXERCISES]

    def select_pairs(
        self,
        exercises: Sequence[Exercise],
        categories: Sequence[str],
        options: GeneratorOptions,
    ) -> list[Exercise]:
        """Two distinct exercises per category, in category order."""
        selected = []
        for category in categories:
            pool = filter_by_category(exercises, [category])
            first = select_with_fallback(pool, options.history, "random", options.rng)
            if first is not None:
                selected.append(first)
            second = select_with_fallback(
                without(pool, first), options.history, "random", options.rng
            )
            if second is not None:
                selected.append(second)
        return selected[:MAX_MAIN_EXERCISES]

    # -- interactive ----------------------------------------------------------

    def switch_exercise(
        self,
        current: Exercise,
        category: str,
        available: Sequence[Exercise],
        history: Mapping[str, Workout],
        rng: Any = None,
    ) -> Exercise:
        """Alternate between the two least recently used options of ``category``."""
        pool = filter_by_category(available, [category])
        return switch_between_two_least_recent(current, pool, history, rng)

    def repropose_exercise(
        self,
        current: Exercise,
        category: str,
        available: Sequence[Exercise],
        rng: Any = None,
    ) -> Exercise | None:
        """Random replacement from ``category``; ignores history and rotation."""
        pool = filter_by_category(available, [category])
        return random_excluding(pool, current.exercise_id, rng)

    def alternative_exercises(
        self,
        category: str,
        available: Sequence[Exercise],
        history: Mapping[str, Workout],
    ) -> list[Exercise]:
        """The two least recently used exercises of ``category``."""
        pool = filter_by_category(available, [category])
        return two_least_recently_used(pool, history)

    def switch_accessory(
        self,
        current: Exercise,
        label: str,
        available: Sequence[Exercise],
        history: Mapping[str, Workout],
    ) -> Exercise | None:
        """
        Next exercise from the rotation sub-group named by ``label``.

        An accessory that was performed before is swapped for the least
        recently used other member of its pool.  One never performed
        steps to the next never-performed member, so untried options are
        walked in catalog order.  None when the pool offers nothing else.
        """
        pool = categorize_accessories(available).pool_for(label)
        performed = build_recency_index(history)

        if current.exercise_id in performed:
            return least_recently_used(without(pool, current), history)

        untried = [ex for ex in pool if ex.exercise_id not in performed]
        if not untried:
            return None
        ids = [ex.exercise_id for ex in untried]
        position = ids.index(current.exercise_id) if current.exercise_id in ids else -1
        chosen = untried[(position + 1) % len(untried)]
        return None if chosen.exercise_id == current.exercise_id else chosen


# =============================================================================
# STRENGTH / ENDURANCE
# =============================================================================


class StrengthStrategy:
    """Compound movements, push/pull split unless target groups are given."""

    strategy_id = "strength"
    name = "Strength"
    description = "Compound movements focused on strength building"

    def generate(self, exercises: Sequence[Exercise], options: GeneratorOptions) -> WorkoutPlan:
        available = filter_active(exercises, options.active_exercises)
        compound = filter_by_category(available, ["compound"])

        if options.target_muscle_groups:
            selected = filter_by_muscle_group(compound, options.target_muscle_groups)
        else:
            push = filter_by_muscle_group(compound, STRENGTH_PUSH_GROUPS)[:3]
            pull = filter_by_muscle_group(compound, STRENGTH_PULL_GROUPS)[:3]
            selected = push + pull

        selected = _dedupe(selected)[:STRENGTH_MAX_EXERCISES]
        return WorkoutPlan(
            exercises=selected,
            rest_days=STRENGTH_REST_DAYS,
            workout_type="strength",
            intensity="high",
            target_muscle_groups=(
                list(options.target_muscle_groups) if options.target_muscle_groups else None
            ),
            progression_data=_progression_data(selected, options),
        )


class EnduranceStrategy:
    """Bodyweight and machine circuits."""

    strategy_id = "endurance"
    name = "Endurance"
    description = "High-rep circuits focusing on muscular endurance"

    def generate(self, exercises: Sequence[Exercise], options: GeneratorOptions) -> WorkoutPlan:
        available = filter_active(exercises, options.active_exercises)
        pool = filter_by_equipment(available, ENDURANCE_EQUIPMENT)
        groups = options.target_muscle_groups or MUSCLE_GROUPS
        selected = filter_by_muscle_group(pool, groups)[:ENDURANCE_MAX_EXERCISES]

        return WorkoutPlan(
            exercises=selected,
            rest_days=ENDURANCE_REST_DAYS,
            workout_type="endurance",
            intensity="medium",
            target_muscle_groups=(
                list(options.target_muscle_groups) if options.target_muscle_groups else None
            ),
            progression_data=_progression_data(selected, options),
        )


STRATEGY_REGISTRY: dict[str, type] = {
    CruiseModeStrategy.strategy_id: CruiseModeStrategy,
    StrengthStrategy.strategy_id: StrengthStrategy,
    EnduranceStrategy.strategy_id: EnduranceStrategy,
}


def get_strategy(strategy_id: str, **kwargs: Any):
    """
    Instantiate the strategy registered under ``strategy_id``.

    Raises:
        ValueError: If strategy_id is not registered
    """
    if strategy_id not in STRATEGY_REGISTRY:
        valid = ", ".join(STRATEGY_REGISTRY)
        raise ValueError(f"Unknown strategy '{strategy_id}'. Valid IDs: {valid}")
    return STRATEGY_REGISTRY[strategy_id](**kwargs)


# =============================================================================
# PLAN → WORKOUT
# =============================================================================


def plan_to_workout(
    plan: WorkoutPlan,
    workout_id: str | None = None,
    now: datetime | None = None,
    default_sets: int = DEFAULT_SET_COUNT,
) -> Workout:
    """
    Turn a plan into an unfinished Workout with prefilled sets.

    Each exercise gets the recommended number of sets (``default_sets``
    when none is given) at the recommended weight and reps, or zeros when
    the plan carries no progression data for it.
    """
    moment = now or datetime.now()
    progression = plan.progression_data or {}
    metadata = plan.exercise_metadata

    entries = []
    for exercise in plan.exercises:
        rec = progression.get(exercise.exercise_id)
        set_count = rec.sets if rec is not None and rec.sets else default_sets
        weight = rec.weight if rec is not None else 0.0
        reps = rec.reps if rec is not None else 0
        label = metadata.label_for(exercise.exercise_id) if metadata is not None else None

        entries.append(
            ExerciseEntry(
                exercise=exercise,
                sets=[SetRecord(weight=weight, reps=reps) for _ in range(set_count)],
                progression_notes=rec.notes if rec is not None else None,
                exercise_type="accessory" if label is not None else "main",
                accessory_category=label,
            )
        )

    return Workout(
        workout_id=workout_id or f"workout-{uuid.uuid4().hex[:12]}",
        date=moment.isoformat(timespec="seconds"),
        exercises=entries,
        completed=False,
        workout_type=plan.workout_type,
        sub_type=plan.sub_type,
        exercise_metadata=metadata,
    )
