"""
Recency index over the workout history.

The index maps each exercise to the latest time it appeared in a
workout.  It is rebuilt from the full history on every call; history
sizes are bounded by one user's own log.
"""

from typing import Iterable, Mapping

from .models import Exercise, Workout


def build_recency_index(history: Mapping[str, Workout]) -> dict[str, float]:
    """
    Return exercise_id -> latest POSIX timestamp across the history.

    Workouts whose date cannot be parsed are skipped, as are entries
    without an exercise.
    """
    index: dict[str, float] = {}
    for workout in history.values():
        ts = workout.timestamp()
        if ts is None:
            continue
        for entry in workout.exercises or ():
            exercise = getattr(entry, "exercise", None)
            if exercise is None:
                continue
            ex_id = exercise.exercise_id
            if ts > index.get(ex_id, 0.0):
                index[ex_id] = ts
    return index


def last_performed(exercise_id: str, index: Mapping[str, float]) -> float:
    """Latest timestamp for the exercise; 0.0 (never) when absent."""
    return index.get(exercise_id, 0.0)


def order_by_recency(
    pool: Iterable[Exercise],
    history: Mapping[str, Workout],
) -> list[Exercise]:
    """
    Sort ``pool`` oldest-first by last appearance.

    Exercises never performed sort first.  The sort is stable, so ties
    keep pool order.
    """
    index = build_recency_index(history)
    return sorted(pool, key=lambda ex: last_performed(ex.exercise_id, index))
