"""
Exercise selection utilities.

Pure functions that choose one or two exercises from a candidate pool
using the recency index.  An empty pool is a data condition, not an
error: selectors return None (or an empty list) and callers shrink
their plan accordingly.

Random choices take an optional ``rng`` (any object with ``choice``,
e.g. ``random.Random``) so tests can pin the draw.
"""

import random
from typing import Iterable, Literal, Mapping, Sequence

from .models import Exercise, Workout
from .recency import order_by_recency

Fallback = Literal["random", "first"]


def least_recently_used(
    pool: Sequence[Exercise],
    history: Mapping[str, Workout],
) -> Exercise | None:
    """Exercise whose last appearance is oldest (never-performed first)."""
    if not pool:
        return None
    return order_by_recency(pool, history)[0]


def second_least_recently_used(
    pool: Sequence[Exercise],
    history: Mapping[str, Workout],
) -> Exercise | None:
    """Second element of the recency ordering; None for pools under 2."""
    if len(pool) < 2:
        return None
    return order_by_recency(pool, history)[1]


def two_least_recently_used(
    pool: Sequence[Exercise],
    history: Mapping[str, Workout],
) -> list[Exercise]:
    """
    Return up to two exercises, least recently used first.

    Never raises: yields 0, 1 or 2 elements depending on pool size.
    """
    if not pool:
        return []
    if len(pool) == 1:
        return [pool[0]]
    return order_by_recency(pool, history)[:2]


def random_exercise(pool: Sequence[Exercise], rng=None) -> Exercise | None:
    """Uniform choice from ``pool``; None if empty."""
    if not pool:
        return None
    return (rng or random).choice(list(pool))


def random_excluding(
    pool: Sequence[Exercise],
    exclude_id: str,
    rng=None,
) -> Exercise | None:
    """Uniform choice from ``pool`` after dropping ``exclude_id``."""
    remaining = [ex for ex in pool if ex.exercise_id != exclude_id]
    return random_exercise(remaining, rng)


def select_with_fallback(
    pool: Sequence[Exercise],
    history: Mapping[str, Workout],
    fallback: Fallback = "random",
    rng=None,
) -> Exercise | None:
    """
    Least recently used exercise, with a fallback policy.

    The fallback (``random``: uniform choice, ``first``: pool[0]) only
    applies if the LRU lookup yields nothing for a non-empty pool.
    """
    if not pool:
        return None

    lru = least_recently_used(pool, history)
    if lru is not None:
        return lru

    if fallback == "random":
        return random_exercise(pool, rng)
    return pool[0]


def switch_between_two_least_recent(
    current: Exercise,
    pool: Sequence[Exercise],
    history: Mapping[str, Workout],
    rng=None,
) -> Exercise:
    """
    Swap ``current`` for the other of the two least recently used options.

    With fewer than two candidates a random alternative is returned, or
    ``current`` itself when nothing else exists.  If ``current`` is not
    one of the two, the least recently used one is returned.
    """
    pair = two_least_recently_used(pool, history)

    if len(pair) < 2:
        return random_excluding(pool, current.exercise_id, rng) or current

    for candidate in pair:
        if candidate.exercise_id != current.exercise_id:
            return candidate
    return pair[0]


# ---------------------------------------------------------------------------
# Pool filters
# ---------------------------------------------------------------------------


def filter_active(
    exercises: Iterable[Exercise],
    active_ids: Iterable[str] | None,
) -> list[Exercise]:
    """Keep exercises the user opted into; None means every exercise."""
    if active_ids is None:
        return list(exercises)
    wanted = set(active_ids)
    return [ex for ex in exercises if ex.exercise_id in wanted]


def filter_by_category(exercises: Iterable[Exercise], categories: Iterable[str]) -> list[Exercise]:
    wanted = set(categories)
    return [ex for ex in exercises if any(c in wanted for c in ex.categories)]


def filter_by_muscle_group(exercises: Iterable[Exercise], groups: Iterable[str]) -> list[Exercise]:
    wanted = set(groups)
    return [ex for ex in exercises if any(g in wanted for g in ex.muscle_groups)]


def filter_by_equipment(exercises: Iterable[Exercise], equipment: Iterable[str]) -> list[Exercise]:
    wanted = set(equipment)
    return [ex for ex in exercises if any(e in wanted for e in ex.equipment)]


def without(exercises: Iterable[Exercise], exercise: Exercise | None) -> list[Exercise]:
    """Drop ``exercise`` (by id) from ``exercises``; no-op for None."""
    if exercise is None:
        return list(exercises)
    return [ex for ex in exercises if ex.exercise_id != exercise.exercise_id]
