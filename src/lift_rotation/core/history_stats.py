"""
Summary statistics over the workout history.

Completion rates grouped by workout type or sub-type, and the personal
record of every exercise that was ever logged with sets.
"""

from dataclasses import dataclass
from typing import Literal, Mapping

from .models import PersonalRecord, Workout
from .progression.service import build_exercise_history

GroupBy = Literal["workout_type", "sub_type"]


@dataclass
class CompletionStats:
    """Logged vs. finished workouts of one group."""

    total: int = 0
    completed: int = 0
    last_date: str = ""

    @property
    def completion_rate(self) -> float:
        return self.completed / self.total if self.total else 0.0


def _by_date(history: Mapping[str, Workout]) -> list[Workout]:
    return sorted(history.values(), key=lambda w: w.timestamp() or 0.0)


def completion_stats(
    history: Mapping[str, Workout],
    group_by: GroupBy = "workout_type",
) -> dict[str, CompletionStats]:
    """
    Count logged and finished workouts per group.

    Workouts without a sub-type are left out when grouping by sub-type.
    ``last_date`` is the date of the newest workout in the group.

    Raises:
        ValueError: If group_by is not workout_type or sub_type
    """
    if group_by not in ("workout_type", "sub_type"):
        raise ValueError(f"Cannot group workouts by {group_by!r}")

    stats: dict[str, CompletionStats] = {}
    for workout in _by_date(history):
        group = getattr(workout, group_by)
        if group is None:
            continue
        entry = stats.setdefault(group, CompletionStats())
        entry.total += 1
        if workout.completed:
            entry.completed += 1
        entry.last_date = workout.date
    return stats


def personal_records(history: Mapping[str, Workout]) -> dict[str, PersonalRecord]:
    """Heaviest set per exercise, in order of first appearance; weightless exercises are skipped."""
    seen: dict[str, None] = {}
    for workout in _by_date(history):
        for entry in workout.exercises:
            seen.setdefault(entry.exercise.exercise_id, None)

    records: dict[str, PersonalRecord] = {}
    for exercise_id in seen:
        record = build_exercise_history(exercise_id, history).personal_record
        if record.weight > 0:
            records[exercise_id] = record
    return records
