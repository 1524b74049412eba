"""
JSON serialization for lift-rotation data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
from typing import Any

from ..core.catalog import exercise_from_dict, exercise_to_dict
from ..core.history_stats import CompletionStats
from ..core.models import (
    SUB_TYPES,
    ExerciseEntry,
    ExerciseMetadata,
    PersonalRecord,
    ProgressionRecommendation,
    RecentTypeWindow,
    RotationState,
    SetRecord,
    UserState,
    Workout,
    parse_timestamp,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate an ISO-8601 date or datetime string.

    Args:
        date_str: Date string to validate

    Returns:
        The date string unchanged

    Raises:
        ValidationError: If the string cannot be parsed
    """
    if parse_timestamp(date_str) is None:
        raise ValidationError(f"Invalid date: {date_str!r}. Expected ISO-8601")
    return date_str


def validate_sub_type(sub_type: str) -> str:
    """
    Validate a workout sub-type.

    Raises:
        ValidationError: If sub_type is not one of full_body, upper_body, lower_body
    """
    if sub_type not in SUB_TYPES:
        raise ValidationError(f"Invalid sub_type: {sub_type}. Must be one of {SUB_TYPES}")
    return sub_type


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_bool(value: Any, name: str) -> bool:
    """
    Validate that a value is a JSON boolean.

    Raises:
        ValidationError: If value is not true or false
    """
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false, got {value!r}")
    return value


def _require_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be an object, got {data!r}")
    return data


# ---------------------------------------------------------------------------
# Sets and entries
# ---------------------------------------------------------------------------


def set_record_to_dict(record: SetRecord) -> dict[str, Any]:
    return {"weight": record.weight, "reps": record.reps, "completed": record.completed}


def dict_to_set_record(data: dict[str, Any]) -> SetRecord:
    """
    Convert dict to SetRecord.

    Raises:
        ValidationError: If weight or reps are negative or not numeric
    """
    _require_dict(data, "Set")
    try:
        weight = float(data.get("weight", 0.0))
        reps = int(data.get("reps", 0))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set: {data!r}") from e
    validate_non_negative(weight, "weight")
    validate_non_negative(reps, "reps")
    completed = validate_bool(data.get("completed", False), "completed")
    return SetRecord(weight=weight, reps=reps, completed=completed)


def entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    d: dict[str, Any] = {
        "exercise": exercise_to_dict(entry.exercise),
        "sets": [set_record_to_dict(s) for s in entry.sets],
        "exercise_type": entry.exercise_type,
    }
    if entry.progression_notes is not None:
        d["progression_notes"] = entry.progression_notes
    if entry.accessory_category is not None:
        d["accessory_category"] = entry.accessory_category
    return d


def dict_to_entry(data: dict[str, Any]) -> ExerciseEntry:
    """
    Convert dict to ExerciseEntry.

    Raises:
        ValidationError: If the exercise or any set is invalid
    """
    _require_dict(data, "Exercise entry")
    raw_exercise = data.get("exercise")
    if not isinstance(raw_exercise, dict):
        raise ValidationError("Entry is missing its exercise")
    try:
        exercise = exercise_from_dict(raw_exercise)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    raw_sets = data.get("sets") or []
    if not isinstance(raw_sets, list):
        raise ValidationError("Entry sets must be a list")

    exercise_type = data.get("exercise_type", "main")
    if exercise_type not in ("main", "accessory"):
        raise ValidationError(f"Invalid exercise_type: {exercise_type}")

    return ExerciseEntry(
        exercise=exercise,
        sets=[dict_to_set_record(s) for s in raw_sets],
        progression_notes=data.get("progression_notes"),
        exercise_type=exercise_type,
        accessory_category=data.get("accessory_category"),
    )


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


def metadata_to_dict(metadata: ExerciseMetadata) -> dict[str, Any]:
    return {
        "main_exercise_count": metadata.main_exercise_count,
        "accessories": [
            {"exercise_id": ex_id, "category": label} for ex_id, label in metadata.accessories
        ],
    }


def dict_to_metadata(data: dict[str, Any]) -> ExerciseMetadata:
    _require_dict(data, "Exercise metadata")
    try:
        return ExerciseMetadata(
            main_exercise_count=int(data.get("main_exercise_count", 0)),
            accessories=[
                (str(a["exercise_id"]), str(a["category"])) for a in data.get("accessories", [])
            ],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise metadata: {e}") from e


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    d: dict[str, Any] = {
        "workout_id": workout.workout_id,
        "date": workout.date,
        "type": workout.workout_type,
        "completed": workout.completed,
        "exercises": [entry_to_dict(e) for e in workout.exercises],
    }
    if workout.sub_type is not None:
        d["sub_type"] = workout.sub_type
    if workout.exercise_metadata is not None:
        d["exercise_metadata"] = metadata_to_dict(workout.exercise_metadata)
    return d


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert dict to Workout.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    workout_id = data.get("workout_id")
    if not workout_id:
        raise ValidationError("Workout is missing workout_id")
    date = validate_date(data.get("date", ""))

    sub_type = data.get("sub_type")
    if sub_type is not None:
        validate_sub_type(sub_type)

    raw_exercises = data.get("exercises")
    if not isinstance(raw_exercises, list):
        raise ValidationError(f"Workout {workout_id} has no exercise list")

    metadata = data.get("exercise_metadata")
    try:
        return Workout(
            workout_id=str(workout_id),
            date=date,
            exercises=[dict_to_entry(e) for e in raw_exercises],
            completed=validate_bool(data.get("completed", False), "completed"),
            workout_type=data.get("type", "strength"),
            sub_type=sub_type,
            exercise_metadata=dict_to_metadata(metadata) if metadata is not None else None,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def workout_to_json_line(workout: Workout) -> str:
    """Serialize a workout to a single JSON line (no trailing newline)."""
    return json.dumps(workout_to_dict(workout), separators=(",", ":"), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Rotation state, user state, recommendations
# ---------------------------------------------------------------------------


_ROTATION_FIELDS = ("core_index", "upper_index", "upper_type_index", "lower_index", "lower_type_index")


def rotation_state_to_dict(state: RotationState) -> dict[str, int]:
    return {name: getattr(state, name) for name in _ROTATION_FIELDS}


def dict_to_rotation_state(data: dict[str, Any]) -> RotationState:
    """
    Convert dict to RotationState; absent cursors default to 0.

    Raises:
        ValidationError: If a cursor is negative or not an integer
    """
    values: dict[str, int] = {}
    for name in _ROTATION_FIELDS:
        raw = data.get(name, 0)
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValidationError(f"{name} must be an integer, got {raw!r}")
        values[name] = int(validate_non_negative(raw, name))
    return RotationState(**values)


def user_state_to_dict(state: UserState) -> dict[str, Any]:
    return {
        "active_exercises": list(state.active_exercises),
        "recent_workout_types": list(state.recent_types.types),
        "active_plan_id": state.active_plan_id,
        "is_premium": state.is_premium,
        "progression_enabled": state.progression_enabled,
    }


def dict_to_user_state(data: dict[str, Any]) -> UserState:
    """
    Convert dict to UserState.

    Raises:
        ValidationError: If the recent-type window or a flag is invalid
    """
    recent = data.get("recent_workout_types") or []
    try:
        window = RecentTypeWindow(tuple(str(t) for t in recent))
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return UserState(
        active_exercises=[str(x) for x in data.get("active_exercises") or []],
        recent_types=window,
        active_plan_id=str(data.get("active_plan_id", "memory")),
        is_premium=validate_bool(data.get("is_premium", False), "is_premium"),
        progression_enabled=validate_bool(
            data.get("progression_enabled", True), "progression_enabled"
        ),
    )


def recommendation_to_dict(
    exercise_id: str,
    rec: ProgressionRecommendation,
    record: PersonalRecord | None = None,
) -> dict[str, Any]:
    """Machine-readable recommendation (used by --json output)."""
    has_record = record is not None and record.weight > 0
    return {
        "exercise_id": exercise_id,
        "recommended_weight": rec.weight,
        "recommended_reps": rec.reps,
        "recommended_sets": rec.sets,
        "notes": rec.notes,
        "confidence": rec.confidence,
        "personal_record": personal_record_to_dict(record) if has_record else None,
    }


def personal_record_to_dict(record: PersonalRecord) -> dict[str, Any]:
    return {"weight": record.weight, "reps": record.reps, "date": record.date}


def completion_stats_to_dict(stats: CompletionStats) -> dict[str, Any]:
    return {
        "total": stats.total,
        "completed": stats.completed,
        "completion_rate": round(stats.completion_rate, 3),
        "last_date": stats.last_date,
    }
