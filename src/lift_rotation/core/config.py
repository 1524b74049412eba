"""
Configuration constants for the workout generation and progression model.

All adjustable parameters are centralized here for easy tuning.  Values
can be overridden per user through ~/.lift-rotation/settings.yaml (see
core/engine/config_loader.py).
"""

from typing import Final

# =============================================================================
# MAIN MOVEMENTS
# =============================================================================

KNEE_DOMINANT: Final[str] = "knee_dominant"
HIP_DOMINANT: Final[str] = "hip_dominant"
UPPER_BODY_PUSH: Final[str] = "upper_body_push"
UPPER_BODY_PULL: Final[str] = "upper_body_pull"

# Order of slots in a full-body workout
FULL_BODY_CATEGORIES: Final[tuple[str, ...]] = (
    KNEE_DOMINANT,
    HIP_DOMINANT,
    UPPER_BODY_PUSH,
    UPPER_BODY_PULL,
)

MAX_MAIN_EXERCISES: Final[int] = 4

# =============================================================================
# ACCESSORY ROTATION
# =============================================================================

UPPER_SUB_GROUPS: Final[tuple[str, ...]] = ("biceps", "triceps", "shoulder")
LOWER_SUB_GROUPS: Final[tuple[str, ...]] = ("hamstring", "quadriceps", "calves")

# Name fragments that place an isolation exercise in a sub-group.
# Each sub-group matches by its tag or a fragment; checked in order, first match wins.
UPPER_NAME_HINTS: Final[dict[str, tuple[str, ...]]] = {
    "biceps": ("bicep", "curl"),
    "triceps": ("tricep",),
    "shoulder": ("shoulder", "lateral", "front"),
}
LOWER_NAME_HINTS: Final[dict[str, tuple[str, ...]]] = {
    "hamstring": ("hamstring", "leg curl"),
    "quadriceps": ("quad", "leg extension"),
    "calves": ("calf",),
}

# =============================================================================
# PROGRESSION
# =============================================================================

DEFAULT_WEIGHT_INCREMENT: Final[float] = 2.5  # kg added after a successful session
DEFAULT_MIN_SUCCESSFUL_SESSIONS: Final[int] = 1

ADVANCED_WEIGHT_INCREMENT: Final[float] = 1.25
ADVANCED_MIN_SUCCESSFUL_SESSIONS: Final[int] = 2

COMPOUND_TARGET_REPS: Final[int] = 5
ISOLATION_TARGET_REPS: Final[int] = 8

DEFAULT_STARTING_WEIGHT: Final[float] = 20.0
STARTING_WEIGHTS: Final[dict[str, float]] = {
    "squat": 40.0,
    "deadlift": 50.0,
    "bench_press": 30.0,
    "overhead_press": 20.0,
}

DEFAULT_SET_COUNT: Final[int] = 3  # sets prefilled when nothing better is known

LINEAR_START_CONFIDENCE: Final[float] = 0.7
LINEAR_PROGRESS_CONFIDENCE: Final[float] = 0.8
LINEAR_HOLD_CONFIDENCE: Final[float] = 0.9
MEMORY_CONFIDENCE: Final[float] = 1.0

DEFAULT_PLAN_ID: Final[str] = "memory"

# =============================================================================
# PLAN DEFAULTS PER STRATEGY
# =============================================================================

CRUISE_REST_DAYS: Final[int] = 1
STRENGTH_REST_DAYS: Final[int] = 2
ENDURANCE_REST_DAYS: Final[int] = 1

STRENGTH_MAX_EXERCISES: Final[int] = 6
ENDURANCE_MAX_EXERCISES: Final[int] = 8

TARGET_MUSCLES: Final[dict[str, tuple[str, ...]]] = {
    "full_body": ("legs", "chest", "back", "shoulders"),
    "upper_body": ("chest", "back", "shoulders", "arms"),
    "lower_body": ("legs", "core"),
}

STRENGTH_PUSH_GROUPS: Final[tuple[str, ...]] = ("chest", "shoulders")
STRENGTH_PULL_GROUPS: Final[tuple[str, ...]] = ("back", "arms")
ENDURANCE_EQUIPMENT: Final[tuple[str, ...]] = ("bodyweight", "machine")
