"""
Data models for lift-rotation.

All core dataclasses representing the exercise catalog, logged workouts,
rotation cursors, progression recommendations and generated plans.
Exercises are immutable reference data; workouts are mutable until
they are finished.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal

WorkoutSubType = Literal["full_body", "upper_body", "lower_body"]
WorkoutType = Literal["strength", "hypertrophy", "endurance", "power", "recovery"]
Intensity = Literal["low", "medium", "high"]
ExerciseType = Literal["main", "accessory"]

SUB_TYPES: tuple[str, ...] = ("full_body", "upper_body", "lower_body")
WORKOUT_TYPES: tuple[str, ...] = ("strength", "hypertrophy", "endurance", "power", "recovery")
INTENSITIES: tuple[str, ...] = ("low", "medium", "high")
MUSCLE_GROUPS: tuple[str, ...] = (
    "chest", "back", "legs", "shoulders", "arms", "core", "full_body",
)
EQUIPMENT_TYPES: tuple[str, ...] = (
    "barbell", "dumbbell", "bodyweight", "machine", "cable", "kettlebell", "resistance_band",
)

# Longest recent-type window kept for the consecutive-workout guard
RECENT_TYPES_MAX = 3


@dataclass(frozen=True)
class Exercise:
    """
    One entry of the exercise catalog.

    ``categories`` carry movement patterns (knee_dominant, hip_dominant,
    upper_body_push, upper_body_pull) plus coarse groupings; ``tags`` are
    free-form (compound, isolation, core, upper_body, biceps, ...).
    """

    exercise_id: str
    name: str
    description: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    muscle_groups: tuple[str, ...] = ()
    equipment: tuple[str, ...] = ()
    category: str | None = None
    movement_type: str | None = None

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if not self.name:
            raise ValueError("name must be non-empty")

    def has_category(self, category: str) -> bool:
        return category in self.categories

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass
class SetRecord:
    """A single performed (or prefilled) set."""

    weight: float = 0.0
    reps: int = 0
    completed: bool = False

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")


@dataclass
class ExerciseEntry:
    """An exercise inside a workout together with its sets."""

    exercise: Exercise
    sets: list[SetRecord] = field(default_factory=list)
    progression_notes: str | None = None
    exercise_type: ExerciseType = "main"
    accessory_category: str | None = None  # e.g. "Core", "Upper (Biceps)"


@dataclass
class AccessorySlot:
    """An accessory picked by the rotation together with its display label."""

    exercise: Exercise
    label: str  # "Core", "Upper (Triceps)", "Lower (Calves)"


@dataclass
class ExerciseMetadata:
    """
    Distinguishes main movements from accessories in a plan or workout.

    The first ``main_exercise_count`` exercises are main movements; every
    exercise listed in ``accessories`` is an accessory with its label.
    """

    main_exercise_count: int
    accessories: list[tuple[str, str]] = field(default_factory=list)  # (exercise_id, label)

    def __post_init__(self) -> None:
        if self.main_exercise_count < 0:
            raise ValueError("main_exercise_count must be non-negative")

    def label_for(self, exercise_id: str) -> str | None:
        for ex_id, label in self.accessories:
            if ex_id == exercise_id:
                return label
        return None


@dataclass
class Workout:
    """
    A logged (or in-progress) workout.

    ``date`` is an ISO-8601 datetime string.  Sets may be edited until
    ``completed`` is set; after that the workout is treated as immutable.
    """

    workout_id: str
    date: str
    exercises: list[ExerciseEntry] = field(default_factory=list)
    completed: bool = False
    workout_type: WorkoutType = "strength"
    sub_type: WorkoutSubType | None = None
    exercise_metadata: ExerciseMetadata | None = None

    def __post_init__(self) -> None:
        if not self.workout_id:
            raise ValueError("workout_id must be non-empty")
        if self.sub_type is not None and self.sub_type not in SUB_TYPES:
            raise ValueError(f"Invalid sub_type: {self.sub_type}")
        if self.workout_type not in WORKOUT_TYPES:
            raise ValueError(f"Invalid workout_type: {self.workout_type}")

    def timestamp(self) -> float | None:
        """POSIX timestamp of ``date``, or None if the date cannot be parsed."""
        return parse_timestamp(self.date)

    def entry_for(self, exercise_id: str) -> ExerciseEntry | None:
        """Return the first entry for the given exercise, if any."""
        for entry in self.exercises:
            if entry.exercise.exercise_id == exercise_id:
                return entry
        return None


WorkoutHistory = dict[str, Workout]


def parse_timestamp(date_str: str) -> float | None:
    """
    Parse an ISO-8601 date or datetime string into a POSIX timestamp.

    A trailing ``Z`` is accepted as UTC.  Naive datetimes are interpreted
    in local time, matching ``datetime.timestamp``.
    """
    if not isinstance(date_str, str) or not date_str:
        return None
    raw = date_str[:-1] + "+00:00" if date_str.endswith("Z") else date_str
    try:
        return datetime.fromisoformat(raw).timestamp()
    except ValueError:
        return None


@dataclass(frozen=True)
class RotationState:
    """
    Round-robin cursors for accessory rotation.

    Type cursors index the three muscle sub-groups of the upper and lower
    accessory pools; the other cursors index exercises inside a pool.
    """

    core_index: int = 0
    upper_index: int = 0
    upper_type_index: int = 0  # 0: biceps, 1: triceps, 2: shoulder
    lower_index: int = 0
    lower_type_index: int = 0  # 0: hamstring, 1: quadriceps, 2: calves

    def __post_init__(self) -> None:
        for name in (
            "core_index", "upper_index", "upper_type_index", "lower_index", "lower_type_index",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass
class ProgressionRecommendation:
    """
    Weight / reps / sets suggestion produced by a progression rule.

    ``confidence`` in [0, 1] states how much history backs the suggestion.
    """

    weight: float
    reps: int
    sets: int | None = None
    notes: str | None = None
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.sets is not None and self.sets < 0:
            raise ValueError("sets must be non-negative")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass
class SessionData:
    """All sets logged for one exercise in one workout."""

    date: str
    sets: list[SetRecord] = field(default_factory=list)


@dataclass
class PersonalRecord:
    weight: float = 0.0
    reps: int = 0
    date: str = ""


@dataclass
class ExerciseHistory:
    """
    Per-exercise view of the workout history.

    ``sessions`` are sorted oldest first; ``personal_record`` is the
    heaviest set ever logged together with its reps and date.
    """

    exercise_id: str
    sessions: list[SessionData] = field(default_factory=list)
    personal_record: PersonalRecord = field(default_factory=PersonalRecord)


@dataclass(frozen=True)
class RuleSpec:
    """Reference to a registered progression rule plus its parameters."""

    rule_id: str
    params: tuple[tuple[str, float], ...] = ()

    def kwargs(self) -> dict[str, float]:
        return dict(self.params)


@dataclass(frozen=True)
class ProgressionPlan:
    """A named progression offering wrapping an ordered list of rules."""

    plan_id: str
    name: str
    description: str
    rules: tuple[RuleSpec, ...] = ()
    is_premium: bool = False


@dataclass
class WorkoutPlan:
    """
    Output of a generation strategy.

    ``progression_data`` maps exercise_id to a recommendation and is only
    present when a progression service was supplied.
    """

    exercises: list[Exercise]
    rest_days: int
    workout_type: WorkoutType
    intensity: Intensity
    target_muscle_groups: list[str] | None = None
    sub_type: WorkoutSubType | None = None
    progression_data: dict[str, ProgressionRecommendation] | None = None
    exercise_metadata: ExerciseMetadata | None = None

    def __post_init__(self) -> None:
        if self.rest_days < 0:
            raise ValueError("rest_days must be non-negative")
        if self.workout_type not in WORKOUT_TYPES:
            raise ValueError(f"Invalid workout_type: {self.workout_type}")
        if self.intensity not in INTENSITIES:
            raise ValueError(f"Invalid intensity: {self.intensity}")

    @property
    def main_exercises(self) -> list[Exercise]:
        if self.exercise_metadata is None:
            return list(self.exercises)
        return self.exercises[: self.exercise_metadata.main_exercise_count]

    def is_accessory(self, exercise_id: str) -> bool:
        if self.exercise_metadata is None:
            return False
        return self.exercise_metadata.label_for(exercise_id) is not None


@dataclass(frozen=True)
class RecentTypeWindow:
    """
    Most recently completed workout sub-types, newest first.

    Holds at most RECENT_TYPES_MAX entries.
    """

    types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.types) > RECENT_TYPES_MAX:
            raise ValueError(f"window holds at most {RECENT_TYPES_MAX} entries")
        for t in self.types:
            if t not in SUB_TYPES:
                raise ValueError(f"Invalid sub_type in window: {t}")

    def push(self, sub_type: str) -> "RecentTypeWindow":
        """Return a new window with ``sub_type`` prepended."""
        return replace(self, types=((sub_type,) + self.types)[:RECENT_TYPES_MAX])


@dataclass
class UserState:
    """
    Persisted per-user settings kept next to the workout history.
    """

    active_exercises: list[str] = field(default_factory=list)
    recent_types: RecentTypeWindow = field(default_factory=RecentTypeWindow)
    active_plan_id: str = "memory"
    is_premium: bool = False
    progression_enabled: bool = True
