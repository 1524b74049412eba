"""
JSONL-based workout history storage.

Handles reading, writing, and managing the workout history file and the
small per-user state file kept next to it.
"""

import json
import warnings
from pathlib import Path

from ..core.engine.config_loader import get_data_dir
from ..core.guard import record_workout
from ..core.models import UserState, Workout, WorkoutHistory
from .serializers import (
    ValidationError,
    dict_to_user_state,
    dict_to_workout,
    user_state_to_dict,
    workout_to_json_line,
)


class WorkoutStore:
    """
    Manages workouts stored in JSONL format.

    The history file contains one JSON workout object per line.  A
    separate state.json stores the active exercise set, the recent
    workout sub-types and the progression plan selection.

    Single writer per user: concurrent processes writing the same files
    can lose updates.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the workout store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)
        self.state_path = self.history_path.parent / "state.json"

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self, state: UserState | None = None) -> None:
        """
        Create the history file and state file if they don't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self.history_path.touch()

        if state is not None or not self.state_path.exists():
            self.save_state(state or UserState())

    # -- user state -------------------------------------------------------

    def load_state(self) -> UserState:
        """
        Load user state from state.json.

        Returns:
            UserState; defaults if the file does not exist

        Raises:
            ValidationError: If the file exists but is invalid
        """
        if not self.state_path.exists():
            return UserState()
        try:
            with open(self.state_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid state file {self.state_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Invalid state file {self.state_path}")
        return dict_to_user_state(data)

    def save_state(self, state: UserState) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.state_path, "w") as f:
            json.dump(user_state_to_dict(state), f, indent=2)

    # -- workouts ---------------------------------------------------------

    def load_history(self) -> WorkoutHistory:
        """
        Load all workouts from the history file.

        Lines that cannot be parsed are skipped with a warning.

        Returns:
            Mapping of workout_id to Workout, ordered by date

        Raises:
            FileNotFoundError: If history file doesn't exist
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        workouts: list[Workout] = []

        with open(self.history_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)
                    if not isinstance(data, dict):
                        raise ValidationError("expected a JSON object")
                    workouts.append(dict_to_workout(data))
                except (json.JSONDecodeError, ValidationError) as e:
                    warnings.warn(
                        f"lift-rotation: skipping line {line_num} in {self.history_path}: {e}",
                        stacklevel=2,
                    )

        # parse_timestamp already succeeded for every loaded workout
        workouts.sort(key=lambda w: w.timestamp() or 0.0)

        return {w.workout_id: w for w in workouts}

    def get_workout(self, workout_id: str) -> Workout | None:
        return self.load_history().get(workout_id)

    def save_workout(self, workout: Workout) -> None:
        """
        Insert a workout, or replace the stored workout with the same id.

        Raises:
            FileNotFoundError: If history file doesn't exist
        """
        history = self.load_history()
        history[workout.workout_id] = workout
        self._write_workouts(history.values())

    def complete_workout(self, workout_id: str) -> Workout:
        """
        Mark a workout finished and record its sub-type in the recent window.

        Completing an already completed workout changes nothing.

        Raises:
            KeyError: If no workout has this id
        """
        history = self.load_history()
        if workout_id not in history:
            raise KeyError(f"Workout not found: {workout_id}")

        workout = history[workout_id]
        if workout.completed:
            return workout

        workout.completed = True
        self._write_workouts(history.values())

        state = self.load_state()
        state.recent_types = record_workout(state.recent_types, workout)
        self.save_state(state)
        return workout

    def delete_workout(self, workout_id: str) -> None:
        """
        Delete a workout by id.

        Raises:
            KeyError: If no workout has this id
        """
        history = self.load_history()
        if workout_id not in history:
            raise KeyError(f"Workout not found: {workout_id}")
        del history[workout_id]
        self._write_workouts(history.values())

    def latest_open_workout(self) -> Workout | None:
        """Most recent workout that has not been finished, if any."""
        open_workouts = [w for w in self.load_history().values() if not w.completed]
        return open_workouts[-1] if open_workouts else None

    def _write_workouts(self, workouts) -> None:
        ordered = sorted(workouts, key=lambda w: w.timestamp() or 0.0)
        with open(self.history_path, "w") as f:
            for workout in ordered:
                f.write(workout_to_json_line(workout) + "\n")


def get_default_history_path() -> Path:
    """Default history file: ~/.lift-rotation/workouts.jsonl."""
    return get_data_dir() / "workouts.jsonl"
