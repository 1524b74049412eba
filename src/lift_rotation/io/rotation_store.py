"""
JSON file storage for accessory rotation cursors.

A missing file loads as all-zero cursors.  Unreadable or corrupt files
raise so that rotation state is never silently reset.
"""

import json
from pathlib import Path

from ..core.models import RotationState
from .serializers import ValidationError, dict_to_rotation_state, rotation_state_to_dict


class JsonRotationStore:
    """RotationStateStore backed by a small JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> RotationState:
        """
        Load rotation cursors.

        Raises:
            ValidationError: If the file exists but is not a valid state
            OSError: If the file exists but cannot be read
        """
        if not self.path.exists():
            return RotationState()
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid rotation state in {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Invalid rotation state in {self.path}")
        return dict_to_rotation_state(data)

    def save(self, state: RotationState) -> None:
        """
        Persist rotation cursors.

        Raises:
            OSError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(rotation_state_to_dict(state), f, indent=2)


def get_rotation_path(history_path: Path) -> Path:
    """Rotation state lives next to the history file."""
    return history_path.parent / "rotation.json"
