"""
Exercise catalog.

The static catalog ships as exercises.yaml inside the package.  Extra
exercises can be added in ~/.lift-rotation/exercises.yaml; an entry
whose exercise_id matches a bundled one is merged over it, so only the
changed keys need to be listed.

Usage:
    from lift_rotation.core.catalog import load_catalog
    catalog = load_catalog()
    squat = catalog.get_by_id("squat")
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Iterable

from .engine.config_loader import (
    deep_merge,
    get_bundled_path,
    get_user_path,
    load_user_yaml,
    load_yaml_file,
)
from .models import Exercise

_REQUIRED_FIELDS: frozenset[str] = frozenset({"exercise_id", "name"})
_LIST_FIELDS: tuple[str, ...] = ("categories", "tags", "muscle_groups", "equipment")


def exercise_from_dict(d: dict) -> Exercise:
    """Convert a raw dict (from YAML or JSON) to an Exercise.

    Raises ValueError if a required field is absent or a list field is
    not a list.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")

    lists: dict[str, tuple[str, ...]] = {}
    for key in _LIST_FIELDS:
        raw = d.get(key) or []
        if not isinstance(raw, (list, tuple)):
            raise ValueError(f"Exercise field '{key}' must be a list")
        lists[key] = tuple(str(v) for v in raw)

    return Exercise(
        exercise_id=str(d["exercise_id"]),
        name=str(d["name"]),
        description=str(d.get("description") or ""),
        categories=lists["categories"],
        tags=lists["tags"],
        muscle_groups=lists["muscle_groups"],
        equipment=lists["equipment"],
        category=d.get("category"),
        movement_type=d.get("movement_type"),
    )


def exercise_to_dict(exercise: Exercise) -> dict:
    d = {
        "exercise_id": exercise.exercise_id,
        "name": exercise.name,
        "description": exercise.description,
        "categories": list(exercise.categories),
        "tags": list(exercise.tags),
        "muscle_groups": list(exercise.muscle_groups),
        "equipment": list(exercise.equipment),
    }
    if exercise.category is not None:
        d["category"] = exercise.category
    if exercise.movement_type is not None:
        d["movement_type"] = exercise.movement_type
    return d


class ExerciseCatalog:
    """
    Read-only, in-memory exercise catalog.

    Lookups never mutate the catalog; results keep catalog order.
    """

    def __init__(self, exercises: Iterable[Exercise]):
        self._exercises: list[Exercise] = []
        self._by_id: dict[str, Exercise] = {}
        for ex in exercises:
            if ex.exercise_id in self._by_id:
                raise ValueError(f"Duplicate exercise_id in catalog: {ex.exercise_id}")
            self._by_id[ex.exercise_id] = ex
            self._exercises.append(ex)

    def __len__(self) -> int:
        return len(self._exercises)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._by_id

    def get_all(self) -> list[Exercise]:
        return list(self._exercises)

    def get_by_id(self, exercise_id: str) -> Exercise | None:
        return self._by_id.get(exercise_id)

    def get_by_muscle_group(self, groups: Iterable[str]) -> list[Exercise]:
        wanted = set(groups)
        return [ex for ex in self._exercises if any(g in wanted for g in ex.muscle_groups)]

    def search(self, term: str) -> list[Exercise]:
        """Case-insensitive match on name, description or categories."""
        needle = term.lower()
        return [
            ex
            for ex in self._exercises
            if needle in ex.name.lower()
            or needle in ex.description.lower()
            or any(needle in c.lower() for c in ex.categories)
        ]


def _entries(raw: dict) -> list[dict]:
    items = raw.get("exercises", [])
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def load_catalog(path: Path | None = None) -> ExerciseCatalog:
    """
    Load the catalog from YAML.

    Args:
        path: Catalog file to read instead of the bundled exercises.yaml.
            User additions are only merged into the bundled catalog.

    Raises:
        FileNotFoundError: If the catalog file does not exist
        ValueError: If the catalog contains duplicate ids
    """
    source = path if path is not None else get_bundled_path("exercises.yaml")
    if not source.exists():
        raise FileNotFoundError(f"Exercise catalog not found: {source}")

    raw_entries = _entries(load_yaml_file(source))
    merged: dict[str, dict] = {}
    for item in raw_entries:
        merged[str(item.get("exercise_id", f"<entry {len(merged)}>"))] = item

    user = get_user_path("exercises.yaml") if path is None else None
    if user is not None:
        user_entries = _entries(load_user_yaml(user))
        for item in user_entries:
            key = str(item.get("exercise_id", ""))
            merged[key] = deep_merge(merged.get(key, {}), item)

    exercises: list[Exercise] = []
    for key, item in merged.items():
        try:
            exercises.append(exercise_from_dict(item))
        except ValueError as exc:
            warnings.warn(f"lift-rotation: skipping exercise '{key}': {exc}", stacklevel=2)

    return ExerciseCatalog(exercises)
