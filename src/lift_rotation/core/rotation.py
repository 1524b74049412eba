"""
Accessory rotation.

Full-body workouts get up to three accessories: one core exercise, one
upper-body isolation exercise and one lower-body isolation exercise.
The upper and lower slots each cycle through three muscle sub-groups,
and every pool is walked round-robin, so repeated workouts spread the
accessory work evenly.

The cursors live in a RotationState that is loaded from a store before
each selection and saved straight after it.  ``rotate_accessories`` is
the pure step; ``AccessoryRotationPolicy`` wraps it with the store I/O.
"""

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from .config import LOWER_NAME_HINTS, LOWER_SUB_GROUPS, UPPER_NAME_HINTS, UPPER_SUB_GROUPS
from .models import AccessorySlot, Exercise, RotationState


class RotationStateStore(Protocol):
    """Persistence for rotation cursors.  A missing state loads as all zeros."""

    def load(self) -> RotationState: ...

    def save(self, state: RotationState) -> None: ...


class InMemoryRotationStore:
    """RotationStateStore kept in memory; used by tests and one-off runs."""

    def __init__(self, state: RotationState | None = None):
        self.state = state or RotationState()
        self.saves = 0

    def load(self) -> RotationState:
        return self.state

    def save(self, state: RotationState) -> None:
        self.state = state
        self.saves += 1


@dataclass
class AccessoryCategories:
    """Accessory pools partitioned by region and muscle sub-group."""

    core: list[Exercise] = field(default_factory=list)
    upper: dict[str, list[Exercise]] = field(
        default_factory=lambda: {g: [] for g in UPPER_SUB_GROUPS}
    )
    lower: dict[str, list[Exercise]] = field(
        default_factory=lambda: {g: [] for g in LOWER_SUB_GROUPS}
    )

    def pool_for(self, label: str) -> list[Exercise]:
        """Pool behind an accessory label such as ``Core`` or ``Biceps``; [] if unknown."""
        key = label.lower()
        if key == "core":
            return self.core
        return self.upper.get(key) or self.lower.get(key) or []


def _classify(exercise: Exercise, hints: dict[str, tuple[str, ...]]) -> str | None:
    """First sub-group whose tag or any name fragment matches."""
    name = exercise.name.lower()
    for group, fragments in hints.items():
        if exercise.has_tag(group) or any(f in name for f in fragments):
            return group
    return None


def categorize_accessories(exercises: Iterable[Exercise]) -> AccessoryCategories:
    """
    Partition exercises into accessory pools.

    - core: tagged ``core``
    - upper sub-groups: tagged ``isolation`` and ``upper_body``
    - lower sub-groups: tagged ``isolation`` and ``lower_body``

    An exercise can land in core and in one upper/lower sub-group, but
    never in two sub-groups of the same region.
    """
    categories = AccessoryCategories()

    for exercise in exercises:
        if exercise.has_tag("core"):
            categories.core.append(exercise)

        if exercise.has_tag("isolation") and exercise.has_tag("upper_body"):
            group = _classify(exercise, UPPER_NAME_HINTS)
            if group is not None:
                categories.upper[group].append(exercise)

        if exercise.has_tag("isolation") and exercise.has_tag("lower_body"):
            group = _classify(exercise, LOWER_NAME_HINTS)
            if group is not None:
                categories.lower[group].append(exercise)

    return categories


def _label(group: str) -> str:
    return group.capitalize()


def rotate_accessories(
    state: RotationState,
    categories: AccessoryCategories,
) -> tuple[list[AccessorySlot], RotationState]:
    """
    One rotation step.

    Picks the current core exercise, then the current upper and lower
    sub-group's exercise, and returns them with the advanced state.
    Every cursor moves one step even when its pool is empty.

    Returns:
        (selected slots in core/upper/lower order, next RotationState)
    """
    slots: list[AccessorySlot] = []

    core_pool = categories.core
    if core_pool:
        slots.append(AccessorySlot(core_pool[state.core_index % len(core_pool)], "Core"))

    upper_group = UPPER_SUB_GROUPS[state.upper_type_index % len(UPPER_SUB_GROUPS)]
    upper_pool = categories.upper[upper_group]
    if upper_pool:
        slots.append(
            AccessorySlot(
                upper_pool[state.upper_index % len(upper_pool)],
                f"Upper ({_label(upper_group)})",
            )
        )

    lower_group = LOWER_SUB_GROUPS[state.lower_type_index % len(LOWER_SUB_GROUPS)]
    lower_pool = categories.lower[lower_group]
    if lower_pool:
        slots.append(
            AccessorySlot(
                lower_pool[state.lower_index % len(lower_pool)],
                f"Lower ({_label(lower_group)})",
            )
        )

    next_state = RotationState(
        core_index=(state.core_index + 1) % max(1, len(core_pool)),
        upper_index=(state.upper_index + 1) % max(1, len(upper_pool)),
        upper_type_index=(state.upper_type_index + 1) % len(UPPER_SUB_GROUPS),
        lower_index=(state.lower_index + 1) % max(1, len(lower_pool)),
        lower_type_index=(state.lower_type_index + 1) % len(LOWER_SUB_GROUPS),
    )
    return slots, next_state


class AccessoryRotationPolicy:
    """
    Stateful accessory selector backed by a RotationStateStore.

    Not safe for concurrent use on the same store: callers serialize
    generation requests per user.
    """

    def __init__(self, store: RotationStateStore | None = None):
        self.store = store if store is not None else InMemoryRotationStore()

    def select_accessory_slots(self, active_exercises: Iterable[Exercise]) -> list[AccessorySlot]:
        """Select labelled accessories and persist the advanced cursors."""
        categories = categorize_accessories(active_exercises)
        state = self.store.load()
        slots, next_state = rotate_accessories(state, categories)
        self.store.save(next_state)
        return slots

    def select_accessories(self, active_exercises: Iterable[Exercise]) -> list[Exercise]:
        """Select 0-3 accessories (core, upper, lower) for the next workout."""
        return [slot.exercise for slot in self.select_accessory_slots(active_exercises)]

    def current_accessory_types(self) -> dict[str, str]:
        """Display names of the upper/lower sub-groups the next call will use."""
        state = self.store.load()
        return {
            "upper": _label(UPPER_SUB_GROUPS[state.upper_type_index % len(UPPER_SUB_GROUPS)]),
            "lower": _label(LOWER_SUB_GROUPS[state.lower_type_index % len(LOWER_SUB_GROUPS)]),
        }
