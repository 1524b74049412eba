"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.catalog import ExerciseCatalog, load_catalog
from ..core.engine.config_loader import load_model_config
from ..core.models import UserState, WorkoutHistory
from ..core.progression.service import ProgressionService
from ..core.rotation import AccessoryRotationPolicy
from ..io.history_store import WorkoutStore, get_default_history_path
from ..io.rotation_store import JsonRotationStore, get_rotation_path
from ..io.serializers import ValidationError
from . import views

# Shared --history-path option type used across all commands
HistoryPathOption = Annotated[
    Optional[Path],
    typer.Option("--history-path", "-p", help="Path to workouts JSONL file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-rotation",
    help="Rotating workout generator with accessory rotation and simple progression.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(history_path: Path | None) -> WorkoutStore:
    """Get workout store from path or default location."""
    if history_path is None:
        history_path = get_default_history_path()
    return WorkoutStore(history_path)


def require_store(history_path: Path | None) -> WorkoutStore:
    """Workout store that must already be initialised; exits otherwise."""
    store = get_store(history_path)
    if not store.exists():
        views.print_error(f"History file not found: {store.history_path}")
        views.print_info("Run 'init' first to create history and state.")
        raise typer.Exit(1)
    return store


def get_catalog() -> ExerciseCatalog:
    return load_catalog()


def get_rotation_policy(store: WorkoutStore) -> AccessoryRotationPolicy:
    return AccessoryRotationPolicy(JsonRotationStore(get_rotation_path(store.history_path)))


def get_progression_service(state: UserState) -> ProgressionService:
    """Progression service configured from settings and the saved user state."""
    service = ProgressionService(is_premium=state.is_premium, settings=load_model_config())
    service.set_active_plan(state.active_plan_id)
    service.set_progression_enabled(state.progression_enabled)
    return service


def active_ids(state: UserState) -> list[str] | None:
    """Active exercise ids, or None (every catalog exercise) when none were chosen."""
    return list(state.active_exercises) or None


def completed_history(store: WorkoutStore) -> WorkoutHistory:
    """Finished workouts only; unfinished ones hold prefilled, unperformed sets."""
    return {k: w for k, w in store.load_history().items() if w.completed}


def load_state(store: WorkoutStore) -> UserState:
    """User state, or a red error and exit when state.json is corrupt."""
    try:
        return store.load_state()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
