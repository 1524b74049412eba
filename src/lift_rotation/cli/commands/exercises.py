"""Catalog commands: exercises, activate, deactivate."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import exercise_to_dict
from ...core.selection import filter_active, filter_by_category
from .. import views
from ..app import (
    HistoryPathOption,
    JsonOption,
    active_ids,
    app,
    get_catalog,
    load_state,
    require_store,
)


@app.command("exercises")
def list_exercises(
    history_path: HistoryPathOption = None,
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Case-insensitive name/description/category match"),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Only exercises in this category"),
    ] = None,
    active_only: Annotated[
        bool,
        typer.Option("--active", "-a", help="Only the exercises you activated"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    List or search the exercise catalog.

    Active exercises are marked with a tick.  With no active selection
    every catalog exercise is used for generation.
    """
    catalog = get_catalog()
    exercises = catalog.search(search) if search else catalog.get_all()
    if category:
        exercises = filter_by_category(exercises, [category])

    store = require_store(history_path)
    state = load_state(store)
    active = set(state.active_exercises)
    if active_only:
        exercises = filter_active(exercises, active_ids(state))

    if json_out:
        print(json.dumps([exercise_to_dict(ex) for ex in exercises], indent=2))
        return

    views.print_exercises(exercises, active)


@app.command()
def activate(
    exercise_ids: Annotated[list[str], typer.Argument(help="Exercise IDs to activate")],
    history_path: HistoryPathOption = None,
) -> None:
    """Add exercises to your active set."""
    catalog = get_catalog()
    unknown = [ex_id for ex_id in exercise_ids if ex_id not in catalog]
    if unknown:
        views.print_error(f"Unknown exercise(s): {', '.join(unknown)}")
        raise typer.Exit(1)

    store = require_store(history_path)
    state = load_state(store)
    for ex_id in exercise_ids:
        if ex_id not in state.active_exercises:
            state.active_exercises.append(ex_id)
    store.save_state(state)
    views.print_success(f"Active exercises: {len(state.active_exercises)}")


@app.command()
def deactivate(
    exercise_ids: Annotated[list[str], typer.Argument(help="Exercise IDs to deactivate")],
    history_path: HistoryPathOption = None,
) -> None:
    """Remove exercises from your active set."""
    store = require_store(history_path)
    state = load_state(store)
    missing = [ex_id for ex_id in exercise_ids if ex_id not in state.active_exercises]
    if missing:
        views.print_warning(f"Not active: {', '.join(missing)}")

    state.active_exercises = [ex_id for ex_id in state.active_exercises if ex_id not in exercise_ids]
    store.save_state(state)
    if state.active_exercises:
        views.print_success(f"Active exercises: {len(state.active_exercises)}")
    else:
        views.print_info("No active exercises; the whole catalog will be used.")
