"""Progression commands: plans, use-plan, upgrade, progression, recommend."""

import json
from typing import Annotated

import typer

from ...core.progression.registry import describe_rule
from ...core.progression.service import build_exercise_history
from ...io.serializers import recommendation_to_dict
from .. import views
from ..app import (
    HistoryPathOption,
    JsonOption,
    app,
    completed_history,
    get_catalog,
    get_progression_service,
    load_state,
    require_store,
)


@app.command()
def plans(
    history_path: HistoryPathOption = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show the rules behind each plan"),
    ] = False,
) -> None:
    """List the progression plans available to you."""
    store = require_store(history_path)
    service = get_progression_service(load_state(store))
    active = service.get_active_plan()

    views.print_plans(service.get_available_plans(), active.plan_id if active else None)
    if not service.is_progression_enabled():
        views.print_info("Progression is disabled; plans give no recommendations.")

    if verbose:
        for plan in service.get_available_plans():
            for spec in plan.rules:
                info = describe_rule(spec)
                params = ", ".join(f"{k}={v:g}" for k, v in spec.params)
                views.console.print(
                    f"[cyan]{plan.plan_id}[/cyan]: {info['name']}"
                    f"{f' ({params})' if params else ''}  [dim]{info['description']}[/dim]"
                )


@app.command("use-plan")
def use_plan(
    plan_id: Annotated[str, typer.Argument(help="Progression plan ID (see 'plans')")],
    history_path: HistoryPathOption = None,
) -> None:
    """Switch the active progression plan."""
    store = require_store(history_path)
    state = load_state(store)
    service = get_progression_service(state)

    service.set_active_plan(plan_id)
    active = service.get_active_plan()
    if active is None or active.plan_id != plan_id:
        plan = service.get_plan(plan_id)
        if plan is None:
            views.print_error(f"Unknown plan: {plan_id}")
        else:
            views.print_error(f"{plan.name} requires premium. Run 'upgrade' first.")
        raise typer.Exit(1)

    state.active_plan_id = active.plan_id
    store.save_state(state)
    views.print_success(f"Active plan: {active.name}")


@app.command()
def upgrade(history_path: HistoryPathOption = None) -> None:
    """Unlock premium progression plans."""
    store = require_store(history_path)
    state = load_state(store)
    if state.is_premium:
        views.print_info("Premium is already active.")
        return
    state.is_premium = True
    store.save_state(state)
    views.print_success("Premium plans unlocked.")


@app.command()
def progression(
    enable: Annotated[
        bool,
        typer.Option("--enable/--disable", help="Turn progression recommendations on or off"),
    ],
    history_path: HistoryPathOption = None,
) -> None:
    """Enable or disable progression recommendations."""
    store = require_store(history_path)
    state = load_state(store)
    state.progression_enabled = enable
    store.save_state(state)
    views.print_success(f"Progression {'enabled' if enable else 'disabled'}.")


@app.command()
def recommend(
    exercise_ids: Annotated[list[str], typer.Argument(help="Exercise IDs")],
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """Show the next weight / reps / sets and the personal record for exercises."""
    catalog = get_catalog()
    unknown = [ex_id for ex_id in exercise_ids if ex_id not in catalog]
    if unknown:
        views.print_error(f"Unknown exercise(s): {', '.join(unknown)}")
        raise typer.Exit(1)

    store = require_store(history_path)
    service = get_progression_service(load_state(store))
    history = completed_history(store)

    results = []
    for ex_id in exercise_ids:
        exercise = catalog.get_by_id(ex_id)
        rec = service.calculate_progression(exercise, history)
        record = build_exercise_history(ex_id, history).personal_record
        results.append((exercise, rec, record))

    if json_out:
        data = [recommendation_to_dict(ex.exercise_id, rec, record) for ex, rec, record in results]
        print(json.dumps(data, indent=2))
        return

    for exercise, rec, record in results:
        views.print_recommendation(exercise, rec, record)
