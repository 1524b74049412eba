"""Workout commands: init, generate, switch, repropose, log-set, finish, history, delete."""

import json
import random
from typing import Annotated, Optional

import typer

from ...core.config import FULL_BODY_CATEGORIES
from ...core.engine.config_loader import default_set_count, load_model_config
from ...core.generator import (
    STRATEGY_REGISTRY,
    CruiseModeStrategy,
    GeneratorOptions,
    get_strategy,
    plan_to_workout,
)
from ...core.guard import consecutive_message
from ...core.history_stats import completion_stats, personal_records
from ...core.models import (
    SUB_TYPES,
    Exercise,
    ExerciseEntry,
    SetRecord,
    UserState,
    Workout,
    WorkoutHistory,
)
from ...core.rotation import AccessoryRotationPolicy, InMemoryRotationStore
from ...core.selection import filter_active
from ...io.history_store import WorkoutStore
from ...io.serializers import (
    ValidationError,
    completion_stats_to_dict,
    personal_record_to_dict,
    workout_to_dict,
)
from .. import views
from ..app import (
    HistoryPathOption,
    JsonOption,
    active_ids,
    app,
    completed_history,
    get_catalog,
    get_progression_service,
    get_rotation_policy,
    get_store,
    load_state,
    require_store,
)

SeedOption = Annotated[
    Optional[int],
    typer.Option("--seed", help="Seed for random fallbacks (repeatable output)"),
]

WorkoutIdOption = Annotated[
    Optional[str],
    typer.Option("--workout", "-w", help="Workout ID (default: latest unfinished workout)"),
]


def _rng(seed: int | None) -> random.Random | None:
    return random.Random(seed) if seed is not None else None


def _open_workout(store: WorkoutStore, workout_id: str | None) -> Workout:
    """Resolve the workout to edit; exits when it is missing or already finished."""
    workout = store.get_workout(workout_id) if workout_id else store.latest_open_workout()
    if workout is None:
        if workout_id:
            views.print_error(f"Workout not found: {workout_id}")
        else:
            views.print_error("No unfinished workout. Run 'generate' first.")
        raise typer.Exit(1)
    if workout.completed:
        views.print_error(f"Workout {workout.workout_id} is already finished.")
        raise typer.Exit(1)
    return workout


def _find_entry(workout: Workout, exercise_id: str) -> tuple[int, ExerciseEntry]:
    for i, entry in enumerate(workout.exercises):
        if entry.exercise.exercise_id == exercise_id:
            return i, entry
    views.print_error(f"{exercise_id} is not part of workout {workout.workout_id}")
    raise typer.Exit(1)


def _movement_pattern(entry: ExerciseEntry) -> str:
    for category in FULL_BODY_CATEGORIES:
        if entry.exercise.has_category(category):
            return category
    views.print_error(f"{entry.exercise.name} has no movement pattern.")
    raise typer.Exit(1)


def _candidates(workout: Workout, keep: Exercise, state: UserState) -> list[Exercise]:
    """Active exercises not already in ``workout``; ``keep`` stays eligible."""
    taken = {e.exercise.exercise_id for e in workout.exercises} - {keep.exercise_id}
    available = filter_active(get_catalog().get_all(), active_ids(state))
    return [ex for ex in available if ex.exercise_id not in taken]


def _replace_entry(
    store: WorkoutStore,
    workout: Workout,
    index: int,
    replacement: Exercise,
    history: WorkoutHistory,
) -> None:
    """Swap in ``replacement`` with freshly recommended sets and save."""
    state = load_state(store)
    service = get_progression_service(state)
    rec = service.calculate_progression(replacement, history)
    set_count = rec.sets or default_set_count(load_model_config())
    old = workout.exercises[index]
    workout.exercises[index] = ExerciseEntry(
        exercise=replacement,
        sets=[SetRecord(weight=rec.weight, reps=rec.reps) for _ in range(set_count)],
        progression_notes=rec.notes,
        exercise_type=old.exercise_type,
        accessory_category=old.accessory_category,
    )
    metadata = workout.exercise_metadata
    if metadata is not None and old.exercise_type == "accessory":
        metadata.accessories = [
            (replacement.exercise_id if ex_id == old.exercise.exercise_id else ex_id, label)
            for ex_id, label in metadata.accessories
        ]
    store.save_workout(workout)
    views.print_workout(workout)


@app.command()
def init(
    history_path: HistoryPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset state (active exercises, plan) if it exists"),
    ] = False,
) -> None:
    """
    Initialize the workout history and state files.

    Existing history is never touched; --force only resets state.json.
    """
    store = get_store(history_path)
    if store.exists() and not force:
        views.print_info(f"Already initialized: {store.history_path}")
        return

    store.init(UserState() if force else None)
    views.print_success(f"Initialized history at {store.history_path}")
    views.print_info("Activate exercises with 'activate', or generate with the whole catalog.")


@app.command()
def generate(
    history_path: HistoryPathOption = None,
    sub_type: Annotated[
        str,
        typer.Option("--type", "-t", help="full_body, upper_body or lower_body"),
    ] = "full_body",
    strategy_id: Annotated[
        str,
        typer.Option("--strategy", help="Generation strategy: cruise_mode, strength, endurance"),
    ] = "cruise_mode",
    muscles: Annotated[
        Optional[list[str]],
        typer.Option("--muscle", "-m", help="Target muscle group (repeatable)"),
    ] = None,
    seed: SeedOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Ignore the consecutive workout-type check"),
    ] = False,
    no_save: Annotated[
        bool,
        typer.Option("--no-save", help="Only show the plan; do not store a workout"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Generate the next workout and store it as an unfinished workout.

    Cruise Mode picks the least recently trained exercise per movement
    pattern and rotates core / upper / lower accessories on full body days.
    """
    if sub_type not in SUB_TYPES:
        views.print_error(f"Invalid type: {sub_type}. Must be one of {', '.join(SUB_TYPES)}")
        raise typer.Exit(1)
    if strategy_id not in STRATEGY_REGISTRY:
        views.print_error(f"Unknown strategy: {strategy_id}. Valid: {', '.join(STRATEGY_REGISTRY)}")
        raise typer.Exit(1)

    store = require_store(history_path)
    state = load_state(store)

    if strategy_id == CruiseModeStrategy.strategy_id and not force:
        message = consecutive_message(state.recent_types, sub_type)
        if message is not None:
            views.print_warning(message)
            raise typer.Exit(1)

    history = completed_history(store)
    rotation_policy = get_rotation_policy(store)
    strategy = get_strategy(strategy_id)

    options = GeneratorOptions(
        history=history,
        active_exercises=active_ids(state),
        sub_type=sub_type,
        target_muscle_groups=muscles or None,
        progression_service=get_progression_service(state),
        rotation_policy=rotation_policy,
        rng=_rng(seed),
    )
    try:
        if no_save:
            options.rotation_policy = AccessoryRotationPolicy(
                InMemoryRotationStore(rotation_policy.store.load())
            )
        plan = strategy.generate(get_catalog().get_all(), options)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    workout = plan_to_workout(plan, default_sets=default_set_count(load_model_config()))

    if not no_save and plan.exercises:
        store.save_workout(workout)

    if json_out:
        print(json.dumps(workout_to_dict(workout), indent=2))
        return

    views.print_plan(plan)
    if not no_save and plan.exercises:
        views.print_success(f"Saved workout {workout.workout_id}")


@app.command()
def switch(
    exercise_id: Annotated[str, typer.Argument(help="Exercise to switch out")],
    history_path: HistoryPathOption = None,
    workout_id: WorkoutIdOption = None,
    seed: SeedOption = None,
) -> None:
    """
    Swap an exercise of the open workout.

    A main exercise alternates with the other least recently used one of
    its movement pattern; an accessory moves on within its rotation
    sub-group.  Exercises already in the workout are never proposed.
    """
    store = require_store(history_path)
    workout = _open_workout(store, workout_id)
    index, entry = _find_entry(workout, exercise_id)

    state = load_state(store)
    available = _candidates(workout, entry.exercise, state)
    history = completed_history(store)
    strategy = CruiseModeStrategy()

    if entry.exercise_type == "accessory":
        if entry.accessory_category is None:
            views.print_error(f"{entry.exercise.name} has no rotation sub-group.")
            raise typer.Exit(1)
        replacement = strategy.switch_accessory(
            entry.exercise, entry.accessory_category, available, history
        )
    else:
        category = _movement_pattern(entry)
        replacement = strategy.switch_exercise(
            entry.exercise, category, available, history, _rng(seed)
        )

    if replacement is None or replacement.exercise_id == entry.exercise.exercise_id:
        views.print_info(f"No alternative for {entry.exercise.name}.")
        return
    _replace_entry(store, workout, index, replacement, history)


@app.command()
def repropose(
    exercise_id: Annotated[str, typer.Argument(help="Main exercise to replace")],
    history_path: HistoryPathOption = None,
    workout_id: WorkoutIdOption = None,
    seed: SeedOption = None,
) -> None:
    """Replace a main exercise with a random one of the same pattern."""
    store = require_store(history_path)
    workout = _open_workout(store, workout_id)
    index, entry = _find_entry(workout, exercise_id)
    if entry.exercise_type != "main":
        views.print_error("Only main exercises can be reproposed; use 'switch' for accessories.")
        raise typer.Exit(1)
    category = _movement_pattern(entry)

    state = load_state(store)
    available = _candidates(workout, entry.exercise, state)

    replacement = CruiseModeStrategy().repropose_exercise(
        entry.exercise, category, available, _rng(seed)
    )
    if replacement is None:
        views.print_info(f"No alternative for {entry.exercise.name}.")
        return
    history = completed_history(store)
    _replace_entry(store, workout, index, replacement, history)


@app.command("log-set")
def log_set(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID within the workout")],
    set_number: Annotated[int, typer.Argument(help="Set number (1-based); one past the last adds a set")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight in kg")] = 0.0,
    reps: Annotated[int, typer.Option("--reps", "-r", help="Repetitions performed")] = 0,
    failed: Annotated[
        bool,
        typer.Option("--failed", help="Record the set as not completed"),
    ] = False,
    history_path: HistoryPathOption = None,
    workout_id: Annotated[
        Optional[str],
        typer.Option("--workout", help="Workout ID (default: latest unfinished workout)"),
    ] = None,
) -> None:
    """Record weight and reps for one set of an unfinished workout."""
    if weight < 0 or reps < 0:
        views.print_error("Weight and reps must be non-negative.")
        raise typer.Exit(1)

    store = require_store(history_path)
    workout = _open_workout(store, workout_id)
    entry = workout.entry_for(exercise_id)
    if entry is None:
        views.print_error(f"{exercise_id} is not part of workout {workout.workout_id}")
        raise typer.Exit(1)

    record = SetRecord(weight=weight, reps=reps, completed=not failed)
    if 1 <= set_number <= len(entry.sets):
        entry.sets[set_number - 1] = record
    elif set_number == len(entry.sets) + 1:
        entry.sets.append(record)
    else:
        views.print_error(f"Set number must be between 1 and {len(entry.sets) + 1}")
        raise typer.Exit(1)

    store.save_workout(workout)
    views.print_success(f"{entry.exercise.name} set {set_number}: {weight:g} kg × {reps}")


@app.command()
def finish(
    history_path: HistoryPathOption = None,
    workout_id: Annotated[
        Optional[str],
        typer.Option("--workout", "-w", help="Workout ID (default: latest unfinished workout)"),
    ] = None,
) -> None:
    """Mark a workout as finished; it then counts for recency and progression."""
    store = require_store(history_path)
    workout = _open_workout(store, workout_id)
    store.complete_workout(workout.workout_id)
    views.print_success(f"Finished workout {workout.workout_id}")


@app.command()
def history(
    history_path: HistoryPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the most recent N workouts"),
    ] = None,
    workout_id: Annotated[
        Optional[str],
        typer.Option("--workout", "-w", help="Show one workout with all sets"),
    ] = None,
    stats: Annotated[
        bool,
        typer.Option("--stats", "-s", help="Completion rates per type and personal records"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """Display logged workouts."""
    store = require_store(history_path)
    workouts = store.load_history()

    if stats:
        _show_stats(workouts, json_out)
        return

    if workout_id is not None:
        workout = workouts.get(workout_id)
        if workout is None:
            views.print_error(f"Workout not found: {workout_id}")
            raise typer.Exit(1)
        if json_out:
            print(json.dumps(workout_to_dict(workout), indent=2))
        else:
            views.print_workout(workout)
        return

    if limit is not None and limit > 0:
        workouts = dict(list(workouts.items())[-limit:])

    if json_out:
        print(json.dumps([workout_to_dict(w) for w in workouts.values()], indent=2))
        return

    views.print_history(workouts)


def _show_stats(workouts: WorkoutHistory, json_out: bool) -> None:
    by_type = completion_stats(workouts, "workout_type")
    by_sub_type = completion_stats(workouts, "sub_type")
    # records only count finished workouts, like recommendations
    records = personal_records({k: w for k, w in workouts.items() if w.completed})

    if json_out:
        payload = {
            "by_type": {k: completion_stats_to_dict(v) for k, v in by_type.items()},
            "by_sub_type": {k: completion_stats_to_dict(v) for k, v in by_sub_type.items()},
            "personal_records": {k: personal_record_to_dict(v) for k, v in records.items()},
        }
        print(json.dumps(payload, indent=2))
        return

    names = {
        e.exercise.exercise_id: e.exercise.name for w in workouts.values() for e in w.exercises
    }
    views.print_completion_stats("By workout type", by_type)
    views.print_completion_stats("By sub-type", by_sub_type)
    views.print_personal_records(records, names)


@app.command()
def delete(
    workout_id: Annotated[str, typer.Argument(help="Workout ID to delete (see 'history')")],
    history_path: HistoryPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Remove a workout by its ID.

    The recent-type window used by the consecutive-type check is not
    rewound.
    """
    store = require_store(history_path)
    target = store.get_workout(workout_id)
    if target is None:
        views.print_error(f"Workout not found: {workout_id}")
        raise typer.Exit(1)

    label = (target.sub_type or target.workout_type).replace("_", " ")
    views.console.print(f"Workout to delete: [bold]{target.date}[/bold] ({label})")

    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_workout(workout_id)
    views.print_success(f"Deleted workout {workout_id}")
