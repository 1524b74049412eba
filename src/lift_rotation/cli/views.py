"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of catalog, plans and workouts.
"""

from rich.console import Console
from rich.table import Table

from ..core.history_stats import CompletionStats
from ..core.models import (
    Exercise,
    PersonalRecord,
    ProgressionPlan,
    ProgressionRecommendation,
    Workout,
    WorkoutHistory,
    WorkoutPlan,
)

console = Console()


def _fmt_weight(weight: float) -> str:
    return f"{weight:g} kg" if weight > 0 else "-"


def format_exercise_table(exercises: list[Exercise], active: set[str] | None = None) -> Table:
    """
    Format catalog exercises as a Rich table.

    Args:
        exercises: Exercises to display
        active: Ids of the user's active exercises; marks them with a tick

    Returns:
        Rich Table object
    """
    table = Table(title="Exercises", show_header=True, header_style="bold")
    if active is not None:
        table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Categories", style="magenta")
    table.add_column("Tags", style="dim")

    for ex in exercises:
        row = [ex.exercise_id, ex.name, ", ".join(ex.categories), ", ".join(ex.tags)]
        if active is not None:
            row.insert(0, "[green]✓[/green]" if ex.exercise_id in active else "")
        table.add_row(*row)

    return table


def print_exercises(exercises: list[Exercise], active: set[str] | None = None) -> None:
    if not exercises:
        console.print("[yellow]No exercises found.[/yellow]")
        return
    console.print(format_exercise_table(exercises, active))


def format_plan_table(plan: WorkoutPlan) -> Table:
    """
    Format a generated plan, one row per exercise.

    Main movements come first; accessories show their rotation slot.
    """
    title = f"Workout Plan ({(plan.sub_type or plan.workout_type).replace('_', ' ')})"
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Slot", style="magenta")
    table.add_column("Sets", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Notes", style="dim")

    progression = plan.progression_data or {}
    metadata = plan.exercise_metadata

    for i, ex in enumerate(plan.exercises, 1):
        label = metadata.label_for(ex.exercise_id) if metadata is not None else None
        rec = progression.get(ex.exercise_id)
        table.add_row(
            str(i),
            ex.name,
            label or "Main",
            str(rec.sets) if rec is not None and rec.sets else "-",
            _fmt_weight(rec.weight) if rec is not None else "-",
            str(rec.reps) if rec is not None and rec.reps else "-",
            (rec.notes or "") if rec is not None else "",
        )

    return table


def print_plan(plan: WorkoutPlan) -> None:
    if not plan.exercises:
        console.print("[yellow]No exercises could be selected. Activate more exercises.[/yellow]")
        return
    console.print(format_plan_table(plan))
    console.print(
        f"[dim]Rest days: {plan.rest_days}  Intensity: {plan.intensity}  "
        f"Targets: {', '.join(plan.target_muscle_groups or [])}[/dim]"
    )


def print_workout(workout: Workout) -> None:
    """Print one workout with all sets."""
    status = "[green]done[/green]" if workout.completed else "[yellow]open[/yellow]"
    sub_type = (workout.sub_type or workout.workout_type).replace("_", " ")
    console.print(f"[bold]{workout.workout_id}[/bold]  {workout.date}  {sub_type}  {status}")

    table = Table(show_header=True, header_style="dim")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Sets")

    for i, entry in enumerate(workout.exercises, 1):
        sets = "  ".join(
            f"{'✓' if s.completed else '·'} {s.weight:g}×{s.reps}" for s in entry.sets
        )
        kind = entry.accessory_category or entry.exercise_type
        table.add_row(str(i), entry.exercise.name, kind, sets or "-")

    console.print(table)


def print_history(history: WorkoutHistory) -> None:
    """
    Print workout history to console.

    Args:
        history: Workouts to display
    """
    if not history:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    table = Table(title="Workout History", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Exercises")
    table.add_column("Sets done", justify="right")
    table.add_column("Status")

    for workout in history.values():
        done = sum(1 for e in workout.exercises for s in e.sets if s.completed)
        total = sum(len(e.sets) for e in workout.exercises)
        table.add_row(
            workout.workout_id,
            workout.date,
            (workout.sub_type or workout.workout_type).replace("_", " "),
            ", ".join(e.exercise.name for e in workout.exercises),
            f"{done}/{total}",
            "done" if workout.completed else "open",
        )

    console.print(table)


def print_plans(plans: list[ProgressionPlan], active_id: str | None) -> None:
    table = Table(title="Progression Plans", show_header=True, header_style="bold")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description", style="dim")
    table.add_column("Tier")

    for plan in plans:
        table.add_row(
            "[green]●[/green]" if plan.plan_id == active_id else "",
            plan.plan_id,
            plan.name,
            plan.description,
            "premium" if plan.is_premium else "free",
        )

    console.print(table)


def print_recommendation(
    exercise: Exercise,
    rec: ProgressionRecommendation,
    record: PersonalRecord | None = None,
) -> None:
    sets = f" × {rec.sets} sets" if rec.sets else ""
    console.print(
        f"[bold cyan]{exercise.name}[/bold cyan]: {_fmt_weight(rec.weight)} × {rec.reps} reps{sets}"
        f"  [dim](confidence {rec.confidence:.0%})[/dim]"
    )
    if rec.notes:
        console.print(f"  [dim]{rec.notes}[/dim]")
    if record is not None and record.weight > 0:
        console.print(
            f"  [yellow]PR: {record.weight:g} kg × {record.reps} ({record.date[:10]})[/yellow]"
        )


def print_completion_stats(title: str, stats: dict[str, CompletionStats]) -> None:
    """Completion rate table, one row per workout type or sub-type."""
    if not stats:
        console.print(f"[yellow]{title}: no workouts recorded yet.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Type", style="magenta")
    table.add_column("Workouts", justify="right")
    table.add_column("Finished", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Last", style="cyan")

    for group, s in stats.items():
        table.add_row(
            group.replace("_", " "),
            str(s.total),
            str(s.completed),
            f"{s.completion_rate:.0%}",
            s.last_date[:10],
        )

    console.print(table)


def print_personal_records(records: dict[str, PersonalRecord], names: dict[str, str]) -> None:
    if not records:
        console.print("[yellow]No personal records yet.[/yellow]")
        return

    table = Table(title="Personal Records", show_header=True, header_style="bold")
    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Date")

    for ex_id, record in records.items():
        table.add_row(
            names.get(ex_id, ex_id), _fmt_weight(record.weight), str(record.reps), record.date[:10]
        )

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
