"""
CLI entry point using Typer.

Provides commands for rotating workout generation:
- init: Initialize history and state
- exercises / activate / deactivate: Browse the catalog and pick exercises
- generate: Generate the next workout (full body, upper or lower body)
- switch / repropose: Swap an exercise of the open workout
- log-set / finish: Record sets and finish the open workout
- history / delete: Display logged workouts, completion stats and records; remove one
- plans / use-plan / upgrade / progression / recommend: Progression plans
"""

import typer

from ..core.models import SUB_TYPES
from . import views
from .app import app
from .commands import exercises, progression, workouts


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Rotating workout generator. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]lift-rotation[/bold cyan] - rotating workout generator")
    views.console.print()

    menu = {
        "1": ("generate", "Generate next workout"),
        "2": ("finish",   "Finish open workout"),
        "3": ("history",  "Show history"),
        "4": ("exercises", "Browse exercises"),
        "5": ("plans",    "Progression plans"),
        "i": ("init",     "Initialize"),
        "0": ("quit",     "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = {k: v[0] for k, v in menu.items()}.get(choice)
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "generate":
        sub_type = views.console.input(f"Type ({', '.join(SUB_TYPES)}) [full_body]: ").strip()
        ctx.invoke(workouts.generate, sub_type=sub_type or "full_body")
    elif chosen == "finish":
        ctx.invoke(workouts.finish)
    elif chosen == "history":
        ctx.invoke(workouts.history)
    elif chosen == "exercises":
        ctx.invoke(exercises.list_exercises)
    elif chosen == "plans":
        ctx.invoke(progression.plans)
    elif chosen == "init":
        ctx.invoke(workouts.init)


if __name__ == "__main__":
    app()
