"""
CLI entry point using Typer.

Provides commands for leveled calisthenics training:
- workout: Run a workout session over chosen categories
- levels: Show unlocked levels
- history: Show completed movements
- catalog: Show the progression ladders
- recommend: Ask for personalized advice

Command modules register themselves on the shared app when imported.
"""

import typer

from . import views
from .app import app
from .commands import advice, progress, workout


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Leveled calisthenics tracker. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return

    # ── Interactive main menu ───────────────────────────────────────────────
    views.console.print()
    views.console.print("[bold cyan]qapla[/bold cyan] · leveled calisthenics tracker")
    views.console.print()

    menu = {
        "1": ("workout",   "Start a workout"),
        "2": ("levels",    "Show unlocked levels"),
        "3": ("history",   "Show workout history"),
        "4": ("catalog",   "Browse progressions"),
        "5": ("recommend", "Get recommendations"),
        "0": ("quit",      "Quit"),
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

    if chosen == "workout":
        ctx.invoke(workout.workout)
    elif chosen == "levels":
        ctx.invoke(progress.levels)
    elif chosen == "history":
        ctx.invoke(progress.history)
    elif chosen == "catalog":
        ctx.invoke(progress.catalog)
    elif chosen == "recommend":
        ctx.invoke(advice.recommend)


if __name__ == "__main__":
    app()
