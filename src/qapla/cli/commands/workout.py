"""Workout command: run a session over one or more categories interactively."""

import time
from typing import Annotated, Optional

import typer
from rich.markup import escape

from ...core.catalog import CATEGORY_IDS, all_categories, category_by_id, category_by_name
from ...core.session import MovementTracker, SessionEngine
from ...core.timer import format_clock, run_timer
from ...io.serializers import WorkoutValidationError
from .. import views
from ..app import DataDirOption, app, get_stores

ACTIONS_REPS = "[number] reps · [l]og wave · [u]p · [d]own · [p]ick · [f]inish · [q]uit"
ACTIONS_HOLD = "[number] seconds · [t]imer · [l]og wave · [u]p · [d]own · [p]ick · [f]inish · [q]uit"


def _resolve_category(token: str) -> str | None:
    """Map a category id, name or menu number to a category id."""
    token = token.strip()
    if token.isdigit():
        idx = int(token) - 1
        categories = all_categories()
        return categories[idx].id if 0 <= idx < len(categories) else None
    category = category_by_id(token.lower()) or category_by_name(token)
    return category.id if category is not None else None


def _prompt_categories() -> list[str]:
    """Ask which categories to train; returns ids in the order given."""
    views.console.print("[bold]Select movement categories[/bold] (e.g. 1,3 or push,core):")
    for i, category in enumerate(all_categories(), 1):
        views.console.print(f"  \\[{i}] {category.icon} {category.name}")
    raw = views.console.input("Categories: ").strip()
    return [t for t in raw.replace(" ", ",").split(",") if t]


def _run_hold_timer(tracker: MovementTracker) -> None:
    """Count the hold up until Ctrl+C, showing the clock as it runs."""
    target = tracker.target_duration or 0
    views.print_info("Timer running. Press Ctrl+C to stop.")
    tracker.toggle_timer()
    with views.console.status(format_clock(tracker.elapsed_seconds)) as status:

        def _sleep(seconds: float) -> None:
            label = format_clock(tracker.elapsed_seconds)
            if target:
                label += f" / {format_clock(target)}"
            status.update(label)
            time.sleep(seconds)

        run_timer(tracker.timer, sleep=_sleep)
    views.print_info(f"Hold time: {format_clock(tracker.elapsed_seconds)}")


def _pick_exercise(tracker: MovementTracker) -> None:
    options = tracker.selectable_exercises()
    for i, m in enumerate(options, 1):
        marker = " [dim](warm-up)[/dim]" if m.is_warmup else ""
        views.console.print(f"  \\[{i}] Lvl {m.level}: {m.name}{marker}")
    raw = views.console.input("Exercise # (Enter to cancel): ").strip()
    if not raw:
        return
    if not raw.isdigit() or not (1 <= int(raw) <= len(options)):
        views.print_error(f"Enter a number between 1 and {len(options)}")
        return
    if tracker.waves and not views.confirm_action("Switching exercise discards the logged waves. Continue?"):
        return
    tracker.select_exercise(options[int(raw) - 1].name)


def run_session(engine: SessionEngine) -> None:
    """
    Drive an active session from console input until it ends.

    Args:
        engine: Engine with a started session
    """
    assert engine.session is not None
    total = len(engine.session.slots)

    while engine.is_active:
        tracker = engine.tracker
        assert tracker is not None and engine.session is not None
        views.print_movement_panel(tracker, engine.session.cursor + 1, total)
        views.console.print(escape(ACTIONS_REPS if tracker.is_rep_based else ACTIONS_HOLD), style="dim")

        try:
            choice = views.console.input("> ").strip().lower()
        except EOFError:
            engine.end_early()
            views.print_info("Workout ended.")
            break

        try:
            if choice.isdigit():
                if tracker.is_rep_based:
                    tracker.set_reps(int(choice))
                else:
                    tracker.set_elapsed(int(choice))
            elif choice == "t":
                if tracker.is_rep_based:
                    views.print_error("This exercise is rep-based; enter reps instead.")
                else:
                    _run_hold_timer(tracker)
            elif choice == "l":
                views.print_notices(tracker.log_wave())
            elif choice in ("u", "d"):
                views.print_notices(tracker.change_level("up" if choice == "u" else "down"))
            elif choice == "p":
                _pick_exercise(tracker)
            elif choice == "f":
                result = engine.finish_movement()
                views.print_notices(result.notices)
                entry = result.entry
                views.print_success(
                    f"Logged {entry.category_name}: {entry.movement_name} (level {entry.level_achieved})"
                )
                if result.session_finished:
                    views.print_success("Workout complete. Qapla'!")
            elif choice == "q":
                if tracker.waves or tracker.pending_work > 0:
                    if not views.confirm_action("End workout early? Unsaved work is lost."):
                        continue
                engine.end_early()
                views.print_info("Workout ended.")
            elif choice:
                views.print_error(f"Unknown action: {choice}")
        except WorkoutValidationError as e:
            views.print_error(str(e))


@app.command()
def workout(
    categories: Annotated[
        Optional[list[str]],
        typer.Argument(help=f"Categories to train, in order ({', '.join(CATEGORY_IDS)})"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Run a workout session.

    Categories are worked through one at a time.  For each one, enter reps
    (or hold time) per wave, use up/down to change level between waves and
    finish to save the movement to history.  Logging a full-target wave at
    your unlocked level unlocks the next level.
    """
    levels, history = get_stores(data_dir)

    tokens = list(categories) if categories else _prompt_categories()
    ids = []
    for token in tokens:
        category_id = _resolve_category(token)
        if category_id is None:
            views.print_error(f"Unknown category: {token}")
            raise typer.Exit(1)
        ids.append(category_id)

    engine = SessionEngine(levels, history)
    try:
        engine.start(ids)
    except WorkoutValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    run_session(engine)
