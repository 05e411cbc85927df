"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of levels, history, the catalog and
the live movement panel.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.catalog import MovementCategory
from ..core.config import MAX_LEVEL
from ..core.models import WorkoutEntry
from ..core.session import MovementTracker, Notice, TargetProgress
from ..core.timer import format_clock

console = Console()


def _fmt_work(value: int, unit: str) -> str:
    if unit == "s":
        return format_clock(value)
    return f"{value} reps"


def _fmt_waves(entry: WorkoutEntry) -> str:
    parts = []
    for w in entry.waves:
        work = f"{w.reps}" if w.reps is not None else format_clock(w.duration_seconds or 0)
        parts.append(f"{work}@L{w.level}")
    return ", ".join(parts) if parts else "-"


def format_levels_table(categories: list[MovementCategory], levels: dict[str, int]) -> Table:
    """
    Create a Rich table of unlocked levels.

    Args:
        categories: Categories in display order
        levels: Unlocked level per category id

    Returns:
        Rich Table object
    """
    table = Table(title="Unlocked Levels")
    table.add_column("Category", style="cyan")
    table.add_column("Level", justify="right", style="bold")
    table.add_column("Exercise", style="green")

    for category in categories:
        level = levels.get(category.id, 1)
        movement = next((m for m in category.progressions if m.level == level), None)
        table.add_row(
            category.name,
            f"{level}/{MAX_LEVEL}",
            movement.name if movement is not None else "-",
        )
    return table


def format_history_table(entries: list[WorkoutEntry]) -> Table:
    """
    Create a Rich table displaying workout history, newest first.

    Args:
        entries: Entries to display

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Movement", style="green")
    table.add_column("Lvl", justify="right", style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Waves")

    for i, entry in enumerate(entries, 1):
        totals = []
        if entry.total_reps:
            totals.append(f"{entry.total_reps} reps")
        if entry.duration_seconds:
            totals.append(format_clock(entry.duration_seconds))
        table.add_row(
            str(i),
            entry.day,
            entry.category_name,
            entry.movement_name,
            str(entry.level_achieved),
            " + ".join(totals) if totals else "-",
            _fmt_waves(entry),
        )
    return table


def format_catalog_table(category: MovementCategory, unlocked_level: int) -> Table:
    """
    Create a Rich table of a category's progression ladder.

    Args:
        category: Category to display
        unlocked_level: User's unlocked level (for lock markers)

    Returns:
        Rich Table object
    """
    table = Table(title=f"{category.name} Progression")
    table.add_column("Lvl", justify="right", style="bold")
    table.add_column("Exercise", style="green")
    table.add_column("Type")
    table.add_column("Benchmark", justify="right")
    table.add_column("Warm-up", justify="right")
    table.add_column("")

    for m in category.progressions:
        unit = m.unit
        if m.is_warmup:
            state = "[dim]warm-up[/dim]"
        elif m.level <= unlocked_level:
            state = "[green]unlocked[/green]"
        else:
            state = "[dim]locked[/dim]"
        table.add_row(
            str(m.level),
            m.name + (f" [dim]({m.description})[/dim]" if m.description else ""),
            "reps" if m.is_rep_based else "hold",
            _fmt_work(m.benchmark, unit) if m.benchmark is not None else "-",
            _fmt_work(m.warmup_target, unit) if m.warmup_target is not None else "-",
            state,
        )
    return table


def format_target_progress(progress: TargetProgress) -> str:
    """Format a target tracker line, e.g. ``30 / 50 reps  (20 to go!)``."""
    if progress.target <= 0:
        return _fmt_work(progress.current, progress.unit)
    if progress.unit == "s":
        head = f"{format_clock(progress.current)} / {format_clock(progress.target)}"
        rest = format_clock(progress.remaining)
    else:
        head = f"{progress.current} / {progress.target} reps"
        rest = str(progress.remaining)
    if progress.reached:
        return f"{head}  [green]Target Reached![/green]"
    return f"{head}  ({rest} to go!)"


def print_movement_panel(tracker: MovementTracker, position: int, total: int) -> None:
    """
    Print the live state of the movement in progress.

    Args:
        tracker: Active movement tracker
        position: 1-based position of the movement in the session
        total: Number of movements in the session
    """
    console.print()
    console.print(
        f"[bold cyan]{tracker.category.name}[/bold cyan]  "
        f"[dim]movement {position} of {total} · unlocked level {tracker.unlocked_level}[/dim]"
    )
    movement = tracker.current
    if movement is None:
        console.print("[yellow]No exercise available for this category.[/yellow]")
        return

    kind = "reps" if movement.is_rep_based else "hold"
    console.print(f"Level {movement.level}: [green]{movement.name}[/green] ({kind})")
    if movement.description:
        console.print(f"[dim]{movement.description}[/dim]")

    console.print(f"Wave {tracker.wave_number}  ·  {format_target_progress(tracker.target_progress())}")
    if tracker.pending_work > 0:
        console.print(f"[dim]Pending: {_fmt_work(tracker.pending_work, movement.unit)}[/dim]")

    for w in tracker.waves:
        work = f"{w.reps} reps" if w.reps is not None else format_clock(w.duration_seconds or 0)
        console.print(f"  [dim]Wave {w.wave}: {work} @ Lvl {w.level}[/dim]")


def print_notices(notices: list[Notice]) -> None:
    """Print engine notices."""
    for notice in notices:
        if notice.kind == "level_up":
            print_success(f"Level Up! {notice.message}")
        else:
            print_info(notice.message)


def print_recommendations(text: str) -> None:
    """Print recommendation text in a panel."""
    console.print(Panel(Text(text), title="Recommendations", border_style="cyan"))


def print_history(entries: list[WorkoutEntry]) -> None:
    """
    Print workout history to console.

    Args:
        entries: Entries to display
    """
    if not entries:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    console.print(format_history_table(entries))


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
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
