"""Progress commands: levels, history, catalog."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import all_categories, category_by_id, category_by_name
from ...io.serializers import entry_to_dict
from .. import views
from ..app import DataDirOption, app, get_stores


@app.command()
def levels(
    data_dir: DataDirOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON"),
    ] = False,
) -> None:
    """
    Show the unlocked level for every category.
    """
    level_store, _ = get_stores(data_dir)
    unlocked = level_store.all()

    if json_out:
        print(json.dumps(unlocked, indent=2))
        return

    views.console.print(views.format_levels_table(all_categories(), unlocked))


@app.command()
def history(
    data_dir: DataDirOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the N most recent entries"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON"),
    ] = False,
) -> None:
    """
    Show completed movements, newest first.
    """
    _, history_store = get_stores(data_dir)
    entries = history_store.recent(limit) if limit is not None else history_store.all()

    if json_out:
        print(json.dumps([entry_to_dict(e) for e in entries], indent=2))
        return

    views.print_history(entries)


@app.command()
def catalog(
    category: Annotated[
        Optional[str],
        typer.Argument(help="Category id or name (default: all)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the progression ladder of one or all categories.

    Levels above your unlocked level are marked as locked.
    """
    level_store, _ = get_stores(data_dir)

    if category is None:
        categories = all_categories()
    else:
        found = category_by_id(category.lower()) or category_by_name(category)
        if found is None:
            views.print_error(f"Unknown category: {category}")
            raise typer.Exit(1)
        categories = [found]

    for c in categories:
        views.console.print(views.format_catalog_table(c, level_store.get(c.id)))
