"""Shared Typer app object, shared option types, and store utility."""

import warnings
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.history_store import HistoryStore
from ..io.kv_store import JsonFileStore, get_default_store
from ..io.level_store import LevelStore
from ..io.serializers import StorageWarning
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: $QAPLA_HOME or ~/.qapla)"),
]

app = typer.Typer(
    name="qapla",
    help="Leveled calisthenics tracker: log waves, unlock levels, review history.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_stores(data_dir: Path | None) -> tuple[LevelStore, HistoryStore]:
    """
    Open the level and history stores in ``data_dir`` (or the default).

    Storage problems are recovered by the stores; their messages are
    shown here as warnings instead of raw Python warnings.
    """
    kv = JsonFileStore(data_dir) if data_dir is not None else get_default_store()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", StorageWarning)
        levels = LevelStore(kv)
        history = HistoryStore(kv)
    for message in (levels.load_warning, history.load_warning):
        if message:
            views.print_warning(message)
    return levels, history
