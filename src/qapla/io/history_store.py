"""
Workout history storage.

Completed movements are kept newest-first as a JSON array under the
``workoutHistory`` key, capped at the most recent HISTORY_LIMIT entries.
"""

import warnings

from ..core.config import HISTORY_LIMIT, WORKOUT_HISTORY_KEY
from ..core.models import WorkoutEntry
from .kv_store import KeyValueStore
from .serializers import (
    StorageWarning,
    ValidationError,
    dict_to_entry,
    history_to_json,
    json_to_history_items,
)


class HistoryStore:
    """
    Manages the capped, append-only workout history.

    Entries are immutable; the only mutation is ``append``, which prepends
    and drops the oldest entries beyond the cap.
    """

    def __init__(self, kv: KeyValueStore, limit: int = HISTORY_LIMIT):
        """
        Load history from the key-value store.

        Corrupt or unreadable history is replaced by an empty list and a
        StorageWarning is issued.  Individual invalid entries are dropped
        with a warning, keeping the rest.

        Args:
            kv: Backing key-value store
            limit: Maximum number of stored entries
        """
        if limit < 1:
            raise ValueError("limit must be positive")
        self.kv = kv
        self.limit = limit
        self.load_warning: str | None = None
        self._entries = self._load()

    def _load(self) -> list[WorkoutEntry]:
        try:
            raw = self.kv.get(WORKOUT_HISTORY_KEY)
            if raw is None:
                return []
            items = json_to_history_items(raw)
        except (OSError, ValidationError) as e:
            message = f"Failed to load workout history ({e}). Starting empty."
            try:
                self._persist([])
            except OSError as write_error:
                message = f"{message} Could not rewrite saved history ({write_error})."
            self.load_warning = message
            warnings.warn(message, StorageWarning, stacklevel=3)
            return []

        entries: list[WorkoutEntry] = []
        for idx, item in enumerate(items):
            try:
                entries.append(dict_to_entry(item))
            except ValidationError as e:
                warnings.warn(f"Skipping history entry #{idx + 1}: {e}", StorageWarning, stacklevel=3)
        return entries[: self.limit]

    def _persist(self, entries: list[WorkoutEntry]) -> None:
        self.kv.set(WORKOUT_HISTORY_KEY, history_to_json(entries))

    def append(self, entry: WorkoutEntry) -> None:
        """
        Add a completed movement as the newest entry.

        Args:
            entry: Entry to store
        """
        entries = [entry, *self._entries][: self.limit]
        self._persist(entries)
        self._entries = entries

    def all(self) -> list[WorkoutEntry]:
        """Return all entries, newest first."""
        return list(self._entries)

    def recent(self, n: int) -> list[WorkoutEntry]:
        """Return the ``n`` most recent entries, newest first."""
        return self._entries[: max(0, n)]

    def __len__(self) -> int:
        return len(self._entries)
