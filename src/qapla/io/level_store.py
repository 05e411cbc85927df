"""
Unlocked-level storage.

Keeps the per-category unlocked level (1–10) under the ``userLevels`` key.
Reads after a write observe the new value immediately.
"""

import warnings

from ..core.catalog import CATEGORY_REGISTRY
from ..core.config import MIN_LEVEL, USER_LEVELS_KEY, clamp_level
from .kv_store import KeyValueStore
from .serializers import StorageWarning, ValidationError, json_to_levels, levels_to_json


def default_levels() -> dict[str, int]:
    """Every catalog category at level 1."""
    return {category_id: MIN_LEVEL for category_id in CATEGORY_REGISTRY}


class LevelStore:
    """
    Manages unlocked levels stored as a JSON object.

    The object maps category id → level.  Categories missing from stored
    data start at level 1; unknown ids are kept untouched.
    """

    def __init__(self, kv: KeyValueStore):
        """
        Load levels from the key-value store.

        Missing data is created with every category at level 1.  Corrupt
        or unreadable data is replaced by the defaults and a StorageWarning
        is issued; the message stays available as ``load_warning``.

        Args:
            kv: Backing key-value store
        """
        self.kv = kv
        self.load_warning: str | None = None
        self._levels = self._load()

    def _load(self) -> dict[str, int]:
        defaults = default_levels()
        try:
            raw = self.kv.get(USER_LEVELS_KEY)
            if raw is None:
                self._persist(defaults)
                return defaults
            stored = json_to_levels(raw)
        except (OSError, ValidationError) as e:
            self._recover(f"Failed to load saved levels ({e}). Using defaults.", defaults)
            return defaults
        return {**defaults, **stored}

    def _recover(self, message: str, levels: dict[str, int]) -> None:
        try:
            self._persist(levels)
        except OSError as e:
            message = f"{message} Could not rewrite saved levels ({e})."
        self.load_warning = message
        warnings.warn(message, StorageWarning, stacklevel=4)

    def _persist(self, levels: dict[str, int]) -> None:
        self.kv.set(USER_LEVELS_KEY, levels_to_json(levels))

    def get(self, category_id: str) -> int:
        """Return the unlocked level for a category (1 if never set)."""
        return self._levels.get(category_id, MIN_LEVEL)

    def set(self, category_id: str, level: int) -> int:
        """
        Store a new unlocked level.

        Args:
            category_id: Category id, e.g. "push"
            level: New level; clamped to [1, 10]

        Returns:
            The level actually stored
        """
        stored = clamp_level(level)
        levels = dict(self._levels)
        levels[category_id] = stored
        self._persist(levels)
        self._levels = levels
        return stored

    def all(self) -> dict[str, int]:
        """Return a copy of all unlocked levels."""
        return dict(self._levels)
