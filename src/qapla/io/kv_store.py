"""
Key-value storage backends.

The level and history stores persist JSON text under fixed keys.  Any
object with ``get(key)`` / ``set(key, value)`` works; two backends ship:

- JsonFileStore: one ``<key>.json`` file per key in a data directory
- MemoryStore: in-process dict (tests, dry runs)
"""

import os
import tempfile
from pathlib import Path
from typing import Protocol

from ..core.engine.config_loader import get_data_home
from ..core.errors import ValidationError


class KeyValueStore(Protocol):
    """Minimal string key-value interface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """
    File-backed store: each key lives in ``<root>/<key>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash never leaves a half-written value behind.
    """

    def __init__(self, root: str | Path):
        """
        Initialize the store.

        Args:
            root: Data directory (created on first write)
        """
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        """Return the file path used for ``key``."""
        return self.root / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def get(self, key: str) -> str | None:
        """
        Read the raw value stored under ``key``.

        Returns:
            File contents, or None if the key was never written

        Raises:
            OSError: If the file exists but cannot be read
            ValidationError: If the file is not valid UTF-8
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"{path.name} is not valid UTF-8: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Write ``value`` under ``key`` atomically."""
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def get_default_store() -> JsonFileStore:
    """
    Get a JsonFileStore in the default data directory.

    Returns:
        JsonFileStore rooted at $QAPLA_HOME or ~/.qapla
    """
    return JsonFileStore(get_data_home())
