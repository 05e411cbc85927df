"""
YAML → MovementCategory loader.

Loads category definitions from individual YAML files in the bundled
``src/qapla/catalog/`` directory.  Each file (e.g. push.yaml) holds one
category: id, name, icon and its progression list.

User overrides: place matching files in ``~/.qapla/catalog/``.
A user file is deep-merged over the bundled definition, so only changed
keys need to be listed (``progressions`` is a list and is replaced as a
whole).  A user file whose id does not match any bundled file is treated
as a new category.

Usage (internal, called by registry.py):
    from .loader import load_categories_from_yaml
    categories = load_categories_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..engine.config_loader import _deep_merge, get_data_home
from .base import Movement, MovementCategory

_REQUIRED_MOVEMENT_FIELDS: frozenset[str] = frozenset({"name", "level", "is_rep_based"})

_REQUIRED_CATEGORY_FIELDS: frozenset[str] = frozenset({"id", "name", "icon", "progressions"})


def _opt_int(d: dict, key: str) -> int | None:
    v = d.get(key)
    return int(v) if v is not None else None


def movement_from_dict(d: dict) -> Movement:
    """Convert a raw dict to a Movement, raising ValueError on missing fields."""
    missing = _REQUIRED_MOVEMENT_FIELDS - set(d)
    if missing:
        raise ValueError(f"Movement missing fields: {sorted(missing)}")
    description = d.get("description")
    return Movement(
        name=str(d["name"]),
        level=int(d["level"]),
        is_rep_based=bool(d["is_rep_based"]),
        default_duration_seconds=_opt_int(d, "default_duration_seconds"),
        reps_to_unlock_next=_opt_int(d, "reps_to_unlock_next"),
        duration_to_unlock_next=_opt_int(d, "duration_to_unlock_next"),
        benchmark=_opt_int(d, "benchmark"),
        warmup_target=_opt_int(d, "warmup_target"),
        description=str(description) if description is not None else None,
    )


def category_from_dict(d: dict) -> MovementCategory:
    """Convert a raw dict (from YAML) to a MovementCategory.

    Raises ValueError if any required field is absent or a progression
    entry is invalid.
    """
    missing = _REQUIRED_CATEGORY_FIELDS - set(d)
    if missing:
        raise ValueError(f"MovementCategory missing fields: {sorted(missing)}")
    raw_progressions = d["progressions"]
    if not isinstance(raw_progressions, list):
        raise ValueError("progressions must be a list")
    return MovementCategory(
        id=str(d["id"]),
        name=str(d["name"]),
        icon=str(d["icon"]),
        progressions=tuple(movement_from_dict(p) for p in raw_progressions),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} if unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"qapla: cannot read catalog file {path.name} ({exc})", stacklevel=3)
        return {}
    return data if isinstance(data, dict) else {}


def _get_bundled_catalog_dir() -> Path | None:
    """Return path to the bundled catalog/ data directory, or None if not found."""
    # loader.py lives at src/qapla/core/catalog/loader.py
    # three levels up → src/qapla/
    candidate = Path(__file__).parent.parent.parent / "catalog"
    return candidate if candidate.is_dir() else None


def _get_user_catalog_dir() -> Path | None:
    """Return <data home>/catalog/ if it exists, else None."""
    p = get_data_home() / "catalog"
    return p if p.is_dir() else None


def load_categories_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, MovementCategory] | None:
    """Return {category_id: MovementCategory} loaded from per-category YAML files.

    Loads each ``<id>.yaml`` from the bundled catalog/ directory.  If a
    matching file exists in the user catalog directory it is deep-merged
    over the bundled definition.  User-only files are loaded as new
    categories.  Invalid files are skipped with a warning.

    Args:
        bundled_dir: Override for the bundled directory (tests)
        user_dir: Override for the user directory (tests)

    Returns:
        Dict in file-name order, or None if nothing could be loaded.
    """
    bundled_dir = bundled_dir if bundled_dir is not None else _get_bundled_catalog_dir()
    user_dir = user_dir if user_dir is not None else _get_user_catalog_dir()

    if bundled_dir is None and user_dir is None:
        return None

    result: dict[str, MovementCategory] = {}

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in stems:
                user_only.append(p)

    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                if user_raw:
                    raw = _deep_merge(raw, user_raw)
        try:
            category = category_from_dict(raw)
            result[category.id] = category
        except (ValueError, TypeError) as exc:
            warnings.warn(f"qapla: skipping category '{stem}': {exc}", stacklevel=2)

    for p in user_only:
        raw = _load_yaml_file(p)
        if not raw:
            continue
        try:
            category = category_from_dict(raw)
            result[category.id] = category
        except (ValueError, TypeError) as exc:
            warnings.warn(f"qapla: skipping user category '{p.stem}': {exc}", stacklevel=2)

    return result if result else None
