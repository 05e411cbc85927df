"""
YAML → settings loader.

Loads user-tunable settings from settings.yaml (bundled with the package)
and optionally merges user overrides from ~/.qapla/settings.yaml.

Usage:
    from qapla.core.engine.config_loader import load_settings
    settings = load_settings()
    model = settings.get("recommendations", {}).get("model")

If the bundled YAML cannot be parsed, load_settings() returns an empty
dict and callers use their own defaults.  A user override file with parse
errors is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} if it is unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_data_home() -> Path:
    """
    Return the qapla data directory.

    ``$QAPLA_HOME`` when set, otherwise ``~/.qapla``.  The directory is not
    created here.
    """
    override = os.environ.get("QAPLA_HOME")
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".qapla"


def get_bundled_settings_path() -> Path | None:
    """Return the path to the bundled settings.yaml, or None if not found."""
    ref = importlib.resources.files("qapla").joinpath("settings.yaml")
    if ref.is_file():
        with importlib.resources.as_file(ref) as p:
            return p
    candidate = Path(__file__).parent.parent.parent / "settings.yaml"
    return candidate if candidate.exists() else None


def get_user_settings_path() -> Path | None:
    """Return <data home>/settings.yaml if it exists, else None."""
    p = get_data_home() / "settings.yaml"
    return p if p.exists() else None


def load_settings() -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/qapla/settings.yaml
    2. User override at <data home>/settings.yaml

    Returns:
        Merged dict of settings sections.  Empty dict if no YAML available.
    """
    settings: dict[str, Any] = {}

    bundled = get_bundled_settings_path()
    if bundled is not None:
        settings = _deep_merge(settings, _load_yaml_file(bundled))

    user = get_user_settings_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            settings = _deep_merge(settings, user_cfg)

    return settings
