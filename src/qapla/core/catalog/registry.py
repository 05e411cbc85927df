"""
Category registry and catalog lookups.

Categories are loaded from the bundled per-category YAML files in
``src/qapla/catalog/`` at import time and never change afterwards.  If
YAML loading fails completely a RuntimeError is raised; the application
cannot start without a progression catalog.

Lookups return None for "not found"; callers decide what that means.
"""

from .base import Movement, MovementCategory

CATEGORY_IDS: tuple[str, ...] = ("push", "pull", "dips", "legs", "core")


def _build_registry() -> dict[str, MovementCategory]:
    from .loader import load_categories_from_yaml

    loaded = load_categories_from_yaml()
    if not loaded:
        raise RuntimeError(
            "qapla: no movement categories could be loaded from YAML. "
            "Check that src/qapla/catalog/*.yaml files are present and valid."
        )
    ordered = {cid: loaded[cid] for cid in CATEGORY_IDS if cid in loaded}
    for cid, category in loaded.items():
        ordered.setdefault(cid, category)
    return ordered


CATEGORY_REGISTRY: dict[str, MovementCategory] = _build_registry()


def all_categories() -> list[MovementCategory]:
    """Return every registered category in display order."""
    return list(CATEGORY_REGISTRY.values())


def category_by_id(category_id: str) -> MovementCategory | None:
    """Return the category with the given id, or None."""
    return CATEGORY_REGISTRY.get(category_id)


def category_by_name(name: str) -> MovementCategory | None:
    """Return the category with the given display name (case-insensitive), or None."""
    wanted = name.strip().lower()
    for category in CATEGORY_REGISTRY.values():
        if category.name.lower() == wanted:
            return category
    return None


def get_category(category_id: str) -> MovementCategory:
    """
    Return the MovementCategory for the given id.

    Args:
        category_id: One of "push", "pull", "dips", "legs", "core"

    Returns:
        MovementCategory for the requested id

    Raises:
        ValueError: If category_id is not in the registry
    """
    category = category_by_id(category_id)
    if category is None:
        valid = ", ".join(CATEGORY_REGISTRY)
        raise ValueError(f"Unknown category '{category_id}'. Valid IDs: {valid}")
    return category


def movement_by_level(category: MovementCategory | None, level: int) -> Movement | None:
    """Return the first progression at ``level`` in the category, or None."""
    if category is None:
        return None
    for movement in category.progressions:
        if movement.level == level:
            return movement
    return None


def movement_by_name(category: MovementCategory | None, name: str) -> Movement | None:
    """Return the progression named ``name`` in the category, or None."""
    if category is None:
        return None
    for movement in category.progressions:
        if movement.name == name:
            return movement
    return None
