"""
Tests for the progression catalog: bundled YAML data, lookups and the
user-override loader.
"""

import tempfile
from pathlib import Path

import pytest

from qapla.core.catalog import (
    CATEGORY_IDS,
    CATEGORY_REGISTRY,
    Movement,
    MovementCategory,
    all_categories,
    category_by_id,
    category_by_name,
    get_category,
    movement_by_level,
    movement_by_name,
)
from qapla.core.catalog.loader import category_from_dict, load_categories_from_yaml, movement_from_dict


@pytest.fixture
def temp_dirs():
    """Bundled and user catalog directories."""
    with tempfile.TemporaryDirectory() as tmpdir:
        bundled = Path(tmpdir) / "bundled"
        user = Path(tmpdir) / "user"
        bundled.mkdir()
        user.mkdir()
        yield bundled, user


MINI_CATEGORY = """\
id: mini
name: Mini
icon: star
progressions:
  - {name: Easy, level: 1, is_rep_based: true}
  - {name: Hard, level: 2, is_rep_based: true}
"""


class TestBundledCatalog:
    """The five bundled categories."""

    def test_all_categories_in_display_order(self):
        assert [c.id for c in all_categories()] == list(CATEGORY_IDS)

    def test_every_category_has_ten_ranked_levels(self):
        for category in CATEGORY_REGISTRY.values():
            levels = [m.level for m in category.ranked_progressions()]
            assert levels == list(range(1, 11)), category.id

    def test_core_warmups(self):
        core = get_category("core")
        warmups = core.warmups()
        assert [m.name for m in warmups] == ["Plank", "Bridge", "Bird Dog Hold"]
        assert all(not m.is_rep_based for m in warmups)
        assert all(m.is_warmup for m in warmups)

    def test_time_based_entries_have_duration(self):
        for category in CATEGORY_REGISTRY.values():
            for m in category.progressions:
                if not m.is_rep_based:
                    assert m.default_duration_seconds, m.name

    def test_known_entries(self):
        assert movement_by_level(get_category("push"), 3).name == "Knee Push-Ups"
        dead_hang = movement_by_level(get_category("pull"), 1)
        assert dead_hang.name == "Dead Hang"
        assert dead_hang.is_rep_based is False
        assert dead_hang.default_duration_seconds == 30
        assert dead_hang.unit == "s"


class TestLookups:
    """Registry lookup helpers."""

    def test_get_category_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown category"):
            get_category("arms")

    def test_category_by_id_and_name(self):
        assert category_by_id("legs").name == "Legs"
        assert category_by_id("arms") is None
        assert category_by_name("dips").id == "dips"
        assert category_by_name("  PUSH ").id == "push"
        assert category_by_name("Arms") is None

    def test_movement_lookups_absent(self):
        push = get_category("push")
        assert movement_by_level(push, 0) is None
        assert movement_by_level(None, 1) is None
        assert movement_by_name(push, "Nope") is None
        assert movement_by_name(push, "Full Push-Ups").level == 4


class TestModelValidation:
    """Movement / MovementCategory invariants."""

    def test_level_out_of_range(self):
        with pytest.raises(ValueError):
            Movement(name="X", level=11, is_rep_based=True)

    def test_rep_based_with_duration_threshold(self):
        with pytest.raises(ValueError):
            Movement(name="X", level=1, is_rep_based=True, duration_to_unlock_next=30)

    def test_duplicate_ranked_levels_rejected(self):
        with pytest.raises(ValueError, match="unique and increasing"):
            MovementCategory(
                id="x",
                name="X",
                icon="x",
                progressions=(
                    Movement(name="A", level=1, is_rep_based=True),
                    Movement(name="B", level=1, is_rep_based=True),
                ),
            )

    def test_multiple_warmups_allowed(self):
        category = MovementCategory(
            id="x",
            name="X",
            icon="x",
            progressions=(
                Movement(name="W1", level=0, is_rep_based=False, default_duration_seconds=30),
                Movement(name="W2", level=0, is_rep_based=False, default_duration_seconds=30),
                Movement(name="A", level=1, is_rep_based=True),
            ),
        )
        assert len(category.warmups()) == 2
        assert [m.name for m in category.ranked_progressions()] == ["A"]

    def test_movement_from_dict_missing_field(self):
        with pytest.raises(ValueError, match="missing fields"):
            movement_from_dict({"name": "X", "level": 1})

    def test_category_from_dict(self):
        category = category_from_dict({
            "id": "x",
            "name": "X",
            "icon": "x",
            "progressions": [{"name": "A", "level": 1, "is_rep_based": True, "reps_to_unlock_next": 20}],
        })
        assert category.progressions[0].reps_to_unlock_next == 20


class TestLoader:
    """YAML loading and user overrides."""

    def test_loads_bundled(self, temp_dirs):
        bundled, user = temp_dirs
        (bundled / "mini.yaml").write_text(MINI_CATEGORY)

        result = load_categories_from_yaml(bundled, user)

        assert list(result) == ["mini"]
        assert [m.name for m in result["mini"].progressions] == ["Easy", "Hard"]

    def test_user_override_merges(self, temp_dirs):
        bundled, user = temp_dirs
        (bundled / "mini.yaml").write_text(MINI_CATEGORY)
        (user / "mini.yaml").write_text("name: Tiny\n")

        result = load_categories_from_yaml(bundled, user)

        assert result["mini"].name == "Tiny"
        assert len(result["mini"].progressions) == 2

    def test_user_only_category_added(self, temp_dirs):
        bundled, user = temp_dirs
        (bundled / "mini.yaml").write_text(MINI_CATEGORY)
        (user / "extra.yaml").write_text(MINI_CATEGORY.replace("id: mini", "id: extra"))

        result = load_categories_from_yaml(bundled, user)

        assert set(result) == {"mini", "extra"}

    def test_invalid_file_skipped_with_warning(self, temp_dirs):
        bundled, user = temp_dirs
        (bundled / "mini.yaml").write_text(MINI_CATEGORY)
        (bundled / "broken.yaml").write_text("id: broken\nname: Broken\n")

        with pytest.warns(UserWarning, match="broken"):
            result = load_categories_from_yaml(bundled, user)

        assert list(result) == ["mini"]

    def test_nothing_loadable_returns_none(self, temp_dirs):
        bundled, user = temp_dirs
        assert load_categories_from_yaml(bundled, user) is None
