"""
Tests for persisted state: key-value backends, the level store and the
history store.
"""

import json
import tempfile
from pathlib import Path

import pytest

from qapla.core.config import HISTORY_LIMIT, USER_LEVELS_KEY, WORKOUT_HISTORY_KEY
from qapla.core.models import WaveRecord, WorkoutEntry
from qapla.io.history_store import HistoryStore
from qapla.io.kv_store import JsonFileStore, MemoryStore
from qapla.io.level_store import LevelStore, default_levels
from qapla.io.serializers import (
    StorageWarning,
    ValidationError,
    dict_to_entry,
    entry_to_dict,
    json_to_levels,
)


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _entry(n: int, category: str = "Push") -> WorkoutEntry:
    return WorkoutEntry(
        id=f"entry-{n}",
        date=f"2026-03-{(n % 28) + 1:02d}T10:00:00+00:00",
        category_name=category,
        movement_name="Wall Push-Ups",
        level_achieved=1,
        total_reps=20,
        waves=(WaveRecord(wave=1, level=1, reps=20),),
    )


class TestJsonFileStore:
    """File-per-key backend."""

    def test_missing_key_is_none(self, temp_data_dir):
        store = JsonFileStore(temp_data_dir)
        assert store.get("userLevels") is None
        assert not store.exists("userLevels")

    def test_set_then_get(self, temp_data_dir):
        store = JsonFileStore(temp_data_dir / "nested")
        store.set("userLevels", '{"push": 3}')

        assert store.get("userLevels") == '{"push": 3}'
        assert (temp_data_dir / "nested" / "userLevels.json").exists()

    def test_overwrite_leaves_no_temp_files(self, temp_data_dir):
        store = JsonFileStore(temp_data_dir)
        store.set("k", "1")
        store.set("k", "2")

        assert store.get("k") == "2"
        assert sorted(p.name for p in temp_data_dir.iterdir()) == ["k.json"]

    def test_undecodable_bytes_raise_validation_error(self, temp_data_dir):
        (temp_data_dir / "k.json").write_bytes(b"\xff\xfe")

        with pytest.raises(ValidationError, match="not valid UTF-8"):
            JsonFileStore(temp_data_dir).get("k")


class TestLevelStore:
    """Unlocked level persistence."""

    def test_first_load_persists_defaults(self):
        kv = MemoryStore()
        store = LevelStore(kv)

        assert store.all() == default_levels()
        assert all(level == 1 for level in store.all().values())
        assert json.loads(kv.get(USER_LEVELS_KEY)) == default_levels()
        assert store.load_warning is None

    def test_partial_data_merged_with_defaults(self):
        kv = MemoryStore({USER_LEVELS_KEY: json.dumps({"push": 4})})
        store = LevelStore(kv)

        assert store.get("push") == 4
        assert store.get("core") == 1

    def test_unknown_ids_preserved(self):
        kv = MemoryStore({USER_LEVELS_KEY: json.dumps({"arms": 5})})
        store = LevelStore(kv)

        store.set("push", 2)

        assert json.loads(kv.get(USER_LEVELS_KEY))["arms"] == 5

    def test_set_is_read_back_immediately(self):
        kv = MemoryStore()
        store = LevelStore(kv)

        assert store.set("pull", 3) == 3
        assert store.get("pull") == 3
        assert LevelStore(kv).get("pull") == 3

    def test_set_clamps(self):
        store = LevelStore(MemoryStore())
        assert store.set("push", 15) == 10
        assert store.set("push", 0) == 1
        assert store.get("push") == 1

    def test_stored_values_clamped_on_load(self):
        kv = MemoryStore({USER_LEVELS_KEY: json.dumps({"push": 42, "pull": -3})})
        store = LevelStore(kv)

        assert store.get("push") == 10
        assert store.get("pull") == 1

    def test_corrupt_data_recovers_with_warning(self):
        kv = MemoryStore({USER_LEVELS_KEY: "{not json"})

        with pytest.warns(StorageWarning, match="Failed to load saved levels"):
            store = LevelStore(kv)

        assert store.all() == default_levels()
        assert store.load_warning is not None
        assert json.loads(kv.get(USER_LEVELS_KEY)) == default_levels()

    def test_wrong_shape_recovers_with_warning(self):
        kv = MemoryStore({USER_LEVELS_KEY: json.dumps([1, 2, 3])})

        with pytest.warns(StorageWarning):
            store = LevelStore(kv)

        assert store.get("push") == 1

    def test_undecodable_file_recovers_with_warning(self, temp_data_dir):
        (temp_data_dir / "userLevels.json").write_bytes(b'\xff\xfe{"push": 3}')

        with pytest.warns(StorageWarning, match="not valid UTF-8"):
            store = LevelStore(JsonFileStore(temp_data_dir))

        assert store.get("push") == 1
        assert store.load_warning is not None
        assert json.loads((temp_data_dir / "userLevels.json").read_text()) == default_levels()

    def test_unwritable_key_path_does_not_crash(self, temp_data_dir):
        (temp_data_dir / "userLevels.json").mkdir()

        with pytest.warns(StorageWarning, match="Could not rewrite saved levels"):
            store = LevelStore(JsonFileStore(temp_data_dir))

        assert store.all() == default_levels()

    def test_json_to_levels_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            json_to_levels('{"push": "three"}')

    def test_serializer_errors_are_the_core_errors(self):
        from qapla.core import errors
        from qapla.io import serializers

        assert serializers.ValidationError is errors.ValidationError
        assert serializers.WorkoutValidationError is errors.WorkoutValidationError
        assert issubclass(errors.WorkoutValidationError, errors.ValidationError)


class TestHistoryStore:
    """Capped, newest-first history."""

    def test_empty_initially(self):
        store = HistoryStore(MemoryStore())
        assert store.all() == []
        assert len(store) == 0

    def test_append_prepends_and_persists(self):
        kv = MemoryStore()
        store = HistoryStore(kv)

        store.append(_entry(1))
        store.append(_entry(2))

        assert [e.id for e in store.all()] == ["entry-2", "entry-1"]
        stored = json.loads(kv.get(WORKOUT_HISTORY_KEY))
        assert [item["id"] for item in stored] == ["entry-2", "entry-1"]
        assert [e.id for e in HistoryStore(kv).all()] == ["entry-2", "entry-1"]

    def test_cap_keeps_newest(self):
        kv = MemoryStore()
        store = HistoryStore(kv)

        for n in range(1, HISTORY_LIMIT + 2):
            store.append(_entry(n))

        entries = store.all()
        assert len(entries) == HISTORY_LIMIT
        assert entries[0].id == f"entry-{HISTORY_LIMIT + 1}"
        assert "entry-1" not in [e.id for e in entries]
        assert len(json.loads(kv.get(WORKOUT_HISTORY_KEY))) == HISTORY_LIMIT

    def test_recent(self):
        store = HistoryStore(MemoryStore())
        for n in range(5):
            store.append(_entry(n))

        assert [e.id for e in store.recent(2)] == ["entry-4", "entry-3"]
        assert store.recent(0) == []

    def test_corrupt_history_recovers_with_warning(self):
        kv = MemoryStore({WORKOUT_HISTORY_KEY: "oops"})

        with pytest.warns(StorageWarning, match="Failed to load workout history"):
            store = HistoryStore(kv)

        assert store.all() == []
        assert json.loads(kv.get(WORKOUT_HISTORY_KEY)) == []

    def test_bad_entry_skipped(self):
        good = entry_to_dict(_entry(1))
        kv = MemoryStore({WORKOUT_HISTORY_KEY: json.dumps([{"id": "broken"}, good])})

        with pytest.warns(StorageWarning, match="Skipping history entry #1"):
            store = HistoryStore(kv)

        assert [e.id for e in store.all()] == ["entry-1"]

    def test_non_object_wave_skipped(self):
        broken = entry_to_dict(_entry(1))
        broken["id"] = "broken"
        broken["waves"] = [1]
        good = entry_to_dict(_entry(2))
        kv = MemoryStore({WORKOUT_HISTORY_KEY: json.dumps([broken, good])})

        with pytest.warns(StorageWarning, match="Skipping history entry #1"):
            store = HistoryStore(kv)

        assert [e.id for e in store.all()] == ["entry-2"]

    def test_non_list_waves_skipped(self):
        broken = entry_to_dict(_entry(1))
        broken["id"] = "broken"
        broken["waves"] = "abc"
        good = entry_to_dict(_entry(2))
        kv = MemoryStore({WORKOUT_HISTORY_KEY: json.dumps([broken, good])})

        with pytest.warns(StorageWarning, match="waves must be a list"):
            store = HistoryStore(kv)

        assert [e.id for e in store.all()] == ["entry-2"]

    def test_undecodable_file_recovers_with_warning(self, temp_data_dir):
        (temp_data_dir / "workoutHistory.json").write_bytes(b"\xff\xfe[]")

        with pytest.warns(StorageWarning, match="not valid UTF-8"):
            store = HistoryStore(JsonFileStore(temp_data_dir))

        assert store.all() == []
        assert store.load_warning is not None

    def test_unwritable_key_path_does_not_crash(self, temp_data_dir):
        (temp_data_dir / "workoutHistory.json").mkdir()

        with pytest.warns(StorageWarning, match="Could not rewrite saved history"):
            store = HistoryStore(JsonFileStore(temp_data_dir))

        assert store.all() == []

    def test_entry_json_shape(self):
        entry = WorkoutEntry(
            id="x",
            date="2026-03-01T10:00:00Z",
            category_name="Pull",
            movement_name="Dead Hang",
            level_achieved=1,
            duration_seconds=45,
            waves=(WaveRecord(wave=1, level=1, duration_seconds=45),),
        )
        data = entry_to_dict(entry)

        assert data == {
            "id": "x",
            "date": "2026-03-01T10:00:00Z",
            "categoryName": "Pull",
            "movementName": "Dead Hang",
            "levelAchieved": 1,
            "durationSeconds": 45,
            "waves": [{"wave": 1, "level": 1, "durationSeconds": 45}],
        }
        assert dict_to_entry(data) == entry
        assert entry.day == "2026-03-01"

    def test_wave_needs_exactly_one_work_field(self):
        with pytest.raises(ValidationError):
            dict_to_entry({
                "id": "x",
                "date": "2026-03-01T10:00:00Z",
                "categoryName": "Push",
                "movementName": "Wall Push-Ups",
                "levelAchieved": 1,
                "waves": [{"wave": 1, "level": 1, "reps": 5, "durationSeconds": 5}],
            })
