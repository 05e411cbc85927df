"""
JSON serialization for persisted qapla state.

Handles conversion between dataclasses and the JSON shapes stored under
the ``userLevels`` and ``workoutHistory`` keys.  Field names on disk are
camelCase so existing browser exports stay readable.
"""

import json
from typing import Any

from ..core.config import MAX_LEVEL, MIN_LEVEL
from ..core.errors import ValidationError, WorkoutValidationError  # noqa: F401  (re-exported)
from ..core.models import WaveRecord, WorkoutEntry


class StorageWarning(UserWarning):
    """Issued when persisted state is unreadable and defaults are used instead."""

    pass


def validate_level(value: Any, name: str = "level") -> int:
    """
    Validate an unlocked level value.

    Args:
        value: Raw value from JSON
        name: Name for error message

    Returns:
        The level as int, clamped to [1, 10]

    Raises:
        ValidationError: If the value is not an integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value}")
    return max(MIN_LEVEL, min(MAX_LEVEL, int(value)))


def levels_to_json(levels: dict[str, int]) -> str:
    """Serialize unlocked levels to the ``userLevels`` JSON string."""
    return json.dumps(levels)


def json_to_levels(raw: str) -> dict[str, int]:
    """
    Parse the ``userLevels`` JSON string.

    Args:
        raw: JSON text

    Returns:
        Mapping category id → level in [1, 10]

    Raises:
        ValidationError: If the text is not a JSON object of numeric levels
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"userLevels is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("userLevels must be a JSON object")
    return {str(k): validate_level(v, f"level for {k!r}") for k, v in data.items()}


def wave_to_dict(wave: WaveRecord) -> dict[str, Any]:
    """
    Convert WaveRecord to JSON-compatible dict.

    Only the work field that applies (reps or durationSeconds) is written.
    """
    data: dict[str, Any] = {"wave": wave.wave, "level": wave.level}
    if wave.reps is not None:
        data["reps"] = wave.reps
    else:
        data["durationSeconds"] = wave.duration_seconds
    return data


def dict_to_wave(data: dict[str, Any]) -> WaveRecord:
    """
    Convert dict to WaveRecord.

    Args:
        data: Dict representation

    Returns:
        WaveRecord instance

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Wave record must be an object, got {type(data).__name__}")
    try:
        reps = data.get("reps")
        duration = data.get("durationSeconds")
        return WaveRecord(
            wave=int(data["wave"]),
            level=int(data["level"]),
            reps=int(reps) if reps is not None else None,
            duration_seconds=int(duration) if duration is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid wave record {data!r}: {e}") from e


def entry_to_dict(entry: WorkoutEntry) -> dict[str, Any]:
    """
    Convert WorkoutEntry to JSON-compatible dict.

    Absent totals are omitted rather than written as null.
    """
    data: dict[str, Any] = {
        "id": entry.id,
        "date": entry.date,
        "categoryName": entry.category_name,
        "movementName": entry.movement_name,
        "levelAchieved": entry.level_achieved,
    }
    if entry.total_reps is not None:
        data["totalReps"] = entry.total_reps
    if entry.duration_seconds is not None:
        data["durationSeconds"] = entry.duration_seconds
    data["waves"] = [wave_to_dict(w) for w in entry.waves]
    return data


def dict_to_entry(data: dict[str, Any]) -> WorkoutEntry:
    """
    Convert dict to WorkoutEntry.

    Args:
        data: Dict representation

    Returns:
        WorkoutEntry instance

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"History entry must be an object, got {type(data).__name__}")
    waves = data.get("waves")
    if waves is not None and not isinstance(waves, list):
        raise ValidationError(f"waves must be a list, got {type(waves).__name__}")
    try:
        total_reps = data.get("totalReps")
        duration = data.get("durationSeconds")
        return WorkoutEntry(
            id=str(data["id"]),
            date=str(data["date"]),
            category_name=str(data["categoryName"]),
            movement_name=str(data["movementName"]),
            level_achieved=int(data["levelAchieved"]),
            total_reps=int(total_reps) if total_reps is not None else None,
            duration_seconds=int(duration) if duration is not None else None,
            waves=tuple(dict_to_wave(w) for w in waves or []),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid history entry: {e}") from e


def history_to_json(entries: list[WorkoutEntry]) -> str:
    """Serialize history (newest first) to the ``workoutHistory`` JSON string."""
    return json.dumps([entry_to_dict(e) for e in entries])


def json_to_history_items(raw: str) -> list[Any]:
    """
    Parse the ``workoutHistory`` JSON string into raw items.

    Items are converted one by one by the caller so a single bad entry
    does not discard the rest.

    Raises:
        ValidationError: If the text is not a JSON array
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"workoutHistory is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise ValidationError("workoutHistory must be a JSON array")
    return data
