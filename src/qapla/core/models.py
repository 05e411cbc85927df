"""
Data models for qapla.

Dataclasses for waves, completed movement entries and the workout
session queue.  Catalog types (Movement, MovementCategory) live in
core/catalog/base.py.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .config import MIN_LEVEL


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp, accepting a trailing "Z" for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class WaveRecord:
    """
    One logged wave (set/attempt) within a movement.

    Exactly one of reps / duration_seconds is set, matching the mode of the
    exercise the wave was performed on.
    """

    wave: int  # 1-based, increasing within one movement
    level: int
    reps: int | None = None
    duration_seconds: int | None = None

    def __post_init__(self) -> None:
        """Validate wave data."""
        if self.wave < 1:
            raise ValueError("wave must be 1 or greater")
        if not 0 <= self.level <= 10:
            raise ValueError(f"level must be in 0..10, got {self.level}")
        if (self.reps is None) == (self.duration_seconds is None):
            raise ValueError("exactly one of reps / duration_seconds must be set")
        if self.reps is not None and self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.duration_seconds is not None and self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")


@dataclass(frozen=True)
class WorkoutEntry:
    """
    A completed movement, as stored in history.

    Immutable once created.
    """

    id: str  # unique, time-derived
    date: str  # ISO timestamp
    category_name: str
    movement_name: str
    level_achieved: int
    total_reps: int | None = None
    duration_seconds: int | None = None
    waves: tuple[WaveRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate entry data."""
        try:
            parse_timestamp(self.date)
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp: {self.date}") from e
        if not 0 <= self.level_achieved <= 10:
            raise ValueError(f"level_achieved must be in 0..10, got {self.level_achieved}")
        if self.total_reps is not None and self.total_reps < 0:
            raise ValueError("total_reps must be non-negative")
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")

    @property
    def day(self) -> str:
        """Calendar date of the entry (YYYY-MM-DD)."""
        return parse_timestamp(self.date).strftime("%Y-%m-%d")


@dataclass
class SessionSlot:
    """A queued category in a workout session."""

    category_id: str
    starting_level: int

    def __post_init__(self) -> None:
        if self.starting_level < MIN_LEVEL:
            raise ValueError("starting_level must be at least 1")


@dataclass
class WorkoutSession:
    """
    Ordered queue of categories chosen at setup, plus a cursor.

    Created on session start; the cursor advances as movements complete.
    """

    slots: list[SessionSlot] = field(default_factory=list)
    cursor: int = 0

    def __post_init__(self) -> None:
        if not self.slots:
            raise ValueError("a workout session needs at least one category")
        if not 0 <= self.cursor < len(self.slots):
            raise ValueError(f"cursor {self.cursor} out of range")

    def current(self) -> SessionSlot:
        """Return the slot under the cursor."""
        return self.slots[self.cursor]

    def is_last(self) -> bool:
        return self.cursor == len(self.slots) - 1

    def advance(self) -> bool:
        """
        Move the cursor to the next slot.

        Returns:
            True if there is a next slot, False if the session is exhausted
            (the cursor is left unchanged).
        """
        if self.is_last():
            return False
        self.cursor += 1
        return True
