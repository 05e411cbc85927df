"""
Base types for the progression catalog.

A MovementCategory (Push, Pull, ...) holds an ordered list of leveled
Movement variants. Level 0 entries are warm-ups: always available, never
part of level cycling.
"""

from dataclasses import dataclass, field

from ..config import WARMUP_LEVEL


@dataclass(frozen=True)
class Movement:
    """One exercise variant within a progression."""

    name: str
    level: int                 # 0 = warm-up, 1..10 = progression level
    is_rep_based: bool         # False = measured by held duration
    default_duration_seconds: int | None = None  # Target hold for time-based variants
    reps_to_unlock_next: int | None = None       # Reps in one wave that unlock the next level
    duration_to_unlock_next: int | None = None   # Seconds in one wave that unlock the next level
    benchmark: int | None = None      # Target reps or seconds for the exercise itself
    warmup_target: int | None = None  # Reps or seconds for a warm-up set
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate movement data."""
        if not self.name:
            raise ValueError("Movement name must be non-empty")
        if not 0 <= self.level <= 10:
            raise ValueError(f"Movement level must be in 0..10, got {self.level}")
        if self.is_rep_based and self.duration_to_unlock_next is not None:
            raise ValueError(f"{self.name}: rep-based movement cannot have duration_to_unlock_next")
        if not self.is_rep_based and self.reps_to_unlock_next is not None:
            raise ValueError(f"{self.name}: time-based movement cannot have reps_to_unlock_next")

    @property
    def is_warmup(self) -> bool:
        return self.level == WARMUP_LEVEL

    @property
    def unit(self) -> str:
        """Unit of the work value: "reps" or "s"."""
        return "reps" if self.is_rep_based else "s"


@dataclass(frozen=True)
class MovementCategory:
    """
    A movement category and its progression ladder.

    Progressions are stored in catalog order, which is also difficulty
    order: levels > 0 are unique and increasing.
    """

    id: str            # e.g. "push"
    name: str          # e.g. "Push"
    icon: str          # icon reference for display, e.g. "arrow-up-circle"
    progressions: tuple[Movement, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate that ranked levels are unique and increasing."""
        ranked = [m.level for m in self.progressions if m.level > WARMUP_LEVEL]
        if ranked != sorted(set(ranked)):
            raise ValueError(
                f"Category {self.id!r}: levels above 0 must be unique and increasing, got {ranked}"
            )

    def ranked_progressions(self) -> list[Movement]:
        """Progressions with level > 0, lowest first (warm-ups excluded)."""
        return [m for m in self.progressions if m.level > WARMUP_LEVEL]

    def warmups(self) -> list[Movement]:
        """Level-0 warm-up variants."""
        return [m for m in self.progressions if m.level == WARMUP_LEVEL]
