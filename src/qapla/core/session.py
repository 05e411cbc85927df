"""
Workout session engine.

MovementTracker is the per-movement state machine: it selects the
exercise to show, accumulates waves, applies the unlock rule against the
level store and decides level navigation.  SessionEngine queues the
chosen categories, hands completed entries to the history store and
advances through the queue.

Neither class touches the terminal.  Every action either raises
WorkoutValidationError before changing any state, or returns the notices
(level-up, boundary info) the caller should show.

Phases of a tracker:

    NO_MOVEMENT → EXERCISE_SELECTED → WAVE_IN_PROGRESS → WAVE_LOGGED
                                            ↑                 │
                                            └─────────────────┘
                  WAVE_IN_PROGRESS / WAVE_LOGGED → MOVEMENT_COMPLETED
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Literal, Protocol
from uuid import uuid4

from .errors import WorkoutValidationError
from .catalog import Movement, MovementCategory, get_category, movement_by_level, movement_by_name
from .config import INITIAL_SCAN_OFFSETS, MAX_LEVEL, MIN_LEVEL, TARGET_REPS, starting_level_for
from .models import SessionSlot, WaveRecord, WorkoutEntry, WorkoutSession
from .timer import Timer

Direction = Literal["up", "down"]
NoticeKind = Literal["level_up", "info"]
Clock = Callable[[], datetime]


class Phase(str, Enum):
    NO_MOVEMENT = "no_movement"
    EXERCISE_SELECTED = "exercise_selected"
    WAVE_IN_PROGRESS = "wave_in_progress"
    WAVE_LOGGED = "wave_logged"
    MOVEMENT_COMPLETED = "movement_completed"


@dataclass(frozen=True)
class Notice:
    """A message for the user produced by an engine action."""

    kind: NoticeKind
    message: str


@dataclass(frozen=True)
class TargetProgress:
    """Work done in the current movement against its target."""

    current: int
    target: int
    unit: str  # "reps" or "s"

    @property
    def remaining(self) -> int:
        return max(0, self.target - self.current)

    @property
    def reached(self) -> bool:
        return self.target > 0 and self.current >= self.target


class LevelSource(Protocol):
    """The part of the level store the engine needs."""

    def get(self, category_id: str) -> int: ...

    def set(self, category_id: str, level: int) -> int: ...


class HistorySink(Protocol):
    def append(self, entry: WorkoutEntry) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# PURE SELECTION RULES
# =============================================================================


def select_initial_movement(category: MovementCategory, unlocked_level: int) -> Movement | None:
    """
    Pick the exercise shown when a category becomes active.

    Tries the unlocked level, then one and two levels below (never below
    level 1).  Falls back to the lowest ranked progression, then to the
    lowest progression overall (warm-ups included).

    Args:
        category: Category being started
        unlocked_level: Current unlocked level for the category

    Returns:
        The movement to show, or None if the category has no progressions
    """
    for offset in INITIAL_SCAN_OFFSETS:
        movement = movement_by_level(category, max(MIN_LEVEL, unlocked_level - offset))
        if movement is not None:
            return movement
    ranked = category.ranked_progressions()
    if ranked:
        return min(ranked, key=lambda m: m.level)
    if category.progressions:
        return min(category.progressions, key=lambda m: m.level)
    return None


def unlock_threshold(movement: Movement) -> int | None:
    """
    Work needed in a single wave at the frontier to unlock the next level.

    Rep-based: ``reps_to_unlock_next``, defaulting to TARGET_REPS.
    Time-based: ``duration_to_unlock_next``, defaulting to the movement's
    default duration.  None means the movement cannot unlock anything.
    """
    if movement.is_rep_based:
        return movement.reps_to_unlock_next if movement.reps_to_unlock_next is not None else TARGET_REPS
    if movement.duration_to_unlock_next is not None:
        return movement.duration_to_unlock_next
    return movement.default_duration_seconds


def adjacent_movement(
    category: MovementCategory,
    current: Movement,
    unlocked_level: int,
    direction: Direction,
) -> Movement | None:
    """
    Resolve arrow navigation from ``current``.

    Only ranked progressions (level > 0) take part.  Down moves to the
    preceding ranked entry.  Up scans forward and accepts the first entry
    at or below the unlocked level, or exactly one above it when
    ``current`` sits at the unlocked level; the scan stops at the first
    entry more than one level above the unlocked level.  From a warm-up,
    up starts at the lowest ranked entry and down has nowhere to go.

    Returns:
        Target movement, or None when navigation is not possible
    """
    ranked = category.ranked_progressions()
    pos = next((i for i, m in enumerate(ranked) if m == current), None)

    if direction == "down":
        if pos is None or pos == 0:
            return None
        return ranked[pos - 1]

    start = 0 if pos is None else pos + 1
    for candidate in ranked[start:]:
        if candidate.level <= unlocked_level:
            return candidate
        if candidate.level == unlocked_level + 1 and current.level == unlocked_level:
            return candidate
        if candidate.level > unlocked_level + 1:
            break
    return None


# =============================================================================
# PER-MOVEMENT STATE MACHINE
# =============================================================================


class MovementTracker:
    """
    Working state for one category during a session.

    Holds the current exercise, the logged waves and running totals, the
    pending (not yet logged) work value and the hold timer.  Nothing here
    is persisted; the level store is only written by the unlock rule.
    """

    def __init__(self, category: MovementCategory, levels: LevelSource, clock: Clock | None = None):
        self.category = category
        self.levels = levels
        self.clock: Clock = clock or _utcnow
        self.phase = Phase.NO_MOVEMENT
        self.unlocked_level = levels.get(category.id)
        self.current: Movement | None = None
        self.target_duration: int | None = None
        self.wave_number = 1
        self.waves: list[WaveRecord] = []
        self.total_reps = 0
        self.total_duration = 0
        self.pending_reps = 0
        self.elapsed_seconds = 0
        self.timer = self._new_timer()

    # ── setup ───────────────────────────────────────────────────────────────

    def initialize(self, unlocked_level: int | None = None) -> Movement | None:
        """
        Select the initial exercise and clear all wave state.

        Args:
            unlocked_level: Unlocked level to start from (default: level store)

        Returns:
            The selected exercise, or None if the category has none
        """
        self.unlocked_level = unlocked_level if unlocked_level is not None else self.levels.get(self.category.id)
        self.current = select_initial_movement(self.category, self.unlocked_level)
        self._reset_wave_state()
        self.phase = Phase.EXERCISE_SELECTED if self.current is not None else Phase.NO_MOVEMENT
        return self.current

    def discard(self) -> None:
        """Drop all unsaved work and stop the timer."""
        self.timer.stop()
        self.waves = []
        self.total_reps = 0
        self.total_duration = 0
        self.pending_reps = 0
        self.elapsed_seconds = 0
        self.phase = Phase.NO_MOVEMENT

    # ── work input ──────────────────────────────────────────────────────────

    @property
    def is_rep_based(self) -> bool:
        return self.current is not None and self.current.is_rep_based

    @property
    def pending_work(self) -> int:
        """Work entered for the wave in progress (reps or seconds)."""
        if self.current is None:
            return 0
        return self.pending_reps if self.current.is_rep_based else self.elapsed_seconds

    def set_reps(self, reps: int) -> None:
        """Enter the rep count for the wave in progress."""
        movement = self._require_exercise()
        if not movement.is_rep_based:
            raise WorkoutValidationError(f"{movement.name} is time-based; record hold time instead.")
        if reps < 0:
            raise WorkoutValidationError("Reps cannot be negative.")
        self.pending_reps = int(reps)
        self._mark_in_progress()

    def set_elapsed(self, seconds: int) -> None:
        """Enter the hold time for the wave in progress."""
        movement = self._require_exercise()
        if movement.is_rep_based:
            raise WorkoutValidationError(f"{movement.name} is rep-based; enter reps instead.")
        if seconds < 0:
            raise WorkoutValidationError("Hold time cannot be negative.")
        self.elapsed_seconds = int(seconds)
        self._mark_in_progress()

    def toggle_timer(self) -> bool:
        """Start or pause the hold timer; returns the running state."""
        if self.current is None or self.current.is_rep_based:
            return False
        return self.timer.toggle()

    def tick(self) -> None:
        """Advance the hold timer by one tick."""
        self.timer.tick()

    def _on_timer_update(self, value: int) -> None:
        if self.current is None or self.current.is_rep_based:
            return
        self.elapsed_seconds = value
        self._mark_in_progress()

    # ── waves ───────────────────────────────────────────────────────────────

    def log_wave(self) -> list[Notice]:
        """
        Log the pending work as a wave.

        Appends the wave, adds it to the running total, advances the wave
        counter, applies the unlock rule and clears the pending input.

        Returns:
            Notices to show (level-up)

        Raises:
            WorkoutValidationError: If no reps / time were entered
        """
        if self.current is None:
            return [Notice("info", f"No exercise available for {self.category.name}.")]
        work = self.pending_work
        if work <= 0:
            raise WorkoutValidationError(self._missing_work_message())
        return self._record_wave(work)

    def change_level(self, direction: Direction) -> list[Notice]:
        """
        Arrow navigation: log the pending wave, then move one level.

        Running totals are kept across the change.  At a boundary the wave
        is still logged and an informational notice explains why the level
        did not change.

        Raises:
            WorkoutValidationError: If no reps / time were entered
            ValueError: If direction is not "up" or "down"
        """
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        if self.current is None:
            return [Notice("info", f"No exercise available for {self.category.name}.")]

        notices = self.log_wave()
        origin = self.current
        target = adjacent_movement(self.category, origin, self.unlocked_level, direction)

        if target is None:
            notices.append(Notice("info", self._boundary_message(origin, direction)))
            return notices

        self.current = target
        if not target.is_rep_based:
            self.target_duration = target.default_duration_seconds
        self._reset_pending()
        return notices

    def selectable_exercises(self) -> list[Movement]:
        """Exercises the picker offers: warm-ups plus every unlocked level."""
        return [
            m for m in self.category.progressions
            if m.is_warmup or m.level <= self.unlocked_level
        ]

    def select_exercise(self, name: str) -> Movement:
        """
        Direct picker: switch to an exercise and start the movement over.

        Unlike arrow navigation this clears the logged waves, totals and
        wave counter.

        Raises:
            WorkoutValidationError: If the exercise is unknown or locked
        """
        movement = movement_by_name(self.category, name)
        if movement is None:
            raise WorkoutValidationError(f"No exercise named {name!r} in {self.category.name}.")
        if not (movement.is_warmup or movement.level <= self.unlocked_level):
            raise WorkoutValidationError(
                f"Level {movement.level} ({movement.name}) is locked; unlocked level is {self.unlocked_level}."
            )
        self.current = movement
        self._reset_wave_state()
        self.phase = Phase.EXERCISE_SELECTED
        return movement

    def finish(self) -> tuple[WorkoutEntry, list[Notice]]:
        """
        Complete the movement and build its history entry.

        Pending work is logged first (unlock rule included).

        Returns:
            The entry and any notices raised by the final wave

        Raises:
            WorkoutValidationError: If nothing was logged or entered
        """
        if self.current is None:
            raise WorkoutValidationError(f"No exercise available for {self.category.name}.")
        if not self.waves and self.pending_work <= 0:
            raise WorkoutValidationError("Nothing to log: log at least one wave or enter reps/time first.")

        notices: list[Notice] = []
        if self.pending_work > 0:
            notices = self._record_wave(self.pending_work)

        ranked_levels = [w.level for w in self.waves if w.level > 0]
        if ranked_levels:
            level_achieved = max(ranked_levels)
            achieved = movement_by_level(self.category, level_achieved)
            movement_name = achieved.name if achieved is not None else self.current.name
        else:
            level_achieved = self.current.level
            movement_name = self.current.name

        has_reps = any(w.reps is not None for w in self.waves)
        has_time = any(w.duration_seconds is not None for w in self.waves)
        now = self.clock()
        entry = WorkoutEntry(
            id=f"{now.strftime('%Y%m%dT%H%M%S%f')}-{uuid4().hex[:6]}",
            date=now.isoformat(),
            category_name=self.category.name,
            movement_name=movement_name,
            level_achieved=level_achieved,
            total_reps=self.total_reps if has_reps else None,
            duration_seconds=self.total_duration if has_time else None,
            waves=tuple(self.waves),
        )
        self.timer.stop()
        self.phase = Phase.MOVEMENT_COMPLETED
        return entry, notices

    def target_progress(self) -> TargetProgress:
        """
        Logged plus pending work against the movement target.

        Rep-based exercises count reps towards TARGET_REPS; time-based
        exercises count seconds towards the current target duration.
        """
        if self.current is not None and not self.current.is_rep_based:
            return TargetProgress(
                current=self.total_duration + self.elapsed_seconds,
                target=self.target_duration or 0,
                unit="s",
            )
        return TargetProgress(current=self.total_reps + self.pending_reps, target=TARGET_REPS, unit="reps")

    # ── internals ───────────────────────────────────────────────────────────

    def _record_wave(self, work: int) -> list[Notice]:
        movement = self.current
        assert movement is not None
        wave = WaveRecord(
            wave=self.wave_number,
            level=movement.level,
            reps=work if movement.is_rep_based else None,
            duration_seconds=None if movement.is_rep_based else work,
        )
        self.waves.append(wave)
        if movement.is_rep_based:
            self.total_reps += work
        else:
            self.total_duration += work
        self.wave_number += 1

        notices = self._check_unlock(movement, work)
        self._reset_pending()
        self.phase = Phase.WAVE_LOGGED
        return notices

    def _check_unlock(self, movement: Movement, work: int) -> list[Notice]:
        unlocked = self.unlocked_level
        if movement.level != unlocked or unlocked >= MAX_LEVEL:
            return []
        threshold = unlock_threshold(movement)
        if threshold is None or work < threshold:
            return []
        # Re-read the store: another path may already have applied this unlock.
        stored = self.levels.get(self.category.id)
        if stored >= unlocked + 1:
            self.unlocked_level = stored
            return []
        new_level = self.levels.set(self.category.id, unlocked + 1)
        self.unlocked_level = new_level
        return [Notice("level_up", f"You've unlocked Level {new_level} for {self.category.name}! Qapla'!")]

    def _boundary_message(self, origin: Movement, direction: Direction) -> str:
        if direction == "down":
            return "Lowest level reached."
        higher = [m for m in self.category.ranked_progressions() if m.level > origin.level]
        if not higher:
            return "Highest level reached."
        frontier = movement_by_level(self.category, self.unlocked_level)
        threshold = unlock_threshold(frontier) if frontier is not None else None
        if frontier is None or threshold is None:
            return f"Level {higher[0].level} is locked."
        return (
            f"Level {higher[0].level} is locked. Log {threshold} {frontier.unit} in one wave "
            f"of {frontier.name} (level {self.unlocked_level}) to unlock the next level."
        )

    def _missing_work_message(self) -> str:
        if self.is_rep_based:
            return "Please enter a positive number of reps."
        return "Please record a hold time greater than zero."

    def _require_exercise(self) -> Movement:
        if self.current is None:
            raise WorkoutValidationError(f"No exercise available for {self.category.name}.")
        return self.current

    def _mark_in_progress(self) -> None:
        if self.pending_work > 0 and self.phase in (Phase.EXERCISE_SELECTED, Phase.WAVE_LOGGED):
            self.phase = Phase.WAVE_IN_PROGRESS

    def _new_timer(self) -> Timer:
        return Timer(
            initial_seconds=0,
            count_down=False,
            target_seconds=self.target_duration,
            on_update=self._on_timer_update,
        )

    def _reset_pending(self) -> None:
        self.pending_reps = 0
        self.elapsed_seconds = 0
        self.timer.stop()
        self.timer = self._new_timer()

    def _reset_wave_state(self) -> None:
        self.wave_number = 1
        self.waves = []
        self.total_reps = 0
        self.total_duration = 0
        self.target_duration = (
            self.current.default_duration_seconds
            if self.current is not None and not self.current.is_rep_based
            else None
        )
        self._reset_pending()


# =============================================================================
# SESSION
# =============================================================================


@dataclass
class ActionResult:
    """Outcome of completing a movement."""

    entry: WorkoutEntry
    notices: list[Notice] = field(default_factory=list)
    session_finished: bool = False


class SessionEngine:
    """
    Runs a workout: a queue of categories worked through one by one.

    Owns the active WorkoutSession and the MovementTracker for the
    category under the cursor.  Completed movements go to the history
    sink; the level store is shared with the tracker.
    """

    def __init__(self, levels: LevelSource, history: HistorySink, clock: Clock | None = None):
        self.levels = levels
        self.history = history
        self.clock = clock
        self.session: WorkoutSession | None = None
        self.tracker: MovementTracker | None = None

    @property
    def is_active(self) -> bool:
        return self.session is not None

    def start(self, category_ids: list[str]) -> MovementTracker:
        """
        Start a session over the given categories, in order.

        Duplicate ids are dropped.  Each slot records a starting level two
        below the category's unlocked level (at least 1).

        Returns:
            The tracker for the first category

        Raises:
            WorkoutValidationError: If no category or an unknown one is given
        """
        unique_ids = list(dict.fromkeys(category_ids))
        if not unique_ids:
            raise WorkoutValidationError("Select at least one movement category.")
        for category_id in unique_ids:
            try:
                get_category(category_id)
            except ValueError as e:
                raise WorkoutValidationError(str(e)) from e

        self._clear()
        slots = [SessionSlot(cid, starting_level_for(self.levels.get(cid))) for cid in unique_ids]
        self.session = WorkoutSession(slots=slots)
        return self._load_current()

    def current_slot(self) -> SessionSlot | None:
        return self.session.current() if self.session is not None else None

    def finish_movement(self) -> ActionResult:
        """
        Complete the current movement and move to the next category.

        The entry is appended to history before the cursor moves.  After
        the last category the session ends.

        Raises:
            WorkoutValidationError: If no session is active or nothing was logged
        """
        if self.session is None or self.tracker is None:
            raise WorkoutValidationError("No workout session in progress.")

        entry, notices = self.tracker.finish()
        self.history.append(entry)

        if self.session.advance():
            self._load_current()
            return ActionResult(entry=entry, notices=notices, session_finished=False)
        self._clear()
        return ActionResult(entry=entry, notices=notices, session_finished=True)

    def end_early(self) -> None:
        """Abandon the session; unsaved work on the current movement is lost."""
        self._clear()

    def _load_current(self) -> MovementTracker:
        assert self.session is not None
        if self.tracker is not None:
            self.tracker.discard()
        category = get_category(self.session.current().category_id)
        self.tracker = MovementTracker(category, self.levels, clock=self.clock)
        self.tracker.initialize()
        return self.tracker

    def _clear(self) -> None:
        if self.tracker is not None:
            self.tracker.discard()
        self.tracker = None
        self.session = None
