"""
Hold timer for time-based movements.

A Timer holds one value that moves by one second per tick while running:
down towards zero (rest/hold countdown) or up from zero (elapsed hold
time against a target).  Ticks come from outside; run_timer() is the
blocking driver used by the CLI.
"""

import time
from typing import Callable

from .config import TICK_SECONDS

UpdateCallback = Callable[[int], None]
CompleteCallback = Callable[[int], None]


def format_clock(seconds: int) -> str:
    """Format seconds as MM:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class Timer:
    """
    Count-down / count-up clock.

    Counting down from ``initial_seconds``, reaching zero completes the
    timer: ``on_complete`` fires exactly once and the timer stops.
    Counting up, the value is elapsed time; whether a target is reached is
    up to the caller comparing values, except that ``skip()`` jumps to
    ``target_seconds`` and completes.

    A stopped timer (``stop()``) ignores every further call; restart by
    creating a new Timer.
    """

    def __init__(
        self,
        initial_seconds: int = 0,
        count_down: bool = True,
        target_seconds: int | None = None,
        on_update: UpdateCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ):
        if initial_seconds < 0:
            raise ValueError("initial_seconds must be non-negative")
        if target_seconds is not None and target_seconds < 0:
            raise ValueError("target_seconds must be non-negative")
        self.initial_seconds = initial_seconds
        self.count_down = count_down
        self.target_seconds = target_seconds
        self.on_update = on_update
        self.on_complete = on_complete
        self.value = initial_seconds
        self.running = False
        self.completed = False
        self.stopped = False

    @property
    def elapsed(self) -> int:
        """Seconds elapsed since the last reset."""
        if self.count_down:
            return self.initial_seconds - self.value
        return self.value - self.initial_seconds

    def start(self) -> None:
        if self.stopped or self.completed:
            return
        self.running = True

    def pause(self) -> None:
        self.running = False

    def toggle(self) -> bool:
        """Start or pause; returns the new running state."""
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def tick(self) -> None:
        """Advance one tick; no-op unless running."""
        if not self.running or self.stopped:
            return
        if self.count_down:
            self.value = max(0, self.value - TICK_SECONDS)
        else:
            self.value += TICK_SECONDS
        self._emit_update()
        if self.count_down and self.value == 0:
            self._complete()

    def reset(self) -> None:
        """Return to the initial value, paused, and report it."""
        if self.stopped:
            return
        self.running = False
        self.completed = False
        self.value = self.initial_seconds
        self._emit_update()

    def skip(self) -> None:
        """Jump to the terminal value and complete."""
        if self.stopped or self.completed:
            return
        if self.count_down:
            self.value = 0
        elif self.target_seconds is not None:
            self.value = max(self.value, self.target_seconds)
        self._emit_update()
        self._complete()

    def stop(self) -> None:
        """Cancel the timer for good (teardown)."""
        self.running = False
        self.stopped = True

    def _emit_update(self) -> None:
        if self.on_update is not None:
            self.on_update(self.value)

    def _complete(self) -> None:
        self.running = False
        if self.completed:
            return
        self.completed = True
        if self.on_complete is not None:
            self.on_complete(self.value)


def run_timer(
    timer: Timer,
    sleep: Callable[[float], None] = time.sleep,
    max_ticks: int | None = None,
) -> int:
    """
    Drive a timer with a fixed one-second tick until it stops running.

    The timer is started if needed.  KeyboardInterrupt pauses the timer
    and ends the loop, so no tick outlives the caller.

    Args:
        timer: Timer to drive
        sleep: Sleep function (injectable for tests)
        max_ticks: Optional safety limit on ticks

    Returns:
        Number of ticks performed
    """
    timer.start()
    ticks = 0
    try:
        while timer.running and (max_ticks is None or ticks < max_ticks):
            sleep(TICK_SECONDS)
            timer.tick()
            ticks += 1
    except KeyboardInterrupt:
        pass
    finally:
        timer.pause()
    return ticks
