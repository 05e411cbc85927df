"""
Configuration constants for the progression engine.

All fixed rules of the level system are centralized here.
Tunable values that belong to the user (recommendation model, data
directory) live in settings.yaml, see core/engine/config_loader.py.
"""

from typing import Final

# =============================================================================
# LEVELS
# =============================================================================

MIN_LEVEL: Final[int] = 1  # Floor for unlocked levels
MAX_LEVEL: Final[int] = 10  # Ceiling for unlocked levels
WARMUP_LEVEL: Final[int] = 0  # Warm-up variants, always available

# Session setup suggests starting this many levels below the unlocked level
STARTING_LEVEL_OFFSET: Final[int] = 2

# Offsets below the unlocked level tried when picking the initial exercise
INITIAL_SCAN_OFFSETS: Final[tuple[int, ...]] = (0, 1, 2)

# =============================================================================
# TARGETS AND UNLOCKING
# =============================================================================

TARGET_REPS: Final[int] = 50  # Total reps target per movement; default unlock threshold

# =============================================================================
# HISTORY
# =============================================================================

HISTORY_LIMIT: Final[int] = 20  # Stored entries, newest first
RECOMMENDATION_HISTORY_LIMIT: Final[int] = 10  # Entries sent to the recommender

# =============================================================================
# TIMER
# =============================================================================

TICK_SECONDS: Final[int] = 1

# =============================================================================
# PERSISTED STATE KEYS
# =============================================================================

USER_LEVELS_KEY: Final[str] = "userLevels"
WORKOUT_HISTORY_KEY: Final[str] = "workoutHistory"

# =============================================================================
# RECOMMENDATIONS
# =============================================================================

FALLBACK_RECOMMENDATION: Final[str] = "Could not fetch recommendations at this time."


def clamp_level(level: int) -> int:
    """Clamp a level into [MIN_LEVEL, MAX_LEVEL]."""
    return max(MIN_LEVEL, min(MAX_LEVEL, int(level)))


def starting_level_for(unlocked_level: int) -> int:
    """
    Suggested starting level for a session slot.

    Two levels below the unlocked level, never below MIN_LEVEL.

    Args:
        unlocked_level: Current unlocked level for the category

    Returns:
        Starting level
    """
    return max(MIN_LEVEL, unlocked_level - STARTING_LEVEL_OFFSET)
