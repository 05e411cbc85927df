"""
Adaptive workout recommendations.

Packs recent history and current levels into the request the text
generator expects, forwards it and returns the answer untouched.  The
generator is any callable taking the request dict and returning
``{"recommendations": str}``; see io/anthropic_client.py for the real one.
"""

from typing import Any, Callable, Mapping, TypedDict

from .catalog import CATEGORY_REGISTRY
from .config import FALLBACK_RECOMMENDATION, MIN_LEVEL, RECOMMENDATION_HISTORY_LIMIT, TARGET_REPS
from .models import WorkoutEntry


class HistoryItem(TypedDict):
    date: str  # YYYY-MM-DD
    category: str  # Push | Pull | Dips | Legs | Core
    level: int
    reps: int


class RecommendationRequest(TypedDict):
    workoutHistory: list[HistoryItem]
    currentLevel: dict[str, int]
    targetReps: int


Generator = Callable[[RecommendationRequest], Mapping[str, Any]]


def build_recommendation_input(
    history: list[WorkoutEntry],
    levels: Mapping[str, int],
) -> RecommendationRequest:
    """
    Build the generator request.

    Args:
        history: Workout history, newest first
        levels: Unlocked level per category id

    Returns:
        Request with at most RECOMMENDATION_HISTORY_LIMIT history items,
        levels keyed by category name, and the fixed rep target
    """
    items: list[HistoryItem] = [
        {
            "date": entry.day,
            "category": entry.category_name,
            "level": max(MIN_LEVEL, entry.level_achieved),
            "reps": entry.total_reps or 0,
        }
        for entry in history[:RECOMMENDATION_HISTORY_LIMIT]
    ]
    current_level = {
        category.name: levels.get(category_id, MIN_LEVEL)
        for category_id, category in CATEGORY_REGISTRY.items()
    }
    return {
        "workoutHistory": items,
        "currentLevel": current_level,
        "targetReps": TARGET_REPS,
    }


def request_recommendations(
    history: list[WorkoutEntry],
    levels: Mapping[str, int],
    generator: Generator,
) -> str:
    """
    Ask the generator for recommendations.

    Any failure of the generator, or a response without a text
    ``recommendations`` field, yields FALLBACK_RECOMMENDATION.

    Args:
        history: Workout history, newest first
        levels: Unlocked level per category id
        generator: External text generator

    Returns:
        Recommendation text, verbatim
    """
    request = build_recommendation_input(history, levels)
    try:
        response = generator(request)
    except Exception:
        return FALLBACK_RECOMMENDATION
    text = response.get("recommendations") if isinstance(response, Mapping) else None
    if not isinstance(text, str):
        return FALLBACK_RECOMMENDATION
    return text
