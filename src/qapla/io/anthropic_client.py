"""
Recommendation generator backed by the Anthropic Messages API.

Renders a recommendation request into a personal-trainer prompt and
returns the model's answer as ``{"recommendations": text}``.
"""

import os
from typing import Any

import anthropic

from ..core.engine.config_loader import load_settings
from ..core.recommendations import RecommendationRequest

DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 600
DEFAULT_TIMEOUT_SECONDS = 60


class RecommendationUnavailable(RuntimeError):
    """Raised when the generator cannot be used (e.g. no API key)."""

    pass


def render_prompt(request: RecommendationRequest) -> str:
    """
    Render the request as plain-text trainer instructions.

    Args:
        request: Recommendation request

    Returns:
        Prompt text
    """
    lines = [
        "You are a personal fitness trainer. Analyze the user's workout history and "
        "current levels and give personalized recommendations for adjusting their "
        "workout, focusing on achievable goals and preventing plateaus.",
        "",
        "Workout History:",
    ]
    if request["workoutHistory"]:
        for item in request["workoutHistory"]:
            lines.append(
                f"- Date: {item['date']}, Category: {item['category']}, "
                f"Level: {item['level']}, Reps: {item['reps']}"
            )
    else:
        lines.append("- (no workouts logged yet)")
    lines.append("")
    lines.append("Current Levels:")
    lines.append(
        "- " + ", ".join(f"{name}: {level}" for name, level in request["currentLevel"].items())
    )
    lines.append("")
    lines.append(f"Target Reps: {request['targetReps']}")
    lines.append("")
    lines.append(
        "Provide recommendations to optimize their progress and stay motivated. "
        "Keep them achievable. Consider suggesting level adjustments or changes in "
        "rep targets for specific categories."
    )
    return "\n".join(lines)


class AnthropicRecommendationGenerator:
    """Callable generator: request dict in, ``{"recommendations": str}`` out."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        settings: dict[str, Any] | None = None,
    ):
        """
        Initialize the generator.

        Args:
            api_key: Anthropic API key (defaults to the env var named in settings)
            model: Model to use (defaults to settings value)
            max_tokens: Maximum tokens for the response (defaults to settings value)
            timeout: Client timeout in seconds (defaults to settings value)
            settings: Pre-loaded settings (defaults to load_settings())
        """
        cfg = (settings if settings is not None else load_settings()).get("recommendations", {})
        key_env = cfg.get("api_key_env", "ANTHROPIC_API_KEY")
        self.api_key = api_key or os.environ.get(key_env)
        self.model = model or cfg.get("model", DEFAULT_MODEL)
        self.max_tokens = max_tokens or int(cfg.get("max_tokens", DEFAULT_MAX_TOKENS))
        self.timeout = timeout or float(cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
        self._client: anthropic.Anthropic | None = None

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not self.api_key:
                raise RecommendationUnavailable(
                    "No Anthropic API key configured; set ANTHROPIC_API_KEY."
                )
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def __call__(self, request: RecommendationRequest) -> dict[str, str]:
        message = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": render_prompt(request)}],
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        return {"recommendations": text.strip()}
