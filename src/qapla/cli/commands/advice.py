"""Recommendation command."""

from ...core.recommendations import request_recommendations
from ...io.anthropic_client import AnthropicRecommendationGenerator
from .. import views
from ..app import DataDirOption, app, get_stores


@app.command()
def recommend(data_dir: DataDirOption = None) -> None:
    """
    Ask for personalized training advice based on recent history.

    Uses the Anthropic API (set ANTHROPIC_API_KEY).  If the request fails a
    fallback message is shown instead.
    """
    level_store, history_store = get_stores(data_dir)
    generator = AnthropicRecommendationGenerator()

    with views.console.status("Fetching recommendations..."):
        text = request_recommendations(history_store.all(), level_store.all(), generator)

    views.print_recommendations(text)
