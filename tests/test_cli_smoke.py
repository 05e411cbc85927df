"""
Smoke tests for the qapla CLI.

Tests basic functionality:
- App runs without errors
- Level and history files are created
- A workout can be driven from console input
- Unlocks and history entries are persisted
- Recommendations fall back cleanly without an API key
"""

import json
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from qapla.cli.main import app


runner = CliRunner()


@pytest.fixture
def temp_data_dir(monkeypatch):
    """Create a temporary data directory and point QAPLA_HOME at it."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("QAPLA_HOME", tmpdir)
        yield Path(tmpdir)


def _levels(data_dir: Path) -> dict:
    result = runner.invoke(app, ["levels", "--data-dir", str(data_dir), "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def _history(data_dir: Path) -> list:
    result = runner.invoke(app, ["history", "--data-dir", str(data_dir), "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "workout" in result.output

    def test_levels_start_at_one(self, temp_data_dir):
        """A fresh data directory starts every category at level 1."""
        levels = _levels(temp_data_dir)

        assert levels == {"push": 1, "pull": 1, "dips": 1, "legs": 1, "core": 1}
        assert (temp_data_dir / "userLevels.json").exists()

    def test_levels_table(self, temp_data_dir):
        result = runner.invoke(app, ["levels", "-p", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "Unlocked Levels" in result.output

    def test_empty_history(self, temp_data_dir):
        result = runner.invoke(app, ["history", "-p", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "No workouts recorded yet." in result.output

    def test_catalog(self, temp_data_dir):
        result = runner.invoke(app, ["catalog", "pull", "-p", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "Pull Progression" in result.output

    def test_catalog_unknown_category(self, temp_data_dir):
        result = runner.invoke(app, ["catalog", "arms", "-p", str(temp_data_dir)])
        assert result.exit_code == 1
        assert "Unknown category" in result.output

    def test_menu_quit(self, temp_data_dir):
        result = runner.invoke(app, [], input="0\n")
        assert result.exit_code == 0

    def test_menu_runs_levels(self, temp_data_dir):
        result = runner.invoke(app, [], input="2\n")
        assert result.exit_code == 0
        assert "Unlocked Levels" in result.output


class TestWorkout:
    """Driving a workout through console input."""

    def test_full_wave_unlocks_next_level(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "push", "-p", str(temp_data_dir)], input="50\nf\n"
        )

        assert result.exit_code == 0, result.output
        assert "Level Up!" in result.output
        assert "Workout complete" in result.output
        assert _levels(temp_data_dir)["push"] == 2

        history = _history(temp_data_dir)
        assert len(history) == 1
        assert history[0]["categoryName"] == "Push"
        assert history[0]["movementName"] == "Wall Push-Ups"
        assert history[0]["levelAchieved"] == 1
        assert history[0]["totalReps"] == 50
        assert history[0]["waves"] == [{"wave": 1, "level": 1, "reps": 50}]

    def test_multi_category_session(self, temp_data_dir):
        result = runner.invoke(
            app,
            ["workout", "push", "core", "-p", str(temp_data_dir)],
            input="10\nl\n12\nf\n15\nf\n",
        )

        assert result.exit_code == 0, result.output
        history = _history(temp_data_dir)
        assert [h["categoryName"] for h in history] == ["Core", "Push"]
        assert history[1]["totalReps"] == 22
        assert len(history[1]["waves"]) == 2
        assert history[0]["movementName"] == "Lying Knee Tucks"

    def test_time_based_hold_entered_as_seconds(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "pull", "-p", str(temp_data_dir)], input="30\nf\n"
        )

        assert result.exit_code == 0, result.output
        history = _history(temp_data_dir)
        assert history[0]["movementName"] == "Dead Hang"
        assert history[0]["durationSeconds"] == 30
        assert "totalReps" not in history[0]
        assert _levels(temp_data_dir)["pull"] == 2

    def test_categories_prompted_when_missing(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "-p", str(temp_data_dir)], input="5\n8\nf\n"
        )

        assert result.exit_code == 0, result.output
        assert _history(temp_data_dir)[0]["categoryName"] == "Core"

    def test_finish_without_work_is_rejected(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "legs", "-p", str(temp_data_dir)], input="f\nq\n"
        )

        assert result.exit_code == 0, result.output
        assert "Nothing to log" in result.output
        assert _history(temp_data_dir) == []

    def test_quit_discards_work(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "dips", "-p", str(temp_data_dir)], input="10\nl\nq\ny\n"
        )

        assert result.exit_code == 0, result.output
        assert "Workout ended." in result.output
        assert _history(temp_data_dir) == []

    def test_end_of_input_ends_workout(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "push", "-p", str(temp_data_dir)], input="10\n"
        )

        assert result.exit_code == 0, result.output
        assert _history(temp_data_dir) == []

    def test_locked_level_message(self, temp_data_dir):
        result = runner.invoke(
            app, ["workout", "push", "-p", str(temp_data_dir)], input="10\nu\n5\nu\nq\ny\n"
        )

        assert result.exit_code == 0, result.output
        assert "Level 3 is locked." in result.output

    def test_unknown_category(self, temp_data_dir):
        result = runner.invoke(app, ["workout", "arms", "-p", str(temp_data_dir)])

        assert result.exit_code == 1
        assert "Unknown category: arms" in result.output


class TestRecoveryAndAdvice:
    """Storage recovery and recommendations."""

    def test_corrupt_levels_warns_and_recovers(self, temp_data_dir):
        (temp_data_dir / "userLevels.json").write_text("{broken")

        result = runner.invoke(app, ["levels", "-p", str(temp_data_dir)])

        assert result.exit_code == 0
        assert "Warning: Failed to load saved levels" in result.output
        assert _levels(temp_data_dir)["push"] == 1

    def test_recommend_without_api_key(self, temp_data_dir, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        result = runner.invoke(app, ["recommend", "-p", str(temp_data_dir)])

        assert result.exit_code == 0
        assert "Could not fetch recommendations at this time." in result.output
