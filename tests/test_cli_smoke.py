"""
Minimal smoke tests for the training-calendar CLI.

Tests basic functionality:
- App runs without errors
- Data directory is created
- Templates can be added and listed
- A session can be started, paused, resumed and completed
- Calendar, readiness, progress and today views render
- Engine errors exit with status 1
"""

import tempfile
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

from training_calendar.cli.main import app
from training_calendar.io.store import EXERCISE_LOGS, READINESS_LOGS, SESSION_ATTEMPTS, SESSION_TEMPLATES, JsonlStore


runner = CliRunner()


@pytest.fixture
def data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "data"
    # The CLI points loguru at the runner's captured stderr; detach it.
    logger.remove()


def _init(data_dir: Path) -> None:
    result = runner.invoke(app, ["init", "--data-dir", str(data_dir)])
    assert result.exit_code == 0


def _add_template(data_dir: Path, name: str = "Upper A", day: str = "mon") -> str:
    result = runner.invoke(app, [
        "template-add", name,
        "--program", "p1",
        "--program-name", "Strength",
        "--day", day,
        "--minutes", "60",
        "--data-dir", str(data_dir),
    ])
    assert result.exit_code == 0
    return next(t.id for t in JsonlStore(data_dir).find(SESSION_TEMPLATES) if t.name == name)


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "calendar" in result.output.lower()

    def test_init_creates_data_files(self, data_dir):
        """Test init creates one file per collection."""
        _init(data_dir)
        assert (data_dir / "session_attempts.jsonl").exists()
        assert (data_dir / "session_templates.jsonl").exists()

    def test_commands_require_init(self, data_dir):
        """Test commands refuse to run before init."""
        result = runner.invoke(app, ["template-list", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "init" in result.output

    def test_template_add_and_list(self, data_dir):
        """Test a template shows up in template-list."""
        _init(data_dir)
        _add_template(data_dir)
        result = runner.invoke(app, ["template-list", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "Upper" in result.output

    def test_template_add_rejects_bad_day(self, data_dir):
        """Test an invalid day of week is refused."""
        _init(data_dir)
        result = runner.invoke(app, ["template-add", "X", "--day", "funday", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_session_lifecycle(self, data_dir):
        """Test start, pause, resume, log-set and complete."""
        _init(data_dir)
        template_id = _add_template(data_dir)
        common = ["--data-dir", str(data_dir), "--athlete", "ath"]

        result = runner.invoke(app, ["start", template_id, *common])
        assert result.exit_code == 0
        assert "Attempt id" in result.output

        assert runner.invoke(app, ["pause", *common]).exit_code == 0
        assert runner.invoke(app, ["resume", *common]).exit_code == 0
        result = runner.invoke(app, ["log-set", "bench", "1", "--weight", "80", "--reps", "8", *common])
        assert result.exit_code == 0
        assert "Logged bench set 1" in result.output

        result = runner.invoke(app, ["complete", "--rpe", "7", *common])
        assert result.exit_code == 0
        assert "Session completed!" in result.output

        store = JsonlStore(data_dir)
        attempts = store.find(SESSION_ATTEMPTS, athlete_id="ath")
        assert len(attempts) == 1
        assert attempts[0].completed_at is not None
        assert attempts[0].overall_rpe == 7
        assert len(store.find(EXERCISE_LOGS, athlete_id="ath")) == 1

    def test_complete_without_open_attempt(self, data_dir):
        """Test complete exits 1 when nothing is running."""
        _init(data_dir)
        result = runner.invoke(app, ["complete", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_start_unknown_template(self, data_dir):
        """Test engine errors are reported with exit code 1."""
        _init(data_dir)
        result = runner.invoke(app, ["start", "does-not-exist", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_readiness_log(self, data_dir):
        """Test a check-in is saved and out-of-range input rejected."""
        _init(data_dir)
        scores = ["--sleep", "8", "--energy", "7", "--soreness", "3", "--stress", "4"]
        result = runner.invoke(app, ["readiness-log", *scores, "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "saved" in result.output

        bad = ["--sleep", "11", "--energy", "7", "--soreness", "3", "--stress", "4"]
        result = runner.invoke(app, ["readiness-log", *bad, "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert len(JsonlStore(data_dir).find(READINESS_LOGS)) == 1

    @pytest.mark.parametrize("view", ["day", "week", "month", "year"])
    def test_calendar_views(self, data_dir, view):
        """Test every calendar view renders."""
        _init(data_dir)
        _add_template(data_dir)
        result = runner.invoke(app, ["calendar", "--view", view, "--date", "2026-10-19", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "2026" in result.output

    def test_calendar_rejects_unknown_view(self, data_dir):
        """Test an unknown view kind exits 1."""
        _init(data_dir)
        result = runner.invoke(app, ["calendar", "--view", "fortnight", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_dashboards_render(self, data_dir):
        """Test readiness, progress and today run on an empty history."""
        _init(data_dir)
        runner.invoke(app, ["quote-add", "Discipline is freedom", "--data-dir", str(data_dir)])
        for command in ("readiness", "progress", "today"):
            result = runner.invoke(app, [command, "--data-dir", str(data_dir)])
            assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["today", "--data-dir", str(data_dir)])
        assert "Discipline" in result.output
