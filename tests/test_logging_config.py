"""Tests for diagnostic logging and run logs."""

import json
import logging

import pytest
from rich.console import Console

from vmfleet.logging_config import RunLog, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestRunLog:
    """Tests for RunLog."""

    def test_lines_and_levels(self, tmp_path):
        """Test each call writes one timestamped line."""
        with RunLog(tmp_path / "run.log") as log:
            log.info("Selection: Zone 1")
            log.warning("Timed out")
            log.error("Failed to stop vm-a: boom", command="az vm stop --name vm-a")

        lines = (tmp_path / "run.log").read_text().splitlines()
        assert len(lines) == 3
        assert lines[0].endswith("[INFO] Selection: Zone 1")
        assert lines[1].endswith("[WARNING] Timed out")
        assert lines[2].endswith("[ERROR] Failed to stop vm-a: boom | command: az vm stop --name vm-a")

    def test_command_prefixes(self, tmp_path):
        """Test simulate mode uses the would-run prefix."""
        with RunLog(tmp_path / "run.log") as log:
            log.command("az vm start", dry_run=True)
            log.command("az vm start", dry_run=False)

        lines = (tmp_path / "run.log").read_text().splitlines()
        assert lines[0].endswith("Would run: az vm start")
        assert lines[1].endswith("Running: az vm start")

    def test_append_only(self, tmp_path):
        """Test reopening the same file appends."""
        with RunLog(tmp_path / "run.log") as log:
            log.info("first")
        with RunLog(tmp_path / "run.log") as log:
            log.info("second")

        assert len((tmp_path / "run.log").read_text().splitlines()) == 2

    def test_console_echo_escapes_markup(self, tmp_path):
        """Test lines are echoed verbatim, without rich markup parsing."""
        console = Console(record=True, width=200)
        with RunLog(tmp_path / "run.log", console) as log:
            log.info("tags [bold]not markup[/bold]")

        assert "tags [bold]not markup[/bold]" in console.export_text()

    def test_not_propagated(self, tmp_path, caplog):
        """Test run log lines stay out of diagnostic logging."""
        with caplog.at_level(logging.INFO):
            with RunLog(tmp_path / "run.log") as log:
                log.info("private")
        assert "private" not in caplog.text


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_on_stderr(self, capsys, restore_root_logger):
        """Test diagnostics are JSON lines on stderr."""
        setup_logging("INFO")
        logging.getLogger("vmfleet.test").info("hello")

        captured = capsys.readouterr()
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert captured.out == ""

    def test_azure_quieted(self, restore_root_logger):
        """Test the SDK loggers stay at WARNING."""
        setup_logging("DEBUG")
        assert logging.getLogger("azure").level == logging.WARNING
