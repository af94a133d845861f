"""Logging configuration for vmfleet.

Two kinds of logging live here:

- Diagnostic logging: structured JSON on stderr via python-json-logger,
  used by every module through ``logging.getLogger(__name__)``.
- Run logs: the durable, append-only plain-text record of a single
  operator run (selection made, every command attempted, errors,
  timeouts, completion). One file per run, one writer.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pythonjsonlogger import jsonlogger
from rich.console import Console
from rich.markup import escape


class FleetJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and source location."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: str = "WARNING") -> None:
    """Configure structured JSON diagnostic logging on stderr.

    stdout belongs to the interactive UI, so diagnostics always go to stderr.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(FleetJsonFormatter(
        fmt="%(timestamp)s %(level)s %(name)s %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = [handler]

    # The Azure SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)


RUN_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
RUN_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Prefix for commands that simulate mode logs instead of running
WOULD_RUN_PREFIX = "Would run:"


class RunLog:
    """Append-only plain-text log for one operator run.

    Every line is also echoed to the console so that each per-item failure
    produces both a console message and a durable log line.
    """

    _STYLES = {
        logging.INFO: "",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
    }

    def __init__(self, path: Union[str, Path], console: Optional[Console] = None):
        """Open (or create) the run log.

        Args:
            path: Log file path, opened in append mode
            console: Rich console to echo lines to (None disables echo)
        """
        self.path = Path(path)
        self.console = console

        self._logger = logging.getLogger(f"vmfleet.run.{self.path.name}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT, datefmt=RUN_LOG_DATEFMT))
        self._logger.handlers = [self._handler]

    def _emit(self, level: int, message: str) -> None:
        self._logger.log(level, message)
        if self.console is not None:
            style = self._STYLES.get(level, "")
            text = escape(message)
            self.console.print(f"[{style}]{text}[/{style}]" if style else text)

    def info(self, message: str) -> None:
        """Record an informational line."""
        self._emit(logging.INFO, message)

    def warning(self, message: str) -> None:
        """Record a warning line."""
        self._emit(logging.WARNING, message)

    def error(self, message: str, command: Optional[str] = None) -> None:
        """Record an error, with the command that failed when there is one."""
        if command:
            message = f"{message} | command: {command}"
        self._emit(logging.ERROR, message)

    def command(self, command: str, dry_run: bool = False) -> None:
        """Record a command about to be issued (or skipped under simulate mode)."""
        if dry_run:
            self._emit(logging.INFO, f"{WOULD_RUN_PREFIX} {command}")
        else:
            self._emit(logging.INFO, f"Running: {command}")

    def close(self) -> None:
        """Flush and close the underlying file handler."""
        self._handler.close()
        self._logger.handlers = []

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
