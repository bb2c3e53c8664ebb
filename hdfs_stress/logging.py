"""
Logging for the stress harness.

Every line carries a UTC timestamp and, while a scenario runs, its short id,
so output from consecutive scenarios on a shared CI log can be told apart.
Lines are either human-readable or one JSON object each. A bounded buffer of
recent records is kept in memory; the runner prints its warnings when a
scenario fails, after the stream output has usually scrolled away.
"""

import json
import logging
import sys
from collections import deque
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Short id of the scenario currently running in this context
current_scenario_id: ContextVar[str | None] = ContextVar("current_scenario_id", default=None)

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

TEXT_FORMAT = "%(timestamp)s | %(levelname)-8s | %(name)s | %(scenario_tag)s%(message)s"


def _utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds")


class StressFormatter(logging.Formatter):
    """Adds ``timestamp`` and ``scenario_tag`` to the record before formatting."""

    def format(self, record: logging.LogRecord) -> str:
        record.timestamp = _utc_now()
        scenario_id = current_scenario_id.get()
        record.scenario_tag = f"[{scenario_id}] " if scenario_id else ""
        return super().format(record)


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; tracebacks go into ``exc``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _utc_now(),
            "level": record.levelname,
            "logger": record.name,
            "scenario_id": current_scenario_id.get(),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class InMemoryHandler(logging.Handler):
    """Keeps the last ``capacity`` records as plain dicts."""

    def __init__(self, capacity: int = 1000) -> None:
        super().__init__()
        self.logs: deque[dict[str, Any]] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.logs.append(
                {
                    "timestamp": _utc_now(),
                    "level": record.levelname,
                    "level_no": record.levelno,
                    "logger": record.name,
                    "scenario_id": current_scenario_id.get(),
                    "message": record.getMessage(),
                }
            )
        except Exception:
            self.handleError(record)

    def clear(self) -> None:
        self.logs.clear()


_in_memory_handler = InMemoryHandler()


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Route all harness logging to stdout and the in-memory buffer.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.

    Args:
        level: Minimum level name for both handlers
        json_output: Emit JSON lines instead of the text format

    Returns:
        The root logger
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(numeric_level)

    stream = logging.StreamHandler(sys.stdout)
    stream.setLevel(numeric_level)
    stream.setFormatter(JsonLineFormatter() if json_output else StressFormatter(TEXT_FORMAT))
    root.addHandler(stream)

    _in_memory_handler.setLevel(numeric_level)
    root.addHandler(_in_memory_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_in_memory_logs(level: str = "INFO", limit: int = 50) -> list[dict[str, Any]]:
    """Most recent buffered records at or above ``level``, oldest first."""
    threshold = logging.getLevelName(level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO
    matching = [entry for entry in _in_memory_handler.logs if entry["level_no"] >= threshold]
    return matching[-limit:]


def set_scenario_id(scenario_id: str) -> None:
    current_scenario_id.set(scenario_id)


def clear_scenario_id() -> None:
    current_scenario_id.set(None)
