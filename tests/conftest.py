from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

here = Path(__file__).parent
root_path = here.parent


class RecordingRunner:
    """Runner double with execute and query only."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, list[Any]]] = []

    def execute(self, sql: str, args: Any) -> str:
        self.calls.append(("execute", sql, list(args)))
        return "exec-result"

    def query(self, sql: str, args: Any) -> str:
        self.calls.append(("query", sql, list(args)))
        return "rows"


class RecordingRowRunner(RecordingRunner):
    """Runner double that can also fetch a single row."""

    def query_row(self, sql: str, args: Any) -> tuple[int, str]:
        self.calls.append(("query_row", sql, list(args)))
        return (1, "alice")


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def row_runner() -> RecordingRowRunner:
    return RecordingRowRunner()


@pytest.fixture
def restore_sqlmerge_logger():
    """Undo handler and propagation changes made by ``configure_logging``."""
    logger = logging.getLogger("sqlmerge")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
