"""
Pytest configuration and fixtures for Translog tests.

This module provides shared fixtures used across unit and integration tests.
"""

import logging
import sqlite3
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
import structlog

from translog import READ_WRITE_CREATE, Log, LogConfig


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def log_path(temp_dir: Path) -> Path:
    """Path for a log file that doesn't exist yet."""
    return temp_dir / "test.tlog"


@pytest.fixture
def clock() -> FakeClock:
    """A fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def open_log(log_path: Path, clock: FakeClock) -> Generator[Log, None, None]:
    """A Log opened on a fresh file with the default 500 ms period."""
    log = Log(config=LogConfig(), clock=clock)
    assert log.open(log_path, READ_WRITE_CREATE)
    yield log
    log.close()


@pytest.fixture
def read_rows() -> Callable[[Path, str], list[tuple[Any, ...]]]:
    """Read rows from a log file through an independent connection."""

    def _read(path: Path, sql: str) -> list[tuple[Any, ...]]:
        conn = sqlite3.connect(f"{path.absolute().as_uri()}?mode=ro", uri=True)
        try:
            return conn.execute(sql).fetchall()
        finally:
            conn.close()

    return _read


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo any setup_logging() call made during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
