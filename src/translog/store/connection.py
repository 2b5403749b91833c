"""
Embedded store handle.

A StoreConnection owns exactly one SQLite connection to a log file. The
driver runs in autocommit mode so that transaction boundaries are only ever
issued explicitly (see translog.store.transaction).
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from translog.errors import (
    ERROR_OPEN_ALREADY_OPEN,
    ERROR_OPEN_UNKNOWN_MODE,
    OpenError,
)
from translog.logging import get_logger
from translog.schema import OpenMode

logger = get_logger("store")

# SQLite URI "mode" parameter for each open mode
URI_MODES = {
    OpenMode.READ: "ro",
    OpenMode.READ_WRITE: "rw",
    OpenMode.READ_WRITE_CREATE: "rwc",
}


def parse_mode(mode: Any) -> OpenMode:
    """
    Convert a caller-supplied mode into an OpenMode.

    Raises:
        OpenError: If the mode is not one of the known open modes
    """
    try:
        return OpenMode(mode)
    except ValueError:
        raise OpenError(
            mode=str(mode),
            code=ERROR_OPEN_UNKNOWN_MODE,
            message=f"Unknown open mode: {mode!r}",
            suggestion="Use READ, READ_WRITE or READ_WRITE_CREATE",
        ) from None


class StoreConnection:
    """
    One connection to a file-backed SQLite database.

    Usage:
        store = StoreConnection()
        store.open("run.tlog", OpenMode.READ_WRITE_CREATE)
        with store.statement() as cursor:
            cursor.execute("SELECT count(*) FROM messages")
        store.close()
    """

    def __init__(self) -> None:
        self.path: Path | None = None
        self.mode: OpenMode | None = None
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def handle(self) -> sqlite3.Connection:
        """The underlying connection; only valid while open."""
        if self._conn is None:
            msg = "Store connection is not open"
            raise RuntimeError(msg)
        return self._conn

    def open(self, path: str | Path, mode: Any) -> None:
        """
        Open the database file.

        Args:
            path: Log file path
            mode: One of the OpenMode members (or its value)

        Raises:
            OpenError: On a double open, an unknown mode, or a failed connect
        """
        if self._conn is not None:
            raise OpenError(
                path=str(path),
                mode=str(mode),
                code=ERROR_OPEN_ALREADY_OPEN,
                message=f"A database is already open: {self.path}",
            )
        open_mode = parse_mode(mode)
        db_path = Path(path)
        uri = f"{db_path.absolute().as_uri()}?mode={URI_MODES[open_mode]}"

        try:
            # Callers serialize access; the owning thread may change after take()
            conn = sqlite3.connect(
                uri,
                uri=True,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as e:
            raise OpenError(
                path=str(db_path),
                mode=open_mode.value,
                underlying_error=str(e),
                suggestion=(
                    "Use READ_WRITE_CREATE to create a new log"
                    if open_mode != OpenMode.READ_WRITE_CREATE
                    else None
                ),
            ) from e

        try:
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            conn.close()
            raise OpenError(
                path=str(db_path),
                mode=open_mode.value,
                underlying_error=str(e),
            ) from e

        self._conn = conn
        self.path = db_path
        self.mode = open_mode
        logger.debug("opened store", path=str(db_path), mode=open_mode.value)

    @contextmanager
    def statement(self) -> Generator[sqlite3.Cursor, None, None]:
        """Yield a cursor that is closed on every exit path."""
        cursor = self.handle.cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    def executescript(self, script: str) -> None:
        """Run a multi-statement SQL script."""
        cursor = self.handle.executescript(script)
        cursor.close()

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("closed store", path=str(self.path))

    def __enter__(self) -> "StoreConnection":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()
