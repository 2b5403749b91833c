"""
Schema initializer.

Creates the log tables in a freshly opened store by running the versioned
DDL script shipped with the package. A file that already carries the
current schema version is left untouched; anything else is rejected,
since migrating between schema versions is not supported.
"""

import sqlite3
from pathlib import Path

from translog.errors import (
    ERROR_SCHEMA_UNREADABLE,
    ERROR_SCHEMA_VERSION_MISMATCH,
    SchemaError,
)
from translog.logging import get_logger
from translog.store.connection import StoreConnection

logger = get_logger("schema")

SCHEMA_VERSION = "0.1.0"

# Directory the schema scripts are installed to
SCHEMA_INSTALL_PATH = Path(__file__).parent / "sql"


def schema_file(schema_dir: Path | None = None) -> Path:
    """Path of the DDL script for the current schema version."""
    return (schema_dir or SCHEMA_INSTALL_PATH) / f"{SCHEMA_VERSION}.sql"


def read_schema(path: Path) -> str:
    """
    Read the DDL script.

    Raises:
        SchemaError: If the file is missing or unreadable
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(
            schema_file=str(path),
            code=ERROR_SCHEMA_UNREADABLE,
            message=f"Failed to read schema file [{path}]: {e}",
            underlying_error=str(e),
        ) from e


def existing_version(store: StoreConnection) -> str | None:
    """
    Schema version recorded in the store, or None for an empty store.

    Raises:
        SchemaError: If the store holds tables but no recorded log schema
    """
    with store.statement() as cursor:
        cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in cursor.fetchall()}
        if not tables:
            return None
        if "migrations" not in tables:
            raise SchemaError(
                code=ERROR_SCHEMA_VERSION_MISMATCH,
                message=f"{store.path} is not a log file (no migrations table)",
                underlying_error="unrecognized database layout",
            )
        cursor.execute("SELECT to_version FROM migrations ORDER BY id DESC LIMIT 1")
        row = cursor.fetchone()
    return row[0] if row else None


def initialize_schema(store: StoreConnection, schema_dir: Path | None = None) -> bool:
    """
    Create the log schema if the store doesn't have one yet.

    Args:
        store: An open store connection
        schema_dir: Directory holding the versioned script (default: installed copy)

    Returns:
        True if the script was applied, False if the schema was already present

    Raises:
        SchemaError: If the script can't be read or applied, or the store
            holds a different schema version
    """
    path = schema_file(schema_dir)
    try:
        version = existing_version(store)
    except sqlite3.Error as e:
        raise SchemaError(
            schema_file=str(path),
            underlying_error=str(e),
        ) from e

    if version == SCHEMA_VERSION:
        logger.debug("schema already present", version=version, path=str(store.path))
        return False
    if version is not None:
        raise SchemaError(
            schema_file=str(path),
            code=ERROR_SCHEMA_VERSION_MISMATCH,
            message=f"Log schema version {version} does not match {SCHEMA_VERSION}",
            underlying_error="schema version mismatch",
            suggestion="Schema migration is not supported; record into a new file",
        )

    logger.debug("applying schema", schema_file=str(path))
    script = read_schema(path)
    try:
        store.executescript(script)
    except sqlite3.Error as e:
        if store.handle.in_transaction:
            store.handle.rollback()
        raise SchemaError(
            schema_file=str(path),
            underlying_error=str(e),
        ) from e
    return True
