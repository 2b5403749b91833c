"""
Exception hierarchy for Translog.

All Translog exceptions inherit from TransLogError, allowing callers to catch
all storage-engine failures with a single except clause.

Exception Categories:
    - OpenError: The log file could not be opened
    - SchemaError: The schema script could not be read or applied
    - TransactionError: BEGIN or END failed
    - TopicResolutionError: A topic identifier could not be produced
    - InsertError: A message row could not be inserted

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors carry the underlying store error where there is one
    - Errors are designed to be both human-readable and machine-parseable
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Open errors: 1xxx
ERROR_OPEN_FAILED = 1001
ERROR_OPEN_ALREADY_OPEN = 1002
ERROR_OPEN_UNKNOWN_MODE = 1003
ERROR_OPEN_INVALID_LOG = 1004

# Schema errors: 2xxx
ERROR_SCHEMA_UNREADABLE = 2001
ERROR_SCHEMA_APPLY_FAILED = 2002
ERROR_SCHEMA_VERSION_MISMATCH = 2003

# Transaction errors: 3xxx
ERROR_TRANSACTION_BEGIN = 3001
ERROR_TRANSACTION_END = 3002

# Topic errors: 4xxx
ERROR_TOPIC_RESOLUTION = 4001

# Insert errors: 5xxx
ERROR_INSERT_FAILED = 5001
ERROR_INSERT_NOT_OPEN = 5002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class TransLogError(Exception):
    """
    Base exception for all Translog errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Open / Schema Errors
# =============================================================================


@dataclass
class OpenError(TransLogError):
    """
    Raised when a log file cannot be opened.

    Covers a double open on the same Log, an unrecognized mode, and a
    failure of the underlying connect call.

    Attributes:
        path: The log file being opened
        mode: The requested open mode, as given by the caller
        underlying_error: Message from the store, if any
    """

    path: str = ""
    mode: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to open log {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_OPEN_FAILED
        self.context.update({
            "path": self.path,
            "mode": self.mode,
            "underlying_error": self.underlying_error,
        })


@dataclass
class SchemaError(TransLogError):
    """
    Raised when the schema script cannot be read or applied.

    Attributes:
        schema_file: Path of the DDL script
        underlying_error: Message from the filesystem or the store
    """

    schema_file: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to create log schema: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SCHEMA_APPLY_FAILED
        self.context.update({
            "schema_file": self.schema_file,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Write Path Errors
# =============================================================================


@dataclass
class TransactionError(TransLogError):
    """
    Raised when a BEGIN or END statement fails.

    Attributes:
        statement: "BEGIN" or "END"
        underlying_error: Message from the store
    """

    statement: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to {self.statement or 'run'} transaction: {self.underlying_error}"
        if self.code == 0:
            self.code = (
                ERROR_TRANSACTION_END if self.statement == "END" else ERROR_TRANSACTION_BEGIN
            )
        self.context.update({
            "statement": self.statement,
            "underlying_error": self.underlying_error,
        })


@dataclass
class TopicResolutionError(TransLogError):
    """
    Raised when a topic identifier cannot be produced.

    Attributes:
        topic: Topic name being resolved
        message_type: Message type name being resolved
        step: Which step failed (e.g. "insert message type", "insert topic")
        underlying_error: Message from the store
    """

    topic: str = ""
    message_type: str = ""
    step: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Failed to {self.step} for '{self.topic}'[{self.message_type}]: "
                f"{self.underlying_error}"
            )
        if self.code == 0:
            self.code = ERROR_TOPIC_RESOLUTION
        self.context.update({
            "topic": self.topic,
            "message_type": self.message_type,
            "step": self.step,
            "underlying_error": self.underlying_error,
        })


@dataclass
class InsertError(TransLogError):
    """
    Raised when a message row cannot be inserted.

    Attributes:
        topic_id: Topic identifier the row would reference
        underlying_error: Message from the store
    """

    topic_id: int | None = None
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to insert message: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_INSERT_FAILED
        self.context.update({
            "topic_id": self.topic_id,
            "underlying_error": self.underlying_error,
        })
