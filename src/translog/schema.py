"""
Schema definitions for Translog.

This module defines the Pydantic models used throughout Translog:
- OpenMode: How a log file is opened
- Time: The (seconds, nanoseconds) timestamp supplied by the transport
- LogConfig/LoggingConfig: Runtime configuration, loadable from YAML

Design Decisions:
    - Models are immutable (frozen=True) and reject unknown keys
    - Time keeps seconds and nanoseconds as separate signed integers,
      exactly as they are stored in the messages table
"""

import time
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class OpenMode(str, Enum):
    """
    How a log file is opened.

    READ fails if the file is absent and disallows writes. READ_WRITE fails
    if the file is absent. READ_WRITE_CREATE creates the file if needed.
    """

    READ = "read"
    READ_WRITE = "read_write"
    READ_WRITE_CREATE = "read_write_create"


READ = OpenMode.READ
READ_WRITE = OpenMode.READ_WRITE
READ_WRITE_CREATE = OpenMode.READ_WRITE_CREATE


class LogFormat(str, Enum):
    """Rendering used for diagnostic output."""

    CONSOLE = "console"
    JSON = "json"


# =============================================================================
# Timestamps
# =============================================================================

NANOSECONDS_PER_SECOND = 1_000_000_000


class Time(BaseModel):
    """
    Time a message was received.

    Attributes:
        sec: Whole seconds
        nsec: Sub-second part in nanoseconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sec: int = Field(default=0, description="Whole seconds")
    nsec: int = Field(default=0, description="Sub-second nanoseconds")

    @classmethod
    def now(cls) -> "Time":
        """Current wall-clock time."""
        return cls.from_nanoseconds(time.time_ns())

    @classmethod
    def from_nanoseconds(cls, ns: int) -> "Time":
        """Split a nanosecond count into (sec, nsec)."""
        sec, nsec = divmod(ns, NANOSECONDS_PER_SECOND)
        return cls(sec=sec, nsec=nsec)

    def to_nanoseconds(self) -> int:
        """Total nanoseconds represented by this time."""
        return self.sec * NANOSECONDS_PER_SECOND + self.nsec


# =============================================================================
# Configuration Models
# =============================================================================


class LoggingConfig(BaseModel):
    """
    Diagnostic output settings.

    Attributes:
        level: Standard logging level name
        format: console (human readable) or json
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = Field(default="info", description="Logging level name")
    format: LogFormat = Field(default=LogFormat.CONSOLE, description="Output format")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept only standard logging level names."""
        level = v.lower()
        if level not in ("debug", "info", "warning", "error", "critical"):
            msg = f"Invalid logging level: {v}"
            raise ValueError(msg)
        return level


class LogConfig(BaseModel):
    """
    Configuration for a Log instance.

    Attributes:
        transaction_period_ms: How long a batching transaction stays open
        schema_path: Directory holding the schema script (None = installed copy)
        logging: Diagnostic output settings
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    transaction_period_ms: int = Field(
        default=500,
        description="Milliseconds a transaction stays open before it is ended",
        ge=0,
    )
    schema_path: Path | None = Field(
        default=None,
        description="Directory containing the versioned schema script",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Diagnostic output settings",
    )

    @property
    def transaction_period(self) -> float:
        """Transaction period in seconds."""
        return self.transaction_period_ms / 1000.0


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_config(path: Path | str) -> LogConfig:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated LogConfig object

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)

    return LogConfig.model_validate(data or {})


def load_config_from_string(content: str) -> LogConfig:
    """Load a configuration from a YAML string."""
    data = yaml.safe_load(content)
    return LogConfig.model_validate(data or {})
