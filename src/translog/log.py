"""
Log facade.

Log is the only type callers need: open a file, then insert messages. Every
insert runs the same sequence against the storage engine:

    1. Begin a batching transaction if none is open
    2. Resolve the topic identifier for (topic, type)
    3. Insert the message row
    4. End the transaction if its period has elapsed

Failures are reported as a False return value; the error that caused it is
kept in `last_error`. Step 4 never affects the result of an insert.

Example:
    from translog import Log, READ_WRITE_CREATE, Time

    with Log() as log:
        log.open("run.tlog", READ_WRITE_CREATE)
        log.insert_message(Time(sec=10, nsec=500), "/odom", "Pose", b"\\x01\\x02")
"""

import sqlite3
import time as _time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from translog.errors import (
    ERROR_INSERT_NOT_OPEN,
    ERROR_OPEN_INVALID_LOG,
    InsertError,
    OpenError,
    TransactionError,
    TransLogError,
)
from translog.logging import get_logger
from translog.schema import LogConfig, OpenMode, Time
from translog.store import (
    MessageInserter,
    StoreConnection,
    TopicRegistry,
    TransactionBatcher,
    initialize_schema,
)

logger = get_logger("log")

Payload = bytes | bytearray | memoryview


@dataclass
class LogState:
    """Everything a Log owns. Moves between Log instances as a unit."""

    config: LogConfig
    clock: Callable[[], float]
    store: StoreConnection = field(default_factory=StoreConnection)
    topics: TopicRegistry | None = None
    batcher: TransactionBatcher | None = None
    inserter: MessageInserter | None = None

    def attach(self) -> None:
        """Create the engine components for a freshly opened store."""
        self.topics = TopicRegistry(self.store)
        self.batcher = TransactionBatcher(
            self.store,
            period=self.config.transaction_period,
            clock=self.clock,
        )
        self.inserter = MessageInserter(self.store)

    def detach(self) -> None:
        self.topics = None
        self.batcher = None
        self.inserter = None


class Log:
    """
    Append-only message log backed by one SQLite file.

    A Log owns its connection, topic cache and transaction state
    exclusively. It can hand them over with take() but cannot be copied.
    Drive each instance from one thread at a time.
    """

    def __init__(
        self,
        config: LogConfig | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._state: LogState | None = LogState(
            config=config or LogConfig(),
            clock=clock or _time.monotonic,
        )
        self.last_error: TransLogError | None = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_valid(self) -> bool:
        """False once this instance's state has been moved out by take()."""
        return self._state is not None

    @property
    def is_open(self) -> bool:
        return self._state is not None and self._state.store.is_open

    @property
    def in_transaction(self) -> bool:
        return (
            self._state is not None
            and self._state.batcher is not None
            and self._state.batcher.is_open
        )

    @property
    def path(self) -> Path | None:
        return self._state.store.path if self.is_open else None

    @property
    def mode(self) -> OpenMode | None:
        return self._state.store.mode if self.is_open else None

    @property
    def config(self) -> LogConfig | None:
        return self._state.config if self._state is not None else None

    # =========================================================================
    # Operations
    # =========================================================================

    def open(self, path: str | Path, mode: Any = OpenMode.READ_WRITE_CREATE) -> bool:
        """
        Open a log file, creating its schema if the file is new.

        Args:
            path: Log file path
            mode: READ, READ_WRITE or READ_WRITE_CREATE

        Returns:
            True on success. On failure `last_error` holds an OpenError or
            SchemaError and the instance stays closed (a double open leaves
            the already open file untouched).
        """
        if self._state is None:
            return self._fail(OpenError(
                path=str(path),
                mode=str(mode),
                code=ERROR_OPEN_INVALID_LOG,
                message="Log has been moved and can no longer be opened",
            ))

        state = self._state
        try:
            state.store.open(path, mode)
        except OpenError as e:
            logger.error("failed to open log", path=str(path), error=str(e))
            return self._fail(e)

        try:
            initialize_schema(state.store, state.config.schema_path)
        except TransLogError as e:
            logger.error("failed to create log", path=str(path), error=str(e))
            state.store.close()
            return self._fail(e)

        state.attach()
        return True

    def insert_message(
        self,
        time: Time | tuple[int, int],
        topic: str,
        type_name: str,
        payload: Payload,
        length: int | None = None,
    ) -> bool:
        """
        Insert one message.

        Args:
            time: Receive time, a Time or a (sec, nsec) pair
            topic: Topic name
            type_name: Message type name
            payload: Message bytes, stored without interpretation
            length: Number of leading payload bytes to store (default: all)

        Returns:
            True if the message row was inserted. A failed topic lookup or
            insert leaves the current transaction open.
        """
        state = self._state
        if state is None or not state.store.is_open:
            return self._fail(InsertError(
                code=ERROR_INSERT_NOT_OPEN,
                message="Log is not open",
                underlying_error="no open store",
            ))

        if not isinstance(time, Time):
            time = Time(sec=time[0], nsec=time[1])
        if length is not None:
            if length < 0 or length > len(payload):
                return self._fail(InsertError(
                    message=f"Invalid payload length {length} for {len(payload)} bytes",
                    underlying_error="length out of range",
                ))
            payload = memoryview(payload)[:length]

        try:
            state.batcher.ensure_open()
            topic_id = state.topics.resolve(topic, type_name)
            state.inserter.insert(time, topic_id, payload)
        except TransLogError as e:
            return self._fail(e)

        try:
            state.batcher.maybe_close()
        except TransactionError as e:
            self.last_error = e

        return True

    def close(self) -> None:
        """
        End any open transaction and release the connection.

        Failures are logged, never raised. Safe to call more than once.
        """
        state = self._state
        if state is None:
            return
        if state.batcher is not None and state.batcher.is_open:
            try:
                state.batcher.force_close()
            except TransactionError as e:
                logger.error("failed to end transaction on close", error=str(e))
                self.last_error = e
        if state.store.is_open and state.store.handle.in_transaction:
            # The batcher went idle after a failed END but SQLite kept the transaction
            try:
                state.store.handle.execute("END;")
            except sqlite3.Error as e:
                logger.error("failed to end transaction on close", error=str(e))
                self.last_error = TransactionError(statement="END", underlying_error=str(e))
        state.detach()
        state.store.close()

    def take(self) -> "Log":
        """
        Move this log's connection, topic cache and transaction state into
        a new Log. This instance is left empty and every later operation on
        it fails.
        """
        moved = type(self).__new__(type(self))
        moved._state = self._state
        moved.last_error = self.last_error
        self._state = None
        return moved

    def _fail(self, error: TransLogError) -> bool:
        self.last_error = error
        return False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def __copy__(self) -> "Log":
        msg = "Log cannot be copied; use take() to transfer ownership"
        raise TypeError(msg)

    def __deepcopy__(self, memo: dict[int, Any]) -> "Log":
        msg = "Log cannot be copied; use take() to transfer ownership"
        raise TypeError(msg)

    def __enter__(self) -> "Log":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_state", None) is not None:
            self.close()

    def __repr__(self) -> str:
        if self._state is None:
            return "Log(<moved>)"
        return f"Log(path={str(self.path)!r}, mode={self.mode}, in_transaction={self.in_transaction})"
