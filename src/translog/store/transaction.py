"""
Transaction batcher.

Groups inserts into explicit BEGIN/END transactions. A transaction is begun
lazily by the first write and ended by the first write that finds it open
for longer than the configured period.

States:
    Idle  - no transaction open
    Open  - BEGIN issued at `opened_at` (monotonic clock seconds)
"""

import sqlite3
import time
from typing import Callable

from translog.errors import TransactionError
from translog.logging import get_logger
from translog.store.connection import StoreConnection

logger = get_logger("transaction")

DEFAULT_TRANSACTION_PERIOD = 0.5


class TransactionBatcher:
    """
    Two-state machine around BEGIN/END.

    Usage:
        batcher = TransactionBatcher(store, period=0.5)
        batcher.ensure_open()
        ...  # inserts
        batcher.maybe_close()
    """

    def __init__(
        self,
        store: StoreConnection,
        period: float = DEFAULT_TRANSACTION_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self.period = period
        self._clock = clock
        self.opened_at: float | None = None

    @property
    def is_open(self) -> bool:
        return self.opened_at is not None

    def elapsed(self) -> float:
        """Seconds since the open transaction began (0.0 when idle)."""
        if self.opened_at is None:
            return 0.0
        return self._clock() - self.opened_at

    def ensure_open(self) -> None:
        """
        Begin a transaction unless one is already open.

        Raises:
            TransactionError: If BEGIN fails; the batcher stays idle
        """
        if self.is_open:
            return
        try:
            self._store.handle.execute("BEGIN;")
        except sqlite3.Error as e:
            logger.error("failed to begin transaction", error=str(e))
            raise TransactionError(statement="BEGIN", underlying_error=str(e)) from e
        self.opened_at = self._clock()
        logger.debug("began transaction")

    def time_for_new_transaction(self) -> bool:
        return self.is_open and self.elapsed() > self.period

    def maybe_close(self) -> bool:
        """
        End the transaction if it has been open longer than the period.

        Returns:
            True if END was issued

        Raises:
            TransactionError: If END fails. The batcher is marked idle
                either way, so a failed commit is not retried.
        """
        if not self.time_for_new_transaction():
            return False
        self._end()
        return True

    def force_close(self) -> None:
        """End an open transaction regardless of its age."""
        if self.is_open:
            self._end()

    def _end(self) -> None:
        """
        Issue END and mark the batcher idle.

        The batcher is idle afterwards even when END fails. If SQLite keeps
        its transaction open (for example on SQLITE_BUSY), the next
        ensure_open() fails with "cannot start a transaction within a
        transaction" until the connection's transaction is ended directly.
        """
        self.opened_at = None
        try:
            self._store.handle.execute("END;")
        except sqlite3.Error as e:
            logger.error("failed to end transaction", error=str(e))
            raise TransactionError(statement="END", underlying_error=str(e)) from e
        logger.debug("ended transaction")
