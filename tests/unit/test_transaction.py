"""
Unit tests for the transaction batcher.

Tests cover:
- Lazy BEGIN and the Idle/Open states
- Time-boxed END
- BEGIN and END failures
"""

import sqlite3
from pathlib import Path

import pytest

from translog.errors import ERROR_TRANSACTION_BEGIN, ERROR_TRANSACTION_END, TransactionError
from translog.schema import OpenMode
from translog.store import DEFAULT_TRANSACTION_PERIOD, StoreConnection, TransactionBatcher


@pytest.fixture
def store(log_path: Path) -> StoreConnection:
    """A writable store with one table."""
    conn = StoreConnection()
    conn.open(log_path, OpenMode.READ_WRITE_CREATE)
    conn.handle.execute("CREATE TABLE t (x INTEGER)")
    yield conn
    conn.close()


@pytest.fixture
def batcher(store: StoreConnection, clock) -> TransactionBatcher:
    """A batcher with the default period and a fake clock."""
    return TransactionBatcher(store, clock=clock)


class TestStates:
    """Tests for Idle/Open transitions."""

    def test_starts_idle(self, batcher: TransactionBatcher) -> None:
        """No transaction before the first write."""
        assert not batcher.is_open
        assert batcher.opened_at is None
        assert batcher.elapsed() == 0.0
        assert batcher.period == DEFAULT_TRANSACTION_PERIOD

    def test_ensure_open_begins(self, batcher: TransactionBatcher, store: StoreConnection, clock) -> None:
        """ensure_open() issues BEGIN and records the time."""
        batcher.ensure_open()
        assert batcher.is_open
        assert batcher.opened_at == clock.now
        assert store.handle.in_transaction

    def test_ensure_open_is_idempotent(self, batcher: TransactionBatcher, clock) -> None:
        """A second ensure_open() keeps the original start time."""
        batcher.ensure_open()
        started = batcher.opened_at
        clock.advance(0.2)
        batcher.ensure_open()
        assert batcher.opened_at == started

    def test_maybe_close_before_period(self, batcher: TransactionBatcher, clock) -> None:
        """The transaction stays open until the period has passed."""
        batcher.ensure_open()
        clock.advance(0.5)
        assert batcher.maybe_close() is False
        assert batcher.is_open

    def test_maybe_close_after_period(self, batcher: TransactionBatcher, store: StoreConnection, clock) -> None:
        """Past the period, maybe_close() commits."""
        batcher.ensure_open()
        store.handle.execute("INSERT INTO t VALUES (1)")
        clock.advance(0.51)
        assert batcher.maybe_close() is True
        assert not batcher.is_open
        assert not store.handle.in_transaction

    def test_maybe_close_when_idle(self, batcher: TransactionBatcher, clock) -> None:
        """Nothing to close when idle."""
        clock.advance(10)
        assert batcher.maybe_close() is False

    def test_force_close(self, batcher: TransactionBatcher, store: StoreConnection) -> None:
        """force_close() ignores the period."""
        batcher.ensure_open()
        batcher.force_close()
        assert not batcher.is_open
        assert not store.handle.in_transaction

    def test_custom_period(self, store: StoreConnection, clock) -> None:
        """A zero period closes on the first write that sees time pass."""
        batcher = TransactionBatcher(store, period=0.0, clock=clock)
        batcher.ensure_open()
        assert batcher.maybe_close() is False
        clock.advance(0.001)
        assert batcher.maybe_close() is True


class TestFailures:
    """Tests for BEGIN/END failures."""

    def test_begin_failure_stays_idle(self, batcher: TransactionBatcher, store: StoreConnection) -> None:
        """A failed BEGIN raises and leaves the batcher idle."""
        store.handle.execute("BEGIN")
        with pytest.raises(TransactionError) as exc_info:
            batcher.ensure_open()
        assert exc_info.value.code == ERROR_TRANSACTION_BEGIN
        assert not batcher.is_open

    def test_end_failure_marks_idle(self, batcher: TransactionBatcher, store: StoreConnection, clock) -> None:
        """A failed END raises but the batcher still becomes idle."""
        batcher.ensure_open()
        store.handle.execute("COMMIT")
        clock.advance(1)
        with pytest.raises(TransactionError) as exc_info:
            batcher.maybe_close()
        assert exc_info.value.code == ERROR_TRANSACTION_END
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
        assert not batcher.is_open
