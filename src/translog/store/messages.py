"""Message inserter: one row in the messages table per call."""

import sqlite3

from translog.errors import InsertError
from translog.logging import get_logger
from translog.schema import Time
from translog.store.connection import StoreConnection

logger = get_logger("messages")

INSERT_MESSAGE_SQL = """
INSERT INTO messages (time_recv_sec, time_recv_nano, message, topic_id)
VALUES (?, ?, ?, ?)
"""


class MessageInserter:
    """Binds a timestamp, topic id and opaque payload into a single insert."""

    def __init__(self, store: StoreConnection) -> None:
        self._store = store

    def insert(self, time: Time, topic_id: int, payload: bytes | bytearray | memoryview) -> int:
        """
        Insert one message row.

        Args:
            time: Receive time
            topic_id: Identifier from the topic registry
            payload: Message bytes, stored as a blob without interpretation

        Returns:
            Row id of the new message

        Raises:
            InsertError: If the insert fails; no row is written
        """
        try:
            with self._store.statement() as cursor:
                cursor.execute(
                    INSERT_MESSAGE_SQL,
                    (time.sec, time.nsec, payload, topic_id),
                )
                return cursor.lastrowid
        except (sqlite3.Error, OverflowError) as e:
            logger.error("failed to insert message", topic_id=topic_id, error=str(e))
            raise InsertError(topic_id=topic_id, underlying_error=str(e)) from e
