"""
Topic registry and cache.

Maps (topic name, message type name) pairs to the integer identifiers
stored in the topics table. Identifiers never change once assigned, so the
in-memory cache is only ever added to.
"""

import sqlite3

from translog.errors import TopicResolutionError
from translog.logging import get_logger
from translog.store.connection import StoreConnection

logger = get_logger("topics")

INSERT_MESSAGE_TYPE_SQL = "INSERT OR IGNORE INTO message_types (name) VALUES (?)"

SELECT_TOPIC_SQL = """
SELECT topics.id FROM topics
JOIN message_types ON topics.message_type_id = message_types.id
WHERE topics.name = ? AND message_types.name = ?
ORDER BY topics.id
LIMIT 1
"""

INSERT_TOPIC_SQL = """
INSERT INTO topics (name, message_type_id)
SELECT ?, id FROM message_types WHERE name = ? LIMIT 1
"""

TopicKey = tuple[str, str]


class TopicRegistry:
    """
    Resolves topic identifiers, consulting an in-process cache first.

    Only the thread that owns the Log may call resolve(); there is no
    locking around the cache.
    """

    def __init__(self, store: StoreConnection) -> None:
        self._store = store
        self._cache: dict[TopicKey, int] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def cached(self, name: str, message_type: str) -> int | None:
        """Cached identifier for (name, type), without touching the store."""
        return self._cache.get((name, message_type))

    def resolve(self, name: str, message_type: str) -> int:
        """
        Get the topic identifier for a name and message type.

        The type name is inserted if absent, then an existing topic row for
        (name, type) is reused or a new one is inserted.

        Args:
            name: Topic name
            message_type: Message type name

        Returns:
            The topic identifier

        Raises:
            TopicResolutionError: If any statement fails; the cache is
                left unchanged
        """
        key = (name, message_type)
        topic_id = self._cache.get(key)
        if topic_id is not None:
            return topic_id

        step = "insert message type"
        try:
            with self._store.statement() as cursor:
                cursor.execute(INSERT_MESSAGE_TYPE_SQL, (message_type,))

                step = "look up topic"
                cursor.execute(SELECT_TOPIC_SQL, (name, message_type))
                row = cursor.fetchone()
                if row is not None:
                    topic_id = row[0]
                else:
                    step = "insert topic"
                    cursor.execute(INSERT_TOPIC_SQL, (name, message_type))
                    if cursor.rowcount != 1:
                        raise TopicResolutionError(
                            topic=name,
                            message_type=message_type,
                            step=step,
                            underlying_error="no message type row to reference",
                        )
                    # topics.id is an alias for rowid
                    topic_id = cursor.lastrowid
                    logger.debug("inserted topic", topic=name, message_type=message_type, topic_id=topic_id)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error("topic resolution failed", topic=name, message_type=message_type, step=step, error=str(e))
            raise TopicResolutionError(
                topic=name,
                message_type=message_type,
                step=step,
                underlying_error=str(e),
            ) from e

        self._cache[key] = topic_id
        return topic_id
