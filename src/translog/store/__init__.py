"""
Storage engine for Translog.

This package turns a stream of (topic, type, time, payload) events into
rows in a single SQLite file.

Tables:
    - message_types: One row per distinct message type name
    - topics: Topic names qualified by their message type
    - messages: Receive time, payload blob and topic reference per message
    - migrations: Applied schema version

Components:
    - StoreConnection: The one connection a log owns
    - initialize_schema: Applies the versioned DDL script to a new file
    - TopicRegistry: (name, type) -> topic id, cached in memory
    - TransactionBatcher: Time-boxed BEGIN/END around groups of inserts
    - MessageInserter: One message row per call
"""

from translog.store.connection import StoreConnection, parse_mode
from translog.store.initializer import (
    SCHEMA_INSTALL_PATH,
    SCHEMA_VERSION,
    initialize_schema,
    schema_file,
)
from translog.store.messages import MessageInserter
from translog.store.topics import TopicRegistry
from translog.store.transaction import DEFAULT_TRANSACTION_PERIOD, TransactionBatcher

__all__ = [
    "DEFAULT_TRANSACTION_PERIOD",
    "MessageInserter",
    "SCHEMA_INSTALL_PATH",
    "SCHEMA_VERSION",
    "StoreConnection",
    "TopicRegistry",
    "TransactionBatcher",
    "initialize_schema",
    "parse_mode",
    "schema_file",
]
