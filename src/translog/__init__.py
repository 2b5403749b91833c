"""
Translog - Durable append-only log for timestamped pub/sub messages.

Translog records the traffic of a publish/subscribe bus (topic name, message
type name, receive time, payload bytes) into a single SQLite file:
- Inserts are grouped into time-boxed transactions
- Topic identities are registered once and cached in memory
- Payloads are stored as opaque blobs

Example usage:
    $ translog init run.tlog
    $ translog append run.tlog --topic /odom --type Pose --data 010203
"""

__version__ = "0.1.0"
__author__ = "Translog Contributors"

from translog.errors import (
    InsertError,
    OpenError,
    SchemaError,
    TopicResolutionError,
    TransactionError,
    TransLogError,
)
from translog.log import Log
from translog.schema import (
    READ,
    READ_WRITE,
    READ_WRITE_CREATE,
    LogConfig,
    OpenMode,
    Time,
    load_config,
)

__all__ = [
    "__version__",
    "__author__",
    "READ",
    "READ_WRITE",
    "READ_WRITE_CREATE",
    "InsertError",
    "Log",
    "LogConfig",
    "OpenError",
    "OpenMode",
    "SchemaError",
    "Time",
    "TopicResolutionError",
    "TransLogError",
    "TransactionError",
    "load_config",
]
