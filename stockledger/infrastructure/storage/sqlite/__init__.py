"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import ConnectionPool
from stockledger.infrastructure.storage.sqlite.snapshot_store import SQLiteSnapshotStore

__all__ = [
    "ConnectionPool",
    "SQLiteSnapshotStore",
]
