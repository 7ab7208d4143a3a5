"""Snapshot storage implementations."""

from stockledger.config import Settings, get_settings
from stockledger.core.entities.snapshot import InventoryConfig
from stockledger.core.interfaces.snapshot_store import ISnapshotStore
from stockledger.infrastructure.storage.jsonfile import JsonFileSnapshotStore
from stockledger.infrastructure.storage.sqlite import ConnectionPool, SQLiteSnapshotStore

# Singleton instance
_snapshot_store: ISnapshotStore | None = None


def create_snapshot_store(settings: Settings) -> ISnapshotStore:
    """Build the snapshot store selected by the storage settings."""
    initial_config = InventoryConfig.from_settings(settings.inventory)
    storage = settings.storage
    if storage.backend == "json":
        return JsonFileSnapshotStore(storage.snapshot_path, initial_config=initial_config)
    return SQLiteSnapshotStore(
        storage.db_path,
        pool=ConnectionPool.from_settings(storage),
        initial_config=initial_config,
    )


def get_snapshot_store() -> ISnapshotStore:
    """Get singleton snapshot store instance."""
    global _snapshot_store
    if _snapshot_store is None:
        _snapshot_store = create_snapshot_store(get_settings())
    return _snapshot_store


async def close_snapshot_store() -> None:
    """Close and forget the singleton snapshot store."""
    global _snapshot_store
    if _snapshot_store is not None:
        await _snapshot_store.close()
        _snapshot_store = None


__all__ = [
    "JsonFileSnapshotStore",
    "SQLiteSnapshotStore",
    "create_snapshot_store",
    "get_snapshot_store",
    "close_snapshot_store",
]
