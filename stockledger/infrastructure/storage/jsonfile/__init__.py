"""JSON file storage implementation."""

from stockledger.infrastructure.storage.jsonfile.snapshot_store import JsonFileSnapshotStore

__all__ = ["JsonFileSnapshotStore"]
