"""JSON file implementation of ledger snapshot storage."""

import asyncio
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from stockledger.config import get_logger
from stockledger.core.entities.product import utc_now
from stockledger.core.entities.snapshot import InventoryConfig, LedgerSnapshot
from stockledger.core.exceptions import SnapshotError
from stockledger.core.interfaces.snapshot_store import ISnapshotStore

logger = get_logger(__name__)


class JsonFileSnapshotStore(ISnapshotStore):
    """Stores the ledger as one JSON file, replaced atomically on save."""

    def __init__(self, path: Path, initial_config: InventoryConfig | None = None):
        self.path = path
        self.initial_config = initial_config

    def _empty(self) -> LedgerSnapshot:
        if self.initial_config is None:
            return LedgerSnapshot()
        return LedgerSnapshot(config=self.initial_config.model_copy())

    async def load(self) -> LedgerSnapshot:
        return await asyncio.to_thread(self._load_sync)

    def _load_sync(self) -> LedgerSnapshot:
        if not self.path.exists():
            logger.info("snapshot_not_found", path=str(self.path))
            return self._empty()

        try:
            raw = self.path.read_text(encoding="utf-8")
            return LedgerSnapshot.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError, ValueError) as e:
            logger.error("snapshot_load_failed", path=str(self.path), error=str(e)[:200])
            return self._empty()

    async def save(self, snapshot: LedgerSnapshot) -> None:
        snapshot.saved_at = utc_now()
        payload = snapshot.model_dump_json(indent=2)
        await asyncio.to_thread(self._write_atomic, payload)
        logger.debug("snapshot_saved", path=str(self.path), bytes=len(payload))

    def _write_atomic(self, payload: str) -> None:
        """Write to a temp file in the same directory, then replace."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            logger.error("snapshot_save_failed", path=str(self.path), error=str(e))
            raise SnapshotError("save", str(e)) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            logger.error("snapshot_save_failed", path=str(self.path), error=str(e))
            raise SnapshotError("save", str(e)) from e
