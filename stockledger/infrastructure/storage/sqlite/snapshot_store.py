"""SQLite implementation of ledger snapshot storage."""

from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from stockledger.config import get_logger
from stockledger.core.entities.product import utc_now
from stockledger.core.entities.snapshot import InventoryConfig, LedgerSnapshot
from stockledger.core.exceptions import SnapshotError
from stockledger.core.interfaces.snapshot_store import ISnapshotStore
from stockledger.infrastructure.storage.sqlite.connection import ConnectionPool
from stockledger.infrastructure.storage.sqlite.migrations import initialize_database

logger = get_logger(__name__)


def _is_corruption(error: aiosqlite.Error) -> bool:
    """True for damaged or non-SQLite files, as opposed to busy or locked errors."""
    return isinstance(error, aiosqlite.DatabaseError) and not isinstance(
        error, aiosqlite.OperationalError
    )


class SQLiteSnapshotStore(ISnapshotStore):
    """
    Stores the ledger as one JSON payload in a single-row table.

    The schema is created on first use through the versioned migrations. A
    database file SQLite cannot read is moved aside and replaced by an empty
    ledger on the next save.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 2,
        busy_timeout: int = 30000,
        initial_config: InventoryConfig | None = None,
        pool: ConnectionPool | None = None,
    ):
        self.db_path = db_path
        self.initial_config = initial_config
        self._pool = pool or ConnectionPool(db_path, pool_size=pool_size, busy_timeout=busy_timeout)
        self._migrated = False

    def _empty(self) -> LedgerSnapshot:
        if self.initial_config is None:
            return LedgerSnapshot()
        return LedgerSnapshot(config=self.initial_config.model_copy())

    async def _ensure_schema(self) -> None:
        if self._migrated:
            return
        results = await initialize_database(self.db_path)
        failed = [r for r in results if not r.success]
        if failed:
            raise SnapshotError("migrate", failed[0].error or "migration failed")
        self._migrated = True

    async def _read_row(self) -> aiosqlite.Row | None:
        await self._ensure_schema()
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT version, saved_at, payload FROM ledger_snapshot WHERE id = 1"
            )
            return await cursor.fetchone()

    async def _discard_unreadable(self, error: aiosqlite.Error) -> None:
        logger.error(
            "snapshot_load_failed",
            db_path=str(self.db_path),
            error=str(error)[:200],
        )
        self._migrated = False
        try:
            await self._pool.quarantine()
        except OSError as e:
            raise SnapshotError("load", f"cannot move unreadable database aside: {e}") from e

    async def load(self) -> LedgerSnapshot:
        """Load the stored snapshot, or an empty one if none is usable."""
        try:
            row = await self._read_row()
        except aiosqlite.Error as e:
            if not _is_corruption(e):
                raise SnapshotError("load", str(e)) from e
            await self._discard_unreadable(e)
            return self._empty()

        if row is None:
            logger.info("snapshot_not_found", db_path=str(self.db_path))
            return self._empty()

        try:
            snapshot = LedgerSnapshot.model_validate_json(row["payload"])
        except (ValidationError, ValueError) as e:
            logger.error(
                "snapshot_load_failed",
                db_path=str(self.db_path),
                error=str(e)[:200],
            )
            return self._empty()

        logger.debug(
            "snapshot_loaded",
            version=row["version"],
            saved_at=row["saved_at"],
            products=len(snapshot.products),
            movements=len(snapshot.movements),
        )
        return snapshot

    async def save(self, snapshot: LedgerSnapshot) -> None:
        """Replace the stored snapshot."""
        snapshot.saved_at = utc_now()
        payload = snapshot.model_dump_json()

        try:
            await self._ensure_schema()
            async with self._pool.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO ledger_snapshot (id, version, saved_at, payload)
                    VALUES (1, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        version = excluded.version,
                        saved_at = excluded.saved_at,
                        payload = excluded.payload
                    """,
                    (snapshot.version, snapshot.saved_at.isoformat(), payload),
                )
        except aiosqlite.Error as e:
            logger.error("snapshot_save_failed", db_path=str(self.db_path), error=str(e))
            raise SnapshotError("save", str(e)) from e

        logger.debug("snapshot_saved", bytes=len(payload), products=len(snapshot.products))

    async def close(self) -> None:
        await self._pool.close()
