"""
aiosqlite connections for the snapshot database.

The ledger already serializes writes behind its own lock, so the pool is
small: a writer and a reader are enough. Connections run in autocommit mode
and transactions are opened explicitly with BEGIN IMMEDIATE, which takes the
write lock up front instead of upgrading a read lock mid-statement.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import StorageSettings, get_logger
from stockledger.core.entities.product import utc_now

logger = get_logger(__name__)

# SQLite side files that belong to the database in WAL mode
SIDE_SUFFIXES = ("-wal", "-shm")


class ConnectionPool:
    """Lazily opened set of connections to one snapshot database."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 2,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = max(1, pool_size)
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._open: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, storage: StorageSettings) -> "ConnectionPool":
        return cls(
            storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)
        try:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA synchronous=FULL")
            await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        except aiosqlite.Error:
            await conn.close()
            raise
        conn.row_factory = aiosqlite.Row
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        async with self._lock:
            if self._idle.empty() and len(self._open) < self.pool_size:
                if not self._open:
                    self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = await self._connect()
                self._open.append(conn)
                logger.debug(
                    "snapshot_connection_opened",
                    db_path=str(self.db_path),
                    open_connections=len(self._open),
                )
                return conn
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it returns to the pool on exit."""
        conn = await self._checkout()
        try:
            yield conn
        finally:
            if conn in self._open:
                self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection inside BEGIN IMMEDIATE ... COMMIT."""
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.execute("ROLLBACK")
                raise
            await conn.execute("COMMIT")

    async def close(self) -> None:
        """Close every open connection; the pool reopens on next use."""
        async with self._lock:
            for conn in self._open:
                await conn.close()
            count = len(self._open)
            self._open.clear()
            self._idle = asyncio.Queue()
        if count:
            logger.info("snapshot_connections_closed", db_path=str(self.db_path), count=count)

    async def quarantine(self) -> Path | None:
        """
        Move an unreadable database file aside.

        Closes the pool first. The file and its WAL side files are renamed to
        `<name>.corrupt-<timestamp>` so a fresh database can be created in
        its place. Returns the new path, or None when there was no file.
        """
        await self.close()
        if not self.db_path.exists():
            return None

        stamp = utc_now().strftime("%Y%m%dT%H%M%S%f")
        target = self.db_path.with_name(f"{self.db_path.name}.corrupt-{stamp}")
        self.db_path.replace(target)
        for suffix in SIDE_SUFFIXES:
            side = self.db_path.with_name(self.db_path.name + suffix)
            if side.exists():
                side.replace(target.with_name(target.name + suffix))

        logger.warning("snapshot_database_quarantined", db_path=str(self.db_path), moved_to=str(target))
        return target
