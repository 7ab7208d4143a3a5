"""
Service factory functions for dependency injection.

This module wires the snapshot store to the core ledger services. Use
cases obtain the ledger through `get_ledger_service()`.

Every write runs as one unit of work under a lock: the operation mutates a
working copy of the catalog, the copy is saved, and only then does it
replace the live state. A failed or cancelled write leaves the live state
at the last saved snapshot.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from stockledger.config import get_logger, get_settings
from stockledger.core.services import CatalogStore, ImportOrchestrator, ReconciliationEngine

if TYPE_CHECKING:
    from stockledger.core.interfaces import ISnapshotStore

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class LedgerContext:
    """Core services bound to one catalog store."""

    store: CatalogStore
    engine: ReconciliationEngine
    orchestrator: ImportOrchestrator


class LedgerService:
    """Serialized access to the ledger state."""

    def __init__(
        self,
        snapshot_store: "ISnapshotStore",
        max_pending_per_import: int | None = None,
    ):
        self._snapshot_store = snapshot_store
        self._max_pending_per_import = max_pending_per_import
        self._store: CatalogStore | None = None
        self._lock = asyncio.Lock()

    async def _load(self) -> CatalogStore:
        if self._store is None:
            snapshot = await self._snapshot_store.load()
            self._store = CatalogStore(snapshot)
            logger.info(
                "ledger_loaded",
                products=len(snapshot.products),
                movements=len(snapshot.movements),
            )
        return self._store

    def _context(self, store: CatalogStore) -> LedgerContext:
        engine = ReconciliationEngine(store)
        orchestrator = ImportOrchestrator(
            store,
            engine=engine,
            max_pending_per_import=self._max_pending_per_import,
        )
        return LedgerContext(store=store, engine=engine, orchestrator=orchestrator)

    async def read(self, fn: Callable[[LedgerContext], T]) -> T:
        """Run a read-only function against the current state."""
        async with self._lock:
            store = await self._load()
            return fn(self._context(store))

    async def write(
        self,
        fn: Callable[[LedgerContext], T],
        offload: bool = False,
    ) -> T:
        """
        Run a mutating function and persist the resulting snapshot.

        Args:
            fn: Function receiving a LedgerContext
            offload: Run the function in a worker thread (large documents)

        Returns:
            Whatever `fn` returns
        """
        async with self._lock:
            store = await self._load()
            working = CatalogStore(store.snapshot.model_copy(deep=True))
            context = self._context(working)
            if offload:
                # A cancelled worker thread keeps running on the discarded copy
                result = await asyncio.to_thread(fn, context)
            else:
                result = fn(context)

            try:
                await self._snapshot_store.save(working.snapshot)
            except asyncio.CancelledError:
                # The save may or may not have landed; reload on next access
                self._store = None
                logger.warning("ledger_write_cancelled_during_save")
                raise

            self._store = working
            return result

    async def reload(self) -> None:
        """Drop the in-memory state; the next access loads from storage."""
        async with self._lock:
            self._store = None


# Singleton service instance
_ledger_service: LedgerService | None = None


def get_ledger_service(snapshot_store: "ISnapshotStore | None" = None) -> LedgerService:
    """
    Get or create the LedgerService instance.

    Args:
        snapshot_store: Optional snapshot store override

    Returns:
        Configured LedgerService
    """
    global _ledger_service

    if _ledger_service is not None and snapshot_store is None:
        return _ledger_service

    # Lazy import infrastructure to avoid circular imports
    if snapshot_store is None:
        from stockledger.infrastructure.storage import get_snapshot_store

        snapshot_store = get_snapshot_store()

    service = LedgerService(
        snapshot_store,
        max_pending_per_import=get_settings().inventory.max_pending_per_import,
    )
    _ledger_service = service
    return service


def reset_ledger_service() -> None:
    """Reset the singleton (for testing)."""
    global _ledger_service
    _ledger_service = None
