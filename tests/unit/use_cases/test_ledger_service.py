"""Tests for the ledger unit of work."""

import asyncio
import threading
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from stockledger.application.services import (
    LedgerService,
    get_ledger_service,
    reset_ledger_service,
)
from stockledger.core.entities import LedgerSnapshot
from stockledger.core.exceptions import ProductNotFoundError, SnapshotError
from stockledger.infrastructure.storage import JsonFileSnapshotStore


class TestLedgerService:
    async def test_write_persists_snapshot(self, ledger: LedgerService, snapshot_path: Path):
        product = await ledger.write(lambda ctx: ctx.store.create_product("PVC pipe"))

        assert snapshot_path.exists()
        fresh = LedgerService(JsonFileSnapshotStore(snapshot_path))
        descriptions = await fresh.read(lambda ctx: [p.description for p in ctx.store.products])
        assert descriptions == [product.description]

    async def test_failed_write_rolls_back(self, ledger: LedgerService, snapshot_path: Path):
        def create_then_fail(ctx):
            ctx.store.create_product("PVC pipe")
            ctx.store.get_product("missing")

        with pytest.raises(ProductNotFoundError):
            await ledger.write(create_then_fail)

        assert await ledger.read(lambda ctx: ctx.store.products) == []
        assert not snapshot_path.exists()

    async def test_failed_save_rolls_back(self):
        snapshot_store = AsyncMock()
        snapshot_store.load.return_value = LedgerSnapshot()
        snapshot_store.save.side_effect = SnapshotError("save", "disk full")
        ledger = LedgerService(snapshot_store)

        with pytest.raises(SnapshotError):
            await ledger.write(lambda ctx: ctx.store.create_product("PVC pipe"))

        assert await ledger.read(lambda ctx: len(ctx.store.products)) == 0
        snapshot_store.load.assert_awaited_once()

    async def test_write_cancelled_during_save(self):
        snapshot_store = AsyncMock()
        snapshot_store.load.return_value = LedgerSnapshot()
        save_started = asyncio.Event()

        async def hanging_save(snapshot):
            save_started.set()
            await asyncio.Event().wait()

        snapshot_store.save.side_effect = hanging_save
        ledger = LedgerService(snapshot_store)

        task = asyncio.create_task(ledger.write(lambda ctx: ctx.store.create_product("GHOST PRODUCT")))
        await save_started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert await ledger.read(lambda ctx: ctx.store.products) == []
        assert snapshot_store.load.await_count == 2

    async def test_cancelled_offloaded_write_is_discarded(
        self, ledger: LedgerService, snapshot_path: Path
    ):
        entered = threading.Event()
        release = threading.Event()

        def slow_create(ctx):
            entered.set()
            release.wait(5)
            return ctx.store.create_product("GHOST PRODUCT")

        task = asyncio.create_task(ledger.write(slow_create, offload=True))
        await asyncio.to_thread(entered.wait, 5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        release.set()

        assert await ledger.read(lambda ctx: ctx.store.products) == []
        assert not snapshot_path.exists()

    async def test_offloaded_write(self, ledger: LedgerService):
        product = await ledger.write(lambda ctx: ctx.store.create_product("LED bulb"), offload=True)
        found = await ledger.read(lambda ctx: ctx.store.find_product(product.id))
        assert found is not None

    async def test_reload_reads_storage_again(self, ledger: LedgerService, snapshot_path: Path):
        await ledger.write(lambda ctx: ctx.store.create_product("PVC pipe"))
        snapshot_path.unlink()

        await ledger.reload()

        assert await ledger.read(lambda ctx: ctx.store.products) == []

    async def test_pending_bound_reaches_orchestrator(self, snapshot_path: Path):
        ledger = LedgerService(JsonFileSnapshotStore(snapshot_path), max_pending_per_import=3)
        bound = await ledger.read(lambda ctx: ctx.orchestrator.max_pending_per_import)
        assert bound == 3


class TestLedgerServiceSingleton:
    def test_override_replaces_singleton(self, snapshot_path: Path):
        reset_ledger_service()
        try:
            service = get_ledger_service(JsonFileSnapshotStore(snapshot_path))
            assert get_ledger_service() is service
        finally:
            reset_ledger_service()
