"""Tests for the JSON file snapshot store."""

from pathlib import Path

import pytest

from stockledger.core.entities import InventoryConfig, LedgerSnapshot
from stockledger.core.exceptions import SnapshotError
from stockledger.infrastructure.storage import JsonFileSnapshotStore


@pytest.fixture
def path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "ledger.json"


class TestJsonFileSnapshotStore:
    async def test_missing_file_loads_empty(self, path: Path):
        store = JsonFileSnapshotStore(path, initial_config=InventoryConfig(suggested_margin=0.3))
        snapshot = await store.load()
        assert snapshot.products == []
        assert snapshot.config.suggested_margin == 0.3

    async def test_round_trip(self, path: Path, populated_snapshot: LedgerSnapshot):
        store = JsonFileSnapshotStore(path)
        await store.save(populated_snapshot)

        loaded = await store.load()

        assert loaded.config.suggested_margin == 0.25
        assert len(loaded.products) == 1
        product = loaded.products[0]
        assert product.total_stock == 2
        assert product.lots[0].entry_date.tzinfo is not None
        assert loaded.description_map == populated_snapshot.description_map
        assert loaded.last_import.document_references == ["PUR-1"]
        assert loaded.movements[0].document_reference == "PUR-1"

    async def test_corrupt_file_loads_empty(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        snapshot = await JsonFileSnapshotStore(path).load()
        assert snapshot.products == []

    async def test_null_collections_tolerated(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text('{"products": null, "movements": null, "last_import": null}', encoding="utf-8")
        snapshot = await JsonFileSnapshotStore(path).load()
        assert snapshot.products == []
        assert snapshot.movements == []

    async def test_save_leaves_no_temp_files(self, path: Path, populated_snapshot: LedgerSnapshot):
        store = JsonFileSnapshotStore(path)
        await store.save(populated_snapshot)
        await store.save(populated_snapshot)
        assert [p.name for p in path.parent.iterdir()] == ["ledger.json"]

    async def test_save_failure_raises(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        store = JsonFileSnapshotStore(blocker / "ledger.json")
        with pytest.raises(SnapshotError):
            await store.save(LedgerSnapshot())
