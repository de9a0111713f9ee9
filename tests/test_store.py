"""
Tests for the data store: persistence, merging on load and broadcast.
"""

import asyncio
import json

import pytest

from franchise_hub_api.app.core.storage import MemoryStorage, SQLiteStorage, build_storage
from franchise_hub_api.app.core.store import (
    COLLECTION_MODELS,
    DataStore,
    generate_unique_id,
    get_store,
    reset_store,
)
from franchise_hub_api.app.services.franchise_service import FranchiseService

from conftest import franchise_form


def _franchise_record(franchise_id: str, name: str = "Stored") -> dict:
    return {
        "id": franchise_id,
        "name": name,
        "business_owner_id": "owner-1",
        "initial_investment": {"min": 1, "max": 2},
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }


def test_generate_unique_id_format():
    first, second = generate_unique_id(), generate_unique_id()
    millis, suffix = first.split("-")
    assert millis.isdigit()
    assert len(suffix) == 9
    assert first != second


def test_build_storage_follows_database_url(monkeypatch):
    from franchise_hub_api.app.core.config import settings

    assert isinstance(build_storage(), SQLiteStorage)
    monkeypatch.setattr(settings, "database_url", ":memory:")
    assert isinstance(build_storage(), MemoryStorage)


def test_sqlite_storage_round_trip():
    storage = SQLiteStorage()
    storage.set_item("k", "v1")
    storage.set_item("k", "v2")

    assert storage.get_item("k") == "v2"
    assert "k" in storage.keys()
    storage.remove_item("k")
    assert storage.get_item("k") is None


def test_mutations_survive_a_restart(business):
    franchise = asyncio.run(FranchiseService.create_franchise(franchise_form(), business))

    reset_store()
    reloaded = get_store()

    assert reloaded.find("franchises", franchise.id).name == "Chai Point"
    assert len(reloaded.users) == 2


def test_every_collection_is_saved_under_prefixed_key(store):
    store.save_to_storage()

    for name in COLLECTION_MODELS:
        raw = store.storage.get_item(f"franchise_hub_{name}")
        assert isinstance(json.loads(raw), list)


def test_load_merges_without_duplicating_ids():
    storage = MemoryStorage()
    storage.set_item("test_franchises", json.dumps([_franchise_record("f-1"), _franchise_record("f-2")]))
    store = DataStore(storage, key_prefix="test")
    store.load_from_storage()
    store.load_from_storage()

    assert [f.id for f in store.franchises] == ["f-1", "f-2"]


def test_corrupt_and_invalid_data_is_skipped():
    storage = MemoryStorage()
    storage.set_item("test_franchises", json.dumps([{"id": "broken"}, _franchise_record("f-ok")]))
    storage.set_item("test_notifications", "{not json")
    storage.set_item("test_users", json.dumps({"id": "not-a-list"}))
    store = DataStore(storage, key_prefix="test")

    store.load_from_storage()

    assert [f.id for f in store.franchises] == ["f-ok"]
    assert store.notifications == []
    assert store.users == []


def test_notify_data_change_persists_and_publishes():
    storage = MemoryStorage()
    store = DataStore(storage, key_prefix="test")
    snapshots = []
    store.subscribe("franchises", snapshots.append)

    store.load_from_storage()
    store.franchises.append(
        COLLECTION_MODELS["franchises"].model_validate(_franchise_record("f-1"))
    )
    store.notify_data_change()

    assert [len(s) for s in snapshots] == [0, 0, 1]
    assert json.loads(storage.get_item("test_franchises"))[0]["id"] == "f-1"


def test_published_snapshot_is_a_copy():
    store = DataStore(MemoryStorage(), key_prefix="test")
    snapshots = []
    store.subscribe("franchises", snapshots.append)
    store.franchises.append(
        COLLECTION_MODELS["franchises"].model_validate(_franchise_record("f-1"))
    )
    store.update_subjects()

    store.franchises.clear()

    assert len(snapshots[-1]) == 1


def test_clear_stored_data_empties_memory_and_storage(store, business):
    asyncio.run(FranchiseService.create_franchise(franchise_form(), business))

    store.clear_stored_data()

    assert all(count == 0 for count in store.get_data_counts().values())
    assert store.storage.get_item("franchise_hub_franchises") is None


def test_unknown_collection_is_rejected(store):
    with pytest.raises(KeyError):
        store.find("widgets", "1")
    with pytest.raises(KeyError):
        store.subscribe("widgets", print)


def test_data_counts_list_every_collection(store):
    counts = store.get_data_counts()

    assert list(counts) == list(COLLECTION_MODELS)
    assert counts["users"] == 2
