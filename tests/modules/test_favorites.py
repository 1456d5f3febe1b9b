import asyncio

import pytest

from plantscan.modules.favorites.infrastructure.storage import StorageFavoritesRepository
from plantscan.shared.core.exceptions import StorageError, ValidationError

FERN = {"plant_id": 7, "common_name": "Boston fern", "watering": "frequent"}
CACTUS = {"plant_id": "12", "common_name": "Golden barrel"}


@pytest.fixture
def favorites(store, clock, locks):
    return StorageFavoritesRepository(store, locks=locks, now=clock)


@pytest.mark.asyncio
async def test_toggle_twice_restores_membership_with_new_timestamp(favorites, clock):
    await favorites.add(CACTUS)

    assert await favorites.toggle(FERN) is True
    first = await favorites.get("7")
    clock.advance(minutes=5)

    assert await favorites.toggle(FERN) is False
    assert await favorites.favorite_ids() == ["12"]

    assert await favorites.toggle(FERN) is True
    readded = await favorites.get("7")
    assert readded.added_to_favorites_at > first.added_to_favorites_at


@pytest.mark.asyncio
async def test_add_keeps_plant_fields_and_stamps_time(favorites, clock):
    assert await favorites.add(FERN)
    assert not await favorites.add(FERN)

    record = await favorites.get(7)

    assert record.plant_id == "7"
    assert record.plant_data["common_name"] == "Boston fern"
    assert record.added_to_favorites_at == clock()


@pytest.mark.asyncio
async def test_list_is_newest_first(favorites, clock):
    await favorites.add(FERN)
    clock.advance(hours=1)
    await favorites.add(CACTUS)

    assert [f.plant_id for f in await favorites.list_favorites()] == ["12", "7"]


@pytest.mark.asyncio
async def test_remove_and_clear(favorites):
    await favorites.add(FERN)
    await favorites.add(CACTUS)

    assert await favorites.remove("7")
    assert not await favorites.remove("7")
    assert await favorites.is_favorite("12")

    await favorites.clear()

    assert await favorites.get_all() == {}


@pytest.mark.asyncio
async def test_plant_without_id_is_rejected(favorites):
    with pytest.raises(ValidationError):
        await favorites.add({"common_name": "Mystery plant"})


@pytest.mark.asyncio
async def test_guest_and_user_favorites_use_separate_keys(store, locks):
    guest = StorageFavoritesRepository(store, locks=locks)
    user = StorageFavoritesRepository(store, owner_id="u1", locks=locks)

    await guest.add(FERN)
    await user.add(CACTUS)

    assert sorted(await store.keys()) == ["plant_favorites", "plant_favorites_u1"]
    assert await guest.favorite_ids() == ["7"]
    assert await user.favorite_ids() == ["12"]


def test_shared_lock_registry_is_kept(store, locks):
    assert StorageFavoritesRepository(store, locks=locks).locks is locks


@pytest.mark.asyncio
async def test_concurrent_adds_are_not_lost(yielding_store, locks, clock):
    plants = [{"plant_id": i, "common_name": f"Plant {i}"} for i in range(25)]

    # A fresh repository per call, as each screen builds its own
    await asyncio.gather(*(
        StorageFavoritesRepository(yielding_store, locks=locks, now=clock).add(plant)
        for plant in plants
    ))

    favorites = StorageFavoritesRepository(yielding_store, locks=locks, now=clock)
    assert len(await favorites.get_all()) == 25


@pytest.mark.asyncio
async def test_malformed_document_reads_as_empty(store, favorites):
    await store.set("plant_favorites", ["not", "a", "mapping"])

    assert await favorites.get_all() == {}


@pytest.mark.asyncio
async def test_write_failure_propagates(failing_store, clock):
    favorites = StorageFavoritesRepository(failing_store, now=clock)
    failing_store.failing = True

    with pytest.raises(StorageError):
        await favorites.add(FERN)
