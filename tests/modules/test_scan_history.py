import pytest

from plantscan.modules.scan_history.domain.models import ScanEntry, ScanStatus
from plantscan.modules.scan_history.infrastructure.storage import StorageScanHistoryRepository


def entry(n: int) -> ScanEntry:
    return ScanEntry(id=f"scan-{n}", image_uri=f"file:///scans/{n}.jpg")


@pytest.mark.asyncio
async def test_append_beyond_capacity_drops_oldest(store, locks):
    history = StorageScanHistoryRepository(store, capacity=5, locks=locks)

    for n in range(8):
        await history.append(entry(n))

    assert [e.id for e in await history.get_all()] == [
        "scan-7", "scan-6", "scan-5", "scan-4", "scan-3"
    ]


def test_default_capacities_come_from_settings(store, settings):
    assert StorageScanHistoryRepository(store, settings=settings).capacity == 50
    assert StorageScanHistoryRepository(store, owner_id="u1", settings=settings).capacity == 100


def test_capacity_must_be_positive(store):
    with pytest.raises(ValueError):
        StorageScanHistoryRepository(store, capacity=0)


@pytest.mark.asyncio
async def test_user_history_uses_prefixed_key(store, settings):
    history = StorageScanHistoryRepository(store, owner_id="u1", settings=settings)

    await history.append(entry(1))

    assert await store.keys() == ["scan_history_u1"]


@pytest.mark.asyncio
async def test_entries_round_trip_through_storage(store, settings):
    history = StorageScanHistoryRepository(store, settings=settings)
    saved = ScanEntry(
        predictions=[{"class_name": "Leaf rust", "confidence": 0.91}],
        image_uri="file:///scans/a.jpg",
        status=ScanStatus.INFERENCE_DONE,
        upload_id="upload_1",
    )

    await history.append(saved)
    loaded = await history.get(saved.id)

    assert loaded.model_dump() == saved.model_dump()
    assert loaded.status.has_results


@pytest.mark.asyncio
async def test_remove_and_clear(store, settings):
    history = StorageScanHistoryRepository(store, settings=settings)
    await history.append(entry(1))
    await history.append(entry(2))

    assert await history.remove("scan-1")
    assert not await history.remove("scan-1")
    assert [e.id for e in await history.get_all()] == ["scan-2"]

    await history.clear()

    assert await history.get_all() == []
    assert await store.get("scan_history") is None


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(store, settings):
    await store.set("scan_history", [{"id": "ok"}, {"status": "exploded"}, "junk"])

    history = StorageScanHistoryRepository(store, settings=settings)

    assert [e.id for e in await history.get_all()] == ["ok"]
