import pytest

from plantscan.shared.config.cache import StorageKey
from plantscan.shared.core.exceptions import CacheError
from plantscan.shared.infrastructure.cache import CacheManager

PLANTS = StorageKey.CACHED_PLANTS.value
P1 = {"plant_id": 1, "common_name": "Snake plant"}
P2 = {"plant_id": 2, "common_name": "Pothos"}


@pytest.mark.asyncio
async def test_plants_cache_lifecycle(cache, store, clock):
    assert await cache.save(PLANTS, [P1, P2], 24)

    clock.advance(hours=23)
    assert await cache.load(PLANTS, 24) == [P1, P2]

    clock.advance(hours=2)
    assert not await cache.is_valid(PLANTS, 24)
    assert await cache.load_stale(PLANTS) == [P1, P2]

    assert await cache.load(PLANTS, 24) is None
    assert await store.get(PLANTS) is None


@pytest.mark.asyncio
async def test_load_immediately_after_save_returns_data(cache):
    await cache.save("weather_cache", {"temp_c": 21.5})

    assert await cache.load("weather_cache", 1) == {"temp_c": 21.5}
    assert await cache.load("weather_cache", 0.001) == {"temp_c": 21.5}


@pytest.mark.asyncio
async def test_longer_window_accepts_what_shorter_window_accepts(cache, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(hours=10)

    assert not await cache.is_valid(PLANTS, 6)
    assert await cache.load(PLANTS, 12) == [P1]
    assert await cache.load(PLANTS, 48) == [P1]


@pytest.mark.asyncio
async def test_expired_load_evicts_entry(cache, store, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(hours=24)

    assert await cache.load(PLANTS, 24) is None
    assert await store.get(PLANTS) is None
    assert await cache.load_stale(PLANTS) is None


@pytest.mark.asyncio
async def test_load_stale_never_evicts(cache, store, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(days=30)

    assert await cache.load_stale(PLANTS) == [P1]
    assert await cache.load_stale(PLANTS) == [P1]
    assert await store.get(PLANTS) is not None


@pytest.mark.asyncio
async def test_is_valid_has_no_side_effect(cache, store, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(hours=30)

    assert not await cache.is_valid(PLANTS, 24)
    assert await store.get(PLANTS) is not None


@pytest.mark.asyncio
async def test_custom_expiry_overrides_load_window(cache, clock):
    await cache.save("cached_user_location", {"latitude": 1.0}, custom_expiry=72)
    clock.advance(hours=48)

    assert await cache.load("cached_user_location", 24) == {"latitude": 1.0}


@pytest.mark.asyncio
async def test_zero_custom_expiry_is_immediately_expired(cache):
    await cache.save("weather_cache", {"temp_c": 10}, custom_expiry=0)

    assert await cache.load("weather_cache", 24) is None


@pytest.mark.asyncio
async def test_save_supersedes_previous_entry(cache, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(hours=23)
    await cache.save(PLANTS, [P2])
    clock.advance(hours=23)

    assert await cache.load(PLANTS, 24) == [P2]


@pytest.mark.asyncio
async def test_non_envelope_value_is_treated_as_absent(cache, store):
    await store.set(PLANTS, [P1])

    assert await cache.load(PLANTS) is None
    assert await cache.load_stale(PLANTS) is None
    assert await cache.get_metadata(PLANTS) is None


@pytest.mark.asyncio
async def test_metadata_reports_age(cache, clock):
    await cache.save(PLANTS, [P1], custom_expiry=12)
    clock.advance(hours=3)

    metadata = await cache.get_metadata(PLANTS)

    assert metadata.key == PLANTS
    assert metadata.age_hours == pytest.approx(3)
    assert metadata.custom_expiry == 12
    assert metadata.version == "1.0"
    assert metadata.created_at.startswith("2025-03-14T09:30:00")
    assert metadata.age_text == "3 hours ago"


@pytest.mark.asyncio
async def test_update_keeps_original_timestamp(cache, clock):
    await cache.save(PLANTS, [P1])
    clock.advance(hours=20)

    assert await cache.update(PLANTS, lambda plants: plants + [P2])

    clock.advance(hours=5)
    assert await cache.load_stale(PLANTS) == [P1, P2]
    assert not await cache.is_valid(PLANTS, 24)


@pytest.mark.asyncio
async def test_update_missing_entry_returns_false(cache):
    assert not await cache.update(PLANTS, lambda plants: plants)


@pytest.mark.asyncio
async def test_clear_all_keeps_scan_window_and_user_documents(cache, store):
    await cache.save(PLANTS, [P1])
    await cache.save("cached_user_location", {"latitude": 1.0})
    await store.set("scan_rate_limit", {"date": "2025-03-14", "count": 4})
    await store.set("user_data_u1", {"total_scans": 4})

    assert await cache.clear_all()

    assert sorted(await store.keys()) == ["scan_rate_limit", "user_data_u1"]


@pytest.mark.asyncio
async def test_clear_and_clear_multiple(cache, store):
    await cache.save("a", 1)
    await cache.save("b", 2)
    await cache.save("c", 3)

    assert await cache.clear("a")
    assert await cache.clear_multiple(["b", "c"])
    assert await store.keys() == []


@pytest.mark.asyncio
async def test_cache_info_and_size_cover_app_keys_only(cache, store):
    await cache.save(PLANTS, [P1])
    await cache.save("weather_cache", {"temp_c": 3})
    await store.set("user_data_u1", {"total_scans": 1})

    info = await cache.get_all_cache_info()
    size = await cache.get_cache_size()

    assert sorted(info) == [PLANTS, "weather_cache"]
    assert size.key_count == 2
    assert size.total_size == sum(size.size_by_key.values())
    assert size.size_by_key[PLANTS] == len((await store.get_raw(PLANTS)).encode("utf-8"))
    assert size.total_size_formatted.endswith(" B")


@pytest.mark.asyncio
async def test_preload_saves_every_entry(cache):
    assert await cache.preload_caches({PLANTS: [P1], "disease_cache": []})

    assert await cache.load(PLANTS) == [P1]
    assert await cache.load("disease_cache") == []


@pytest.mark.asyncio
async def test_failures_are_swallowed_and_reported(failing_store, clock):
    errors = []
    cache = CacheManager(failing_store, clock=clock.timestamp, on_error=errors.append)
    failing_store.failing = True

    assert await cache.save(PLANTS, [P1]) is False
    assert await cache.clear(PLANTS) is False
    assert await cache.clear_all() is False
    assert await cache.load(PLANTS) is None
    assert (await cache.get_cache_size()).total_size == 0

    assert [error.details["operation"] for error in errors] == [
        "save", "clear", "clear_all", "get_cache_size"
    ]
    assert all(isinstance(error, CacheError) for error in errors)
    assert errors[0].details["key"] == PLANTS


@pytest.mark.asyncio
async def test_raising_error_hook_does_not_escape(failing_store, clock):
    def hook(error):
        raise RuntimeError("hook broke")

    cache = CacheManager(failing_store, clock=clock.timestamp, on_error=hook)
    failing_store.failing = True

    assert await cache.save(PLANTS, [P1]) is False
