import asyncio

import pytest

from plantscan.main import PlantScanApp, lifespan
from plantscan.modules.user_management.domain.models import CurrentUser
from plantscan.shared.core.exceptions import NotAuthenticatedError
from plantscan.shared.infrastructure.storage import MemoryKeyValueStore


class StubPlantClient:
    async def get_plants(self):
        return [{"plant_id": 1, "common_name": "Snake plant"}]


class StubAnalyzer:
    async def analyze(self, image_uri):
        return {"predictions": [{"class_name": "Leaf rust", "confidence": 0.9}]}


@pytest.fixture
def app(settings):
    return PlantScanApp(MemoryKeyValueStore(), StubPlantClient(), StubAnalyzer(), settings=settings)


@pytest.mark.asyncio
async def test_favorites_follow_the_signed_in_user(app):
    await app.favorites().add({"plant_id": 1})
    await app.auth.sign_in(CurrentUser(user_id="u1"))
    await app.favorites().add({"plant_id": 2})

    assert await app.favorites().favorite_ids() == ["2"]

    await app.auth.sign_out()
    assert await app.favorites().favorite_ids() == ["1"]


@pytest.mark.asyncio
async def test_delete_account_removes_user_documents_and_signs_out(app):
    await app.auth.sign_in(CurrentUser(user_id="u1"))
    await app.scans.scan("file:///scans/leaf.jpg")
    await app.favorites().add({"plant_id": 2})
    assert len(await app.uploads("u1").list_uploads()) == 1

    await app.delete_account()

    assert app.auth.get_current_user() is None
    keys = await app.store.keys()
    assert not [key for key in keys if key.endswith("_u1")]
    assert "scan_rate_limit" in keys


@pytest.mark.asyncio
async def test_lifespan_builds_store_and_marks_launch(settings):
    async with lifespan(StubPlantClient(), StubAnalyzer(), settings=settings) as app:
        result = await app.catalog.load_plants()
        assert await app.flags.has_launched()

    assert result.plants[0]["common_name"] == "Snake plant"


@pytest.mark.asyncio
async def test_delete_account_requires_a_user(app):
    with pytest.raises(NotAuthenticatedError) as exc_info:
        await app.delete_account()

    assert exc_info.value.details["operation"] == "delete_account"


@pytest.mark.asyncio
async def test_repositories_share_one_lock_registry(yielding_store, settings):
    app = PlantScanApp(yielding_store, StubPlantClient(), StubAnalyzer(), settings=settings)
    await app.auth.sign_in(CurrentUser(user_id="u1"))

    assert app.favorites().locks is app.locks
    assert app.user_scan_history("u1").locks is app.locks
    assert app.user_data.locks is app.locks

    await asyncio.gather(
        app.favorites().add({"plant_id": "1"}),
        app.favorites().add({"plant_id": "2"}),
        app.user_data.update("u1", {"name": "Ana"}),
        app.user_data.update("u1", {"phone": "555-0100"}),
    )

    assert sorted(await app.favorites().favorite_ids()) == ["1", "2"]
    data = await app.user_data.get("u1")
    assert (data.name, data.phone) == ("Ana", "555-0100")


@pytest.mark.asyncio
async def test_complete_setup_updates_user_document_and_session(app):
    assert not (await app.check_setup()).allowed

    await app.auth.sign_in(CurrentUser(user_id="u1", display_name="ana"))
    assert (await app.check_setup()).needs_setup

    await app.complete_setup({"name": "Ana Silva", "phone": "555-0100"})

    status = await app.check_setup()
    assert status.allowed and not status.needs_setup
    assert app.auth.get_current_user().display_name == "Ana Silva"


@pytest.mark.asyncio
async def test_complete_setup_requires_a_user(app):
    with pytest.raises(NotAuthenticatedError):
        await app.complete_setup({"name": "Ana Silva", "phone": "555-0100"})
