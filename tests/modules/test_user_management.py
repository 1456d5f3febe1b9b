import pytest

from plantscan.modules.user_management.application import SessionAuthProvider
from plantscan.modules.user_management.domain.models import CurrentUser, SetupStatus
from plantscan.modules.user_management.infrastructure.storage import (
    AppFlags,
    StorageUploadsRepository,
    StorageUserDataRepository,
)
from plantscan.shared.core.exceptions import ValidationError
from plantscan.shared.utils.logging import session_id_var

USER = CurrentUser(user_id="u1", email="ana@example.com", display_name="Ana")


@pytest.fixture
def user_data(store, locks, clock):
    return StorageUserDataRepository(store, locks=locks, profile_source=lambda: USER, now=clock)


@pytest.mark.asyncio
async def test_missing_document_reads_as_default_profile(user_data, store):
    data = await user_data.get("u1")

    assert data.email == "ana@example.com"
    assert data.display_name == "Ana"
    assert data.setup is False
    assert data.role == "user"
    assert data.total_scans == 0
    assert data.detected_diseases == []
    assert await store.keys() == []


@pytest.mark.asyncio
async def test_update_merges_and_stamps(user_data, clock):
    await user_data.update("u1", {"setup": True, "experience_level": "beginner"})
    clock.advance(minutes=1)
    data = await user_data.update("u1", {"display_name": "Ana B."})

    assert data.setup is True
    assert data.display_name == "Ana B."
    assert data.experience_level == "beginner"
    assert data.updated_at == clock()


@pytest.mark.asyncio
async def test_record_scan_adds_only_new_disease_names(user_data, clock):
    await user_data.record_scan("u1", [
        {"class_name": "Leaf rust", "confidence": 0.91},
        {"class_name": "Powdery mildew", "confidence": 0.42},
    ])
    clock.advance(days=1)
    data = await user_data.record_scan("u1", [
        {"class_name": "Leaf rust", "confidence": 0.99},
        {"disease_name": "Black spot", "confidence": 0.85},
        {"class_name": "Black spot", "confidence": 0.5},
    ])

    assert data.disease_names() == ["Leaf rust", "Powdery mildew", "Black spot"]
    assert data.detected_diseases[0].confidence == 0.91
    assert data.total_scans == 2
    assert data.last_scan_at == clock()


@pytest.mark.asyncio
async def test_record_scan_without_predictions_is_noop(user_data, store):
    assert await user_data.record_scan("u1", []) is None
    assert await store.keys() == []


@pytest.mark.asyncio
async def test_detected_diseases_newest_first_and_stats(user_data, clock):
    await user_data.record_scan("u1", [{"class_name": "Old blight", "confidence": 0.9}])
    clock.advance(days=40)
    await user_data.record_scan("u1", [{"class_name": "Leaf rust", "confidence": 0.8}])
    clock.advance(days=1)
    await user_data.record_scan("u1", [{"class_name": "Mosaic virus", "confidence": 0.3}])

    diseases = await user_data.get_detected_diseases("u1")
    stats = await user_data.disease_stats("u1")

    assert [d.disease_name for d in diseases] == ["Mosaic virus", "Leaf rust", "Old blight"]
    assert stats.total == 3
    assert stats.recent == 2
    assert stats.high_confidence == 2


@pytest.mark.asyncio
async def test_delete_all_removes_only_that_users_documents(user_data, store):
    for key in (
        "user_data_u1", "scan_history_u1", "plant_favorites_u1", "uploads_u1", "user_data_u2"
    ):
        await store.set(key, {})
    await store.set("scan_rate_limit", {"date": "2025-03-14", "count": 2})

    await user_data.delete_all("u1")

    assert sorted(await store.keys()) == ["scan_rate_limit", "user_data_u2"]


@pytest.mark.asyncio
async def test_user_id_is_required(user_data):
    with pytest.raises(ValidationError):
        await user_data.update("", {"setup": True})


@pytest.mark.asyncio
async def test_app_flags_store_boolean_strings(store):
    flags = AppFlags(store)

    assert not await flags.has_launched()
    assert await flags.is_first_launch()

    await flags.mark_as_launched()
    await flags.mark_first_launch_done()

    assert await flags.has_launched()
    assert not await flags.is_first_launch()
    assert await store.get("has_launched") == "true"
    assert await store.get("app_first_launch") == "false"


@pytest.mark.asyncio
async def test_session_sign_in_and_out(store):
    flags = AppFlags(store)
    auth = SessionAuthProvider(flags)

    await auth.sign_in(USER)
    assert auth.get_current_user() == USER
    assert await flags.is_logged_in()

    await auth.sign_out()
    assert auth.get_current_user() is None
    assert await store.get("user_logged_in") == "false"
    assert auth.session_id is None
    assert session_id_var.get() == ""


@pytest.mark.asyncio
async def test_sign_in_starts_a_logging_session(store):
    auth = SessionAuthProvider(AppFlags(store))

    await auth.sign_in(USER)

    assert auth.session_id.startswith("session_")
    assert session_id_var.get() == auth.session_id
    await auth.sign_out()


@pytest.mark.asyncio
async def test_record_scan_coerces_confidence(user_data):
    data = await user_data.record_scan("u1", [
        {"class_name": "Rust", "confidence": "high"},
        {"class_name": "Blight", "confidence": "0.75"},
        {"class_name": "Scab", "confidence": True},
    ])

    assert [d.confidence for d in data.detected_diseases] == [None, 0.75, None]


@pytest.mark.asyncio
async def test_setup_gate(user_data, store):
    assert await user_data.check_setup(None) == SetupStatus(allowed=False, needs_setup=True)
    assert await user_data.check_setup("u1") == SetupStatus(allowed=True, needs_setup=True)

    await user_data.update("u1", {"setup": True, "name": "Ana"})
    assert (await user_data.check_setup("u1")).needs_setup

    await store.set("user_data_admin", {"role": "admin", "setup": True})
    assert await user_data.check_setup("admin") == SetupStatus(allowed=False, needs_setup=False)


@pytest.mark.asyncio
async def test_complete_setup_stamps_and_clears_the_gate(user_data, clock):
    data = await user_data.complete_setup("u1", {
        "name": "Ana Silva",
        "phone": "555-0100",
        "location_address": "Lisbon",
    })

    assert data.setup is True
    assert data.display_name == "Ana Silva"
    assert data.location_address == "Lisbon"
    assert data.location is None
    assert data.setup_completed_at == clock()
    assert await user_data.check_setup("u1") == SetupStatus(allowed=True, needs_setup=False)


@pytest.mark.asyncio
async def test_complete_setup_requires_name_and_phone(user_data, store):
    with pytest.raises(ValidationError) as exc_info:
        await user_data.complete_setup("u1", {"name": "Ana"})

    assert exc_info.value.details["field"] == "phone"
    assert await store.keys() == []


@pytest.fixture
def uploads(store, locks, clock):
    return StorageUploadsRepository(store, "u1", locks=locks, now=clock)


@pytest.mark.asyncio
async def test_uploads_are_created_pending_newest_first(uploads, clock):
    first = await uploads.create({"image_uri": "file:///a.jpg", "status": "processing"})
    clock.advance(minutes=1)
    second = await uploads.create({"id": "upload_b", "image_uri": "file:///b.jpg"})

    assert first.status == "pending"
    assert first.id.startswith("upload_")
    assert second.id == "upload_b"
    assert [u.id for u in await uploads.list_uploads()] == ["upload_b", first.id]
    assert (await uploads.get(first.id)).created_at < second.created_at


@pytest.mark.asyncio
async def test_upload_update_merges_and_stamps(uploads, clock):
    upload = await uploads.create({"image_uri": "file:///a.jpg"})
    clock.advance(seconds=30)

    updated = await uploads.update(upload.id, {"status": "complete", "predictions": []})

    assert updated.status == "complete"
    assert updated.image_uri == "file:///a.jpg"
    assert updated.created_at == upload.created_at
    assert updated.updated_at == clock()
    assert await uploads.update("upload_missing", {"status": "error"}) is None


def test_uploads_need_an_owner(store):
    with pytest.raises(ValidationError):
        StorageUploadsRepository(store, "")
