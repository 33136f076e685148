"""Opening the store: schema upgrade, seeding, settings fallback."""

import logging

import pytest

from edunexus.access import open_store
from edunexus.db.models import SystemSettings, UserRole
from edunexus.errors import StoreConnectionError
from edunexus.services.settings_ref import SystemSettingsRef


async def test_fresh_store_is_seeded(store):
    founder = await store.accounts.read("founder_001")
    admin = await store.accounts.read("admin_001")

    assert founder.username == "founder"
    assert founder.role == UserRole.FOUNDER.value
    assert admin.username == "admin"
    assert admin.role == UserRole.ADMIN.value

    settings = await store.settings.read()
    assert settings is not None
    assert settings.system_announcement == "Welcome to EduNexus AI V2.0"
    assert store.system_settings.is_default is False


async def test_reopen_does_not_reseed(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path}/reopen.db"

    first = await open_store(url)
    current = await first.settings.read()
    current.system_announcement = "Exams next week"
    await first.settings.update(current)
    await first.accounts.delete("admin_001")
    await first.close()

    second = await open_store(url)
    try:
        settings = await second.settings.read()
        assert settings.system_announcement == "Exams next week"
        assert settings.version == 2
        assert await second.accounts.read("admin_001") is None
        assert await second.accounts.read("founder_001") is not None
    finally:
        await second.close()


async def test_missing_settings_fall_back_to_defaults(store):
    await store.settings.delete("global")

    current = await store.system_settings.reload()

    assert store.system_settings.is_default is True
    assert current.enable_ai_teacher is True
    assert current.maintenance_mode is False


async def test_settings_reference_reflects_updates(store):
    await store.settings.update(SystemSettings(maintenance_mode=True))

    current = await store.system_settings.reload()

    assert current.maintenance_mode is True
    # Partial record: unset fields keep their stored values
    assert current.system_announcement == "Welcome to EduNexus AI V2.0"


async def test_unreachable_database_raises(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path}/missing/dir/test.db"

    with pytest.raises(StoreConnectionError):
        await open_store(url)


async def test_same_settings_payload_twice_leaves_one_record(store):
    payload = dict(maintenance_mode=False, enable_ads=False, system_announcement="Holiday")

    await store.settings.update(SystemSettings(**payload))
    await store.settings.update(SystemSettings(**payload))

    records = await store.settings.read_all()
    assert len(records) == 1
    assert records[0].enable_ads is False
    assert records[0].system_announcement == "Holiday"


async def test_settings_missing_at_startup_is_logged_once(store, caplog):
    await store.settings.delete("global")
    ref = SystemSettingsRef(store.settings)

    with caplog.at_level(logging.WARNING, logger="edunexus.services.settings_ref"):
        await ref.reload()
        await ref.reload()

    missing = [r for r in caplog.records if "Settings record missing" in r.getMessage()]
    assert len(missing) == 1
    assert ref.is_default is True
