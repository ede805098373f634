import pytest
from asyncpg.exceptions import PostgresError

from billiards.utils import app_settings
from billiards.utils.app_settings import DEFAULT_SETTINGS, SettingsCache


@pytest.mark.asyncio
async def test_settings_cache_reads_through_and_invalidates(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls = {"load": 0}

    async def fake_get_settings() -> dict[str, str]:
        calls["load"] += 1
        return {"qualification_threshold": "12"}

    monkeypatch.setattr(app_settings, "sql_get_settings", fake_get_settings)
    cache = SettingsCache(ttl_seconds=300)

    first = await cache.get()
    second = await cache.get()
    cache.invalidate()
    await cache.get()

    assert first["qualification_threshold"] == "12"
    assert first["organization_name"] == DEFAULT_SETTINGS["organization_name"]
    assert second is first
    assert calls["load"] == 2


@pytest.mark.asyncio
async def test_settings_cache_falls_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_get_settings() -> dict[str, str]:
        raise PostgresError("connection lost")

    monkeypatch.setattr(app_settings, "sql_get_settings", failing_get_settings)

    settings = await SettingsCache(ttl_seconds=300).get()

    assert settings == DEFAULT_SETTINGS


@pytest.mark.asyncio
async def test_get_qualification_settings_ignores_malformed_values(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_get_settings() -> dict[str, str]:
        return {"qualification_small": "three", "qualification_large": "8"}

    monkeypatch.setattr(app_settings, "sql_get_settings", fake_get_settings)
    monkeypatch.setattr(app_settings, "settings_cache", SettingsCache(ttl_seconds=300))

    settings = await app_settings.get_qualification_settings()

    assert settings.threshold == 9
    assert settings.small == 4
    assert settings.large == 8
