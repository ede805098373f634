import time

from asyncpg import PostgresError
from pydantic import BaseModel

from billiards.config import config
from billiards.logic.ranking.qualification import (
    DEFAULT_QUALIFICATION_THRESHOLD,
    DEFAULT_QUALIFIED_LARGE,
    DEFAULT_QUALIFIED_SMALL,
    QualificationSettings,
)
from billiards.logic.seasons import DEFAULT_SEASON_CUTOFF_MONTH
from billiards.sql.settings import sql_get_settings
from billiards.utils.logging import logger

DEFAULT_SETTINGS: dict[str, str] = {
    "organization_name": "Comité Départemental de Billard",
    "organization_short_name": "CDB",
    "primary_color": "#1F4788",
    "secondary_color": "#667EEA",
    "accent_color": "#FFC107",
    "background_color": "#FFFFFF",
    "background_secondary_color": "#F5F5F5",
    "email_communication": "communication@example.org",
    "email_convocations": "convocations@example.org",
    "email_noreply": "noreply@example.org",
    "email_sender_name": "CDB",
    "summary_email": "",
    # 0-indexed month: 8 is September.
    "season_cutoff_month": str(DEFAULT_SEASON_CUTOFF_MONTH),
    "qualification_threshold": str(DEFAULT_QUALIFICATION_THRESHOLD),
    "qualification_small": str(DEFAULT_QUALIFIED_SMALL),
    "qualification_large": str(DEFAULT_QUALIFIED_LARGE),
    "privacy_policy": "",
}

BRANDING_KEYS = (
    "primary_color",
    "secondary_color",
    "accent_color",
    "background_color",
    "background_secondary_color",
    "organization_name",
    "organization_short_name",
)


class EmailSettings(BaseModel):
    email_communication: str
    email_convocations: str
    email_noreply: str
    email_sender_name: str
    summary_email: str
    organization_name: str
    organization_short_name: str


class SettingsCache:
    """Read-through cache of the `app_settings` table merged over `DEFAULT_SETTINGS`."""

    def __init__(self, ttl_seconds: float) -> None:
        self.ttl_seconds = ttl_seconds
        self._value: dict[str, str] | None = None
        self._expires_at = 0.0

    async def get(self) -> dict[str, str]:
        now = time.monotonic()
        if self._value is not None and now < self._expires_at:
            return self._value

        try:
            stored = await sql_get_settings()
        except (PostgresError, OSError):
            logger.exception("Could not load app settings, using defaults")
            return dict(DEFAULT_SETTINGS)

        self._value = {**DEFAULT_SETTINGS, **stored}
        self._expires_at = now + self.ttl_seconds
        return self._value

    def invalidate(self) -> None:
        self._value = None
        self._expires_at = 0.0


settings_cache = SettingsCache(config.settings_cache_ttl_seconds)


async def get_setting(key: str) -> str:
    settings = await settings_cache.get()
    return settings.get(key) or DEFAULT_SETTINGS.get(key, "")


async def get_settings_batch(keys: tuple[str, ...] | list[str]) -> dict[str, str]:
    settings = await settings_cache.get()
    return {key: settings.get(key) or DEFAULT_SETTINGS.get(key, "") for key in keys}


def _int_or_default(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


async def get_qualification_settings() -> QualificationSettings:
    settings = await get_settings_batch(
        ["qualification_threshold", "qualification_small", "qualification_large"]
    )
    return QualificationSettings(
        threshold=_int_or_default(
            settings["qualification_threshold"], DEFAULT_QUALIFICATION_THRESHOLD
        ),
        small=_int_or_default(settings["qualification_small"], DEFAULT_QUALIFIED_SMALL),
        large=_int_or_default(settings["qualification_large"], DEFAULT_QUALIFIED_LARGE),
    )


async def get_season_cutoff_month() -> int:
    return _int_or_default(
        await get_setting("season_cutoff_month"), DEFAULT_SEASON_CUTOFF_MONTH
    )


async def get_email_settings() -> EmailSettings:
    return EmailSettings.model_validate(
        await get_settings_batch(list(EmailSettings.model_fields.keys()))
    )


async def get_branding_settings() -> dict[str, str]:
    return await get_settings_batch(BRANDING_KEYS)
