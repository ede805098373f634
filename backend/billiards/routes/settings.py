from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette import status

from billiards.config import config
from billiards.models.db.user import UserPublic
from billiards.routes.auth import is_admin_user, user_authenticated
from billiards.routes.models import (
    QualificationSettingsResponse,
    SettingsResponse,
    SuccessResponse,
)
from billiards.sql.settings import sql_delete_setting, sql_upsert_setting
from billiards.utils.app_settings import (
    DEFAULT_SETTINGS,
    get_branding_settings,
    get_qualification_settings,
    settings_cache,
)
from billiards.utils.logging import logger

router = APIRouter(prefix=config.api_prefix)

_INTEGER_SETTINGS = {
    "season_cutoff_month",
    "qualification_threshold",
    "qualification_small",
    "qualification_large",
}


class SettingUpdateBody(BaseModel):
    value: str


def _validate_setting(key: str, value: str) -> None:
    if key not in DEFAULT_SETTINGS:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Unknown setting: {key}")
    if key in _INTEGER_SETTINGS and not value.strip().isdigit():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Setting {key} must be a number")
    if key == "season_cutoff_month" and not 0 <= int(value) <= 11:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "season_cutoff_month must be 0-11")


@router.get("/settings", response_model=SettingsResponse)
async def get_settings(_: UserPublic = Depends(user_authenticated)) -> SettingsResponse:
    return SettingsResponse(data=dict(await settings_cache.get()))


@router.get("/settings/branding", response_model=SettingsResponse)
async def get_branding() -> SettingsResponse:
    return SettingsResponse(data=await get_branding_settings())


@router.get("/settings/qualification", response_model=QualificationSettingsResponse)
async def get_qualification(
    _: UserPublic = Depends(user_authenticated),
) -> QualificationSettingsResponse:
    return QualificationSettingsResponse(data=await get_qualification_settings())


@router.put("/settings/{key}", response_model=SuccessResponse)
async def put_setting(
    key: str,
    body: SettingUpdateBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> SuccessResponse:
    if not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")

    _validate_setting(key, body.value)
    await sql_upsert_setting(key, body.value.strip())
    settings_cache.invalidate()
    logger.info("Updated setting: key=%s user_id=%s", key, int(user_public.id))
    return SuccessResponse()


@router.delete("/settings/{key}", response_model=SuccessResponse)
async def delete_setting(
    key: str,
    user_public: UserPublic = Depends(user_authenticated),
) -> SuccessResponse:
    if not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")
    if key not in DEFAULT_SETTINGS:
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"Unknown setting: {key}")

    await sql_delete_setting(key)
    settings_cache.invalidate()
    return SuccessResponse()
