from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status
from starlette.responses import Response

from billiards.config import config
from billiards.logic.exports import XLSX_MEDIA_TYPE, build_rankings_workbook
from billiards.logic.ranking.standings import get_rankings_with_qualification
from billiards.logic.seasons import current_season
from billiards.models.db.category import Category
from billiards.models.db.user import UserPublic
from billiards.routes.auth import user_authenticated
from billiards.routes.models import RankingsResponse, RankingsView, SeasonsResponse, SeasonsView
from billiards.sql.categories import sql_get_category
from billiards.sql.rankings import sql_get_seasons
from billiards.utils.app_settings import get_season_cutoff_month
from billiards.utils.id_types import CategoryId

router = APIRouter(prefix=config.api_prefix)


async def _get_category_or_404(category_id: CategoryId) -> Category:
    category = await sql_get_category(category_id)
    if category is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Category not found")
    return category


@router.get("/rankings", response_model=RankingsResponse)
async def get_rankings(
    category_id: CategoryId | None = Query(default=None, alias="categoryId"),
    season: str | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated),
) -> RankingsResponse:
    if category_id is None or not season:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "categoryId and season are required")

    category = await _get_category_or_404(category_id)
    rankings, qualified_count = await get_rankings_with_qualification(category_id, season)
    return RankingsResponse(
        data=RankingsView(
            category=category,
            season=season,
            qualified_count=qualified_count,
            rankings=rankings,
        )
    )


@router.get("/rankings/seasons", response_model=SeasonsResponse)
async def get_seasons(_: UserPublic = Depends(user_authenticated)) -> SeasonsResponse:
    return SeasonsResponse(
        data=SeasonsView(
            current_season=current_season(await get_season_cutoff_month()),
            seasons=await sql_get_seasons(),
        )
    )


@router.get("/rankings/export")
async def export_rankings(
    category_id: CategoryId | None = Query(default=None, alias="categoryId"),
    season: str | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated),
) -> Response:
    if category_id is None or not season:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "categoryId and season are required")

    category = await _get_category_or_404(category_id)
    rankings, _qualified_count = await get_rankings_with_qualification(category_id, season)
    if len(rankings) < 1:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "No rankings found")

    filename = f"classement_{category.game_type}_{category.level}_{season}.xlsx".replace(" ", "_")
    return Response(
        content=build_rankings_workbook(category.display_name, season, rankings),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
