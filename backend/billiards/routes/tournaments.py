from datetime import date

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from starlette import status
from starlette.responses import Response

from billiards.config import config
from billiards.database import database
from billiards.logic.csv_import import parse_results_csv
from billiards.logic.exports import XLSX_MEDIA_TYPE, build_tournament_results_workbook
from billiards.logic.ranking.calculation import recalculate_all_rankings, recalculate_rankings
from billiards.logic.reconciliation import validate_import_rows
from billiards.logic.seasons import is_valid_season
from billiards.logic.tournament_import import import_tournament_results
from billiards.models.db.tournament import FINALE_TOURNAMENT_NUMBER, TournamentUpdateBody
from billiards.models.db.user import UserPublic
from billiards.models.tournament_import import (
    CreatePlayersBody,
    CreatePlayersResult,
    ImportValidation,
    RecalculateAllResult,
    RecalculateRankingsBody,
    RecalculateRankingsResult,
    TournamentExistence,
    TournamentImportParams,
    TournamentImportResult,
)
from billiards.routes.auth import is_admin_user, user_authenticated
from billiards.routes.models import (
    CategoriesResponse,
    SuccessResponse,
    TournamentResults,
    TournamentResultsResponse,
    TournamentsResponse,
)
from billiards.sql.categories import sql_get_categories, sql_get_category
from billiards.sql.players import sql_upsert_player
from billiards.sql.tournaments import (
    sql_delete_tournament,
    sql_find_existing_tournament,
    sql_get_tournament,
    sql_get_tournament_results,
    sql_get_tournament_with_category,
    sql_get_tournaments,
    sql_update_tournament,
)
from billiards.utils.id_types import CategoryId, TournamentId
from billiards.utils.logging import logger

router = APIRouter(prefix=config.api_prefix)


def _require_admin(user_public: UserPublic) -> None:
    if not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")


async def _read_upload(file: UploadFile | None) -> list[list[str]]:
    if file is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No file uploaded")
    return parse_results_csv(await file.read())


@router.get("/tournaments/categories", response_model=CategoriesResponse)
async def get_categories(
    _: UserPublic = Depends(user_authenticated),
) -> CategoriesResponse:
    return CategoriesResponse(data=await sql_get_categories())


@router.get("/tournaments", response_model=TournamentsResponse)
async def get_tournaments(
    season: str | None = Query(default=None),
    category_id: CategoryId | None = Query(default=None, alias="categoryId"),
    _: UserPublic = Depends(user_authenticated),
) -> TournamentsResponse:
    return TournamentsResponse(data=await sql_get_tournaments(season, category_id))


@router.post(
    "/tournaments/validate",
    response_model=ImportValidation,
    response_model_exclude_none=True,
)
async def validate_tournament_file(
    file: UploadFile | None = File(default=None),
    user_public: UserPublic = Depends(user_authenticated),
) -> ImportValidation:
    _require_admin(user_public)
    rows = await _read_upload(file)
    return await validate_import_rows(rows)


@router.post("/tournaments/create-players", response_model=CreatePlayersResult)
async def create_players(
    body: CreatePlayersBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> CreatePlayersResult:
    _require_admin(user_public)
    if len(body.players) < 1:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Players array required")

    async with database.transaction():
        for player in body.players:
            await sql_upsert_player(player)

    logger.info("Created or updated players from import review: count=%s", len(body.players))
    return CreatePlayersResult(
        created=len(body.players), message=f"{len(body.players)} players created successfully"
    )


@router.get(
    "/tournaments/check-exists",
    response_model=TournamentExistence,
    response_model_exclude_none=True,
)
async def check_tournament_exists(
    category_id: CategoryId | None = Query(default=None, alias="categoryId"),
    tournament_number: int | None = Query(default=None, alias="tournamentNumber"),
    season: str | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated),
) -> TournamentExistence:
    if category_id is None or tournament_number is None or not season:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "categoryId, tournamentNumber and season are required"
        )

    existing = await sql_find_existing_tournament(category_id, tournament_number, season)
    return TournamentExistence(exists=existing is not None, tournament=existing)


@router.post(
    "/tournaments/import",
    response_model=TournamentImportResult,
    response_model_exclude_none=True,
)
async def import_tournament(
    file: UploadFile | None = File(default=None),
    category_id: CategoryId | None = Form(default=None, alias="categoryId"),
    tournament_number: int | None = Form(default=None, alias="tournamentNumber"),
    season: str | None = Form(default=None),
    tournament_date: date | None = Form(default=None, alias="tournamentDate"),
    user_public: UserPublic = Depends(user_authenticated),
) -> TournamentImportResult:
    _require_admin(user_public)
    if file is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No file uploaded")
    if category_id is None or tournament_number is None or not season:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Missing required fields")
    if not 1 <= tournament_number <= FINALE_TOURNAMENT_NUMBER:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, "tournamentNumber must be between 1 and 4"
        )
    if not is_valid_season(season):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "season must look like 2024-2025")
    if await sql_get_category(category_id) is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Category not found")

    rows = await _read_upload(file)
    return await import_tournament_results(
        TournamentImportParams(
            category_id=category_id,
            tournament_number=tournament_number,
            season=season,
            tournament_date=tournament_date,
        ),
        rows,
    )


@router.get("/tournaments/{tournament_id}/results", response_model=TournamentResultsResponse)
async def get_tournament_results(
    tournament_id: TournamentId,
    _: UserPublic = Depends(user_authenticated),
) -> TournamentResultsResponse:
    tournament = await sql_get_tournament_with_category(tournament_id)
    if tournament is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")

    return TournamentResultsResponse(
        data=TournamentResults(
            tournament=tournament, results=await sql_get_tournament_results(tournament_id)
        )
    )


@router.get("/tournaments/{tournament_id}/export")
async def export_tournament_results(
    tournament_id: TournamentId,
    _: UserPublic = Depends(user_authenticated),
) -> Response:
    tournament = await sql_get_tournament_with_category(tournament_id)
    if tournament is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")

    content = build_tournament_results_workbook(
        tournament, await sql_get_tournament_results(tournament_id)
    )
    filename = (
        f"resultats_{tournament.game_type}_{tournament.level}_"
        f"T{tournament.tournament_number}_{tournament.season}.xlsx"
    ).replace(" ", "_")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/tournaments/{tournament_id}", response_model=SuccessResponse)
async def update_tournament(
    tournament_id: TournamentId,
    body: TournamentUpdateBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> SuccessResponse:
    _require_admin(user_public)
    if len(body.model_fields_set) < 1:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nothing to update")
    if await sql_get_tournament(tournament_id) is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")

    await sql_update_tournament(tournament_id, body)
    return SuccessResponse()


@router.delete("/tournaments/{tournament_id}", response_model=SuccessResponse)
async def delete_tournament(
    tournament_id: TournamentId,
    user_public: UserPublic = Depends(user_authenticated),
) -> SuccessResponse:
    _require_admin(user_public)
    tournament = await sql_get_tournament(tournament_id)
    if tournament is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Tournament not found")

    async with database.transaction():
        await sql_delete_tournament(tournament_id)

    await recalculate_rankings(tournament.category_id, tournament.season)
    logger.info(
        "Deleted tournament: tournament_id=%s category_id=%s season=%s",
        int(tournament_id),
        int(tournament.category_id),
        tournament.season,
    )
    return SuccessResponse()


@router.post("/tournaments/recalculate-rankings", response_model=RecalculateRankingsResult)
async def post_recalculate_rankings(
    body: RecalculateRankingsBody,
    user_public: UserPublic = Depends(user_authenticated),
) -> RecalculateRankingsResult:
    _require_admin(user_public)
    ranked_players = await recalculate_rankings(body.category_id, body.season)
    return RecalculateRankingsResult(
        ranked_players=ranked_players,
        message=f"Rankings recalculated for {ranked_players} players",
    )


@router.post(
    "/tournaments/recalculate-all-rankings",
    response_model=RecalculateAllResult,
    response_model_exclude_none=True,
)
async def post_recalculate_all_rankings(
    user_public: UserPublic = Depends(user_authenticated),
) -> RecalculateAllResult:
    _require_admin(user_public)
    recalculated, errors = await recalculate_all_rankings()
    return RecalculateAllResult(
        recalculated=recalculated,
        errors=errors if errors else None,
        message=f"Rankings recalculated for {recalculated} category/season pairs",
    )
