from fastapi import APIRouter, Depends, Query

from billiards.config import config
from billiards.models.db.user import UserPublic
from billiards.routes.auth import user_authenticated
from billiards.routes.models import PlayersResponse
from billiards.sql.players import sql_get_players

router = APIRouter(prefix=config.api_prefix)


@router.get("/players", response_model=PlayersResponse)
async def get_players(
    search: str | None = Query(default=None),
    club: str | None = Query(default=None),
    _: UserPublic = Depends(user_authenticated),
) -> PlayersResponse:
    return PlayersResponse(data=await sql_get_players(search=search, club=club))
