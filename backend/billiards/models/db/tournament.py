from datetime import date
from typing import Annotated

from heliclockter import datetime_utc
from pydantic import Field

from billiards.models.db.shared import BaseModelORM
from billiards.utils.id_types import CategoryId, TournamentId, TournamentResultId

FINALE_TOURNAMENT_NUMBER = 4

TournamentNumber = Annotated[int, Field(ge=1, le=FINALE_TOURNAMENT_NUMBER)]


class TournamentBase(BaseModelORM):
    category_id: CategoryId
    tournament_number: TournamentNumber
    season: str
    tournament_date: date | None = None
    location: str | None = None


class Tournament(TournamentBase):
    id: TournamentId
    import_date: datetime_utc
    results_email_sent: bool = False
    results_email_sent_at: datetime_utc | None = None


class TournamentWithCategory(Tournament):
    category_name: str
    game_type: str
    level: str
    player_count: int = 0


class TournamentUpdateBody(BaseModelORM):
    location: str | None = None
    tournament_date: date | None = None


class TournamentResultToInsert(BaseModelORM):
    tournament_id: TournamentId
    licence: str
    player_name: str
    position: int
    match_points: int = 0
    moyenne: float = 0.0
    serie: int = 0
    points: int = 0
    reprises: int = 0


class TournamentResult(TournamentResultToInsert):
    id: TournamentResultId


class TournamentResultWithPlayer(TournamentResult):
    first_name: str | None = None
    last_name: str | None = None
    club: str | None = None
    email: str | None = None
