from datetime import date
from typing import Literal

from heliclockter import datetime_utc
from pydantic import BaseModel

from billiards.models.db.player import PlayerToCreate
from billiards.models.db.shared import BaseModelORM
from billiards.models.db.tournament import TournamentNumber
from billiards.utils.id_types import CategoryId, TournamentId


class ParsedResultRow(BaseModel):
    licence: str
    player_name: str
    position: int | None
    match_points: int
    moyenne: float
    reprises: int
    serie: int
    points: int


class UnknownPlayer(BaseModelORM):
    licence: str
    first_name: str
    last_name: str
    full_name: str


class ImportValidation(BaseModelORM):
    status: Literal["validation_required", "ready"]
    unknown_players: list[UnknownPlayer] | None = None
    message: str | None = None


class CreatePlayersBody(BaseModelORM):
    players: list[PlayerToCreate]


class CreatePlayersResult(BaseModelORM):
    created: int
    message: str


class ExistingTournament(BaseModelORM):
    id: TournamentId
    category_name: str
    tournament_number: int
    season: str
    tournament_date: date | None
    import_date: datetime_utc
    player_count: int


class TournamentExistence(BaseModelORM):
    exists: bool
    tournament: ExistingTournament | None = None


class TournamentImportParams(BaseModelORM):
    category_id: CategoryId
    tournament_number: TournamentNumber
    season: str
    tournament_date: date | None = None


class ImportRowError(BaseModelORM):
    licence: str
    error: str


class TournamentImportResult(BaseModelORM):
    tournament_id: TournamentId
    imported: int
    errors: list[ImportRowError] | None = None


class RecalculateRankingsBody(BaseModelORM):
    category_id: CategoryId
    season: str


class RecalculateRankingsResult(BaseModelORM):
    ranked_players: int
    message: str


class RecalculationError(BaseModelORM):
    category_id: CategoryId
    season: str
    error: str


class RecalculateAllResult(BaseModelORM):
    recalculated: int
    errors: list[RecalculationError] | None = None
    message: str
