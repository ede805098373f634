from heliclockter import datetime_utc

from billiards.models.db.shared import BaseModelORM
from billiards.utils.id_types import CategoryId, RankingId


class RankingInputResult(BaseModelORM):
    licence: str
    tournament_number: int
    match_points: int = 0
    points: int = 0
    reprises: int = 0
    serie: int = 0


class RankingRow(BaseModelORM):
    licence: str
    total_match_points: int
    total_points: int
    total_reprises: int
    avg_moyenne: float
    best_serie: int
    rank_position: int
    tournament_1_points: int = 0
    tournament_2_points: int = 0
    tournament_3_points: int = 0


class Ranking(RankingRow):
    id: RankingId
    category_id: CategoryId
    season: str
    updated: datetime_utc


class RankingWithPlayer(Ranking):
    first_name: str | None = None
    last_name: str | None = None
    club: str | None = None
    email: str | None = None
    qualified: bool = False
