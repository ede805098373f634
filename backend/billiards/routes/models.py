from typing import Generic, TypeVar

from pydantic import BaseModel

from billiards.logic.emails.campaigns import SendReport
from billiards.logic.ranking.qualification import QualificationSettings
from billiards.models.db.category import Category
from billiards.models.db.email_campaign import EmailCampaign
from billiards.models.db.player import Player
from billiards.models.db.ranking import RankingWithPlayer
from billiards.models.db.shared import BaseModelORM
from billiards.models.db.tournament import TournamentResultWithPlayer, TournamentWithCategory


class SuccessResponse(BaseModel):
    success: bool = True


DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    data: DataT


class CategoriesResponse(DataResponse[list[Category]]):
    pass


class PlayersResponse(DataResponse[list[Player]]):
    pass


class TournamentsResponse(DataResponse[list[TournamentWithCategory]]):
    pass


class TournamentResults(BaseModelORM):
    tournament: TournamentWithCategory
    results: list[TournamentResultWithPlayer]


class TournamentResultsResponse(DataResponse[TournamentResults]):
    pass


class RankingsView(BaseModelORM):
    category: Category
    season: str
    qualified_count: int
    rankings: list[RankingWithPlayer]


class RankingsResponse(DataResponse[RankingsView]):
    pass


class SeasonsView(BaseModelORM):
    current_season: str
    seasons: list[str]


class SeasonsResponse(DataResponse[SeasonsView]):
    pass


class SettingsResponse(DataResponse[dict[str, str]]):
    pass


class QualificationSettingsResponse(DataResponse[QualificationSettings]):
    pass


class TournamentEmailPreview(BaseModelORM):
    tournament: TournamentWithCategory
    results: list[TournamentResultWithPlayer]
    rankings: list[RankingWithPlayer]
    email_count: int
    qualified_count: int


class TournamentEmailPreviewResponse(DataResponse[TournamentEmailPreview]):
    pass


class FinalistsView(BaseModelORM):
    category: Category
    season: str
    total_players: int
    qualified_count: int
    finalists: list[RankingWithPlayer]
    email_count: int


class FinalistsResponse(DataResponse[FinalistsView]):
    pass


class EmailSendResult(BaseModelORM):
    success: bool = True
    message: str
    results: SendReport
    test_mode: bool


class EmailCampaignsResponse(DataResponse[list[EmailCampaign]]):
    pass
