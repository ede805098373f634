import time
from collections.abc import Iterable

from pydantic import BaseModel

from billiards.config import config
from billiards.database import database
from billiards.models.db.ranking import RankingInputResult, RankingRow
from billiards.models.db.tournament import FINALE_TOURNAMENT_NUMBER
from billiards.models.tournament_import import RecalculationError
from billiards.sql.rankings import sql_get_ranking_input_results, sql_replace_rankings
from billiards.sql.tournaments import sql_get_category_season_pairs
from billiards.utils.id_types import CategoryId
from billiards.utils.logging import logger


class _PlayerTotals(BaseModel):
    licence: str
    total_match_points: int = 0
    total_points: int = 0
    total_reprises: int = 0
    best_serie: int = 0
    points_per_tournament: dict[int, int] = {}

    @property
    def avg_moyenne(self) -> float:
        if self.total_reprises <= 0:
            return 0.0
        return self.total_points / self.total_reprises


def _ranking_sort_key(totals: _PlayerTotals) -> tuple[int, float, int]:
    return totals.total_match_points, totals.avg_moyenne, totals.best_serie


def compute_rankings(results: Iterable[RankingInputResult]) -> list[RankingRow]:
    """
    Aggregate the regular-season results (tournaments 1 to 3) per licence and order them by
    match points, then average, then best serie, all descending. Players tied on all
    three keys keep the order in which they first appear in `results`.
    """
    totals_by_licence: dict[str, _PlayerTotals] = {}

    for result in results:
        if result.tournament_number >= FINALE_TOURNAMENT_NUMBER:
            continue

        licence = result.licence.replace(" ", "")
        totals = totals_by_licence.setdefault(licence, _PlayerTotals(licence=licence))
        totals.total_match_points += result.match_points
        totals.total_points += result.points
        totals.total_reprises += result.reprises
        totals.best_serie = max(totals.best_serie, result.serie)
        totals.points_per_tournament[result.tournament_number] = (
            totals.points_per_tournament.get(result.tournament_number, 0) + result.match_points
        )

    ordered = sorted(totals_by_licence.values(), key=_ranking_sort_key, reverse=True)
    return [
        RankingRow(
            licence=totals.licence,
            total_match_points=totals.total_match_points,
            total_points=totals.total_points,
            total_reprises=totals.total_reprises,
            avg_moyenne=totals.avg_moyenne,
            best_serie=totals.best_serie,
            rank_position=index + 1,
            tournament_1_points=totals.points_per_tournament.get(1, 0),
            tournament_2_points=totals.points_per_tournament.get(2, 0),
            tournament_3_points=totals.points_per_tournament.get(3, 0),
        )
        for index, totals in enumerate(ordered)
    ]


async def recalculate_rankings(category_id: CategoryId, season: str) -> int:
    started_at = time.monotonic()

    results = await sql_get_ranking_input_results(category_id, season)
    ranking_rows = compute_rankings(results)
    async with database.transaction():
        await sql_replace_rankings(category_id, season, ranking_rows)

    duration_ms = int((time.monotonic() - started_at) * 1000)
    if duration_ms >= config.recalc_warn_ms:
        logger.warning(
            "Ranking recalculation was slow: category_id=%s season=%s duration_ms=%s",
            int(category_id),
            season,
            duration_ms,
        )
    return len(ranking_rows)


async def recalculate_all_rankings() -> tuple[int, list[RecalculationError]]:
    recalculated = 0
    errors: list[RecalculationError] = []

    for category_id, season in await sql_get_category_season_pairs():
        try:
            await recalculate_rankings(category_id, season)
            recalculated += 1
        except Exception as exc:
            logger.exception(
                "Ranking recalculation failed: category_id=%s season=%s", int(category_id), season
            )
            errors.append(
                RecalculationError(category_id=category_id, season=season, error=str(exc))
            )

    return recalculated, errors
