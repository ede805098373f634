from billiards.database import database
from billiards.models.db.ranking import RankingInputResult, RankingRow, RankingWithPlayer
from billiards.utils.id_types import CategoryId


async def sql_get_ranking_input_results(
    category_id: CategoryId, season: str
) -> list[RankingInputResult]:
    query = """
        SELECT
            REPLACE(tr.licence, ' ', '') AS licence,
            t.tournament_number,
            tr.match_points,
            tr.points,
            tr.reprises,
            tr.serie
        FROM tournament_results tr
        JOIN tournaments t ON t.id = tr.tournament_id
        WHERE t.category_id = :category_id
          AND t.season = :season
        ORDER BY t.tournament_number, tr.position, tr.id
        """
    result = await database.fetch_all(
        query=query, values={"category_id": category_id, "season": season}
    )
    return [RankingInputResult.model_validate(dict(x._mapping)) for x in result]


async def sql_replace_rankings(
    category_id: CategoryId, season: str, ranking_rows: list[RankingRow]
) -> None:
    """Must run inside a transaction: readers never see a partially rebuilt table."""
    await database.execute(
        "DELETE FROM rankings WHERE category_id = :category_id AND season = :season",
        values={"category_id": category_id, "season": season},
    )
    if len(ranking_rows) < 1:
        return

    await database.execute_many(
        """
        INSERT INTO rankings (
            category_id,
            season,
            licence,
            total_match_points,
            total_points,
            total_reprises,
            avg_moyenne,
            best_serie,
            rank_position,
            tournament_1_points,
            tournament_2_points,
            tournament_3_points,
            updated
        )
        VALUES (
            :category_id,
            :season,
            :licence,
            :total_match_points,
            :total_points,
            :total_reprises,
            :avg_moyenne,
            :best_serie,
            :rank_position,
            :tournament_1_points,
            :tournament_2_points,
            :tournament_3_points,
            NOW()
        )
        """,
        values=[
            {"category_id": category_id, "season": season, **row.model_dump()}
            for row in ranking_rows
        ],
    )


async def sql_get_rankings(category_id: CategoryId, season: str) -> list[RankingWithPlayer]:
    query = """
        SELECT r.*, p.first_name, p.last_name, p.club, p.email
        FROM rankings r
        LEFT JOIN players p ON REPLACE(p.licence, ' ', '') = r.licence
        WHERE r.category_id = :category_id
          AND r.season = :season
        ORDER BY r.rank_position
        """
    result = await database.fetch_all(
        query=query, values={"category_id": category_id, "season": season}
    )
    return [RankingWithPlayer.model_validate(dict(x._mapping)) for x in result]


async def sql_get_seasons() -> list[str]:
    query = """
        SELECT DISTINCT season
        FROM tournaments
        ORDER BY season DESC
        """
    result = await database.fetch_all(query=query)
    return [str(x._mapping["season"]) for x in result]
