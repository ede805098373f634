from datetime import date
from typing import Any

from billiards.database import database
from billiards.models.db.tournament import (
    Tournament,
    TournamentResultToInsert,
    TournamentResultWithPlayer,
    TournamentUpdateBody,
    TournamentWithCategory,
)
from billiards.models.tournament_import import ExistingTournament
from billiards.schema import tournament_results
from billiards.utils.id_types import CategoryId, TournamentId

_TOURNAMENT_WITH_CATEGORY = """
    SELECT
        t.*,
        c.display_name AS category_name,
        c.game_type,
        c.level,
        (
            SELECT COUNT(*)
            FROM tournament_results tr
            WHERE tr.tournament_id = t.id
        ) AS player_count
    FROM tournaments t
    JOIN categories c ON c.id = t.category_id
    """


async def sql_get_tournament(tournament_id: TournamentId) -> Tournament | None:
    query = """
        SELECT *
        FROM tournaments
        WHERE id = :tournament_id
        """
    result = await database.fetch_one(query=query, values={"tournament_id": tournament_id})
    return Tournament.model_validate(dict(result._mapping)) if result is not None else None


async def sql_get_tournament_with_category(
    tournament_id: TournamentId,
) -> TournamentWithCategory | None:
    query = _TOURNAMENT_WITH_CATEGORY + "WHERE t.id = :tournament_id"
    result = await database.fetch_one(query=query, values={"tournament_id": tournament_id})
    return (
        TournamentWithCategory.model_validate(dict(result._mapping))
        if result is not None
        else None
    )


async def sql_get_tournaments(
    season: str | None = None, category_id: CategoryId | None = None
) -> list[TournamentWithCategory]:
    query = _TOURNAMENT_WITH_CATEGORY + "WHERE TRUE "
    params: dict[str, Any] = {}

    if season is not None:
        query += "AND t.season = :season "
        params["season"] = season

    if category_id is not None:
        query += "AND t.category_id = :category_id "
        params["category_id"] = category_id

    query += "ORDER BY t.tournament_date DESC NULLS LAST, c.display_name, t.tournament_number"
    result = await database.fetch_all(query=query, values=params)
    return [TournamentWithCategory.model_validate(dict(x._mapping)) for x in result]


async def sql_find_existing_tournament(
    category_id: CategoryId, tournament_number: int, season: str
) -> ExistingTournament | None:
    query = """
        SELECT
            t.id,
            c.display_name AS category_name,
            t.tournament_number,
            t.season,
            t.tournament_date,
            t.import_date,
            COUNT(tr.id) AS player_count
        FROM tournaments t
        JOIN categories c ON c.id = t.category_id
        LEFT JOIN tournament_results tr ON tr.tournament_id = t.id
        WHERE t.category_id = :category_id
          AND t.tournament_number = :tournament_number
          AND t.season = :season
        GROUP BY t.id, c.display_name
        """
    result = await database.fetch_one(
        query=query,
        values={
            "category_id": category_id,
            "tournament_number": tournament_number,
            "season": season,
        },
    )
    return ExistingTournament.model_validate(dict(result._mapping)) if result is not None else None


async def sql_upsert_tournament(
    category_id: CategoryId, tournament_number: int, season: str, tournament_date: date | None
) -> TournamentId:
    query = """
        INSERT INTO tournaments (category_id, tournament_number, season, tournament_date)
        VALUES (:category_id, :tournament_number, :season, :tournament_date)
        ON CONFLICT (category_id, tournament_number, season) DO UPDATE
        SET
            tournament_date = EXCLUDED.tournament_date,
            import_date = NOW()
        RETURNING id
        """
    new_id = await database.fetch_val(
        query=query,
        values={
            "category_id": category_id,
            "tournament_number": tournament_number,
            "season": season,
            "tournament_date": tournament_date,
        },
    )
    return TournamentId(new_id)


async def sql_update_tournament(tournament_id: TournamentId, body: TournamentUpdateBody) -> None:
    assignments = ", ".join(f"{column} = :{column}" for column in body.model_fields_set)
    query = f"""
        UPDATE tournaments
        SET {assignments}
        WHERE id = :tournament_id
        """
    await database.execute(
        query=query,
        values={"tournament_id": tournament_id, **body.model_dump(include=body.model_fields_set)},
    )


async def sql_set_results_email_sent(tournament_id: TournamentId) -> None:
    query = """
        UPDATE tournaments
        SET results_email_sent = TRUE, results_email_sent_at = NOW()
        WHERE id = :tournament_id
        """
    await database.execute(query=query, values={"tournament_id": tournament_id})


async def sql_delete_tournament(tournament_id: TournamentId) -> None:
    await sql_delete_results_of_tournament(tournament_id)
    query = """
        DELETE FROM tournaments
        WHERE id = :tournament_id
        """
    await database.execute(query=query, values={"tournament_id": tournament_id})


async def sql_delete_results_of_tournament(tournament_id: TournamentId) -> None:
    query = "DELETE FROM tournament_results WHERE tournament_id = :tournament_id"
    await database.execute(query=query, values={"tournament_id": tournament_id})


async def sql_insert_tournament_result(result: TournamentResultToInsert) -> None:
    await database.execute(query=tournament_results.insert(), values=result.model_dump())


async def sql_get_tournament_results(
    tournament_id: TournamentId,
) -> list[TournamentResultWithPlayer]:
    query = """
        SELECT tr.*, p.first_name, p.last_name, p.club, p.email
        FROM tournament_results tr
        LEFT JOIN players p ON REPLACE(p.licence, ' ', '') = REPLACE(tr.licence, ' ', '')
        WHERE tr.tournament_id = :tournament_id
        ORDER BY tr.position, tr.match_points DESC, tr.moyenne DESC
        """
    result = await database.fetch_all(query=query, values={"tournament_id": tournament_id})
    return [TournamentResultWithPlayer.model_validate(dict(x._mapping)) for x in result]


async def sql_get_category_season_pairs() -> list[tuple[CategoryId, str]]:
    query = """
        SELECT DISTINCT category_id, season
        FROM tournaments
        ORDER BY season DESC, category_id
        """
    result = await database.fetch_all(query=query)
    return [(CategoryId(x._mapping["category_id"]), str(x._mapping["season"])) for x in result]
