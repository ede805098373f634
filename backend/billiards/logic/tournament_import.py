from asyncpg import InterfaceError, PostgresError

from billiards.database import database
from billiards.logic.csv_import import extract_result_rows
from billiards.logic.ranking.calculation import recalculate_rankings
from billiards.logic.reconciliation import split_player_name
from billiards.models.db.tournament import TournamentResultToInsert
from billiards.models.tournament_import import (
    ImportRowError,
    TournamentImportParams,
    TournamentImportResult,
)
from billiards.sql.players import sql_create_missing_player
from billiards.sql.tournaments import (
    sql_delete_results_of_tournament,
    sql_insert_tournament_result,
    sql_upsert_tournament,
)
from billiards.utils.logging import logger


async def import_tournament_results(
    params: TournamentImportParams, rows: list[list[str]]
) -> TournamentImportResult:
    """
    Upsert the tournament for (category, number, season) and replace all of its results
    with the parsed rows. The replacement runs in one transaction; each row is inserted
    in its own savepoint so a failing row is reported without losing the others.
    Rankings of the category and season are recalculated afterwards.
    """
    parsed_rows = extract_result_rows(rows)
    errors: list[ImportRowError] = []
    imported = 0

    async with database.transaction():
        tournament_id = await sql_upsert_tournament(
            params.category_id, params.tournament_number, params.season, params.tournament_date
        )

        for row in parsed_rows:
            last_name, first_name = split_player_name(row.player_name)
            await sql_create_missing_player(row.licence, first_name, last_name)

        await sql_delete_results_of_tournament(tournament_id)

        for index, row in enumerate(parsed_rows):
            try:
                async with database.transaction():
                    await sql_insert_tournament_result(
                        TournamentResultToInsert(
                            tournament_id=tournament_id,
                            licence=row.licence,
                            player_name=row.player_name,
                            position=row.position if row.position is not None else index + 1,
                            match_points=row.match_points,
                            moyenne=row.moyenne,
                            serie=row.serie,
                            points=row.points,
                            reprises=row.reprises,
                        )
                    )
                imported += 1
            except (PostgresError, InterfaceError) as exc:
                errors.append(ImportRowError(licence=row.licence, error=str(exc)))

    logger.info(
        "Imported tournament results: tournament_id=%s imported=%s errors=%s",
        int(tournament_id),
        imported,
        len(errors),
    )
    await recalculate_rankings(params.category_id, params.season)

    return TournamentImportResult(
        tournament_id=tournament_id, imported=imported, errors=errors if errors else None
    )
