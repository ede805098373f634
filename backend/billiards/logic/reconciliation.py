from billiards.logic.csv_import import extract_result_rows
from billiards.models.tournament_import import ImportValidation, UnknownPlayer
from billiards.sql.players import sql_player_exists


def split_player_name(full_name: str) -> tuple[str, str]:
    """
    Exports list players as "LASTNAME First Names": the first token is taken as the last
    name and the remainder as the first name. Compound last names are split wrongly,
    which is why unknown players are confirmed by an operator before creation.
    """
    parts = full_name.split()
    if len(parts) == 0:
        return "", ""
    return parts[0], " ".join(parts[1:])


def collect_player_candidates(rows: list[list[str]]) -> list[UnknownPlayer]:
    candidates: list[UnknownPlayer] = []
    seen_licences: set[str] = set()

    for result in extract_result_rows(rows):
        if result.licence in seen_licences:
            continue
        seen_licences.add(result.licence)

        last_name, first_name = split_player_name(result.player_name)
        candidates.append(
            UnknownPlayer(
                licence=result.licence,
                first_name=first_name,
                last_name=last_name,
                full_name=result.player_name,
            )
        )
    return candidates


async def find_unknown_players(rows: list[list[str]]) -> list[UnknownPlayer]:
    return [
        candidate
        for candidate in collect_player_candidates(rows)
        if not await sql_player_exists(candidate.licence, candidate.full_name)
    ]


async def validate_import_rows(rows: list[list[str]]) -> ImportValidation:
    unknown_players = await find_unknown_players(rows)
    if len(unknown_players) > 0:
        return ImportValidation(status="validation_required", unknown_players=unknown_players)
    return ImportValidation(status="ready", message="All players exist, ready to import")
