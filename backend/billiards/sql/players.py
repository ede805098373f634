from billiards.database import database
from billiards.models.db.player import UNKNOWN_CLUB, Player, PlayerToCreate
from billiards.utils.types import dict_without_none


async def sql_player_exists(licence: str, full_name: str) -> bool:
    query = """
        SELECT licence
        FROM players
        WHERE REPLACE(licence, ' ', '') = :licence
           OR UPPER(first_name || ' ' || last_name) = UPPER(:full_name)
           OR UPPER(last_name || ' ' || first_name) = UPPER(:full_name)
        LIMIT 1
        """
    result = await database.fetch_one(
        query=query, values={"licence": licence, "full_name": full_name}
    )
    return result is not None


async def sql_get_players(search: str | None = None, club: str | None = None) -> list[Player]:
    query = """
        SELECT *
        FROM players
        WHERE TRUE
        """
    params = dict_without_none({"club": club, "search": f"%{search}%" if search else None})

    if "club" in params:
        query += "AND club = :club "

    if "search" in params:
        query += (
            "AND (licence ILIKE :search OR first_name ILIKE :search OR last_name ILIKE :search) "
        )

    query += "ORDER BY last_name, first_name"
    result = await database.fetch_all(query=query, values=params)
    return [Player.model_validate(dict(x._mapping)) for x in result]


async def sql_upsert_player(player: PlayerToCreate) -> None:
    """Operator-confirmed players: an existing licence only gets its club refreshed."""
    query = """
        INSERT INTO players (licence, first_name, last_name, club, is_active)
        VALUES (:licence, :first_name, :last_name, :club, TRUE)
        ON CONFLICT (licence) DO UPDATE
        SET club = EXCLUDED.club
        """
    await database.execute(
        query=query,
        values={
            "licence": player.licence.replace(" ", ""),
            "first_name": player.first_name,
            "last_name": player.last_name,
            "club": player.club,
        },
    )


async def sql_create_missing_player(licence: str, first_name: str, last_name: str) -> None:
    query = """
        INSERT INTO players (licence, first_name, last_name, club, is_active)
        SELECT :licence, :first_name, :last_name, :club, TRUE
        WHERE NOT EXISTS (
            SELECT 1 FROM players WHERE REPLACE(licence, ' ', '') = :licence
        )
        ON CONFLICT (licence) DO NOTHING
        """
    await database.execute(
        query=query,
        values={
            "licence": licence.replace(" ", ""),
            "first_name": first_name,
            "last_name": last_name,
            "club": UNKNOWN_CLUB,
        },
    )
