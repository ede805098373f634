#!/usr/bin/env python3
import argparse
import asyncio
import random
from datetime import date

from heliclockter import datetime_utc

from billiards.database import database
from billiards.logic.seasons import current_season, is_valid_season
from billiards.logic.tournament_import import import_tournament_results
from billiards.models.db.account import UserAccountType
from billiards.models.db.player import PlayerToCreate
from billiards.models.db.user import UserInsertable
from billiards.models.tournament_import import TournamentImportParams
from billiards.sql.categories import sql_create_category
from billiards.sql.players import sql_upsert_player
from billiards.sql.users import create_user, get_user_by_username
from billiards.utils.id_types import CategoryId
from billiards.utils.security import hash_password

CATEGORIES = [
    ("LIBRE", "N3", "Libre N3"),
    ("LIBRE", "R1", "Libre R1"),
    ("LIBRE", "R2", "Libre R2"),
    ("CADRE", "R1", "Cadre R1"),
    ("BANDE", "R1", "1 Bande R1"),
    ("3BANDES", "R1", "3 Bandes R1"),
]

CLUBS = ["Billard Club Courbevoie", "Académie de Billard Châtillon", "Billard Club de Vincennes"]

LAST_NAMES = [
    "MARTIN", "BERNARD", "DUBOIS", "THOMAS", "ROBERT", "RICHARD", "PETIT", "DURAND",
    "LEROY", "MOREAU", "SIMON", "LAURENT", "LEFEBVRE", "MICHEL",
]
FIRST_NAMES = [
    "Jean", "Pierre", "Michel", "Alain", "Philippe", "Patrick", "Nicolas", "Christophe",
    "Daniel", "Bernard", "Eric", "Frédéric", "Gérard", "Laurent",
]


def build_demo_players(count: int) -> list[PlayerToCreate]:
    return [
        PlayerToCreate(
            licence=f"{100000 + index:07d}",
            first_name=FIRST_NAMES[index % len(FIRST_NAMES)],
            last_name=LAST_NAMES[index % len(LAST_NAMES)],
            club=CLUBS[index % len(CLUBS)],
        )
        for index in range(count)
    ]


def build_result_rows(players: list[PlayerToCreate], rng: random.Random) -> list[list[str]]:
    """Rows laid out like the federation export, header included."""
    scored = []
    for player in players:
        reprises = rng.randint(80, 160)
        points = rng.randint(reprises // 2, reprises * 3)
        scored.append((rng.randint(0, 12), points, reprises, rng.randint(4, 40), player))
    scored.sort(key=lambda item: (item[0], item[1] / item[2]), reverse=True)

    rows = [
        [
            "Classt", "Licence", "Joueur", "", "Pts match", "", "Moyenne",
            "", "Reprises", "Série", "", "", "Points",
        ]
    ]
    for position, (match_points, points, reprises, serie, player) in enumerate(scored, start=1):
        moyenne = f"{points / reprises:.3f}".replace(".", ",")
        rows.append(
            [
                str(position),
                player.licence,
                f"{player.last_name} {player.first_name}",
                "",
                str(match_points),
                "",
                moyenne,
                "",
                str(reprises),
                str(serie),
                "",
                "",
                str(points),
            ]
        )
    return rows


async def ensure_admin(username: str, password: str) -> None:
    if await get_user_by_username(username) is not None:
        print(f"Admin user already exists: {username}")
        return

    await create_user(
        UserInsertable(
            username=username,
            email=None,
            created=datetime_utc.now(),
            account_type=UserAccountType.ADMIN,
            password_hash=hash_password(password),
        )
    )
    print(f"Created admin user: {username}")


async def seed(
    admin_username: str, admin_password: str, season: str, player_count: int, seed_value: int
) -> None:
    rng = random.Random(seed_value)
    await ensure_admin(admin_username, admin_password)

    category_ids: list[CategoryId] = []
    for game_type, level, display_name in CATEGORIES:
        category_ids.append(await sql_create_category(game_type, level, display_name))
    print(f"Categories ready: {len(category_ids)}")

    players = build_demo_players(player_count)
    async with database.transaction():
        for player in players:
            await sql_upsert_player(player)
    print(f"Players ready: {len(players)}")

    demo_category_id = category_ids[1]
    start_year = int(season.split("-")[0])
    for tournament_number, tournament_date in enumerate(
        (date(start_year, 10, 12), date(start_year, 12, 7), date(start_year + 1, 2, 15)), start=1
    ):
        # Not everybody plays every qualifying tournament.
        participants = rng.sample(players, k=max(2, len(players) - rng.randint(0, 3)))
        result = await import_tournament_results(
            TournamentImportParams(
                category_id=demo_category_id,
                tournament_number=tournament_number,
                season=season,
                tournament_date=tournament_date,
            ),
            build_result_rows(participants, rng),
        )
        print(
            f"Imported T{tournament_number} ({season}): "
            f"tournament_id={int(result.tournament_id)} imported={result.imported}"
        )


async def async_main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Seed demo data: categories, an admin account, players and three qualifying "
            "tournaments with recalculated rankings."
        )
    )
    parser.add_argument("--admin-username", type=str, default="admin")
    parser.add_argument("--admin-password", type=str, default="admin-pass-123")
    parser.add_argument(
        "--season",
        type=str,
        default=None,
        help="Season such as 2024-2025. Defaults to the current season.",
    )
    parser.add_argument("--players", type=int, default=12)
    parser.add_argument("--random-seed", type=int, default=42)
    args = parser.parse_args()

    if args.players < 2:
        raise ValueError("--players must be at least 2")
    if args.season is not None and not is_valid_season(args.season):
        raise ValueError("--season must look like 2024-2025")

    season = args.season or current_season()
    await database.connect()
    try:
        await seed(
            admin_username=str(args.admin_username),
            admin_password=str(args.admin_password),
            season=season,
            player_count=int(args.players),
            seed_value=int(args.random_seed),
        )
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(async_main())
