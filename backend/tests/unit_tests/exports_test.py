import io

from heliclockter import datetime_utc
from openpyxl import load_workbook

from billiards.logic.exports import build_rankings_workbook
from billiards.models.db.ranking import RankingWithPlayer
from billiards.utils.id_types import CategoryId, RankingId


def _ranking(rank_position: int, qualified: bool) -> RankingWithPlayer:
    return RankingWithPlayer(
        id=RankingId(rank_position),
        category_id=CategoryId(1),
        season="2024-2025",
        updated=datetime_utc.now(),
        licence=f"000000{rank_position}",
        total_match_points=30 - rank_position,
        total_points=120,
        total_reprises=100,
        avg_moyenne=1.2,
        best_serie=9,
        rank_position=rank_position,
        last_name="MARTIN",
        first_name="Jean",
        club="BC Courbevoie",
        qualified=qualified,
    )


def test_build_rankings_workbook_layout() -> None:
    content = build_rankings_workbook(
        "Libre R1", "2024-2025", [_ranking(1, qualified=True), _ranking(2, qualified=False)]
    )

    ws = load_workbook(io.BytesIO(content)).active

    assert ws["A1"].value == "Classement Libre R1 - Saison 2024-2025"
    assert ws["A3"].value == "Rang"
    assert ws["A4"].value == 1
    assert ws["C4"].value == "MARTIN Jean"
    assert ws["H4"].value == 29
    assert ws["A4"].fill.start_color.rgb.endswith("E8F5E9")
    assert not ws["A5"].fill.start_color.rgb.endswith("E8F5E9")
