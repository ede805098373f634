import io
from collections.abc import Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from billiards.models.db.ranking import RankingWithPlayer
from billiards.models.db.tournament import TournamentResultWithPlayer, TournamentWithCategory

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_HEADER_FILL = PatternFill(start_color="1F4788", end_color="1F4788", fill_type="solid")
_QUALIFIED_FILL = PatternFill(start_color="E8F5E9", end_color="E8F5E9", fill_type="solid")


def _write_table(
    ws: Worksheet, title: str, headers: list[str], rows: Sequence[Sequence[Any]]
) -> None:
    ws.append([title])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    ws.append(headers)

    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center")

    for row in rows:
        ws.append(list(row))

    for col_idx in range(1, len(headers) + 1):
        max_len = max(
            len(str(ws.cell(row=r, column=col_idx).value or ""))
            for r in range(header_row, ws.max_row + 1)
        )
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(max_len + 2, 8), 40)


def _to_bytes(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def build_tournament_results_workbook(
    tournament: TournamentWithCategory, results: list[TournamentResultWithPlayer]
) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Résultats"

    date_label = (
        tournament.tournament_date.strftime("%d/%m/%Y") if tournament.tournament_date else ""
    )
    _write_table(
        ws,
        f"{tournament.category_name} - Tournoi {tournament.tournament_number} - "
        f"{tournament.season} {date_label}".strip(),
        [
            "Place",
            "Licence",
            "Joueur",
            "Club",
            "Pts match",
            "Moyenne",
            "Série",
            "Points",
            "Reprises",
        ],
        [
            (
                result.position,
                result.licence,
                result.player_name,
                result.club or "",
                result.match_points,
                round(result.moyenne, 3),
                result.serie,
                result.points,
                result.reprises,
            )
            for result in results
        ],
    )
    return _to_bytes(wb)


def build_rankings_workbook(
    category_name: str, season: str, rankings: list[RankingWithPlayer]
) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Classement"

    _write_table(
        ws,
        f"Classement {category_name} - Saison {season}",
        [
            "Rang",
            "Licence",
            "Joueur",
            "Club",
            "T1",
            "T2",
            "T3",
            "Pts match",
            "Points",
            "Reprises",
            "Moyenne",
            "Meilleure série",
        ],
        [
            (
                ranking.rank_position,
                ranking.licence,
                f"{ranking.last_name or ''} {ranking.first_name or ''}".strip(),
                ranking.club or "",
                ranking.tournament_1_points,
                ranking.tournament_2_points,
                ranking.tournament_3_points,
                ranking.total_match_points,
                ranking.total_points,
                ranking.total_reprises,
                round(ranking.avg_moyenne, 3),
                ranking.best_serie,
            )
            for ranking in rankings
        ],
    )

    # Data starts at row 4: title, blank row, then the header row.
    for offset, ranking in enumerate(rankings):
        if ranking.qualified:
            for cell in ws[4 + offset]:
                cell.fill = _QUALIFIED_FILL
    return _to_bytes(wb)
