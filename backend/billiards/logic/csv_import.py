import csv
import io
import re

from billiards.models.tournament_import import ParsedResultRow

HEADER_MARKERS = ("Classt", "Licence")

# Fixed column positions of the federation results export.
COLUMN_POSITION = 0
COLUMN_LICENCE = 1
COLUMN_NAME = 2
COLUMN_MATCH_POINTS = 4
COLUMN_MOYENNE = 6
COLUMN_REPRISES = 8
COLUMN_SERIE = 9
COLUMN_POINTS = 12

_INT_PREFIX = re.compile(r"^[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def decode_upload(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Older exports are saved from spreadsheet tools in Windows-1252.
        return raw.decode("cp1252", errors="replace")


def normalize_results_csv(text: str) -> str:
    """
    Undo the export's extra quoting: a whole line may be wrapped in quotes and every
    inner quote doubled. Each line is stripped, loses one outer quote pair and has
    `""` collapsed to `"`.
    """
    fixed_lines = []
    for line in text.splitlines():
        line = line.strip()
        if len(line) >= 2 and line.startswith('"') and line.endswith('"'):
            line = line[1:-1]
        fixed_lines.append(line.replace('""', '"'))
    return "\n".join(fixed_lines)


def parse_results_csv(raw: bytes) -> list[list[str]]:
    text = normalize_results_csv(decode_upload(raw))
    reader = csv.reader(io.StringIO(text), delimiter=";", quotechar='"', doublequote=True)
    return [row for row in reader if any(cell.strip() != "" for cell in row)]


def is_header_row(row: list[str]) -> bool:
    first = row[0] if len(row) > 0 else ""
    return any(marker in first for marker in HEADER_MARKERS)


def normalize_licence(value: str) -> str:
    return value.replace('"', "").replace(" ", "").strip()


def _cell(row: list[str], index: int) -> str:
    if index >= len(row):
        return ""
    return row[index].replace('"', "").strip()


def parse_int(value: str) -> int:
    match = _INT_PREFIX.match(value.strip())
    return int(match.group(0)) if match is not None else 0


def parse_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value.strip().replace(",", ".", 1))
    return float(match.group(0)) if match is not None else 0.0


def extract_result_row(row: list[str]) -> ParsedResultRow | None:
    licence = normalize_licence(_cell(row, COLUMN_LICENCE))
    player_name = _cell(row, COLUMN_NAME)
    if licence == "" or player_name == "":
        return None

    position_cell = _cell(row, COLUMN_POSITION)
    return ParsedResultRow(
        licence=licence,
        player_name=player_name,
        position=parse_int(position_cell) if _INT_PREFIX.match(position_cell) else None,
        match_points=parse_int(_cell(row, COLUMN_MATCH_POINTS)),
        moyenne=parse_float(_cell(row, COLUMN_MOYENNE)),
        reprises=parse_int(_cell(row, COLUMN_REPRISES)),
        serie=parse_int(_cell(row, COLUMN_SERIE)),
        points=parse_int(_cell(row, COLUMN_POINTS)),
    )


def extract_result_rows(rows: list[list[str]]) -> list[ParsedResultRow]:
    """Data rows in file order; header rows and rows without licence or name are dropped."""
    parsed = []
    for row in rows:
        if is_header_row(row):
            continue
        result = extract_result_row(row)
        if result is not None:
            parsed.append(result)
    return parsed
