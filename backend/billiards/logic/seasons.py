import re
from datetime import date

DEFAULT_SEASON_CUTOFF_MONTH = 8

_SEASON_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")


def season_for_date(day: date, cutoff_month: int = DEFAULT_SEASON_CUTOFF_MONTH) -> str:
    """
    Seasons span two calendar years, e.g. "2024-2025". `cutoff_month` is 0-indexed
    (8 is September): dates from that month onwards belong to the season starting this year.
    """
    if day.month - 1 >= cutoff_month:
        return f"{day.year}-{day.year + 1}"
    return f"{day.year - 1}-{day.year}"


def current_season(cutoff_month: int = DEFAULT_SEASON_CUTOFF_MONTH) -> str:
    return season_for_date(date.today(), cutoff_month)


def is_valid_season(season: str) -> bool:
    match = _SEASON_PATTERN.match(season)
    return match is not None and int(match.group(2)) == int(match.group(1)) + 1
