from collections.abc import Sequence
from typing import Protocol, TypeVar

from pydantic import BaseModel

DEFAULT_QUALIFICATION_THRESHOLD = 9
DEFAULT_QUALIFIED_SMALL = 4
DEFAULT_QUALIFIED_LARGE = 6


class QualificationSettings(BaseModel):
    threshold: int = DEFAULT_QUALIFICATION_THRESHOLD
    small: int = DEFAULT_QUALIFIED_SMALL
    large: int = DEFAULT_QUALIFIED_LARGE


class _Ranked(Protocol):
    @property
    def rank_position(self) -> int: ...


RankedT = TypeVar("RankedT", bound=_Ranked)


def get_qualified_count(ranked_players: int, settings: QualificationSettings) -> int:
    """Fields smaller than `threshold` send `small` players to the finale, others `large`."""
    if ranked_players < settings.threshold:
        return settings.small
    return settings.large


def is_qualified(rank_position: int, qualified_count: int) -> bool:
    return rank_position <= qualified_count


def select_finalists(rankings: Sequence[RankedT], settings: QualificationSettings) -> list[RankedT]:
    qualified_count = get_qualified_count(len(rankings), settings)
    return [
        ranking for ranking in rankings if is_qualified(ranking.rank_position, qualified_count)
    ]
