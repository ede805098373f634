from typing import Annotated

from heliclockter import datetime_utc
from pydantic import StringConstraints

from billiards.models.db.shared import BaseModelORM

UNKNOWN_CLUB = "Club inconnu"


class PlayerBase(BaseModelORM):
    licence: str
    first_name: str
    last_name: str
    club: str = UNKNOWN_CLUB


class Player(PlayerBase):
    email: str | None = None
    telephone: str | None = None
    is_active: bool = True
    created: datetime_utc


class PlayerToCreate(PlayerBase):
    licence: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
