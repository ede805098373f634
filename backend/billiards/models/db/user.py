from heliclockter import datetime_utc

from billiards.models.db.account import UserAccountType
from billiards.models.db.shared import BaseModelORM
from billiards.utils.id_types import UserId


class UserBase(BaseModelORM):
    username: str
    email: str | None = None
    created: datetime_utc
    account_type: UserAccountType


class UserInsertable(UserBase):
    password_hash: str


class UserPublic(UserBase):
    id: UserId


class UserInDB(UserBase):
    id: UserId
    password_hash: str
