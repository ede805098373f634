from billiards.database import database
from billiards.models.db.user import UserInDB, UserInsertable, UserPublic
from billiards.schema import users
from billiards.utils.id_types import UserId


async def get_user_by_id(user_id: UserId) -> UserPublic | None:
    query = """
        SELECT *
        FROM users
        WHERE id = :user_id
        """
    result = await database.fetch_one(query=query, values={"user_id": user_id})
    return UserPublic.model_validate(dict(result._mapping)) if result is not None else None


async def get_user_by_username(username: str) -> UserInDB | None:
    query = """
        SELECT *
        FROM users
        WHERE lower(username) = lower(:username)
        """
    result = await database.fetch_one(query=query, values={"username": username})
    return UserInDB.model_validate(dict(result._mapping)) if result is not None else None


async def create_user(user: UserInsertable) -> UserPublic:
    query = users.insert().returning(*users.c)
    result = await database.fetch_one(query=query, values=user.model_dump())
    assert result is not None
    return UserPublic.model_validate(dict(result._mapping))
