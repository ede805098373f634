from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from heliclockter import datetime_utc, timedelta
from jose import JWTError, jwt
from pydantic import BaseModel
from starlette import status

from billiards.config import config
from billiards.models.db.account import UserAccountType
from billiards.models.db.user import UserInDB, UserPublic
from billiards.sql.users import get_user_by_id, get_user_by_username
from billiards.utils.id_types import UserId
from billiards.utils.security import verify_password

router = APIRouter(prefix=config.api_prefix)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 12 * 60

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{config.api_prefix}/token", auto_error=False)


class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: UserId


async def authenticate_user(username: str, password: str) -> UserInDB | None:
    user = await get_user_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_access_token(data: dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime_utc.now() + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.jwt_secret, algorithm=ALGORITHM)


async def check_jwt_and_get_user(token: str) -> UserPublic | None:
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        return None
    return await get_user_by_id(UserId(user_id))


async def user_authenticated(token: str | None = Depends(oauth2_scheme)) -> UserPublic:
    user = await check_jwt_and_get_user(token) if token else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def is_admin_user(user: UserPublic) -> bool:
    return user.account_type == UserAccountType.ADMIN


@router.post("/token", response_model=Token)
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    user = await authenticate_user(form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"user_id": int(user.id)},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return Token(access_token=access_token, token_type="bearer", user_id=user.id)
