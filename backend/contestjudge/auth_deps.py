from __future__ import annotations
from uuid import UUID
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from contestjudge.db import get_session
from contestjudge.errors import Unauthorized
from contestjudge.security import decode_token
from contestjudge.models.user import User

security = HTTPBearer(auto_error=False)

async def _user_from_token(token: str, session: AsyncSession) -> User:
    try:
        data = decode_token(token)
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    if data.get("type") != "access":
        raise Unauthorized("Wrong token type")
    try:
        user_id = UUID(str(data.get("sub")))
    except ValueError:
        raise Unauthorized("Invalid token subject")
    user = await session.get(User, user_id)
    if not user:
        raise Unauthorized("User not found")
    return user

async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> User:
    if credentials is None:
        raise Unauthorized("Missing access token")
    return await _user_from_token(credentials.credentials, session)

async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> User | None:
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, session)
